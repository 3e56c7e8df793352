"""The published document operations, each a fixed composition of steps."""

from __future__ import annotations

from typing import Any

from ..errors import UnsupportedOperationError
from ..models import (
    ChangeFontArgs,
    CopyDocumentArgs,
    CreateDocumentArgs,
    CreateListArgs,
    DeleteDocumentArgs,
    DownloadDocumentArgs,
    DownloadFormat,
    EditDocumentArgs,
    FormatTextArgs,
    GetVersionHistoryArgs,
    InsertLinkArgs,
    ListDocumentsArgs,
    Permission,
    ReadDocumentArgs,
    SearchDocumentsArgs,
    SetAlignmentArgs,
    ShareDocumentArgs,
)
from . import ui_contract as ui
from .actions import (
    ENTER,
    ESCAPE,
    FIND,
    LINK,
    MOVE_TO_END,
    SELECT_ALL,
    SELECT_CHAR_LEFT,
    ActionStep,
    StepOutcome,
    StepRecord,
)
from .pipeline import Operation, PipelineRun
from .resolver import SurfaceKind


def _method(record: StepRecord) -> str:
    return "shortcut" if record.used_fallback else "toolbar"


async def list_documents(run: PipelineRun, args: ListDocumentsArgs) -> dict[str, Any]:
    surface = await run.open(run.editor.recents_url, SurfaceKind.LISTING)
    if args.search_query:
        await run.act(
            surface,
            ActionStep.type_text(ui.SEARCH_INPUT, args.search_query),
            ActionStep.press(ENTER),
            ActionStep.settle(run.timeouts.settle_brief, "search results"),
        )
    documents = await run.collect(surface, ui.LISTING_ROWS, ui.LISTING_FIELDS, args.limit)
    return {"documents": documents, "count": len(documents)}


async def read_document(run: PipelineRun, args: ReadDocumentArgs) -> dict[str, Any]:
    surface = await run.open(args.document_url)
    await run.act(surface, ActionStep.wait_for(ui.MAIN_EDITOR))
    text = await run.read_text(surface, ui.MAIN_EDITOR)
    html = await run.read_html(surface, ui.MAIN_EDITOR)
    return {"documentUrl": args.document_url, "text": text, "html": html}


async def create_document(run: PipelineRun, args: CreateDocumentArgs) -> dict[str, Any]:
    timeouts = run.timeouts
    page = await run.open(run.editor.new_document_url, SurfaceKind.PAGE)
    await run.act(page, ActionStep.settle(timeouts.settle_long, "new document"))
    # A fresh document usually opens with its name field already focused.
    (probe,) = await run.act(
        page,
        ActionStep.wait_for(ui.NAME_INPUT, timeout=timeouts.optional_control, required=False),
    )
    if probe.outcome is StepOutcome.SKIPPED:
        await run.act(page, ActionStep.click(ui.DOCUMENT_MENU), ActionStep.click(ui.MENU_RENAME))
    await run.act(page, ActionStep.fill(ui.NAME_INPUT, args.title), ActionStep.press(ENTER))
    if args.content:
        editor = await run.editor_surface()
        await run.act(editor, ActionStep.type_text(ui.MAIN_EDITOR, args.content))
    await run.act(page, ActionStep.settle(timeouts.settle))
    return {"success": True, "documentUrl": run.current_url, "title": args.title}


async def search_documents(run: PipelineRun, args: SearchDocumentsArgs) -> dict[str, Any]:
    surface = await run.open(run.editor.recents_url, SurfaceKind.PAGE)
    await run.act(
        surface,
        ActionStep.type_text(ui.SEARCH_INPUT, args.query),
        ActionStep.press(ENTER),
        ActionStep.settle(run.timeouts.settle, "search results"),
    )
    results = await run.collect(surface, ui.LISTING_ROWS, ui.SEARCH_FIELDS)
    return {"query": args.query, "results": results, "count": len(results)}


async def edit_document(run: PipelineRun, args: EditDocumentArgs) -> dict[str, Any]:
    surface = await run.open(args.document_url)
    steps = [ActionStep.click(ui.MAIN_EDITOR)]
    if args.append:
        steps += [ActionStep.press(MOVE_TO_END), ActionStep.press(ENTER)]
    else:
        steps.append(ActionStep.press(SELECT_ALL))
    steps += [ActionStep.insert(args.content), ActionStep.settle(run.timeouts.settle)]
    await run.act(surface, *steps)
    return {
        "success": True,
        "documentUrl": args.document_url,
        "action": "appended" if args.append else "replaced",
    }


async def delete_document(run: PipelineRun, args: DeleteDocumentArgs) -> dict[str, Any]:
    if args.permanent:
        raise UnsupportedOperationError(
            "Permanent deletion is not automated; call again without permanent "
            "to move the document to trash"
        )
    timeouts = run.timeouts
    page = await run.open(args.document_url, SurfaceKind.PAGE)
    await run.act(
        page,
        ActionStep.click(ui.DOCUMENT_MENU),
        ActionStep.click(ui.MENU_MOVE_TO_TRASH),
        ActionStep.click(ui.CONFIRM_TRASH, timeout=timeouts.optional_control, required=False),
        ActionStep.settle(timeouts.settle),
    )
    return {"success": True, "action": "moved_to_trash", "documentUrl": args.document_url}


async def share_document(run: PipelineRun, args: ShareDocumentArgs) -> dict[str, Any]:
    timeouts = run.timeouts
    page = await run.open(args.document_url, SurfaceKind.PAGE)
    steps = [
        ActionStep.click(ui.SHARE_BUTTON),
        ActionStep.settle(timeouts.settle_brief, "share dialog"),
        ActionStep.type_text(ui.SHARE_EMAIL, args.email),
    ]
    if args.permission is Permission.EDIT:
        steps += [ActionStep.click(ui.PERMISSION_DROPDOWN), ActionStep.click(ui.PERMISSION_EDIT)]
    steps += [ActionStep.click(ui.SHARE_SEND), ActionStep.settle(timeouts.settle)]
    await run.act(page, *steps)
    return {
        "success": True,
        "documentUrl": args.document_url,
        "sharedWith": args.email,
        "permission": args.permission.value,
    }


async def format_text(run: PipelineRun, args: FormatTextArgs) -> dict[str, Any]:
    surface = await run.open(args.document_url)
    if args.selection:
        await run.act(
            surface,
            ActionStep.click(ui.MAIN_EDITOR),
            ActionStep.press(FIND),
            ActionStep.insert(args.selection),
            ActionStep.press(ESCAPE),
        )
    control = ui.FORMAT_CONTROLS[args.format]
    (record,) = await run.act(
        surface,
        ActionStep.click(
            control.locator,
            fallback=control.shortcut,
            timeout=run.timeouts.toolbar,
            label=f"{args.format.value} button",
        ),
    )
    await run.act(surface, ActionStep.settle(run.timeouts.settle_short))
    return {
        "success": True,
        "documentUrl": args.document_url,
        "format": args.format.value,
        "applied": True,
        "method": _method(record),
    }


async def create_list(run: PipelineRun, args: CreateListArgs) -> dict[str, Any]:
    surface = await run.open(args.document_url)
    control = ui.LIST_CONTROLS[args.list_type]
    steps = [
        ActionStep.click(ui.MAIN_EDITOR),
        ActionStep.click(control.locator, fallback=control.shortcut, timeout=run.timeouts.toolbar),
    ]
    for index, item in enumerate(args.items):
        if index:
            steps.append(ActionStep.press(ENTER))
        steps.append(ActionStep.insert(item))
    # Two line breaks leave list mode.
    steps += [ActionStep.press(ENTER, repeat=2), ActionStep.settle(run.timeouts.settle_short)]
    await run.act(surface, *steps)
    return {
        "success": True,
        "documentUrl": args.document_url,
        "listType": args.list_type.value,
        "itemCount": len(args.items),
    }


async def insert_link(run: PipelineRun, args: InsertLinkArgs) -> dict[str, Any]:
    surface = await run.open(args.document_url)
    await run.act(
        surface,
        ActionStep.click(ui.MAIN_EDITOR),
        ActionStep.insert(args.text),
        ActionStep.press(SELECT_CHAR_LEFT, repeat=len(args.text)),
        ActionStep.press(LINK),
        ActionStep.settle(run.timeouts.settle_short, "link dialog"),
        ActionStep.insert(args.url),
        ActionStep.press(ENTER),
        ActionStep.settle(run.timeouts.settle_short),
    )
    return {"success": True, "documentUrl": args.document_url, "text": args.text, "url": args.url}


async def change_font(run: PipelineRun, args: ChangeFontArgs) -> dict[str, Any]:
    surface = await run.open(args.document_url)
    settle = ActionStep.settle(run.timeouts.settle_short, "font menu")
    steps = [ActionStep.click(ui.MAIN_EDITOR), ActionStep.press(SELECT_ALL)]
    if args.font_family:
        steps += [
            ActionStep.click(ui.FONT_FAMILY_BUTTON),
            settle,
            ActionStep.click(ui.menu_option(args.font_family)),
        ]
    if args.font_size:
        steps += [
            ActionStep.click(ui.FONT_SIZE_BUTTON),
            settle,
            ActionStep.click(ui.menu_option(f"{_size_label(args.font_size)}px")),
        ]
    await run.act(surface, *steps)
    return {
        "success": True,
        "documentUrl": args.document_url,
        "fontFamily": args.font_family,
        "fontSize": args.font_size,
    }


def _size_label(size: float) -> str:
    return str(int(size)) if float(size).is_integer() else str(size)


async def download_document(run: PipelineRun, args: DownloadDocumentArgs) -> dict[str, Any]:
    timeouts = run.timeouts
    page = await run.open(args.document_url, SurfaceKind.PAGE)
    await run.act(page, ActionStep.click(ui.DOCUMENT_MENU), ActionStep.click(ui.MENU_DOWNLOAD))
    format_selected = args.format is DownloadFormat.DOCX
    if not format_selected:
        records = await run.act(
            page,
            ActionStep.settle(timeouts.settle_short, "export formats"),
            ActionStep.click(
                ui.menu_option(args.format.value.upper()),
                timeout=timeouts.optional_control,
                required=False,
            ),
        )
        format_selected = records[-1].outcome is StepOutcome.PRIMARY
    # Completion of the file transfer is not observable from the page.
    await run.act(page, ActionStep.settle(timeouts.settle_long, "export dispatch"))
    return {
        "success": True,
        "documentUrl": args.document_url,
        "format": args.format.value,
        "formatSelected": format_selected,
        "confirmed": False,
        "message": "Download initiated",
    }


async def copy_document(run: PipelineRun, args: CopyDocumentArgs) -> dict[str, Any]:
    page = await run.open(args.document_url, SurfaceKind.PAGE)
    await run.act(
        page,
        ActionStep.click(ui.DOCUMENT_MENU),
        ActionStep.click(ui.MENU_MAKE_COPY),
        ActionStep.fill(ui.NAME_INPUT, args.new_title),
        ActionStep.click(ui.CONFIRM_COPY),
        ActionStep.settle(run.timeouts.settle_long),
    )
    return {
        "success": True,
        "originalUrl": args.document_url,
        "newTitle": args.new_title,
        "currentUrl": run.current_url,
    }


async def get_version_history(run: PipelineRun, args: GetVersionHistoryArgs) -> dict[str, Any]:
    page = await run.open(args.document_url, SurfaceKind.PAGE)
    await run.act(
        page,
        ActionStep.click(ui.DOCUMENT_MENU),
        ActionStep.click(ui.MENU_VERSION_HISTORY),
        ActionStep.settle(run.timeouts.settle, "version history panel"),
    )
    versions = await run.collect(page, ui.VERSION_ITEMS, ui.VERSION_FIELDS)
    return {"documentUrl": args.document_url, "versions": versions, "count": len(versions)}


async def set_alignment(run: PipelineRun, args: SetAlignmentArgs) -> dict[str, Any]:
    surface = await run.open(args.document_url)
    control = ui.ALIGNMENT_CONTROLS[args.alignment]
    records = await run.act(
        surface,
        ActionStep.click(ui.MAIN_EDITOR),
        ActionStep.press(SELECT_ALL),
        ActionStep.click(control.locator, fallback=control.shortcut, timeout=run.timeouts.toolbar),
        ActionStep.settle(run.timeouts.settle_short),
    )
    return {
        "success": True,
        "documentUrl": args.document_url,
        "alignment": args.alignment.value,
        "method": _method(records[2]),
    }


OPERATIONS: dict[str, Operation] = {
    op.name: op
    for op in (
        Operation(
            "list_documents",
            "list documents",
            "List recent documents from Proton Docs",
            ListDocumentsArgs,
            list_documents,
        ),
        Operation(
            "read_document",
            "read document",
            "Read the content of a specific Proton Docs document",
            ReadDocumentArgs,
            read_document,
        ),
        Operation(
            "create_document",
            "create document",
            "Create a new document in Proton Docs",
            CreateDocumentArgs,
            create_document,
        ),
        Operation(
            "search_documents",
            "search documents",
            "Search for documents in Proton Docs",
            SearchDocumentsArgs,
            search_documents,
        ),
        Operation(
            "edit_document",
            "edit document",
            "Edit an existing document in Proton Docs",
            EditDocumentArgs,
            edit_document,
        ),
        Operation(
            "delete_document",
            "delete document",
            "Delete a document by moving it to trash (permanent deletion is not supported)",
            DeleteDocumentArgs,
            delete_document,
        ),
        Operation(
            "share_document",
            "share document",
            "Share a document with another user",
            ShareDocumentArgs,
            share_document,
        ),
        Operation(
            "format_text",
            "format text",
            "Apply text formatting (bold, italic, underline, strikethrough)",
            FormatTextArgs,
            format_text,
        ),
        Operation(
            "create_list",
            "create list",
            "Create a bullet or numbered list",
            CreateListArgs,
            create_list,
        ),
        Operation(
            "insert_link",
            "insert link",
            "Insert a hyperlink in the document",
            InsertLinkArgs,
            insert_link,
        ),
        Operation(
            "change_font",
            "change font",
            "Change font family or size",
            ChangeFontArgs,
            change_font,
        ),
        Operation(
            "download_document",
            "download document",
            "Download a document in various formats (confirms only that the export was started)",
            DownloadDocumentArgs,
            download_document,
        ),
        Operation(
            "copy_document",
            "copy document",
            "Make a copy of a document",
            CopyDocumentArgs,
            copy_document,
        ),
        Operation(
            "get_version_history",
            "get version history",
            "View version history of a document",
            GetVersionHistoryArgs,
            get_version_history,
        ),
        Operation(
            "set_alignment",
            "set alignment",
            "Set text alignment",
            SetAlignmentArgs,
            set_alignment,
        ),
    )
}
