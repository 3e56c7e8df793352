from __future__ import annotations

import pytest

from fakes import CollectingNotifier, FakeLauncher, FakeSession
from proton_docs_mcp.browser.manager import SessionManager
from proton_docs_mcp.config import ServerConfig
from proton_docs_mcp.errors import RemoteInteractionError
from proton_docs_mcp.models import Alignment, TextFormat
from proton_docs_mcp.orchestrator import ui_contract as ui
from proton_docs_mcp.orchestrator.operations import OPERATIONS
from proton_docs_mcp.orchestrator.pipeline import PipelineState
from proton_docs_mcp.orchestrator.runner import DocsOrchestrator

DOC_URL = "https://docs.proton.me/doc?mode=open&volumeId=v1&linkId=l1"

MINIMAL_ARGS = {
    "list_documents": {},
    "read_document": {"documentUrl": DOC_URL},
    "create_document": {"title": "Notes"},
    "search_documents": {"query": "budget"},
    "edit_document": {"documentUrl": DOC_URL, "content": "Hello"},
    "delete_document": {"documentUrl": DOC_URL},
    "share_document": {"documentUrl": DOC_URL, "email": "friend@proton.me"},
    "format_text": {"documentUrl": DOC_URL, "format": "italic"},
    "create_list": {"documentUrl": DOC_URL, "listType": "bullet", "items": ["one"]},
    "insert_link": {"documentUrl": DOC_URL, "text": "Proton", "url": "https://proton.me"},
    "change_font": {"documentUrl": DOC_URL, "fontSize": 14},
    "download_document": {"documentUrl": DOC_URL},
    "copy_document": {"documentUrl": DOC_URL, "newTitle": "Notes (copy)"},
    "get_version_history": {"documentUrl": DOC_URL},
    "set_alignment": {"documentUrl": DOC_URL, "alignment": "center"},
}


def build_orchestrator(
    session: FakeSession,
) -> tuple[DocsOrchestrator, FakeLauncher, CollectingNotifier]:
    config = ServerConfig()
    launcher = FakeLauncher(session)
    notifier = CollectingNotifier()
    sessions = SessionManager(config.browser, launcher=launcher, notifier=notifier)
    return DocsOrchestrator(config, sessions, notifier=notifier), launcher, notifier


def terminal_events(notifier: CollectingNotifier) -> list[str]:
    return [t for t in notifier.types if t in {"operation_succeeded", "operation_failed"}]


def test_catalog_covers_every_operation():
    assert set(OPERATIONS) == set(MINIMAL_ARGS)


@pytest.mark.asyncio
@pytest.mark.parametrize("name", sorted(MINIMAL_ARGS))
async def test_single_result_on_success(name):
    orchestrator, _, notifier = build_orchestrator(FakeSession(all_present=True))

    result = await orchestrator.run(name, MINIMAL_ARGS[name])

    assert result.ok, result.error_message
    assert result.operation == name
    assert terminal_events(notifier) == ["operation_succeeded"]
    assert result.states[0] is PipelineState.IDLE
    assert result.states[-1] is PipelineState.DONE


@pytest.mark.asyncio
@pytest.mark.parametrize("name", sorted(MINIMAL_ARGS))
async def test_single_result_on_failure(name):
    orchestrator, _, notifier = build_orchestrator(FakeSession())

    result = await orchestrator.run(name, MINIMAL_ARGS[name])

    assert not result.ok
    assert result.error_code in {"surface_not_found", "element_not_found"}
    assert result.error_message.startswith(f"Failed to {OPERATIONS[name].summary}:")
    assert terminal_events(notifier) == ["operation_failed"]
    assert result.states[-1] is PipelineState.FAILED
    assert result.to_payload()["error"]["operation"] == name


@pytest.mark.asyncio
async def test_sequential_operations_share_one_launch():
    session = FakeSession(all_present=True)
    orchestrator, launcher, _ = build_orchestrator(session)

    for _ in range(3):
        result = await orchestrator.run("read_document", {"documentUrl": DOC_URL})
        assert result.ok

    assert launcher.calls == 1
    assert session.navigations == [DOC_URL] * 3


@pytest.mark.asyncio
async def test_permanent_delete_never_touches_the_browser():
    session = FakeSession(all_present=True)
    orchestrator, launcher, _ = build_orchestrator(session)

    result = await orchestrator.run(
        "delete_document", {"documentUrl": DOC_URL, "permanent": True}
    )

    assert not result.ok
    assert result.error_code == "unsupported_operation"
    assert session.navigations == []
    assert session.log == []
    assert launcher.calls == 0


@pytest.mark.asyncio
async def test_delete_moves_to_trash():
    session = FakeSession(all_present=True)
    orchestrator, _, _ = build_orchestrator(session)

    result = await orchestrator.run("delete_document", {"documentUrl": DOC_URL})

    assert result.payload == {
        "success": True,
        "action": "moved_to_trash",
        "documentUrl": DOC_URL,
    }
    assert session.clicks() == [ui.DOCUMENT_MENU, ui.MENU_MOVE_TO_TRASH, ui.CONFIRM_TRASH]


@pytest.mark.asyncio
async def test_create_document_scenario():
    created = "https://docs.proton.me/doc?mode=open&volumeId=v1&linkId=new"
    config = ServerConfig()
    session = FakeSession(
        present={ui.NAME_INPUT},
        redirects={config.editor.new_document_url: created},
    )
    orchestrator, _, _ = build_orchestrator(session)

    result = await orchestrator.run("create_document", {"title": "MCP Test Document"})

    assert result.ok, result.error_message
    assert result.payload["title"] == "MCP Test Document"
    assert result.payload["documentUrl"] == created
    assert ("type", ui.NAME_INPUT, "MCP Test Document") in session.log
    assert ui.DOCUMENT_MENU not in session.clicks()
    assert ("press", "Enter") in session.keys()


@pytest.mark.asyncio
async def test_create_document_types_initial_content_into_editor():
    session = FakeSession(all_present=True)
    orchestrator, _, _ = build_orchestrator(session)

    result = await orchestrator.run(
        "create_document", {"title": "Plan", "content": "First line"}
    )

    assert result.ok
    assert ("type", ui.MAIN_EDITOR, "First line") in session.log
    resolving = [state for state in result.states if state is PipelineState.RESOLVING]
    assert len(resolving) == 2


@pytest.mark.asyncio
async def test_list_documents_honours_limit_in_row_order():
    rows = [{"title": f"Doc {index}", "url": f"{DOC_URL}{index}"} for index in range(8)]
    session = FakeSession(present={ui.LISTING_TABLE}, rows={ui.LISTING_ROWS: rows})
    orchestrator, _, _ = build_orchestrator(session)

    result = await orchestrator.run("list_documents", {"limit": 5})

    assert result.ok
    assert result.payload["count"] == 5
    assert [doc["title"] for doc in result.payload["documents"]] == [
        f"Doc {index}" for index in range(5)
    ]


@pytest.mark.asyncio
async def test_list_documents_filters_through_search_box():
    session = FakeSession(
        all_present=True,
        rows={ui.LISTING_ROWS: [{"title": "Budget", "viewed": "Today"}]},
    )
    orchestrator, _, _ = build_orchestrator(session)

    result = await orchestrator.run("list_documents", {"searchQuery": "Budget"})

    assert ("type", ui.SEARCH_INPUT, "Budget") in session.log
    assert result.payload["documents"] == [
        {
            "title": "Budget",
            "viewed": "Today",
            "createdBy": "",
            "location": "",
            "url": "",
        }
    ]


@pytest.mark.asyncio
async def test_search_keeps_empty_titles_and_skips_rows_without_title_cell():
    rows = [{"title": "Roadmap"}, {"title": ""}, {"title": "Roadmap v2"}, {"url": "x"}]
    session = FakeSession(all_present=True, rows={ui.LISTING_ROWS: rows})
    orchestrator, _, _ = build_orchestrator(session)

    result = await orchestrator.run("search_documents", {"query": "Roadmap"})

    assert result.payload["query"] == "Roadmap"
    assert [item["title"] for item in result.payload["results"]] == [
        "Roadmap",
        "",
        "Roadmap v2",
    ]


@pytest.mark.asyncio
async def test_listing_shows_untitled_for_empty_title_cell():
    rows = [{"title": "Roadmap"}, {"title": ""}, {"title": "Roadmap v2"}]
    session = FakeSession(present={ui.LISTING_TABLE}, rows={ui.LISTING_ROWS: rows})
    orchestrator, _, _ = build_orchestrator(session)

    result = await orchestrator.run("list_documents", {})

    assert [doc["title"] for doc in result.payload["documents"]] == [
        "Roadmap",
        "Untitled",
        "Roadmap v2",
    ]


@pytest.mark.asyncio
async def test_bold_falls_back_to_shortcut():
    session = FakeSession(present={ui.EDITOR_FRAME})
    orchestrator, _, _ = build_orchestrator(session)

    result = await orchestrator.run("format_text", {"documentUrl": DOC_URL, "format": "bold"})

    assert result.ok, result.error_message
    assert result.payload["applied"] is True
    assert result.payload["method"] == "shortcut"
    assert ui.FORMAT_CONTROLS[TextFormat.BOLD].locator not in session.clicks()
    assert session.keys() == [("down", "Control"), ("press", "b"), ("up", "Control")]


@pytest.mark.asyncio
async def test_read_document_returns_text_and_html():
    session = FakeSession(all_present=True)
    session.text[ui.MAIN_EDITOR] = "Hello world"
    session.html[ui.MAIN_EDITOR] = "<p>Hello world</p>"
    orchestrator, _, _ = build_orchestrator(session)

    result = await orchestrator.run("read_document", {"documentUrl": DOC_URL})

    assert result.payload == {
        "documentUrl": DOC_URL,
        "text": "Hello world",
        "html": "<p>Hello world</p>",
    }


@pytest.mark.asyncio
async def test_edit_document_append_moves_to_end():
    session = FakeSession(all_present=True)
    orchestrator, _, _ = build_orchestrator(session)

    result = await orchestrator.run(
        "edit_document", {"documentUrl": DOC_URL, "content": "More", "append": True}
    )

    assert result.payload["action"] == "appended"
    assert session.keys()[:3] == [("down", "Control"), ("press", "End"), ("up", "Control")]
    assert ("insert", "More") in session.log


@pytest.mark.asyncio
async def test_share_with_edit_permission_requires_dropdown():
    present = {ui.SHARE_BUTTON, ui.SHARE_EMAIL, ui.SHARE_SEND}
    orchestrator, _, _ = build_orchestrator(FakeSession(present=present))

    result = await orchestrator.run(
        "share_document",
        {"documentUrl": DOC_URL, "email": "friend@proton.me", "permission": "edit"},
    )

    assert not result.ok
    assert result.error_code == "element_not_found"
    assert ui.PERMISSION_DROPDOWN in result.error_message


@pytest.mark.asyncio
async def test_create_list_separates_items():
    session = FakeSession(all_present=True)
    orchestrator, _, _ = build_orchestrator(session)

    result = await orchestrator.run(
        "create_list",
        {"documentUrl": DOC_URL, "listType": "numbered", "items": ["a", "b"]},
    )

    assert result.payload["itemCount"] == 2
    typed = [entry for entry in session.log if entry[0] in {"insert", "press"}]
    assert typed == [
        ("insert", "a"),
        ("press", "Enter"),
        ("insert", "b"),
        ("press", "Enter"),
        ("press", "Enter"),
    ]


@pytest.mark.asyncio
async def test_insert_link_selects_inserted_text():
    session = FakeSession(all_present=True)
    orchestrator, _, _ = build_orchestrator(session)

    await orchestrator.run(
        "insert_link", {"documentUrl": DOC_URL, "text": "abc", "url": "https://proton.me"}
    )

    assert session.keys().count(("press", "ArrowLeft")) == 3
    assert ("insert", "https://proton.me") in session.log


@pytest.mark.asyncio
async def test_change_font_picks_size_option():
    session = FakeSession(all_present=True)
    orchestrator, _, _ = build_orchestrator(session)

    result = await orchestrator.run(
        "change_font", {"documentUrl": DOC_URL, "fontFamily": "Arial", "fontSize": 14}
    )

    assert result.payload["fontFamily"] == "Arial"
    assert ui.menu_option("Arial") in session.clicks()
    assert ui.menu_option("14px") in session.clicks()


@pytest.mark.asyncio
async def test_download_reports_unconfirmed_export():
    session = FakeSession(all_present=True)
    orchestrator, _, _ = build_orchestrator(session)

    result = await orchestrator.run(
        "download_document", {"documentUrl": DOC_URL, "format": "pdf"}
    )

    assert result.payload["formatSelected"] is True
    assert result.payload["confirmed"] is False
    assert ui.menu_option("PDF") in session.clicks()


@pytest.mark.asyncio
async def test_version_history_collects_entries():
    rows = [{"date": "Today 10:00", "author": "me"}, {"date": "Yesterday", "author": ""}]
    session = FakeSession(all_present=True, rows={ui.VERSION_ITEMS: rows})
    orchestrator, _, _ = build_orchestrator(session)

    result = await orchestrator.run("get_version_history", {"documentUrl": DOC_URL})

    assert result.payload["count"] == 2
    assert result.payload["versions"][1] == {"date": "Yesterday", "author": ""}


@pytest.mark.asyncio
async def test_set_alignment_reports_toolbar_method():
    session = FakeSession(all_present=True)
    orchestrator, _, _ = build_orchestrator(session)

    result = await orchestrator.run(
        "set_alignment", {"documentUrl": DOC_URL, "alignment": "justify"}
    )

    assert result.payload["method"] == "toolbar"
    assert ui.ALIGNMENT_CONTROLS[Alignment.JUSTIFY].locator in session.clicks()


@pytest.mark.asyncio
async def test_driver_failure_during_navigation_is_one_failed_result():
    session = FakeSession(all_present=True)
    session.goto_error = RemoteInteractionError("Navigation to doc failed: net::ERR_ABORTED")
    orchestrator, _, notifier = build_orchestrator(session)

    result = await orchestrator.run("read_document", {"documentUrl": DOC_URL})

    assert not result.ok
    assert result.error_code == "remote_interaction_error"
    assert "net::ERR_ABORTED" in result.error_message
    assert result.states[-1] is PipelineState.FAILED
    assert terminal_events(notifier) == ["operation_failed"]


@pytest.mark.asyncio
async def test_unexpected_exception_in_step_is_one_failed_result():
    session = FakeSession(all_present=True)
    session.click_error = ValueError("detached element")
    orchestrator, _, notifier = build_orchestrator(session)

    result = await orchestrator.run(
        "set_alignment", {"documentUrl": DOC_URL, "alignment": "left"}
    )

    assert not result.ok
    assert result.error_code == "remote_interaction_error"
    assert result.error_message == "Failed to set alignment: detached element"
    assert result.states[-1] is PipelineState.FAILED
    assert terminal_events(notifier) == ["operation_failed"]
