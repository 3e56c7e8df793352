"""Locators and shortcuts of the Proton Docs web UI.

The remote UI is versioned independently of this package; when it drifts,
this table is the one place to update.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..browser.base import FieldSpec
from ..models import Alignment, ListType, TextFormat
from .actions import KeyChord

EDITOR_FRAME = 'iframe[data-testid="editor-frame-edit"]'
MAIN_EDITOR = '[data-testid="main-editor"]'

LISTING_TABLE = "table"
LISTING_ROWS = "tbody tr"
SEARCH_INPUT = 'input[placeholder*="Search"]'

DOCUMENT_MENU = '[data-testid="document-name-dropdown"]'
MENU_RENAME = '[data-testid="dropdown-rename"]'
MENU_MOVE_TO_TRASH = '[data-testid="dropdown-move-to-trash"]'
MENU_DOWNLOAD = '[data-testid="dropdown-download"]'
MENU_MAKE_COPY = '[data-testid="dropdown-make-copy"]'
MENU_VERSION_HISTORY = '[data-testid="dropdown-version-history"]'
NAME_INPUT = '[data-testid="input-input-element"]'

CONFIRM_TRASH = 'button:has-text("Move to trash")'
CONFIRM_COPY = 'button:has-text("Copy")'

SHARE_BUTTON = 'button:has-text("Share")'
SHARE_EMAIL = 'input[type="email"]'
PERMISSION_DROPDOWN = '[data-testid="permission-dropdown"]'
PERMISSION_EDIT = 'button:has-text("Can edit")'
SHARE_SEND = 'button:has-text("Send")'

FONT_FAMILY_BUTTON = 'button[aria-label*="Font"]:not([aria-label*="size"])'
FONT_SIZE_BUTTON = 'button[aria-label*="Font size"]'

VERSION_ITEMS = '[data-testid="version-item"]'


@dataclass(frozen=True)
class ToolbarControl:
    """A toolbar button and the shortcut that does the same thing."""

    locator: str
    shortcut: Optional[KeyChord] = None


FORMAT_CONTROLS = {
    TextFormat.BOLD: ToolbarControl('button[title*="Bold"]', KeyChord.parse("Control+b")),
    TextFormat.ITALIC: ToolbarControl('button[title*="Italic"]', KeyChord.parse("Control+i")),
    TextFormat.UNDERLINE: ToolbarControl(
        'button[title*="Underline"]', KeyChord.parse("Control+u")
    ),
    TextFormat.STRIKETHROUGH: ToolbarControl(
        'button[title*="Strike"]', KeyChord.parse("Control+Shift+x")
    ),
}

LIST_CONTROLS = {
    ListType.BULLET: ToolbarControl(
        'button[title*="Bullet list"]', KeyChord.parse("Control+Shift+8")
    ),
    ListType.NUMBERED: ToolbarControl(
        'button[title*="Numbered list"]', KeyChord.parse("Control+Shift+7")
    ),
}

ALIGNMENT_CONTROLS = {
    Alignment.LEFT: ToolbarControl('button[title*="Align left"]', KeyChord.parse("Control+Shift+l")),
    Alignment.CENTER: ToolbarControl(
        'button[title*="Align center"]', KeyChord.parse("Control+Shift+e")
    ),
    Alignment.RIGHT: ToolbarControl(
        'button[title*="Align right"]', KeyChord.parse("Control+Shift+r")
    ),
    Alignment.JUSTIFY: ToolbarControl('button[title*="Justify"]', KeyChord.parse("Control+Shift+j")),
}

LISTING_FIELDS = {
    "title": FieldSpec("td:first-child", default="Untitled", required=True),
    "viewed": FieldSpec("td:nth-child(2)"),
    "createdBy": FieldSpec("td:nth-child(3)"),
    "location": FieldSpec("td:nth-child(4)"),
    "url": FieldSpec(attribute="data-url"),
}

SEARCH_FIELDS = {
    "title": FieldSpec("td:first-child", required=True),
    "url": FieldSpec(attribute="data-url"),
}

VERSION_FIELDS = {
    "date": FieldSpec('[data-testid="version-date"]', required=True),
    "author": FieldSpec('[data-testid="version-author"]'),
}


def menu_option(label: str) -> str:
    """Locator for a popup option labelled ``label``."""

    escaped = label.replace("\\", "\\\\").replace('"', '\\"')
    return f'button:has-text("{escaped}")'
