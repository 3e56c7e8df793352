"""Shared models: tool arguments, enumerations and notification events."""

from __future__ import annotations

import enum
from datetime import datetime, timezone
from typing import Any, Optional
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


class TextFormat(str, enum.Enum):
    """Inline formatting kinds supported by ``format_text``."""

    BOLD = "bold"
    ITALIC = "italic"
    UNDERLINE = "underline"
    STRIKETHROUGH = "strikethrough"


class ListType(str, enum.Enum):
    BULLET = "bullet"
    NUMBERED = "numbered"


class Alignment(str, enum.Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"
    JUSTIFY = "justify"


class Permission(str, enum.Enum):
    VIEW = "view"
    EDIT = "edit"


class DownloadFormat(str, enum.Enum):
    DOCX = "docx"
    PDF = "pdf"
    TXT = "txt"
    MARKDOWN = "markdown"


class ToolArguments(BaseModel):
    """Base for validated tool arguments; callers use camelCase field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DocumentArguments(ToolArguments):
    document_url: str = Field(min_length=1, description="URL of the document")


class ListDocumentsArgs(ToolArguments):
    search_query: Optional[str] = Field(
        default=None, description="Optional search query to filter documents"
    )
    limit: int = Field(default=20, ge=1, description="Maximum number of documents to return")


class ReadDocumentArgs(DocumentArguments):
    pass


class CreateDocumentArgs(ToolArguments):
    title: str = Field(min_length=1, description="Title of the new document")
    content: Optional[str] = Field(default=None, description="Initial content of the document")


class SearchDocumentsArgs(ToolArguments):
    query: str = Field(min_length=1, description="Search query")


class EditDocumentArgs(DocumentArguments):
    content: str = Field(description="New content to add or replace")
    append: bool = Field(default=False, description="Whether to append content or replace it")


class DeleteDocumentArgs(DocumentArguments):
    permanent: bool = Field(
        default=False,
        description="Whether to permanently delete (not supported; documents are moved to trash)",
    )


class ShareDocumentArgs(DocumentArguments):
    email: str = Field(
        pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$",
        description="Email address to share with",
    )
    permission: Permission = Field(default=Permission.VIEW, description="Permission level")


class FormatTextArgs(DocumentArguments):
    format: TextFormat = Field(description="Format to apply")
    selection: Optional[str] = Field(
        default=None, description="Text to select before formatting (optional)"
    )


class CreateListArgs(DocumentArguments):
    list_type: ListType = Field(description="Type of list to create")
    items: list[str] = Field(min_length=1, description="List items")


class InsertLinkArgs(DocumentArguments):
    text: str = Field(min_length=1, description="Link text")
    url: str = Field(description="Target URL")

    @field_validator("url")
    @classmethod
    def _check_url(cls, value: str) -> str:
        parsed = urlparse(value)
        if not parsed.scheme or not (parsed.netloc or parsed.path):
            raise ValueError("url must be an absolute URL")
        return value


class ChangeFontArgs(DocumentArguments):
    font_family: Optional[str] = Field(
        default=None, description="Font family (e.g., Arial, Times New Roman)"
    )
    font_size: Optional[float] = Field(default=None, gt=0, description="Font size in pixels")

    @model_validator(mode="after")
    def _require_change(self) -> "ChangeFontArgs":
        if self.font_family is None and self.font_size is None:
            raise ValueError("fontFamily or fontSize is required")
        return self


class DownloadDocumentArgs(DocumentArguments):
    format: DownloadFormat = Field(default=DownloadFormat.DOCX, description="Download format")


class CopyDocumentArgs(DocumentArguments):
    new_title: str = Field(min_length=1, description="Title for the copy")


class GetVersionHistoryArgs(DocumentArguments):
    pass


class SetAlignmentArgs(DocumentArguments):
    alignment: Alignment = Field(description="Text alignment")


class NotificationLevel(str, enum.Enum):
    """Severity of notification events."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    SUCCESS = "success"


class NotificationEvent(BaseModel):
    """Event emitted to notify operators."""

    type: str
    message: str
    level: NotificationLevel = NotificationLevel.INFO
    data: dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
