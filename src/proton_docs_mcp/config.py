"""Configuration models for the Proton Docs MCP server."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BrowserConfig(BaseModel):
    """Settings for launching the automated browser."""

    profile_path: Optional[Path] = Field(
        default=None,
        description="Persistent user data directory; reuse a profile that is already signed in.",
    )
    headless: bool = False
    viewport_width: int = 1280
    viewport_height: int = 800
    executable_path: Optional[Path] = None
    channel: Optional[str] = None
    launch_args: list[str] = Field(
        default_factory=lambda: ["--no-sandbox", "--disable-setuid-sandbox"]
    )
    slow_mo: Optional[float] = Field(default=None, description="Delay between driver calls in ms.")
    virtual_display: bool = Field(
        default=False,
        description="Start an Xvfb display for headed runs on hosts without one.",
    )


class EditorConfig(BaseModel):
    """Where the document editor lives and how its embedded frame is recognised."""

    base_url: str = "https://docs.proton.me"
    account_index: int = 1
    frame_hints: list[str] = Field(default_factory=lambda: ["editor"])

    @property
    def account_root(self) -> str:
        return f"{self.base_url.rstrip('/')}/u/{self.account_index}"

    @property
    def recents_url(self) -> str:
        return f"{self.account_root}/recents"

    @property
    def new_document_url(self) -> str:
        return f"{self.account_root}/doc"


class TimeoutConfig(BaseModel):
    """Waiting budgets and settling delays, all in seconds."""

    navigation: float = 30.0
    editor_marker: float = 15.0
    listing_marker: float = 10.0
    element: float = 5.0
    toolbar: float = 2.0
    optional_control: float = 1.5
    typing_delay: float = 0.0
    settle_short: float = 0.5
    settle_brief: float = 1.0
    settle: float = 2.0
    settle_long: float = 3.0


class NotificationConfig(BaseModel):
    """Notification channel settings."""

    channel: str = Field(default="console")


class ServerConfig(BaseSettings):
    """Top-level configuration for the MCP server."""

    model_config = SettingsConfigDict(
        env_prefix="PROTON_DOCS_MCP_",
        env_file=(".env",),
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    server_name: str = "proton-docs-mcp"
    browser: BrowserConfig = Field(default_factory=BrowserConfig)
    editor: EditorConfig = Field(default_factory=EditorConfig)
    timeouts: TimeoutConfig = Field(default_factory=TimeoutConfig)
    notifications: NotificationConfig = Field(default_factory=NotificationConfig)


def load_config(
    path: Path | None = None,
    *,
    env_file: Path | None = None,
    **overrides: object,
) -> ServerConfig:
    """Load configuration from an optional file and overrides."""

    data: dict[str, Any] = {}
    if path:
        import yaml

        data = yaml.safe_load(path.read_text()) or {}
    if overrides:
        _deep_update(data, overrides)
    settings_kwargs: dict[str, object] = {}
    if env_file is not None:
        settings_kwargs["_env_file"] = env_file
    config = ServerConfig(**data, **settings_kwargs)
    if not data:
        return config

    merged = config.model_dump(mode="python")
    _deep_update(merged, data)
    return ServerConfig.model_validate(merged)


def _deep_update(target: dict[str, Any], updates: Mapping[str, Any]) -> None:
    """Recursively merge ``updates`` into ``target`` in-place."""

    for key, value in updates.items():
        if (
            isinstance(value, Mapping)
            and isinstance(existing := target.get(key), Mapping)
        ):
            nested: dict[str, Any]
            if isinstance(existing, dict):
                nested = existing
            else:
                nested = dict(existing)
            _deep_update(nested, value)
            target[key] = nested
        else:
            target[key] = value
