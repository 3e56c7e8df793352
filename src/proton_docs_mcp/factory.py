"""Factories for constructing components from configuration."""

from __future__ import annotations

from typing import Optional

from .browser.manager import SessionLauncher, SessionManager
from .browser.playwright_session import launch_playwright_session
from .config import NotificationConfig, ServerConfig
from .notifications.base import ConsoleNotifier, Notifier, NullNotifier
from .orchestrator.runner import DocsOrchestrator


def build_notifier(config: NotificationConfig) -> Notifier:
    channel = config.channel.lower()
    if channel == "console":
        return ConsoleNotifier()
    if channel in {"none", "null"}:
        return NullNotifier()
    raise ValueError(f"Unsupported notification channel: {config.channel}")


def build_session_manager(
    config: ServerConfig,
    notifier: Notifier,
    launcher: Optional[SessionLauncher] = None,
) -> SessionManager:
    return SessionManager(
        config.browser,
        launcher=launcher or launch_playwright_session,
        notifier=notifier,
    )


def build_orchestrator(
    config: ServerConfig,
    launcher: Optional[SessionLauncher] = None,
) -> DocsOrchestrator:
    notifier = build_notifier(config.notifications)
    sessions = build_session_manager(config, notifier, launcher)
    return DocsOrchestrator(config, sessions, notifier=notifier)
