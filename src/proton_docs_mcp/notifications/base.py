"""Notification channels for orchestrator lifecycle events."""

from __future__ import annotations

from abc import ABC, abstractmethod

from rich.console import Console

from ..models import NotificationEvent


class Notifier(ABC):
    """Interface for reporting session and operation events."""

    @abstractmethod
    def notify(self, event: NotificationEvent) -> None:
        """Send a notification event."""


class ConsoleNotifier(Notifier):
    """Prints events with Rich on stderr; stdout belongs to the protocol stream."""

    def __init__(self, console: Console | None = None) -> None:
        self._console = console or Console(stderr=True)

    def notify(self, event: NotificationEvent) -> None:
        style = {
            "info": "cyan",
            "warning": "yellow",
            "error": "red",
            "success": "green",
        }.get(event.level.value, "white")
        # Messages carry CSS locators and user text; never parse them as markup.
        self._console.print(
            f"[{event.level.value.upper()}] {event.message}", style=style, markup=False
        )
        if event.data:
            self._console.print(event.data, style="dim")


class NullNotifier(Notifier):
    """Discards every event."""

    def notify(self, event: NotificationEvent) -> None:
        return None
