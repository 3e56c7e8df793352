"""Ownership of the single browser session used by the orchestrator."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from ..config import BrowserConfig
from ..errors import BrowserEnvironmentError, OrchestratorError
from ..models import NotificationEvent, NotificationLevel
from ..notifications.base import Notifier, NullNotifier
from .base import BrowserSession
from .playwright_session import launch_playwright_session

LOGGER = logging.getLogger(__name__)

SessionLauncher = Callable[[BrowserConfig], Awaitable[BrowserSession]]


class SessionManager:
    """Lazily launches one browser session and hands the same one out until released.

    Acquisition is serialised so overlapping callers never launch two browsers.
    Operations themselves are not serialised here.
    """

    def __init__(
        self,
        config: Optional[BrowserConfig] = None,
        launcher: SessionLauncher = launch_playwright_session,
        notifier: Optional[Notifier] = None,
    ) -> None:
        self._config = config or BrowserConfig()
        self._launcher = launcher
        self._notifier = notifier or NullNotifier()
        self._session: Optional[BrowserSession] = None
        self._lock = asyncio.Lock()
        self.launch_count = 0

    @property
    def is_active(self) -> bool:
        return self._session is not None

    async def acquire(self) -> BrowserSession:
        async with self._lock:
            if self._session is not None and not self._session.is_alive:
                LOGGER.warning("Browser session is no longer alive; launching a new one")
                await self._discard()
            if self._session is None:
                self._session = await self._launch()
            return self._session

    async def release(self) -> None:
        async with self._lock:
            if self._session is None:
                return
            await self._discard()
            self._notifier.notify(
                NotificationEvent(type="session_closed", message="Browser session closed")
            )

    async def _launch(self) -> BrowserSession:
        self.launch_count += 1
        LOGGER.info("Launching browser (headless=%s)", self._config.headless)
        try:
            session = await self._launcher(self._config)
        except OrchestratorError:
            raise
        except Exception as exc:
            raise BrowserEnvironmentError(f"Could not launch browser: {exc}") from exc
        width, height = session.viewport
        self._notifier.notify(
            NotificationEvent(
                type="session_started",
                message="Browser session started",
                level=NotificationLevel.INFO,
                data={"viewport": f"{width}x{height}", "headless": self._config.headless},
            )
        )
        return session

    async def _discard(self) -> None:
        session, self._session = self._session, None
        if session is None:
            return
        try:
            await session.close()
        except Exception:
            LOGGER.exception("Failed to close browser session cleanly")
