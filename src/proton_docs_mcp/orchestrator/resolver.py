"""Locating the actionable surface of a loaded page."""

from __future__ import annotations

import enum
import logging
from typing import Optional

from ..browser.base import BrowserSession, ResolutionMethod, Surface
from ..config import EditorConfig, TimeoutConfig
from ..errors import SurfaceNotFoundError
from . import ui_contract

LOGGER = logging.getLogger(__name__)


class SurfaceKind(str, enum.Enum):
    """Which part of the remote UI an operation acts on."""

    EDITOR = "editor"
    PAGE = "page"
    LISTING = "listing"


class ContextResolver:
    """Navigates to a target and returns the surface operations should act on.

    Editor pages render the document inside an embedded frame; the first frame
    whose name or URL contains one of the configured hints wins. Listing and
    plain page views resolve to the top-level page.
    """

    def __init__(
        self,
        editor: Optional[EditorConfig] = None,
        timeouts: Optional[TimeoutConfig] = None,
    ) -> None:
        self._editor = editor or EditorConfig()
        self._timeouts = timeouts or TimeoutConfig()

    async def navigate(self, session: BrowserSession, target: str) -> None:
        LOGGER.info("Navigating to %s", target)
        await session.navigate(target, self._timeouts.navigation)

    async def resolve(
        self,
        session: BrowserSession,
        target: str,
        kind: SurfaceKind = SurfaceKind.EDITOR,
    ) -> Surface:
        await self.navigate(session, target)
        return await self.locate(session, kind)

    async def locate(self, session: BrowserSession, kind: SurfaceKind) -> Surface:
        """Find the surface of ``kind`` on the page that is already loaded."""

        if kind is SurfaceKind.LISTING:
            if not await session.wait_for_marker(
                ui_contract.LISTING_TABLE, self._timeouts.listing_marker
            ):
                raise SurfaceNotFoundError(f"Document listing never appeared at {session.url}")
            return session.page_surface()
        if kind is SurfaceKind.PAGE:
            return session.page_surface()
        return await self.find_editor(session)

    async def find_editor(self, session: BrowserSession) -> Surface:
        """Resolve the editing surface of the page that is already loaded."""

        marker_found = await session.wait_for_marker(
            ui_contract.EDITOR_FRAME, self._timeouts.editor_marker
        )
        hints = [hint.lower() for hint in self._editor.frame_hints]
        for frame in session.frames():
            name = frame.name.lower()
            url = frame.url.lower()
            if any(hint in name for hint in hints):
                LOGGER.debug("Editor frame matched by name %r", frame.name)
                return session.frame_surface(frame, ResolutionMethod.FRAME_NAME)
            if any(hint in url for hint in hints):
                LOGGER.debug("Editor frame matched by url %s", frame.url)
                return session.frame_surface(frame, ResolutionMethod.FRAME_URL)
        if marker_found:
            LOGGER.debug("No editor frame matched; using the top-level page")
            return session.page_surface()
        raise SurfaceNotFoundError(f"Editor surface never mounted at {session.url}")
