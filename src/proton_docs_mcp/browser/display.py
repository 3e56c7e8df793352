"""Virtual X display for running a headed browser on display-less hosts."""

from __future__ import annotations

import logging
import os
from typing import Optional

from pyvirtualdisplay import Display

LOGGER = logging.getLogger(__name__)


class VirtualDisplay:
    """Manage an Xvfb display for the lifetime of one browser session."""

    def __init__(self, width: int = 1280, height: int = 800) -> None:
        self._width = width
        self._height = height
        self._display: Optional[Display] = None

    @property
    def is_running(self) -> bool:
        return self._display is not None

    def start(self) -> str:
        if self._display is None:
            LOGGER.debug("Starting virtual display %sx%s", self._width, self._height)
            self._display = Display(visible=False, size=(self._width, self._height))
            self._display.start()
        display_var = os.environ.get("DISPLAY")
        if not display_var:
            raise RuntimeError("DISPLAY environment variable missing after starting virtual display")
        return display_var

    def stop(self) -> None:
        if self._display:
            LOGGER.debug("Stopping virtual display")
            self._display.stop()
        self._display = None
