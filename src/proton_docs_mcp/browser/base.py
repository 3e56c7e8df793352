"""Browser session and surface abstractions."""

from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from ..errors import SurfaceNotFoundError


class ResolutionMethod(str, enum.Enum):
    """How a surface was located within the page."""

    PAGE = "page"
    FRAME_NAME = "frame_name"
    FRAME_URL = "frame_url"


@dataclass(frozen=True)
class FrameCandidate:
    """A nested rendering context reported by the session."""

    name: str
    url: str
    handle: Any = None


@dataclass(frozen=True)
class FieldSpec:
    """Describes one value read from each element during extraction.

    ``locator`` is evaluated relative to the element (``None`` means the
    element itself); ``attribute`` selects an attribute instead of text.
    Elements lacking a ``required`` field are left out of the result.
    """

    locator: Optional[str] = None
    attribute: Optional[str] = None
    default: str = ""
    required: bool = False


class Surface(ABC):
    """An actionable rendering context within which locators are evaluated."""

    def __init__(self, session: "BrowserSession", method: ResolutionMethod) -> None:
        self._session = session
        self.method = method
        self.generation = session.generation

    @property
    def is_current(self) -> bool:
        return self.generation == self._session.generation

    def ensure_current(self) -> None:
        """Raise if a navigation happened after this surface was resolved."""

        if not self.is_current:
            raise SurfaceNotFoundError(
                f"Surface resolved by {self.method.value} is stale "
                f"(generation {self.generation}, session at {self._session.generation})"
            )

    @abstractmethod
    async def wait_for(self, locator: str, timeout: float) -> bool:
        """Return whether ``locator`` appeared within ``timeout`` seconds."""

    @abstractmethod
    async def click(self, locator: str, *, click_count: int = 1, timeout: float) -> None:
        """Click the first element matching ``locator``."""

    @abstractmethod
    async def type_into(self, locator: str, text: str, *, delay: float, timeout: float) -> None:
        """Send ``text`` as key events to the element matching ``locator``."""

    @abstractmethod
    async def insert_text(self, text: str, *, delay: float) -> None:
        """Send ``text`` as key events to whatever currently has focus."""

    @abstractmethod
    async def key_down(self, key: str) -> None:
        """Hold ``key`` down."""

    @abstractmethod
    async def key_up(self, key: str) -> None:
        """Release ``key``."""

    @abstractmethod
    async def press(self, key: str) -> None:
        """Press and release ``key``."""

    @abstractmethod
    async def read_text(self, locator: str, timeout: float) -> str:
        """Return the text content of the element matching ``locator``."""

    @abstractmethod
    async def read_html(self, locator: str, timeout: float) -> str:
        """Return the inner HTML of the element matching ``locator``."""

    @abstractmethod
    async def collect(
        self,
        locator: str,
        fields: Mapping[str, FieldSpec],
        limit: Optional[int] = None,
    ) -> list[dict[str, str]]:
        """Extract ``fields`` from each element matching ``locator``, in document order."""

    async def settle(self, seconds: float) -> None:
        """Wait for the editor's unobservable state propagation to complete."""

        await self._session.settle(seconds)


class BrowserSession(ABC):
    """One browser process with one active page."""

    def __init__(self) -> None:
        self.generation = 0

    @property
    @abstractmethod
    def is_alive(self) -> bool:
        """Whether the browser and its page are still usable."""

    @property
    @abstractmethod
    def url(self) -> str:
        """URL of the active page."""

    @property
    @abstractmethod
    def viewport(self) -> tuple[int, int]:
        """Viewport dimensions of the active page."""

    async def navigate(self, url: str, timeout: float) -> None:
        """Load ``url`` and invalidate every surface resolved before the call."""

        self.generation += 1
        await self._goto(url, timeout)

    @abstractmethod
    async def _goto(self, url: str, timeout: float) -> None:
        """Load ``url``, waiting for network quiescence."""

    @abstractmethod
    async def wait_for_marker(self, locator: str, timeout: float) -> bool:
        """Return whether ``locator`` appeared on the top-level page in time."""

    @abstractmethod
    def frames(self) -> list[FrameCandidate]:
        """Nested rendering contexts of the page in enumeration order."""

    @abstractmethod
    def page_surface(self) -> Surface:
        """The top-level page as a surface."""

    @abstractmethod
    def frame_surface(self, frame: FrameCandidate, method: ResolutionMethod) -> Surface:
        """A surface bound to a nested rendering context."""

    @abstractmethod
    async def settle(self, seconds: float) -> None:
        """Sleep for a settling delay."""

    @abstractmethod
    async def close(self) -> None:
        """Close the browser and release its resources."""
