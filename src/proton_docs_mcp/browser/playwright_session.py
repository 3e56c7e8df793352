"""Playwright-powered browser session and surfaces."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterator, Mapping, Optional, Union

from playwright.async_api import (
    Browser,
    BrowserContext,
    Error,
    Frame,
    Page,
    Playwright,
    async_playwright,
)
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from ..config import BrowserConfig
from ..errors import BrowserEnvironmentError, RemoteInteractionError
from .base import BrowserSession, FieldSpec, FrameCandidate, ResolutionMethod, Surface
from .display import VirtualDisplay

LOGGER = logging.getLogger(__name__)

_COLLECT_SCRIPT = """
(elements, { fields, limit }) => {
  const rows = [];
  for (const element of elements) {
    if (limit !== null && rows.length >= limit) break;
    const row = {};
    let keep = true;
    for (const [key, spec] of Object.entries(fields)) {
      const target = spec.locator ? element.querySelector(spec.locator) : element;
      if (!target && spec.required) { keep = false; break; }
      let value = null;
      if (target) {
        value = spec.attribute ? target.getAttribute(spec.attribute) : target.textContent;
      }
      value = value === null || value === undefined ? '' : String(value).trim();
      row[key] = value || spec.default;
    }
    if (keep) rows.push(row);
  }
  return rows;
}
"""


@contextmanager
def _driver_errors(description: str) -> Iterator[None]:
    try:
        yield
    except Error as exc:
        raise RemoteInteractionError(f"{description} failed: {exc}") from exc


class PlaywrightSurface(Surface):
    """Surface bound to a Playwright page or frame."""

    def __init__(
        self,
        session: "PlaywrightBrowserSession",
        target: Union[Page, Frame],
        method: ResolutionMethod,
    ) -> None:
        super().__init__(session, method)
        self._target = target
        self._page = session.page

    async def wait_for(self, locator: str, timeout: float) -> bool:
        try:
            await self._target.wait_for_selector(locator, timeout=_ms(timeout))
        except PlaywrightTimeoutError:
            return False
        except Error as exc:
            raise RemoteInteractionError(f"Waiting for {locator} failed: {exc}") from exc
        return True

    async def click(self, locator: str, *, click_count: int = 1, timeout: float) -> None:
        with _driver_errors(f"Clicking {locator}"):
            await self._target.locator(locator).first.click(
                click_count=click_count, timeout=_ms(timeout)
            )

    async def type_into(self, locator: str, text: str, *, delay: float, timeout: float) -> None:
        with _driver_errors(f"Typing into {locator}"):
            await self._target.locator(locator).first.press_sequentially(
                text, delay=_ms(delay), timeout=_ms(timeout)
            )

    async def insert_text(self, text: str, *, delay: float) -> None:
        with _driver_errors("Typing text"):
            await self._page.keyboard.type(text, delay=_ms(delay))

    async def key_down(self, key: str) -> None:
        with _driver_errors(f"Holding {key}"):
            await self._page.keyboard.down(key)

    async def key_up(self, key: str) -> None:
        with _driver_errors(f"Releasing {key}"):
            await self._page.keyboard.up(key)

    async def press(self, key: str) -> None:
        with _driver_errors(f"Pressing {key}"):
            await self._page.keyboard.press(key)

    async def read_text(self, locator: str, timeout: float) -> str:
        with _driver_errors(f"Reading text of {locator}"):
            text = await self._target.locator(locator).first.text_content(timeout=_ms(timeout))
        return text or ""

    async def read_html(self, locator: str, timeout: float) -> str:
        with _driver_errors(f"Reading HTML of {locator}"):
            return await self._target.locator(locator).first.inner_html(timeout=_ms(timeout))

    async def collect(
        self,
        locator: str,
        fields: Mapping[str, FieldSpec],
        limit: Optional[int] = None,
    ) -> list[dict[str, str]]:
        payload = {
            "fields": {
                key: {
                    "locator": spec.locator,
                    "attribute": spec.attribute,
                    "default": spec.default,
                    "required": spec.required,
                }
                for key, spec in fields.items()
            },
            "limit": limit,
        }
        with _driver_errors(f"Extracting {locator}"):
            return await self._target.locator(locator).evaluate_all(_COLLECT_SCRIPT, payload)


class PlaywrightBrowserSession(BrowserSession):
    """Browser session backed by Playwright."""

    def __init__(
        self,
        playwright: Playwright,
        context: BrowserContext,
        page: Page,
        browser: Optional[Browser] = None,
        display: Optional[VirtualDisplay] = None,
    ) -> None:
        super().__init__()
        self._playwright = playwright
        self._context = context
        self._browser = browser
        self._display = display
        self.page = page

    @property
    def is_alive(self) -> bool:
        if self.page.is_closed():
            return False
        return self._browser.is_connected() if self._browser else True

    @property
    def url(self) -> str:
        return self.page.url

    @property
    def viewport(self) -> tuple[int, int]:
        size = self.page.viewport_size or {"width": 0, "height": 0}
        return size["width"], size["height"]

    async def _goto(self, url: str, timeout: float) -> None:
        LOGGER.debug("Navigating to %s", url)
        with _driver_errors(f"Navigation to {url}"):
            await self.page.goto(url, wait_until="networkidle", timeout=_ms(timeout))

    async def wait_for_marker(self, locator: str, timeout: float) -> bool:
        try:
            await self.page.wait_for_selector(locator, timeout=_ms(timeout))
        except PlaywrightTimeoutError:
            return False
        except Error as exc:
            raise RemoteInteractionError(f"Waiting for {locator} failed: {exc}") from exc
        return True

    def frames(self) -> list[FrameCandidate]:
        main = self.page.main_frame
        return [
            FrameCandidate(name=frame.name, url=frame.url, handle=frame)
            for frame in self.page.frames
            if frame is not main
        ]

    def page_surface(self) -> Surface:
        return PlaywrightSurface(self, self.page, ResolutionMethod.PAGE)

    def frame_surface(self, frame: FrameCandidate, method: ResolutionMethod) -> Surface:
        return PlaywrightSurface(self, frame.handle, method)

    async def settle(self, seconds: float) -> None:
        await self.page.wait_for_timeout(_ms(seconds))

    async def close(self) -> None:
        LOGGER.debug("Stopping Playwright browser session")
        try:
            await self._context.close()
        finally:
            if self._browser:
                await self._browser.close()
            await self._playwright.stop()
            if self._display:
                self._display.stop()


async def launch_playwright_session(config: BrowserConfig) -> PlaywrightBrowserSession:
    """Launch Chromium and open the single page the orchestrator drives."""

    LOGGER.debug("Starting Playwright browser session")
    display: Optional[VirtualDisplay] = None
    playwright: Optional[Playwright] = None
    browser: Optional[Browser] = None
    try:
        if config.virtual_display and not config.headless:
            display = VirtualDisplay(config.viewport_width, config.viewport_height)
            display.start()
        playwright = await async_playwright().start()
        launch_kwargs: dict[str, Any] = {
            "headless": config.headless,
            "args": list(config.launch_args),
        }
        if config.executable_path:
            launch_kwargs["executable_path"] = str(config.executable_path)
        if config.channel:
            launch_kwargs["channel"] = config.channel
        if config.slow_mo is not None:
            launch_kwargs["slow_mo"] = config.slow_mo
        viewport = {"width": config.viewport_width, "height": config.viewport_height}
        if config.profile_path:
            config.profile_path.mkdir(parents=True, exist_ok=True)
            context = await playwright.chromium.launch_persistent_context(
                str(config.profile_path),
                **launch_kwargs,
                viewport=viewport,
            )
            pages = context.pages
            page = pages[0] if pages else await context.new_page()
        else:
            browser = await playwright.chromium.launch(**launch_kwargs)
            context = await browser.new_context(viewport=viewport)
            page = await context.new_page()
    except (Error, OSError, RuntimeError) as exc:
        LOGGER.error("Browser launch failed: %s", exc)
        if browser:
            await browser.close()
        if playwright:
            await playwright.stop()
        if display:
            display.stop()
        raise BrowserEnvironmentError(f"Could not launch browser: {exc}") from exc
    return PlaywrightBrowserSession(
        playwright,
        context,
        page,
        browser=browser,
        display=display,
    )


def _ms(seconds: float) -> float:
    return seconds * 1000
