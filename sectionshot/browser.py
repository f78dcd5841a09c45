# sectionshot/browser.py
"""
Capture engine: renders a page in headless Chromium and screenshots it one
viewport-high section at a time, top to bottom.
"""

import asyncio
import math
import time
from typing import Any, List, Optional

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from playwright.async_api import async_playwright
from pydantic import AnyUrl, TypeAdapter, ValidationError

from sectionshot.config import Settings
from sectionshot.errors import BrowserError, InvalidInputError, MissingInputError, NavigationError
from sectionshot.logger import get_logger
from sectionshot.models import CaptureResult

logger = get_logger("sectionshot.browser")

PAGE_HEIGHT_SCRIPT = "() => document.body ? document.body.scrollHeight : 0"
SCROLL_SCRIPT = "(offset) => window.scrollTo(0, offset)"
# true once every image intersecting the viewport has finished loading
VIEWPORT_READY_SCRIPT = """() => Array.from(document.images)
    .filter((img) => {
        const rect = img.getBoundingClientRect();
        return rect.bottom > 0 && rect.top < window.innerHeight;
    })
    .every((img) => img.complete)"""


_url_adapter = TypeAdapter(AnyUrl)


def validate_url(url: Any) -> str:
    if url is None or url == "":
        raise MissingInputError("URL is required")
    if not isinstance(url, str):
        raise InvalidInputError("Invalid URL format")
    url = url.strip()
    try:
        parsed = _url_adapter.validate_python(url)
    except ValidationError:
        raise InvalidInputError("Invalid URL format")
    if not parsed.host:
        raise InvalidInputError("Invalid URL format")
    return url


def resolve_section_height(value: Any, settings: Settings) -> int:
    """Return the effective section height: the default when omitted, otherwise a bounded positive int."""
    if value is None:
        return settings.default_section_height
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, bool) or not isinstance(value, int) or not 1 <= value <= settings.max_section_height:
        raise InvalidInputError(
            f"sectionHeight must be an integer between 1 and {settings.max_section_height}"
        )
    return value


def sections_needed(page_height: Optional[float], section_height: int) -> int:
    if not page_height or page_height <= 0:
        return 0
    return math.ceil(page_height / section_height)


class CaptureEngine:
    """
    Owns the per-request browser session lifecycle.

    Every capture launches its own browser and closes it before returning or
    raising. At most `max_concurrent_sessions` sessions run at once; further
    captures wait for a free slot.
    """

    def __init__(self, settings: Settings, playwright_factory=async_playwright):
        self.settings = settings
        self._playwright_factory = playwright_factory
        self._sessions = asyncio.Semaphore(settings.max_concurrent_sessions)

    async def capture(self, url: Any, section_height: Any = None) -> CaptureResult:
        url = validate_url(url)
        height = resolve_section_height(section_height, self.settings)

        async with self._sessions:
            timestamp = int(time.time() * 1000)
            logger.info(f"Taking screenshots of: {url} (section height {height}px)")
            screenshots = await self._capture_sections(url, height)

        return CaptureResult(url=url, timestamp=timestamp, screenshots=screenshots)

    async def _capture_sections(self, url: str, height: int) -> List[bytes]:
        try:
            async with self._playwright_factory() as p:
                browser = await self._launch(p)
                try:
                    context = await browser.new_context(
                        viewport={"width": self.settings.viewport_width, "height": height}
                    )
                    page = await context.new_page()
                    await self._navigate(page, url)

                    page_height = await page.evaluate(PAGE_HEIGHT_SCRIPT)
                    needed = sections_needed(page_height, height)
                    logger.info(f"Page height: {page_height}px, taking {needed} screenshots")

                    screenshots = []
                    for i in range(needed):
                        await page.evaluate(SCROLL_SCRIPT, i * height)
                        await self._settle(page)
                        screenshots.append(await page.screenshot(type="png"))
                        logger.debug(f"Took screenshot {i + 1} of {needed}")
                    return screenshots
                finally:
                    await self._close(browser)
        except BrowserError:
            raise
        except PlaywrightError as e:
            raise BrowserError(f"Capture of {url} failed: {e}") from e

    async def _launch(self, p):
        try:
            return await p.chromium.launch(headless=True)
        except PlaywrightError as e:
            raise BrowserError(f"Failed to launch browser: {e}") from e

    async def _navigate(self, page, url: str):
        options = {"wait_until": "networkidle"}
        if self.settings.navigation_timeout_ms is not None:
            options["timeout"] = self.settings.navigation_timeout_ms
        try:
            await page.goto(url, **options)
        except PlaywrightError as e:
            raise NavigationError(f"Failed to load {url}: {e}") from e

    async def _settle(self, page):
        """Give lazily-loaded content a chance to appear before the shot."""
        if self.settings.settle_delay_ms > 0:
            await page.wait_for_timeout(self.settings.settle_delay_ms)
        if self.settings.settle_timeout_ms > 0:
            try:
                await page.wait_for_function(VIEWPORT_READY_SCRIPT, timeout=self.settings.settle_timeout_ms)
            except PlaywrightTimeoutError:
                logger.debug(
                    f"Viewport not ready after {self.settings.settle_timeout_ms}ms, capturing anyway"
                )

    async def _close(self, browser):
        try:
            await browser.close()
        except PlaywrightError as e:
            logger.warning(f"Error closing browser: {e}")
