"""
Shared fixtures for the screenshot service test suite.

The real browser is replaced by an in-memory fake of the slice of the
Playwright async API the capture engine uses (driver -> chromium ->
browser -> context -> page). The fake records scroll offsets, settle
waits, and close calls so tests can assert on the capture sequence
without launching Chromium.
"""

import asyncio

import pytest
from fastapi.testclient import TestClient
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from sectionshot.browser import CaptureEngine, PAGE_HEIGHT_SCRIPT, SCROLL_SCRIPT, VIEWPORT_READY_SCRIPT
from sectionshot.config import Settings
from sectionshot.main import create_app

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"
TEST_API_KEY = "test-api-key"


class FakePage:
    def __init__(self, browser):
        self.browser = browser
        self.driver = browser.driver
        self.scroll_y = 0
        self.scroll_offsets = []
        self.settle_waits = []
        self.ready_checks = []
        self.goto_calls = []

    async def goto(self, url, **options):
        self.goto_calls.append((url, options))
        if self.driver.navigation_error is not None:
            raise self.driver.navigation_error

    async def evaluate(self, expression, arg=None):
        if expression == PAGE_HEIGHT_SCRIPT:
            return self.driver.page_height
        if expression == SCROLL_SCRIPT:
            self.scroll_offsets.append(arg)
            self.scroll_y = arg
            return None
        raise AssertionError(f"unexpected script: {expression}")

    async def wait_for_timeout(self, timeout):
        self.settle_waits.append(timeout)

    async def wait_for_function(self, expression, timeout=None):
        assert expression == VIEWPORT_READY_SCRIPT
        self.ready_checks.append(timeout)
        if not self.driver.viewport_ready:
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded.")

    async def screenshot(self, type="png"):
        assert type == "png"
        if self.driver.screenshot_delay:
            await asyncio.sleep(self.driver.screenshot_delay)
        if self.driver.screenshot_error is not None:
            raise self.driver.screenshot_error
        return PNG_SIGNATURE + f"offset={self.scroll_y}".encode()


class FakeContext:
    def __init__(self, browser, viewport):
        self.browser = browser
        self.viewport = viewport
        self.pages = []

    async def new_page(self):
        page = FakePage(self.browser)
        self.pages.append(page)
        return page


class FakeBrowser:
    def __init__(self, driver):
        self.driver = driver
        self.contexts = []
        self.close_calls = 0

    @property
    def closed(self):
        return self.close_calls > 0

    @property
    def pages(self):
        return [page for context in self.contexts for page in context.pages]

    async def new_context(self, viewport=None):
        context = FakeContext(self, viewport)
        self.contexts.append(context)
        return context

    async def close(self):
        if self.close_calls == 0:
            self.driver.active -= 1
        self.close_calls += 1


class FakeChromium:
    def __init__(self, driver):
        self.driver = driver

    async def launch(self, headless=True):
        assert headless is True
        if self.driver.launch_error is not None:
            raise self.driver.launch_error
        browser = FakeBrowser(self.driver)
        self.driver.browsers.append(browser)
        self.driver.active += 1
        self.driver.max_active = max(self.driver.max_active, self.driver.active)
        return browser


class FakePlaywright:
    """Stands in for `async_playwright`; calling it returns the driver context manager."""

    def __init__(self, page_height=1600):
        self.page_height = page_height
        self.navigation_error = None
        self.launch_error = None
        self.screenshot_error = None
        self.screenshot_delay = 0
        self.viewport_ready = True
        self.chromium = FakeChromium(self)
        self.browsers = []
        self.active = 0
        self.max_active = 0
        self.stopped = 0

    def __call__(self):
        return self

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.stopped += 1
        return False

    @property
    def page(self):
        return self.browsers[-1].pages[-1]


@pytest.fixture
def settings():
    return Settings(api_key=TEST_API_KEY, log_level="ERROR")


@pytest.fixture
def fake_playwright():
    return FakePlaywright()


@pytest.fixture
def engine(settings, fake_playwright):
    return CaptureEngine(settings, playwright_factory=fake_playwright)


@pytest.fixture
def client(settings, engine):
    app = create_app(settings, engine)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_headers():
    return {"x-api-key": TEST_API_KEY}


@pytest.fixture
def navigation_failure():
    return PlaywrightError("net::ERR_NAME_NOT_RESOLVED at https://unreachable.invalid/")
