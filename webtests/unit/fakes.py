"""
In-memory stand-ins for the Playwright objects the framework touches, plus a
valid environment profile.

Every fake appends "<kind>.<action>" strings to a shared `events` list so tests
can assert ordering (e.g. page closed before context).
"""

from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Optional

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError


PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16


class FakeLocator:
    def __init__(self, page: "FakePage", selector: str):
        self.page = page
        self.selector = selector

    def _check(self) -> None:
        if self.selector in self.page.missing_selectors:
            raise PlaywrightTimeoutError(f"Timeout exceeded waiting for {self.selector}")

    async def click(self, timeout=None) -> None:
        self._check()
        self.page.actions.append(("click", self.selector))

    async def fill(self, value: str, timeout=None) -> None:
        self._check()
        self.page.actions.append(("fill", self.selector, value))

    async def wait_for(self, state: str = "visible", timeout=None) -> None:
        self._check()

    async def inner_text(self, timeout=None) -> str:
        self._check()
        return self.page.texts.get(self.selector, "")


class FakePage:
    def __init__(self, events: Optional[List[str]] = None, url: str = "about:blank"):
        self.events = events if events is not None else []
        self._url = url
        self.closed = False
        self.fail_screenshot = False
        self.load_timeout = False
        self.screenshot_calls: List[Dict[str, Any]] = []
        self.actions: List[tuple] = []
        self.missing_selectors: set = set()
        self.texts: Dict[str, str] = {}

    @property
    def url(self) -> str:
        return self._url

    async def goto(self, url: str, wait_until: str = "load", timeout=None) -> None:
        if self.load_timeout:
            raise PlaywrightTimeoutError(f"Timeout exceeded navigating to {url}")
        self._url = url

    async def wait_for_load_state(self, state: str = "load", timeout=None) -> None:
        if self.load_timeout:
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded")

    async def wait_for_url(self, url, timeout=None) -> None:
        if self.load_timeout:
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded")

    def locator(self, selector: str) -> FakeLocator:
        return FakeLocator(self, selector)

    async def screenshot(self, full_page: bool = False, type: str = "png", **kwargs) -> bytes:
        if self.closed or self.fail_screenshot:
            raise PlaywrightError("Target page, context or browser has been closed")
        self.screenshot_calls.append({"full_page": full_page, "type": type})
        self.events.append("page.screenshot")
        return PNG_BYTES

    async def close(self) -> None:
        self.closed = True
        self.events.append("page.close")


class FakeContext:
    def __init__(self, events: List[str], options: Dict[str, Any], fail_new_page: bool = False):
        self.events = events
        self.options = options
        self.fail_new_page = fail_new_page
        self.default_timeout: Optional[float] = None
        self.default_navigation_timeout: Optional[float] = None
        self.pages: List[FakePage] = []
        self.closed = False

    def set_default_timeout(self, timeout: float) -> None:
        self.default_timeout = timeout

    def set_default_navigation_timeout(self, timeout: float) -> None:
        self.default_navigation_timeout = timeout

    async def new_page(self) -> FakePage:
        if self.fail_new_page:
            raise PlaywrightError("Target closed")
        if self.closed:
            raise PlaywrightError("Context is closed")
        page = FakePage(self.events)
        self.pages.append(page)
        self.events.append("page.open")
        return page

    async def close(self) -> None:
        self.closed = True
        self.events.append("context.close")


class FakeBrowser:
    def __init__(self, events: List[str], fail_new_page: bool = False):
        self.events = events
        self.fail_new_page = fail_new_page
        self.contexts: List[FakeContext] = []
        self.closed = False

    async def new_context(self, **options: Any) -> FakeContext:
        context = FakeContext(self.events, options, fail_new_page=self.fail_new_page)
        self.contexts.append(context)
        self.events.append("context.open")
        return context

    async def close(self) -> None:
        self.closed = True
        self.events.append("browser.close")


class FakeLauncher:
    def __init__(self, name: str, owner: "FakePlaywrightFactory"):
        self.name = name
        self.owner = owner

    async def launch(self, **options: Any) -> FakeBrowser:
        # yield so concurrent callers interleave
        await asyncio.sleep(0)
        self.owner.launches.append((self.name, options))
        if self.owner.fail_launch:
            raise PlaywrightError(f"Executable doesn't exist for {self.name}")
        self.owner.events.append(f"browser.launch:{self.name}")
        browser = FakeBrowser(self.owner.events, fail_new_page=self.owner.fail_new_page)
        self.owner.browsers.append(browser)
        return browser


class FakePlaywright:
    def __init__(self, owner: "FakePlaywrightFactory"):
        self.owner = owner
        self.chromium = FakeLauncher("chromium", owner)
        self.firefox = FakeLauncher("firefox", owner)
        self.webkit = FakeLauncher("webkit", owner)

    async def stop(self) -> None:
        self.owner.events.append("playwright.stop")


class _FakeStarter:
    def __init__(self, owner: "FakePlaywrightFactory"):
        self.owner = owner

    async def start(self) -> FakePlaywright:
        self.owner.events.append("playwright.start")
        return FakePlaywright(self.owner)


class FakePlaywrightFactory:
    """Drop-in replacement for `async_playwright` passed to BrowserSession."""

    def __init__(self, fail_launch: bool = False, fail_new_page: bool = False):
        self.fail_launch = fail_launch
        self.fail_new_page = fail_new_page
        self.events: List[str] = []
        self.launches: List[tuple] = []
        self.browsers: List[FakeBrowser] = []

    def __call__(self) -> _FakeStarter:
        return _FakeStarter(self)


QA_PROFILE: Dict[str, Any] = {
    "environment": {"name": "qa", "baseUrl": "https://qa.example.com"},
    "browser": {"type": "chromium", "headless": True, "slowMo": 0, "timeout": 20000},
    "screenshot": {"takeOnFailure": True, "fullPage": True},
    "execution": {"parallel": False, "threadCount": 1},
}
