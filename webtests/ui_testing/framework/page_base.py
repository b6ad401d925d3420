"""
================================================================================
Base Page Object
================================================================================

Foundation class for Page Object Model implementation.

Provides:
    - Navigation relative to the environment base URL
    - Current URL and load-state waits
    - Element actions translated to framework timeout errors
    - Fluent (chainable) action methods
    - Screenshot attachment to Allure

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from typing import Optional

import allure
from loguru import logger
from playwright.async_api import Locator, Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from webtest_tools.report_tools.allure_utils import attach_png

from .exceptions import ActionTimeoutError, NavigationTimeoutError


class BasePage:
    """
    Base class for all page objects.

    When `base_url` is empty, paths are passed to Playwright unchanged and
    resolve against the context base URL set by the lifecycle bootstrap.

    Usage:
        class LoginPage(BasePage):
            URL_PATH = "/login"

            async def login(self, username: str, password: str) -> "LoginPage":
                await self.fill("#username", username)
                await self.fill("#password", password)
                return await self.click("#login")
    """

    # Override in subclasses
    URL_PATH: str = "/"

    def __init__(self, page: Page, base_url: str = ""):
        """
        Initialize page object.

        Args:
            page: Playwright Page object
            base_url: Base URL override; empty to use the context base URL
        """
        self.page = page
        self.base_url = base_url.rstrip("/")

    @property
    def url(self) -> str:
        """URL of this page object."""
        return self.resolve_url(self.URL_PATH)

    def resolve_url(self, path: str) -> str:
        if path.startswith(("http://", "https://", "file://", "data:")):
            return path
        return f"{self.base_url}{path}" if self.base_url else path

    def current_url(self) -> str:
        """URL the browser is currently showing."""
        return self.page.url

    # =========================================================================
    # Navigation
    # =========================================================================

    async def navigate(self, wait_for: str = "load") -> "BasePage":
        """Navigate to this page's URL_PATH."""
        return await self.open(self.URL_PATH, wait_for=wait_for)

    async def open(self, path: str, wait_for: str = "load") -> "BasePage":
        """
        Navigate to a path or absolute URL.

        Args:
            path: URL path relative to the base URL, or an absolute URL
            wait_for: Wait condition - 'load', 'domcontentloaded', 'networkidle'

        Raises:
            NavigationTimeoutError: If navigation does not finish in time
        """
        target = self.resolve_url(path)
        with allure.step(f"Navigate to {path}"):
            try:
                await self.page.goto(target, wait_until=wait_for)
            except PlaywrightTimeoutError as e:
                raise NavigationTimeoutError(f"Navigation to {target} timed out: {e}") from e
        logger.debug(f"Navigated to: {target}")
        return self

    async def wait_for_load(
        self,
        timeout: Optional[float] = None,
        state: str = "load",
    ) -> "BasePage":
        """
        Block until the page reaches a load state.

        Args:
            timeout: Milliseconds; None uses the context default timeout
            state: Playwright load state ('load', 'domcontentloaded', 'networkidle')

        Raises:
            NavigationTimeoutError: If the state is not reached in time
        """
        try:
            await self.page.wait_for_load_state(state, timeout=timeout)
        except PlaywrightTimeoutError as e:
            raise NavigationTimeoutError(
                f"Page did not reach '{state}' state: {e}"
            ) from e
        return self

    async def wait_for_url(
        self,
        url_pattern: str,
        timeout: Optional[float] = None,
    ) -> "BasePage":
        """Wait for the URL to match a glob pattern, regex or predicate."""
        with allure.step(f"Wait for URL: {url_pattern}"):
            try:
                await self.page.wait_for_url(url_pattern, timeout=timeout)
            except PlaywrightTimeoutError as e:
                raise NavigationTimeoutError(
                    f"URL did not match {url_pattern}: {e}"
                ) from e
        return self

    # =========================================================================
    # Element Actions
    # =========================================================================

    def locator(self, selector: str) -> Locator:
        return self.page.locator(selector)

    async def click(self, selector: str, timeout: Optional[float] = None) -> "BasePage":
        with allure.step(f"Click: {selector}"):
            try:
                await self.locator(selector).click(timeout=timeout)
            except PlaywrightTimeoutError as e:
                raise ActionTimeoutError(f"Click on {selector} timed out: {e}") from e
        return self

    async def fill(
        self,
        selector: str,
        value: str,
        timeout: Optional[float] = None,
    ) -> "BasePage":
        shown = "*" * len(value) if "password" in selector.lower() else value
        with allure.step(f"Fill {selector}: {shown}"):
            try:
                await self.locator(selector).fill(value, timeout=timeout)
            except PlaywrightTimeoutError as e:
                raise ActionTimeoutError(f"Fill of {selector} timed out: {e}") from e
        return self

    async def wait_for_element(
        self,
        selector: str,
        state: str = "visible",
        timeout: Optional[float] = None,
    ) -> "BasePage":
        """
        Wait for element to reach specified state.

        Args:
            selector: CSS selector
            state: Target state - 'visible', 'hidden', 'attached', 'detached'
            timeout: Timeout in milliseconds
        """
        try:
            await self.locator(selector).wait_for(state=state, timeout=timeout)
        except PlaywrightTimeoutError as e:
            raise ActionTimeoutError(f"{selector} did not become {state}: {e}") from e
        return self

    async def text_of(self, selector: str, timeout: Optional[float] = None) -> str:
        try:
            return (await self.locator(selector).inner_text(timeout=timeout)).strip()
        except PlaywrightTimeoutError as e:
            raise ActionTimeoutError(f"Reading text of {selector} timed out: {e}") from e

    async def is_visible(self, selector: str, timeout: float = 2000) -> bool:
        """Visibility check that never raises on timeout."""
        try:
            await self.locator(selector).wait_for(state="visible", timeout=timeout)
        except PlaywrightTimeoutError:
            return False
        return True

    # =========================================================================
    # Debug Utilities
    # =========================================================================

    async def screenshot(self, name: str, full_page: bool = False) -> bytes:
        """Take a screenshot and attach it to the Allure report."""
        png = await self.page.screenshot(full_page=full_page, type="png")
        attach_png(png, name=name)
        return png


__all__ = [
    "BasePage",
]
