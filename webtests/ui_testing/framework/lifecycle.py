"""
================================================================================
Lifecycle Bootstrap
================================================================================

Per-test setup and teardown of a browser context and page.

State machine:
    NOT_STARTED -> CONFIGURED -> BROWSER_READY -> PAGE_READY
        -> TEST_RUNNING -> TORN_DOWN
    Any setup failure moves to FAILED; the page is then absent and the
    test is skipped.

Pages are closed before their context, always, and teardown is idempotent.

================================================================================
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from enum import Enum
from typing import AsyncIterator, List, Optional

from loguru import logger
from playwright.async_api import BrowserContext, Error as PlaywrightError, Page

from .browser_session import BrowserSession
from .config_model import RunConfig
from .exceptions import BrowserLaunchError
from .failure_listener import EventDispatcher, FailureArtifact


class LifecycleState(str, Enum):
    NOT_STARTED = "not_started"
    CONFIGURED = "configured"
    BROWSER_READY = "browser_ready"
    PAGE_READY = "page_ready"
    TEST_RUNNING = "test_running"
    TORN_DOWN = "torn_down"
    FAILED = "failed"


class LifecycleBootstrap:
    """
    Owns one context/page pair for a single test.

    Usage:
        bootstrap = LifecycleBootstrap(run_config, session, dispatcher)
        async with bootstrap.running("tests/test_login.py::test_ok") as page:
            await page.goto("/login")
    """

    def __init__(
        self,
        config: RunConfig,
        session: BrowserSession,
        dispatcher: Optional[EventDispatcher] = None,
    ):
        self.config = config
        self.session = session
        self.dispatcher = dispatcher or EventDispatcher()

        self._state = LifecycleState.NOT_STARTED
        self._context: Optional[BrowserContext] = None
        self._page: Optional[Page] = None
        self.setup_error: Optional[BrowserLaunchError] = None

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def page(self) -> Optional[Page]:
        """Active page, or None when setup failed or after teardown."""
        return self._page

    @property
    def context(self) -> Optional[BrowserContext]:
        return self._context

    async def setup(self) -> Optional[Page]:
        """
        Open a context and page for the test.

        Returns:
            The page, or None if the browser/context/page could not be created
            (setup_error holds the reason)
        """
        if self._state is not LifecycleState.NOT_STARTED:
            raise RuntimeError(f"setup() called in state {self._state.value}")

        self._state = LifecycleState.CONFIGURED

        try:
            await self.session.start()
        except BrowserLaunchError as e:
            self._fail(e)
            return None
        self._state = LifecycleState.BROWSER_READY

        try:
            self._context = await self.session.new_context(
                base_url=self.config.environment.base_url
            )
            self._page = await self._context.new_page()
        except BrowserLaunchError as e:
            await self._close_opened()
            self._fail(e)
            return None
        except PlaywrightError as e:
            await self._close_opened()
            self._fail(BrowserLaunchError(f"Failed to open browser page: {e}"))
            return None

        self._state = LifecycleState.PAGE_READY
        logger.debug(f"Page ready ({self.config.browser.type.value})")
        return self._page

    def mark_running(self) -> None:
        if self._state is not LifecycleState.PAGE_READY:
            raise RuntimeError(f"Cannot start test in state {self._state.value}")
        self._state = LifecycleState.TEST_RUNNING

    async def notify_failure(self, test_id: str) -> List[FailureArtifact]:
        """Dispatch a failure event while the page is still open."""
        if self._page is None:
            logger.debug(f"No page available for failure event of {test_id}")
            return []
        return await self.dispatcher.dispatch_failure(test_id, self._page)

    async def teardown(self) -> None:
        """Close page then context. Calling it again does nothing."""
        if self._state is LifecycleState.TORN_DOWN:
            return

        await self._close_opened()
        self._state = LifecycleState.TORN_DOWN
        logger.debug("Test page torn down")

    @asynccontextmanager
    async def running(self, test_id: str) -> AsyncIterator[Page]:
        """
        Run a test body between setup and teardown.

        A failure event is dispatched if the body raises; teardown runs in
        every case.

        Raises:
            BrowserLaunchError: If setup could not provide a page
        """
        page = await self.setup()
        if page is None:
            raise self.setup_error
        self.mark_running()
        try:
            yield page
        except Exception:
            await self.notify_failure(test_id)
            raise
        finally:
            await self.teardown()

    def _fail(self, error: BrowserLaunchError) -> None:
        logger.warning(f"Test setup failed: {error}")
        self.setup_error = error
        self._state = LifecycleState.FAILED

    async def _close_opened(self) -> None:
        page, context = self._page, self._context
        self._page = None
        self._context = None

        try:
            if page is not None:
                await self._close_quietly(page, "page")
        finally:
            if context is not None:
                await self._close_quietly(context, "context")
                self.session.release_context(context)

    @staticmethod
    async def _close_quietly(resource, label: str) -> None:
        try:
            await resource.close()
        except Exception as e:
            logger.warning(f"Failed to close {label}: {e}")


__all__ = [
    "LifecycleBootstrap",
    "LifecycleState",
]
