"""
================================================================================
Browser Session
================================================================================

Shared browser engine handle for one worker.

Features:
    - Lazy, single launch guarded against concurrent first access
    - Context creation with configured default timeouts and base URL
    - Launch failures cached so the worker's remaining tests skip quickly
    - Idempotent shutdown closing contexts in reverse creation order

The session is created once per worker (session-scoped fixture) and passed
explicitly to every LifecycleBootstrap.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Dict, List, Optional

from loguru import logger
from playwright.async_api import (
    async_playwright,
    Browser,
    BrowserContext,
    Playwright,
)

from .config_model import BrowserConfig
from .exceptions import BrowserLaunchError


class BrowserSession:
    """
    Owns the Playwright driver and one browser instance.

    Usage:
        async with BrowserSession(config.browser) as session:
            context = await session.new_context(base_url="https://qa.example.com")
            page = await context.new_page()
    """

    # Extra launch arguments per engine
    DEFAULT_LAUNCH_ARGS: Dict[str, List[str]] = {
        "chromium": ["--ignore-certificate-errors"],
    }

    # Default context options
    DEFAULT_CONTEXT_OPTIONS: Dict[str, Any] = {
        "viewport": {"width": 1920, "height": 1080},
        "ignore_https_errors": True,
    }

    def __init__(
        self,
        config: BrowserConfig,
        playwright_factory: Callable[[], Any] = async_playwright,
    ):
        """
        Initialize browser session.

        Args:
            config: Browser section of the run configuration
            playwright_factory: Returns an object whose `start()` yields a
                Playwright instance (async_playwright by default)
        """
        self.config = config
        self._playwright_factory = playwright_factory

        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._contexts: List[BrowserContext] = []
        self._launch_error: Optional[BrowserLaunchError] = None
        self._lock = asyncio.Lock()
        self._closed = False
        self.launch_count = 0

    async def __aenter__(self) -> "BrowserSession":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    @property
    def browser(self) -> Optional[Browser]:
        return self._browser

    @property
    def is_started(self) -> bool:
        return self._browser is not None

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def open_contexts(self) -> List[BrowserContext]:
        return list(self._contexts)

    async def start(self) -> Browser:
        """
        Launch the browser if it is not running yet.

        Returns:
            The shared Browser

        Raises:
            BrowserLaunchError: If the engine cannot be started, or a previous
                attempt in this session already failed
        """
        if self._browser is not None:
            return self._browser

        async with self._lock:
            if self._browser is not None:
                return self._browser
            if self._launch_error is not None:
                raise self._launch_error
            if self._closed:
                raise BrowserLaunchError("Browser session is already closed")

            engine = self.config.type.value
            launch_options = {
                **self.config.launch_options(),
                "args": self.DEFAULT_LAUNCH_ARGS.get(engine, []),
            }
            try:
                self._playwright = await self._playwright_factory().start()
                launcher = getattr(self._playwright, engine)
                self._browser = await launcher.launch(**launch_options)
            except Exception as e:
                await self._stop_playwright()
                self._launch_error = BrowserLaunchError(f"Failed to launch {engine}: {e}")
                logger.error(str(self._launch_error))
                raise self._launch_error from e

            self.launch_count += 1
            logger.debug(
                f"Browser started: {engine} "
                f"(headless={self.config.headless}, slow_mo={self.config.slow_mo})"
            )
            return self._browser

    async def new_context(
        self,
        base_url: Optional[str] = None,
        **options: Any,
    ) -> BrowserContext:
        """
        Create an isolated browser context.

        The configured browser timeout becomes the default action and
        navigation timeout of the context.

        Args:
            base_url: Base URL for relative navigation
            **options: Additional context options

        Returns:
            New BrowserContext
        """
        browser = await self.start()

        context_options = {**self.DEFAULT_CONTEXT_OPTIONS, **options}
        if base_url:
            context_options["base_url"] = base_url

        context = await browser.new_context(**context_options)
        context.set_default_timeout(self.config.timeout)
        context.set_default_navigation_timeout(self.config.timeout)
        self._contexts.append(context)
        return context

    def release_context(self, context: BrowserContext) -> None:
        """Forget a context that its owner has already closed."""
        if context in self._contexts:
            self._contexts.remove(context)

    async def close(self) -> None:
        """Close remaining contexts, the browser and the driver. Safe to call twice."""
        if self._closed:
            return
        self._closed = True

        for context in reversed(self._contexts):
            try:
                await context.close()
            except Exception as e:
                logger.warning(f"Failed to close browser context: {e}")
        self._contexts.clear()

        if self._browser is not None:
            try:
                await self._browser.close()
            finally:
                self._browser = None
                await self._stop_playwright()
        else:
            await self._stop_playwright()

        logger.debug("Browser session closed")

    async def _stop_playwright(self) -> None:
        if self._playwright is not None:
            playwright, self._playwright = self._playwright, None
            await playwright.stop()


__all__ = [
    "BrowserSession",
]
