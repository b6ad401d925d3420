"""
================================================================================
Test Result Event Sinks
================================================================================

Observers for test outcome events.

A sink implements `on_test_failure(test_id, page)`. The pytest plugin calls
the EventDispatcher after the failing call phase has been reported and before
the page is torn down. FailureScreenshotSink captures a PNG, attaches it to
the Allure report under the test id and stores it in the screenshot directory.

Sink errors never propagate: a broken screenshot must not mask the original
test failure.

================================================================================
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional

from loguru import logger
from playwright.async_api import Page

from webtest_tools.report_tools.allure_utils import attach_png

from .config_model import ScreenshotConfig
from .exceptions import ScreenshotCaptureError


_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def safe_filename(test_id: str) -> str:
    """Turn a pytest node id into a filesystem-safe file stem."""
    return _UNSAFE_FILENAME_CHARS.sub("_", test_id).strip("_.") or "test"


@dataclass(frozen=True)
class FailureArtifact:
    """Screenshot captured for a failed test."""

    test_id: str
    png: bytes
    path: Optional[Path] = None


class ResultEventSink(ABC):
    """Receives test outcome events."""

    @abstractmethod
    async def on_test_failure(self, test_id: str, page: Page) -> Optional[FailureArtifact]:
        """Handle a failed test whose page is still open."""


class FailureScreenshotSink(ResultEventSink):
    """
    Captures a screenshot when a test fails.

    Args:
        config: Screenshot section of the run configuration
        output_dir: Directory for PNG files; nothing is written when None
    """

    def __init__(self, config: ScreenshotConfig, output_dir: Optional[Path] = None):
        self.config = config
        self.output_dir = Path(output_dir) if output_dir else None

    async def on_test_failure(self, test_id: str, page: Page) -> Optional[FailureArtifact]:
        if not self.config.take_on_failure:
            return None

        try:
            png = await self.capture(page)
        except ScreenshotCaptureError as e:
            logger.warning(f"Failed to capture screenshot for {test_id}: {e}")
            return None

        attach_png(png, name=test_id)
        path = self._persist(test_id, png) if self.output_dir else None
        logger.info(f"Failure screenshot captured for {test_id}")
        return FailureArtifact(test_id=test_id, png=png, path=path)

    async def capture(self, page: Page) -> bytes:
        """
        Take a PNG screenshot of the page.

        Raises:
            ScreenshotCaptureError: Page closed, browser crashed or any
                other capture failure
        """
        try:
            return await page.screenshot(full_page=self.config.full_page, type="png")
        except Exception as e:
            raise ScreenshotCaptureError(str(e)) from e

    def _persist(self, test_id: str, png: bytes) -> Optional[Path]:
        """Write the PNG without overwriting an earlier artifact."""
        stem = safe_filename(test_id)
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            path = self.output_dir / f"{stem}.png"
            counter = 1
            while path.exists():
                path = self.output_dir / f"{stem}_{counter}.png"
                counter += 1
            path.write_bytes(png)
        except OSError as e:
            logger.warning(f"Failed to save screenshot for {test_id}: {e}")
            return None

        logger.debug(f"Screenshot saved: {path}")
        return path


class EventDispatcher:
    """Fans test events out to registered sinks."""

    def __init__(self, sinks: Optional[Iterable[ResultEventSink]] = None):
        self._sinks: List[ResultEventSink] = list(sinks or [])

    @property
    def sinks(self) -> List[ResultEventSink]:
        return list(self._sinks)

    def register(self, sink: ResultEventSink) -> "EventDispatcher":
        self._sinks.append(sink)
        return self

    async def dispatch_failure(self, test_id: str, page: Page) -> List[FailureArtifact]:
        """Notify every sink; one sink failing does not stop the others."""
        artifacts: List[FailureArtifact] = []
        for sink in self._sinks:
            try:
                artifact = await sink.on_test_failure(test_id, page)
            except Exception as e:
                logger.warning(f"{type(sink).__name__} failed for {test_id}: {e}")
                continue
            if artifact is not None:
                artifacts.append(artifact)
        return artifacts


__all__ = [
    "EventDispatcher",
    "FailureArtifact",
    "FailureScreenshotSink",
    "ResultEventSink",
    "safe_filename",
]
