"""
================================================================================
Framework Exceptions
================================================================================

Error taxonomy for the UI framework.

Configuration errors are fatal to the whole run (no test executes).
BrowserLaunchError is fatal to the affected worker only. Timeouts fail the
current test. ScreenshotCaptureError is logged and never fails a test.

================================================================================
"""

from __future__ import annotations

from typing import Optional


class FrameworkError(Exception):
    """Base class for all framework errors."""
    pass


# =============================================================================
# Configuration
# =============================================================================

class ConfigurationError(FrameworkError):
    """Raised when the run configuration cannot be resolved."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class ConfigNotFoundError(ConfigurationError):
    """No configuration file exists for the selected environment."""
    pass


class ConfigParseError(ConfigurationError):
    """Configuration file is not valid YAML or does not match the schema."""
    pass


class ConfigOverrideError(ConfigurationError):
    """Override key is unknown or its value cannot be coerced."""
    pass


# =============================================================================
# Browser / Page
# =============================================================================

class BrowserLaunchError(FrameworkError):
    """Browser engine could not be started."""
    pass


class NavigationTimeoutError(FrameworkError):
    """Navigation or load-state wait exceeded its timeout."""
    pass


class ActionTimeoutError(FrameworkError):
    """Element action (click, fill, wait) exceeded its timeout."""
    pass


class ScreenshotCaptureError(FrameworkError):
    """Screenshot could not be captured from the page."""
    pass


__all__ = [
    "FrameworkError",
    "ConfigurationError",
    "ConfigNotFoundError",
    "ConfigParseError",
    "ConfigOverrideError",
    "BrowserLaunchError",
    "NavigationTimeoutError",
    "ActionTimeoutError",
    "ScreenshotCaptureError",
]
