"""
================================================================================
UI Testing Framework
================================================================================

Playwright-based UI automation framework.

Components:
    - config_model / config_resolver: environment profiles and overrides
    - browser_session: shared browser engine handle
    - lifecycle: per-test context/page bootstrap
    - failure_listener: failure screenshot event sinks
    - page_base: base page object
    - pytest_plugin: options, hooks and fixtures

Author: Automation Team
License: MIT
================================================================================
"""

from .browser_session import BrowserSession
from .config_model import (
    BrowserConfig,
    BrowserType,
    EnvironmentConfig,
    ExecutionConfig,
    RunConfig,
    ScreenshotConfig,
)
from .config_resolver import ConfigResolver, parse_override_args, resolve, select_environment
from .exceptions import (
    ActionTimeoutError,
    BrowserLaunchError,
    ConfigNotFoundError,
    ConfigOverrideError,
    ConfigParseError,
    ConfigurationError,
    FrameworkError,
    NavigationTimeoutError,
    ScreenshotCaptureError,
)
from .failure_listener import (
    EventDispatcher,
    FailureArtifact,
    FailureScreenshotSink,
    ResultEventSink,
)
from .lifecycle import LifecycleBootstrap, LifecycleState
from .page_base import BasePage

__all__ = [
    "ActionTimeoutError",
    "BasePage",
    "BrowserConfig",
    "BrowserLaunchError",
    "BrowserSession",
    "BrowserType",
    "ConfigNotFoundError",
    "ConfigOverrideError",
    "ConfigParseError",
    "ConfigResolver",
    "ConfigurationError",
    "EnvironmentConfig",
    "EventDispatcher",
    "ExecutionConfig",
    "FailureArtifact",
    "FailureScreenshotSink",
    "FrameworkError",
    "LifecycleBootstrap",
    "LifecycleState",
    "NavigationTimeoutError",
    "ResultEventSink",
    "RunConfig",
    "ScreenshotCaptureError",
    "ScreenshotConfig",
    "parse_override_args",
    "resolve",
    "select_environment",
]
