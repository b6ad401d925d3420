"""
================================================================================
Webtest Tools Common Utilities
================================================================================

Shared logging setup for the framework, the pytest plugin and the runner.

Usage:
    from webtest_tools.common import init_logger

    init_logger()

================================================================================
"""

from .logging_setup import (
    GenerationRetention,
    InterceptHandler,
    build_level_filter,
    init_logger,
    log_file_path,
)

__all__ = [
    "GenerationRetention",
    "InterceptHandler",
    "build_level_filter",
    "init_logger",
    "log_file_path",
]
