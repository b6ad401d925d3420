"""
Repository-level pytest configuration.

Loads the UI framework plugin (options, configuration resolution, browser
fixtures, failure screenshots) and pytester for plugin tests.
"""

from __future__ import annotations

from pathlib import Path

import pytest


pytest_plugins = [
    "pytester",
    "webtests.ui_testing.framework.pytest_plugin",
]


@pytest.fixture(scope="session")
def project_root() -> Path:
    """Return repo root path."""
    return Path(__file__).parent
