"""
================================================================================
Test Suite Pytest Configuration
================================================================================

Registers project-wide markers and tags tests by directory.

================================================================================
"""

import pytest


def pytest_configure(config):
    """Configure pytest with project-wide custom markers."""

    # Priority markers
    config.addinivalue_line(
        "markers", "P0: Critical priority tests - must pass for deployment"
    )
    config.addinivalue_line(
        "markers", "P1: High priority tests - important functionality"
    )
    config.addinivalue_line(
        "markers", "P2: Medium priority tests - edge cases and minor features"
    )

    # Test type markers
    config.addinivalue_line(
        "markers", "smoke: Quick verification tests"
    )
    config.addinivalue_line(
        "markers", "regression: Full regression test suite"
    )
    config.addinivalue_line(
        "markers", "ui: Browser-driven UI tests"
    )
    config.addinivalue_line(
        "markers", "unit: Framework unit tests (no browser)"
    )


def pytest_collection_modifyitems(config, items):
    """Tag tests with 'ui' / 'unit' based on their directory."""
    for item in items:
        path = str(item.path)
        if "ui_testing" in path:
            item.add_marker(pytest.mark.ui)
        elif "unit" in path:
            item.add_marker(pytest.mark.unit)
