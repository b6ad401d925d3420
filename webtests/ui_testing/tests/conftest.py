"""
================================================================================
UI Testing Pytest Configuration
================================================================================

Fixtures for the example UI tests.

Key Features:
- Local HTTP server for the bundled demo site (tests run offline)
- Page Object fixtures bound to the framework `page` fixture

Browser, context, page and failure screenshots come from the framework
plugin (webtests.ui_testing.framework.pytest_plugin).

================================================================================
"""

import threading
from functools import partial
from http.server import SimpleHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from typing import Generator

import pytest
from loguru import logger
from playwright.async_api import Page

from webtests.ui_testing.pages.dashboard_page import DashboardPage
from webtests.ui_testing.pages.login_page import LoginPage


SITE_DIR = Path(__file__).resolve().parent.parent / "site"


class _QuietHandler(SimpleHTTPRequestHandler):
    """Static file handler logging through loguru instead of stderr."""

    def log_message(self, format, *args):
        logger.debug(f"demo site: {format % args}")


# ================================================================================
# Demo Site
# ================================================================================

@pytest.fixture(scope="session")
def demo_site_url() -> Generator[str, None, None]:
    """
    Serve the demo site on an ephemeral localhost port.
    """
    handler = partial(_QuietHandler, directory=str(SITE_DIR))
    server = ThreadingHTTPServer(("127.0.0.1", 0), handler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()

    host, port = server.server_address[:2]
    url = f"http://{host}:{port}"
    logger.debug(f"Demo site served at {url}")
    yield url

    server.shutdown()
    server.server_close()


# ================================================================================
# Page Object Fixtures
# ================================================================================

@pytest.fixture
def login_page(page: Page, demo_site_url: str) -> LoginPage:
    return LoginPage(page, base_url=demo_site_url)


@pytest.fixture
def dashboard_page(page: Page, demo_site_url: str) -> DashboardPage:
    return DashboardPage(page, base_url=demo_site_url)


@pytest.fixture
def test_data():
    """
    Provides common credentials for UI tests.
    """
    return {
        "valid_user": {
            "username": "demo_user",
            "password": "demo_password",
        },
        "invalid_user": {
            "username": "invalid_user",
            "password": "wrong_password",
        },
    }
