"""
================================================================================
UI Framework Pytest Plugin
================================================================================

Wires configuration, browser lifecycle and failure listeners into pytest.

Options:
    --env NAME            environment profile (default: $TEST_ENV or 'qa')
    --override KEY=VALUE  configuration override, repeatable
    --config-dir PATH     directory holding <env>.yaml (default: <rootdir>/config)
    --screenshot-dir PATH failure screenshot directory
                          (default: <rootdir>/reports/screenshots)

Fixtures:
    - run_config: resolved RunConfig (session)
    - browser_session: shared BrowserSession of this worker (session)
    - event_dispatcher: failure event sinks (session)
    - bootstrap: LifecycleBootstrap for the current test
    - page: Playwright Page of the current test

The browser, bootstrap and page fixtures run on the session event loop.
Async tests using them must run there too:

    pytestmark = pytest.mark.asyncio(loop_scope="session")

Configuration errors abort the run in pytest_configure, before collection,
with pytest's usage-error exit code.

================================================================================
"""

from __future__ import annotations

from pathlib import Path
from typing import AsyncGenerator, Dict

import pytest
import pytest_asyncio
from loguru import logger
from playwright.async_api import Page

from webtest_tools.common import init_logger

from .browser_session import BrowserSession
from .config_model import RunConfig
from .config_resolver import ConfigResolver, parse_override_args, select_environment
from .exceptions import ConfigurationError
from .failure_listener import EventDispatcher, FailureScreenshotSink
from .lifecycle import LifecycleBootstrap


RUN_CONFIG_KEY = pytest.StashKey[RunConfig]()
ENVIRONMENT_KEY = pytest.StashKey[str]()
PHASE_REPORTS_KEY = pytest.StashKey[Dict[str, pytest.TestReport]]()


# ================================================================================
# Pytest Hooks
# ================================================================================

def pytest_addoption(parser):
    """Register framework command line options."""
    group = parser.getgroup("webtests", "UI framework configuration")
    group.addoption(
        "--env",
        action="store",
        dest="webtests_env",
        default=None,
        help="Environment profile to load from the config directory (default: $TEST_ENV or qa)",
    )
    group.addoption(
        "--override",
        action="append",
        dest="webtests_overrides",
        default=[],
        metavar="KEY=VALUE",
        help="Override a configuration value, e.g. --override browser.type=firefox",
    )
    group.addoption(
        "--config-dir",
        action="store",
        dest="webtests_config_dir",
        default=None,
        help="Directory containing environment YAML files (default: <rootdir>/config)",
    )
    group.addoption(
        "--screenshot-dir",
        action="store",
        dest="webtests_screenshot_dir",
        default=None,
        help="Directory for failure screenshots (default: <rootdir>/reports/screenshots)",
    )


def pytest_configure(config):
    """Resolve the run configuration once; abort the run on failure."""
    init_logger()

    environment = select_environment(config.getoption("webtests_env"))
    config_dir = config.getoption("webtests_config_dir") or config.rootpath / "config"

    try:
        overrides = parse_override_args(config.getoption("webtests_overrides"))
        run_config = ConfigResolver(Path(config_dir)).resolve(environment, overrides)
    except ConfigurationError as e:
        logger.error(f"Run aborted, configuration could not be resolved: {e}")
        raise pytest.UsageError(f"Configuration error: {e}") from e

    config.stash[RUN_CONFIG_KEY] = run_config
    config.stash[ENVIRONMENT_KEY] = environment

    numprocesses = getattr(config.option, "numprocesses", None)
    workers = run_config.execution.effective_workers
    if isinstance(numprocesses, int) and numprocesses and numprocesses != workers:
        logger.warning(
            f"xdist runs {numprocesses} workers but configuration asks for {workers}"
        )


def pytest_report_header(config):
    run_config = config.stash.get(RUN_CONFIG_KEY, None)
    if run_config is None:
        return None
    return [
        f"environment: {config.stash[ENVIRONMENT_KEY]} ({run_config.environment.base_url})",
        f"browser: {run_config.browser.type.value} "
        f"(headless={run_config.browser.headless}, timeout={run_config.browser.timeout}ms)",
        f"workers: {run_config.execution.effective_workers}",
    ]


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    """Keep each phase report on the item so fixtures can see the outcome."""
    outcome = yield
    report = outcome.get_result()
    item.stash.setdefault(PHASE_REPORTS_KEY, {})[report.when] = report


# ================================================================================
# Fixtures
# ================================================================================

@pytest.fixture(scope="session")
def run_config(pytestconfig) -> RunConfig:
    """Resolved configuration of this run."""
    return pytestconfig.stash[RUN_CONFIG_KEY]


@pytest.fixture(scope="session")
def screenshot_dir(pytestconfig) -> Path:
    configured = pytestconfig.getoption("webtests_screenshot_dir")
    if configured:
        return Path(configured)
    return pytestconfig.rootpath / "reports" / "screenshots"


@pytest.fixture(scope="session")
def event_dispatcher(run_config: RunConfig, screenshot_dir: Path) -> EventDispatcher:
    """Failure event sinks for this run."""
    return EventDispatcher([FailureScreenshotSink(run_config.screenshot, screenshot_dir)])


@pytest_asyncio.fixture(scope="session", loop_scope="session")
async def browser_session(run_config: RunConfig) -> AsyncGenerator[BrowserSession, None]:
    """
    Session-scoped browser handle.

    The browser launches on the first test that needs it and closes once,
    after the worker's last test.
    """
    session = BrowserSession(run_config.browser)
    yield session
    await session.close()


@pytest_asyncio.fixture(loop_scope="session")
async def bootstrap(
    request,
    run_config: RunConfig,
    browser_session: BrowserSession,
    event_dispatcher: EventDispatcher,
) -> AsyncGenerator[LifecycleBootstrap, None]:
    """
    Per-test lifecycle.

    Skips the test when no page can be opened. After a failing test body the
    failure sinks run before the page and context are closed.
    """
    lifecycle = LifecycleBootstrap(run_config, browser_session, event_dispatcher)
    page = await lifecycle.setup()
    if page is None:
        await lifecycle.teardown()
        pytest.skip(f"Browser unavailable: {lifecycle.setup_error}")

    lifecycle.mark_running()
    try:
        yield lifecycle
        call_report = request.node.stash.get(PHASE_REPORTS_KEY, {}).get("call")
        if call_report is not None and call_report.failed:
            await lifecycle.notify_failure(request.node.nodeid)
    finally:
        await lifecycle.teardown()


@pytest_asyncio.fixture(loop_scope="session")
async def page(bootstrap: LifecycleBootstrap) -> Page:
    """Page opened for the current test."""
    return bootstrap.page
