import pytest

from webtests.ui_testing.framework import failure_listener
from webtests.ui_testing.framework.browser_session import BrowserSession
from webtests.ui_testing.framework.exceptions import BrowserLaunchError
from webtests.ui_testing.framework.failure_listener import (
    EventDispatcher,
    FailureScreenshotSink,
)
from webtests.ui_testing.framework.lifecycle import LifecycleBootstrap, LifecycleState

from .fakes import PNG_BYTES, FakePlaywrightFactory


@pytest.fixture
def attachments(monkeypatch):
    """Capture Allure attachments made by the failure listener."""
    recorded = []
    monkeypatch.setattr(
        failure_listener, "attach_png", lambda png, name: recorded.append((name, png))
    )
    return recorded


def _bootstrap(sample_config, factory, dispatcher=None) -> LifecycleBootstrap:
    session = BrowserSession(sample_config.browser, playwright_factory=factory)
    return LifecycleBootstrap(sample_config, session, dispatcher)


async def test_setup_walks_states_to_page_ready(sample_config, fake_playwright):
    bootstrap = _bootstrap(sample_config, fake_playwright)
    assert bootstrap.state is LifecycleState.NOT_STARTED
    assert bootstrap.page is None

    page = await bootstrap.setup()

    assert page is bootstrap.page
    assert bootstrap.state is LifecycleState.PAGE_READY
    assert bootstrap.context.options["base_url"] == "https://qa.example.com"
    assert bootstrap.context.default_timeout == 20000

    bootstrap.mark_running()
    assert bootstrap.state is LifecycleState.TEST_RUNNING


async def test_teardown_closes_page_before_context(sample_config, fake_playwright):
    bootstrap = _bootstrap(sample_config, fake_playwright)
    await bootstrap.setup()
    fake_playwright.events.clear()

    await bootstrap.teardown()

    assert fake_playwright.events == ["page.close", "context.close"]
    assert bootstrap.state is LifecycleState.TORN_DOWN
    assert bootstrap.page is None
    assert bootstrap.session.open_contexts == []


async def test_teardown_is_idempotent(sample_config, fake_playwright):
    bootstrap = _bootstrap(sample_config, fake_playwright)
    await bootstrap.setup()

    await bootstrap.teardown()
    await bootstrap.teardown()

    assert fake_playwright.events.count("page.close") == 1
    assert fake_playwright.events.count("context.close") == 1


async def test_setup_twice_is_rejected(sample_config, fake_playwright):
    bootstrap = _bootstrap(sample_config, fake_playwright)
    await bootstrap.setup()

    with pytest.raises(RuntimeError):
        await bootstrap.setup()


async def test_launch_failure_leaves_page_absent(sample_config):
    bootstrap = _bootstrap(sample_config, FakePlaywrightFactory(fail_launch=True))

    page = await bootstrap.setup()

    assert page is None
    assert bootstrap.state is LifecycleState.FAILED
    assert isinstance(bootstrap.setup_error, BrowserLaunchError)
    with pytest.raises(RuntimeError):
        bootstrap.mark_running()


async def test_page_creation_failure_closes_context(sample_config):
    factory = FakePlaywrightFactory(fail_new_page=True)
    bootstrap = _bootstrap(sample_config, factory)

    assert await bootstrap.setup() is None
    assert isinstance(bootstrap.setup_error, BrowserLaunchError)
    assert factory.events[-1] == "context.close"
    assert bootstrap.session.open_contexts == []


async def test_failing_body_gets_one_screenshot_and_teardown(
    sample_config, fake_playwright, attachments, tmp_path
):
    dispatcher = EventDispatcher([FailureScreenshotSink(sample_config.screenshot, tmp_path)])
    bootstrap = _bootstrap(sample_config, fake_playwright, dispatcher)
    test_id = "webtests/ui_testing/tests/test_login.py::TestLogin::test_boom"

    with pytest.raises(AssertionError):
        async with bootstrap.running(test_id) as page:
            assert page.url == "about:blank"
            raise AssertionError("boom")

    assert attachments == [(test_id, PNG_BYTES)]
    assert len(list(tmp_path.glob("*.png"))) == 1
    assert bootstrap.state is LifecycleState.TORN_DOWN
    events = fake_playwright.events
    assert events.index("page.screenshot") < events.index("page.close") < events.index("context.close")


async def test_passing_body_takes_no_screenshot(
    sample_config, fake_playwright, attachments
):
    dispatcher = EventDispatcher([FailureScreenshotSink(sample_config.screenshot)])
    bootstrap = _bootstrap(sample_config, fake_playwright, dispatcher)

    async with bootstrap.running("test_ok"):
        pass

    assert attachments == []
    assert bootstrap.state is LifecycleState.TORN_DOWN


async def test_running_raises_when_browser_unavailable(sample_config):
    bootstrap = _bootstrap(sample_config, FakePlaywrightFactory(fail_launch=True))

    with pytest.raises(BrowserLaunchError):
        async with bootstrap.running("test_x"):
            pytest.fail("body must not run")


async def test_failure_after_teardown_is_not_dispatched(
    sample_config, fake_playwright, attachments
):
    dispatcher = EventDispatcher([FailureScreenshotSink(sample_config.screenshot)])
    bootstrap = _bootstrap(sample_config, fake_playwright, dispatcher)
    await bootstrap.setup()
    await bootstrap.teardown()

    assert await bootstrap.notify_failure("test_late") == []
    assert attachments == []


async def test_bootstraps_share_one_browser(sample_config, fake_playwright):
    session = BrowserSession(sample_config.browser, playwright_factory=fake_playwright)
    first = LifecycleBootstrap(sample_config, session)
    second = LifecycleBootstrap(sample_config, session)

    page_one = await first.setup()
    page_two = await second.setup()

    assert page_one is not page_two
    assert first.context is not second.context
    assert session.launch_count == 1

    await first.teardown()
    assert not second.context.closed
    await second.teardown()
    await session.close()
