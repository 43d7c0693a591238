import asyncio

import pytest
from stubs import StubBrowser

from live_browser_agent.agent.executor import ActionExecutor
from live_browser_agent.config import AgentConfig
from live_browser_agent.models import ParsedAction
from live_browser_agent.session.manager import Session


def _run(action: ParsedAction, browser: StubBrowser, session: Session | None = None) -> str:
    session = session or Session(connection_id="conn", browser=browser)
    return asyncio.run(ActionExecutor(AgentConfig(scroll_amount=400)).execute(action, session))


def test_navigate_records_post_redirect_url():
    browser = StubBrowser(
        redirects={"https://example.com": "https://www.example.com/"},
        titles={"https://www.example.com/": "Example Domain"},
    )
    session = Session(connection_id="conn", browser=browser)

    result = _run(ParsedAction.navigate("https://example.com"), browser, session)

    assert session.current_url == "https://www.example.com/"
    assert result == "Navigated to https://www.example.com/ (Example Domain)"


def test_navigate_failure_leaves_url_untouched():
    browser = StubBrowser(fail_actions={"navigate": "net::ERR_NAME_NOT_RESOLVED"})
    session = Session(connection_id="conn", browser=browser, current_url="https://before")

    result = _run(ParsedAction.navigate("https://nowhere.invalid"), browser, session)

    assert result == "Navigate failed: net::ERR_NAME_NOT_RESOLVED"
    assert session.current_url == "https://before"


def test_click_waits_for_settle_and_ignores_timeout():
    browser = StubBrowser(fail_actions={"wait_for_load": "Timeout 3000ms exceeded"})

    result = _run(ParsedAction.click("#submit"), browser)

    assert result == "Clicked #submit"
    assert browser.actions() == [("click", "#submit"), ("wait_for_load", 3.0)]


def test_click_failure_is_rendered_not_raised():
    browser = StubBrowser(fail_actions={"click": "element not found"})

    assert _run(ParsedAction.click("#missing"), browser) == "Click failed: element not found"


def test_type_fills_selector():
    browser = StubBrowser()

    result = _run(ParsedAction.type_text("#q", "hello world"), browser)

    assert result == 'Typed "hello world" into #q'
    assert browser.actions() == [("fill", ("#q", "hello world"))]


def test_scroll_only_up_moves_upwards():
    browser = StubBrowser()

    assert _run(ParsedAction.scroll("sideways"), browser) == "Scrolled down"
    assert _run(ParsedAction.scroll("up"), browser) == "Scrolled up"
    assert browser.actions() == [("scroll", 400), ("scroll", -400)]


def test_action_ids_are_never_reused():
    browser = StubBrowser()
    session = Session(connection_id="conn", browser=browser)
    executor = ActionExecutor()

    async def scenario() -> None:
        await executor.execute(ParsedAction.click("#a"), session)
        await executor.execute(ParsedAction.click("#b"), session)

    asyncio.run(scenario())

    assert session.next_action_id() == 3


def test_done_and_unrecognized_are_not_executable():
    browser = StubBrowser()
    with pytest.raises(ValueError):
        _run(ParsedAction.done("finished"), browser)
    with pytest.raises(ValueError):
        _run(ParsedAction.unrecognized("???"), browser)
    assert browser.actions() == []
