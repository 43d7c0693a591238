"""Execute parsed actions against a session's browser."""

from __future__ import annotations

import logging

from ..browser.base import BrowserActionError
from ..config import AgentConfig
from ..models import ActionType, ParsedAction
from ..session.manager import Session

LOGGER = logging.getLogger(__name__)


class ActionExecutor:
    """Run one browser call per action and describe the outcome in one line.

    Automation failures never escape: they are rendered as
    ``"<Verb> failed: <reason>"`` so the agent can react to them.
    """

    def __init__(self, config: AgentConfig | None = None) -> None:
        self._config = config or AgentConfig()

    async def execute(self, action: ParsedAction, session: Session) -> str:
        if action.type in {ActionType.DONE, ActionType.UNRECOGNIZED}:
            raise ValueError(f"{action.type.value} actions are not executable")
        action_id = session.next_action_id()
        LOGGER.info("Executing action #%d for %s: %s", action_id, session.connection_id, action.describe())
        browser = session.browser

        if action.type == ActionType.CLICK:
            try:
                await browser.click(action.selector)
            except BrowserActionError as exc:
                return f"Click failed: {exc}"
            try:
                await browser.wait_for_load(self._config.click_settle_timeout)
            except BrowserActionError:
                LOGGER.debug("Page did not settle after action #%d", action_id)
            return f"Clicked {action.selector}"

        if action.type == ActionType.TYPE:
            try:
                await browser.fill(action.selector, action.text or "")
            except BrowserActionError as exc:
                return f"Type failed: {exc}"
            return f'Typed "{action.text}" into {action.selector}'

        if action.type == ActionType.SCROLL:
            label = "up" if action.scrolls_up else "down"
            delta = -self._config.scroll_amount if action.scrolls_up else self._config.scroll_amount
            try:
                await browser.scroll(delta)
            except BrowserActionError as exc:
                return f"Scroll failed: {exc}"
            return f"Scrolled {label}"

        if action.type == ActionType.NAVIGATE:
            try:
                result = await browser.navigate(action.url)
            except BrowserActionError as exc:
                return f"Navigate failed: {exc}"
            session.current_url = result.url
            if result.title:
                return f"Navigated to {result.url} ({result.title})"
            return f"Navigated to {result.url}"

        raise ValueError(f"Unsupported action type: {action.type}")
