"""Per-connection browser session lifecycle."""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, field
from typing import Callable, Iterator, Optional

from ..browser.base import BrowserActionError, BrowserAutomation
from ..config import FrameConfig
from ..events import EventSink
from ..models import AgentStatus, StatusEvent
from .frames import FrameLoop

LOGGER = logging.getLogger(__name__)

BrowserFactory = Callable[[], BrowserAutomation]


@dataclass
class Session:
    """Browser state owned by a single client connection."""

    connection_id: str
    browser: BrowserAutomation
    frame_loop: Optional[FrameLoop] = None
    current_url: str = ""
    closed: bool = False
    _action_ids: Iterator[int] = field(default_factory=lambda: itertools.count(1), repr=False)

    @property
    def live(self) -> bool:
        return not self.closed and self.browser.is_launched()

    @property
    def is_blank(self) -> bool:
        return not self.current_url or self.current_url == "about:blank"

    def next_action_id(self) -> int:
        """Return the next action sequence number for this session."""

        return next(self._action_ids)


class SessionManager:
    """Own the table of live sessions, indexed by connection identifier."""

    def __init__(
        self,
        browser_factory: BrowserFactory,
        frame_config: Optional[FrameConfig] = None,
    ) -> None:
        self._browser_factory = browser_factory
        self._frame_config = frame_config or FrameConfig()
        self._sessions: dict[str, Session] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def get(self, connection_id: str) -> Optional[Session]:
        return self._sessions.get(connection_id)

    async def ensure_session(self, connection_id: str, sink: EventSink) -> Session:
        """Return the live session for ``connection_id``, launching one if needed.

        Launch failures propagate to the caller and leave no session behind.
        """

        existing = self._sessions.get(connection_id)
        if existing is not None and existing.live:
            return existing
        if existing is not None:
            LOGGER.info("Replacing dead session for connection %s", connection_id)
            await self.destroy_session(connection_id)

        await sink.publish(StatusEvent(data="Launching browser...", status=AgentStatus.SCRAPING))
        browser = self._browser_factory()
        try:
            await browser.launch()
        except BaseException:
            await self._close_browser(browser, connection_id)
            raise
        session = Session(connection_id=connection_id, browser=browser)
        session.frame_loop = FrameLoop(
            browser,
            sink,
            interval=self._frame_config.interval_ms / 1000,
            image_format=self._frame_config.image_format,
            quality=self._frame_config.quality,
        )
        self._sessions[connection_id] = session
        session.frame_loop.start()
        LOGGER.info("Browser session started for connection %s", connection_id)
        return session

    async def destroy_session(self, connection_id: str) -> None:
        """Tear down the session for ``connection_id``; a no-op if there is none."""

        session = self._sessions.pop(connection_id, None)
        if session is None or session.closed:
            return
        session.closed = True
        if session.frame_loop is not None:
            await session.frame_loop.stop()
        await self._close_browser(session.browser, connection_id)
        LOGGER.info("Browser session closed for connection %s", connection_id)

    async def destroy_all(self) -> None:
        for connection_id in list(self._sessions):
            await self.destroy_session(connection_id)

    @staticmethod
    async def _close_browser(browser: BrowserAutomation, connection_id: str) -> None:
        try:
            await browser.close()
        except BrowserActionError as exc:
            LOGGER.warning("Failed to close browser for connection %s: %s", connection_id, exc)
