"""Background capture loop streaming page frames to the client."""

from __future__ import annotations

import asyncio
import base64
import contextlib
import logging
from typing import Optional

from ..browser.base import BrowserAutomation
from ..events import EventSink
from ..models import FrameEvent

LOGGER = logging.getLogger(__name__)


class FrameLoop:
    """Capture the page on a fixed period while the browser is launched.

    A tick is skipped, not queued, while the previous capture is still in
    flight, so a slow or navigating page never builds a backlog.
    """

    def __init__(
        self,
        browser: BrowserAutomation,
        sink: EventSink,
        *,
        interval: float = 0.066,
        image_format: str = "jpeg",
        quality: int = 60,
    ) -> None:
        self._browser = browser
        self._sink = sink
        self._interval = interval
        self._image_format = image_format
        self._quality = quality
        self._timer: Optional[asyncio.Task[None]] = None
        self._capture: Optional[asyncio.Task[None]] = None
        self.captured = 0
        self.skipped = 0

    @property
    def running(self) -> bool:
        return self._timer is not None and not self._timer.done()

    @property
    def capture_in_flight(self) -> bool:
        return self._capture is not None and not self._capture.done()

    def start(self) -> None:
        if self.running:
            return
        self._timer = asyncio.get_running_loop().create_task(self._run(), name="frame-loop")

    async def stop(self) -> None:
        tasks = [task for task in (self._timer, self._capture) if task is not None]
        self._timer = None
        self._capture = None
        for task in tasks:
            task.cancel()
        for task in tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await task

    def tick(self) -> bool:
        """Start one capture unless the browser is down or one is in flight."""

        if not self._browser.is_launched() or self.capture_in_flight:
            self.skipped += 1
            return False
        self._capture = asyncio.get_running_loop().create_task(self._capture_frame())
        return True

    async def _run(self) -> None:
        while True:
            self.tick()
            await asyncio.sleep(self._interval)

    async def _capture_frame(self) -> None:
        try:
            image = await self._browser.screenshot(self._image_format, self._quality)
        except Exception as exc:  # noqa: BLE001 - pages mid-navigation routinely fail to capture
            LOGGER.debug("Frame capture failed: %s", exc)
            return
        self.captured += 1
        self._sink.offer(FrameEvent(data=base64.b64encode(image).decode("ascii")))
