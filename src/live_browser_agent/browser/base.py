"""Browser automation abstractions."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass
class NavigationResult:
    """Page location reported by the engine after a navigation settles."""

    url: str
    title: str = ""


class BrowserActionError(RuntimeError):
    """Raised when a browser automation call fails."""


class BrowserAutomation(ABC):
    """Interface for an automation-capable headless browser.

    Implementations are expected to process calls one at a time so that a
    frame capture and an agent action never interleave on the same page.
    """

    @abstractmethod
    async def launch(self) -> None:
        """Start the browser. Raises :class:`BrowserActionError` on failure."""

    @abstractmethod
    def is_launched(self) -> bool:
        """Return whether the browser is running and has a page."""

    @abstractmethod
    async def navigate(self, url: str) -> NavigationResult:
        """Open ``url`` and return the location the page ended up on."""

    @abstractmethod
    async def click(self, selector: str) -> None:
        """Click the element matching ``selector``."""

    @abstractmethod
    async def fill(self, selector: str, value: str) -> None:
        """Replace the value of the input matching ``selector``."""

    @abstractmethod
    async def scroll(self, delta_y: int) -> None:
        """Scroll vertically by ``delta_y`` pixels (positive = down)."""

    @abstractmethod
    async def wait_for_load(self, timeout: float) -> None:
        """Wait up to ``timeout`` seconds for the page to finish loading."""

    @abstractmethod
    async def screenshot(self, image_format: str = "jpeg", quality: int = 60) -> bytes:
        """Capture the visible viewport."""

    @abstractmethod
    async def snapshot(self, interactive: bool = True) -> str:
        """Return a textual accessibility tree of the current page."""

    @abstractmethod
    async def close(self) -> None:
        """Shut the browser down."""
