"""Playwright-powered browser automation implementation."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from playwright.async_api import Error, async_playwright

from ..config import BrowserConfig
from .base import BrowserActionError, BrowserAutomation, NavigationResult

LOGGER = logging.getLogger(__name__)

_INTERACTIVE_ROLES = (
    "- button",
    "- checkbox",
    "- combobox",
    "- heading",
    "- link",
    "- menuitem",
    "- option",
    "- radio",
    "- searchbox",
    "- slider",
    "- switch",
    "- tab",
    "- textbox",
)


class PlaywrightBrowserAutomation(BrowserAutomation):
    """Headless Chromium driven through the Playwright async API.

    Every page operation runs under a single lock, so callers sharing the
    instance (the frame stream and the agent loop) never overlap on the page.
    """

    def __init__(self, config: Optional[BrowserConfig] = None) -> None:
        self._config = config or BrowserConfig()
        self._lock = asyncio.Lock()
        self._playwright = None
        self._browser = None
        self._context = None
        self._page = None

    async def launch(self) -> None:
        LOGGER.debug("Launching Playwright browser")
        args = [
            "--disable-blink-features=AutomationControlled",
            "--disable-infobars",
            "--no-sandbox",
            "--disable-dev-shm-usage",
            f"--window-size={self._config.viewport_width},{self._config.viewport_height}",
            *self._config.extra_args,
        ]
        try:
            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(
                headless=self._config.headless,
                args=args,
            )
            context_kwargs: dict[str, object] = {
                "viewport": {
                    "width": self._config.viewport_width,
                    "height": self._config.viewport_height,
                },
            }
            if self._config.user_agent:
                context_kwargs["user_agent"] = self._config.user_agent
            self._context = await self._browser.new_context(**context_kwargs)
            await self._context.add_init_script(
                "Object.defineProperty(navigator, 'webdriver', {get: () => false});"
            )
            self._page = await self._context.new_page()
            self._page.set_default_navigation_timeout(self._config.navigation_timeout * 1000)
        except Error as exc:
            await self.close()
            raise BrowserActionError(f"Failed to launch browser: {exc.message}") from exc

    def is_launched(self) -> bool:
        return self._page is not None and not self._page.is_closed()

    async def navigate(self, url: str) -> NavigationResult:
        async with self._lock:
            page = self._require_page()
            try:
                await page.goto(url, wait_until="domcontentloaded")
                return NavigationResult(url=page.url, title=await page.title())
            except Error as exc:
                raise BrowserActionError(exc.message) from exc

    async def click(self, selector: str) -> None:
        async with self._lock:
            page = self._require_page()
            try:
                await page.click(selector, timeout=10_000)
            except Error as exc:
                raise BrowserActionError(exc.message) from exc

    async def fill(self, selector: str, value: str) -> None:
        async with self._lock:
            page = self._require_page()
            try:
                await page.fill(selector, value, timeout=10_000)
            except Error as exc:
                raise BrowserActionError(exc.message) from exc

    async def scroll(self, delta_y: int) -> None:
        async with self._lock:
            page = self._require_page()
            try:
                await page.mouse.wheel(0, delta_y)
            except Error as exc:
                raise BrowserActionError(exc.message) from exc

    async def wait_for_load(self, timeout: float) -> None:
        async with self._lock:
            page = self._require_page()
            try:
                await page.wait_for_load_state("domcontentloaded", timeout=timeout * 1000)
            except Error as exc:
                raise BrowserActionError(exc.message) from exc

    async def screenshot(self, image_format: str = "jpeg", quality: int = 60) -> bytes:
        async with self._lock:
            page = self._require_page()
            kwargs: dict[str, object] = {"type": image_format, "scale": "css"}
            if image_format == "jpeg":
                kwargs["quality"] = quality
            try:
                return await page.screenshot(**kwargs)
            except Error as exc:
                raise BrowserActionError(exc.message) from exc

    async def snapshot(self, interactive: bool = True) -> str:
        async with self._lock:
            page = self._require_page()
            try:
                tree = await page.locator("body").aria_snapshot()
            except Error as exc:
                raise BrowserActionError(exc.message) from exc
        if not interactive:
            return tree
        lines = [
            line
            for line in tree.splitlines()
            if line.lstrip().startswith(_INTERACTIVE_ROLES)
        ]
        return "\n".join(lines)

    async def close(self) -> None:
        LOGGER.debug("Closing Playwright browser")
        try:
            if self._context:
                await self._context.close()
            if self._browser:
                await self._browser.close()
        except Error as exc:
            raise BrowserActionError(exc.message) from exc
        finally:
            if self._playwright:
                await self._playwright.stop()
            self._context = None
            self._browser = None
            self._playwright = None
            self._page = None

    def _require_page(self):
        if not self.is_launched():
            raise BrowserActionError("Browser is not launched")
        return self._page
