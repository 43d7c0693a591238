"""Factories for constructing components from configuration."""

from __future__ import annotations

from .browser.playwright_session import PlaywrightBrowserAutomation
from .config import BrowserConfig, LLMConfig
from .llm.base import ChatLLM
from .llm.mock import ScriptedLLM
from .llm.openai_client import OpenAIChatLLM
from .session.manager import BrowserFactory


def build_llm(config: LLMConfig) -> ChatLLM:
    provider = config.provider.lower()
    if provider in {"openai", "azure", "openai-compatible"}:
        return OpenAIChatLLM(config)
    if provider == "mock":
        return ScriptedLLM(str(item) for item in config.parameters.get("responses", []))
    raise ValueError(f"Unsupported LLM provider: {config.provider}")


def build_browser_factory(config: BrowserConfig) -> BrowserFactory:
    def _factory() -> PlaywrightBrowserAutomation:
        return PlaywrightBrowserAutomation(config)

    return _factory
