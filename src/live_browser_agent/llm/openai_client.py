"""LLM client for OpenAI-compatible chat completion endpoints."""

from __future__ import annotations

from typing import Iterable

import httpx

from ..config import LLMConfig
from .base import ChatLLM, ConversationTurn, LLMError

_RESERVED_PARAMETERS = {"timeout", "temperature", "responses"}


class OpenAIChatLLM(ChatLLM):
    """Call an OpenAI-compatible chat completion API."""

    def __init__(self, config: LLMConfig, transport: httpx.AsyncBaseTransport | None = None) -> None:
        if not config.model:
            raise ValueError("LLM model must be specified for OpenAIChatLLM")
        self._config = config
        headers = {"Content-Type": "application/json"}
        if config.api_key:
            headers["Authorization"] = f"Bearer {config.api_key}"
        self._client = httpx.AsyncClient(
            base_url=config.base_url or "https://api.openai.com/v1",
            timeout=config.parameters.get("timeout", 60),
            headers=headers,
            transport=transport,
        )
        self._temperature = config.parameters.get("temperature", 0.0)

    async def complete(self, messages: Iterable[ConversationTurn]) -> str:
        payload = {
            "model": self._config.model,
            "messages": [{"role": turn.role, "content": turn.content} for turn in messages],
            "temperature": self._temperature,
        }
        payload.update(
            {
                k: v
                for k, v in self._config.parameters.items()
                if k not in _RESERVED_PARAMETERS
            }
        )
        try:
            response = await self._client.post("/chat/completions", json=payload)
        except httpx.HTTPError as exc:
            raise LLMError(f"LLM request failed: {exc}") from exc
        if response.is_error:
            raise LLMError(
                f"LLM API error {response.status_code}: {response.text}",
                status_code=response.status_code,
                body=response.text,
            )
        data = response.json()
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            raise LLMError(f"Unexpected response format: {data}") from exc
        return content or ""

    async def aclose(self) -> None:
        await self._client.aclose()
