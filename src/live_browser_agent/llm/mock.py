"""Mock LLM clients for testing and offline use."""

from __future__ import annotations

from collections import deque
from typing import Deque, Iterable

from .base import ChatLLM, ConversationTurn, LLMError


class ScriptedLLM(ChatLLM):
    """Return replies from a predefined sequence and record every request."""

    def __init__(self, replies: Iterable[str]) -> None:
        self._replies: Deque[str] = deque(replies)
        self.requests: list[list[ConversationTurn]] = []

    async def complete(self, messages: Iterable[ConversationTurn]) -> str:
        self.requests.append(list(messages))
        if not self._replies:
            raise LLMError("ScriptedLLM ran out of replies")
        return self._replies.popleft()
