"""Base classes and utilities for LLM integrations."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable, Optional


@dataclass
class ConversationTurn:
    """A single role-tagged message exchanged with the LLM."""

    role: str
    content: str


class LLMError(RuntimeError):
    """Raised when the completion endpoint cannot produce a reply."""

    def __init__(self, message: str, *, status_code: Optional[int] = None, body: str = "") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class ChatLLM(ABC):
    """Abstract interface for chat completion providers."""

    @abstractmethod
    async def complete(self, messages: Iterable[ConversationTurn]) -> str:
        """Return the assistant reply for the ordered ``messages``.

        Implementations raise :class:`LLMError` when the provider fails.
        """

    async def aclose(self) -> None:
        """Release any network resources held by the client."""
