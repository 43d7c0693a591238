"""Classify instructions as browser tasks or plain conversation."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from ..llm.base import ChatLLM, ConversationTurn
from .prompts import ROUTE_TO_AGENT, ROUTER_SYSTEM_PROMPT

LOGGER = logging.getLogger(__name__)


@dataclass
class RouteDecision:
    """Outcome of routing one instruction."""

    needs_browser: bool
    reply: Optional[str] = None


class Router:
    """Ask the model once whether an instruction needs the browser.

    The conversational transcript is owned by the caller and mutated in place.
    """

    def __init__(self, llm: ChatLLM, transcript_limit: int = 50) -> None:
        self._llm = llm
        self._transcript_limit = transcript_limit

    async def route(self, instruction: str, transcript: list[ConversationTurn]) -> RouteDecision:
        transcript.append(ConversationTurn(role="user", content=instruction))
        self.trim(transcript)
        reply = await self._llm.complete(
            [ConversationTurn(role="system", content=ROUTER_SYSTEM_PROMPT), *transcript]
        )
        if reply.strip() == ROUTE_TO_AGENT:
            LOGGER.info("Routing instruction to browser agent")
            return RouteDecision(needs_browser=True)
        LOGGER.info("Answering instruction conversationally")
        transcript.append(ConversationTurn(role="assistant", content=reply))
        self.trim(transcript)
        return RouteDecision(needs_browser=False, reply=reply)

    def trim(self, transcript: list[ConversationTurn]) -> None:
        overflow = len(transcript) - self._transcript_limit
        if overflow > 0:
            del transcript[:overflow]
