"""Per-connection message handling."""

from __future__ import annotations

import asyncio
import json
import logging
import uuid
from typing import Optional, Union

from pydantic import ValidationError

from ..agent.loop import AgentLoop, LoopState
from ..agent.router import Router
from ..browser.base import BrowserActionError
from ..events import EventChannel
from ..llm.base import ConversationTurn, LLMError
from ..models import AgentStatus, CommandMessage, ErrorEvent, StatusEvent
from ..session.manager import SessionManager

LOGGER = logging.getLogger(__name__)


class ConnectionHandler:
    """Context owned by one client connection.

    Holds the conversational transcript and outbound channel. Inbound frames
    are queued and a worker task hands them to the router and agent loop one at
    a time, so the receive loop keeps observing the socket while an
    instruction runs.
    """

    def __init__(
        self,
        *,
        router: Router,
        agent: AgentLoop,
        sessions: SessionManager,
        channel: Optional[EventChannel] = None,
        connection_id: Optional[str] = None,
    ) -> None:
        self.connection_id = connection_id or uuid.uuid4().hex
        self.channel = channel or EventChannel()
        self.transcript: list[ConversationTurn] = []
        self._router = router
        self._agent = agent
        self._sessions = sessions
        self._inbox: asyncio.Queue[Optional[Union[str, bytes]]] = asyncio.Queue()
        self._stopping = asyncio.Event()
        self._worker: Optional[asyncio.Task[None]] = None

    @property
    def stopping(self) -> bool:
        return self._stopping.is_set()

    def submit(self, raw: Union[str, bytes]) -> None:
        """Queue one inbound frame; frames are handled in arrival order."""

        if self._stopping.is_set():
            return
        if self._worker is None:
            self._worker = asyncio.create_task(self._drain_inbox())
        self._inbox.put_nowait(raw)

    async def handle_message(self, raw: Union[str, bytes]) -> None:
        """Decode one inbound frame and process it; never raises for bad input."""

        try:
            payload = json.loads(raw)
        except ValueError:
            LOGGER.warning("Malformed message on connection %s", self.connection_id)
            await self.channel.publish(ErrorEvent(data="Invalid JSON message"))
            return
        try:
            command = CommandMessage.model_validate(payload)
        except ValidationError:
            await self.channel.publish(
                ErrorEvent(data="Unsupported message: expected {\"type\": \"command\", \"instruction\": ...}")
            )
            return
        await self.handle_instruction(command.instruction)

    async def handle_instruction(self, instruction: str) -> None:
        try:
            await self._process(instruction)
        except BrowserActionError as exc:
            LOGGER.error("Browser failure on connection %s: %s", self.connection_id, exc)
            await self._fail(str(exc))
        except LLMError as exc:
            LOGGER.error("LLM failure on connection %s: %s", self.connection_id, exc)
            await self._fail(str(exc))
        except Exception as exc:  # pragma: no cover - defensive logging
            LOGGER.exception("Unhandled error on connection %s", self.connection_id)
            await self._fail(str(exc) or type(exc).__name__)

    async def close(self) -> None:
        """Stop the worker, tear down the session and stop accepting outbound events.

        A running instruction finishes its current step and then ends as
        cancelled; queued frames are discarded.
        """

        self._stopping.set()
        self.channel.close()
        if self._worker is not None:
            self._inbox.put_nowait(None)
            await self._worker
        await self._sessions.destroy_session(self.connection_id)
        self.transcript.clear()

    async def _drain_inbox(self) -> None:
        while (raw := await self._inbox.get()) is not None:
            if self._stopping.is_set():
                break
            await self.handle_message(raw)

    async def _process(self, instruction: str) -> None:
        decision = await self._router.route(instruction, self.transcript)
        if not decision.needs_browser:
            await self.channel.publish(StatusEvent(data=decision.reply or "", status=AgentStatus.DONE))
            return
        if self._stopping.is_set():
            return
        session = await self._sessions.ensure_session(self.connection_id, self.channel)
        outcome = await self._agent.run(instruction, session, self.channel, stop=self._stopping)
        if outcome.state is LoopState.CANCELLED:
            LOGGER.info(
                "Instruction on connection %s cancelled after %d steps", self.connection_id, outcome.steps
            )
            return
        self.transcript.append(ConversationTurn(role="assistant", content=outcome.summary))
        self._router.trim(self.transcript)

    async def _fail(self, reason: str) -> None:
        await self.channel.publish(ErrorEvent(data=reason))
        if self.transcript and self.transcript[-1].role == "user":
            self.transcript.append(
                ConversationTurn(role="assistant", content=f"(The request failed: {reason})")
            )
            self._router.trim(self.transcript)
        await self._sessions.destroy_session(self.connection_id)
