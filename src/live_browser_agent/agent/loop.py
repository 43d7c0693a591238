"""Perceive/decide/act loop that drives the browser from model replies."""

from __future__ import annotations

import asyncio
import enum
import logging
from dataclasses import dataclass
from typing import Optional

from ..browser.base import BrowserActionError
from ..config import AgentConfig
from ..events import EventSink
from ..llm.base import ChatLLM, ConversationTurn
from ..models import ActionType, AgentStatus, ResultEvent, StatusEvent
from ..session.manager import Session
from .executor import ActionExecutor
from .parser import parse_action
from .prompts import AGENT_SYSTEM_PROMPT, CORRECTIVE_PROMPT, PromptBuilder

LOGGER = logging.getLogger(__name__)


class LoopState(str, enum.Enum):
    """States of a single agent loop invocation."""

    READING = "reading"
    DECIDING = "deciding"
    EXECUTING = "executing"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


TRANSITIONS: dict[LoopState, frozenset[LoopState]] = {
    LoopState.READING: frozenset(
        {LoopState.DECIDING, LoopState.COMPLETED, LoopState.FAILED, LoopState.CANCELLED}
    ),
    # Unrecognized replies go straight back to reading without executing.
    LoopState.DECIDING: frozenset(
        {LoopState.EXECUTING, LoopState.READING, LoopState.COMPLETED, LoopState.FAILED}
    ),
    LoopState.EXECUTING: frozenset({LoopState.READING, LoopState.FAILED}),
    LoopState.COMPLETED: frozenset(),
    LoopState.FAILED: frozenset(),
    LoopState.CANCELLED: frozenset(),
}


class LoopStateMachine:
    """Track the current state and reject transitions missing from the table."""

    def __init__(self) -> None:
        self.state = LoopState.READING
        self.history: list[LoopState] = [LoopState.READING]

    @property
    def terminal(self) -> bool:
        return not TRANSITIONS[self.state]

    def advance(self, target: LoopState) -> None:
        if target not in TRANSITIONS[self.state]:
            raise RuntimeError(f"Illegal agent loop transition {self.state.value} -> {target.value}")
        self.state = target
        self.history.append(target)


@dataclass
class AgentOutcome:
    """Summary of how an agent loop invocation ended."""

    state: LoopState
    summary: str
    steps: int
    incomplete: bool = False


class AgentLoop:
    """Run the agent for one instruction against a session's browser."""

    def __init__(
        self,
        llm: ChatLLM,
        config: Optional[AgentConfig] = None,
        executor: Optional[ActionExecutor] = None,
        prompt_builder: Optional[PromptBuilder] = None,
    ) -> None:
        self._llm = llm
        self._config = config or AgentConfig()
        self._executor = executor or ActionExecutor(self._config)
        self._prompt_builder = prompt_builder or PromptBuilder(self._config.snapshot_char_limit)

    async def run(
        self,
        instruction: str,
        session: Session,
        sink: EventSink,
        stop: Optional[asyncio.Event] = None,
    ) -> AgentOutcome:
        """Drive the browser until the model reports ``done`` or the step budget runs out.

        Model and unexpected errors propagate after moving the loop to
        ``FAILED``; browser action failures are fed back to the model instead.
        Once ``stop`` is set or the session is torn down, the loop ends as
        ``CANCELLED`` before starting its next step.
        """

        machine = LoopStateMachine()
        transcript: list[ConversationTurn] = []
        previous_result: Optional[str] = None
        steps = 0
        try:
            while steps < self._config.max_steps:
                if session.closed or (stop is not None and stop.is_set()):
                    LOGGER.info("Agent loop for %s stopped after %d steps", session.connection_id, steps)
                    machine.advance(LoopState.CANCELLED)
                    return AgentOutcome(
                        state=machine.state,
                        summary="Instruction cancelled: the session was closed.",
                        steps=steps,
                        incomplete=True,
                    )
                steps += 1
                transcript.append(
                    ConversationTurn(
                        role="user",
                        content=await self._observe(steps - 1, instruction, previous_result, session, sink),
                    )
                )

                machine.advance(LoopState.DECIDING)
                await sink.publish(StatusEvent(data="Thinking...", status=AgentStatus.THINKING))
                reply = await self._llm.complete(
                    [ConversationTurn(role="system", content=AGENT_SYSTEM_PROMPT), *transcript]
                )
                transcript.append(ConversationTurn(role="assistant", content=reply))
                action = parse_action(reply)
                LOGGER.info("Step %d/%d: %s", steps, self._config.max_steps, action.describe())

                if action.type == ActionType.DONE:
                    machine.advance(LoopState.COMPLETED)
                    summary = action.summary or ""
                    await sink.publish(ResultEvent(data=summary))
                    return AgentOutcome(state=machine.state, summary=summary, steps=steps)

                if action.type == ActionType.UNRECOGNIZED:
                    LOGGER.warning("Unrecognized agent reply: %r", action.raw_text)
                    transcript.append(ConversationTurn(role="user", content=CORRECTIVE_PROMPT))
                    previous_result = f"Unrecognized action: {action.raw_text}"
                    machine.advance(LoopState.READING)
                    continue

                machine.advance(LoopState.EXECUTING)
                await sink.publish(StatusEvent(data=action.describe(), status=AgentStatus.SCRAPING))
                previous_result = await self._executor.execute(action, session)
                transcript.append(ConversationTurn(role="user", content=previous_result))
                await sink.publish(StatusEvent(data=previous_result, status=AgentStatus.THINKING))
                machine.advance(LoopState.READING)
                await asyncio.sleep(self._config.settle_delay)
        except BaseException:
            if not machine.terminal:
                machine.advance(LoopState.FAILED)
            raise

        machine.advance(LoopState.COMPLETED)
        summary = (
            f"Reached the step limit of {self._config.max_steps} steps; the task may be incomplete."
        )
        if previous_result:
            summary += f" Last result: {previous_result}"
        await sink.publish(ResultEvent(data=summary))
        return AgentOutcome(state=machine.state, summary=summary, steps=steps, incomplete=True)

    async def _observe(
        self,
        step: int,
        instruction: str,
        previous_result: Optional[str],
        session: Session,
        sink: EventSink,
    ) -> str:
        snapshot: Optional[str] = None
        if not session.is_blank:
            await sink.publish(StatusEvent(data="Reading page...", status=AgentStatus.SCRAPING))
            try:
                snapshot = await session.browser.snapshot(interactive=True)
            except BrowserActionError as exc:
                LOGGER.warning("Snapshot failed for %s: %s", session.connection_id, exc)
                snapshot = f"(page snapshot unavailable: {exc})"
        return self._prompt_builder.observation(
            step=step,
            instruction=instruction,
            previous_result=previous_result,
            url=session.current_url,
            snapshot=snapshot,
        )
