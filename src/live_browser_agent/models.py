"""Shared models used across the live browser agent."""

from __future__ import annotations

import enum
from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_DONE_SUMMARY = "Task completed."


class ActionType(str, enum.Enum):
    """Actions the model may choose on each agent step."""

    CLICK = "click"
    TYPE = "type"
    SCROLL = "scroll"
    NAVIGATE = "navigate"
    DONE = "done"
    UNRECOGNIZED = "unrecognized"


class ParsedAction(BaseModel):
    """A single action parsed from one line of model output."""

    model_config = ConfigDict(frozen=True)

    type: ActionType
    selector: Optional[str] = None
    text: Optional[str] = None
    direction: Optional[str] = None
    url: Optional[str] = None
    summary: Optional[str] = None
    raw_text: Optional[str] = None

    @classmethod
    def click(cls, selector: str) -> "ParsedAction":
        return cls(type=ActionType.CLICK, selector=selector)

    @classmethod
    def type_text(cls, selector: str, text: str) -> "ParsedAction":
        return cls(type=ActionType.TYPE, selector=selector, text=text)

    @classmethod
    def scroll(cls, direction: str) -> "ParsedAction":
        return cls(type=ActionType.SCROLL, direction=direction)

    @classmethod
    def navigate(cls, url: str) -> "ParsedAction":
        return cls(type=ActionType.NAVIGATE, url=url)

    @classmethod
    def done(cls, summary: str = "") -> "ParsedAction":
        return cls(type=ActionType.DONE, summary=summary or DEFAULT_DONE_SUMMARY)

    @classmethod
    def unrecognized(cls, raw_text: str) -> "ParsedAction":
        return cls(type=ActionType.UNRECOGNIZED, raw_text=raw_text, summary=raw_text)

    @property
    def scrolls_up(self) -> bool:
        return self.type == ActionType.SCROLL and self.direction == "up"

    def describe(self) -> str:
        """Return a short human-readable rendering of the action."""

        if self.type == ActionType.CLICK:
            return f"click {self.selector}"
        if self.type == ActionType.TYPE:
            return f'type "{self.text}" into {self.selector}'
        if self.type == ActionType.SCROLL:
            return f"scroll {'up' if self.scrolls_up else 'down'}"
        if self.type == ActionType.NAVIGATE:
            return f"navigate to {self.url}"
        if self.type == ActionType.DONE:
            return "done"
        return f"unrecognized: {self.raw_text}"


class AgentStatus(str, enum.Enum):
    """Status values reported to the client alongside events."""

    IDLE = "idle"
    THINKING = "thinking"
    SCRAPING = "scraping"
    DONE = "done"
    ERROR = "error"


class CommandMessage(BaseModel):
    """Inbound instruction sent by the client."""

    type: Literal["command"]
    instruction: str = Field(min_length=1)


class StatusEvent(BaseModel):
    type: Literal["status"] = "status"
    data: str
    status: AgentStatus


class ResultEvent(BaseModel):
    type: Literal["result"] = "result"
    data: str
    status: AgentStatus = AgentStatus.DONE


class FrameEvent(BaseModel):
    type: Literal["frame"] = "frame"
    data: str = Field(description="Base64 encoded image.")


class ErrorEvent(BaseModel):
    type: Literal["error"] = "error"
    data: str
    status: AgentStatus = AgentStatus.ERROR


OutboundEvent = Union[StatusEvent, ResultEvent, FrameEvent, ErrorEvent]
