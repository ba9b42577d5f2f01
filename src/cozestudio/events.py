"""Events emitted while a chat response is being decoded."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar

from cozestudio.streaming import ToolCall


@dataclass
class StreamEvent:
    """Base for all streaming events.

    ``to_payload()`` gives the wire shape the UI consumes:
    ``event_type``, ``content``, ``tool_call``, ``full_content`` and
    ``tool_calls``, with fields the event does not carry set to ``None``.
    """

    event_type: ClassVar[str] = ""
    terminal: ClassVar[bool] = False

    def to_payload(self) -> dict:
        return {
            "event_type": self.event_type,
            "content": None,
            "tool_call": None,
            "full_content": None,
            "tool_calls": None,
        }


@dataclass
class ContentEvent(StreamEvent):
    """A non-empty answer delta and the response text so far."""

    event_type: ClassVar[str] = "content"

    delta: str = ""
    full_so_far: str = ""

    def to_payload(self) -> dict:
        payload = super().to_payload()
        payload["content"] = self.delta
        payload["full_content"] = self.full_so_far
        return payload


@dataclass
class ToolCallStartedEvent(StreamEvent):
    event_type: ClassVar[str] = "tool_call"

    call: ToolCall | None = None

    def to_payload(self) -> dict:
        payload = super().to_payload()
        payload["tool_call"] = self.call.to_dict() if self.call else None
        return payload


@dataclass
class ToolCallFinishedEvent(StreamEvent):
    """A tool call reached ``success`` or ``error``.

    ``all_calls`` is a snapshot of every call seen so far, in order.
    """

    event_type: ClassVar[str] = "tool_result"

    call: ToolCall | None = None
    all_calls: list[ToolCall] = field(default_factory=list)

    def to_payload(self) -> dict:
        payload = super().to_payload()
        payload["tool_call"] = self.call.to_dict() if self.call else None
        payload["tool_calls"] = [c.to_dict() for c in self.all_calls]
        return payload


@dataclass
class DoneEvent(StreamEvent):
    """Final event of a healthy session.

    ``tool_calls`` is ``None`` when the backend used no tools.
    """

    event_type: ClassVar[str] = "done"
    terminal: ClassVar[bool] = True

    full_response: str = ""
    tool_calls: list[ToolCall] | None = None

    def to_payload(self) -> dict:
        payload = super().to_payload()
        payload["full_content"] = self.full_response
        if self.tool_calls is not None:
            payload["tool_calls"] = [c.to_dict() for c in self.tool_calls]
        return payload


@dataclass
class ErrorEvent(StreamEvent):
    """Final event of a failed session."""

    event_type: ClassVar[str] = "error"
    terminal: ClassVar[bool] = True

    message: str = ""

    def to_payload(self) -> dict:
        payload = super().to_payload()
        payload["content"] = self.message
        return payload
