"""Tool-call lifecycle tracking for a single chat stream.

The backend announces a tool call with a ``tool_request`` frame and
resolves it later with a ``tool_response`` frame.  The
:class:`ToolCallRegistry` keeps those calls in first-seen order and makes
sure each one is created once and resolved at most once.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, replace
from enum import Enum

MAX_TOOL_OUTPUT_CHARS = 1_000_000
TRUNCATION_SUFFIX = "...(truncated)"


class ToolCallStatus(str, Enum):
    RUNNING = "running"
    SUCCESS = "success"
    ERROR = "error"


@dataclass
class ToolCall:
    """A tool invocation requested by the backend."""

    id: str
    tool_name: str = "Unknown"
    tool_input: str = ""
    tool_output: str | None = None
    status: ToolCallStatus = ToolCallStatus.RUNNING

    @property
    def finished(self) -> bool:
        return self.status is not ToolCallStatus.RUNNING

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "tool_name": self.tool_name,
            "tool_input": self.tool_input,
            "tool_output": self.tool_output,
            "status": self.status.value,
        }


def truncate_output(output: str, limit: int = MAX_TOOL_OUTPUT_CHARS) -> str:
    """Cap *output* at *limit* characters, keeping the head."""
    if len(output) > limit:
        return output[:limit] + TRUNCATION_SUFFIX
    return output


class ToolCallRegistry:
    """Insertion-ordered tool calls, unique by id."""

    def __init__(self) -> None:
        self._calls: list[ToolCall] = []
        self._index: dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._calls)

    def __iter__(self) -> Iterator[ToolCall]:
        return iter(self._calls)

    def __contains__(self, call_id: object) -> bool:
        return call_id in self._index

    def get(self, call_id: str) -> ToolCall | None:
        position = self._index.get(call_id)
        if position is None:
            return None
        return self._calls[position]

    def register(self, call: ToolCall) -> bool:
        """Append *call* unless its id is already known.

        Returns ``True`` when the call was added.  A duplicate request
        never resets a call that is in flight or already finished.
        """
        if call.id in self._index:
            return False
        self._index[call.id] = len(self._calls)
        self._calls.append(call)
        return True

    def resolve(
        self, call_id: str, status: ToolCallStatus, output: str | None,
    ) -> ToolCall | None:
        """Move a running call to its terminal *status*.

        Returns the updated call, or ``None`` when the id is unknown or
        the call has already left ``RUNNING``.
        """
        call = self.get(call_id)
        if call is None or call.finished:
            return None
        call.status = status
        call.tool_output = output
        return call

    def snapshot(self) -> list[ToolCall]:
        """Copies of every call, in first-seen order."""
        return [replace(call) for call in self._calls]
