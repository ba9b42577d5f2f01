"""Folds decoded facts into session state and notifies the event sink."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any

from cozestudio.emitter import EventEmitter, NullEmitter, notify_safely
from cozestudio.events import (
    ContentEvent,
    DoneEvent,
    ErrorEvent,
    StreamEvent,
    ToolCallFinishedEvent,
    ToolCallStartedEvent,
)
from cozestudio.extract import (
    ContentDelta,
    Fact,
    TitleUpdate,
    ToolRequest,
    ToolResponse,
    extract_facts,
    extract_legacy_tool_calls,
)
from cozestudio.sse import LineBuffer, parse_frame
from cozestudio.state import SessionState
from cozestudio.streaming import ToolCall

logger = logging.getLogger(__name__)


class SessionAccumulator:
    """Decodes one response body into :class:`SessionState`.

    Feed raw chunks in arrival order with :meth:`feed`, then call
    :meth:`finish` (or :meth:`fail`) exactly once.  Malformed frames,
    missing fields and responses for unknown tool calls are absorbed;
    nothing in the body itself can make this class raise.

    Title updates change state but emit nothing; the title is read off
    :attr:`state` once the stream is over.

    Args:
        emitter: Sink for stream events.  Defaults to a :class:`NullEmitter`.
        scan_legacy_tool_calls: Also register calls found in the older
            ``tool_calls`` array layout.  Only the non-streaming flow
            enables this.
    """

    def __init__(
        self,
        emitter: EventEmitter | None = None,
        scan_legacy_tool_calls: bool = False,
    ):
        self.emitter = emitter or NullEmitter()
        self.scan_legacy_tool_calls = scan_legacy_tool_calls
        self.state = SessionState()
        self._lines = LineBuffer()
        self._terminated = False

    @property
    def terminated(self) -> bool:
        return self._terminated

    def feed(self, chunk: bytes) -> None:
        for line in self._lines.feed(chunk):
            frame = parse_frame(line)
            if frame is not None:
                self.feed_frame(frame)

    def feed_frame(self, frame: Any) -> None:
        for fact in extract_facts(frame):
            self.fold(fact)
        if self.scan_legacy_tool_calls:
            for request in extract_legacy_tool_calls(frame):
                self._register(request)

    def fold(self, fact: Fact) -> None:
        if isinstance(fact, ContentDelta):
            full = self.state.append(fact.text)
            self._emit(ContentEvent(delta=fact.text, full_so_far=full))
        elif isinstance(fact, TitleUpdate):
            self.state.title = fact.title
        elif isinstance(fact, ToolRequest):
            call = self._register(fact)
            if call is not None:
                self._emit(ToolCallStartedEvent(call=replace(call)))
        elif isinstance(fact, ToolResponse):
            self._resolve(fact)

    def finish(self) -> DoneEvent:
        """Emit the ``done`` event carrying the final response."""
        calls = self.state.tool_calls.snapshot()
        event = DoneEvent(
            full_response=self.state.full_response,
            tool_calls=calls or None,
        )
        self._terminate(event)
        return event

    def fail(self, message: str) -> ErrorEvent:
        """Emit the ``error`` event that ends a failed session."""
        event = ErrorEvent(message=message)
        self._terminate(event)
        return event

    def _register(self, request: ToolRequest) -> ToolCall | None:
        call = ToolCall(
            id=request.call_id,
            tool_name=request.tool_name,
            tool_input=request.tool_input,
        )
        if not self.state.tool_calls.register(call):
            logger.debug(f"Ignoring duplicate tool request {request.call_id}")
            return None
        return call

    def _resolve(self, response: ToolResponse) -> None:
        registry = self.state.tool_calls
        call = registry.resolve(response.call_id, response.status, response.output)
        if call is None:
            logger.debug(
                f"Ignoring tool response for unknown or finished call "
                f"{response.call_id}"
            )
            return
        self._emit(ToolCallFinishedEvent(
            call=replace(call), all_calls=registry.snapshot(),
        ))

    def _terminate(self, event: StreamEvent) -> None:
        if self._terminated:
            raise RuntimeError("session already received its terminal event")
        self._terminated = True
        self._emit(event)

    def _emit(self, event: StreamEvent) -> None:
        notify_safely(self.emitter, event)

