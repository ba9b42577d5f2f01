from cozestudio.accumulator import SessionAccumulator
from cozestudio.config import AgentConfig, ProviderSettings, configure_logging
from cozestudio.emitter import (
    CallbackEmitter,
    EventEmitter,
    NullEmitter,
    QueueEmitter,
)
from cozestudio.errors import (
    AgentNotFoundError,
    CozeStudioError,
    HttpStatusError,
    TransportError,
)
from cozestudio.events import (
    ContentEvent,
    DoneEvent,
    ErrorEvent,
    StreamEvent,
    ToolCallFinishedEvent,
    ToolCallStartedEvent,
)
from cozestudio.instrumentation import instrument, uninstrument
from cozestudio.provider import ChatResult, CozeProvider
from cozestudio.runner import ChatRunner
from cozestudio.streaming import ToolCall, ToolCallRegistry, ToolCallStatus

__all__ = [
    "AgentConfig",
    "AgentNotFoundError",
    "CallbackEmitter",
    "ChatResult",
    "ChatRunner",
    "ContentEvent",
    "CozeProvider",
    "CozeStudioError",
    "DoneEvent",
    "ErrorEvent",
    "EventEmitter",
    "HttpStatusError",
    "NullEmitter",
    "ProviderSettings",
    "QueueEmitter",
    "SessionAccumulator",
    "StreamEvent",
    "ToolCall",
    "ToolCallFinishedEvent",
    "ToolCallRegistry",
    "ToolCallStartedEvent",
    "ToolCallStatus",
    "TransportError",
    "configure_logging",
    "instrument",
    "uninstrument",
]
