import json

import httpx
import pytest

from cozestudio.config import AgentConfig
from cozestudio.emitter import EventEmitter
from cozestudio.events import StreamEvent
from cozestudio.message import Message
from cozestudio.provider import ChatProvider, ChatResult
from cozestudio.runner import AgentDirectory, ConversationStore, MessageStore


# ---------------------------------------------------------------------------
# Frame builders
# ---------------------------------------------------------------------------

def frame(payload) -> str:
    """One ``data:`` line carrying *payload* as JSON."""
    return f"data: {json.dumps(payload)}\n"


def sse_body(*payloads) -> bytes:
    return "".join(frame(p) for p in payloads).encode("utf-8")


def tool_request_frame(call_id, tool_name="calc", parameters=None) -> dict:
    request = {"tool_call_id": call_id, "tool_name": tool_name}
    if parameters is not None:
        request["parameters"] = parameters
    return {"type": "tool_request", "content": {"tool_request": request}}


def tool_response_frame(call_id, code="0", result="42") -> dict:
    response = {"tool_call_id": call_id, "code": code}
    if result is not None:
        response["result"] = result
    return {"type": "tool_response", "content": {"tool_response": response}}


def split_every(data: bytes, size: int) -> list[bytes]:
    return [data[i:i + size] for i in range(0, len(data), size)]


# ---------------------------------------------------------------------------
# Event sinks
# ---------------------------------------------------------------------------

class RecordingEmitter(EventEmitter):
    """Collects every event it is notified of."""

    def __init__(self):
        self.events: list[StreamEvent] = []

    def notify(self, event: StreamEvent) -> None:
        self.events.append(event)

    def of_type(self, event_cls):
        return [e for e in self.events if isinstance(e, event_cls)]


class FailingEmitter(RecordingEmitter):
    """Records events, then raises as if the UI went away."""

    def notify(self, event: StreamEvent) -> None:
        super().notify(event)
        raise ConnectionError("window closed")


# ---------------------------------------------------------------------------
# HTTP transport doubles
# ---------------------------------------------------------------------------

class ChunkedStream(httpx.AsyncByteStream):
    """Yields pre-split chunks; optionally fails after them."""

    def __init__(self, chunks: list[bytes], error: Exception | None = None):
        self.chunks = chunks
        self.error = error
        self.read = False

    async def __aiter__(self):
        self.read = True
        for chunk in self.chunks:
            yield chunk
        if self.error is not None:
            raise self.error


class RecordingTransport(httpx.MockTransport):
    """MockTransport answering every request with the same stream."""

    def __init__(self, chunks=None, status_code=200, error=None):
        self.stream = ChunkedStream(chunks or [], error)
        self.status_code = status_code
        self.requests: list[httpx.Request] = []
        super().__init__(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, stream=self.stream)


# ---------------------------------------------------------------------------
# Collaborator doubles
# ---------------------------------------------------------------------------

class MemoryAgents(AgentDirectory):
    def __init__(self, agents: dict[str, AgentConfig] | None = None):
        self.agents = agents or {}

    def get_agent(self, agent_id):
        return self.agents.get(agent_id)


class MemoryMessages(MessageStore):
    def __init__(self):
        self.saved: list[Message] = []

    def save_message(self, message):
        self.saved.append(message)


class MemoryConversations(ConversationStore):
    def __init__(self, titles: dict[str, str | None] | None = None):
        self.titles = titles or {}
        self.writes: list[tuple[str, str]] = []

    def get_title(self, conversation_id):
        return self.titles.get(conversation_id)

    def set_title(self, conversation_id, title):
        self.titles[conversation_id] = title
        self.writes.append((conversation_id, title))


class MockProvider(ChatProvider):
    """Provider that returns a pre-queued result. No network calls."""

    def __init__(self, result: ChatResult | None = None, error=None):
        self.result = result or ChatResult(full_response="")
        self.error = error
        self.call_log: list[str] = []

    async def stream(self, message, emitter=None):
        self.call_log.append(message)
        if self.error is not None:
            raise self.error
        return self.result

    async def complete(self, message):
        return await self.stream(message)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def agent_config():
    return AgentConfig(
        api_url="https://api.example.test/v1/chat",
        auth_token="tok-123",
        project_id="proj-9",
        name="Helper",
    )


@pytest.fixture
def recorder():
    return RecordingEmitter()
