"""Tests for the chat dispatch flow around the decoder."""

import httpx
import pytest

from cozestudio.errors import AgentNotFoundError, HttpStatusError
from cozestudio.events import ContentEvent, DoneEvent
from cozestudio.message import MessageRole
from cozestudio.provider import ChatResult, CozeProvider
from cozestudio.runner import ChatRunner
from cozestudio.session import DEFAULT_TITLE
from cozestudio.streaming import ToolCall, ToolCallStatus

from tests.conftest import (
    MemoryAgents,
    MemoryConversations,
    MemoryMessages,
    MockProvider,
    RecordingTransport,
    sse_body,
)

LONG_MESSAGE = "Please summarise the quarterly report for me"


@pytest.fixture
def stores(agent_config):
    return (
        MemoryAgents({"a1": agent_config}),
        MemoryMessages(),
        MemoryConversations({"c1": None}),
    )


def make_runner(stores, provider):
    agents, messages, conversations = stores
    return ChatRunner(
        agents, messages, conversations,
        provider_factory=lambda agent: provider,
    )


class TestSendChatMessage:
    @pytest.mark.asyncio
    async def test_persists_both_messages(self, stores):
        call = ToolCall(id="t1", tool_name="calc", tool_output="42",
                        status=ToolCallStatus.SUCCESS)
        provider = MockProvider(ChatResult(
            full_response="It is 42.", tool_calls=[call],
        ))
        runner = make_runner(stores, provider)

        response = await runner.send_chat_message("a1", "c1", "6*7?")

        assert response == "It is 42."
        assert provider.call_log == ["6*7?"]
        user, assistant = stores[1].saved
        assert user.role is MessageRole.USER
        assert user.content == "6*7?"
        assert user.conversation_id == "c1"
        assert assistant.role is MessageRole.ASSISTANT
        assert assistant.tool_calls == [call]

    @pytest.mark.asyncio
    async def test_unknown_agent(self, stores):
        runner = make_runner(stores, MockProvider())
        with pytest.raises(AgentNotFoundError):
            await runner.send_chat_message("missing", "c1", "hi")
        assert stores[1].saved == []

    @pytest.mark.asyncio
    async def test_backend_title_is_written(self, stores):
        stores[2].titles["c1"] = "Old title"
        provider = MockProvider(ChatResult(full_response="x", title="New"))

        await make_runner(stores, provider).send_chat_message("a1", "c1", "hi")

        assert stores[2].titles["c1"] == "New"

    @pytest.mark.asyncio
    async def test_untitled_gets_fallback(self, stores):
        provider = MockProvider(ChatResult(full_response="x"))

        await make_runner(stores, provider).send_chat_message(
            "a1", "c1", LONG_MESSAGE,
        )

        assert stores[2].titles["c1"] == LONG_MESSAGE[:30] + "..."

    @pytest.mark.asyncio
    async def test_placeholder_gets_fallback(self, stores):
        stores[2].titles["c1"] = DEFAULT_TITLE
        provider = MockProvider(ChatResult(full_response="x"))

        await make_runner(stores, provider).send_chat_message("a1", "c1", "Short")

        assert stores[2].titles["c1"] == "Short"

    @pytest.mark.asyncio
    async def test_existing_title_untouched(self, stores):
        stores[2].titles["c1"] = "Trip plans"
        provider = MockProvider(ChatResult(full_response="x"))

        await make_runner(stores, provider).send_chat_message("a1", "c1", "hi")

        assert stores[2].writes == []

    @pytest.mark.asyncio
    async def test_failure_keeps_user_message_only(self, stores):
        provider = MockProvider(error=HttpStatusError(500, "Internal Server Error"))

        with pytest.raises(HttpStatusError):
            await make_runner(stores, provider).send_chat_message("a1", "c1", "hi")

        assert [m.role for m in stores[1].saved] == [MessageRole.USER]
        assert stores[2].writes == []


def test_default_factory_builds_coze_provider(stores, agent_config):
    agents, messages, conversations = stores
    runner = ChatRunner(agents, messages, conversations)
    provider = runner.provider_factory(agent_config)

    assert isinstance(provider, CozeProvider)
    assert provider.agent is agent_config
    assert provider.settings is runner.settings


@pytest.mark.asyncio
async def test_end_to_end_over_http(stores, recorder):
    agents, messages, conversations = stores
    transport = RecordingTransport([sse_body({"answer": "Hello"})])
    client = httpx.AsyncClient(transport=transport)
    runner = ChatRunner(
        agents, messages, conversations,
        provider_factory=lambda agent: CozeProvider(agent, client=client),
    )

    response = await runner.send_chat_message("a1", "c1", "hi", recorder)

    assert response == "Hello"
    assert [type(e) for e in recorder.events] == [ContentEvent, DoneEvent]
    assert conversations.titles["c1"] == "hi"
