"""The chat dispatch flow that sits around the decoder.

:class:`ChatRunner` does what the desktop app's send command does: find
the agent, store the user's message, stream the answer, store the
assistant's message, then settle the conversation title.  Storage is the
host's business; it plugs in through the three abstract collaborators
below.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable

from cozestudio.config import AgentConfig, ProviderSettings
from cozestudio.emitter import EventEmitter
from cozestudio.errors import AgentNotFoundError
from cozestudio.message import Message, MessageRole
from cozestudio.provider import ChatProvider, CozeProvider
from cozestudio.session import resolve_title

logger = logging.getLogger(__name__)


class AgentDirectory(ABC):
    @abstractmethod
    def get_agent(self, agent_id: str) -> AgentConfig | None:
        ...


class MessageStore(ABC):
    @abstractmethod
    def save_message(self, message: Message) -> None:
        ...


class ConversationStore(ABC):
    @abstractmethod
    def get_title(self, conversation_id: str) -> str | None:
        ...

    @abstractmethod
    def set_title(self, conversation_id: str, title: str) -> None:
        ...


class ChatRunner:
    """Runs one chat exchange end to end.

    Args:
        agents: Looks up connection details by agent id.
        messages: Persists user and assistant messages.
        conversations: Reads and writes conversation titles.
        provider_factory: Builds the provider for an agent.  Defaults to
            :class:`CozeProvider` with *settings*.
        settings: HTTP settings for the default provider factory.
    """

    def __init__(
        self,
        agents: AgentDirectory,
        messages: MessageStore,
        conversations: ConversationStore,
        provider_factory: Callable[[AgentConfig], ChatProvider] | None = None,
        settings: ProviderSettings | None = None,
    ):
        self.agents = agents
        self.messages = messages
        self.conversations = conversations
        self.settings = settings or ProviderSettings()
        self.provider_factory = provider_factory or self._default_provider

    def _default_provider(self, agent: AgentConfig) -> ChatProvider:
        return CozeProvider(agent, settings=self.settings)

    async def send_chat_message(
        self,
        agent_id: str,
        conversation_id: str,
        message: str,
        emitter: EventEmitter | None = None,
    ) -> str:
        """Send *message* and return the assistant's full response.

        Request failures propagate after the error event was emitted; the
        user's message is already stored at that point, the assistant's
        is not.
        """
        agent = self.agents.get_agent(agent_id)
        if agent is None:
            raise AgentNotFoundError(f"Agent not found: {agent_id}")

        self.messages.save_message(Message(
            conversation_id=conversation_id,
            role=MessageRole.USER,
            content=message,
        ))

        provider = self.provider_factory(agent)
        result = await provider.stream(message, emitter)

        self.messages.save_message(Message(
            conversation_id=conversation_id,
            role=MessageRole.ASSISTANT,
            content=result.full_response,
            tool_calls=result.tool_calls,
        ))

        stored = None
        if result.title is None:
            stored = self.conversations.get_title(conversation_id)
        title = resolve_title(result.title, stored, message)
        if title is not None:
            logger.info(f"Setting title of {conversation_id} to {title!r}")
            self.conversations.set_title(conversation_id, title)

        return result.full_response
