import logging
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from dataclasses import dataclass

import httpx

from cozestudio.accumulator import SessionAccumulator
from cozestudio.config import AgentConfig, ProviderSettings
from cozestudio.emitter import EventEmitter
from cozestudio.errors import HttpStatusError, TransportError
from cozestudio.instrumentation import (
    chat_span,
    record_error,
    record_tool_calls,
)
from cozestudio.streaming import ToolCall

logger = logging.getLogger(__name__)


@dataclass
class ChatResult:
    """Final values of one chat exchange.

    ``tool_calls`` is ``None`` when the backend used no tools.
    """

    full_response: str
    title: str | None = None
    tool_calls: list[ToolCall] | None = None


def build_request_body(message: str, project_id: str) -> dict:
    return {
        "content": {
            "query": {
                "prompt": [
                    {"type": "text", "content": {"text": message}},
                ],
            },
        },
        "type": "query",
        "project_id": project_id,
    }


class ChatProvider(ABC):
    @abstractmethod
    async def stream(
            self,
            message: str,
            emitter: EventEmitter | None = None,
    ) -> ChatResult:
        ...

    @abstractmethod
    async def complete(self, message: str) -> ChatResult:
        ...


class CozeProvider(ChatProvider):
    """Sends one query to a Coze-style backend and decodes the answer.

    Args:
        agent: Endpoint, token and project of the target agent.
        settings: HTTP timeout and extra headers.
        client: Shared ``httpx.AsyncClient``.  When omitted a client is
            opened and closed around each exchange.
    """

    def __init__(
            self,
            agent: AgentConfig,
            settings: ProviderSettings | None = None,
            client: httpx.AsyncClient | None = None,
    ):
        self.agent = agent
        self.settings = settings or ProviderSettings()
        self.client = client

    @property
    def headers(self) -> dict[str, str]:
        return {
            **self.settings.headers,
            "Authorization": f"Bearer {self.agent.auth_token}",
            "Content-Type": "application/json",
        }

    async def stream(
            self,
            message: str,
            emitter: EventEmitter | None = None,
    ) -> ChatResult:
        """Stream the answer, notifying *emitter* as facts arrive.

        Emits exactly one ``done`` or ``error`` event.

        Raises:
            HttpStatusError: The backend answered with a non-2xx status.
                The body is not read.
            TransportError: The connection failed before or during the body.
        """
        return await self._exchange(
            message,
            SessionAccumulator(emitter),
            streaming=True,
        )

    async def complete(self, message: str) -> ChatResult:
        """Read the whole answer without emitting events.

        Unlike :meth:`stream` this also picks up tool calls sent in the
        older ``tool_calls`` array layout.
        """
        return await self._exchange(
            message,
            SessionAccumulator(scan_legacy_tool_calls=True),
            streaming=False,
        )

    @asynccontextmanager
    async def _client(self):
        if self.client is not None:
            yield self.client
            return
        async with httpx.AsyncClient(timeout=self.settings.timeout) as client:
            yield client

    async def _exchange(
            self,
            message: str,
            acc: SessionAccumulator,
            streaming: bool,
    ) -> ChatResult:
        body = build_request_body(message, self.agent.project_id)
        async with chat_span(
            self.agent.project_id, self.agent.api_url, streaming=streaming,
        ) as span:
            try:
                async with self._client() as client:
                    async with client.stream(
                        "POST",
                        self.agent.api_url,
                        json=body,
                        headers=self.headers,
                    ) as response:
                        if not response.is_success:
                            error = HttpStatusError(
                                response.status_code, response.reason_phrase,
                            )
                            logger.error(str(error))
                            acc.fail(str(error))
                            record_error(span, error)
                            raise error
                        async for chunk in response.aiter_bytes():
                            acc.feed(chunk)
            except (httpx.HTTPError, httpx.StreamError) as e:
                error = TransportError(
                    f"Request to {self.agent.api_url} failed: "
                    f"{str(e) or type(e).__name__}"
                )
                logger.error(str(error))
                acc.fail(str(error))
                record_error(span, error)
                raise error from e

            acc.finish()
            state = acc.state
            tool_calls = state.tool_calls.snapshot() or None
            record_tool_calls(span, tool_calls)
            return ChatResult(
                full_response=state.full_response,
                title=state.title,
                tool_calls=tool_calls,
            )
