"""Sinks that deliver stream events to whatever is listening.

Delivery is best effort.  The decoder calls :func:`notify_safely`, so a
sink that raises (a closed window, a dropped socket) never interrupts
decoding.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Callable

from cozestudio.events import StreamEvent

logger = logging.getLogger(__name__)


class EventEmitter(ABC):
    """Receives every event the decoder produces, in order."""

    @abstractmethod
    def notify(self, event: StreamEvent) -> None:
        ...


class NullEmitter(EventEmitter):
    def notify(self, event: StreamEvent) -> None:
        pass


class CallbackEmitter(EventEmitter):
    """Forwards wire payloads to a host ``emit(channel, payload)`` callable.

    Args:
        callback: Called as ``callback(channel, payload)`` per event.
        channel: Event name the host listens on.
    """

    def __init__(
        self,
        callback: Callable[[str, dict], object],
        channel: str = "chat-stream",
    ):
        self.callback = callback
        self.channel = channel

    def notify(self, event: StreamEvent) -> None:
        self.callback(self.channel, event.to_payload())


class QueueEmitter(EventEmitter):
    """Buffers events so a consumer task can iterate over them.

    ``events()`` ends right after the terminal event has been yielded.
    """

    def __init__(self) -> None:
        self._queue: asyncio.Queue[StreamEvent] = asyncio.Queue()

    def notify(self, event: StreamEvent) -> None:
        self._queue.put_nowait(event)

    async def events(self) -> AsyncIterator[StreamEvent]:
        while True:
            event = await self._queue.get()
            yield event
            if event.terminal:
                return


def notify_safely(emitter: EventEmitter, event: StreamEvent) -> None:
    try:
        emitter.notify(event)
    except Exception:
        logger.warning(
            f"Event sink failed on {event.event_type} event", exc_info=True,
        )
