"""Server-Sent Events framing in both directions.

:class:`LineBuffer` and :func:`parse_frame` decode the backend's
``data: <json>`` stream; :func:`sse_generator` re-encodes decoded events
for hosts that forward them over SSE.
"""

from __future__ import annotations

import json
import logging
from collections.abc import AsyncIterator
from typing import Any

from cozestudio.events import StreamEvent

logger = logging.getLogger(__name__)

FRAME_PREFIX = "data: "


class LineBuffer:
    """Reassembles newline-delimited lines from arbitrary byte chunks.

    Each chunk is decoded on its own with replacement characters, so a
    multi-byte character split across two chunks comes out as U+FFFD.
    Whatever follows the last newline is carried into the next call and
    is never emitted if the stream ends without a newline.
    """

    def __init__(self) -> None:
        self._buffer = ""

    def feed(self, chunk: bytes) -> list[str]:
        self._buffer += chunk.decode("utf-8", errors="replace")
        *lines, self._buffer = self._buffer.split("\n")
        return [line.strip() for line in lines]


def parse_frame(line: str) -> Any | None:
    """Decode one ``data:`` line into a JSON value.

    Returns ``None`` for keep-alives, comments and frames whose payload
    is not valid JSON.
    """
    if not line.startswith(FRAME_PREFIX):
        return None
    try:
        return json.loads(line[len(FRAME_PREFIX):])
    except (ValueError, RecursionError) as e:
        logger.debug(f"Dropping malformed frame: {e}")
        return None


async def sse_generator(
    event_stream: AsyncIterator[StreamEvent],
) -> AsyncIterator[str]:
    """Convert a StreamEvent async iterator into SSE-formatted strings."""
    async for event in event_stream:
        data = json.dumps(event.to_payload(), ensure_ascii=False)
        yield f"event: {event.event_type}\ndata: {data}\n\n"
