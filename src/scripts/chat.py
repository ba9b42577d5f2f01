"""Stream one chat exchange to the terminal.

Reads ``COZE_API_URL``, ``COZE_AUTH_TOKEN`` and ``COZE_PROJECT_ID`` from
the environment:

    $ python src/scripts/chat.py "What is the weather in Oslo?"
"""

import argparse
import asyncio
import logging
import sys

from cozestudio.config import AgentConfig, ProviderSettings, configure_logging
from cozestudio.emitter import EventEmitter
from cozestudio.errors import CozeStudioError
from cozestudio.events import (
    ContentEvent,
    ErrorEvent,
    StreamEvent,
    ToolCallFinishedEvent,
    ToolCallStartedEvent,
)
from cozestudio.provider import CozeProvider
from cozestudio.session import resolve_title


class TerminalEmitter(EventEmitter):
    def notify(self, event: StreamEvent) -> None:
        if isinstance(event, ContentEvent):
            sys.stdout.write(event.delta)
            sys.stdout.flush()
        elif isinstance(event, ToolCallStartedEvent):
            print(f"\n[tool] {event.call.tool_name} ({event.call.id}) running")
        elif isinstance(event, ToolCallFinishedEvent):
            print(f"\n[tool] {event.call.tool_name} ({event.call.id}) {event.call.status.value}")
        elif isinstance(event, ErrorEvent):
            print(f"\n[error] {event.message}", file=sys.stderr)


async def main(message: str, timeout: float | None) -> int:
    try:
        agent = AgentConfig.from_env()
    except CozeStudioError as e:
        print(e, file=sys.stderr)
        return 2

    provider = CozeProvider(agent, settings=ProviderSettings(timeout=timeout))
    try:
        result = await provider.stream(message, TerminalEmitter())
    except CozeStudioError:
        return 1

    print()
    print(f"Title: {resolve_title(result.title, None, message)}")
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("message")
    parser.add_argument("--timeout", type=float, default=None)
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    configure_logging(logging.DEBUG if args.verbose else logging.WARNING)
    sys.exit(asyncio.run(main(args.message, args.timeout)))
