"""Optional OpenTelemetry instrumentation for cozestudio.

Call ``cozestudio.instrument()`` once at startup to trace chat
exchanges.  Requires ``opentelemetry-api``; the decoder works the same
without it.
"""

import importlib.util
import logging
from contextlib import asynccontextmanager

logger = logging.getLogger(__name__)

_tracer = None


def instrument(*, tracer_name: str = "cozestudio") -> None:
    """Enable OpenTelemetry tracing for chat exchanges.

    Call once at startup, after configuring your TracerProvider.
    Requires ``opentelemetry-api``: ``pip install cozestudio[otel]``

    Example::

        from opentelemetry import trace
        from opentelemetry.sdk.trace import TracerProvider

        trace.set_tracer_provider(TracerProvider())

        import cozestudio
        cozestudio.instrument()

    Args:
        tracer_name: Name passed to ``trace.get_tracer()``.

    Raises:
        ImportError: If ``opentelemetry-api`` is not installed.
    """
    global _tracer
    if importlib.util.find_spec("opentelemetry.trace") is None:
        raise ImportError(
            "opentelemetry-api is required for instrumentation. "
            "Install it with: pip install cozestudio[otel]"
        )
    from opentelemetry import trace
    _tracer = trace.get_tracer(tracer_name)
    if isinstance(_tracer, trace.NoOpTracer):
        logger.info(
            "No TracerProvider configured; spans will be "
            "discarded. Set up a TracerProvider to export "
            "traces."
        )
    else:
        logger.info("cozestudio instrumentation enabled")


def uninstrument() -> None:
    """Disable OpenTelemetry tracing."""
    global _tracer
    _tracer = None


@asynccontextmanager
async def chat_span(project_id: str, api_url: str, streaming: bool = True):
    """Wrap one request/response exchange in a ``chat`` span."""
    if _tracer is None:
        yield None
        return
    from opentelemetry.trace import SpanKind

    with _tracer.start_as_current_span(
        f"chat {project_id}",
        kind=SpanKind.CLIENT,
        attributes={
            "gen_ai.operation.name": "chat",
            "gen_ai.provider.name": "coze",
            "cozestudio.project_id": project_id,
            "cozestudio.streaming": streaming,
            "url.full": api_url,
        },
    ) as span:
        yield span


def record_tool_calls(span, tool_calls) -> None:
    """Record how many tool calls the exchange produced and their ids."""
    if span is None:
        return
    calls = list(tool_calls or [])
    span.set_attribute("cozestudio.tool_calls.count", len(calls))
    if calls:
        span.set_attribute(
            "cozestudio.tool_calls.ids", [c.id for c in calls]
        )


def record_error(span, exception: BaseException) -> None:
    """Record an exception and set ERROR status on a span.

    No-ops when *span* is ``None`` (tracing disabled).
    """
    if span is None:
        return
    from opentelemetry.trace import StatusCode

    span.set_status(StatusCode.ERROR, str(exception))
    span.record_exception(exception)
    span.set_attribute(
        "error.type", type(exception).__qualname__
    )
