"""Turn decoded backend frames into semantic facts.

The backend is loose about where it puts things: an answer delta may sit
at the root, under ``content``, or be ``content`` itself; a title may
arrive in three different places.  :func:`extract_facts` probes those
layouts in a fixed priority order and simply yields nothing for a rule
whose fields are missing or have the wrong type.

Rules are independent, so one frame can produce a content delta, a title
and a tool fact at the same time.  Facts come out in rule order.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from cozestudio.streaming import ToolCallStatus, truncate_output


@dataclass
class ContentDelta:
    text: str


@dataclass
class TitleUpdate:
    title: str


@dataclass
class ToolRequest:
    call_id: str
    tool_name: str = "Unknown"
    tool_input: str = ""


@dataclass
class ToolResponse:
    call_id: str
    status: ToolCallStatus
    output: str | None = None


Fact = ContentDelta | TitleUpdate | ToolRequest | ToolResponse


def _get(value: Any, key: str) -> Any:
    if isinstance(value, dict):
        return value.get(key)
    return None


def _get_str(value: Any, key: str) -> str | None:
    found = _get(value, key)
    return found if isinstance(found, str) else None


def _str_or(value: Any, key: str, default: str) -> str:
    found = _get_str(value, key)
    return default if found is None else found


def _content_delta(frame: Any, msg_type: str) -> str | None:
    answer = _get_str(frame, "answer")
    if answer is not None:
        return answer
    content = _get(frame, "content")
    answer = _get_str(content, "answer")
    if answer is not None:
        return answer
    if isinstance(content, str) and (
        msg_type == "answer" or _get_str(frame, "role") == "assistant"
    ):
        return content
    return None


def _title(frame: Any, msg_type: str) -> str | None:
    title = _get_str(frame, "title")
    if title is not None:
        return title
    if msg_type == "title":
        content = _get(frame, "content")
        return content if isinstance(content, str) else None
    return _get_str(_get(frame, "content"), "title")


def _tool_request(frame: Any) -> ToolRequest | None:
    request = _get(_get(frame, "content"), "tool_request")
    call_id = _get_str(request, "tool_call_id")
    if call_id is None:
        return None
    tool_input = ""
    if "parameters" in request:
        tool_input = json.dumps(
            request["parameters"], indent=2, ensure_ascii=False,
        )
    return ToolRequest(
        call_id=call_id,
        tool_name=_str_or(request, "tool_name", "Unknown"),
        tool_input=tool_input,
    )


def _tool_response(frame: Any) -> ToolResponse | None:
    response = _get(_get(frame, "content"), "tool_response")
    call_id = _get_str(response, "tool_call_id")
    if call_id is None:
        return None
    code = _str_or(response, "code", "0")
    result = _get_str(response, "result")
    return ToolResponse(
        call_id=call_id,
        status=ToolCallStatus.SUCCESS if code == "0" else ToolCallStatus.ERROR,
        output=truncate_output(result) if result is not None else None,
    )


def extract_facts(frame: Any) -> list[Fact]:
    """Extract every fact one decoded frame carries."""
    facts: list[Fact] = []
    msg_type = _get_str(frame, "type") or ""

    delta = _content_delta(frame, msg_type)
    if delta:
        facts.append(ContentDelta(delta))

    title = _title(frame, msg_type)
    if title is not None:
        facts.append(TitleUpdate(title))

    if msg_type == "tool_request":
        request = _tool_request(frame)
        if request is not None:
            facts.append(request)

    if msg_type == "tool_response":
        response = _tool_response(frame)
        if response is not None:
            facts.append(response)

    return facts


def extract_legacy_tool_calls(frame: Any) -> list[ToolRequest]:
    """Scan the older ``tool_calls`` array layout.

    The array may sit at the root or under an object-valued ``content``.
    Only the non-streaming flow consults this layout.
    """
    targets = [frame]
    content = _get(frame, "content")
    if isinstance(content, dict):
        targets.append(content)

    requests = []
    for target in targets:
        calls = _get(target, "tool_calls")
        if not isinstance(calls, list):
            continue
        for item in calls:
            call_id = _get_str(item, "id")
            if call_id is None:
                continue
            tool_input = ""
            if "args" in item:
                tool_input = json.dumps(
                    item["args"], separators=(",", ":"), ensure_ascii=False,
                )
            requests.append(ToolRequest(
                call_id=call_id,
                tool_name=_str_or(item, "name", "Unknown"),
                tool_input=tool_input,
            ))
    return requests
