"""
Find tool calls embedded in a model reply.

The model is asked to answer with a ```json fenced array, but replies vary, so
the payload is looked up with a fallback chain (first match wins):

  1. a ```json fenced block
  2. any fenced block
  3. a bare array starting with `[{`
  4. a bare object starting with `{`

The candidate is decoded as a list of tool calls, or failing that as a single
tool call. Anything else means the reply is a final answer.
"""
from __future__ import annotations
import json
import logging
from typing import List, Optional, Tuple

from ..logger import null_logger
from .types import ToolInvocation

FENCE = "```"
JSON_FENCE = "```json"


def _fenced_json(text: str) -> Optional[str]:
    start = text.find(JSON_FENCE)
    if start == -1:
        return None
    body_start = start + len(JSON_FENCE)
    end = text.find(FENCE, body_start)
    if end == -1:
        return None
    return text[body_start:end].strip()


def _fenced_any(text: str) -> Optional[str]:
    start = text.find(FENCE)
    if start == -1:
        return None
    body_start = start + len(FENCE)
    end = text.find(FENCE, body_start)
    if end == -1:
        return None
    body = text[body_start:end]
    # drop a language tag on the opening line, e.g. ```javascript
    first, sep, rest = body.partition("\n")
    if sep and first.strip() and " " not in first.strip() and first.strip()[0] not in "[{":
        body = rest
    return body.strip()


def _matching_span(text: str, start: int, open_ch: str, close_ch: str) -> Optional[str]:
    """Return text[start:end] where end closes the bracket opened at start.

    Characters inside JSON string literals are skipped so that a value like
    "a]b" does not end the span early.
    """
    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == open_ch:
            depth += 1
        elif ch == close_ch:
            depth -= 1
            if depth == 0:
                return text[start:i + 1].strip()
    return None


def _bare_array(text: str) -> Optional[str]:
    start = text.find("[{")
    if start == -1:
        return None
    return _matching_span(text, start, "[", "]")


def _bare_object(text: str) -> Optional[str]:
    start = text.find("{")
    if start == -1:
        return None
    return _matching_span(text, start, "{", "}")


_FINDERS = (_fenced_json, _fenced_any, _bare_array, _bare_object)


def find_payload(text: str) -> Optional[str]:
    for finder in _FINDERS:
        candidate = finder(text)
        if candidate:
            return candidate
    return None


def parse_payload(payload: str) -> List[ToolInvocation]:
    """Decode a candidate payload; raises ValueError when it is not a tool call."""
    data = json.loads(payload)
    if isinstance(data, list):
        return [ToolInvocation.from_dict(item) for item in data]
    return [ToolInvocation.from_dict(data)]


def extract_tool_calls(text: str, logger: Optional[logging.Logger] = None
                       ) -> Tuple[List[ToolInvocation], bool]:
    log = logger or null_logger()
    log.debug("extracting tool calls from reply (%d chars)", len(text or ""))

    payload = find_payload(text or "")
    if payload is None:
        log.info("no tool call payload found")
        return [], False

    try:
        tools = parse_payload(payload)
    except ValueError as e:
        # json.JSONDecodeError is a ValueError
        log.warning("could not parse tool call: %s; raw payload: %s", e, payload)
        return [], False

    log.info("extracted %d tool call(s)", len(tools))
    return tools, len(tools) > 0
