from __future__ import annotations
import json
from typing import Iterable

from .tools.types import TOOL_CATALOG

PROMPT_TEMPLATE = """You are a capable assistant powered by the GLM-4.5 model.
You answer questions directly, and you can use local tools when a task needs them.

## TOOL USAGE FORMAT
To use tools, reply with a JSON array inside a ```json fenced block:

```json
[{{
  "type": "tool type",
  "name": "tool name",
  "args": {{"argument": "value"}},
  "thought": "why this call is needed"
}}]
```

Several calls may be listed in one array; they run in order.
Do not put a JSON block in a reply that is a final answer.

## AVAILABLE TOOLS
{tools}

## TOOL RESULTS
After the tools run you receive a message shaped like:

Tool execution results:
=======================

Tool call 1:
Status: success
Result:
<output>

Tool call 2:
Status: failure
Error: <reason>

Use the results to continue. Paths must be relative to the working directory
and may not contain "..". Shell commands time out after 30 seconds.
"""


def describe_tools(enabled: Iterable[str] = None) -> str:
    enabled = set(enabled) if enabled is not None else None
    lines = []
    for entry in TOOL_CATALOG:
        if enabled is not None and entry["type"] not in enabled:
            continue
        lines.append(f"### {entry['type']} / {entry['name']}")
        lines.append(entry["description"])
        for arg, desc in entry["args"].items():
            req = "required" if arg in entry["required"] else "optional"
            lines.append(f"  - {arg} ({req}): {desc}")
        example = {"type": entry["type"], "name": entry["name"],
                   "args": {a: "..." for a in entry["args"]}}
        lines.append(f"Example: {json.dumps(example)}")
        lines.append("")
    return "\n".join(lines).rstrip()


def make_system_prompt(enabled: Iterable[str] = None) -> str:
    return PROMPT_TEMPLATE.format(tools=describe_tools(enabled))


SYSTEM_PROMPT = make_system_prompt()
