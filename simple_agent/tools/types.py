from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict

TOOL_FILE_OPERATION = "file_operation"
TOOL_SHELL_COMMAND = "shell_command"

# Tool catalog shown to the model and by `simple-agent tools`.
TOOL_CATALOG = [
    {
        "type": TOOL_FILE_OPERATION,
        "name": "list",
        "description": "List the contents of a directory",
        "args": {"path": "directory path relative to the working directory (default \".\")"},
        "required": [],
    },
    {
        "type": TOOL_FILE_OPERATION,
        "name": "read",
        "description": "Read a text file (at most 1 MB)",
        "args": {"path": "file path relative to the working directory"},
        "required": ["path"],
    },
    {
        "type": TOOL_FILE_OPERATION,
        "name": "write",
        "description": "Write content to a file, creating parent directories",
        "args": {
            "path": "file path relative to the working directory",
            "content": "full file content",
        },
        "required": ["path", "content"],
    },
    {
        "type": TOOL_SHELL_COMMAND,
        "name": "execute",
        "description": "Run a command with sh -c (30 second limit)",
        "args": {"command": "shell command line"},
        "required": ["command"],
    },
]


@dataclass(frozen=True)
class ToolInvocation:
    """A tool request parsed out of a model reply."""
    type: str
    name: str
    args: Dict[str, Any] = field(default_factory=dict)
    thought: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "ToolInvocation":
        if not isinstance(data, dict):
            raise ValueError(f"tool call must be a JSON object, got {type(data).__name__}")
        tool_type = data.get("type")
        name = data.get("name")
        if not isinstance(tool_type, str) or not tool_type.strip():
            raise ValueError("tool call is missing a non-empty 'type'")
        if not isinstance(name, str) or not name.strip():
            raise ValueError("tool call is missing a non-empty 'name'")
        args = data.get("args")
        if args is None:
            args = {}
        if not isinstance(args, dict):
            raise ValueError("tool call 'args' must be a JSON object")
        thought = data.get("thought") or ""
        return cls(type=tool_type.strip(), name=name.strip(), args=args, thought=str(thought))


@dataclass
class ToolResult:
    result: str = ""
    error: str = ""

    @property
    def ok(self) -> bool:
        return not self.error
