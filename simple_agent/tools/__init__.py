from __future__ import annotations
import logging
import threading
from typing import Callable, Dict, Iterable, List, Optional, Protocol

from ..logger import null_logger
from .extract import extract_tool_calls
from .filesystem import FileOperationExecutor
from .shell import ShellCommandExecutor, SHELL_TIMEOUT_SECONDS
from .types import (
    TOOL_CATALOG,
    TOOL_FILE_OPERATION,
    TOOL_SHELL_COMMAND,
    ToolInvocation,
    ToolResult,
)

__all__ = [
    "TOOL_CATALOG",
    "TOOL_FILE_OPERATION",
    "TOOL_SHELL_COMMAND",
    "ToolInvocation",
    "ToolResult",
    "ToolExecutor",
    "LocalToolExecutor",
    "ToolDispatcher",
    "extract_tool_calls",
    "format_tool_results",
]


class ToolExecutor(Protocol):
    """Capability the dispatcher routes to; swap in fakes or sandboxes."""

    def file_operation(self, tool: ToolInvocation) -> ToolResult: ...

    def shell_command(self, tool: ToolInvocation) -> ToolResult: ...


class LocalToolExecutor:
    """Executes tools on the local machine, rooted at a working directory."""

    def __init__(self, root: str = ".", shell_timeout: float = SHELL_TIMEOUT_SECONDS,
                 cancel_event: Optional[threading.Event] = None):
        self.root = root
        self.files = FileOperationExecutor(root)
        self.shell = ShellCommandExecutor(root, timeout=shell_timeout, cancel_event=cancel_event)

    def file_operation(self, tool: ToolInvocation) -> ToolResult:
        return self.files.execute(tool)

    def shell_command(self, tool: ToolInvocation) -> ToolResult:
        return self.shell.execute(tool)


class ToolDispatcher:
    def __init__(self, executor: ToolExecutor,
                 enabled: Iterable[str] = (TOOL_FILE_OPERATION, TOOL_SHELL_COMMAND),
                 logger: Optional[logging.Logger] = None):
        self.executor = executor
        self.enabled = set(enabled)
        self.logger = logger or null_logger()
        self._routes: Dict[str, Callable[[ToolInvocation], ToolResult]] = {
            TOOL_FILE_OPERATION: lambda t: self.executor.file_operation(t),
            TOOL_SHELL_COMMAND: lambda t: self.executor.shell_command(t),
        }

    def dispatch(self, tool: ToolInvocation) -> ToolResult:
        route = self._routes.get(tool.type)
        if route is None:
            res = ToolResult(error=f"unknown tool type: {tool.type}")
        elif tool.type not in self.enabled:
            res = ToolResult(error=f"tool type not enabled: {tool.type}")
        else:
            self.logger.info("executing tool %s/%s args=%s", tool.type, tool.name, tool.args)
            try:
                res = route(tool)
            except Exception as e:
                self.logger.exception("tool %s/%s raised", tool.type, tool.name)
                res = ToolResult(error=f"{type(e).__name__}: {e}")
        if res.error:
            self.logger.warning("tool %s/%s failed: %s", tool.type, tool.name, res.error)
        else:
            self.logger.info("tool %s/%s succeeded (%d chars)", tool.type, tool.name, len(res.result))
        return res

    def dispatch_all(self, tools: Iterable[ToolInvocation]) -> List[ToolResult]:
        return [self.dispatch(t) for t in tools]


def format_tool_results(results: Iterable[ToolResult]) -> str:
    """Render one tool-role message; the system prompt teaches the model this shape."""
    out = "Tool execution results:\n"
    out += "=======================\n\n"
    for i, res in enumerate(results, 1):
        out += f"Tool call {i}:\n"
        if res.error:
            out += "Status: failure\n"
            out += f"Error: {res.error}\n"
        else:
            out += "Status: success\n"
            out += f"Result:\n{res.result}\n"
        out += "\n"
    return out
