from __future__ import annotations
import os
from typing import Any, Dict

from ..errors import ToolError
from .types import ToolInvocation, ToolResult

"""
Tool: file_operation / list
Description: List a directory as a name/type/size table.
Args: {"path": "relative/dir"}   (default ".")

Tool: file_operation / read
Description: Read a text file of at most 1 MiB; larger files are refused.
Args: {"path": "relative/path"}

Tool: file_operation / write
Description: Create or overwrite a file, creating parent directories.
Args: {"path": "relative/path", "content": "string"}
"""

MAX_READ_BYTES = 1024 * 1024  # 1 MiB


def check_path(path: Any) -> str:
    """Relative paths only, no parent escape."""
    if not isinstance(path, str):
        raise ToolError("path must be a string")
    if ".." in path or path.startswith("/"):
        raise ToolError(f"access to parent directories or absolute paths is not allowed: {path}")
    return path


def _abs(root: str, path: str) -> str:
    return os.path.join(root, check_path(path))


def format_size(size: int) -> str:
    if size > 1024 * 1024:
        return f"{size / 1024 / 1024:.2f} MB"
    if size > 1024:
        return f"{size / 1024:.2f} KB"
    return f"{size} bytes"


def list_dir(root: str, path: str = ".") -> str:
    ap = _abs(root, path)
    if not os.path.exists(ap):
        raise ToolError(f"cannot access {path}: no such file or directory")
    if not os.path.isdir(ap):
        raise ToolError(f"{path} is not a directory")
    try:
        entries = sorted(os.scandir(ap), key=lambda e: e.name)
        rows = []
        for entry in entries:
            # lstat semantics: a dangling symlink is listed, not an error
            is_dir = entry.is_dir(follow_symlinks=False)
            size = entry.stat(follow_symlinks=False).st_size
            rows.append(f"{entry.name}\t{'directory' if is_dir else 'file'}\t{format_size(size)}")
    except OSError as e:
        raise ToolError(f"cannot read directory {path}: {e.strerror or e}")

    lines = [f"Contents of directory {path}:", "Name\tType\tSize", "----\t----\t----"]
    lines.extend(rows)
    return "\n".join(lines) + "\n"


def read_file(root: str, path: str) -> str:
    ap = _abs(root, path)
    if not os.path.exists(ap):
        raise ToolError(f"cannot access {path}: no such file or directory")
    if os.path.isdir(ap):
        raise ToolError(f"{path} is a directory, not a file")
    try:
        size = os.path.getsize(ap)
        if size > MAX_READ_BYTES:
            raise ToolError(f"file {path} is too large ({size} bytes); the limit is {MAX_READ_BYTES} bytes")
        with open(ap, "rb") as f:
            data = f.read(MAX_READ_BYTES + 1)
        if len(data) > MAX_READ_BYTES:
            raise ToolError(f"file {path} is too large; the limit is {MAX_READ_BYTES} bytes")
    except OSError as e:
        raise ToolError(f"cannot read file {path}: {e.strerror or e}")
    return data.decode("utf-8", errors="replace")


def write_file(root: str, path: str, content: str) -> str:
    ap = _abs(root, path)
    if not isinstance(content, str):
        raise ToolError("content must be a string")
    parent = os.path.dirname(ap)
    try:
        if parent:
            os.makedirs(parent, exist_ok=True)
    except OSError as e:
        raise ToolError(f"cannot create directory for {path}: {e.strerror or e}")
    try:
        with open(ap, "w", encoding="utf-8") as f:
            f.write(content)
    except OSError as e:
        raise ToolError(f"cannot write file {path}: {e.strerror or e}")
    return f"wrote {len(content)} characters to {path}"


def _required(args: Dict[str, Any], key: str) -> Any:
    if key not in args or args[key] is None:
        raise ToolError(f"missing required argument: {key}")
    return args[key]


class FileOperationExecutor:
    """Runs file_operation tool calls against a root directory."""

    def __init__(self, root: str = "."):
        self.root = root
        self._ops = {
            "list": lambda a: list_dir(self.root, a.get("path") or "."),
            "read": lambda a: read_file(self.root, _required(a, "path")),
            "write": lambda a: write_file(self.root, _required(a, "path"), _required(a, "content")),
        }

    @property
    def operations(self):
        return sorted(self._ops)

    def execute(self, tool: ToolInvocation) -> ToolResult:
        op = self._ops.get(tool.name)
        if op is None:
            return ToolResult(error=f"unknown file operation: {tool.name}")
        try:
            return ToolResult(result=op(tool.args))
        except ToolError as e:
            return ToolResult(error=str(e))
