from __future__ import annotations
import os
import signal
import subprocess
import threading
import time
from typing import Optional

from .types import ToolInvocation, ToolResult

"""
Tool: shell_command / execute
Description: Run a command line with `sh -c` in the working directory.
Args: {"command": "string"}
Returns: combined stdout/stderr; non-zero exits also report the exit status.
"""

SHELL_TIMEOUT_SECONDS = 30
# Textual filter only, not a sandbox.
DENYLIST = ["rm -rf", "sudo", "su", "chmod 777", "dd if=", "> /dev/"]
_POLL_INTERVAL = 0.1


def blocked_pattern(command: str) -> Optional[str]:
    lowered = command.lower()
    for pattern in DENYLIST:
        if pattern in lowered:
            return pattern
    return None


def _kill(proc: subprocess.Popen) -> None:
    # start_new_session makes the shell's pid the group id; the group can
    # outlive the shell itself (background jobs)
    try:
        os.killpg(proc.pid, signal.SIGKILL)
    except OSError:
        pass
    proc.kill()
    try:
        proc.wait(timeout=5)
    except subprocess.TimeoutExpired:
        pass


class ShellCommandExecutor:
    """Runs shell_command tool calls with a denylist and a wall-clock limit."""

    def __init__(self, root: str = ".", timeout: float = SHELL_TIMEOUT_SECONDS,
                 cancel_event: Optional[threading.Event] = None):
        self.root = root
        self.timeout = timeout
        self.cancel_event = cancel_event

    def execute(self, tool: ToolInvocation) -> ToolResult:
        if tool.name != "execute":
            return ToolResult(error=f"unknown shell operation: {tool.name}")
        command = tool.args.get("command")
        if not isinstance(command, str) or not command.strip():
            return ToolResult(error="missing required argument: command")
        if blocked_pattern(command):
            return ToolResult(error=f"command blocked for safety: {command}")
        return self.run(command)

    def run(self, command: str) -> ToolResult:
        try:
            proc = subprocess.Popen(
                ["sh", "-c", command],
                cwd=self.root,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                start_new_session=True,
            )
        except OSError as e:
            return ToolResult(error=f"failed to start command: {e}")

        # stdout is drained on a helper thread while this one polls
        chunks = []
        reader = threading.Thread(target=lambda: chunks.append(proc.stdout.read()), daemon=True)
        reader.start()

        deadline = time.monotonic() + self.timeout
        try:
            # done only when the shell has exited and stdout hit EOF; a
            # background child can hold the pipe open after `sh` is gone
            while proc.poll() is None or reader.is_alive():
                if reader.is_alive():
                    reader.join(_POLL_INTERVAL)
                else:
                    try:
                        proc.wait(timeout=_POLL_INTERVAL)
                    except subprocess.TimeoutExpired:
                        pass
                if proc.poll() is not None and not reader.is_alive():
                    break
                if time.monotonic() >= deadline:
                    _kill(proc)
                    return ToolResult(error="command execution timed out")
                # set by a caller on another thread; signals arrive as KeyboardInterrupt below
                if self.cancel_event is not None and self.cancel_event.is_set():
                    _kill(proc)
                    return ToolResult(error="command cancelled")
        except BaseException:
            # interrupted while waiting: never leave the child running
            _kill(proc)
            raise
        finally:
            reader.join(timeout=5)
            # close() would block on the buffer lock held by a stuck read()
            if not reader.is_alive():
                proc.stdout.close()

        output = b"".join(chunks).decode("utf-8", errors="replace")
        if proc.returncode != 0:
            return ToolResult(result=output, error=f"exit status {proc.returncode}")
        return ToolResult(result=output)
