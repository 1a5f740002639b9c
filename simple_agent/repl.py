from __future__ import annotations
import os
import readline
import signal
import threading
from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from .config import AgentConfig
from .errors import InputError

HISTORY_LENGTH = 500
PROMPT = "\001\033[94m\002You\001\033[0m\002: "


class SignalWatcher:
    """Turns SIGINT/SIGTERM into cooperative cancellation.

    The handler sets the shared event and raises KeyboardInterrupt so that a
    blocking read or an in-flight request unwinds promptly. Previous handlers
    are restored on exit.
    """

    SIGNALS = (signal.SIGINT, signal.SIGTERM)

    def __init__(self, cancel_event: Optional[threading.Event] = None):
        self.cancel_event = cancel_event or threading.Event()
        self._previous = {}

    def _handle(self, signum, frame):
        self.cancel_event.set()
        raise KeyboardInterrupt(f"received signal {signum}")

    def __enter__(self) -> "SignalWatcher":
        for sig in self.SIGNALS:
            self._previous[sig] = signal.signal(sig, self._handle)
        return self

    def __exit__(self, *exc) -> None:
        for sig, handler in self._previous.items():
            signal.signal(sig, handler)
        self._previous.clear()


class LineReader:
    """Reads operator input with readline editing and a persistent history file."""

    def __init__(self, history_file: Optional[str] = None, prompt: str = PROMPT,
                 cancel_event: Optional[threading.Event] = None):
        self.history_file = history_file
        self.prompt = prompt
        self.cancel_event = cancel_event
        if history_file:
            try:
                os.makedirs(os.path.dirname(history_file) or ".", exist_ok=True)
                if os.path.exists(history_file):
                    readline.read_history_file(history_file)
            except OSError as e:
                raise InputError(f"cannot initialise input history {history_file}: {e}") from e
        readline.set_history_length(HISTORY_LENGTH)

    def __call__(self) -> Optional[str]:
        """Return the next line, or None on end of input, interrupt or cancellation."""
        if self.cancel_event is not None and self.cancel_event.is_set():
            return None
        try:
            return input(self.prompt)
        except (EOFError, KeyboardInterrupt):
            return None

    def close(self) -> None:
        if self.history_file:
            try:
                readline.write_history_file(self.history_file)
            except OSError:
                pass


def print_banner(console: Console, config: AgentConfig) -> None:
    lines = [
        f"[bold]Chatting with {escape(config.model)}[/bold]",
        f"[dim]Working directory: {escape(os.path.abspath(config.workdir))}[/dim]",
        f"[dim]Available tools: {escape(', '.join(config.tools))}[/dim]",
        "[dim]Type 'exit' or 'quit' to leave, /tool for direct tool calls.[/dim]",
    ]
    console.print(Panel("\n".join(lines), title="simple-agent", expand=False))


def repl(agent, reader: LineReader, console: Console) -> None:
    """Run the interactive session until the operator leaves."""
    print_banner(console, agent.config)
    try:
        agent.run(reader)
    except KeyboardInterrupt:
        console.print("\n[dim]Received exit signal, exiting...[/dim]")
    finally:
        reader.close()
