from __future__ import annotations
import json
import logging
from typing import Callable, List, Optional

from rich.console import Console
from rich.markup import escape
from rich.text import Text

from .config import AgentConfig
from .errors import InferenceError
from .logger import null_logger
from .messages import Message, Transcript, ROLE_ASSISTANT, ROLE_TOOL, ROLE_USER
from .tools import (
    LocalToolExecutor,
    ToolDispatcher,
    ToolExecutor,
    ToolInvocation,
    ToolResult,
    extract_tool_calls,
    format_tool_results,
)

EXIT_WORDS = ("exit", "quit")
TOOL_COMMAND = "/tool"
TOOL_USAGE = "usage: /tool <type> <name> [json-args]"


class Agent:
    """Conversation loop: user turn -> inference -> tool rounds -> reply."""

    def __init__(self, config: AgentConfig, client,
                 executor: Optional[ToolExecutor] = None,
                 logger: Optional[logging.Logger] = None,
                 console: Optional[Console] = None):
        self.config = config
        self.client = client
        self.logger = logger or null_logger()
        self.console = console or Console()
        if executor is None:
            executor = LocalToolExecutor(config.workdir, shell_timeout=config.shell_timeout)
        self.tools = ToolDispatcher(executor, enabled=config.tools, logger=self.logger)
        self.transcript = Transcript(config.system_prompt)

    # ---------- Input routing ----------
    def handle_input(self, line: str) -> bool:
        """Process one line of operator input. Returns False when the session should end."""
        text = line.strip()
        if text in EXIT_WORDS:
            return False
        if not text:
            return True
        if text.split()[0] == TOOL_COMMAND:
            self.run_tool_command(text)
            return True
        self.process_turn(text)
        return True

    def run(self, read_line: Callable[[], Optional[str]]) -> None:
        while True:
            line = read_line()
            if line is None:
                break
            if not self.handle_input(line):
                break
        self.logger.info("conversation loop finished")

    # ---------- Conversation ----------
    def _infer(self) -> Message:
        with self.console.status("[dim]Waiting for the model...[/dim]"):
            return self.client.complete(self.transcript)

    def process_turn(self, text: str) -> Optional[Message]:
        mark = self.transcript.mark()
        self.transcript.append(ROLE_USER, text)
        self.logger.info("user turn (%d chars)", len(text))
        try:
            reply = self._run_tool_rounds(self._infer())
        except InferenceError as e:
            self.logger.error("turn abandoned: %s", e)
            self.console.print(f"[red]Error:[/red] {escape(str(e))}")
            self.transcript.rollback(mark)
            return None

        msg = self.transcript.append(ROLE_ASSISTANT, reply.content)
        self.console.print(f"[bold yellow]{escape(self.config.model)}[/bold yellow]:")
        self.console.print(Text(reply.content))
        return msg

    def _run_tool_rounds(self, reply: Message) -> Message:
        rounds = 0
        while True:
            tools, has_tools = extract_tool_calls(reply.content, self.logger)
            if not has_tools:
                return reply
            if self.config.max_tool_rounds and rounds >= self.config.max_tool_rounds:
                self.logger.warning("tool round limit (%d) reached; stopping", self.config.max_tool_rounds)
                self.console.print(f"[yellow]Tool round limit ({self.config.max_tool_rounds}) reached; "
                                   "the remaining tool calls were not executed.[/yellow]")
                return reply
            rounds += 1
            results = self.execute_tools(tools)
            self.transcript.append(ROLE_TOOL, format_tool_results(results))
            reply = self._infer()

    def execute_tools(self, tools: List[ToolInvocation]) -> List[ToolResult]:
        results = []
        for tool in tools:
            self.console.print(f"[yellow]🔧 {escape(tool.type)}/{escape(tool.name)}[/yellow] "
                               f"[dim]{escape(json.dumps(tool.args, ensure_ascii=False)[:80])}[/dim]")
            res = self.tools.dispatch(tool)
            if res.error:
                self.console.print(f"[red]  → {escape(res.error)}[/red]")
            else:
                self.console.print("[dim]  → Complete[/dim]")
            results.append(res)
        return results

    # ---------- /tool side channel ----------
    def run_tool_command(self, line: str) -> Optional[ToolResult]:
        """Run `/tool <type> <name> [json-args]` directly; never enters the transcript."""
        parts = line.split(None, 3)
        if len(parts) < 3 or parts[0] != TOOL_COMMAND:
            self.console.print(f"[red]Error:[/red] invalid tool command, {TOOL_USAGE}")
            return None
        args = {}
        if len(parts) > 3:
            raw = parts[3]
            try:
                args = json.loads(raw)
            except json.JSONDecodeError as e:
                self.logger.error("cannot parse /tool arguments: %s", e)
                self.console.print(f"[red]Error:[/red] cannot parse arguments: {escape(str(e))}")
                return None
            if not isinstance(args, dict):
                self.console.print("[red]Error:[/red] arguments must be a JSON object")
                return None

        res = self.tools.dispatch(ToolInvocation(type=parts[1], name=parts[2], args=args))
        self.console.print("[bold yellow]Tool result[/bold yellow]:")
        self.console.print(Text(res.result))
        if res.error:
            self.console.print(f"[red]Error:[/red] {escape(res.error)}")
        return res
