from __future__ import annotations
import sys
import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .config import DEFAULT_TOOLS, load_config
from .errors import AgentError, ConfigError, InputError
from .llm import InferenceClient
from .logger import close_logger, create_logger
from .prompts import make_system_prompt
from .repl import LineReader, SignalWatcher, repl
from .runtime import Agent
from .tools import TOOL_CATALOG, TOOL_SHELL_COMMAND, LocalToolExecutor

# Load environment variables from .env file
load_dotenv()

app = typer.Typer(add_completion=False)
console = Console()


@app.command()
def tools():
    """List the tools the model can call."""
    tbl = Table(title="Available Tools", show_lines=False)
    tbl.add_column("Type", style="bold")
    tbl.add_column("Name", style="bold")
    tbl.add_column("Arguments")
    tbl.add_column("Description")
    for entry in TOOL_CATALOG:
        args = ", ".join(a + ("" if a in entry["required"] else "?") for a in entry["args"])
        tbl.add_row(entry["type"], entry["name"], args, entry["description"])
    console.print(tbl)


@app.command()
def chat(workdir: str = typer.Option(".", help="Directory the tools operate in"),
         model: str = typer.Option(None, help="Model identifier (default glm-4.5)"),
         api_url: str = typer.Option(None, help="Chat completions URL"),
         max_tool_rounds: int = typer.Option(None, help="Max tool rounds per turn, 0 = unlimited"),
         log_level: str = typer.Option(None, help="Log file level (DEBUG, INFO, ...)"),
         no_shell: bool = typer.Option(False, "--no-shell", help="Disable the shell_command tool"),
         debug: bool = typer.Option(False, help="Log at DEBUG level")):
    """Start an interactive chat session."""
    enabled = tuple(t for t in DEFAULT_TOOLS if not (no_shell and t == TOOL_SHELL_COMMAND))
    try:
        config = load_config(
            workdir=workdir,
            model=model,
            api_url=api_url,
            max_tool_rounds=max_tool_rounds,
            log_level="DEBUG" if debug else log_level,
            tools=enabled,
            system_prompt=make_system_prompt(enabled),
        )
    except ConfigError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(code=1)

    logger = create_logger(config.log_file, config.log_level, console=console)
    logger.info("starting session: model=%s workdir=%s tools=%s", config.model, config.workdir, config.tools)
    client = None
    try:
        with SignalWatcher() as watcher:
            reader = LineReader(config.history_file, cancel_event=watcher.cancel_event)
            executor = LocalToolExecutor(config.workdir, shell_timeout=config.shell_timeout,
                                         cancel_event=watcher.cancel_event)
            client = InferenceClient.from_config(config, logger=logger)
            agent = Agent(config, client, executor=executor, logger=logger, console=console)
            repl(agent, reader, console)
    except InputError as e:
        logger.error("input initialisation failed: %s", e)
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(code=1)
    except KeyboardInterrupt:
        console.print("\n[dim]Received exit signal, exiting...[/dim]")
    except AgentError as e:
        logger.exception("unrecovered error")
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(code=1)
    finally:
        if client is not None:
            client.close()
        logger.info("shutting down")
        close_logger(logger)


def main():
    # Default to 'chat' when no subcommand is given
    if len(sys.argv) == 1 or sys.argv[1] not in ("chat", "tools", "--help"):
        sys.argv.insert(1, "chat")
    app()


if __name__ == "__main__":
    main()
