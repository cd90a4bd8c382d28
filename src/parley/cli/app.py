"""Main CLI application using Typer."""
import asyncio
import logging
from enum import Enum
from pathlib import Path

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from rich.text import Text

from ..app.loop import MainLoop
from ..chat.accumulator import ConversationAccumulator
from ..chat.notifications import NotificationCenter
from ..events.bus import EventBus
from ..events.models import NotificationLevel
from ..llm import LLMBackend
from ..llm.cancellation import TurnState
from .providers import get_config, get_llm

# Load environment variables
load_dotenv()

# Create Typer app
app = typer.Typer(
    name="parley",
    help="Chat with LLM backends from the terminal",
    no_args_is_help=True,
    add_completion=True,
)

# Console for rich output
console = Console()
err_console = Console(stderr=True)


class LogLevel(str, Enum):
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


def _configure_logging(level: LogLevel, log_file: Path | None, tui: bool) -> None:
    """Route log records away from the terminal the UI draws on."""
    handlers: list[logging.Handler] = []
    if tui:
        from textual.logging import TextualHandler
        handlers.append(TextualHandler())
    else:
        handlers.append(RichHandler(console=err_console, show_path=False))
    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        handlers.append(file_handler)

    logging.basicConfig(level=level.value.upper(), handlers=handlers, format="%(message)s", force=True)
    # Request lines from the HTTP stack are noise below debug
    logging.getLogger("httpx").setLevel(max(logging.WARNING, logging.getLogger().level))


class ConsoleView:
    """Prints the answer of a one-shot prompt as it grows.

    Quits the main loop once the turn is over. A failed turn is only over
    once its error notification, which follows the end of the answer, has
    been printed.
    """

    def __init__(self, out: Console) -> None:
        self._out = out
        self._printed = 0
        self._notifications_seen = 0
        self._error_shown = False

    def render(self, loop: MainLoop) -> None:
        state = loop.turn_state
        done = state in (TurnState.COMPLETED, TurnState.CANCELLED, TurnState.FAILED)
        answer = (loop.accumulator.last_answer or "") if done else loop.accumulator.partial_answer
        if len(answer) > self._printed:
            self._out.print(answer[self._printed:], end="", markup=False, highlight=False)
            self._printed = len(answer)

        self._show_notifications(loop.notifications)

        if not done or (state == TurnState.FAILED and not self._error_shown):
            return
        self._out.print()
        loop.quit()

    def _show_notifications(self, notifications: NotificationCenter) -> None:
        fresh = notifications.pushed - self._notifications_seen
        self._notifications_seen = notifications.pushed
        if fresh <= 0:
            return
        for notification in notifications.active[-fresh:]:
            if notification.level == NotificationLevel.INFO:
                continue
            if notification.level == NotificationLevel.ERROR:
                self._error_shown = True
            style = "red" if notification.level == NotificationLevel.ERROR else "yellow"
            err_console.print(notification.message, style=style, markup=False)

    def on_tick(self) -> None:
        pass

    def on_mouse(self, event) -> None:
        pass

    def on_resize(self, width: int, height: int) -> None:
        pass


@app.command()
def chat(
    backend: LLMBackend | None = typer.Option(
        None,
        "--backend",
        "-b",
        help="Backend to use instead of the one in the config file"
    ),
    config_file: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Config file (default: $PARLEY_CONFIG or ~/.config/parley/config.yaml)"
    ),
    log_level: LogLevel = typer.Option(
        LogLevel.WARNING,
        "--log-level",
        "-l",
        help="Log level: debug (all), info, warning, or error"
    ),
    log_file: Path | None = typer.Option(
        None,
        "--log-file",
        help="Also write log records to this file"
    ),
):
    """Launch the interactive chat TUI."""
    _configure_logging(log_level, log_file, tui=True)
    config = get_config(config_file, err_console)

    async def _chat():
        from ..ui import run_chat_tui

        llm = get_llm(config, backend, err_console)
        async with llm:
            await run_chat_tui(llm, tick_rate_ms=config.tick_rate_ms)
        console.print("[dim]Goodbye![/dim]")

    try:
        asyncio.run(_chat())
    except KeyboardInterrupt:
        pass


@app.command()
def ask(
    prompt: str = typer.Argument(..., help="Prompt to send"),
    backend: LLMBackend | None = typer.Option(
        None,
        "--backend",
        "-b",
        help="Backend to use instead of the one in the config file"
    ),
    config_file: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Config file (default: $PARLEY_CONFIG or ~/.config/parley/config.yaml)"
    ),
    log_level: LogLevel = typer.Option(
        LogLevel.WARNING,
        "--log-level",
        "-l",
        help="Log level: debug (all), info, warning, or error"
    ),
    log_file: Path | None = typer.Option(
        None,
        "--log-file",
        help="Also write log records to this file"
    ),
):
    """Stream the answer to a single prompt to stdout."""
    _configure_logging(log_level, log_file, tui=False)
    config = get_config(config_file, err_console)

    async def _ask() -> TurnState:
        llm = get_llm(config, backend, err_console)
        async with llm:
            loop = MainLoop(
                bus=EventBus(),
                llm=llm,
                accumulator=ConversationAccumulator(formatter=Text),
                view=ConsoleView(console),
            )
            loop.submit_prompt(prompt)
            await loop.run()
            return loop.turn_state

    try:
        state = asyncio.run(_ask())
    except KeyboardInterrupt:
        raise typer.Exit(code=130)
    if state != TurnState.COMPLETED:
        raise typer.Exit(code=1)


@app.command()
def backends(
    config_file: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Config file (default: $PARLEY_CONFIG or ~/.config/parley/config.yaml)"
    ),
):
    """List the backends and how each one is configured."""
    config = get_config(config_file, err_console)

    table = Table(title="LLM backends")
    table.add_column("Backend", style="cyan")
    table.add_column("Configured")
    table.add_column("Model")
    table.add_column("URL", style="dim")

    for backend in LLMBackend:
        section = config.section(backend)
        name = f"{backend.value} *" if backend == config.llm else backend.value
        if section is None:
            table.add_row(name, "[dim]no[/dim]", "", "")
            continue
        table.add_row(
            name,
            "[green]yes[/green]",
            getattr(section, "model", "") or "",
            getattr(section, "url", "") or "",
        )

    console.print(table)
    console.print("[dim]* selected backend[/dim]")


def main():
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
