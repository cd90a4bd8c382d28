"""Chat commands typed into the prompt editor.

A prompt that starts with ":" is not sent to the backend:

    :o FILE      load FILE into the prompt editor
    :w FILE      write the last answer to FILE
    :save FILE   write the whole transcript to FILE
    :clear       start a new chat
    :q / :quit   leave the application
"""

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Protocol

from ..events.models import NotificationLevel
from .accumulator import ConversationAccumulator

logger = logging.getLogger(__name__)

COMMAND_PREFIX = ":"


class CommandAction(str, Enum):
    """Follow-up the main loop has to perform after a command."""

    NONE = "none"
    CLEAR = "clear"
    QUIT = "quit"


@dataclass(frozen=True)
class CommandResult:
    message: str | None = None
    level: NotificationLevel = NotificationLevel.INFO
    action: CommandAction = CommandAction.NONE


class TextSink(Protocol):
    """The part of the prompt editor a command can write into."""

    def load_text(self, text: str) -> None: ...


def is_command(text: str) -> bool:
    return text.lstrip().startswith(COMMAND_PREFIX)


def _write_file(path: Path, content: str, what: str) -> CommandResult:
    try:
        path.expanduser().write_text(content, encoding="utf-8")
    except OSError as e:
        logger.warning("Could not write %s to %s: %s", what, path, e)
        return CommandResult(f"Cannot write {path}: {e.strerror or e}", NotificationLevel.ERROR)
    return CommandResult(f"{what.capitalize()} saved to {path}")


def execute_command(
    text: str,
    accumulator: ConversationAccumulator,
    editor: TextSink | None = None,
) -> CommandResult:
    """Run one chat command.

    File errors never escape; they come back as an error result to be shown
    as a notification.
    """
    name, _, arg = text.strip()[len(COMMAND_PREFIX):].partition(" ")
    arg = arg.strip()

    if name in ("q", "quit"):
        return CommandResult(action=CommandAction.QUIT)

    if name == "clear":
        return CommandResult(action=CommandAction.CLEAR)

    if name in ("o", "w", "save") and not arg:
        return CommandResult(f"Usage: :{name} FILE", NotificationLevel.WARNING)

    if name == "o":
        path = Path(arg).expanduser()
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Could not load %s: %s", path, e)
            return CommandResult(f"Cannot read {arg}: {e}", NotificationLevel.ERROR)
        if editor is None:
            return CommandResult("No prompt editor to load into", NotificationLevel.WARNING)
        editor.load_text(content)
        return CommandResult(f"Loaded {arg}")

    if name == "w":
        answer = accumulator.last_answer
        if answer is None:
            return CommandResult("No answer to write yet", NotificationLevel.WARNING)
        return _write_file(Path(arg), answer, "answer")

    if name == "save":
        if not accumulator.plain_transcript:
            return CommandResult("The chat is empty", NotificationLevel.WARNING)
        return _write_file(Path(arg), accumulator.plain_text() + "\n", "chat")

    return CommandResult(f"Unknown command: :{name}", NotificationLevel.WARNING)
