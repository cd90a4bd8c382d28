"""Conversation state owned by the main loop.

Module structure (each module hides a design decision):
- formatting.py: How answer text is turned into styled text
- accumulator.py: How streamed fragments become a transcript
- notifications.py: How long a notification stays visible
- commands.py: What the ":" commands of the prompt do
"""

from .accumulator import ConversationAccumulator, Formatter
from .commands import CommandAction, CommandResult, execute_command, is_command
from .formatting import clean_latex, format_markdown, format_user_prompt
from .notifications import NotificationCenter

__all__ = [
    "CommandAction",
    "CommandResult",
    "ConversationAccumulator",
    "Formatter",
    "NotificationCenter",
    "clean_latex",
    "execute_command",
    "format_markdown",
    "format_user_prompt",
    "is_command",
]
