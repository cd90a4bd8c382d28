"""Key bindings of the chat.

Keys are Textual key names. Anything not bound here belongs to the prompt
editor, which receives it directly from the terminal.
"""

import logging
from typing import TYPE_CHECKING

from ..chat.commands import is_command
from ..events.models import KeyInput

if TYPE_CHECKING:
    from .loop import MainLoop

logger = logging.getLogger(__name__)

SUBMIT_KEYS = frozenset({"ctrl+j"})
STOP_KEYS = frozenset({"ctrl+t", "escape"})
NEW_CHAT_KEYS = frozenset({"ctrl+n"})
SPEAK_KEYS = frozenset({"ctrl+p"})
QUIT_KEYS = frozenset({"ctrl+q"})

# Shown by the help screen
KEY_HELP = [
    ("ctrl+j", "Send prompt"),
    ("ctrl+t / esc", "Stop answer"),
    ("ctrl+n", "New chat"),
    ("ctrl+p", "Read last answer aloud"),
    ("ctrl+q", "Quit"),
    ("up / down", "Previous / next prompt"),
    ("f1", "Show this help"),
    (":o FILE", "Load a file into the prompt"),
    (":w FILE", "Write the last answer to a file"),
    (":save FILE", "Write the whole chat to a file"),
    (":clear", "New chat"),
    (":q", "Quit"),
]


def handle_key_event(event: KeyInput, loop: "MainLoop") -> bool:
    """Run the action bound to a key.

    Returns:
        True if the key was bound to an action
    """
    key = event.key
    if key in SUBMIT_KEYS:
        editor = loop.editor
        if editor is None:
            logger.debug("Submit pressed without a prompt editor")
            return True
        text = editor.text
        if is_command(text):
            editor.clear()
            loop.run_command(text)
        elif loop.submit_prompt(text):
            editor.clear()
    elif key in STOP_KEYS:
        loop.stop_stream()
    elif key in NEW_CHAT_KEYS:
        loop.new_chat()
    elif key in SPEAK_KEYS:
        loop.speak_last_answer()
    elif key in QUIT_KEYS:
        loop.quit()
    else:
        return False
    return True
