"""Main loop and key handling."""

from .handler import KEY_HELP, handle_key_event
from .loop import ChatView, MainLoop, NullView, PromptEditor, TTSPlayer

__all__ = [
    "KEY_HELP",
    "ChatView",
    "MainLoop",
    "NullView",
    "PromptEditor",
    "TTSPlayer",
    "handle_key_event",
]
