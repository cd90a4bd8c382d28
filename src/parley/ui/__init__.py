"""Terminal UI module for parley.

Provides a Textual-based TUI around the main loop.

Module structure (each module hides a design decision):
- widgets.py: Custom widgets (transcript, notifications, prompt editor)
- styles.py: CSS styling (layout decisions)
- themes.py: Color palettes and theme configuration
- config.py: UI constants
- screens.py: Modal screens (help popup)
- app.py: Application orchestration (how terminal input reaches the bus)
"""

from .app import ChatApp, run_chat_tui
from .widgets import NotificationBar, PromptBar, TranscriptView

__all__ = [
    "ChatApp",
    "NotificationBar",
    "PromptBar",
    "TranscriptView",
    "run_chat_tui",
]
