"""Modal screens for the TUI.

This module hides the design decisions about:
- Help popup appearance (CSS, layout)
- Keyboard shortcuts for dismissing it

To change how the help looks, modify only this file.
"""

from rich.table import Table
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.screen import ModalScreen
from textual.widgets import Static


def build_help_table(entries: list[tuple[str, str]]) -> Table:
    """Two-column table of keys and what they do."""
    table = Table(show_header=False, box=None, padding=(0, 2), expand=True)
    table.add_column("Key", style="bold yellow", no_wrap=True)
    table.add_column("Action")
    for key, action in entries:
        table.add_row(key, action)
    return table


class HelpScreen(ModalScreen[None]):
    """Popup listing the key bindings and chat commands."""

    CSS = """
    HelpScreen {
        align: center middle;
        background: $background 70%;
    }

    #help-dialog {
        width: 70;
        height: auto;
        border: tall $accent;
        background: $surface;
        padding: 1 2;
    }

    #help-title {
        width: 100%;
        text-align: center;
        text-style: bold;
        color: $accent;
        padding: 0 0 1 0;
        border-bottom: solid $border;
        margin-bottom: 1;
    }

    #help-footer {
        width: 100%;
        text-align: center;
        color: $text-muted;
        margin-top: 1;
    }
    """

    # escape and f1 are app-level priority keys that close the popup
    BINDINGS = [
        Binding("q", "dismiss_help", "Close", show=False),
    ]

    def __init__(self, entries: list[tuple[str, str]]) -> None:
        super().__init__()
        self._entries = entries

    def compose(self) -> ComposeResult:
        with Vertical(id="help-dialog"):
            yield Static("Help", id="help-title")
            yield Static(build_help_table(self._entries), id="help-keys")
            yield Static("esc to close", id="help-footer")

    def action_dismiss_help(self) -> None:
        self.dismiss(None)
