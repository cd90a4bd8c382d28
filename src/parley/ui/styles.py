"""CSS styles for the TUI.

Hides layout and styling decisions from the application logic: the
transcript takes every row the prompt and the notifications leave free.
"""

APP_CSS = """
Screen {
    layout: vertical;
    background: $background;
}

#transcript {
    height: 1fr;
    background: $panel;
    border: round $primary 60%;
    border-title-color: $primary;
    border-title-style: bold;
    border-title-align: left;
    border-subtitle-color: $accent;
    border-subtitle-align: right;
    padding: 0 1;
    scrollbar-gutter: stable;

    &:focus {
        border: round $primary;
    }
}

#transcript-body {
    width: 100%;
    height: auto;
}

#notifications {
    height: auto;
    max-height: 3;
    padding: 0 2;
    background: $surface;
    display: none;
}

#prompt-bar {
    height: 8;
    background: $panel;
    border: round $secondary 60%;
    border-title-color: $secondary;
    border-title-align: left;

    &:focus-within {
        border: round $secondary;
    }
}

#prompt-label {
    width: 3;
    height: 100%;
    padding: 0 0 0 1;
    color: $secondary;
}

#prompt-input {
    width: 1fr;
    height: 100%;
    border: none;
    background: $panel;

    &:focus {
        border: none;
    }
}
"""
