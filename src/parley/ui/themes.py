"""Theme definitions for the TUI.

This module hides the design decisions about:
- Color palette of the chat
- Theme variables (borders, scrollbars, footer)

To add a new theme, define it here and register it in the app.
"""

from textual.theme import Theme

# Gruvbox dark, hard contrast
GRUVBOX_DARK = Theme(
    name="parley-gruvbox",
    primary="#83a598",      # Blue - transcript border
    secondary="#d3869b",    # Purple - prompt border
    accent="#fabd2f",       # Yellow - streaming indicator
    foreground="#ebdbb2",   # Light text
    background="#1d2021",   # Hard background
    success="#b8bb26",      # Green
    warning="#fe8019",      # Orange
    error="#fb4934",        # Red
    surface="#282828",
    panel="#32302f",
    dark=True,
    variables={
        "block-cursor-foreground": "#1d2021",
        "block-cursor-background": "#ebdbb2",
        "block-cursor-text-style": "bold",

        "input-cursor-background": "#ebdbb2",
        "input-cursor-foreground": "#1d2021",
        "input-selection-background": "#83a598 30%",

        "border": "#504945",
        "border-blurred": "#3c3836",

        "scrollbar": "#3c3836",
        "scrollbar-hover": "#504945",
        "scrollbar-active": "#83a598",
        "scrollbar-background": "#282828",
        "scrollbar-corner-color": "#282828",

        "footer-foreground": "#d5c4a1",
        "footer-background": "#1d2021",
        "footer-key-foreground": "#fabd2f",
        "footer-key-background": "#3c3836",
        "footer-description-foreground": "#bdae93",

        "text-muted": "#928374",
    },
)
