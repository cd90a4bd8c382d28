"""UI configuration constants.

Centralizes magic numbers and configuration values for the UI module.
"""

from ..events.models import NotificationLevel

# Streaming indicator, one frame per tick
SPINNER_FRAMES = ("⠋", "⠙", "⠹", "⠸", "⠼", "⠴", "⠦", "⠧", "⠇", "⠏")

# Notifications
MAX_VISIBLE_NOTIFICATIONS = 3
LEVEL_STYLES = {
    NotificationLevel.INFO: "bold #8ec07c",
    NotificationLevel.WARNING: "bold #fabd2f",
    NotificationLevel.ERROR: "bold #fb4934",
}

# Prompt history
PROMPT_HISTORY_MAX_SIZE = 100  # Maximum entries in prompt history

# Columns taken by the transcript border, padding and scrollbar
TRANSCRIPT_CHROME_WIDTH = 6
MIN_TRANSCRIPT_WIDTH = 20
