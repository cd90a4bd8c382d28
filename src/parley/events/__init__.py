"""Event module for parley.

Event types and the single-consumer bus that merges user input, ticks and
streamed answers for the main loop.
"""

from .bus import EventBus, EventBusClosed
from .models import (
    AnswerEvent,
    Chunk,
    EndAnswer,
    Event,
    KeyInput,
    LLMToken,
    MouseInput,
    Notification,
    NotificationEvent,
    NotificationLevel,
    ResizeInput,
    StartAnswer,
    Tick,
    TTSRequest,
)
from .producers import tick_forever

__all__ = [
    "AnswerEvent",
    "Chunk",
    "EndAnswer",
    "Event",
    "EventBus",
    "EventBusClosed",
    "KeyInput",
    "LLMToken",
    "MouseInput",
    "Notification",
    "NotificationEvent",
    "NotificationLevel",
    "ResizeInput",
    "StartAnswer",
    "TTSRequest",
    "Tick",
    "tick_forever",
]
