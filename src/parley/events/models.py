"""Event types carried by the event bus.

Every event is an immutable value. Producers build them, the main loop
consumes each one exactly once.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Union


@dataclass(frozen=True)
class StartAnswer:
    """First event of every answer."""


@dataclass(frozen=True)
class Chunk:
    """One increment of streamed answer text."""

    text: str


@dataclass(frozen=True)
class EndAnswer:
    """Last event of every answer, emitted exactly once per ask.

    ``error`` carries the error text when the exchange failed.
    """

    error: str | None = None


AnswerEvent = Union[StartAnswer, Chunk, EndAnswer]


class NotificationLevel(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


DEFAULT_NOTIFICATION_TTL = 8  # ticks


@dataclass(frozen=True)
class Notification:
    """A user-facing message with a time-to-live counted in ticks."""

    message: str
    level: NotificationLevel = NotificationLevel.INFO
    ttl: int = DEFAULT_NOTIFICATION_TTL


@dataclass(frozen=True)
class Tick:
    """Periodic heartbeat from the ticker."""


@dataclass(frozen=True)
class KeyInput:
    """A key press forwarded by the input reader.

    ``key`` uses Textual key names ("a", "ctrl+j", "escape"), ``character``
    is the printable character if there is one.
    """

    key: str
    character: str | None = None


@dataclass(frozen=True)
class MouseInput:
    event: Any


@dataclass(frozen=True)
class ResizeInput:
    width: int
    height: int


@dataclass(frozen=True)
class LLMToken:
    """Wraps one AnswerEvent emitted by an ask-task."""

    answer: AnswerEvent


@dataclass(frozen=True)
class NotificationEvent:
    notification: Notification


@dataclass(frozen=True)
class TTSRequest:
    text: str
    voice: str | None = None


Event = Union[Tick, KeyInput, MouseInput, ResizeInput, LLMToken, NotificationEvent, TTSRequest]
