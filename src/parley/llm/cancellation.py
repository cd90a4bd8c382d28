"""Cooperative cancellation of streaming answers.

Backends poll a cancellation object between network reads; nothing is
interrupted preemptively. A single shared flag has a race: a stop request
that lands after one turn finished but before the UI reset the flag would
cancel the next turn. Tokens are therefore bound to a turn generation and
only a cancel aimed at that generation is visible through them.
"""

from enum import Enum
from typing import Protocol


class TurnState(str, Enum):
    """Lifecycle of one conversation turn."""

    IDLE = "idle"
    STREAMING = "streaming"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"


class Cancellable(Protocol):
    """Anything a backend can poll for a stop request."""

    @property
    def cancelled(self) -> bool: ...


class CancellationSignal:
    """Shared stop flag for one conversation.

    Reads and writes are plain attribute access: the flag is advisory and
    only ever flips between two values, so no lock is needed even when a
    producer thread polls it.
    """

    def __init__(self) -> None:
        self._generation = 0
        self._cancelled_generation: int | None = None

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def cancelled(self) -> bool:
        """True if the current turn has been asked to stop."""
        return self._cancelled_generation == self._generation

    def begin_turn(self) -> "CancellationToken":
        """Start a new turn and return the token its ask-task should poll."""
        self._generation += 1
        self._cancelled_generation = None
        return CancellationToken(self, self._generation)

    def cancel(self) -> None:
        """Request the current turn to stop."""
        self._cancelled_generation = self._generation

    def reset(self) -> None:
        """Clear a pending stop request (back to the idle default)."""
        self._cancelled_generation = None

    def is_cancelled(self, generation: int) -> bool:
        return self._cancelled_generation == generation


class CancellationToken:
    """View of a CancellationSignal restricted to one turn.

    Remembers whether its ask-task ever saw the stop request, so a stop that
    lands after the last chunk does not relabel a finished answer.
    """

    __slots__ = ("_signal", "_generation", "_observed")

    def __init__(self, signal: CancellationSignal, generation: int) -> None:
        self._signal = signal
        self._generation = generation
        self._observed = False

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def cancelled(self) -> bool:
        cancelled = self._signal.is_cancelled(self._generation)
        if cancelled:
            self._observed = True
        return cancelled

    @property
    def observed(self) -> bool:
        """True once a poll of ``cancelled`` has answered True."""
        return self._observed

    def __repr__(self) -> str:
        cancelled = self._signal.is_cancelled(self._generation)
        return f"CancellationToken(generation={self._generation}, cancelled={cancelled})"
