"""
Parley: a terminal chat client that streams answers from LLM backends.

This package follows Parnas's information hiding principles,
where each module hides a specific design decision.
"""

__version__ = "0.1.0"

from .events import EventBus, EventBusClosed
from .llm import (
    CancellationSignal,
    ChatMessage,
    ChatRole,
    LLMBackend,
    LLMClient,
    create_llm_client,
)

__all__ = [
    "CancellationSignal",
    "ChatMessage",
    "ChatRole",
    "EventBus",
    "EventBusClosed",
    "LLMBackend",
    "LLMClient",
    "create_llm_client",
]
