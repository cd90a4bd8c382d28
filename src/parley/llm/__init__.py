from .base import EventSink, HTTPStreamingClient, LLMClient
from .cancellation import CancellationSignal, CancellationToken, TurnState
from .factory import LLMBackend, create_llm_client
from .models import ChatMessage, ChatRole
from .providers import ChatGPTClient, GeminiClient, LLamacppClient, OllamaClient, XaiClient

__all__ = [
    "CancellationSignal",
    "CancellationToken",
    "ChatGPTClient",
    "ChatMessage",
    "ChatRole",
    "EventSink",
    "GeminiClient",
    "HTTPStreamingClient",
    "LLMBackend",
    "LLMClient",
    "LLamacppClient",
    "OllamaClient",
    "TurnState",
    "XaiClient",
    "create_llm_client",
]
