from enum import Enum
from typing import Any

from .base import LLMClient
from .providers import ChatGPTClient, GeminiClient, LLamacppClient, OllamaClient, XaiClient


class LLMBackend(str, Enum):
    """Backends a conversation can be routed to."""

    CHATGPT = "chatgpt"
    LLAMACPP = "llamacpp"
    OLLAMA = "ollama"
    GEMINI = "gemini"
    XAI = "xai"


_REGISTRY: dict[LLMBackend, type[LLMClient]] = {
    LLMBackend.CHATGPT: ChatGPTClient,
    LLMBackend.LLAMACPP: LLamacppClient,
    LLMBackend.OLLAMA: OllamaClient,
    LLMBackend.GEMINI: GeminiClient,
    LLMBackend.XAI: XaiClient,
}

_REQUIRES_API_KEY = {LLMBackend.CHATGPT, LLMBackend.GEMINI, LLMBackend.XAI}
_REQUIRES_URL = {LLMBackend.LLAMACPP, LLMBackend.OLLAMA}


def create_llm_client(backend: LLMBackend | str, **config: Any) -> LLMClient:
    """Create an LLM backend client.

    This factory function is the only place that knows which class serves
    which backend; the rest of the application talks to LLMClient.

    Args:
        backend: Backend type ('chatgpt', 'llamacpp', 'ollama', 'gemini', 'xai')
        **config: Backend-specific configuration
            For ChatGPT and xAI:
                - api_key: str (required)
                - model: str
                - url: str
            For llama.cpp:
                - url: str (required)
                - api_key: str | None
            For Ollama:
                - url: str (required)
                - model: str (required)
            For Gemini:
                - api_key: str (required)
                - model: str
                - url: str | None (OpenAI-compatible endpoint or native base URL)
            For all:
                - system_prompt, connect_timeout, read_timeout
                - any httpx.AsyncClient kwarg (e.g. transport)

    Returns:
        Initialized LLM client instance

    Raises:
        ValueError: If backend type is not supported
        TypeError: If required configuration is missing

    Examples:
        >>> client = create_llm_client(
        ...     "ollama",
        ...     url="http://localhost:11434/api/chat",
        ...     model="llama3.2"
        ... )
    """
    try:
        key = LLMBackend(backend.lower() if isinstance(backend, str) else backend)
    except ValueError:
        supported = ", ".join(f"'{b.value}'" for b in LLMBackend)
        raise ValueError(
            f"Unsupported backend: {backend}. "
            f"Supported backends: {supported}"
        ) from None

    if key in _REQUIRES_API_KEY and not config.get("api_key"):
        raise TypeError(f"{key.value} backend requires 'api_key' in config")
    if key in _REQUIRES_URL and not config.get("url"):
        raise TypeError(f"{key.value} backend requires 'url' in config")
    if key == LLMBackend.OLLAMA and not config.get("model"):
        raise TypeError("ollama backend requires 'model' in config")

    return _REGISTRY[key](**config)
