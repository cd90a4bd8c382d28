from typing import Any

from ..base import HTTPStreamingClient, StreamEnded
from ..framing import NDJSONDecoder


class OllamaClient(HTTPStreamingClient):
    """Ollama backend client.

    Hidden design decisions:
    - ``POST /api/chat`` answers with newline-delimited JSON, one object per
      token batch, closed by an object with ``"done": true``
    - No authentication
    """

    name = "ollama"

    def __init__(self, url: str, model: str, **kwargs: Any):
        """Initialize Ollama client.

        Args:
            url: Chat endpoint, e.g. http://localhost:11434/api/chat
            model: Name of a pulled model, e.g. "llama3.2"
            **kwargs: Timeouts, system prompt and httpx.AsyncClient kwargs
        """
        super().__init__(url=url, api_key=None, **kwargs)
        self._model = model

    @property
    def model(self) -> str:
        """Get the model name."""
        return self._model

    def _build_body(self) -> dict[str, Any]:
        return {
            "messages": [msg.to_wire() for msg in self.conversation()],
            "model": self._model,
            "stream": True,
        }

    def _make_decoder(self) -> NDJSONDecoder:
        return NDJSONDecoder()

    def _extract_text(self, data: Any) -> str | None:
        if not isinstance(data, dict):
            return None
        if data.get("error"):
            return f"Error: {data['error']}"
        if data.get("done"):
            raise StreamEnded()

        message = data.get("message")
        content = message.get("content") if isinstance(message, dict) else None
        if content is None:
            return "\n"
        return content or None
