from .chatgpt import ChatGPTClient

DEFAULT_URL = "https://api.x.ai/v1/chat/completions"
DEFAULT_MODEL = "grok-3-mini"


class XaiClient(ChatGPTClient):
    """xAI (Grok) backend client using the OpenAI-compatible API."""

    name = "xai"

    def __init__(self, api_key: str, model: str = DEFAULT_MODEL, url: str = DEFAULT_URL, **kwargs):
        super().__init__(api_key=api_key, model=model, url=url, **kwargs)
