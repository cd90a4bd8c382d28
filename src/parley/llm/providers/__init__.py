from .chatgpt import ChatGPTClient
from .gemini import GeminiClient
from .llamacpp import LLamacppClient
from .ollama import OllamaClient
from .xai import XaiClient

__all__ = ["ChatGPTClient", "GeminiClient", "LLamacppClient", "OllamaClient", "XaiClient"]
