"""Application configuration.

Hides where settings come from. The YAML file names the active backend and
holds one section per backend; API keys may instead come from the
environment, which wins over the file.

Example ``~/.config/parley/config.yaml``::

    llm: ollama
    ollama:
      url: http://localhost:11434/api/chat
      model: llama3.2
"""

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from .events.producers import DEFAULT_TICK_RATE_MS
from .llm.base import DEFAULT_CONNECT_TIMEOUT, DEFAULT_READ_TIMEOUT
from .llm.factory import LLMBackend
from .llm.models import DEFAULT_SYSTEM_PROMPT
from .llm.providers import chatgpt, gemini, xai

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "PARLEY_CONFIG"
DEFAULT_CONFIG_PATH = Path("~/.config/parley/config.yaml")

API_KEY_ENV_VARS = {
    LLMBackend.CHATGPT: "OPENAI_API_KEY",
    LLMBackend.LLAMACPP: "LLAMACPP_API_KEY",
    LLMBackend.GEMINI: "GEMINI_API_KEY",
    LLMBackend.XAI: "XAI_API_KEY",
}


class ConfigError(Exception):
    """The configuration file cannot be read or is invalid."""


class _Section(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class ChatGPTConfig(_Section):
    openai_api_key: str | None = None
    model: str = chatgpt.DEFAULT_MODEL
    url: str = chatgpt.DEFAULT_URL


class LLamacppConfig(_Section):
    url: str
    api_key: str | None = None


class OllamaConfig(_Section):
    url: str
    model: str


class GeminiConfig(_Section):
    gemini_api_key: str | None = None
    model: str = gemini.DEFAULT_MODEL
    url: str | None = None


class XaiConfig(_Section):
    xai_api_key: str | None = None
    model: str = xai.DEFAULT_MODEL
    url: str = xai.DEFAULT_URL


class AppConfig(BaseModel):
    """Whole application configuration."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    llm: LLMBackend = LLMBackend.CHATGPT
    system_prompt: str | None = DEFAULT_SYSTEM_PROMPT
    tick_rate_ms: int = Field(default=DEFAULT_TICK_RATE_MS, gt=0)
    connect_timeout: float = Field(default=DEFAULT_CONNECT_TIMEOUT, gt=0)
    read_timeout: float | None = Field(default=DEFAULT_READ_TIMEOUT, gt=0)
    chatgpt: ChatGPTConfig | None = Field(default_factory=ChatGPTConfig)
    llamacpp: LLamacppConfig | None = None
    ollama: OllamaConfig | None = None
    gemini: GeminiConfig | None = None
    xai: XaiConfig | None = None

    @model_validator(mode="after")
    def _selected_backend_is_configured(self) -> "AppConfig":
        if self.section(self.llm) is None:
            raise ValueError(f"llm is '{self.llm.value}' but there is no '{self.llm.value}' section")
        return self

    def section(self, backend: LLMBackend) -> _Section | None:
        return getattr(self, backend.value)

    def configured_backends(self) -> list[LLMBackend]:
        return [backend for backend in LLMBackend if self.section(backend) is not None]


def config_path(path: Path | str | None = None) -> Path:
    """The file to read: explicit path, then $PARLEY_CONFIG, then the default."""
    if path is None:
        path = os.getenv(CONFIG_ENV_VAR) or DEFAULT_CONFIG_PATH
    return Path(path).expanduser()


def load_config(path: Path | str | None = None) -> AppConfig:
    """Read the YAML configuration.

    A missing default file gives the default configuration; a missing file
    that was asked for explicitly is an error.

    Raises:
        ConfigError: If the file cannot be read, parsed or validated
    """
    explicit = path is not None or bool(os.getenv(CONFIG_ENV_VAR))
    resolved = config_path(path)

    if not resolved.exists():
        if explicit:
            raise ConfigError(f"Config file not found: {resolved}")
        logger.debug("No config file at %s, using defaults", resolved)
        return AppConfig()

    try:
        with open(resolved, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot read {resolved}: {e}") from e

    return parse_config(data or {}, source=str(resolved))


def parse_config(data: Any, source: str = "<config>") -> AppConfig:
    if not isinstance(data, dict):
        raise ConfigError(f"{source}: expected a mapping at the top level")
    try:
        return AppConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"{source}: {e}") from e


def resolve_api_key(config: AppConfig, backend: LLMBackend) -> str | None:
    """API key for a backend: environment variable first, then the config file."""
    env_var = API_KEY_ENV_VARS.get(backend)
    if env_var and os.getenv(env_var):
        return os.getenv(env_var)

    section = config.section(backend)
    if isinstance(section, ChatGPTConfig):
        return section.openai_api_key
    if isinstance(section, GeminiConfig):
        return section.gemini_api_key
    if isinstance(section, XaiConfig):
        return section.xai_api_key
    if isinstance(section, LLamacppConfig):
        return section.api_key
    return None


def client_kwargs(config: AppConfig, backend: LLMBackend | None = None) -> dict[str, Any]:
    """Keyword arguments for create_llm_client() for one backend.

    Raises:
        ConfigError: If the backend has no section
    """
    backend = backend or config.llm
    section = config.section(backend)
    if section is None:
        raise ConfigError(f"No '{backend.value}' section in the configuration")

    kwargs: dict[str, Any] = {
        "system_prompt": config.system_prompt,
        "connect_timeout": config.connect_timeout,
        "read_timeout": config.read_timeout,
    }
    if isinstance(section, (ChatGPTConfig, GeminiConfig, XaiConfig)):
        kwargs.update(model=section.model, url=section.url)
    elif isinstance(section, LLamacppConfig):
        kwargs.update(url=section.url)
    elif isinstance(section, OllamaConfig):
        kwargs.update(url=section.url, model=section.model)

    if backend in API_KEY_ENV_VARS:
        api_key = resolve_api_key(config, backend)
        if api_key or backend != LLMBackend.LLAMACPP:
            kwargs["api_key"] = api_key
    return kwargs
