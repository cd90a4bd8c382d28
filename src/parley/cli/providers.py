"""Provider factory functions for CLI.

Centralizes creation of the configuration and the LLM client from the YAML
file and environment variables. Hides configuration details from command
implementations.
"""

from pathlib import Path

import typer
from rich.console import Console

from ..config import AppConfig, ConfigError, client_kwargs, load_config
from ..llm import LLMBackend, LLMClient, create_llm_client

# Default console for output
_console = Console(stderr=True)


def get_config(path: Path | None = None, console: Console | None = None) -> AppConfig:
    """Load the configuration, exiting with an error message if it is invalid.

    Environment variables:
        PARLEY_CONFIG: Config file used when no path is given
            (default: ~/.config/parley/config.yaml)
    """
    con = console or _console
    try:
        return load_config(path)
    except ConfigError as e:
        con.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)


def get_llm(
    config: AppConfig,
    backend: LLMBackend | None = None,
    console: Console | None = None,
) -> LLMClient:
    """Create the LLM client for the selected backend.

    Args:
        config: Loaded configuration
        backend: Overrides the backend selected in the configuration
        console: Optional Rich console for output

    Returns:
        LLM client instance

    Raises:
        typer.Exit: If the backend is not configured or lacks its API key

    Environment variables:
        OPENAI_API_KEY: API key for chatgpt
        LLAMACPP_API_KEY: API key for llamacpp (optional)
        GEMINI_API_KEY: API key for gemini
        XAI_API_KEY: API key for xai
    """
    con = console or _console
    selected = backend or config.llm
    try:
        return create_llm_client(selected, **client_kwargs(config, selected))
    except (ConfigError, TypeError, ValueError) as e:
        con.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)
