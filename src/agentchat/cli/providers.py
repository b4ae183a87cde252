"""Backend factory functions for CLI.

Centralizes creation of the API backend from environment variables.
Hides configuration details from command implementations.
"""

import os

import typer
from rich.console import Console

from ..client import DEFAULT_BASE_URL, DEFAULT_TOP_K, ChatBackend, create_chat_backend

# Default console for output
_console = Console()


def _env_number(name: str, default: float, cast: type, console: Console) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return cast(raw)
    except ValueError:
        console.print(f"[red]Error: {name} must be a number, got {raw!r}[/red]")
        raise typer.Exit(code=1)


def get_backend(base_url: str | None = None, console: Console | None = None) -> ChatBackend:
    """Create the API backend from environment variables.

    Args:
        base_url: Overrides AGENTCHAT_BASE_URL when given
        console: Optional Rich console for output

    Returns:
        HTTP chat backend instance

    Environment variables:
        AGENTCHAT_BASE_URL: Root URL of the API (default: http://127.0.0.1:8080)
        AGENTCHAT_TIMEOUT: Connect/write/pool timeout in seconds (default: 10.0)
    """
    con = console or _console
    return create_chat_backend(
        "http",
        base_url=base_url or os.getenv("AGENTCHAT_BASE_URL", DEFAULT_BASE_URL),
        timeout=_env_number("AGENTCHAT_TIMEOUT", 10.0, float, con),
    )


def get_top_k(top_k: int | None = None, console: Console | None = None) -> int:
    """Resolve the result-size hint.

    Environment variables:
        AGENTCHAT_TOP_K: Default hint when --top-k is not given (default: 8)
    """
    if top_k is not None:
        return top_k
    value = int(_env_number("AGENTCHAT_TOP_K", DEFAULT_TOP_K, int, console or _console))
    if value < 1:
        (console or _console).print("[red]Error: AGENTCHAT_TOP_K must be at least 1[/red]")
        raise typer.Exit(code=1)
    return value
