"""Factory for creating chat backends."""

from typing import Any

from .base import ChatBackend


def create_chat_backend(backend: str = "http", **config: Any) -> ChatBackend:
    """Create a chat backend instance.

    Args:
        backend: Backend type ("http")
        **config: Backend-specific configuration
            For http:
                - base_url: str (default: 'http://127.0.0.1:8080')
                - timeout: float (default: 10.0)

    Returns:
        ChatBackend instance

    Raises:
        ValueError: If backend type is not supported
    """
    if backend.lower() == "http":
        from .http import HttpChatBackend
        return HttpChatBackend(**config)

    raise ValueError(
        f"Unsupported chat backend: {backend}. "
        f"Supported backends: http"
    )
