from .base import ChatBackend
from .errors import ApiError, ChatBackendError, TransportError
from .factory import create_chat_backend
from .http import DEFAULT_BASE_URL, HttpChatBackend
from .models import DEFAULT_TOP_K, AgentDetail, ChatRequest, ChatResponse

__all__ = [
    "DEFAULT_BASE_URL",
    "DEFAULT_TOP_K",
    "AgentDetail",
    "ApiError",
    "ChatBackend",
    "ChatBackendError",
    "ChatRequest",
    "ChatResponse",
    "HttpChatBackend",
    "TransportError",
    "create_chat_backend",
]
