"""
Agentchat: a streaming chat client for agents served over HTTP.

This package follows Parnas's information hiding principles,
where each module hides a specific design decision.
"""

__version__ = "0.1.0"

from .chat import ConversationController, UpdateKind
from .client import (
    AgentDetail,
    ApiError,
    ChatBackend,
    ChatBackendError,
    ChatRequest,
    TransportError,
    create_chat_backend,
)
from .stream import FrameDecoder, StreamFrame, iter_frames
from .transcript import ChatMessage, ChatSession, Transcript, split_thought_answer

__all__ = [
    "AgentDetail",
    "ApiError",
    "ChatBackend",
    "ChatBackendError",
    "ChatMessage",
    "ChatRequest",
    "ChatSession",
    "ConversationController",
    "FrameDecoder",
    "StreamFrame",
    "Transcript",
    "TransportError",
    "UpdateKind",
    "create_chat_backend",
    "iter_frames",
    "split_thought_answer",
]
