"""Chat orchestration module for agentchat.

Composes the stream decoder, transcript reducer and session binder into
send-and-stream cycles against a chat backend.
"""

from .controller import ConversationController, UpdateCallback
from .models import UpdateKind

__all__ = [
    "ConversationController",
    "UpdateCallback",
    "UpdateKind",
]
