"""Chat transcript module for agentchat.

Provides message models, the transcript reducer, and the
thought/answer splitter used when rendering assistant messages.
"""

from .models import ChatMessage, ChatSession, Role, Transcript, utc_now
from .reducer import (
    append_assistant_placeholder,
    append_user_message,
    apply_delta,
    attach_citations,
)
from .splitter import FINAL_ANSWER_MARKER, SplitStatus, ThoughtSplit, split_thought_answer

__all__ = [
    "FINAL_ANSWER_MARKER",
    "ChatMessage",
    "ChatSession",
    "Role",
    "SplitStatus",
    "ThoughtSplit",
    "Transcript",
    "append_assistant_placeholder",
    "append_user_message",
    "apply_delta",
    "attach_citations",
    "split_thought_answer",
    "utc_now",
]
