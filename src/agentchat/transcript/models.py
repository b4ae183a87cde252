"""Data models for chat transcripts.

Messages are immutable values: every transcript update produces new
message objects instead of mutating existing ones, so a renderer can
tell changed entries apart by identity.
"""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from ..stream.models import Citation


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


class Role(str, Enum):
    """Message roles the client knows how to render.

    The role field itself is an open string; anything not listed here is
    rendered as plain text.
    """

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class ChatMessage(BaseModel):
    """A message in the conversation."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    role: str = Field(description="Role of the sender: 'user', 'assistant', or another role")
    content: str = Field(default="", description="Message text")
    created_at: datetime = Field(default_factory=utc_now, alias="createdAt")
    citations: tuple[Citation, ...] = Field(default=())

    @property
    def is_user(self) -> bool:
        return self.role == Role.USER.value

    @property
    def is_assistant(self) -> bool:
        return self.role == Role.ASSISTANT.value


class ChatSession(BaseModel):
    """Summary of a persisted conversation."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    session_id: str = Field(alias="sessionId")
    title: str | None = None
    created_at: datetime | None = Field(default=None, alias="createdAt")
    updated_at: datetime | None = Field(default=None, alias="updatedAt")

    def display_title(self, preview_length: int = 8) -> str:
        """Title to show in a session list.

        Falls back to the first characters of the session id.
        """
        return self.title or self.session_id[:preview_length]


# The ordered messages of the active conversation view
Transcript = tuple[ChatMessage, ...]
