"""Data models for the chat event stream.

These models define one decoded stream event, independent of
how the bytes were delivered.
"""

from pydantic import BaseModel, ConfigDict, Field

# Every event line starts with this prefix
DATA_PREFIX = "data: "

# Payload that ends the stream
DONE_SENTINEL = "[DONE]"


class Citation(BaseModel):
    """A source chunk the agent cited for its answer."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    chunk_id: str = Field(alias="chunkId", description="Indexed chunk identifier")
    path: str = Field(description="Path of the source document")
    start_pos: str | None = Field(default=None, alias="startPos")
    end_pos: str | None = Field(default=None, alias="endPos")


class StreamFrame(BaseModel):
    """One parsed data event.

    A frame may carry a session id, a delta, citations, any combination of
    them, or nothing at all. Empty strings count as absent.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    session_id: str | None = Field(
        default=None,
        alias="sessionId",
        description="Server-assigned session id"
    )
    delta: str | None = Field(default=None, description="Text fragment to append")
    citations: tuple[Citation, ...] = Field(default=())

    @property
    def has_session(self) -> bool:
        """Whether this frame announces a session id."""
        return bool(self.session_id)

    @property
    def has_delta(self) -> bool:
        """Whether this frame carries content to append."""
        return bool(self.delta)
