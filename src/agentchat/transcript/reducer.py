"""Transcript reducer.

Pure functions that take the current transcript and one input and
return the next transcript. The only outside value consulted is the
clock, when a message is appended.
"""

from datetime import datetime

from ..stream.models import Citation
from .models import ChatMessage, Role, Transcript, utc_now


def append_user_message(
    transcript: Transcript,
    text: str,
    now: datetime | None = None
) -> Transcript:
    """Append the user's input as a new message.

    Args:
        transcript: Current transcript
        text: The literal input text
        now: Timestamp to record (defaults to the current time)

    Returns:
        New transcript ending with the user message
    """
    message = ChatMessage(role=Role.USER.value, content=text, created_at=now or utc_now())
    return (*transcript, message)


def append_assistant_placeholder(
    transcript: Transcript,
    now: datetime | None = None
) -> Transcript:
    """Append an empty assistant message that deltas will fill in."""
    message = ChatMessage(role=Role.ASSISTANT.value, content="", created_at=now or utc_now())
    return (*transcript, message)


def apply_delta(transcript: Transcript, delta: str) -> Transcript:
    """Append a text fragment to the trailing assistant message.

    The last message is replaced by a copy with the delta concatenated to
    its content. If the transcript is empty, the last message is not an
    assistant message, or the delta is empty, the transcript is returned
    unchanged.

    Args:
        transcript: Current transcript
        delta: Raw text fragment, applied in arrival order

    Returns:
        The next transcript
    """
    if not delta or not transcript:
        return transcript

    last = transcript[-1]
    if not last.is_assistant:
        return transcript

    updated = last.model_copy(update={"content": last.content + delta})
    return (*transcript[:-1], updated)


def attach_citations(transcript: Transcript, citations: tuple[Citation, ...]) -> Transcript:
    """Attach cited sources to the trailing assistant message.

    Follows the same last-message rule as apply_delta.
    """
    if not citations or not transcript:
        return transcript

    last = transcript[-1]
    if not last.is_assistant:
        return transcript

    updated = last.model_copy(update={"citations": last.citations + tuple(citations)})
    return (*transcript[:-1], updated)
