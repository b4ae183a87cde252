"""Text formatting utilities for the TUI and CLI.

Hides the details of how timestamps, sessions and citations are shown.
"""

from datetime import datetime

from rich.text import Text

from ..stream.models import Citation
from ..transcript.models import ChatSession
from .config import MESSAGE_TIMESTAMP_FORMAT, SESSION_ID_PREVIEW_LENGTH


def format_timestamp(value: datetime | None) -> str:
    """Format a timestamp in local time, or "" when unknown.

    The epoch itself stands for "unknown", as the server sends 0 for
    missing times.
    """
    if value is None or value.timestamp() == 0:
        return ""
    if value.tzinfo is not None:
        value = value.astimezone()
    return value.strftime(MESSAGE_TIMESTAMP_FORMAT)


def session_label(session: ChatSession) -> Text:
    """Two-line label for a session list entry."""
    label = Text(session.display_title(SESSION_ID_PREVIEW_LENGTH), style="bold")
    updated = format_timestamp(session.updated_at)
    if updated:
        label.append(f"\nUpdated {updated}", style="dim")
    return label


def format_citation(citation: Citation) -> str:
    """One-line description of a cited source."""
    if citation.start_pos and citation.end_pos:
        return f"{citation.path} [{citation.start_pos}-{citation.end_pos}]"
    return citation.path


def format_citations(citations: tuple[Citation, ...]) -> Text:
    """Render a list of sources under an answer."""
    text = Text("Sources:", style="bold dim")
    for i, citation in enumerate(citations, 1):
        text.append(f"\n  {i}. {format_citation(citation)}", style="dim")
    return text
