"""Splits assistant content into a reasoning trace and a final answer.

The agent streams its reasoning first and then a marker followed by the
answer. The split is recomputed from the full content on every update;
nothing is cached between deltas.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict

FINAL_ANSWER_MARKER = "Final Answer:"


class SplitStatus(str, Enum):
    """How far an assistant message has progressed."""

    PENDING = "pending"  # No content yet
    THINKING = "thinking"  # Content, but no answer marker yet
    ANSWERED = "answered"  # Marker seen, answer available


class ThoughtSplit(BaseModel):
    """Result of splitting one assistant message."""

    model_config = ConfigDict(frozen=True)

    status: SplitStatus
    trace: str = ""
    answer: str | None = None
    trace_expanded: bool = False

    @property
    def in_progress(self) -> bool:
        """Whether an in-progress indicator should be shown."""
        return self.status != SplitStatus.ANSWERED


def split_thought_answer(content: str) -> ThoughtSplit:
    """Split accumulated assistant content.

    The last occurrence of the marker is the boundary; earlier occurrences
    belong to the trace.

    Args:
        content: Full content accumulated so far

    Returns:
        ThoughtSplit describing what to render
    """
    if not content:
        return ThoughtSplit(status=SplitStatus.PENDING)

    idx = content.rfind(FINAL_ANSWER_MARKER)
    if idx == -1:
        # No answer yet, keep the trace open
        return ThoughtSplit(status=SplitStatus.THINKING, trace=content, trace_expanded=True)

    return ThoughtSplit(
        status=SplitStatus.ANSWERED,
        trace=content[:idx].strip(),
        answer=content[idx + len(FINAL_ANSWER_MARKER):].strip(),
        trace_expanded=False,
    )
