"""Display settings shared by the TUI and the CLI."""

from enum import IntEnum


class LogLevel(IntEnum):
    """Threshold for the log panel; higher levels show fewer lines."""

    DEBUG = 10
    INFO = 20
    WARNING = 30
    ERROR = 40

    @classmethod
    def from_string(cls, value: str) -> "LogLevel":
        """Parse a level name case-insensitively, falling back to DEBUG."""
        return cls.__members__.get(value.upper(), cls.DEBUG)


# Log panel
LOG_TIMESTAMP_FORMAT = "%H:%M:%S"
LOG_MAX_MESSAGE_LENGTH = 500

# Conversation and sidebar
MESSAGE_TIMESTAMP_FORMAT = "%m-%d %H:%M"
SESSION_ID_PREVIEW_LENGTH = 8
EMPTY_CHAT_TEXT = "Start asking"
EMPTY_SESSIONS_TEXT = "No sessions yet"

# Assistant reply states
THINKING_LABEL = "Thinking..."
TRACE_OPEN_TITLE = "Thinking details"
TRACE_CLOSED_TITLE = "Reasoning"
