"""Terminal UI module for agentchat.

Provides a Textual-based TUI for chatting with an agent.

Module structure (each module hides a design decision):
- config.py: UI constants (log levels, timestamp formats, labels)
- formatting.py: How timestamps, sessions and citations are shown
- widgets.py: Custom widgets (session list, transcript view, input bar, log panel)
- styles.py: CSS styling (layout decisions)
- screens.py: Modal dialogs (delete-session prompt)
- app.py: Application orchestration (user interaction flow)
"""

from .app import AgentChatApp, run_tui
from .config import LogLevel
from .screens import DeleteSessionScreen
from .formatting import format_citations, format_timestamp, session_label
from .widgets import ChatHistoryWidget, ChatInputBar, DebugPanel, MessageView, SessionList

__all__ = [
    "AgentChatApp",
    "ChatHistoryWidget",
    "ChatInputBar",
    "DebugPanel",
    "DeleteSessionScreen",
    "LogLevel",
    "MessageView",
    "SessionList",
    "format_citations",
    "format_timestamp",
    "run_tui",
    "session_label",
]
