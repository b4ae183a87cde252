"""Custom Textual widgets for the TUI.

Hides widget implementation details:
- Session list rendering and selection
- Chat message rendering (thought/answer split, citations)
- Incremental transcript updates
- Input history management
- Log rendering and level filtering
"""

from datetime import datetime

from rich.text import Text
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.events import Click
from textual.message import Message
from textual.widgets import Button, Collapsible, Label, ListItem, ListView, Markdown, RichLog, Static, TextArea

from ..transcript import ChatMessage, ChatSession, SplitStatus, Transcript, split_thought_answer
from .config import (
    EMPTY_CHAT_TEXT,
    EMPTY_SESSIONS_TEXT,
    LOG_MAX_MESSAGE_LENGTH,
    LOG_TIMESTAMP_FORMAT,
    THINKING_LABEL,
    TRACE_CLOSED_TITLE,
    TRACE_OPEN_TITLE,
    LogLevel,
)
from .formatting import format_citations, format_timestamp, session_label


def _role_class(role: str) -> str:
    if role == "user":
        return "user-message"
    if role == "assistant":
        return "assistant-message"
    return "other-message"


class MessageView(Vertical):
    """A single chat message.

    Assistant messages are split into a reasoning trace and an answer on
    every update. Other roles render their content as plain text.
    """

    def __init__(self, message: ChatMessage, *args, **kwargs) -> None:
        super().__init__(*args, classes=f"chat-message {_role_class(message.role)}", **kwargs)
        self._message = message
        # User toggle of the trace, remembered while the split status stays the same
        self._trace_override: tuple[SplitStatus, bool] | None = None

    @property
    def message(self) -> ChatMessage:
        return self._message

    def set_message(self, message: ChatMessage) -> None:
        """Show a new version of the message."""
        if message is self._message:
            return
        if message.role != self._message.role:
            self.remove_class(_role_class(self._message.role))
            self.add_class(_role_class(message.role))
            self._trace_override = None
        self._message = message
        self.refresh(recompose=True)

    def compose(self):
        msg = self._message
        header = f"{msg.role} · {format_timestamp(msg.created_at)}".rstrip(" ·")
        yield Static(header, classes="message-header")

        if not msg.is_assistant:
            yield Static(Text(msg.content), classes="message-content")
            return

        split = split_thought_answer(msg.content)
        if split.in_progress:
            yield Static(f"[bold]{THINKING_LABEL}[/]", classes="thinking")

        if split.trace:
            collapsed = not split.trace_expanded
            if self._trace_override is not None and self._trace_override[0] == split.status:
                collapsed = self._trace_override[1]
            title = TRACE_OPEN_TITLE if split.status == SplitStatus.THINKING else TRACE_CLOSED_TITLE
            yield Collapsible(
                Static(Text(split.trace), classes="trace"),
                title=title,
                collapsed=collapsed,
            )

        if split.answer is not None:
            yield Markdown(split.answer, classes="message-content")

        if msg.citations:
            yield Static(format_citations(msg.citations), classes="citations")

    def _remember_toggle(self, collapsed: bool) -> None:
        status = split_thought_answer(self._message.content).status
        self._trace_override = (status, collapsed)

    def on_collapsible_expanded(self, event: Collapsible.Expanded) -> None:
        event.stop()
        self._remember_toggle(False)

    def on_collapsible_collapsed(self, event: Collapsible.Collapsed) -> None:
        event.stop()
        self._remember_toggle(True)


class ChatHistoryWidget(VerticalScroll):
    """Scrollable transcript view.

    Updates are incremental: a message view is only rebuilt when its
    message object was replaced, which during streaming is just the
    trailing assistant message.
    """

    BORDER_TITLE = "Chat"
    BORDER_SUBTITLE = "Conversation"
    ALLOW_MAXIMIZE = True

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._transcript: Transcript = ()
        self._views: list[MessageView] = []

    def compose(self):
        yield Static(EMPTY_CHAT_TEXT, id="chat-empty")

    @property
    def transcript(self) -> Transcript:
        return self._transcript

    def set_transcript(self, transcript: Transcript) -> None:
        """Render a new transcript, reusing views of unchanged messages."""
        self._transcript = transcript

        for i, message in enumerate(transcript):
            if i < len(self._views):
                self._views[i].set_message(message)
            else:
                view = MessageView(message)
                self._views.append(view)
                self.mount(view)

        for view in self._views[len(transcript):]:
            view.remove()
        del self._views[len(transcript):]

        self.query_one("#chat-empty", Static).display = not transcript
        self.border_subtitle = f"{len(transcript)} messages" if transcript else "Conversation"
        self.scroll_end(animate=False)

    def get_last_response(self) -> str | None:
        """Get the answer of the last assistant message, or its raw content."""
        for msg in reversed(self._transcript):
            if msg.is_assistant:
                split = split_thought_answer(msg.content)
                return split.answer if split.answer is not None else msg.content
        return None


class SessionItem(ListItem):
    """Session list entry carrying its session id."""

    def __init__(self, session: ChatSession) -> None:
        super().__init__(Label(session_label(session)))
        self.session = session
        self.session_id = session.session_id


class SessionList(ListView):
    """Sidebar listing the agent's sessions."""

    BORDER_TITLE = "Sessions"

    async def set_sessions(self, sessions: list[ChatSession], active_session_id: str) -> None:
        """Replace the entries and highlight the active session."""
        await self.clear()
        if not sessions:
            await self.append(ListItem(Label(EMPTY_SESSIONS_TEXT), disabled=True))
            self.border_subtitle = "0"
            return

        await self.extend(SessionItem(session) for session in sessions)
        self.border_subtitle = str(len(sessions))
        self.highlight_session(active_session_id)

    def highlight_session(self, session_id: str) -> None:
        for i, item in enumerate(self.children):
            if isinstance(item, SessionItem) and item.session_id == session_id:
                self.index = i
                return
        self.index = None


class ErrorBanner(Static):
    """Visible error slot above the chat."""

    def on_mount(self) -> None:
        self.display = False

    def show_error(self, message: str) -> None:
        """Show a message, or hide the banner when it is empty."""
        self.update(Text(message))
        self.display = bool(message)


class ChatInputBar(Horizontal):
    """Chat input bar with TextArea and Send button.

    The text stays in place until the app accepts it, so a rejected
    submission does not lose the input.
    """

    class Submitted(Message):
        """Message sent when user submits input."""

        def __init__(self, value: str) -> None:
            super().__init__()
            self.value = value

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._history: list[str] = []
        self._history_index: int = -1

    def compose(self):
        text_area = TextArea(id="chat-input", show_line_numbers=False)
        text_area.cursor_blink = False
        yield text_area
        yield Button("Send", id="send-btn", variant="success").with_tooltip(
            "Send message (Ctrl+J)"
        )

    def on_mount(self) -> None:
        text_area = self.query_one("#chat-input", TextArea)
        text_area.focus()
        text_area.highlight_cursor_line = False

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "send-btn":
            self._submit()

    def on_key(self, event) -> None:
        """Handle keyboard shortcuts.

        Note: ctrl+enter cannot work in terminals (terminal doesn't pass
        ctrl/shift modifiers with Enter). Use ctrl+j as the submit shortcut.
        """
        if event.key == "ctrl+j":
            self._submit()
            event.prevent_default()
            event.stop()
        elif event.key == "up" and self._is_cursor_at_start():
            self._navigate_history(-1)
            event.prevent_default()
            event.stop()
        elif event.key == "down" and self._is_cursor_at_end():
            self._navigate_history(1)
            event.prevent_default()
            event.stop()

    def _is_cursor_at_start(self) -> bool:
        text_area = self.query_one("#chat-input", TextArea)
        return text_area.cursor_location == (0, 0)

    def _is_cursor_at_end(self) -> bool:
        text_area = self.query_one("#chat-input", TextArea)
        lines = text_area.text.split("\n")
        return text_area.cursor_location == (len(lines) - 1, len(lines[-1]))

    def _navigate_history(self, direction: int) -> None:
        if not self._history:
            return
        text_area = self.query_one("#chat-input", TextArea)
        if direction < 0:  # Up
            if self._history_index == -1:
                self._history_index = len(self._history) - 1
            elif self._history_index > 0:
                self._history_index -= 1
        else:  # Down
            if self._history_index < len(self._history) - 1:
                self._history_index += 1
            else:
                self._history_index = -1
                text_area.text = ""
                return
        text_area.text = self._history[self._history_index]

    def _submit(self) -> None:
        value = self.query_one("#chat-input", TextArea).text.strip()
        if value:
            self.post_message(self.Submitted(value))

    def accept_input(self, value: str) -> None:
        """Clear the input and remember the sent text in history."""
        if not self._history or self._history[-1] != value:
            self._history.append(value)
        self._history_index = -1
        self.query_one("#chat-input", TextArea).text = ""

    def set_sending(self, sending: bool) -> None:
        """Reflect whether a reply is streaming."""
        button = self.query_one("#send-btn", Button)
        button.disabled = sending
        button.label = "Sending..." if sending else "Send"

    def focus_input(self) -> None:
        """Focus the text input."""
        self.query_one("#chat-input", TextArea).focus()


class DebugPanel(RichLog):
    """Log panel for real-time tracing with level filtering.

    Shows timestamped log messages from the controller components.
    Supports standard log levels: DEBUG < INFO < WARNING < ERROR.
    Hidden by default, shown with --log-level flag or toggled with Ctrl+D.
    """

    BORDER_TITLE = "Log"
    BORDER_SUBTITLE = "Trace log"

    _level_colors = {
        LogLevel.DEBUG: "dim white",
        LogLevel.INFO: "cyan",
        LogLevel.WARNING: "yellow",
        LogLevel.ERROR: "red",
    }

    _component_colors = {
        "TUI": "cyan",
        "Send": "green",
        "Stream": "magenta",
        "Session": "bright_blue",
        "Transcript": "bright_green",
        "HTTP": "yellow",
    }

    def __init__(self, *args, log_level: int = LogLevel.DEBUG, **kwargs) -> None:
        super().__init__(
            *args,
            markup=True,
            highlight=False,
            auto_scroll=True,
            wrap=True,
            **kwargs
        )
        self._log_level = log_level

    @property
    def log_level(self) -> int:
        """Current log level threshold."""
        return self._log_level

    @log_level.setter
    def log_level(self, level: int) -> None:
        self._log_level = level
        self._update_subtitle()

    def _update_subtitle(self) -> None:
        if self.display:
            self.border_subtitle = f"Level: {LogLevel(self._log_level).name}"
        else:
            self.border_subtitle = "Hidden"

    def on_mount(self) -> None:
        """Hide by default."""
        self.display = False

    def log(self, component: str, message: str, level: int = LogLevel.DEBUG) -> None:
        """Add a log entry if it meets the current level threshold.

        Args:
            component: Component name (TUI, Send, Stream, Session, ...)
            message: Log message
            level: Log level (LogLevel.DEBUG, INFO, WARNING, ERROR)
        """
        if level < self._log_level:
            return

        if len(message) > LOG_MAX_MESSAGE_LENGTH:
            message = message[:LOG_MAX_MESSAGE_LENGTH] + "..."

        timestamp = datetime.now().strftime(LOG_TIMESTAMP_FORMAT)
        level_color = self._level_colors.get(level, "white")
        comp_color = self._component_colors.get(component, "white")

        line = Text.from_markup(
            f"[dim]{timestamp}[/] [{level_color}]{LogLevel(level).name:<5}[/] "
            f"[{comp_color}]\\[{component}][/] "
        )
        line.append(message)
        self.write(line)

    def debug(self, component: str, message: str) -> None:
        """Log a DEBUG level message."""
        self.log(component, message, LogLevel.DEBUG)

    def info(self, component: str, message: str) -> None:
        """Log an INFO level message."""
        self.log(component, message, LogLevel.INFO)

    def warning(self, component: str, message: str) -> None:
        """Log a WARNING level message."""
        self.log(component, message, LogLevel.WARNING)

    def error(self, component: str, message: str) -> None:
        """Log an ERROR level message."""
        self.log(component, message, LogLevel.ERROR)

    def show(self) -> None:
        self.display = True
        self._update_subtitle()

    def hide(self) -> None:
        self.display = False
        self.border_subtitle = "Hidden"

    def toggle(self) -> bool:
        """Toggle visibility. Returns new state."""
        if self.display:
            self.hide()
            return False
        self.show()
        return True

    def get_plain_text(self) -> str:
        """Get plain text content of the log for copying."""
        return "\n".join(line.text for line in self.lines)

    def on_click(self, event: Click) -> None:
        """Copy log content to clipboard when clicked."""
        event.stop()
        text = self.get_plain_text()
        if not text.strip():
            self.app.notify("Log is empty", timeout=2)
            return
        self.app.copy_to_clipboard(text)
        self.app.notify("Log copied", timeout=2)
