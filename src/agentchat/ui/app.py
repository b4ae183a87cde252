"""Main Textual TUI application.

Orchestrates the UI components and forwards user interaction to the
ConversationController.
"""

import asyncio

from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.widgets import Footer, Header, ListView

from ..chat import ConversationController, UpdateKind
from ..client import ChatBackend
from ..client.models import DEFAULT_TOP_K
from .config import LogLevel
from .screens import DeleteSessionScreen
from .styles import APP_CSS
from .widgets import (
    ChatHistoryWidget,
    ChatInputBar,
    DebugPanel,
    ErrorBanner,
    SessionItem,
    SessionList,
)


class AgentChatApp(App):
    """Textual TUI for chatting with one agent."""

    CSS = APP_CSS
    TITLE = "Agent chat"

    BINDINGS = [
        Binding("ctrl+c", "quit", "Quit"),
        Binding("ctrl+n", "new_session", "New Chat", priority=True),
        Binding("ctrl+x", "delete_session", "Delete Session", priority=True),
        Binding("ctrl+r", "refresh", "Refresh", priority=True),
        Binding("escape", "cancel_send", "Cancel"),
        Binding("ctrl+y", "copy_last_response", "Copy Answer", priority=True),
        Binding("ctrl+d", "toggle_debug", "Debug", priority=True),
    ]

    def __init__(
        self,
        backend: ChatBackend,
        agent_id: str,
        session_id: str = "",
        top_k: int = DEFAULT_TOP_K,
        log_level: str | None = None,
    ) -> None:
        super().__init__()
        self._log_level = log_level
        self._send_pending = False
        self._controller = ConversationController(backend, agent_id, session_id=session_id, top_k=top_k)

    @property
    def controller(self) -> ConversationController:
        return self._controller

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)

        yield SessionList(id="session-list")

        with Vertical(id="main-panel"):
            yield ErrorBanner(id="error-banner")
            yield ChatHistoryWidget(id="chat-history")
            yield DebugPanel(id="debug-panel")

        yield ChatInputBar(id="chat-input-bar")
        yield Footer()

    def on_mount(self) -> None:
        """Called when app is mounted."""
        self.theme = "catppuccin-mocha"

        # Controller callbacks may fire while a modal screen is active
        self._chat = self.query_one("#chat-history", ChatHistoryWidget)
        self._session_list = self.query_one("#session-list", SessionList)
        self._input_bar = self.query_one("#chat-input-bar", ChatInputBar)
        self._error_banner = self.query_one("#error-banner", ErrorBanner)
        self._log_panel = log_panel = self.query_one("#debug-panel", DebugPanel)

        # Configure log panel if --log-level was passed
        if self._log_level is not None:
            log_panel.log_level = LogLevel.from_string(self._log_level)
            log_panel.show()
            log_panel.info("TUI", f"Log panel enabled with level: {self._log_level.upper()}")

        self._controller.set_update_callback(self._on_controller_update)
        self._controller.set_debug_callback(self._route_debug)
        self._controller.binder.add_listener(self._on_active_session_changed)

        self.sub_title = self._controller.agent_id
        self._input_bar.focus_input()
        self._open_conversation()

    async def on_unmount(self) -> None:
        """Stop in-flight work when the app exits."""
        self._controller.set_update_callback(None)
        self._controller.set_debug_callback(None)
        await self._controller.aclose()

    # -- Controller updates ------------------------------------------------

    def _route_debug(self, level: str, component: str, message: str) -> None:
        """Route debug messages to the log panel."""
        log_panel = self._log_panel
        if level == "debug":
            log_panel.debug(component, message)
        elif level == "info":
            log_panel.info(component, message)
        elif level == "warning":
            log_panel.warning(component, message)
        elif level == "error":
            log_panel.error(component, message)

    def _on_controller_update(self, kind: UpdateKind) -> None:
        controller = self._controller
        if kind == UpdateKind.TRANSCRIPT:
            self._chat.set_transcript(controller.transcript)
        elif kind == UpdateKind.SESSIONS:
            self.call_later(self._render_sessions)
        elif kind == UpdateKind.AGENT:
            self.title = controller.title
            self.sub_title = controller.subtitle
        elif kind == UpdateKind.ERROR:
            self._error_banner.show_error(controller.error)
        elif kind == UpdateKind.STATUS:
            self._input_bar.set_sending(controller.sending)

    async def _render_sessions(self) -> None:
        await self._session_list.set_sessions(self._controller.sessions, self._controller.active_session_id)

    def _on_active_session_changed(self, session_id: str) -> None:
        self._session_list.highlight_session(session_id)

    # -- Workers -----------------------------------------------------------

    @work(exclusive=True, group="load")
    async def _open_conversation(self) -> None:
        await self._controller.open()

    @work(exclusive=True, group="load")
    async def _refresh(self) -> None:
        await self._controller.refresh()

    @work(group="send")
    async def _send(self, text: str) -> None:
        """Stream one reply as a background async worker."""
        self._log_panel.info("TUI", f"Sending: '{text[:50]}'")
        try:
            await self._controller.send(text)
        except asyncio.CancelledError:
            self.notify("Cancelled", severity="warning", timeout=2)
        finally:
            self._send_pending = False

    @work(group="delete")
    async def _delete_session(self, session_id: str) -> None:
        if await self._controller.delete_session(session_id):
            self.notify("Session deleted", timeout=2)

    # -- Events ------------------------------------------------------------

    def on_chat_input_bar_submitted(self, event: ChatInputBar.Submitted) -> None:
        """Handle user input submission."""
        # The controller only raises its guard once the worker runs
        if self._send_pending or self._controller.sending:
            self.notify("Wait for the current reply or press Esc", severity="warning", timeout=2)
            return
        self._send_pending = True
        self._input_bar.accept_input(event.value)
        self._send(event.value)

    def on_list_view_selected(self, event: ListView.Selected) -> None:
        if isinstance(event.item, SessionItem):
            self._controller.select_session(event.item.session_id)
            self._input_bar.focus_input()

    # -- Actions -----------------------------------------------------------

    def action_new_session(self) -> None:
        """Start a blank conversation."""
        self._controller.new_session()
        self._session_list.highlight_session("")
        self._input_bar.focus_input()

    def action_delete_session(self) -> None:
        """Delete the highlighted session after confirmation."""
        item = self._session_list.highlighted_child
        if not isinstance(item, SessionItem):
            self.notify("No session selected", severity="warning", timeout=2)
            return
        session_id = item.session_id

        def on_answer(delete: bool | None) -> None:
            if delete:
                self._delete_session(session_id)

        self.push_screen(DeleteSessionScreen(item.session), on_answer)

    def action_refresh(self) -> None:
        """Reload the agent header and the session list."""
        self._refresh()

    def action_cancel_send(self) -> None:
        """Cancel the reply being streamed."""
        if self._controller.cancel():
            self.notify("Cancelled", severity="warning", timeout=2)

    def action_toggle_debug(self) -> None:
        """Toggle the log panel visibility."""
        log_panel = self._log_panel
        is_visible = log_panel.toggle()
        self.notify(f"Log panel {'shown' if is_visible else 'hidden'}", timeout=2)

    def action_copy_last_response(self) -> None:
        """Copy last assistant answer to clipboard."""
        chat = self._chat
        response = chat.get_last_response()
        if response:
            self.copy_to_clipboard(response)
            self.notify("Answer copied")
        else:
            self.notify("No answer to copy", severity="warning")


async def run_tui(
    backend: ChatBackend,
    agent_id: str,
    session_id: str = "",
    top_k: int = DEFAULT_TOP_K,
    log_level: str | None = None,
) -> None:
    """Run the Textual TUI.

    Args:
        backend: API backend to talk to
        agent_id: Agent to chat with
        session_id: Session to open, or "" for the newest one
        top_k: Result-size hint sent with every request
        log_level: Log level for panel (debug/info/warning/error), None to hide
    """
    app = AgentChatApp(
        backend=backend,
        agent_id=agent_id,
        session_id=session_id,
        top_k=top_k,
        log_level=log_level,
    )
    try:
        await app.run_async()
    except (KeyboardInterrupt, asyncio.CancelledError):
        pass
