"""Modal screens for the TUI."""

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Label, Static

from ..transcript import ChatSession
from .formatting import session_label


class DeleteSessionScreen(ModalScreen[bool]):
    """Asks before deleting a session; dismissed with True to delete.

    Y deletes, N or Esc keeps the session.
    """

    DEFAULT_CSS = """
    DeleteSessionScreen {
        align: center middle;
        background: $background 60%;

        & > #delete-dialog {
            width: 52;
            height: auto;
            padding: 0 1;
            background: $panel;
            border: round $error;
            border-title-color: $error;
            border-title-style: bold;
        }

        & #delete-session-label {
            width: 100%;
            padding: 1 1 0 1;
        }

        & #delete-warning {
            width: 100%;
            padding: 1;
            color: $text-muted;
        }

        & #delete-buttons {
            width: 100%;
            height: auto;
            align-horizontal: right;

            & > Button {
                margin-left: 1;
                min-width: 10;
            }
        }
    }
    """

    BINDINGS = [
        Binding("y", "answer(True)", "Delete", show=False),
        Binding("n", "answer(False)", "Keep", show=False),
        Binding("escape", "answer(False)", "Keep", show=False),
    ]

    def __init__(self, session: ChatSession) -> None:
        super().__init__()
        self._session = session

    def compose(self) -> ComposeResult:
        with Vertical(id="delete-dialog") as dialog:
            dialog.border_title = "Delete session?"
            yield Label(session_label(self._session), id="delete-session-label")
            yield Static("Its messages are removed on the server.", id="delete-warning")
            with Horizontal(id="delete-buttons"):
                yield Button("Keep", id="keep-btn")
                yield Button("Delete", id="delete-btn", variant="error")

    def on_mount(self) -> None:
        self.query_one("#keep-btn", Button).focus()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss(event.button.id == "delete-btn")

    def action_answer(self, delete: bool) -> None:
        self.dismiss(delete)
