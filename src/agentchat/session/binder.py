"""Session binder.

Hides how the active session id is resolved when a send may create a
brand-new session on the server. The binder is the only writer of the
active session id besides explicit user switches.
"""

from collections.abc import Callable
from typing import Any

SessionListener = Callable[[str], None]


class SessionBinder:
    """Tracks the active session id for one conversation view.

    An empty id means "no session yet"; the server creates one on the
    first send and announces it in the stream. When that happens the
    binder adopts the id, asks for a session list refresh, and sets a
    one-shot flag so that the reload-on-change consumer skips the reload
    that would otherwise overwrite the transcript still being streamed.

    Listeners are called synchronously whenever the active id changes,
    whichever writer changed it.
    """

    def __init__(
        self,
        session_id: str = "",
        refresh_sessions: Callable[[], Any] | None = None,
    ) -> None:
        self._active_session_id = session_id
        self._suppress_reload = False
        self._refresh_sessions = refresh_sessions
        self._listeners: list[SessionListener] = []
        self._debug_callback: Any | None = None

    @property
    def active_session_id(self) -> str:
        """The bound session id, or an empty string."""
        return self._active_session_id

    @property
    def is_bound(self) -> bool:
        return bool(self._active_session_id)

    @property
    def reload_suppressed(self) -> bool:
        """Whether the next reload-on-change is to be skipped."""
        return self._suppress_reload

    def set_debug_callback(self, callback: Any) -> None:
        """Set the debug callback.

        Args:
            callback: Callable(level: str, component: str, message: str)
        """
        self._debug_callback = callback

    def _debug(self, level: str, message: str) -> None:
        if self._debug_callback:
            self._debug_callback(level, "Session", message)

    def add_listener(self, listener: SessionListener) -> None:
        """Register a callable invoked with the new id after each change."""
        self._listeners.append(listener)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self._active_session_id)

    def bind(self, session_id: str) -> bool:
        """Adopt a session id announced by the server mid-stream.

        Only takes effect while no session is bound. Repeating the active
        id is a no-op; a different id for an already bound view is ignored,
        since a bound id never changes without an explicit switch.

        Args:
            session_id: Id from a session frame

        Returns:
            True if the id was adopted
        """
        if not session_id or session_id == self._active_session_id:
            return False

        if self._active_session_id:
            self._debug(
                "warning",
                f"Ignoring session id {session_id}: view already bound to {self._active_session_id}"
            )
            return False

        self._active_session_id = session_id
        self._suppress_reload = True
        self._debug("info", f"Bound new session {session_id}")

        self._notify()
        if self._refresh_sessions is not None:
            self._refresh_sessions()
        return True

    def consume_reload(self) -> bool:
        """Decide whether a reload-on-change may go ahead.

        Resets the suppression flag if it was set.

        Returns:
            False exactly once after a bind, True otherwise
        """
        if self._suppress_reload:
            self._suppress_reload = False
            self._debug("debug", "Skipped transcript reload for freshly bound session")
            return False
        return True

    def switch(self, session_id: str) -> bool:
        """Switch to another session by explicit user action.

        Args:
            session_id: Session to show, or "" for a new blank session

        Returns:
            True if the active id changed
        """
        if session_id == self._active_session_id:
            return False

        self._active_session_id = session_id
        self._debug("info", f"Switched to session {session_id or '(new)'}")
        self._notify()
        return True
