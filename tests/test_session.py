"""Unit tests for the session module."""
from hypothesis import given
from hypothesis import strategies as st

from agentchat.session import SessionBinder


class Recorder:
    """Collects listener, refresh and debug calls."""

    def __init__(self) -> None:
        self.changes: list[str] = []
        self.refreshes = 0
        self.logs: list[tuple[str, str, str]] = []

    def refresh(self) -> None:
        self.refreshes += 1

    def debug(self, level: str, component: str, message: str) -> None:
        self.logs.append((level, component, message))


def _binder(session_id: str = "") -> tuple[SessionBinder, Recorder]:
    recorder = Recorder()
    binder = SessionBinder(session_id, refresh_sessions=recorder.refresh)
    binder.add_listener(recorder.changes.append)
    binder.set_debug_callback(recorder.debug)
    return binder, recorder


class TestBind:
    """Tests for adopting a server-announced session id."""

    def test_bind_new_session(self):
        """Test that the first announced id becomes active."""
        binder, recorder = _binder()

        assert binder.bind("s1") is True
        assert binder.active_session_id == "s1"
        assert binder.is_bound
        assert binder.reload_suppressed
        assert recorder.changes == ["s1"]
        assert recorder.refreshes == 1

    def test_bind_same_id_is_noop(self):
        """Test that repeating the active id changes nothing."""
        binder, recorder = _binder("s1")

        assert binder.bind("s1") is False
        assert not binder.reload_suppressed
        assert recorder.changes == []
        assert recorder.refreshes == 0

    def test_bind_empty_id_is_noop(self):
        """Test that an empty id is never adopted."""
        binder, recorder = _binder()
        assert binder.bind("") is False
        assert not binder.is_bound
        assert recorder.changes == []

    def test_bind_other_id_when_bound(self):
        """Test that a bound view keeps its id and logs a warning."""
        binder, recorder = _binder("s1")

        assert binder.bind("s9") is False
        assert binder.active_session_id == "s1"
        assert recorder.changes == []
        assert recorder.logs[-1][0] == "warning"
        assert recorder.logs[-1][1] == "Session"

    @given(st.lists(st.sampled_from(["s1", "s2", ""]), min_size=1, max_size=10))
    def test_first_non_empty_id_wins(self, ids: list[str]):
        """Property test: only the first non-empty announced id is adopted."""
        binder, recorder = _binder()
        for session_id in ids:
            binder.bind(session_id)

        expected = next((s for s in ids if s), "")
        assert binder.active_session_id == expected
        assert recorder.changes == ([expected] if expected else [])


class TestConsumeReload:
    """Tests for the one-shot reload suppression flag."""

    def test_suppresses_exactly_once_after_bind(self):
        """Test that the reload right after a bind is skipped, later ones are not."""
        binder, _ = _binder()
        binder.bind("s1")

        assert binder.consume_reload() is False
        assert not binder.reload_suppressed
        assert binder.consume_reload() is True

    def test_reload_allowed_without_bind(self):
        """Test that reloads go ahead when nothing was bound."""
        binder, _ = _binder("s1")
        assert binder.consume_reload() is True


class TestSwitch:
    """Tests for explicit session switches."""

    def test_switch_notifies_listeners(self):
        """Test that a switch changes the id and notifies without refreshing."""
        binder, recorder = _binder("s1")

        assert binder.switch("s2") is True
        assert binder.active_session_id == "s2"
        assert recorder.changes == ["s2"]
        assert recorder.refreshes == 0

    def test_switch_to_active_is_noop(self):
        """Test that selecting the active session changes nothing."""
        binder, recorder = _binder("s1")
        assert binder.switch("s1") is False
        assert recorder.changes == []

    def test_switch_to_new_session(self):
        """Test that switching to an empty id unbinds the view."""
        binder, recorder = _binder("s1")

        assert binder.switch("") is True
        assert not binder.is_bound
        assert recorder.changes == [""]
        assert binder.bind("s3") is True

    def test_switch_keeps_suppression_flag(self):
        """Test that a switch does not consume a pending suppression."""
        binder, _ = _binder()
        binder.bind("s1")
        binder.switch("s2")
        assert binder.reload_suppressed
