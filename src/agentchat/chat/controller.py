"""Conversation controller.

Drives send-and-stream cycles for one agent and owns the state a chat
view renders: the transcript, the session list, the agent header and an
error slot.

Hidden design decisions:
- Single-flight send guard
- Ordering of frame side effects (session binding, deltas, citations)
- Discarding late frames and stale loads after the view changed
- Converting backend failures into the error slot
"""

import asyncio
from collections.abc import Callable, Coroutine
from typing import Any

from ..client import AgentDetail, ChatBackend, ChatBackendError, ChatRequest
from ..client.models import DEFAULT_TOP_K
from ..session import SessionBinder
from ..stream import StreamFrame, iter_frames
from ..transcript import (
    ChatSession,
    Transcript,
    append_assistant_placeholder,
    append_user_message,
    apply_delta,
    attach_citations,
)
from .models import UpdateKind

UpdateCallback = Callable[[UpdateKind], None]


def _current_task() -> asyncio.Task | None:
    try:
        return asyncio.current_task()
    except RuntimeError:
        return None


class ConversationController:
    """State and send orchestration for chatting with one agent.

    Every view change (selecting a session, starting a new one) bumps a
    generation counter. Work started under an older generation, whether
    a stream or a transcript load, never writes to the current view.

    Example:
        async with create_chat_backend("http") as backend:
            controller = ConversationController(backend, "agent-1")
            await controller.open()
            await controller.send("What changed in the last release?")
            print(controller.transcript[-1].content)
    """

    def __init__(
        self,
        backend: ChatBackend,
        agent_id: str,
        session_id: str = "",
        top_k: int = DEFAULT_TOP_K,
    ) -> None:
        """Initialize the controller.

        Args:
            backend: API backend to talk to
            agent_id: Agent to chat with
            session_id: Session to continue, or "" to start a new one
            top_k: Result-size hint sent with every request
        """
        self._backend = backend
        self._agent_id = agent_id
        self._top_k = top_k

        self._transcript: Transcript = ()
        self._sessions: list[ChatSession] = []
        self._agent: AgentDetail | None = None
        self._error = ""

        self._sending = False
        self._send_task: asyncio.Task | None = None
        self._send_token: object | None = None
        self._generation = 0
        self._background: set[asyncio.Task] = set()

        self._update_callback: UpdateCallback | None = None
        self._debug_callback: Any | None = None

        self._binder = SessionBinder(session_id, refresh_sessions=self._schedule_session_refresh)
        self._binder.add_listener(self._on_session_changed)

    # -- State -------------------------------------------------------------

    @property
    def agent_id(self) -> str:
        return self._agent_id

    @property
    def transcript(self) -> Transcript:
        return self._transcript

    @property
    def sessions(self) -> list[ChatSession]:
        return list(self._sessions)

    @property
    def agent(self) -> AgentDetail | None:
        return self._agent

    @property
    def error(self) -> str:
        """Last user-visible error, or an empty string."""
        return self._error

    @property
    def sending(self) -> bool:
        return self._sending

    @property
    def active_session_id(self) -> str:
        return self._binder.active_session_id

    @property
    def binder(self) -> SessionBinder:
        return self._binder

    @property
    def title(self) -> str:
        return f"Chat: {self._agent.name}" if self._agent else "Agent chat"

    @property
    def subtitle(self) -> str:
        return self._agent.summary if self._agent else ""

    # -- Callbacks ---------------------------------------------------------

    def set_update_callback(self, callback: UpdateCallback | None) -> None:
        """Set the callable notified after each state change.

        Args:
            callback: Callable(kind: UpdateKind)
        """
        self._update_callback = callback

    def set_debug_callback(self, callback: Any) -> None:
        """Set the debug callback for detailed logging.

        Args:
            callback: Callable(level: str, component: str, message: str)
                      level: 'debug', 'info', 'warning', 'error'
        """
        self._debug_callback = callback
        self._binder.set_debug_callback(callback)

    def _debug(self, level: str, component: str, message: str) -> None:
        if self._debug_callback:
            self._debug_callback(level, component, message)

    def _notify(self, kind: UpdateKind) -> None:
        if self._update_callback:
            self._update_callback(kind)

    def _set_transcript(self, transcript: Transcript) -> None:
        if transcript is self._transcript:
            return
        self._transcript = transcript
        self._notify(UpdateKind.TRANSCRIPT)

    def _set_error(self, message: str) -> None:
        if message == self._error:
            return
        self._error = message
        self._notify(UpdateKind.ERROR)

    # -- Background work ---------------------------------------------------

    def _spawn(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return task

    def _schedule_session_refresh(self) -> None:
        self._spawn(self.load_sessions(generation=self._generation))

    async def wait_idle(self) -> None:
        """Wait until all scheduled loads and refreshes have finished."""
        while self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation

    # -- Loading -----------------------------------------------------------

    async def open(self) -> None:
        """Load the initial view: transcript of the given session, agent and sessions."""
        if self._binder.is_bound:
            await self.load_messages(self._binder.active_session_id)
        await self.refresh()

    async def refresh(self) -> None:
        """Reload the agent header and the session list."""
        self._set_error("")
        await asyncio.gather(self.load_agent(), self.load_sessions(generation=self._generation))

    async def load_agent(self) -> None:
        try:
            self._agent = await self._backend.get_agent(self._agent_id)
        except ChatBackendError as e:
            self._debug("error", "HTTP", f"Failed to load agent: {e}")
            self._set_error(str(e))
            return
        self._notify(UpdateKind.AGENT)

    async def load_sessions(self, generation: int | None = None) -> None:
        """Reload the session list.

        If no session is active and nothing is being sent, the newest
        session becomes active, unless the view changed since the reload
        was requested.

        Args:
            generation: View generation the reload was requested under;
                defaults to the current one
        """
        if generation is None:
            generation = self._generation
        try:
            sessions = await self._backend.list_sessions(self._agent_id)
        except ChatBackendError as e:
            self._debug("error", "HTTP", f"Failed to load sessions: {e}")
            self._set_error(str(e))
            return

        self._sessions = sessions
        self._notify(UpdateKind.SESSIONS)

        if (
            sessions
            and self._is_current(generation)
            and not self._binder.is_bound
            and not self._sending
        ):
            self._binder.switch(sessions[0].session_id)

    async def load_messages(self, session_id: str) -> None:
        """Replace the transcript with the persisted messages of a session.

        The result is dropped if the view changed while the fetch was in
        flight: another session became active, or the transcript was
        written to (for example by a send).
        """
        generation = self._generation
        started_from = self._transcript
        try:
            messages = await self._backend.list_messages(self._agent_id, session_id)
        except ChatBackendError as e:
            if self._is_current(generation):
                self._debug("error", "HTTP", f"Failed to load messages: {e}")
                self._set_error(str(e))
            return

        if (
            not self._is_current(generation)
            or session_id != self._binder.active_session_id
            or self._transcript is not started_from
        ):
            self._debug("debug", "Transcript", f"Discarding stale transcript for {session_id}")
            return

        self._set_transcript(tuple(messages))
        self._debug("debug", "Transcript", f"Loaded {len(messages)} message(s) for {session_id}")

    # -- Session switching -------------------------------------------------

    def _on_session_changed(self, session_id: str) -> None:
        """React to a change of the active session id."""
        if session_id and not self._binder.consume_reload():
            # Freshly bound by the stream in flight; keep the live transcript
            return
        self._reset_view()
        if session_id:
            self._spawn(self.load_messages(session_id))

    def _reset_view(self) -> None:
        """Start a fresh view context and clear the transcript."""
        self._generation += 1
        self._cancel_send()
        self._set_transcript(())

    def select_session(self, session_id: str) -> None:
        """Show an existing session. Selecting the active one is a no-op."""
        self._binder.switch(session_id)

    def new_session(self) -> None:
        """Start a new blank conversation."""
        if not self._binder.switch(""):
            self._reset_view()

    async def delete_session(self, session_id: str) -> bool:
        """Delete a session and reload the session list.

        Returns:
            True if the server deleted the session
        """
        try:
            await self._backend.delete_session(self._agent_id, session_id)
        except ChatBackendError as e:
            self._debug("error", "HTTP", f"Failed to delete session: {e}")
            self._set_error(str(e))
            return False

        self._debug("info", "Session", f"Deleted session {session_id}")
        if session_id == self._binder.active_session_id:
            self.new_session()
        await self.load_sessions()
        return True

    # -- Sending -----------------------------------------------------------

    def _cancel_send(self) -> None:
        if not self._sending:
            return
        self._sending = False
        self._send_token = None
        task, self._send_task = self._send_task, None
        if task is not None and task is not _current_task() and not task.done():
            self._debug("info", "Send", "Cancelling in-flight send")
            task.cancel()
        self._notify(UpdateKind.STATUS)

    def cancel(self) -> bool:
        """Cancel the in-flight send, keeping the content received so far.

        Returns:
            True if a send was cancelled
        """
        if not self._sending:
            return False
        self._cancel_send()
        return True

    def _apply_frame(self, frame: StreamFrame) -> None:
        if frame.has_session:
            self._binder.bind(frame.session_id)
        if frame.has_delta:
            self._set_transcript(apply_delta(self._transcript, frame.delta))
        if frame.citations:
            self._set_transcript(attach_citations(self._transcript, frame.citations))

    async def send(self, text: str) -> bool:
        """Send a message and stream the reply into the transcript.

        Backend failures end up in the error slot; only cancellation
        propagates to the caller.

        Args:
            text: The user's input

        Returns:
            False if the input was empty or another send is in flight
        """
        message = text.strip()
        if not message:
            return False
        if self._sending:
            self._debug("debug", "Send", "Ignored: a send is already in flight")
            return False

        token = object()
        self._sending = True
        self._send_token = token
        self._send_task = _current_task()
        generation = self._generation
        session_id = self._binder.active_session_id

        self._set_error("")
        self._set_transcript(append_user_message(self._transcript, message))
        self._notify(UpdateKind.STATUS)

        request = ChatRequest(session_id=session_id, message=message, top_k=self._top_k, stream=True)
        self._debug("info", "Send", f"Sending to agent {self._agent_id} (session: {session_id or 'new'})")

        streaming = False
        try:
            async with self._backend.open_chat_stream(self._agent_id, request) as chunks:
                if self._is_current(generation):
                    self._set_transcript(append_assistant_placeholder(self._transcript))
                    streaming = True
                    async for frame in iter_frames(chunks):
                        if not self._is_current(generation):
                            self._debug("warning", "Stream", "View changed, discarding remaining frames")
                            break
                        self._apply_frame(frame)
            self._debug("info", "Stream", "Stream complete")
        except ChatBackendError as e:
            if not self._is_current(generation):
                pass
            elif streaming:
                # Keep what arrived and treat it as the final reply
                self._debug("warning", "Stream", f"Stream ended early: {e}")
            else:
                self._debug("error", "Send", str(e))
                self._set_error(str(e))
        finally:
            # A cancel or view change may already have released the guard
            if self._send_token is token:
                self._sending = False
                self._send_token = None
                self._send_task = None
                self._notify(UpdateKind.STATUS)

        # A request that never reached the stream leaves the session list alone
        if streaming and self._is_current(generation) and self._binder.is_bound:
            self._schedule_session_refresh()
        return True

    async def aclose(self) -> None:
        """Cancel in-flight work and wait for it to unwind."""
        task = self._send_task
        self._cancel_send()
        pending = list(self._background)
        for background in pending:
            background.cancel()
        if task is not None and task is not _current_task():
            pending.append(task)
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
