"""Pytest configuration and shared fixtures."""
import asyncio
import json
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import pytest

from agentchat.client import AgentDetail, ChatBackend, ChatBackendError, ChatRequest, ChatResponse
from agentchat.stream import DONE_SENTINEL
from agentchat.transcript import ChatMessage, ChatSession


def sse(payload: dict) -> bytes:
    """Encode one data event the way the server writes it."""
    return f"data: {json.dumps(payload, ensure_ascii=False)}\n\n".encode()


DONE = f"data: {DONE_SENTINEL}\n\n".encode()


class ScriptedStream:
    """Body of one streaming reply served by FakeBackend.

    Args:
        *chunks: Body chunks in order
        open_error: Raised when the request is opened (bad status, refused connection)
        error: Raised after the last chunk (connection cut mid-stream)
        hold_after: Pause before yielding the chunk with this index until
            `release` is set; `reached` is set when the pause starts
    """

    def __init__(
        self,
        *chunks: bytes,
        open_error: ChatBackendError | None = None,
        error: ChatBackendError | None = None,
        hold_after: int | None = None,
    ) -> None:
        self.chunks = list(chunks)
        self.open_error = open_error
        self.error = error
        self.hold_after = hold_after
        self.reached = asyncio.Event()
        self.release = asyncio.Event()
        self.pulled = 0

    async def body(self):
        for i, chunk in enumerate(self.chunks):
            if i == self.hold_after:
                self.reached.set()
                await self.release.wait()
            self.pulled += 1
            yield chunk
        if self.error is not None:
            raise self.error


class FakeBackend(ChatBackend):
    """In-memory backend with scripted streaming replies."""

    def __init__(self) -> None:
        self.agent = AgentDetail(
            agent_id="agent-1",
            name="Helper",
            skill_files=["search.md"],
            system_rule_files=["tone.md", "safety.md"],
        )
        self.sessions: list[ChatSession] = []
        self.messages: dict[str, list[ChatMessage]] = {}
        self.replies: list[ScriptedStream] = []
        self.requests: list[ChatRequest] = []
        self.message_loads: list[str] = []
        self.session_loads = 0
        self.deleted: list[str] = []
        self.failures: dict[str, ChatBackendError] = {}
        self.closed = False

    def _check(self, operation: str) -> None:
        if operation in self.failures:
            raise self.failures[operation]

    @asynccontextmanager
    async def open_chat_stream(self, agent_id: str, request: ChatRequest):
        self.requests.append(request)
        reply = self.replies.pop(0)
        if reply.open_error is not None:
            raise reply.open_error
        yield reply.body()

    async def chat(self, agent_id: str, request: ChatRequest) -> ChatResponse:
        self._check("chat")
        self.requests.append(request)
        return ChatResponse(session_id=request.session_id or "s-new", answer="Final Answer: ok")

    async def get_agent(self, agent_id: str) -> AgentDetail:
        self._check("get_agent")
        return self.agent

    async def list_sessions(self, agent_id: str) -> list[ChatSession]:
        self._check("list_sessions")
        self.session_loads += 1
        await asyncio.sleep(0)
        return list(self.sessions)

    async def list_messages(self, agent_id: str, session_id: str) -> list[ChatMessage]:
        self._check("list_messages")
        self.message_loads.append(session_id)
        await asyncio.sleep(0)
        return list(self.messages.get(session_id, []))

    async def delete_session(self, agent_id: str, session_id: str) -> None:
        self._check("delete_session")
        self.deleted.append(session_id)
        self.sessions = [s for s in self.sessions if s.session_id != session_id]
        self.messages.pop(session_id, None)

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def backend():
    """Return a fake backend with no sessions."""
    return FakeBackend()


@pytest.fixture
def fixed_time():
    """Return a fixed UTC timestamp."""
    return datetime(2024, 5, 17, 9, 30, tzinfo=timezone.utc)


@pytest.fixture
def persisted_sessions(backend, fixed_time):
    """Populate the backend with two sessions, newest first."""
    backend.sessions = [
        ChatSession(session_id="s2", title="Release notes", updated_at=fixed_time),
        ChatSession(session_id="s1", updated_at=fixed_time),
    ]
    backend.messages = {
        "s1": [
            ChatMessage(role="user", content="first question", created_at=fixed_time),
            ChatMessage(role="assistant", content="Final Answer: first", created_at=fixed_time),
        ],
        "s2": [
            ChatMessage(role="user", content="what changed?", created_at=fixed_time),
            ChatMessage(role="assistant", content="Final Answer: a lot", created_at=fixed_time),
        ],
    }
    return backend.sessions
