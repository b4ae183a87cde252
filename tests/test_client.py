"""Unit tests for the client module."""
import json

import httpx
import pytest

from agentchat.client import (
    ApiError,
    ChatBackend,
    ChatRequest,
    HttpChatBackend,
    TransportError,
    create_chat_backend,
)
from agentchat.stream import iter_frames

BASE_URL = "http://agents.test"


def _backend(handler) -> HttpChatBackend:
    return HttpChatBackend(base_url=BASE_URL, transport=httpx.MockTransport(handler))


class TestChatBackendInterface:
    """Tests for the ChatBackend abstract base class."""

    def test_cannot_instantiate_abstract_class(self):
        """Test that ChatBackend cannot be instantiated."""
        with pytest.raises(TypeError):
            ChatBackend()  # type: ignore


class TestChatRequest:
    """Tests for ChatRequest model."""

    def test_wire_format(self):
        """Test that requests serialize with camelCase names and defaults."""
        request = ChatRequest(message="hello")
        assert request.to_wire() == {
            "sessionId": "",
            "message": "hello",
            "topK": 8,
            "stream": True,
        }

    def test_top_k_must_be_positive(self):
        """Test that a zero result-size hint fails validation."""
        with pytest.raises(ValueError):
            ChatRequest(message="hello", top_k=0)


class TestStreaming:
    """Tests for the streaming chat request."""

    @pytest.mark.asyncio
    async def test_stream_request_and_body(self):
        """Test that the request is posted and the body is streamed back."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["path"] = request.url.path
            seen["body"] = json.loads(request.content)
            return httpx.Response(
                200,
                headers={"content-type": "text/event-stream"},
                content=b'data: {"sessionId": "s1"}\n\ndata: {"delta": "Hi"}\n\ndata: [DONE]\n\n',
            )

        async with _backend(handler) as backend:
            request = ChatRequest(session_id="", message="hello", top_k=4)
            async with backend.open_chat_stream("agent-1", request) as chunks:
                frames = [frame async for frame in iter_frames(chunks)]

        assert seen["method"] == "POST"
        assert seen["path"] == "/api/agents/agent-1/chat"
        assert seen["body"] == {"sessionId": "", "message": "hello", "topK": 4, "stream": True}
        assert [f.session_id for f in frames] == ["s1", None]
        assert frames[1].delta == "Hi"

    @pytest.mark.asyncio
    async def test_error_status_raises_before_body(self):
        """Test that a failed status raises ApiError with the body's message."""
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404, json={"error": "agent not found"})

        async with _backend(handler) as backend:
            with pytest.raises(ApiError) as exc_info:
                async with backend.open_chat_stream("missing", ChatRequest(message="hi")):
                    pytest.fail("stream should not open")

        assert str(exc_info.value) == "agent not found"
        assert exc_info.value.status == 404

    @pytest.mark.asyncio
    async def test_connection_failure(self):
        """Test that a refused connection becomes a TransportError."""
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with _backend(handler) as backend:
            with pytest.raises(TransportError):
                async with backend.open_chat_stream("agent-1", ChatRequest(message="hi")):
                    pass

    @pytest.mark.asyncio
    async def test_interrupted_body(self):
        """Test that a body cut off mid-stream becomes a TransportError."""
        async def body():
            yield b'data: {"delta": "par"}\n\n'
            raise httpx.ReadError("connection reset")

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=body())

        received = []
        async with _backend(handler) as backend:
            with pytest.raises(TransportError):
                async with backend.open_chat_stream("agent-1", ChatRequest(message="hi")) as chunks:
                    async for frame in iter_frames(chunks):
                        received.append(frame.delta)

        assert received == ["par"]


class TestErrorMessages:
    """Tests for extracting messages from failed responses."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("response,expected", [
        (httpx.Response(400, json={"error": "bad input"}), "bad input"),
        (httpx.Response(400, json={"message": "try later"}), "try later"),
        (httpx.Response(400, json={"text": "plain field"}), "plain field"),
        (httpx.Response(500, text="upstream exploded"), "upstream exploded"),
        (httpx.Response(503), "HTTP 503"),
    ])
    async def test_error_message(self, response: httpx.Response, expected: str):
        """Test the precedence of error message sources."""
        async with _backend(lambda request: response) as backend:
            with pytest.raises(ApiError) as exc_info:
                await backend.get_agent("agent-1")

        assert str(exc_info.value) == expected
        assert exc_info.value.status == response.status_code


class TestRestEndpoints:
    """Tests for the non-streaming endpoints."""

    @pytest.mark.asyncio
    async def test_get_agent(self):
        """Test fetching and parsing the agent detail."""
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/api/agents/agent-1"
            return httpx.Response(200, json={
                "agentId": "agent-1",
                "name": "Helper",
                "tags": ["docs"],
                "skillFiles": ["a.md", "b.md"],
                "systemRuleFiles": ["tone.md"],
                "triggerRuleFiles": [],
                "createdAt": 1715938200000,
                "updatedAt": 1715938200000,
            })

        async with _backend(handler) as backend:
            agent = await backend.get_agent("agent-1")

        assert agent.name == "Helper"
        assert agent.summary == "skills=2 · systemRules=1 · triggerRules=0"
        assert agent.updated_at.year == 2024

    @pytest.mark.asyncio
    async def test_list_sessions(self):
        """Test listing sessions with millisecond timestamps."""
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/api/agents/agent-1/chat/sessions"
            return httpx.Response(200, json=[
                {"sessionId": "s2", "title": "Pricing", "createdAt": 1715938200000, "updatedAt": 1715938200000},
                {"sessionId": "s1", "title": None, "createdAt": 0, "updatedAt": 0},
            ])

        async with _backend(handler) as backend:
            sessions = await backend.list_sessions("agent-1")

        assert [s.session_id for s in sessions] == ["s2", "s1"]
        assert sessions[0].title == "Pricing"
        assert sessions[1].title is None

    @pytest.mark.asyncio
    async def test_list_messages_encodes_path_segments(self):
        """Test that ids are URL-encoded as single path segments."""
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.raw_path == b"/api/agents/team%2Fagent/chat/sessions/s%201"
            return httpx.Response(200, json=[
                {"role": "user", "content": "q", "createdAt": 1715938200000},
                {"role": "assistant", "content": "Final Answer: a", "createdAt": 1715938200000},
            ])

        async with _backend(handler) as backend:
            messages = await backend.list_messages("team/agent", "s 1")

        assert [m.role for m in messages] == ["user", "assistant"]

    @pytest.mark.asyncio
    async def test_delete_session(self):
        """Test deleting a session."""
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append((request.method, request.url.path))
            return httpx.Response(200, json={"ok": True})

        async with _backend(handler) as backend:
            await backend.delete_session("agent-1", "s1")

        assert calls == [("DELETE", "/api/agents/agent-1/chat/sessions/s1")]

    @pytest.mark.asyncio
    async def test_non_streaming_chat(self):
        """Test that chat() sends stream=false and parses the full answer."""
        def handler(request: httpx.Request) -> httpx.Response:
            assert json.loads(request.content)["stream"] is False
            return httpx.Response(200, json={
                "sessionId": "s1",
                "answer": "Final Answer: 42",
                "citations": [{"chunkId": "c1", "path": "docs/a.md"}],
            })

        async with _backend(handler) as backend:
            response = await backend.chat("agent-1", ChatRequest(message="q"))

        assert response.session_id == "s1"
        assert response.citations[0].path == "docs/a.md"

    @pytest.mark.asyncio
    async def test_unexpected_payload(self):
        """Test that a response of the wrong shape becomes an ApiError."""
        async with _backend(lambda request: httpx.Response(200, json={"nope": 1})) as backend:
            with pytest.raises(ApiError):
                await backend.list_sessions("agent-1")

    @pytest.mark.asyncio
    async def test_request_failure(self):
        """Test that transport failures on plain requests become TransportError."""
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectTimeout("timed out", request=request)

        async with _backend(handler) as backend:
            with pytest.raises(TransportError):
                await backend.list_sessions("agent-1")


class TestBackendFactory:
    """Tests for create_chat_backend."""

    @pytest.mark.asyncio
    async def test_create_http_backend(self):
        """Test creating the HTTP backend."""
        backend = create_chat_backend("http", base_url="http://localhost:9000/")
        assert isinstance(backend, HttpChatBackend)
        assert backend.base_url == "http://localhost:9000"
        await backend.close()

    def test_unsupported_backend(self):
        """Test that unknown backends raise ValueError."""
        with pytest.raises(ValueError, match="Unsupported chat backend"):
            create_chat_backend("grpc")
