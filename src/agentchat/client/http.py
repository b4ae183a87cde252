from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any
from urllib.parse import quote

import httpx
from pydantic import BaseModel, TypeAdapter, ValidationError

from ..transcript.models import ChatMessage, ChatSession
from .base import ChatBackend
from .errors import ApiError, TransportError
from .models import AgentDetail, ChatRequest, ChatResponse

DEFAULT_BASE_URL = "http://127.0.0.1:8080"

_SESSIONS = TypeAdapter(list[ChatSession])
_MESSAGES = TypeAdapter(list[ChatMessage])


def _segment(value: str) -> str:
    """URL-encode a single path segment."""
    return quote(value, safe="")


def _error_message(response: httpx.Response) -> str:
    """Extract a readable error message from a failed response.

    Prefers the JSON body's error, message or text field, then the raw
    body, then the bare status.
    """
    content_type = response.headers.get("content-type", "")
    if "application/json" in content_type:
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            for key in ("error", "message", "text"):
                if body.get(key):
                    return str(body[key])
    text = response.text.strip()
    return text or f"HTTP {response.status_code}"


class HttpChatBackend(ChatBackend):
    """Agent-serving API over HTTP.

    Hidden design decisions:
    - httpx client setup and timeouts
    - Endpoint URL layout
    - Error message extraction from failed responses
    - Mapping httpx failures to TransportError
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 10.0,
        **client_kwargs: Any
    ):
        """Initialize the HTTP backend.

        Args:
            base_url: Root URL of the agent-serving API
            timeout: Connect, write and pool timeout in seconds. Reads are
                not timed out, so a slow stream is never cut off here.
            **client_kwargs: Additional kwargs for httpx.AsyncClient
                (for example a custom transport)
        """
        self._base_url = base_url.rstrip("/")
        client_kwargs.setdefault(
            "timeout",
            httpx.Timeout(timeout, read=None),
        )
        self._client = httpx.AsyncClient(base_url=self._base_url, **client_kwargs)

    @property
    def base_url(self) -> str:
        return self._base_url

    def _agent_path(self, agent_id: str) -> str:
        return f"/api/agents/{_segment(agent_id)}"

    def _session_path(self, agent_id: str, session_id: str) -> str:
        return f"{self._agent_path(agent_id)}/chat/sessions/{_segment(session_id)}"

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise TransportError(f"{method} {path} failed: {e}") from e
        if response.is_error:
            raise ApiError(_error_message(response), response.status_code)
        return response

    @staticmethod
    def _parse(response: httpx.Response, adapter: TypeAdapter | type[BaseModel]) -> Any:
        try:
            if isinstance(adapter, TypeAdapter):
                return adapter.validate_json(response.content)
            return adapter.model_validate_json(response.content)
        except ValidationError as e:
            raise ApiError(f"Unexpected response from server: {e}", response.status_code) from e

    @asynccontextmanager
    async def open_chat_stream(
        self,
        agent_id: str,
        request: ChatRequest
    ) -> AsyncIterator[AsyncIterator[bytes]]:
        path = f"{self._agent_path(agent_id)}/chat"
        try:
            async with self._client.stream("POST", path, json=request.to_wire()) as response:
                if response.is_error:
                    await response.aread()
                    raise ApiError(_error_message(response), response.status_code)
                yield self._body_chunks(response)
        except httpx.HTTPError as e:
            raise TransportError(f"Chat request failed: {e}") from e

    @staticmethod
    async def _body_chunks(response: httpx.Response) -> AsyncIterator[bytes]:
        try:
            async for chunk in response.aiter_bytes():
                yield chunk
        except httpx.HTTPError as e:
            raise TransportError(f"Chat stream interrupted: {e}") from e

    async def chat(self, agent_id: str, request: ChatRequest) -> ChatResponse:
        wire = request.model_copy(update={"stream": False}).to_wire()
        response = await self._request("POST", f"{self._agent_path(agent_id)}/chat", json=wire)
        return self._parse(response, ChatResponse)

    async def get_agent(self, agent_id: str) -> AgentDetail:
        response = await self._request("GET", self._agent_path(agent_id))
        return self._parse(response, AgentDetail)

    async def list_sessions(self, agent_id: str) -> list[ChatSession]:
        response = await self._request("GET", f"{self._agent_path(agent_id)}/chat/sessions")
        return self._parse(response, _SESSIONS)

    async def list_messages(self, agent_id: str, session_id: str) -> list[ChatMessage]:
        response = await self._request("GET", self._session_path(agent_id, session_id))
        return self._parse(response, _MESSAGES)

    async def delete_session(self, agent_id: str, session_id: str) -> None:
        await self._request("DELETE", self._session_path(agent_id, session_id))

    async def close(self) -> None:
        """Close the underlying httpx client."""
        await self._client.aclose()
