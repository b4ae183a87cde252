from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from contextlib import AbstractAsyncContextManager
from typing import Any

from ..transcript.models import ChatMessage, ChatSession
from .models import AgentDetail, ChatRequest, ChatResponse


class ChatBackend(ABC):
    """Abstract base class for the agent-serving API.

    This module hides the design decision of how the client talks to the
    server. Implementations must handle:
    - Transport setup and URL layout
    - Status checking and error message extraction
    - Translating transport failures into ChatBackendError

    Supports async context manager protocol for proper resource cleanup:
        async with backend:
            sessions = await backend.list_sessions(agent_id)
    """

    @abstractmethod
    def open_chat_stream(
        self,
        agent_id: str,
        request: ChatRequest
    ) -> AbstractAsyncContextManager[AsyncIterator[bytes]]:
        """Send a streaming chat request.

        Entering the returned context issues the request and checks the
        status before any body byte is read.

        Args:
            agent_id: Agent to chat with
            request: Chat request (stream flag is expected to be set)

        Returns:
            Async context manager yielding the raw body chunks

        Raises:
            ApiError: If the server answers with a non-success status
            TransportError: If the request fails or the body is cut off
        """

    @abstractmethod
    async def chat(self, agent_id: str, request: ChatRequest) -> ChatResponse:
        """Send a non-streaming chat request and return the full result."""

    @abstractmethod
    async def get_agent(self, agent_id: str) -> AgentDetail:
        """Fetch the agent configuration."""

    @abstractmethod
    async def list_sessions(self, agent_id: str) -> list[ChatSession]:
        """Fetch the agent's sessions, newest first."""

    @abstractmethod
    async def list_messages(self, agent_id: str, session_id: str) -> list[ChatMessage]:
        """Fetch the persisted transcript of a session."""

    @abstractmethod
    async def delete_session(self, agent_id: str, session_id: str) -> None:
        """Delete a session and its messages."""

    @abstractmethod
    async def close(self) -> None:
        """Close any open connections or resources."""

    async def __aenter__(self) -> "ChatBackend":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit with automatic cleanup."""
        await self.close()
