"""Errors raised by chat backends."""


class ChatBackendError(Exception):
    """Base class for failures talking to the agent-serving API."""


class ApiError(ChatBackendError):
    """The server answered with a non-success status."""

    def __init__(self, message: str, status: int) -> None:
        super().__init__(message)
        self.status = status


class TransportError(ChatBackendError):
    """The request or the response body could not be transferred."""
