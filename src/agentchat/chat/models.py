"""Data models for the conversation controller."""

from enum import Enum


class UpdateKind(str, Enum):
    """Which part of the controller state changed."""

    TRANSCRIPT = "transcript"
    SESSIONS = "sessions"
    AGENT = "agent"
    ERROR = "error"
    STATUS = "status"  # A send started or finished
