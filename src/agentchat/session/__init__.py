"""Session identity module for agentchat.

Resolves the active session id across sends that may create a session.
"""

from .binder import SessionBinder, SessionListener

__all__ = [
    "SessionBinder",
    "SessionListener",
]
