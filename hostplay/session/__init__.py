"""
Session Module - In-memory matches hosted by this process.

A session represents one match:
- Created when a room starts a game
- Holds the authoritative engine behind a host dispatcher
- Destroyed when the room is done with it

Sessions are EPHEMERAL: nothing is written to disk.
"""

from .manager import SessionManager, Session, SessionState, ENGINE_TYPES

__all__ = [
    "SessionManager",
    "Session",
    "SessionState",
    "ENGINE_TYPES",
]
