"""
API Module - Network interface of the host.

Exposes hosted matches over REST and WebSocket. Room clients:
1. Create a match and seat the roster
2. Subscribe to state publications
3. Send intents; the host applies or ignores them

All state is match-scoped and in memory.
"""

from .schemas import (
    # Requests
    ActionRequest,
    CreateMatchRequest,
    UpdatePlayersRequest,
    # Responses
    MatchResponse,
    RaceStateResponse,
    SowingStateResponse,
    ErrorResponse,
    ErrorCode,
    GameType,
)
from .service import APIService, parse_action, to_action, state_response
from .app import create_app

__all__ = [
    # Requests
    "ActionRequest",
    "CreateMatchRequest",
    "UpdatePlayersRequest",
    # Responses
    "MatchResponse",
    "RaceStateResponse",
    "SowingStateResponse",
    "ErrorResponse",
    "ErrorCode",
    "GameType",
    # Service
    "APIService",
    "parse_action",
    "to_action",
    "state_response",
    "create_app",
]
