"""
Token Race - Four colors race tokens around a shared track.

Key mechanics:
- Roll a six to bring a token out of home
- Land on an opponent outside a safe cell to send it home
- Enter the private finish lane and land exactly on the center
- A six grants another roll
- First player with all four tokens in the center wins
"""

from .state import (
    RaceState,
    RacePlayer,
    Token,
    TokenPosition,
    Home,
    OnTrack,
    InFinishLane,
    Finished,
    LastMove,
    PlayerColor,
)
from .actions import RollDice, MoveToken, RaceAction, roll, move_token
from .rules import calculate_destination, movable_tokens, token_progress
from .engine import RaceEngine

__all__ = [
    "RaceState",
    "RacePlayer",
    "Token",
    "TokenPosition",
    "Home",
    "OnTrack",
    "InFinishLane",
    "Finished",
    "LastMove",
    "PlayerColor",
    "RollDice",
    "MoveToken",
    "RaceAction",
    "roll",
    "move_token",
    "calculate_destination",
    "movable_tokens",
    "token_progress",
    "RaceEngine",
]
