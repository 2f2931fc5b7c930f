"""
Sowing - A 12-cell mancala with two mandarin cells.

Key mechanics:
- Empty one of your cells and sow its stones one by one, left or right
- Landing before a nonempty cell picks it up and keeps sowing
- Landing before an empty cell captures what lies beyond it
- An empty side must borrow 5 stones from its score
- The match ends when both mandarin cells are empty
"""

from .state import (
    SowingState,
    SowingPlayer,
    Side,
    Direction,
    SowStep,
    StepKind,
    LastSow,
)
from .actions import Sow, SowingAction, sow
from .rules import simulate_sow, SowResult, resolve_direction, legal_moves
from .engine import SowingEngine

__all__ = [
    "SowingState",
    "SowingPlayer",
    "Side",
    "Direction",
    "SowStep",
    "StepKind",
    "LastSow",
    "Sow",
    "SowingAction",
    "sow",
    "simulate_sow",
    "SowResult",
    "resolve_direction",
    "legal_moves",
    "SowingEngine",
]
