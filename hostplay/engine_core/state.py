"""
Shared state types used by every engine.

Game-specific board models live under hostplay.games; this module only
holds the pieces both games agree on: the match phase and the identity
of whoever occupies a seat.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum


class MatchPhase(Enum):
    """High-level match phases."""
    WAITING = "waiting"
    PLAYING = "playing"
    ENDED = "ended"


@dataclass(frozen=True)
class Participant:
    """
    A participant as reported by the session layer.

    `participant_id` is the identity actions are tagged with.
    """
    participant_id: str
    name: str
