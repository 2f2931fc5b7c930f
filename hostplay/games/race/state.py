"""
Token Race State - Board model for the four-color race game.

Board layout:
- A shared ring of 52 track cells. Each color enters the ring at its own
  entry cell, and leaves it into a private 6-cell finish lane just before
  coming back around to that entry cell.
- Each player owns 4 tokens that start in home slots 0-3.
- 8 track cells are safe: nothing is captured there.

Seats are fixed: seat 0 red, 1 green, 2 yellow, 3 blue, clockwise.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Union

from ...engine_core.state import MatchPhase

BOARD_SIZE = 52
FINISH_LANE_SIZE = 6
TOKENS_PER_PLAYER = 4
SEAT_COUNT = 4
MAX_DIE = 6


class PlayerColor(Enum):
    RED = "red"
    GREEN = "green"
    YELLOW = "yellow"
    BLUE = "blue"


# Clockwise seat order
SEAT_COLORS: tuple[PlayerColor, ...] = (
    PlayerColor.RED,
    PlayerColor.GREEN,
    PlayerColor.YELLOW,
    PlayerColor.BLUE,
)

# Track cell where each color enters the ring
ENTRY_CELLS: dict[PlayerColor, int] = {
    PlayerColor.RED: 0,
    PlayerColor.GREEN: 13,
    PlayerColor.YELLOW: 26,
    PlayerColor.BLUE: 39,
}

SAFE_CELLS = frozenset({0, 8, 13, 21, 26, 34, 39, 47})


# =============================================================================
# Token positions
# =============================================================================

@dataclass(frozen=True)
class Home:
    """Waiting in the home base."""
    slot: int


@dataclass(frozen=True)
class OnTrack:
    """On the shared ring, cell 0-51."""
    cell: int


@dataclass(frozen=True)
class InFinishLane:
    """In the color's private finish lane, cell 0-5."""
    cell: int


@dataclass(frozen=True)
class Finished:
    """Reached the center. Immovable."""
    pass


TokenPosition = Union[Home, OnTrack, InFinishLane, Finished]


@dataclass
class Token:
    token_id: int
    position: TokenPosition

    @property
    def is_home(self) -> bool:
        return isinstance(self.position, Home)

    @property
    def is_finished(self) -> bool:
        return isinstance(self.position, Finished)


def initial_tokens() -> list[Token]:
    return [Token(token_id=i, position=Home(slot=i)) for i in range(TOKENS_PER_PLAYER)]


@dataclass
class RacePlayer:
    """
    One seat at the table.

    An empty seat has `participant_id` None. Bots get a synthetic id.
    """
    seat: int
    color: PlayerColor
    participant_id: str | None = None
    name: str = ""
    is_bot: bool = False
    tokens: list[Token] = field(default_factory=initial_tokens)
    has_finished: bool = False

    @property
    def is_occupied(self) -> bool:
        return self.participant_id is not None

    def get_token(self, token_id: int) -> Token | None:
        for token in self.tokens:
            if token.token_id == token_id:
                return token
        return None

    def home_count(self) -> int:
        return sum(1 for t in self.tokens if t.is_home)


@dataclass(frozen=True)
class LastMove:
    """The most recent token move, kept so observers can replay it."""
    player_id: str
    token_id: int
    from_position: TokenPosition
    to_position: TokenPosition


@dataclass
class RaceState:
    """
    Complete state of one token-race match.

    Mutated in place by the engine; observers receive deep copies.
    """
    players: list[RacePlayer]
    current_seat: int = 0
    dice_value: int | None = None
    has_rolled: bool = False
    can_roll_again: bool = False
    phase: MatchPhase = MatchPhase.WAITING
    winner: str | None = None
    last_move: LastMove | None = None

    # Tracked only; three sixes in a row carry no penalty
    consecutive_sixes: int = 0

    @classmethod
    def create(cls) -> RaceState:
        """Four empty seats, everything at home."""
        return cls(players=[
            RacePlayer(seat=i, color=color, name=default_seat_name(i))
            for i, color in enumerate(SEAT_COLORS)
        ])

    @property
    def current_player(self) -> RacePlayer:
        return self.players[self.current_seat]

    def get_player(self, participant_id: str) -> RacePlayer | None:
        for p in self.players:
            if p.participant_id is not None and p.participant_id == participant_id:
                return p
        return None

    def occupied_seats(self) -> list[int]:
        return [p.seat for p in self.players if p.is_occupied]


def default_seat_name(seat: int) -> str:
    return f"Player {seat + 1}"
