"""
Sowing State - Board model for the 12-cell mandarin sowing game.

Board layout (indices):

         1   2   3   4   5
     0                       6
        11  10   9   8   7

- Cells 0 and 6 are mandarin cells, seeded with 10 stones each.
- Cells 1-5 and 7-11 are field cells, seeded with 5 stones each.
- Seat 0 owns fields 7-11 and moves first; seat 1 owns fields 1-5.

Clockwise means increasing index (1 -> 2 -> ... -> 11 -> 0 -> 1).
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum

from ...engine_core.state import MatchPhase

BOARD_CELLS = 12
MANDARIN_CELLS = (0, 6)
MANDARIN_SEED = 10
FIELD_SEED = 5
SEAT_COUNT = 2

# Points a seat pays to re-seed an empty side
BORROW_COST = 5

# Owned field cells per seat
SEAT_FIELDS: dict[int, range] = {
    0: range(7, 12),
    1: range(1, 6),
}

TOTAL_STONES = MANDARIN_SEED * len(MANDARIN_CELLS) + FIELD_SEED * (BOARD_CELLS - len(MANDARIN_CELLS))


class Side(Enum):
    """Direction as the player sees it from their seat."""
    LEFT = "left"
    RIGHT = "right"


class Direction(Enum):
    """Absolute direction around the ring."""
    CLOCKWISE = "cw"
    COUNTERCLOCKWISE = "ccw"

    @property
    def step(self) -> int:
        return 1 if self is Direction.CLOCKWISE else -1


class StepKind(Enum):
    PICKUP = "pickup"
    SOW = "sow"
    CAPTURE = "capture"


@dataclass(frozen=True)
class SowStep:
    """One event of a move, in order, for replay by the animation layer."""
    kind: StepKind
    cell: int
    amount: int = 1


@dataclass(frozen=True)
class LastSow:
    """The most recent move, with its absolute direction and step log."""
    player: str
    cell: int
    direction: Direction
    steps: tuple[SowStep, ...] = ()


@dataclass
class SowingPlayer:
    participant_id: str
    name: str
    is_bot: bool = False


def initial_board() -> list[int]:
    board = [FIELD_SEED] * BOARD_CELLS
    for cell in MANDARIN_CELLS:
        board[cell] = MANDARIN_SEED
    return board


@dataclass
class SowingState:
    """
    Complete state of one sowing match.

    Scores are keyed by participant id and may go negative after
    borrowing. `winner` is None while playing and on a draw.
    """
    board: list[int] = field(default_factory=initial_board)
    seats: list[SowingPlayer | None] = field(default_factory=lambda: [None] * SEAT_COUNT)
    scores: dict[str, int] = field(default_factory=dict)
    current_turn: str | None = None
    phase: MatchPhase = MatchPhase.WAITING
    winner: str | None = None
    is_draw: bool = False
    last_move: LastSow | None = None

    def seat_of(self, participant_id: str) -> int | None:
        for index, player in enumerate(self.seats):
            if player is not None and player.participant_id == participant_id:
                return index
        return None

    def occupied_count(self) -> int:
        return sum(1 for p in self.seats if p is not None)

    @property
    def current_seat(self) -> int | None:
        if self.current_turn is None:
            return None
        return self.seat_of(self.current_turn)
