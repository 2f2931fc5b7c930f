"""
Sowing rules - the sow simulation and the end-of-turn checks.

simulate_sow() is a pure function: it takes a board, a start cell and an
absolute direction and returns the new board, the stones captured and
the ordered step log. Stones are only ever moved, never created or
destroyed.

Mandarin cells take part in sowing like any other cell. They matter at
exactly one point: when the hand runs out and the next cell is a
mandarin cell, the turn ends.
"""

from __future__ import annotations
from dataclasses import dataclass

from .state import (
    BOARD_CELLS,
    MANDARIN_CELLS,
    SEAT_FIELDS,
    Direction,
    Side,
    SowStep,
    SowingState,
    StepKind,
)


@dataclass(frozen=True)
class SowResult:
    board: list[int]
    captured: int
    steps: tuple[SowStep, ...]


def resolve_direction(seat: int, side: Side) -> Direction:
    """
    Map a seat-relative side to an absolute direction.

    The seats face each other, so the same word points opposite ways:
    seat 0's left is clockwise, seat 1's left is counterclockwise.
    """
    if seat == 0:
        return Direction.CLOCKWISE if side is Side.LEFT else Direction.COUNTERCLOCKWISE
    return Direction.COUNTERCLOCKWISE if side is Side.LEFT else Direction.CLOCKWISE


def owned_cells(seat: int) -> range:
    return SEAT_FIELDS[seat]


def is_mandarin(cell: int) -> bool:
    return cell in MANDARIN_CELLS


def _advance(cell: int, direction: Direction) -> int:
    return (cell + direction.step) % BOARD_CELLS


def simulate_sow(board: list[int], start: int, direction: Direction) -> SowResult:
    """
    Play out one move.

    1. Pick up every stone in the start cell.
    2. Drop one stone in each following cell until the hand is empty.
    3. Look at the cell after the last drop:
       - mandarin cell: the turn ends
       - nonempty: pick it up and keep sowing
       - empty: capture the cell after it, and keep capturing while an
         empty cell is followed by a nonempty one
    """
    board = list(board)
    steps: list[SowStep] = []
    captured = 0

    hand = board[start]
    board[start] = 0
    steps.append(SowStep(StepKind.PICKUP, start, hand))
    current = start

    while hand > 0:
        current = _advance(current, direction)
        board[current] += 1
        hand -= 1
        steps.append(SowStep(StepKind.SOW, current))

        if hand > 0:
            continue

        following = _advance(current, direction)
        if is_mandarin(following):
            break

        if board[following] > 0:
            hand = board[following]
            board[following] = 0
            current = following
            steps.append(SowStep(StepKind.PICKUP, current, hand))
            continue

        empty = following
        while True:
            target = _advance(empty, direction)
            if board[target] == 0:
                break
            amount = board[target]
            board[target] = 0
            captured += amount
            steps.append(SowStep(StepKind.CAPTURE, target, amount))

            after = _advance(target, direction)
            if board[after] != 0:
                break
            empty = after
        break

    return SowResult(board=board, captured=captured, steps=tuple(steps))


def needs_population(board: list[int], seat: int) -> bool:
    """True if every cell the seat owns is empty."""
    return all(board[cell] == 0 for cell in owned_cells(seat))


def populate(board: list[int], seat: int):
    """Put one stone back in each of the seat's cells (in place)."""
    for cell in owned_cells(seat):
        board[cell] = 1


def mandarins_empty(board: list[int]) -> bool:
    return all(board[cell] == 0 for cell in MANDARIN_CELLS)


def harvest(board: list[int]) -> tuple[int, int]:
    """
    Empty the board at the end of the match.

    Returns the field stones left on seat 0's side and on seat 1's side.
    """
    seat0 = sum(board[cell] for cell in owned_cells(0))
    seat1 = sum(board[cell] for cell in owned_cells(1))
    for cell in range(BOARD_CELLS):
        board[cell] = 0
    return seat0, seat1


def legal_moves(state: SowingState, seat: int) -> list[tuple[int, Side]]:
    """Every (cell, side) the seat could play on the current board."""
    moves = []
    for cell in owned_cells(seat):
        if state.board[cell] > 0:
            moves.append((cell, Side.LEFT))
            moves.append((cell, Side.RIGHT))
    return moves


def total_stones(state: SowingState) -> int:
    """Stones on the board plus every score; constant across a move."""
    return sum(state.board) + sum(state.scores.values())
