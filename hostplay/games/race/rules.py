"""
Token race rules - pure functions over the board model.

Nothing here mutates state except capture_tokens(), which relocates the
captured tokens. The engine and the bot both build on these helpers so
that "legal" means the same thing everywhere.
"""

from __future__ import annotations

from .state import (
    BOARD_SIZE,
    ENTRY_CELLS,
    FINISH_LANE_SIZE,
    MAX_DIE,
    SAFE_CELLS,
    SEAT_COUNT,
    TOKENS_PER_PLAYER,
    Finished,
    Home,
    InFinishLane,
    OnTrack,
    PlayerColor,
    RacePlayer,
    RaceState,
    Token,
    TokenPosition,
)

# Progress value of a finished token, past the last finish-lane cell
FINISHED_PROGRESS = BOARD_SIZE + FINISH_LANE_SIZE + 1


def steps_to_finish_entry(cell: int, color: PlayerColor) -> int:
    """Cells from `cell` forward to the last ring cell before the color's finish lane."""
    finish_entry = (ENTRY_CELLS[color] + BOARD_SIZE - 1) % BOARD_SIZE
    if cell <= finish_entry:
        return finish_entry - cell
    return BOARD_SIZE - cell + finish_entry


def calculate_destination(
    position: TokenPosition,
    color: PlayerColor,
    die: int,
) -> TokenPosition | None:
    """
    Where a token ends up for a die value, or None if it cannot move.

    Leaving home needs a six. Tokens on the ring turn into the finish
    lane when they pass their color's entry point, and must land exactly
    on the center: any overshoot is illegal.
    """
    if isinstance(position, Home):
        if die != MAX_DIE:
            return None
        return OnTrack(cell=ENTRY_CELLS[color])

    if isinstance(position, OnTrack):
        steps = steps_to_finish_entry(position.cell, color)
        if die < steps:
            return OnTrack(cell=(position.cell + die) % BOARD_SIZE)
        if die == steps:
            return InFinishLane(cell=0)

        overshoot = die - steps - 1
        if overshoot >= FINISH_LANE_SIZE:
            return None
        if overshoot == FINISH_LANE_SIZE - 1:
            return Finished()
        return InFinishLane(cell=overshoot)

    if isinstance(position, InFinishLane):
        target = position.cell + die
        if target > FINISH_LANE_SIZE - 1:
            return None
        if target == FINISH_LANE_SIZE - 1:
            return Finished()
        return InFinishLane(cell=target)

    # Finished tokens never move
    return None


def movable_tokens(player: RacePlayer, die: int) -> list[Token]:
    """Tokens that have a legal destination for this die, in token order."""
    return [
        t for t in player.tokens
        if calculate_destination(t.position, player.color, die) is not None
    ]


def has_token_in_play(player: RacePlayer) -> bool:
    """True if any token is on the ring or in the finish lane."""
    if not player.is_occupied:
        return False
    return any(isinstance(t.position, (OnTrack, InFinishLane)) for t in player.tokens)


def token_progress(position: TokenPosition, color: PlayerColor) -> int:
    """
    How far a token has come.

    Home is 0, ring cells count forward from the color's entry cell, the
    finish lane continues from 52, and finished tokens score highest.
    """
    if isinstance(position, Home):
        return 0
    if isinstance(position, Finished):
        return FINISHED_PROGRESS
    if isinstance(position, InFinishLane):
        return BOARD_SIZE + position.cell
    return (position.cell - ENTRY_CELLS[color]) % BOARD_SIZE


def is_safe_cell(cell: int) -> bool:
    return cell in SAFE_CELLS


def opponents_on_cell(state: RaceState, color: PlayerColor, cell: int) -> list[tuple[RacePlayer, Token]]:
    """Opposing tokens sitting on a ring cell."""
    found = []
    for player in state.players:
        if player.color == color:
            continue
        for token in player.tokens:
            if isinstance(token.position, OnTrack) and token.position.cell == cell:
                found.append((player, token))
    return found


def can_capture_at(state: RaceState, color: PlayerColor, cell: int) -> bool:
    """Would landing on `cell` capture something?"""
    return not is_safe_cell(cell) and bool(opponents_on_cell(state, color, cell))


def lowest_free_home_slot(player: RacePlayer) -> int:
    used = {t.position.slot for t in player.tokens if isinstance(t.position, Home)}
    for slot in range(TOKENS_PER_PLAYER):
        if slot not in used:
            return slot
    return len(used)


def capture_tokens(state: RaceState, color: PlayerColor, cell: int) -> int:
    """
    Send every opposing token on `cell` back home.

    Safe cells never capture. Each captured token takes its owner's
    lowest free home slot. Returns the number of tokens captured.
    """
    if is_safe_cell(cell):
        return 0

    captured = 0
    for player, token in opponents_on_cell(state, color, cell):
        token.position = Home(slot=lowest_free_home_slot(player))
        captured += 1
    return captured


def all_tokens_finished(player: RacePlayer) -> bool:
    return all(t.is_finished for t in player.tokens)


def first_occupied_seat(state: RaceState) -> int:
    for player in state.players:
        if player.is_occupied:
            return player.seat
    return 0


def next_seat(state: RaceState) -> int:
    """Next seat in clockwise order that is occupied and still racing."""
    seat = state.current_seat
    for _ in range(SEAT_COUNT):
        seat = (seat + 1) % SEAT_COUNT
        candidate = state.players[seat]
        if candidate.is_occupied and not candidate.has_finished:
            return seat
    return state.current_seat


def movable_tokens_for_current(state: RaceState) -> list[Token]:
    """Tokens the seat to move could move with the pending die."""
    if state.dice_value is None:
        return []
    return movable_tokens(state.current_player, state.dice_value)


def is_token_movable(state: RaceState, token_id: int) -> bool:
    return any(t.token_id == token_id for t in movable_tokens_for_current(state))


def can_start(state: RaceState) -> bool:
    return len(state.occupied_seats()) >= 2
