"""
Tests for the token race rules.

Tests:
- Destination calculation (home exit, ring wrap, finish lane, overshoot)
- Capture and safe cells
- Progress ordering
- Turn order helpers
"""

import pytest

from ..games.race.rules import (
    FINISHED_PROGRESS,
    calculate_destination,
    can_start,
    capture_tokens,
    has_token_in_play,
    lowest_free_home_slot,
    movable_tokens,
    next_seat,
    steps_to_finish_entry,
    token_progress,
)
from ..games.race.state import (
    FINISH_LANE_SIZE,
    SAFE_CELLS,
    Finished,
    Home,
    InFinishLane,
    OnTrack,
    PlayerColor,
    RaceState,
)

RED = PlayerColor.RED
GREEN = PlayerColor.GREEN


def seated_state(*seats):
    state = RaceState.create()
    for seat in seats:
        state.players[seat].participant_id = f"p{seat}"
    return state


class TestCalculateDestination:
    """Tests for calculate_destination."""

    def test_ring_into_finish_lane(self):
        """Red at cell 50 with a 3 enters the finish lane at cell 1."""
        assert steps_to_finish_entry(50, RED) == 1
        assert calculate_destination(OnTrack(50), RED, 3) == InFinishLane(1)

    @pytest.mark.parametrize("die", range(1, 7))
    def test_home_needs_six(self, die):
        """A home token can only leave on a six, onto its entry cell."""
        dest = calculate_destination(Home(2), GREEN, die)
        if die == 6:
            assert dest == OnTrack(13)
        else:
            assert dest is None

    def test_ring_wraps_for_other_colors(self):
        """Green passes cell 51 and keeps going around the ring."""
        assert calculate_destination(OnTrack(50), GREEN, 3) == OnTrack(1)

    def test_exact_landing_finishes(self):
        assert calculate_destination(InFinishLane(3), RED, 2) == Finished()
        assert calculate_destination(OnTrack(51), RED, 6) == Finished()

    def test_overshoot_is_illegal(self):
        assert calculate_destination(InFinishLane(3), RED, 3) is None
        assert calculate_destination(OnTrack(49), RED, 6) == InFinishLane(3)
        assert calculate_destination(OnTrack(45), RED, 6) == InFinishLane(0)
        assert calculate_destination(OnTrack(44), RED, 6) == OnTrack(50)

    def test_finished_never_moves(self):
        for die in range(1, 7):
            assert calculate_destination(Finished(), RED, die) is None

    def test_never_past_finish_lane(self):
        """No position and die produce a lane cell beyond the lane."""
        positions = [OnTrack(c) for c in range(52)] + [InFinishLane(c) for c in range(FINISH_LANE_SIZE)]
        for color in PlayerColor:
            for position in positions:
                for die in range(1, 7):
                    dest = calculate_destination(position, color, die)
                    if isinstance(dest, InFinishLane):
                        assert 0 <= dest.cell < FINISH_LANE_SIZE - 1


class TestMovableTokens:
    """Tests for movable token enumeration."""

    def test_all_home_only_six_moves(self):
        state = seated_state(0, 1)
        player = state.players[0]
        assert movable_tokens(player, 3) == []
        assert len(movable_tokens(player, 6)) == 4

    def test_in_play_ignores_finished(self):
        state = seated_state(0, 1)
        player = state.players[0]
        player.tokens[0].position = Finished()
        assert not has_token_in_play(player)

        player.tokens[1].position = InFinishLane(0)
        assert has_token_in_play(player)


class TestCapture:
    """Tests for capture resolution."""

    def test_capture_sends_token_home(self):
        state = seated_state(0, 1)
        state.players[1].tokens[0].position = OnTrack(5)

        assert capture_tokens(state, RED, 5) == 1
        assert state.players[1].tokens[0].position == Home(0)

    def test_capture_uses_lowest_free_slot(self):
        """Slots 1 and 3 are free; the captured token takes slot 1."""
        state = seated_state(0, 1)
        green = state.players[1]
        green.tokens[1].position = OnTrack(30)
        green.tokens[3].position = OnTrack(5)

        assert lowest_free_home_slot(green) == 1
        capture_tokens(state, RED, 5)
        assert green.tokens[3].position == Home(1)

    @pytest.mark.parametrize("cell", sorted(SAFE_CELLS))
    def test_safe_cells_never_capture(self, cell):
        state = seated_state(0, 1)
        state.players[1].tokens[0].position = OnTrack(cell)

        assert capture_tokens(state, RED, cell) == 0
        assert state.players[1].tokens[0].position == OnTrack(cell)

    def test_own_tokens_are_not_captured(self):
        state = seated_state(0, 1)
        state.players[0].tokens[0].position = OnTrack(5)

        assert capture_tokens(state, RED, 5) == 0


class TestProgress:
    """Tests for token_progress."""

    def test_progress_order(self):
        assert token_progress(Home(0), RED) == 0
        assert token_progress(OnTrack(10), RED) < token_progress(OnTrack(20), RED)
        assert token_progress(OnTrack(51), RED) < token_progress(InFinishLane(0), RED)
        assert token_progress(InFinishLane(5), RED) < token_progress(Finished(), RED)
        assert token_progress(Finished(), GREEN) == FINISHED_PROGRESS

    def test_progress_relative_to_entry(self):
        """Green's entry cell is its zero point."""
        assert token_progress(OnTrack(13), GREEN) == 0
        assert token_progress(OnTrack(1), GREEN) == 40


class TestTurnOrder:
    """Tests for seat helpers."""

    def test_next_seat_skips_empty(self):
        state = seated_state(0, 2)
        assert next_seat(state) == 2
        state.current_seat = 2
        assert next_seat(state) == 0

    def test_next_seat_skips_finished(self):
        state = seated_state(0, 1, 3)
        state.players[1].has_finished = True
        assert next_seat(state) == 3

    def test_can_start_needs_two(self):
        assert not can_start(seated_state(1))
        assert can_start(seated_state(1, 3))
