"""
Tests for the sowing engine.

Tests:
- Start, reset and bot seating
- Move validation
- Scoring, borrowing and the end of the match
- Bot turns
"""

import random

import pytest

from ..bots.sowing_bot import SowingBot
from ..config import PacingConfig
from ..engine_core.action import AddBot, RemoveBot, Reset, StartGame
from ..engine_core.scheduler import ImmediateScheduler, ManualScheduler
from ..engine_core.state import MatchPhase, Participant
from ..games.sowing.actions import Sow, sow
from ..games.sowing.engine import SowingEngine
from ..games.sowing.rules import total_stones
from ..games.sowing.state import Direction, Side, StepKind, TOTAL_STONES, initial_board
from .conftest import ScriptedPolicy


class TestLobby:
    """Tests for start, reset and seating."""

    def test_start(self, sowing_engine):
        assert sowing_engine.apply(StartGame())

        state = sowing_engine.state
        assert state.phase == MatchPhase.PLAYING
        assert state.current_turn == "alice"
        assert state.board == initial_board()
        assert state.scores == {"alice": 0, "bob": 0}

    def test_start_needs_both_seats(self, headless, alice):
        engine = SowingEngine(pacing=headless)
        engine.initialize([alice])
        assert not engine.apply(StartGame())

    def test_reset(self, sowing_engine):
        sowing_engine.apply(StartGame())
        sowing_engine.apply(sow("alice", 9, Side.LEFT))

        assert sowing_engine.apply(Reset())
        assert sowing_engine.state.phase == MatchPhase.WAITING
        assert sowing_engine.state.last_move is None
        assert sowing_engine.state.board == initial_board()
        assert sowing_engine.state.scores == {"alice": 0, "bob": 0}
        assert sowing_engine.state.current_turn is None

        assert sowing_engine.apply(StartGame())
        assert sowing_engine.state.board == initial_board()
        assert sowing_engine.state.scores == {"alice": 0, "bob": 0}

    def test_add_bot_takes_seat_one(self, headless, alice):
        engine = SowingEngine(pacing=headless)
        engine.initialize([alice])

        assert engine.apply(AddBot())
        bot = engine.state.seats[1]
        assert bot.is_bot
        assert bot.participant_id.startswith("bot-")
        assert bot.name == "Bot Player"
        assert not engine.apply(AddBot())

    def test_remove_bot(self, headless, alice):
        engine = SowingEngine(pacing=headless)
        engine.initialize([alice])
        engine.apply(AddBot())
        bot_id = engine.state.seats[1].participant_id

        assert engine.apply(RemoveBot(seat=1))
        assert engine.state.seats[1] is None
        assert bot_id not in engine.state.scores

    def test_remove_bot_rejected(self, sowing_engine):
        assert not sowing_engine.apply(RemoveBot(seat=1))  # human
        assert not sowing_engine.apply(RemoveBot(seat=5))

    def test_update_players(self, sowing_engine, alice):
        assert sowing_engine.update_players([alice])
        assert sowing_engine.state.seats[1] is None
        assert "bob" not in sowing_engine.state.scores


class TestMoveValidation:
    """Illegal moves leave the state untouched."""

    def test_wrong_turn(self, sowing_engine):
        sowing_engine.apply(StartGame())
        assert not sowing_engine.apply(sow("bob", 3, Side.LEFT))

    def test_cell_not_owned(self, sowing_engine):
        sowing_engine.apply(StartGame())
        assert not sowing_engine.apply(sow("alice", 3, Side.LEFT))
        assert not sowing_engine.apply(sow("alice", 0, Side.LEFT))

    def test_empty_cell(self, sowing_engine):
        sowing_engine.apply(StartGame())
        sowing_engine.state.board[8] = 0
        assert not sowing_engine.apply(sow("alice", 8, Side.LEFT))

    def test_malformed_side(self, sowing_engine):
        sowing_engine.apply(StartGame())
        assert not sowing_engine.apply(Sow(actor="alice", cell=9, side="up"))
        assert sowing_engine.state.board == initial_board()

    def test_before_start(self, sowing_engine):
        assert not sowing_engine.apply(sow("alice", 9, Side.LEFT))


class TestPlay:
    """Tests for scoring and turn flow."""

    def test_opening_move(self, sowing_engine):
        sowing_engine.apply(StartGame())

        assert sowing_engine.apply(sow("alice", 9, Side.LEFT))

        state = sowing_engine.state
        assert state.board == [11, 6, 6, 0, 6, 6, 11, 6, 6, 0, 0, 6]
        assert state.scores == {"alice": 6, "bob": 0}
        assert state.current_turn == "bob"
        assert state.last_move.player == "alice"
        assert state.last_move.direction == Direction.CLOCKWISE
        assert state.last_move.steps[-1].kind == StepKind.CAPTURE
        assert total_stones(state) == TOTAL_STONES

    def test_seat_one_left_is_counterclockwise(self, sowing_engine):
        sowing_engine.apply(StartGame())
        sowing_engine.apply(sow("alice", 9, Side.LEFT))

        assert sowing_engine.apply(sow("bob", 1, Side.LEFT))

        state = sowing_engine.state
        assert state.last_move.direction == Direction.COUNTERCLOCKWISE
        assert state.board == [12, 0, 6, 0, 6, 6, 11, 7, 7, 1, 1, 7]
        assert state.current_turn == "alice"
        assert total_stones(state) == TOTAL_STONES

    def test_empty_side_borrows(self, sowing_engine):
        sowing_engine.apply(StartGame())
        sowing_engine.state.board = [10, 0, 0, 0, 0, 0, 10, 0, 0, 0, 0, 1]

        sowing_engine.apply(sow("alice", 11, Side.LEFT))

        state = sowing_engine.state
        assert state.current_turn == "bob"
        assert state.scores["bob"] == -5
        assert state.board == [11, 1, 1, 1, 1, 1, 10, 0, 0, 0, 0, 0]
        assert total_stones(state) == 21

    def test_clearing_mandarins_ends_with_winner(self, sowing_engine):
        sowing_engine.apply(StartGame())
        state = sowing_engine.state
        state.board = [0, 0, 0, 0, 0, 2, 3, 0, 0, 1, 0, 0]
        state.scores = {"alice": 10, "bob": 14}

        sowing_engine.apply(sow("alice", 9, Side.RIGHT))

        assert state.phase == MatchPhase.ENDED
        assert state.scores == {"alice": 14, "bob": 16}
        assert state.winner == "bob"
        assert not state.is_draw
        assert sum(state.board) == 0

    def test_equal_scores_draw(self, sowing_engine):
        sowing_engine.apply(StartGame())
        state = sowing_engine.state
        state.board = [0, 0, 0, 0, 0, 2, 3, 0, 0, 1, 0, 0]
        state.scores = {"alice": 10, "bob": 12}

        sowing_engine.apply(sow("alice", 9, Side.RIGHT))

        assert state.phase == MatchPhase.ENDED
        assert state.is_draw
        assert state.winner is None

    def test_no_moves_after_end(self, sowing_engine):
        sowing_engine.apply(StartGame())
        state = sowing_engine.state
        state.board = [0, 0, 0, 0, 0, 2, 3, 0, 0, 1, 0, 0]
        sowing_engine.apply(sow("alice", 9, Side.RIGHT))

        assert not sowing_engine.apply(sow("bob", 5, Side.LEFT))

    def test_legal_moves_for_seat_to_move(self, sowing_engine):
        assert sowing_engine.legal_moves() == []
        sowing_engine.apply(StartGame())
        assert sowing_engine.legal_moves()[0] == (7, Side.LEFT)


class TestBotTurns:
    """Tests for bot turns driven by the scheduler."""

    def test_bot_moves_after_delay(self, alice):
        scheduler = ManualScheduler()
        policy = ScriptedPolicy([lambda bot_id: sow(bot_id, 1, Side.LEFT)])
        engine = SowingEngine(
            rng=random.Random(1),
            scheduler=scheduler,
            pacing=PacingConfig(),
            bot_policy=policy,
        )
        engine.initialize([alice])
        engine.apply(AddBot())
        bot_id = engine.state.seats[1].participant_id
        engine.apply(StartGame())

        engine.apply(sow("alice", 9, Side.LEFT))
        assert engine.state.current_turn == bot_id
        assert scheduler.pending_count == 1

        scheduler.advance(0.5)
        assert engine.state.current_turn == bot_id

        scheduler.advance(0.5)
        assert policy.calls == 1
        assert engine.state.current_turn == "alice"
        assert engine.state.board == [12, 0, 6, 0, 6, 6, 11, 7, 7, 1, 1, 7]

    def test_no_bot_step_for_humans(self, sowing_engine):
        sowing_engine.apply(StartGame())
        assert sowing_engine.current_bot_id() is None


class TestFullMatch:
    """Seeded bot-vs-bot matches played to the end."""

    @pytest.mark.parametrize("seed", [1, 2, 3, 4, 5])
    def test_every_stone_is_scored(self, seed):
        engine = SowingEngine(
            rng=random.Random(seed),
            scheduler=ImmediateScheduler(),
            pacing=PacingConfig.headless(),
        )
        engine.initialize([Participant("cpu", "CPU")])
        engine.apply(AddBot())
        player = SowingBot(rng=random.Random(seed + 100))

        engine.apply(StartGame())
        for _ in range(2000):
            if engine.phase != MatchPhase.PLAYING:
                break
            decision = player.select_action(engine.state, "cpu")
            assert decision is not None
            assert engine.apply(decision.action)

        state = engine.state
        assert state.phase == MatchPhase.ENDED
        assert sum(state.board) == 0
        assert sum(state.scores.values()) == TOTAL_STONES
        if state.is_draw:
            assert state.winner is None
        else:
            assert state.scores[state.winner] == max(state.scores.values())
