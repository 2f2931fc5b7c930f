"""
Sowing Engine - Host-side rules for the mandarin sowing game.

Turn flow:
1. Before a seat moves, if its whole side is empty it borrows: it pays
   5 points and gets one stone back in each of its cells.
2. The mover picks one of its nonempty cells and a side.
3. The sow simulation runs; captured stones go to the mover's score.
4. If both mandarin cells are empty, the remaining field stones go to
   their owners and the higher score wins (equal scores draw).
   Otherwise the other seat is to move.

All operations are silent no-ops when their preconditions fail.
"""

from __future__ import annotations
from typing import TYPE_CHECKING
import itertools
import logging

from ...engine_core.action import StartGame, Reset, AddBot, RemoveBot
from ...engine_core.engine import GameEngine, Handler
from ...engine_core.state import MatchPhase, Participant
from .actions import Sow
from .rules import (
    harvest,
    legal_moves,
    mandarins_empty,
    needs_population,
    owned_cells,
    populate,
    resolve_direction,
    simulate_sow,
)
from .state import (
    BORROW_COST,
    SEAT_COUNT,
    LastSow,
    Side,
    SowingPlayer,
    SowingState,
    initial_board,
)

if TYPE_CHECKING:
    from ...bots.policy import BotPolicy

logger = logging.getLogger(__name__)

_bot_serial = itertools.count(1)

BOT_SEAT = 1


class SowingEngine(GameEngine[SowingState]):
    """
    Engine for one sowing match.

    Usage:
        engine = SowingEngine(rng=random.Random(3), pacing=PacingConfig.headless())
        engine.initialize([Participant("alice", "Alice"), Participant("bob", "Bob")])
        engine.apply(StartGame())
        engine.apply(sow("alice", 9, Side.LEFT))
    """
    game_type = "sowing"

    def __init__(self, *, bot_policy: BotPolicy | None = None, **kwargs):
        super().__init__(**kwargs)
        if bot_policy is None:
            from ...bots.sowing_bot import SowingBot
            bot_policy = SowingBot(rng=self.rng)
        self.bot_policy = bot_policy

    def new_state(self) -> SowingState:
        return SowingState()

    def handlers(self) -> dict[type, Handler]:
        return {
            Sow: self._handle_sow,
            StartGame: self._handle_start,
            Reset: self._handle_reset,
            AddBot: self._handle_add_bot,
            RemoveBot: self._handle_remove_bot,
        }

    @property
    def bot_delay(self) -> float:
        return self.pacing.sowing_bot_delay

    # =========================================================================
    # Queries
    # =========================================================================

    def seat_of(self, participant_id: str) -> int | None:
        return self.state.seat_of(participant_id)

    def legal_moves(self) -> list[tuple[int, Side]]:
        """Moves available to the seat to move."""
        seat = self.state.current_seat
        if self.state.phase != MatchPhase.PLAYING or seat is None:
            return []
        return legal_moves(self.state, seat)

    # =========================================================================
    # Handlers
    # =========================================================================

    def _handle_start(self, action: StartGame) -> bool:
        state = self.state
        if state.occupied_count() != SEAT_COUNT:
            return False

        state.board = initial_board()
        state.scores = {p.participant_id: 0 for p in state.seats}
        state.phase = MatchPhase.PLAYING
        state.current_turn = state.seats[0].participant_id
        state.winner = None
        state.is_draw = False
        state.last_move = None
        logger.info("Sowing match started: %s vs %s",
                    state.seats[0].participant_id, state.seats[1].participant_id)

        self._populate_if_needed()
        return True

    def _handle_reset(self, action: Reset) -> bool:
        state = self.state
        state.board = initial_board()
        state.scores = {p.participant_id: 0 for p in state.seats if p is not None}
        state.current_turn = None
        state.phase = MatchPhase.WAITING
        state.winner = None
        state.is_draw = False
        state.last_move = None
        return True

    def _handle_sow(self, action: Sow) -> bool:
        state = self.state
        if state.phase != MatchPhase.PLAYING or state.winner is not None:
            return False
        if action.actor != state.current_turn:
            return False
        seat = state.seat_of(action.actor)
        if seat is None:
            return False
        if not isinstance(action.side, Side):
            return False
        if action.cell not in owned_cells(seat):
            return False
        if state.board[action.cell] < 1:
            return False

        direction = resolve_direction(seat, action.side)
        result = simulate_sow(state.board, action.cell, direction)

        state.board = result.board
        state.scores[action.actor] = state.scores.get(action.actor, 0) + result.captured
        state.last_move = LastSow(
            player=action.actor,
            cell=action.cell,
            direction=direction,
            steps=result.steps,
        )

        if mandarins_empty(state.board):
            self._finish()
            return True

        other = state.seats[1 - seat]
        state.current_turn = other.participant_id
        self._populate_if_needed()
        return True

    def _handle_add_bot(self, action: AddBot) -> bool:
        state = self.state
        if state.seats[BOT_SEAT] is not None:
            return False

        bot_id = f"bot-{next(_bot_serial)}"
        state.seats[BOT_SEAT] = SowingPlayer(participant_id=bot_id, name="Bot Player", is_bot=True)
        state.scores[bot_id] = 0
        return True

    def _handle_remove_bot(self, action: RemoveBot) -> bool:
        state = self.state
        if state.phase == MatchPhase.PLAYING:
            return False
        if not 0 <= action.seat < SEAT_COUNT:
            return False
        player = state.seats[action.seat]
        if player is None or not player.is_bot:
            return False

        state.seats[action.seat] = None
        state.scores.pop(player.participant_id, None)
        return True

    # =========================================================================
    # Turn helpers
    # =========================================================================

    def _populate_if_needed(self):
        """Borrowing: an empty side pays 5 points to get one stone per cell."""
        state = self.state
        seat = state.current_seat
        if seat is None:
            return
        if not needs_population(state.board, seat):
            return

        state.scores[state.current_turn] = state.scores.get(state.current_turn, 0) - BORROW_COST
        populate(state.board, seat)
        logger.debug("Seat %d borrowed %d stones", seat, BORROW_COST)

    def _finish(self):
        state = self.state
        seat0_extra, seat1_extra = harvest(state.board)
        first, second = state.seats[0].participant_id, state.seats[1].participant_id
        state.scores[first] = state.scores.get(first, 0) + seat0_extra
        state.scores[second] = state.scores.get(second, 0) + seat1_extra

        first_score, second_score = state.scores[first], state.scores[second]
        if first_score == second_score:
            state.is_draw = True
            state.winner = None
        else:
            state.winner = first if first_score > second_score else second
        state.phase = MatchPhase.ENDED
        logger.info("Sowing match ended: %s", "draw" if state.is_draw else f"won by {state.winner}")

    # =========================================================================
    # Roster and bots
    # =========================================================================

    def reseat(self, roster: list[Participant]) -> bool:
        """Fill non-bot seats in order from the roster (not while playing)."""
        state = self.state
        if state.phase == MatchPhase.PLAYING:
            return False

        remaining = iter(roster)
        for index, player in enumerate(state.seats):
            if player is not None and player.is_bot:
                continue
            participant = next(remaining, None)
            if participant is None:
                state.seats[index] = None
            else:
                state.seats[index] = SowingPlayer(
                    participant_id=participant.participant_id,
                    name=participant.name,
                )

        seated = {p.participant_id for p in state.seats if p is not None}
        state.scores = {pid: state.scores.get(pid, 0) for pid in seated}
        return True

    def current_bot_id(self) -> str | None:
        state = self.state
        if state.phase != MatchPhase.PLAYING or state.winner is not None:
            return None
        seat = state.current_seat
        if seat is None:
            return None
        player = state.seats[seat]
        if player is not None and player.is_bot:
            return player.participant_id
        return None

    def bot_step(self, bot_id: str):
        decision = self.bot_policy.select_action(self.state, bot_id)
        if decision is None:
            return
        logger.debug("Bot %s: %s", bot_id, decision.explanation)
        self.apply(decision.action)
