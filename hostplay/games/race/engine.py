"""
Token Race Engine - Host-side rules for the four-color race.

Turn flow:
1. The seat to move rolls. With no token in play, the roll is biased
   toward a six so matches don't stall at the start.
2. If nothing can move, the turn ends after a viewing delay.
3. If exactly one token can move and a human is rolling, it moves by
   itself after a short delay.
4. Moving resolves capture and the finish check. A six grants another
   roll; anything else passes the turn.

All operations are silent no-ops when their preconditions fail.
"""

from __future__ import annotations
from typing import TYPE_CHECKING
import itertools
import logging

from ...engine_core.action import StartGame, Reset, AddBot, RemoveBot
from ...engine_core.engine import GameEngine, Handler
from ...engine_core.state import MatchPhase, Participant
from .actions import RollDice, MoveToken, move_token
from .rules import (
    all_tokens_finished,
    calculate_destination,
    can_start,
    capture_tokens,
    first_occupied_seat,
    has_token_in_play,
    is_token_movable,
    movable_tokens,
    movable_tokens_for_current,
    next_seat,
)
from .state import (
    MAX_DIE,
    SEAT_COUNT,
    Finished,
    LastMove,
    OnTrack,
    RaceState,
    Token,
    default_seat_name,
    initial_tokens,
)

if TYPE_CHECKING:
    from ...bots.policy import BotPolicy

logger = logging.getLogger(__name__)

_bot_serial = itertools.count(1)


class RaceEngine(GameEngine[RaceState]):
    """
    Engine for one token-race match.

    Usage:
        engine = RaceEngine(rng=random.Random(7), pacing=PacingConfig.headless())
        engine.initialize([Participant("alice", "Alice"), Participant("bob", "Bob")])
        engine.apply(StartGame())
        engine.apply(roll("alice"))
    """
    game_type = "race"

    def __init__(self, *, bot_policy: BotPolicy | None = None, **kwargs):
        super().__init__(**kwargs)
        if bot_policy is None:
            from ...bots.race_bot import RaceBot
            bot_policy = RaceBot(rng=self.rng)
        self.bot_policy = bot_policy

    def new_state(self) -> RaceState:
        return RaceState.create()

    def handlers(self) -> dict[type, Handler]:
        return {
            RollDice: self._handle_roll,
            MoveToken: self._handle_move,
            StartGame: self._handle_start,
            Reset: self._handle_reset,
            AddBot: self._handle_add_bot,
            RemoveBot: self._handle_remove_bot,
        }

    @property
    def bot_delay(self) -> float:
        return self.pacing.race_bot_delay

    # =========================================================================
    # Queries
    # =========================================================================

    def seat_of(self, participant_id: str) -> int | None:
        player = self.state.get_player(participant_id)
        return player.seat if player else None

    def can_start(self) -> bool:
        return can_start(self.state)

    def movable_tokens_for_current(self) -> list[Token]:
        return movable_tokens_for_current(self.state)

    def is_token_movable(self, token_id: int) -> bool:
        return is_token_movable(self.state, token_id)

    # =========================================================================
    # Handlers
    # =========================================================================

    def _handle_start(self, action: StartGame) -> bool:
        state = self.state
        if state.phase != MatchPhase.WAITING:
            return False
        if not can_start(state):
            return False

        for player in state.players:
            player.tokens = initial_tokens()
            player.has_finished = False

        state.phase = MatchPhase.PLAYING
        state.current_seat = first_occupied_seat(state)
        self._clear_turn()
        state.winner = None
        state.last_move = None
        logger.info("Race match started with seats %s", state.occupied_seats())
        return True

    def _handle_reset(self, action: Reset) -> bool:
        state = self.state
        for player in state.players:
            player.tokens = initial_tokens()
            player.has_finished = False
        state.current_seat = 0
        self._clear_turn()
        state.phase = MatchPhase.WAITING
        state.winner = None
        state.last_move = None
        return True

    def _handle_roll(self, action: RollDice) -> bool:
        state = self.state
        if state.phase != MatchPhase.PLAYING:
            return False
        player = state.current_player
        if player.participant_id != action.actor:
            return False
        if state.has_rolled and not state.can_roll_again:
            return False

        die = self._draw_die(has_token_in_play(player))
        state.dice_value = die
        state.has_rolled = True
        state.can_roll_again = False
        if die == MAX_DIE:
            state.consecutive_sixes += 1
        else:
            state.consecutive_sixes = 0

        movable = movable_tokens(player, die)
        if not movable:
            self.schedule(self.pacing.roll_view_delay, self._pass_turn)
        elif len(movable) == 1 and not player.is_bot and self.pacing.auto_move_single_token:
            token_id = movable[0].token_id
            self.schedule_intent(
                self.pacing.auto_move_delay,
                lambda: self.apply(move_token(action.actor, token_id)),
            )
        return True

    def _handle_move(self, action: MoveToken) -> bool:
        state = self.state
        if state.phase != MatchPhase.PLAYING:
            return False
        if state.dice_value is None:
            return False
        player = state.current_player
        if player.participant_id != action.actor:
            return False
        token = player.get_token(action.token_id)
        if token is None:
            return False

        die = state.dice_value
        destination = calculate_destination(token.position, player.color, die)
        if destination is None:
            return False

        state.last_move = LastMove(
            player_id=action.actor,
            token_id=token.token_id,
            from_position=token.position,
            to_position=destination,
        )
        token.position = destination

        if isinstance(destination, OnTrack):
            captured = capture_tokens(state, player.color, destination.cell)
            if captured:
                logger.debug("%s captured %d token(s) on cell %d",
                             action.actor, captured, destination.cell)

        if isinstance(destination, Finished) and all_tokens_finished(player):
            player.has_finished = True
            state.winner = action.actor
            state.phase = MatchPhase.ENDED
            logger.info("Race match won by %s", action.actor)
            return True

        if die == MAX_DIE:
            state.can_roll_again = True
            state.has_rolled = False
            state.dice_value = None
        else:
            self._advance_turn()
        return True

    def _handle_add_bot(self, action: AddBot) -> bool:
        state = self.state
        if state.phase != MatchPhase.WAITING:
            return False
        seat = action.seat
        if seat is None or not 0 <= seat < SEAT_COUNT:
            return False
        player = state.players[seat]
        if player.is_occupied:
            return False

        player.participant_id = f"BOT_{next(_bot_serial)}_{seat}"
        player.name = f"Bot {seat + 1}"
        player.is_bot = True
        return True

    def _handle_remove_bot(self, action: RemoveBot) -> bool:
        state = self.state
        if state.phase != MatchPhase.WAITING:
            return False
        if not 0 <= action.seat < SEAT_COUNT:
            return False
        player = state.players[action.seat]
        if not player.is_bot:
            return False

        player.participant_id = None
        player.name = default_seat_name(action.seat)
        player.is_bot = False
        return True

    # =========================================================================
    # Turn helpers
    # =========================================================================

    def _draw_die(self, in_play: bool) -> int:
        if not in_play and self.rng.random() < 0.5:
            return MAX_DIE
        return self.rng.randint(1, MAX_DIE)

    def _clear_turn(self):
        state = self.state
        state.dice_value = None
        state.has_rolled = False
        state.can_roll_again = False
        state.consecutive_sixes = 0

    def _advance_turn(self):
        self._clear_turn()
        self.state.current_seat = next_seat(self.state)

    def _pass_turn(self) -> bool:
        """Scheduled after a roll with no legal move."""
        if self.state.phase != MatchPhase.PLAYING:
            return False
        self._advance_turn()
        return True

    # =========================================================================
    # Roster and bots
    # =========================================================================

    def reseat(self, roster: list[Participant]) -> bool:
        """Fill non-bot seats in order from the roster (waiting room only)."""
        state = self.state
        if state.phase != MatchPhase.WAITING:
            return False

        remaining = iter(roster)
        for player in state.players:
            if player.is_bot:
                continue
            participant = next(remaining, None)
            if participant is None:
                player.participant_id = None
                player.name = default_seat_name(player.seat)
            else:
                player.participant_id = participant.participant_id
                player.name = participant.name
        return True

    def current_bot_id(self) -> str | None:
        state = self.state
        if state.phase != MatchPhase.PLAYING:
            return None
        player = state.current_player
        if player.is_bot and player.participant_id:
            return player.participant_id
        return None

    def bot_step(self, bot_id: str):
        decision = self.bot_policy.select_action(self.state, bot_id)
        if decision is None:
            return
        logger.debug("Bot %s: %s", bot_id, decision.explanation)
        self.apply(decision.action)
