"""
Sowing Bot - Uniform random policy for the sowing game.

Picks any legal (cell, side) pair in its own range with equal
probability. The injected rng makes bot matches replayable.
"""

from __future__ import annotations
from typing import TYPE_CHECKING

from .policy import BotPolicy, BotDecision
from ..engine_core.state import MatchPhase
from ..games.sowing.actions import sow
from ..games.sowing.rules import legal_moves

if TYPE_CHECKING:
    from ..games.sowing.state import SowingState


class SowingBot(BotPolicy):

    def select_action(self, state: SowingState, bot_id: str) -> BotDecision | None:
        if state.phase != MatchPhase.PLAYING or state.winner is not None:
            return None
        if state.current_turn != bot_id:
            return None

        seat = state.seat_of(bot_id)
        if seat is None:
            return None
        moves = legal_moves(state, seat)
        if not moves:
            return None

        cell, side = self.rng.choice(moves)
        return BotDecision(
            action=sow(bot_id, cell, side),
            explanation=f"Sow cell {cell} to the {side.value}",
            evaluated_actions=len(moves),
        )
