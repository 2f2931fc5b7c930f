"""
Race Bot - Priority policy for the token race.

On its turn the bot rolls if it has no pending die. Otherwise it picks a
movable token by priority:
1. A move that reaches the center
2. A move that captures an opponent
3. Bringing a token out of home on a six
4. The token furthest along (first one wins ties)
"""

from __future__ import annotations
from typing import TYPE_CHECKING

from .policy import BotPolicy, BotDecision
from ..engine_core.state import MatchPhase
from ..games.race.actions import roll, move_token
from ..games.race.rules import (
    calculate_destination,
    can_capture_at,
    movable_tokens,
    token_progress,
)
from ..games.race.state import MAX_DIE, Finished, OnTrack

if TYPE_CHECKING:
    from ..games.race.state import RacePlayer, RaceState, Token


class RaceBot(BotPolicy):
    """Deterministic priority bot; the rng is unused but kept for interface parity."""

    def select_action(self, state: RaceState, bot_id: str) -> BotDecision | None:
        if state.phase != MatchPhase.PLAYING:
            return None
        player = state.current_player
        if player.participant_id != bot_id:
            return None

        if not state.has_rolled or state.can_roll_again:
            return BotDecision(action=roll(bot_id), explanation="Roll the die")

        if state.dice_value is None:
            return None

        candidates = movable_tokens(player, state.dice_value)
        if not candidates:
            return None

        token, reason = self.pick_token(state, player, candidates, state.dice_value)
        return BotDecision(
            action=move_token(bot_id, token.token_id),
            explanation=reason,
            evaluated_actions=len(candidates),
        )

    def pick_token(
        self,
        state: RaceState,
        player: RacePlayer,
        tokens: list[Token],
        die: int,
    ) -> tuple[Token, str]:
        """Apply the priority ladder to the movable tokens."""
        destinations = [
            (token, calculate_destination(token.position, player.color, die))
            for token in tokens
        ]

        for token, dest in destinations:
            if isinstance(dest, Finished):
                return token, "Reach the center"

        for token, dest in destinations:
            if isinstance(dest, OnTrack) and can_capture_at(state, player.color, dest.cell):
                return token, f"Capture on cell {dest.cell}"

        if die == MAX_DIE:
            for token in tokens:
                if token.is_home:
                    return token, "Leave home"

        best = tokens[0]
        best_progress = token_progress(best.position, player.color)
        for token in tokens[1:]:
            progress = token_progress(token.position, player.color)
            if progress > best_progress:
                best, best_progress = token, progress
        return best, "Advance the leading token"
