"""
Token race actions.

Player intents carry the acting participant's identity. Lobby intents
(start, reset, add/remove bot) are the shared records from engine_core.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Union

from ...engine_core.action import Action, ActionType, StartGame, Reset, AddBot, RemoveBot


@dataclass(frozen=True)
class RollDice(Action):
    action_type = ActionType.ROLL_DICE
    actor: str


@dataclass(frozen=True)
class MoveToken(Action):
    action_type = ActionType.MOVE_TOKEN
    actor: str
    token_id: int


RaceAction = Union[RollDice, MoveToken, StartGame, Reset, AddBot, RemoveBot]


def roll(actor: str) -> RollDice:
    """Factory for a roll intent."""
    return RollDice(actor=actor)


def move_token(actor: str, token_id: int) -> MoveToken:
    """Factory for a move intent."""
    return MoveToken(actor=actor, token_id=token_id)
