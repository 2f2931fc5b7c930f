"""
Action System - Tagged action records shared by all engines.

Actions represent:
1. Player intents (roll, move a token, sow a cell)
2. Lobby intents (start, reset, add/remove a bot)

Every action is a frozen dataclass whose class carries an ActionType tag.
The record only holds the fields its kind needs; there is no catch-all
payload. Game-specific records live in each game's actions module.

All state changes flow through actions, and every action is safe to
resend: if its preconditions no longer hold, the engine ignores it.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar


class ActionType(Enum):
    """Types of actions in the system."""
    # Token race
    ROLL_DICE = "roll_dice"
    MOVE_TOKEN = "move_token"

    # Sowing
    SOW = "sow"

    # Lobby actions (both games)
    START_GAME = "start_game"
    RESET = "reset"
    ADD_BOT = "add_bot"
    REMOVE_BOT = "remove_bot"


@dataclass(frozen=True)
class Action:
    """
    Base class for action records.

    Subclasses set `action_type` as a class attribute; it is not a field,
    so it never shows up in equality or construction.
    """
    action_type: ClassVar[ActionType]

    @property
    def kind(self) -> str:
        """Wire tag for this action."""
        return self.action_type.value


@dataclass(frozen=True)
class StartGame(Action):
    """Begin the match from the waiting room."""
    action_type = ActionType.START_GAME


@dataclass(frozen=True)
class Reset(Action):
    """Return the match to the waiting room."""
    action_type = ActionType.RESET


@dataclass(frozen=True)
class AddBot(Action):
    """
    Seat a bot.

    The race game requires a seat index; the sowing game always seats
    its bot in seat 1 and ignores the field.
    """
    action_type = ActionType.ADD_BOT
    seat: int | None = None


@dataclass(frozen=True)
class RemoveBot(Action):
    """Vacate a bot-occupied seat."""
    action_type = ActionType.REMOVE_BOT
    seat: int
