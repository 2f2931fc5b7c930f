"""
Sowing actions.

A move names the cell to empty and the side, left or right, as seen by
the mover; the engine resolves the side to an absolute direction.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Union

from ...engine_core.action import Action, ActionType, StartGame, Reset, AddBot, RemoveBot
from .state import Side


@dataclass(frozen=True)
class Sow(Action):
    action_type = ActionType.SOW
    actor: str
    cell: int
    side: Side


SowingAction = Union[Sow, StartGame, Reset, AddBot, RemoveBot]


def sow(actor: str, cell: int, side: Side | str) -> Sow:
    """Factory for a sowing move. Accepts "left"/"right" as well as Side."""
    return Sow(actor=actor, cell=cell, side=Side(side))
