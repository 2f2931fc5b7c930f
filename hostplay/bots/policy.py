"""
Bot Policy - Interface for bot decision-making.

A BotPolicy looks at the current match state and picks one action for
the bot whose turn it is. Policies never mutate state: the engine
submits the chosen action through the same validation path a human's
action takes.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any
import random

if TYPE_CHECKING:
    from ..engine_core.action import Action


@dataclass
class BotDecision:
    """
    A decision made by a bot.

    Contains:
    - The action to take
    - Explanation (for logs/debugging)
    - How many candidate actions were considered
    """
    action: Action
    explanation: str = ""
    evaluated_actions: int = 0


class BotPolicy(ABC):
    """
    Abstract base class for bot policies.

    Implementations get an injected random generator so that matches
    with bots are reproducible under a fixed seed.
    """

    def __init__(self, rng: random.Random | None = None):
        self.rng = rng or random.Random()

    @abstractmethod
    def select_action(self, state: Any, bot_id: str) -> BotDecision | None:
        """
        Pick the bot's next action.

        Args:
            state: Current match state
            bot_id: Identity of the acting bot

        Returns:
            BotDecision, or None if the bot has nothing to do right now
        """
        pass
