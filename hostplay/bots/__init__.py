"""
Bots module - Scripted opponents.

Provides:
- BotPolicy: Interface for bot decision-making
- RaceBot: Priority bot for the token race
- SowingBot: Random bot for the sowing game
"""

from .policy import BotPolicy, BotDecision
from .race_bot import RaceBot
from .sowing_bot import SowingBot

__all__ = [
    "BotPolicy",
    "BotDecision",
    "RaceBot",
    "SowingBot",
]
