"""
Engine Core - Shared contract for host-authoritative engines.

The engine is the runtime that:
1. Owns one match state
2. Validates actions and silently drops illegal ones
3. Applies legal actions in place
4. Publishes a snapshot after every change
5. Schedules cosmetic follow-ups and bot turns

The dispatcher decides, by construction, whether this process may
apply actions at all.
"""

from .action import Action, ActionType, StartGame, Reset, AddBot, RemoveBot
from .state import MatchPhase, Participant
from .engine import GameEngine
from .scheduler import Scheduler, ImmediateScheduler, ManualScheduler, AsyncioScheduler
from .dispatcher import ActionDispatcher, HostAuthority

__all__ = [
    "Action",
    "ActionType",
    "StartGame",
    "Reset",
    "AddBot",
    "RemoveBot",
    "MatchPhase",
    "Participant",
    "GameEngine",
    "Scheduler",
    "ImmediateScheduler",
    "ManualScheduler",
    "AsyncioScheduler",
    "ActionDispatcher",
    "HostAuthority",
]
