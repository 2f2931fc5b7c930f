"""
Pytest fixtures for Hostplay tests.
"""

import random
from collections import deque

import pytest

from ..bots.policy import BotPolicy, BotDecision
from ..config import PacingConfig
from ..engine_core.scheduler import ImmediateScheduler, ManualScheduler
from ..engine_core.state import Participant
from ..games.race.engine import RaceEngine
from ..games.sowing.engine import SowingEngine


class ScriptedRandom(random.Random):
    """
    Random source with scripted die faces.

    randint() pops the next face; random() returns `bias_draw`, which
    decides whether the race-for-six bias kicks in (< 0.5 means it does).
    """

    def __init__(self, faces=(), bias_draw: float = 0.9):
        super().__init__(0)
        self.faces = deque(faces)
        self.bias_draw = bias_draw

    def random(self):
        return self.bias_draw

    def randint(self, a, b):
        return self.faces.popleft()


class ScriptedPolicy(BotPolicy):
    """Bot that plays a fixed list of action factories, one per step."""

    def __init__(self, factories=()):
        super().__init__()
        self.factories = deque(factories)
        self.calls = 0

    def select_action(self, state, bot_id):
        self.calls += 1
        if not self.factories:
            return None
        return BotDecision(action=self.factories.popleft()(bot_id), explanation="scripted")


@pytest.fixture
def alice() -> Participant:
    return Participant("alice", "Alice")


@pytest.fixture
def bob() -> Participant:
    return Participant("bob", "Bob")


@pytest.fixture
def headless() -> PacingConfig:
    """Zero delays, auto-move off so tests choose every token."""
    return PacingConfig.headless(auto_move_single_token=False)


@pytest.fixture
def manual_scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def dice() -> ScriptedRandom:
    """Scripted die; tests append faces before rolling."""
    return ScriptedRandom()


@pytest.fixture
def race_engine(dice, headless, alice, bob) -> RaceEngine:
    """Race with alice in seat 0 and bob in seat 1, still waiting."""
    engine = RaceEngine(rng=dice, scheduler=ImmediateScheduler(), pacing=headless)
    engine.initialize([alice, bob])
    return engine


@pytest.fixture
def sowing_engine(headless, alice, bob) -> SowingEngine:
    """Sowing match with alice in seat 0 and bob in seat 1, still waiting."""
    engine = SowingEngine(rng=random.Random(5), scheduler=ImmediateScheduler(), pacing=headless)
    engine.initialize([alice, bob])
    return engine
