"""
Game Engine - Base class for host-side rule engines.

The engine is the single point of state mutation. All changes go
through apply(), which:
1. Looks up the handler for the action's record type
2. Lets the handler validate preconditions and mutate in place
3. Publishes a snapshot to every subscriber
4. Schedules follow-ups (auto-advance, auto-move, bot step)

Design principles:
- Illegal actions are silently discarded, never raised
- A handler either applies completely or returns False before mutating
- Follow-ups are bound to the commit they came from and are dropped if
  anything else was committed in the meantime
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from copy import deepcopy
from typing import Any, Callable, Generic, Iterable, TypeVar
import logging
import random

from .action import Action
from .scheduler import Scheduler, ImmediateScheduler
from .state import MatchPhase, Participant
from ..config import PacingConfig

logger = logging.getLogger(__name__)

S = TypeVar("S")
StateCallback = Callable[[Any], None]
Handler = Callable[[Any], bool]


class GameEngine(ABC, Generic[S]):
    """
    Host-side engine for one match.

    Subclasses implement:
    - new_state(): the waiting-room state for a fresh match
    - handlers(): action record type -> handler method
    - reseat(): roster sync while waiting
    - seat_of(): participant -> seat lookup
    - current_bot_id() / bot_step(): bot driving
    """
    game_type: str = "unknown"

    def __init__(
        self,
        *,
        rng: random.Random | None = None,
        scheduler: Scheduler | None = None,
        pacing: PacingConfig | None = None,
    ):
        self.rng = rng or random.Random()
        self.scheduler = scheduler or ImmediateScheduler()
        self.pacing = pacing or PacingConfig()
        self.state: S = self.new_state()

        self._subscribers: list[StateCallback] = []
        self._followups: list[tuple[float, Callable[[], Any], bool]] = []
        self._commit_serial = 0
        self._closed = False

    # =========================================================================
    # Subclass hooks
    # =========================================================================

    @abstractmethod
    def new_state(self) -> S:
        """Create the waiting-room state."""
        pass

    @abstractmethod
    def handlers(self) -> dict[type, Handler]:
        """Map action record types to handler methods."""
        pass

    @abstractmethod
    def reseat(self, roster: list[Participant]) -> bool:
        """Re-seat humans from the session roster. Returns True if applied."""
        pass

    @abstractmethod
    def seat_of(self, participant_id: str) -> int | None:
        """Seat index occupied by a participant."""
        pass

    @abstractmethod
    def current_bot_id(self) -> str | None:
        """Identity of the bot that should act now, or None."""
        pass

    @abstractmethod
    def bot_step(self, bot_id: str):
        """Take one bot decision and submit it through apply()."""
        pass

    @property
    def bot_delay(self) -> float:
        return 0.0

    # =========================================================================
    # Public operations
    # =========================================================================

    def initialize(self, roster: Iterable[Participant] = ()):
        """Build a fresh waiting-room state, seat the roster and publish it."""
        self.state = self.new_state()
        players = list(roster)
        self._commit(lambda: self.reseat(players) or True)

    def update_players(self, roster: Iterable[Participant]) -> bool:
        """Sync seats with the session roster and publish if anything changed."""
        players = list(roster)
        return self._commit(lambda: self.reseat(players))

    def apply(self, action: Action) -> bool:
        """
        Validate and apply an action.

        Returns True if the action changed state. The return value is for
        diagnostics only; callers must not depend on it for correctness.
        """
        handler = self.handlers().get(type(action))
        if handler is None:
            logger.debug("%s: no handler for %r, discarded", self.game_type, action)
            return False
        applied = self._commit(lambda: handler(action))
        if not applied:
            logger.debug("%s: discarded %r", self.game_type, action)
        return applied

    def snapshot(self) -> S:
        """Deep copy of the current state, safe to hand to observers."""
        return deepcopy(self.state)

    def subscribe(self, callback: StateCallback) -> Callable[[], None]:
        """Register a state observer. Returns a function that unsubscribes it."""
        self._subscribers.append(callback)

        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    @property
    def phase(self) -> MatchPhase:
        return self.state.phase

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self):
        """
        Retire the engine when its match is dropped.

        Pending follow-ups are invalidated and every later action, roster
        sync or transition is discarded.
        """
        self._closed = True
        self._commit_serial += 1

    # =========================================================================
    # Commit cycle
    # =========================================================================

    def schedule(self, delay: float, transition: Callable[[], bool]):
        """
        Queue an internal state transition to run after the current commit.

        The transition mutates state directly and is committed (published)
        like an action. Only valid from inside a handler.
        """
        self._followups.append((delay, transition, True))

    def schedule_intent(self, delay: float, submit: Callable[[], Any]):
        """
        Queue a callback that submits actions through apply().

        Used for auto-moves and bot steps, which must go through the same
        validation as any participant. Only valid from inside a handler.
        """
        self._followups.append((delay, submit, False))

    def _commit(self, mutate: Callable[[], bool]) -> bool:
        if self._closed:
            return False
        outer_followups = self._followups
        self._followups = []
        try:
            if not mutate():
                return False

            self._commit_serial += 1
            serial = self._commit_serial
            self._publish()

            followups = self._followups
            bot_id = self.current_bot_id()
            if bot_id is not None:
                followups.append((self.bot_delay, lambda: self.bot_step(bot_id), False))
        finally:
            self._followups = outer_followups

        for delay, callback, commits in followups:
            self.scheduler.call_later(delay, self._bound(serial, callback, commits))
        return True

    def _bound(self, serial: int, callback: Callable[[], Any], commits: bool) -> Callable[[], None]:
        def run():
            if serial != self._commit_serial:
                logger.debug("%s: stale follow-up dropped", self.game_type)
                return
            if commits:
                self._commit(callback)
            else:
                callback()

        return run

    def _publish(self):
        if not self._subscribers:
            return
        snapshot = self.snapshot()
        for callback in list(self._subscribers):
            callback(snapshot)
