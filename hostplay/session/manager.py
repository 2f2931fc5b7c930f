"""
Session Manager - Creates and tracks in-memory matches on the host.

LIFECYCLE:
1. A room asks for a match of a given game type
2. The manager builds the engine and a host dispatcher for it
3. During play, every action goes through the dispatcher
4. The match ends -> session removed, state dropped

PERSISTENCE RULES:
- NO database: matches live only as long as the session
- Only the last move is kept, for replay animation

The manager itself is host-side only. A guest process keeps a guest
dispatcher (see engine_core.dispatcher) and never creates sessions.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Iterable
import logging
import random
import time
import uuid

from ..config import PacingConfig
from ..engine_core.dispatcher import ActionDispatcher, HostAuthority
from ..engine_core.engine import GameEngine
from ..engine_core.scheduler import Scheduler
from ..engine_core.state import MatchPhase, Participant
from ..exceptions import MatchNotFound, UnknownGameType
from ..games.race.engine import RaceEngine
from ..games.sowing.engine import SowingEngine

logger = logging.getLogger(__name__)

ENGINE_TYPES: dict[str, type[GameEngine]] = {
    RaceEngine.game_type: RaceEngine,
    SowingEngine.game_type: SowingEngine,
}


class SessionState(Enum):
    """State of a match session."""
    ACTIVE = "active"
    ENDED = "ended"
    ABANDONED = "abandoned"


@dataclass
class Session:
    """
    One match hosted by this process.

    Contains:
    - The authoritative engine (reachable only through the dispatcher)
    - The host dispatcher
    - Session metadata
    """
    session_id: str
    game_type: str
    created_at: float
    dispatcher: ActionDispatcher
    state: SessionState = SessionState.ACTIVE
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def engine(self) -> GameEngine:
        return self.dispatcher.engine

    @property
    def phase(self) -> MatchPhase:
        return self.engine.phase

    def is_active(self) -> bool:
        return self.state == SessionState.ACTIVE

    def subscribe(self, callback: Callable[[Any], None]) -> Callable[[], None]:
        return self.dispatcher.subscribe(callback)


class SessionManager:
    """
    Manages match sessions.

    Responsibilities:
    - Build engines with a shared scheduler and pacing
    - Track active sessions
    - Clean up ended sessions
    """

    def __init__(
        self,
        *,
        scheduler_factory: Callable[[], Scheduler] | None = None,
        pacing: PacingConfig | None = None,
    ):
        self._sessions: dict[str, Session] = {}
        self._scheduler_factory = scheduler_factory
        self.pacing = pacing or PacingConfig.from_env()

    def create_session(
        self,
        game_type: str,
        host_id: str,
        roster: Iterable[Participant] = (),
        seed: int | None = None,
        broadcast: Callable[[Any], None] | None = None,
    ) -> Session:
        """
        Create a new match hosted by `host_id`.

        Args:
            game_type: "race" or "sowing"
            host_id: Participant id of the host process
            roster: Participants to seat, in seat order
            seed: Optional seed for reproducible dice and bot choices
            broadcast: Transport hook receiving every published snapshot

        Returns:
            New Session in the waiting phase
        """
        engine_cls = ENGINE_TYPES.get(game_type)
        if engine_cls is None:
            raise UnknownGameType(game_type)

        engine = engine_cls(
            rng=random.Random(seed),
            scheduler=self._scheduler_factory() if self._scheduler_factory else None,
            pacing=self.pacing,
        )
        dispatcher = ActionDispatcher(
            HostAuthority(participant_id=host_id, is_host=True),
            engine=engine,
            broadcast=broadcast,
        )
        engine.initialize(roster)

        session = Session(
            session_id=str(uuid.uuid4()),
            game_type=game_type,
            created_at=time.time(),
            dispatcher=dispatcher,
            metadata={"host_id": host_id, "seed": seed},
        )
        self._sessions[session.session_id] = session
        logger.info("Created %s session %s hosted by %s", game_type, session.session_id, host_id)
        return session

    def get_session(self, session_id: str) -> Session | None:
        """Get a session by ID."""
        return self._sessions.get(session_id)

    def require_session(self, session_id: str) -> Session:
        """Get a session by ID or raise MatchNotFound."""
        session = self._sessions.get(session_id)
        if session is None:
            raise MatchNotFound(session_id)
        return session

    def end_session(self, session_id: str, reason: str = "completed") -> bool:
        """
        End a session and drop its state.

        The engine is closed so pending bot steps and delayed transitions
        never fire. Holders of the Session object see how it ended through
        `session.state`. Returns False if the session did not exist.
        """
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False

        session.state = SessionState.ENDED if reason == "completed" else SessionState.ABANDONED
        session.engine.close()
        logger.info("Ended session %s (%s)", session_id, reason)
        return True

    def list_active_sessions(self) -> list[str]:
        """List IDs of active sessions (ended ones leave the registry)."""
        return list(self._sessions)

    def cleanup_stale_sessions(self, max_age_seconds: int = 3600) -> int:
        """
        End sessions whose match is over and that are older than max_age.

        Returns the number of sessions removed.
        """
        current_time = time.time()
        to_remove = [
            session_id for session_id, session in self._sessions.items()
            if current_time - session.created_at > max_age_seconds
            and session.phase == MatchPhase.ENDED
        ]
        for session_id in to_remove:
            self.end_session(session_id, reason="stale")
        return len(to_remove)
