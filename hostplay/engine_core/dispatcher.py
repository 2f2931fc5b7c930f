"""
Action Dispatcher - The host-authority contract.

Exactly one process per match is the host. The dispatcher is the only
way into the engine:

    local intent  --submit()-->  host? engine.apply() : forward(action)
    remote intent --receive()--> host? engine.apply() : ignored
    roster sync   --update_players()--> host? engine.update_players() : ignored
    host publish  ----------->   broadcast(snapshot) to the transport
    guest         <--accept_state()-- snapshot from the host

Authority is structural: it is decided once, at construction, by the
HostAuthority token. A guest never mutates shared state; it only keeps
the latest snapshot the host published.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Callable, Iterable, TYPE_CHECKING
import logging

from ..exceptions import AuthorityError

if TYPE_CHECKING:
    from .action import Action
    from .engine import GameEngine
    from .state import Participant

logger = logging.getLogger(__name__)

Forward = Callable[["Action"], None]
Broadcast = Callable[[Any], None]


@dataclass(frozen=True)
class HostAuthority:
    """Who the local participant is, and whether this process is the host."""
    participant_id: str
    is_host: bool


class ActionDispatcher:
    """
    Routes intents to the authoritative engine.

    Usage (host):
        dispatcher = ActionDispatcher(
            HostAuthority("alice", is_host=True),
            engine=RaceEngine(),
            broadcast=transport.send_state,
        )
        dispatcher.submit(roll("alice"))

    Usage (guest):
        dispatcher = ActionDispatcher(
            HostAuthority("bob", is_host=False),
            forward=transport.send_action,
        )
        dispatcher.submit(roll("bob"))        # forwarded to the host
        dispatcher.accept_state(snapshot)     # host publication arrives
    """

    def __init__(
        self,
        authority: HostAuthority,
        *,
        engine: GameEngine | None = None,
        forward: Forward | None = None,
        broadcast: Broadcast | None = None,
    ):
        if authority.is_host and engine is None:
            raise AuthorityError("A host dispatcher needs an engine")

        self.authority = authority
        self._engine = engine if authority.is_host else None
        self._forward = forward
        self._broadcast = broadcast
        self._replica: Any = None
        self._subscribers: list[Callable[[Any], None]] = []

        if self._engine is not None:
            self._engine.subscribe(self._on_published)

    @property
    def is_host(self) -> bool:
        return self.authority.is_host

    @property
    def engine(self) -> GameEngine | None:
        """The authoritative engine (host only)."""
        return self._engine

    @property
    def state(self) -> Any:
        """Latest state: the engine's snapshot on the host, the replica on a guest."""
        if self._engine is not None:
            return self._engine.snapshot()
        return self._replica

    def subscribe(self, callback: Callable[[Any], None]) -> Callable[[], None]:
        """Observe every state snapshot this process sees."""
        self._subscribers.append(callback)

        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def submit(self, action: Action):
        """Issue an intent from the local participant."""
        if self._engine is not None:
            self._engine.apply(action)
            return

        if self._forward is None:
            logger.warning("Guest %s has no forward channel, %r dropped",
                           self.authority.participant_id, action)
            return
        self._forward(action)

    def receive(self, action: Action):
        """Handle an intent delivered by the transport from another participant."""
        if self._engine is None:
            logger.debug("Guest %s ignored inbound %r",
                         self.authority.participant_id, action)
            return
        self._engine.apply(action)

    def update_players(self, roster: Iterable[Participant]):
        """Sync seats with the room roster (host only)."""
        if self._engine is None:
            logger.debug("Guest %s ignored a roster update",
                         self.authority.participant_id)
            return
        self._engine.update_players(roster)

    def accept_state(self, snapshot: Any):
        """Store a state publication from the host (guests only)."""
        if self._engine is not None:
            logger.debug("Host ignored an inbound state publication")
            return
        self._replica = snapshot
        self._notify(snapshot)

    def _on_published(self, snapshot: Any):
        if self._broadcast is not None:
            self._broadcast(snapshot)
        self._notify(snapshot)

    def _notify(self, snapshot: Any):
        for callback in list(self._subscribers):
            callback(snapshot)
