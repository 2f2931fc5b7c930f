"""
API Service - Business logic layer between the transport and the engines.

The service:
1. Translates wire payloads into action records
2. Hands them to the match's host dispatcher
3. Converts engine snapshots into response models
4. Lets transports subscribe to state publications

This layer is framework-agnostic (can be used with FastAPI, a socket
server, or directly from tests).
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Callable, Union
import logging

from pydantic import TypeAdapter, ValidationError

from ..engine_core.action import Action, StartGame, Reset, AddBot, RemoveBot
from ..engine_core.state import Participant
from ..exceptions import InvalidActionPayload
from ..games.race.actions import RollDice, MoveToken
from ..games.race.state import (
    Finished,
    Home,
    InFinishLane,
    OnTrack,
    RaceState,
    TokenPosition,
)
from ..games.sowing.actions import Sow
from ..games.sowing.state import Side, SowingState
from ..session import SessionManager, Session
from .schemas import (
    ActionPayload,
    ActionRequest,
    AddBotPayload,
    CreateMatchRequest,
    LastMoveInfo,
    LastSowInfo,
    MatchResponse,
    MoveTokenPayload,
    RacePlayerInfo,
    RaceStateResponse,
    RemoveBotPayload,
    ResetPayload,
    RollDicePayload,
    SowPayload,
    SowStepInfo,
    SowingSeatInfo,
    SowingStateResponse,
    StartGamePayload,
    TokenInfo,
    TokenPositionInfo,
    UpdatePlayersRequest,
)

logger = logging.getLogger(__name__)

StateResponse = Union[RaceStateResponse, SowingStateResponse]

_action_adapter = TypeAdapter(ActionPayload)


# =============================================================================
# Payload conversion
# =============================================================================

def parse_action(data: Any) -> ActionPayload:
    """
    Validate a raw action payload.

    Raises InvalidActionPayload if it does not match any action schema.
    """
    try:
        return _action_adapter.validate_python(data)
    except ValidationError as e:
        raise InvalidActionPayload(str(e)) from e


def to_action(payload: ActionPayload) -> Action | None:
    """
    Build the action record for a validated payload.

    Returns None for a sow whose side is not left/right; the request is
    well formed but the move can never be legal.
    """
    if isinstance(payload, RollDicePayload):
        return RollDice(actor=payload.actor)
    if isinstance(payload, MoveTokenPayload):
        return MoveToken(actor=payload.actor, token_id=payload.token_id)
    if isinstance(payload, SowPayload):
        try:
            side = Side(payload.side)
        except ValueError:
            return None
        return Sow(actor=payload.actor, cell=payload.cell, side=side)
    if isinstance(payload, StartGamePayload):
        return StartGame()
    if isinstance(payload, ResetPayload):
        return Reset()
    if isinstance(payload, AddBotPayload):
        return AddBot(seat=payload.seat)
    if isinstance(payload, RemoveBotPayload):
        return RemoveBot(seat=payload.seat)
    raise InvalidActionPayload(f"Unsupported payload: {payload!r}")


# =============================================================================
# Snapshot conversion
# =============================================================================

def position_info(position: TokenPosition) -> TokenPositionInfo:
    if isinstance(position, Home):
        return TokenPositionInfo(kind="home", index=position.slot)
    if isinstance(position, OnTrack):
        return TokenPositionInfo(kind="track", index=position.cell)
    if isinstance(position, InFinishLane):
        return TokenPositionInfo(kind="finish_lane", index=position.cell)
    return TokenPositionInfo(kind="finished")


def race_state_response(state: RaceState) -> RaceStateResponse:
    last_move = None
    if state.last_move is not None:
        last_move = LastMoveInfo(
            player_id=state.last_move.player_id,
            token_id=state.last_move.token_id,
            from_position=position_info(state.last_move.from_position),
            to_position=position_info(state.last_move.to_position),
        )

    return RaceStateResponse(
        phase=state.phase.value,
        players=[
            RacePlayerInfo(
                seat=p.seat,
                color=p.color.value,
                participant_id=p.participant_id,
                name=p.name,
                is_bot=p.is_bot,
                has_finished=p.has_finished,
                tokens=[
                    TokenInfo(token_id=t.token_id, position=position_info(t.position))
                    for t in p.tokens
                ],
            )
            for p in state.players
        ],
        current_seat=state.current_seat,
        dice_value=state.dice_value,
        has_rolled=state.has_rolled,
        can_roll_again=state.can_roll_again,
        winner=state.winner,
        last_move=last_move,
    )


def sowing_state_response(state: SowingState) -> SowingStateResponse:
    last_move = None
    if state.last_move is not None:
        last_move = LastSowInfo(
            player=state.last_move.player,
            cell=state.last_move.cell,
            direction=state.last_move.direction.value,
            steps=[
                SowStepInfo(kind=step.kind.value, cell=step.cell, amount=step.amount)
                for step in state.last_move.steps
            ],
        )

    return SowingStateResponse(
        phase=state.phase.value,
        board=list(state.board),
        seats=[
            SowingSeatInfo(participant_id=p.participant_id, name=p.name, is_bot=p.is_bot)
            if p is not None else None
            for p in state.seats
        ],
        scores=dict(state.scores),
        current_turn=state.current_turn,
        winner=state.winner,
        is_draw=state.is_draw,
        last_move=last_move,
    )


def state_response(state: Any) -> StateResponse:
    if isinstance(state, RaceState):
        return race_state_response(state)
    if isinstance(state, SowingState):
        return sowing_state_response(state)
    raise TypeError(f"Unknown state type: {type(state).__name__}")


# =============================================================================
# Service
# =============================================================================

@dataclass
class APIService:
    """
    Host-side API service.

    Usage:
        service = APIService()
        match = service.create_match(CreateMatchRequest(game_type="race", players=[...]))
        service.submit_action(match.match_id, RollDicePayload(actor="alice"))
        state = service.get_state(match.match_id)
    """
    session_manager: SessionManager = field(default_factory=SessionManager)

    def create_match(self, request: CreateMatchRequest) -> MatchResponse:
        """Host a new match and seat the requested roster."""
        roster = [Participant(p.participant_id, p.name) for p in request.players]
        session = self.session_manager.create_session(
            request.game_type.value,
            request.host_id,
            roster=roster,
            seed=request.seed,
        )
        return self._match_response(session)

    def get_match(self, match_id: str) -> MatchResponse:
        session = self.session_manager.require_session(match_id)
        return self._match_response(session)

    def get_state(self, match_id: str) -> StateResponse:
        session = self.session_manager.require_session(match_id)
        return state_response(session.dispatcher.state)

    def submit_action(self, match_id: str, payload: ActionPayload) -> StateResponse:
        """
        Deliver an inbound action to the match's host dispatcher.

        Always returns the resulting state: an illegal action leaves it
        unchanged and is not reported.
        """
        session = self.session_manager.require_session(match_id)
        action = to_action(payload)
        if action is None:
            logger.debug("Match %s: unplayable payload %r ignored", match_id, payload)
        else:
            session.dispatcher.receive(action)
        return state_response(session.dispatcher.state)

    def submit_raw_action(self, match_id: str, data: Any) -> StateResponse:
        """Validate a raw `{"action": {...}}` message, then submit it."""
        try:
            request = ActionRequest.model_validate(data)
        except ValidationError as e:
            raise InvalidActionPayload(str(e)) from e
        return self.submit_action(match_id, request.action)

    def update_players(self, match_id: str, request: UpdatePlayersRequest) -> StateResponse:
        session = self.session_manager.require_session(match_id)
        roster = [Participant(p.participant_id, p.name) for p in request.players]
        session.dispatcher.update_players(roster)
        return state_response(session.dispatcher.state)

    def end_match(self, match_id: str, reason: str = "completed") -> bool:
        return self.session_manager.end_session(match_id, reason)

    def list_matches(self) -> list[str]:
        return self.session_manager.list_active_sessions()

    def subscribe(
        self, match_id: str, callback: Callable[[dict[str, Any]], None]
    ) -> Callable[[], None]:
        """
        Receive every state publication of a match as a JSON-ready dict.

        Returns a function that unsubscribes.
        """
        session = self.session_manager.require_session(match_id)

        def on_state(snapshot: Any):
            callback(state_response(snapshot).model_dump(mode="json"))

        return session.subscribe(on_state)

    def _match_response(self, session: Session) -> MatchResponse:
        return MatchResponse(
            match_id=session.session_id,
            game_type=session.game_type,
            host_id=session.metadata.get("host_id", ""),
            created_at=session.created_at,
            state=state_response(session.dispatcher.state),
        )
