"""
Pydantic Schemas for API - Request/response models for the wire.

These models define the contract between room clients and the host.
Action payloads are discriminated by their `type` field; state responses
mirror the engine snapshots field for field so clients can replay moves.

Error Codes:
- MATCH_NOT_FOUND: Match does not exist or has ended
- UNKNOWN_GAME_TYPE: Requested game type is not "race" or "sowing"
- INVALID_ACTION: Action payload failed validation
- VALIDATION_ERROR: Request body failed validation
"""

from enum import Enum
from typing import Annotated, Literal, Optional, Union
from pydantic import BaseModel, Field


# =============================================================================
# Enums
# =============================================================================

class GameType(str, Enum):
    """Built-in game types."""
    RACE = "race"
    SOWING = "sowing"


class ErrorCode(str, Enum):
    """Structured error codes."""
    MATCH_NOT_FOUND = "MATCH_NOT_FOUND"
    UNKNOWN_GAME_TYPE = "UNKNOWN_GAME_TYPE"
    INVALID_ACTION = "INVALID_ACTION"
    VALIDATION_ERROR = "VALIDATION_ERROR"


# =============================================================================
# Action payloads
# =============================================================================

class RollDicePayload(BaseModel):
    type: Literal["roll_dice"] = "roll_dice"
    actor: str


class MoveTokenPayload(BaseModel):
    type: Literal["move_token"] = "move_token"
    actor: str
    token_id: int


class SowPayload(BaseModel):
    """
    A sowing move. `side` is kept as a plain string: an unrecognized side
    is a rule violation (silently ignored), not a malformed request.
    """
    type: Literal["sow"] = "sow"
    actor: str
    cell: int
    side: str = Field(..., description="left or right, as seen by the mover")


class StartGamePayload(BaseModel):
    type: Literal["start_game"] = "start_game"


class ResetPayload(BaseModel):
    type: Literal["reset"] = "reset"


class AddBotPayload(BaseModel):
    type: Literal["add_bot"] = "add_bot"
    seat: Optional[int] = Field(None, description="Target seat (race only)")


class RemoveBotPayload(BaseModel):
    type: Literal["remove_bot"] = "remove_bot"
    seat: int


ActionPayload = Annotated[
    Union[
        RollDicePayload,
        MoveTokenPayload,
        SowPayload,
        StartGamePayload,
        ResetPayload,
        AddBotPayload,
        RemoveBotPayload,
    ],
    Field(discriminator="type"),
]


class ActionRequest(BaseModel):
    """Body of POST /matches/{id}/actions and of WebSocket action messages."""
    action: ActionPayload


# =============================================================================
# Requests
# =============================================================================

class ParticipantInfo(BaseModel):
    participant_id: str
    name: str


class CreateMatchRequest(BaseModel):
    """Request to host a new match."""
    game_type: GameType
    host_id: str = Field("host", description="Participant id of the hosting process")
    players: list[ParticipantInfo] = Field(default_factory=list, description="Roster in seat order")
    seed: Optional[int] = Field(None, description="Seed for reproducible dice and bots")


class UpdatePlayersRequest(BaseModel):
    """Roster sync from the room layer."""
    players: list[ParticipantInfo]


# =============================================================================
# Race state
# =============================================================================

class TokenPositionInfo(BaseModel):
    """
    Token location.

    kind is one of home, track, finish_lane, finished; `index` is the home
    slot, ring cell or lane cell and is absent for finished tokens.
    """
    kind: Literal["home", "track", "finish_lane", "finished"]
    index: Optional[int] = None


class TokenInfo(BaseModel):
    token_id: int
    position: TokenPositionInfo


class RacePlayerInfo(BaseModel):
    seat: int
    color: str
    participant_id: Optional[str] = None
    name: str
    is_bot: bool = False
    has_finished: bool = False
    tokens: list[TokenInfo] = Field(default_factory=list)


class LastMoveInfo(BaseModel):
    player_id: str
    token_id: int
    from_position: TokenPositionInfo
    to_position: TokenPositionInfo


class RaceStateResponse(BaseModel):
    game_type: Literal["race"] = "race"
    phase: str
    players: list[RacePlayerInfo]
    current_seat: int
    dice_value: Optional[int] = None
    has_rolled: bool = False
    can_roll_again: bool = False
    winner: Optional[str] = None
    last_move: Optional[LastMoveInfo] = None


# =============================================================================
# Sowing state
# =============================================================================

class SowStepInfo(BaseModel):
    kind: Literal["pickup", "sow", "capture"]
    cell: int
    amount: int = 1


class LastSowInfo(BaseModel):
    player: str
    cell: int
    direction: Literal["cw", "ccw"]
    steps: list[SowStepInfo] = Field(default_factory=list)


class SowingSeatInfo(BaseModel):
    participant_id: str
    name: str
    is_bot: bool = False


class SowingStateResponse(BaseModel):
    game_type: Literal["sowing"] = "sowing"
    phase: str
    board: list[int]
    seats: list[Optional[SowingSeatInfo]]
    scores: dict[str, int] = Field(default_factory=dict)
    current_turn: Optional[str] = None
    winner: Optional[str] = None
    is_draw: bool = False
    last_move: Optional[LastSowInfo] = None


StateResponse = Annotated[
    Union[RaceStateResponse, SowingStateResponse],
    Field(discriminator="game_type"),
]


# =============================================================================
# Responses
# =============================================================================

class MatchResponse(BaseModel):
    """Match metadata plus the current state."""
    match_id: str
    game_type: GameType
    host_id: str
    created_at: float
    state: StateResponse
    api_version: str = "v1"


class MatchListResponse(BaseModel):
    matches: list[str]
    count: int


class EndMatchResponse(BaseModel):
    success: bool
    match_id: str


class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str = Field(..., description="Human-readable error message")
    error_code: ErrorCode = Field(..., description="Machine-readable error code")
    details: Optional[dict] = Field(None, description="Additional error context")
    api_version: str = Field("v1", description="API version")


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    service: str
    version: str
