"""
FastAPI Application - REST + WebSocket surface of the host.

Endpoints:
    POST   /api/v1/matches                Host a new match
    GET    /api/v1/matches                List active matches
    GET    /api/v1/matches/{id}           Match metadata and state
    DELETE /api/v1/matches/{id}           End a match
    GET    /api/v1/matches/{id}/state     Current state snapshot
    POST   /api/v1/matches/{id}/actions   Deliver an action
    PUT    /api/v1/matches/{id}/players   Sync the room roster
    WS     /api/v1/matches/{id}/ws        State feed + action channel

Actions are never rejected for being illegal: the endpoint returns the
resulting state, which is unchanged when the action did not apply.

All responses are JSON with explicit Pydantic schemas.
"""

from typing import Annotated, Union
import asyncio
import contextlib
import json
import logging
import os

# Environment configuration
HOSTPLAY_ENV = os.getenv("HOSTPLAY_ENV", "development")
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")

logger = logging.getLogger(__name__)


def create_app(service=None):
    """
    Create the FastAPI application.

    Args:
        service: Optional APIService instance (creates one driven by the
                 event loop with environment pacing if not provided)

    Returns:
        FastAPI application instance
    """
    try:
        from fastapi import FastAPI, Query, Request, WebSocket, WebSocketDisconnect
        from fastapi.exceptions import RequestValidationError
        from fastapi.middleware.cors import CORSMiddleware
        from fastapi.responses import JSONResponse
    except ImportError:
        raise ImportError(
            "FastAPI not installed. Install with: pip install fastapi uvicorn"
        )

    from .. import __version__
    from ..config import PacingConfig
    from ..engine_core.scheduler import AsyncioScheduler
    from ..exceptions import InvalidActionPayload, MatchNotFound, UnknownGameType
    from ..session import SessionManager
    from .service import APIService
    from .schemas import (
        # Request models
        ActionRequest,
        CreateMatchRequest,
        UpdatePlayersRequest,
        # Response models
        EndMatchResponse,
        ErrorResponse,
        HealthResponse,
        MatchListResponse,
        MatchResponse,
        RaceStateResponse,
        SowingStateResponse,
        # Enums
        ErrorCode,
    )

    app = FastAPI(
        title="Hostplay API",
        description="""
Host-authoritative engines for the token race and the mandarin sowing game.

## Flow

1. `POST /api/v1/matches` hosts a match and seats the roster
2. Clients open `WS /api/v1/matches/{id}/ws` for state publications
3. Intents go to `POST /actions` (or over the socket)
4. Illegal intents are ignored; the state simply does not change

## Error Codes

| Code | Description |
|------|-------------|
| `MATCH_NOT_FOUND` | Match does not exist or has ended |
| `UNKNOWN_GAME_TYPE` | Game type is not race or sowing |
| `INVALID_ACTION` | Action payload failed validation |
| `VALIDATION_ERROR` | Request body failed validation |
        """,
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    api_service = service or APIService(
        session_manager=SessionManager(
            scheduler_factory=AsyncioScheduler,
            pacing=PacingConfig.from_env(),
        )
    )

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Union[dict, None] = None,
    ) -> JSONResponse:
        """Create a standardized error response."""
        return JSONResponse(
            status_code=status_code,
            content=ErrorResponse(
                error=message,
                error_code=error_code,
                details=details,
            ).model_dump(mode="json"),
        )

    @app.exception_handler(MatchNotFound)
    async def match_not_found_handler(request: Request, exc: MatchNotFound):
        return make_error_response(
            ErrorCode.MATCH_NOT_FOUND, str(exc), status_code=404,
            details={"match_id": exc.match_id},
        )

    @app.exception_handler(UnknownGameType)
    async def unknown_game_type_handler(request: Request, exc: UnknownGameType):
        return make_error_response(
            ErrorCode.UNKNOWN_GAME_TYPE, str(exc),
            details={"game_type": exc.game_type},
        )

    @app.exception_handler(InvalidActionPayload)
    async def invalid_action_handler(request: Request, exc: InvalidActionPayload):
        return make_error_response(ErrorCode.INVALID_ACTION, str(exc))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = [
            {"loc": [str(part) for part in err.get("loc", ())], "msg": err.get("msg", "")}
            for err in exc.errors()
        ]
        return make_error_response(
            ErrorCode.VALIDATION_ERROR, "Request validation failed",
            details={"errors": errors},
        )

    # =========================================================================
    # Match Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/matches",
        response_model=MatchResponse,
        responses={400: {"model": ErrorResponse}},
        tags=["Matches"],
        summary="Host a new match",
    )
    async def create_match(request: CreateMatchRequest) -> MatchResponse:
        """
        Host a new match of the given type.

        Players are seated in order; bots are added afterwards with an
        `add_bot` action.
        """
        return api_service.create_match(request)

    @app.get(
        "/api/v1/matches",
        response_model=MatchListResponse,
        tags=["Matches"],
        summary="List active matches",
    )
    async def list_matches() -> MatchListResponse:
        matches = api_service.list_matches()
        return MatchListResponse(matches=matches, count=len(matches))

    @app.get(
        "/api/v1/matches/{match_id}",
        response_model=MatchResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Matches"],
        summary="Get match metadata and state",
    )
    async def get_match(match_id: str) -> MatchResponse:
        return api_service.get_match(match_id)

    @app.delete(
        "/api/v1/matches/{match_id}",
        response_model=EndMatchResponse,
        tags=["Matches"],
        summary="End a match",
    )
    async def end_match(
        match_id: str,
        reason: Annotated[str, Query(description="Reason for ending")] = "completed",
    ) -> EndMatchResponse:
        """End a match and drop its state."""
        success = api_service.end_match(match_id, reason)
        return EndMatchResponse(success=success, match_id=match_id)

    # =========================================================================
    # Game Loop Endpoints
    # =========================================================================

    @app.get(
        "/api/v1/matches/{match_id}/state",
        response_model=Union[RaceStateResponse, SowingStateResponse],
        responses={404: {"model": ErrorResponse}},
        tags=["Game Loop"],
        summary="Get the current state snapshot",
    )
    async def get_state(match_id: str):
        return api_service.get_state(match_id)

    @app.post(
        "/api/v1/matches/{match_id}/actions",
        response_model=Union[RaceStateResponse, SowingStateResponse],
        responses={
            400: {"model": ErrorResponse, "description": "Malformed action payload"},
            404: {"model": ErrorResponse, "description": "Match not found"},
        },
        tags=["Game Loop"],
        summary="Deliver an action to the host",
    )
    async def submit_action(match_id: str, request: ActionRequest):
        """
        Deliver an action from a participant.

        The response is the state after the action. An action that breaks
        a rule (wrong turn, illegal token, empty cell) leaves it unchanged.
        """
        return api_service.submit_action(match_id, request.action)

    @app.put(
        "/api/v1/matches/{match_id}/players",
        response_model=Union[RaceStateResponse, SowingStateResponse],
        responses={404: {"model": ErrorResponse}},
        tags=["Game Loop"],
        summary="Sync the room roster",
    )
    async def update_players(match_id: str, request: UpdatePlayersRequest):
        """Re-seat human players from the room roster (ignored while playing)."""
        return api_service.update_players(match_id, request)

    # =========================================================================
    # WebSocket Endpoint
    # =========================================================================

    @app.websocket("/api/v1/matches/{match_id}/ws")
    async def websocket_endpoint(websocket: WebSocket, match_id: str):
        """
        WebSocket for state publications.

        Messages from server:
        - state_update: A state snapshot was published
        - pong: Reply to ping
        - error: Bad message or unknown match

        Messages from client:
        - ping: Keep-alive
        - action: {"type": "action", "action": {...}} delivers an intent
        """
        await websocket.accept()

        queue: asyncio.Queue = asyncio.Queue()
        try:
            unsubscribe = api_service.subscribe(match_id, queue.put_nowait)
        except MatchNotFound as e:
            await websocket.send_json({
                "type": "error",
                "payload": {"message": str(e), "error_code": ErrorCode.MATCH_NOT_FOUND.value},
            })
            await websocket.close(code=4404)
            return

        async def pump():
            while True:
                payload = await queue.get()
                await websocket.send_json({"type": "state_update", "payload": payload})

        await websocket.send_json({
            "type": "state_update",
            "payload": api_service.get_state(match_id).model_dump(mode="json"),
        })
        sender = asyncio.create_task(pump())

        try:
            while True:
                data = await websocket.receive_text()
                try:
                    message = json.loads(data)
                except json.JSONDecodeError:
                    await websocket.send_json({
                        "type": "error",
                        "payload": {"message": "Invalid JSON"},
                    })
                    continue

                message_type = message.get("type") if isinstance(message, dict) else None
                if message_type == "ping":
                    await websocket.send_json({"type": "pong"})
                elif message_type == "action":
                    try:
                        api_service.submit_raw_action(match_id, message)
                    except (InvalidActionPayload, MatchNotFound) as e:
                        await websocket.send_json({
                            "type": "error",
                            "payload": {"message": str(e)},
                        })
                else:
                    await websocket.send_json({
                        "type": "error",
                        "payload": {"message": f"Unknown message type: {message_type}"},
                    })
        except WebSocketDisconnect:
            logger.debug("WebSocket for match %s disconnected", match_id)
        finally:
            unsubscribe()
            sender.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await sender

    # =========================================================================
    # Health Check
    # =========================================================================

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        """Health check endpoint for load balancers."""
        return HealthResponse(
            status="healthy",
            service="hostplay",
            version=__version__,
        )

    @app.get("/", tags=["System"])
    async def root():
        """API root - redirects to docs."""
        return {
            "service": "Hostplay API",
            "version": __version__,
            "environment": HOSTPLAY_ENV,
            "docs": "/api/docs",
        }

    return app


# For running directly: uvicorn hostplay.api.app:app
app = None
try:
    app = create_app()
except ImportError:
    # FastAPI not installed
    pass
