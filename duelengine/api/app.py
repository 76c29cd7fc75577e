"""
FastAPI Application - HTTP and WebSocket gateway for browser clients.

Endpoints:
    POST   /api/v1/matches                 Create a match against the bot
    GET    /api/v1/matches                 List live matches
    POST   /api/v1/matches/{id}/join       Take a human seat
    GET    /api/v1/matches/{id}/state      Public state
    POST   /api/v1/matches/{id}/actions    Apply an action (X-Session-Token)
    DELETE /api/v1/matches/{id}            End a match
    POST   /api/v1/decks/preview           Resolve a decklist, first 20 cards
    WS     /api/v1/ws                      Real-time play

Action Flow:
    1. The action is applied for the seat owning the session token
    2. While the active seat is the bot, its turn is played out
    3. The resulting public state is returned and broadcast to every
       WebSocket in the match; errors go to the actor only

All responses are JSON with explicit Pydantic schemas.
"""

from contextlib import asynccontextmanager, suppress
from typing import Annotated, Optional, Union
import asyncio
import json
import logging

from fastapi import FastAPI, Header, Request, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from ..config import Settings, get_settings
from ..engine_core.errors import EngineError
from ..observability import setup_logging
from .schemas import (
    # Request models
    ActionRequest,
    CreateMatchRequest,
    DeckPreviewRequest,
    JoinMatchRequest,
    # Response models
    ActionResponse,
    DeckPreviewResponse,
    EndMatchResponse,
    ErrorResponse,
    HealthResponse,
    MatchListResponse,
    MatchResponse,
    # Nested models
    CardInfo,
    PrivateView,
    PublicState,
    # Enums
    ErrorCode,
)
from .service import MatchService, PREVIEW_SIZE, new_session_token

logger = logging.getLogger(__name__)

NOT_FOUND_CODES = {ErrorCode.MATCH_NOT_FOUND, ErrorCode.PLAYER_NOT_FOUND}


def create_app(service: Optional[MatchService] = None, settings: Optional[Settings] = None):
    """
    Create the FastAPI application.

    Args:
        service: Optional MatchService instance (creates new if not provided)
        settings: Optional Settings (defaults to get_settings())

    Returns:
        FastAPI application instance
    """
    settings = settings or get_settings()
    api_service = service or MatchService.from_settings(settings)

    # WebSocket connections per match
    ws_connections: dict[str, list[WebSocket]] = {}

    async def evict_idle_matches():
        interval = max(1.0, min(60.0, settings.match_idle_timeout_seconds / 4))
        while True:
            await asyncio.sleep(interval)
            for match_id in api_service.cleanup_idle():
                ws_connections.pop(match_id, None)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(settings.log_level, settings.log_format)
        janitor = asyncio.create_task(evict_idle_matches())
        logger.info("Gateway started (%s)", settings.env)
        try:
            yield
        finally:
            janitor.cancel()
            with suppress(asyncio.CancelledError):
                await janitor
            await api_service.aclose()

    app = FastAPI(
        title="Duel Engine API",
        description="""
Turn-based card duel engine with a built-in bot opponent.

## Error Codes

| Code | Description |
|------|-------------|
| `MATCH_NOT_FOUND` | Match does not exist or was evicted |
| `PLAYER_NOT_FOUND` | Session token owns no seat in the match |
| `UNKNOWN_ACTION_TYPE` | Action tag is not supported |
| `CARD_NOT_IN_HAND` | Card is not in the actor's hand |
| `LAND_LIMIT_REACHED` | A land was already played this turn |
| `WRONG_PHASE` | Lands are only played in a main phase |
| `NOT_A_LAND` | Card is not a land |
| `DECK_IMPORT_FAILED` | Decklist could not be resolved |
        """,
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(
        error_code: ErrorCode,
        message: str,
        details: Optional[dict] = None,
    ) -> JSONResponse:
        """Create a standardized error response."""
        return JSONResponse(
            status_code=404 if error_code in NOT_FOUND_CODES else 400,
            content=ErrorResponse(
                error=message,
                error_code=error_code,
                details=details,
            ).model_dump(mode="json"),
        )

    @app.exception_handler(EngineError)
    async def engine_error_handler(request: Request, exc: EngineError) -> JSONResponse:
        return make_error_response(ErrorCode(exc.error_code), str(exc))

    async def broadcast_to_match(match_id: str, message: dict):
        """Send a message to every WebSocket watching a match."""
        if match_id in ws_connections:
            dead_connections = []
            for ws in ws_connections[match_id]:
                try:
                    await ws.send_json(message)
                except (WebSocketDisconnect, RuntimeError):
                    dead_connections.append(ws)
            for ws in dead_connections:
                ws_connections[match_id].remove(ws)

    def _match_response(match, seat, token: str) -> MatchResponse:
        return MatchResponse(
            match_id=match.match_id,
            player_id=seat.player_id,
            session_token=token,
            state=PublicState.model_validate(match.get_public_state()),
            you=PrivateView.model_validate(match.get_private_view(token)),
        )

    # =========================================================================
    # Match Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/matches",
        response_model=MatchResponse,
        tags=["Matches"],
        summary="Create a match against the bot",
    )
    async def create_match(body: CreateMatchRequest) -> MatchResponse:
        """
        Create a match with the caller in seat 0 (starter deck A) and the
        bot in seat 1.

        Keep the returned `session_token`; it identifies your seat.
        """
        match, seat, token = api_service.create_match(body.player_name)
        return _match_response(match, seat, token)

    @app.get(
        "/api/v1/matches",
        response_model=MatchListResponse,
        tags=["Matches"],
        summary="List live matches",
    )
    async def list_matches() -> MatchListResponse:
        matches = api_service.list_matches()
        return MatchListResponse(matches=matches, count=len(matches))

    @app.post(
        "/api/v1/matches/{match_id}/join",
        response_model=MatchResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Matches"],
        summary="Join a match as a human player",
    )
    async def join_match(match_id: str, body: JoinMatchRequest) -> MatchResponse:
        match, seat, token = await api_service.join_match(
            match_id, body.player_name, starter=body.starter.value,
        )
        await broadcast_to_match(match_id, {
            "type": "game-updated",
            "payload": match.get_public_state(),
        })
        return _match_response(match, seat, token)

    @app.get(
        "/api/v1/matches/{match_id}/state",
        response_model=PublicState,
        responses={404: {"model": ErrorResponse}},
        tags=["Matches"],
        summary="Get the public match state",
    )
    async def get_state(match_id: str) -> PublicState:
        """Public projection: hands are counts and libraries are hidden."""
        match = api_service.get_match(match_id)
        return PublicState.model_validate(match.get_public_state())

    @app.delete(
        "/api/v1/matches/{match_id}",
        response_model=EndMatchResponse,
        tags=["Matches"],
        summary="End a match",
    )
    async def end_match(match_id: str) -> EndMatchResponse:
        success = api_service.end_match(match_id)
        ws_connections.pop(match_id, None)
        return EndMatchResponse(success=success, match_id=match_id)

    # =========================================================================
    # Action Endpoint
    # =========================================================================

    @app.post(
        "/api/v1/matches/{match_id}/actions",
        response_model=ActionResponse,
        responses={
            400: {"model": ErrorResponse, "description": "Action rejected"},
            404: {"model": ErrorResponse, "description": "Match or seat not found"},
        },
        tags=["Game Loop"],
        summary="Apply a player action",
    )
    async def submit_action(
        match_id: str,
        body: ActionRequest,
        x_session_token: Annotated[Optional[str], Header(description="Token from create/join")] = None,
    ) -> Union[ActionResponse, JSONResponse]:
        """
        Apply an action for the seat owning `X-Session-Token`.

        **Request Body:**
        ```json
        {"type": "play-land", "cardId": "forest_3f2a9c01b2d4"}
        ```

        If the turn passes to the bot, its turn is played out before the
        response is returned; `bot_actions` lists what it did.
        """
        result = await api_service.submit_action(match_id, x_session_token, body.to_wire())
        if not result.success:
            return make_error_response(ErrorCode(result.error_code), result.error)

        await broadcast_to_match(match_id, {
            "type": "game-updated",
            "payload": result.public_state,
        })

        match = api_service.get_match(match_id)
        return ActionResponse(
            match_id=match_id,
            state_changes=result.state_changes,
            bot_actions=result.bot_actions,
            state=PublicState.model_validate(result.public_state),
            you=PrivateView.model_validate(match.get_private_view(x_session_token)),
        )

    # =========================================================================
    # Deck Endpoint
    # =========================================================================

    @app.post(
        "/api/v1/decks/preview",
        response_model=DeckPreviewResponse,
        responses={400: {"model": ErrorResponse}},
        tags=["Decks"],
        summary="Preview an imported deck",
    )
    async def preview_deck(body: DeckPreviewRequest) -> DeckPreviewResponse:
        """Resolve a decklist (text or URL) and return its first cards."""
        deck = await api_service.preview_deck(deck_text=body.deck_text, deck_url=body.deck_url)
        commander = deck.commander
        return DeckPreviewResponse(
            name=deck.name,
            source=deck.source,
            total_cards=deck.total_cards,
            sideboard_count=len(deck.sideboard),
            commander=CardInfo.model_validate(commander.to_dict()) if commander else None,
            cards=[CardInfo.model_validate(c.to_dict()) for c in deck.cards[:PREVIEW_SIZE]],
            warnings=deck.warnings,
            validation_errors=deck.validation_errors,
        )

    # =========================================================================
    # WebSocket Endpoint
    # =========================================================================

    @app.websocket("/api/v1/ws")
    async def websocket_endpoint(websocket: WebSocket):
        """
        WebSocket for real-time play. Each connection is one session.

        Messages from client ({"type": ..., "payload": {...}}):
        - create-game: {"playerName"}
        - join-game: {"gameId", "playerName"}
        - player-action: {"gameId", "action": {"type", ...}}
        - ping: Keep-alive

        Messages from server:
        - game-created: {"gameId", "state", "you"} to the creator
        - game-updated: public state, to every socket in the match
        - error: {"message", "errorCode"} to the acting socket only
        """
        await websocket.accept()
        session_id = new_session_token()
        rooms: set[str] = set()

        def join_room(match_id: str):
            ws_connections.setdefault(match_id, [])
            if websocket not in ws_connections[match_id]:
                ws_connections[match_id].append(websocket)
            rooms.add(match_id)

        async def send_error(message: str, code: ErrorCode = ErrorCode.VALIDATION_ERROR):
            await websocket.send_json({
                "type": "error",
                "payload": {"message": message, "errorCode": code.value},
            })

        logger.info("Client connected", extra={"session_id": session_id})
        try:
            while True:
                data = await websocket.receive_text()
                try:
                    message = json.loads(data)
                except json.JSONDecodeError:
                    await send_error("Invalid JSON")
                    continue
                if not isinstance(message, dict):
                    await send_error("Expected a JSON object")
                    continue

                msg_type = message.get("type")
                payload = message.get("payload") or {}
                if not isinstance(payload, dict):
                    await send_error("Payload must be a JSON object")
                    continue

                try:
                    if msg_type == "ping":
                        await websocket.send_json({"type": "pong"})

                    elif msg_type == "create-game":
                        match, seat, _ = api_service.create_match(
                            payload.get("playerName") or "Player", session_id,
                        )
                        join_room(match.match_id)
                        await websocket.send_json({
                            "type": "game-created",
                            "payload": {
                                "gameId": match.match_id,
                                "state": match.get_public_state(),
                                "you": match.get_private_view(session_id),
                            },
                        })

                    elif msg_type == "join-game":
                        match_id = payload.get("gameId")
                        match, seat, _ = await api_service.join_match(
                            match_id, payload.get("playerName") or "Player",
                            session_id=session_id,
                        )
                        join_room(match_id)
                        await broadcast_to_match(match_id, {
                            "type": "game-updated",
                            "payload": match.get_public_state(),
                        })

                    elif msg_type == "player-action":
                        match_id = payload.get("gameId")
                        result = await api_service.submit_action(
                            match_id, session_id, payload.get("action") or {},
                        )
                        if not result.success:
                            await send_error(result.error, ErrorCode(result.error_code))
                            continue
                        await broadcast_to_match(match_id, {
                            "type": "game-updated",
                            "payload": result.public_state,
                        })

                    else:
                        await send_error(f"Unknown message type: {msg_type}")

                except EngineError as e:
                    await send_error(str(e), ErrorCode(e.error_code))

        except WebSocketDisconnect:
            logger.info("Client disconnected", extra={"session_id": session_id})
        finally:
            for match_id in rooms:
                conns = ws_connections.get(match_id)
                if conns and websocket in conns:
                    conns.remove(websocket)

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
        return HealthResponse(version=__version__, matches=len(api_service.registry))

    @app.get("/", tags=["System"])
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "Duel Engine API",
            "version": __version__,
            "docs": "/api/docs",
            "health": "/health",
        }

    return app


# For running directly: uvicorn duelengine.api.app:app
app = create_app()
