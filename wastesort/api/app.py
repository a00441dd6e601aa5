"""
FastAPI Application - REST + WebSocket API for the game client.

Endpoints:
    POST   /api/v1/sessions                 Create and start a session
    GET    /api/v1/sessions                 List sessions
    GET    /api/v1/sessions/{id}            Get session state
    DELETE /api/v1/sessions/{id}            End session
    POST   /api/v1/sessions/{id}/select     Select an item
    POST   /api/v1/sessions/{id}/drop       Drop the selected item on a bin
    POST   /api/v1/sessions/{id}/restart    Restart the session
    GET    /api/v1/sessions/{id}/bins       Bins of a session
    GET    /api/v1/bins                     Default bins
    WS     /api/v1/sessions/{id}/ws         Session notifications

Sessions run on the server's event loop: the countdown and the pool
refills are loop timers, and every notification is pushed to the
session's WebSocket clients.

All responses are JSON with explicit Pydantic schemas.
"""

from contextlib import asynccontextmanager
from typing import Annotated, Optional, Union
import asyncio
import json
import logging
import os

# Environment configuration
WASTESORT_ENV = os.getenv("WASTESORT_ENV", "development")
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")
SESSION_MAX_AGE = int(os.getenv("WASTESORT_SESSION_MAX_AGE", "3600"))
CLEANUP_INTERVAL = float(os.getenv("WASTESORT_CLEANUP_INTERVAL", "300"))

logger = logging.getLogger(__name__)


def create_app(service=None, cleanup_interval_seconds=None, session_max_age_seconds=None):
    """
    Create the FastAPI application.

    Args:
        service: Optional APIService instance (creates one on asyncio
            timers if not provided)
        cleanup_interval_seconds: How often ended sessions are swept
            (default WASTESORT_CLEANUP_INTERVAL)
        session_max_age_seconds: Age after which an ended session is
            dropped (default WASTESORT_SESSION_MAX_AGE)

    Returns:
        FastAPI application instance
    """
    try:
        from fastapi import FastAPI, Request, WebSocket, WebSocketDisconnect, Query
        from fastapi.encoders import jsonable_encoder
        from fastapi.exceptions import RequestValidationError
        from fastapi.middleware.cors import CORSMiddleware
        from fastapi.responses import JSONResponse
    except ImportError:
        raise ImportError(
            "FastAPI not installed. Install with: pip install fastapi uvicorn"
        )

    from .. import __version__
    from ..engine_core.errors import ConfigurationError
    from ..session import AsyncioScheduler, SessionManager
    from .service import APIService
    from .schemas import (
        # Request models
        CreateSessionRequest,
        SelectItemRequest,
        DropRequest,
        # Response models
        SessionResponse,
        SelectItemResponse,
        DropResponse,
        BinListResponse,
        ErrorResponse,
        SessionListResponse,
        EndSessionResponse,
        HealthResponse,
        # Enums
        ErrorCode,
    )

    # Service instance
    api_service = service or APIService(
        session_manager=SessionManager(scheduler_factory=AsyncioScheduler)
    )

    cleanup_interval = cleanup_interval_seconds or CLEANUP_INTERVAL
    max_age = SESSION_MAX_AGE if session_max_age_seconds is None else session_max_age_seconds

    async def sweep_stale_sessions():
        while True:
            await asyncio.sleep(cleanup_interval)
            for session_id in api_service.cleanup_stale_sessions(max_age):
                ws_connections.pop(session_id, None)

    @asynccontextmanager
    async def lifespan(app):
        sweeper = asyncio.create_task(sweep_stale_sessions())
        try:
            yield
        finally:
            sweeper.cancel()
            api_service.session_manager.close_all()

    app = FastAPI(
        title="Waste Sort API",
        description="""
Timed waste-sorting game engine.

## Game Flow

1. `POST /api/v1/sessions` starts a session; the clock runs immediately
2. Open the WebSocket to receive `items_changed`, `score_changed`,
   `round_resolved`, `time_changed` and `session_ended`
3. `POST /select` then `POST /drop` for every item
4. `POST /restart` to play again

## Error Codes

| Code | Description |
|------|-------------|
| `SESSION_NOT_FOUND` | Session does not exist |
| `INVALID_CONFIG` | Session configuration was rejected |
| `VALIDATION_ERROR` | Request is malformed |
| `INTERNAL_ERROR` | Unexpected server failure |
        """,
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        lifespan=lifespan,
    )

    # CORS for the game client
    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # WebSocket connections
    ws_connections: dict[str, list[WebSocket]] = {}
    pending_sends: set[asyncio.Task] = set()

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Optional[dict] = None,
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

    def not_found(response: ErrorResponse) -> JSONResponse:
        return make_error_response(response.error_code, response.error, status_code=404)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return make_error_response(
            ErrorCode.VALIDATION_ERROR,
            "Request validation failed",
            status_code=422,
            details={"errors": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(Exception)
    async def internal_error_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return make_error_response(
            ErrorCode.INTERNAL_ERROR,
            "Internal server error",
            status_code=500,
        )

    async def broadcast_to_session(session_id: str, message: dict):
        """Broadcast a message to all WebSocket connections for a session."""
        if session_id in ws_connections:
            dead_connections = []
            for ws in list(ws_connections[session_id]):
                try:
                    await ws.send_json(message)
                except Exception:
                    dead_connections.append(ws)
            for ws in dead_connections:
                if ws in ws_connections[session_id]:
                    ws_connections[session_id].remove(ws)

    def publish(session_id: str, message: dict) -> None:
        """Session notifications arrive synchronously; sends are scheduled."""
        if not ws_connections.get(session_id):
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug(f"No running loop, dropped {message['type']} for {session_id}")
            return
        task = loop.create_task(broadcast_to_session(session_id, message))
        pending_sends.add(task)
        task.add_done_callback(pending_sends.discard)

    if api_service.event_sink is None:
        api_service.event_sink = publish

    # =========================================================================
    # Session Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/sessions",
        response_model=SessionResponse,
        responses={
            400: {"model": ErrorResponse, "description": "Invalid configuration"},
        },
        tags=["Sessions"],
        summary="Create a new session",
    )
    async def create_session(
        request: CreateSessionRequest,
    ) -> Union[SessionResponse, JSONResponse]:
        """
        Create and start a session.

        Unset fields fall back to the server configuration. The clock and
        the spawn timers start immediately.
        """
        try:
            return api_service.create_session(request)
        except ConfigurationError as e:
            return make_error_response(
                ErrorCode.INVALID_CONFIG,
                str(e),
                details={"errors": e.errors},
            )

    @app.get(
        "/api/v1/sessions",
        response_model=SessionListResponse,
        tags=["Sessions"],
        summary="List sessions",
    )
    async def list_sessions() -> SessionListResponse:
        """List all session IDs."""
        sessions = api_service.list_sessions()
        return SessionListResponse(sessions=sessions, count=len(sessions))

    @app.get(
        "/api/v1/sessions/{session_id}",
        response_model=SessionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Sessions"],
        summary="Get session state",
    )
    async def get_session(session_id: str) -> Union[SessionResponse, JSONResponse]:
        """Get the current state of a session."""
        response = api_service.get_session(session_id)
        if isinstance(response, ErrorResponse):
            return not_found(response)
        return response

    @app.delete(
        "/api/v1/sessions/{session_id}",
        response_model=EndSessionResponse,
        tags=["Sessions"],
        summary="End a session",
    )
    async def end_session(
        session_id: str,
        reason: Annotated[str, Query(description="Reason for ending")] = "user_ended",
    ) -> EndSessionResponse:
        """End a session and cancel its timers."""
        success = api_service.end_session(session_id, reason)
        ws_connections.pop(session_id, None)
        return EndSessionResponse(success=success, session_id=session_id)

    # =========================================================================
    # Game Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/sessions/{session_id}/select",
        response_model=SelectItemResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Game"],
        summary="Select an item",
    )
    async def select_item(
        session_id: str, request: SelectItemRequest
    ) -> Union[SelectItemResponse, JSONResponse]:
        """
        Select an item in play.

        `selected=false` means the item is not in play or the session
        has ended.
        """
        response = api_service.select_item(session_id, request)
        if isinstance(response, ErrorResponse):
            return not_found(response)
        return response

    @app.post(
        "/api/v1/sessions/{session_id}/drop",
        response_model=DropResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Game"],
        summary="Drop the selected item on a bin",
    )
    async def drop(session_id: str, request: DropRequest) -> Union[DropResponse, JSONResponse]:
        """
        Drop the selected item on a bin.

        `resolved=false` means the drop was ignored (nothing selected,
        bin not in this session, session ended).
        """
        response = api_service.drop(session_id, request)
        if isinstance(response, ErrorResponse):
            return not_found(response)
        return response

    @app.post(
        "/api/v1/sessions/{session_id}/restart",
        response_model=SessionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Game"],
        summary="Restart the session",
    )
    async def restart(session_id: str) -> Union[SessionResponse, JSONResponse]:
        """Restart with the same configuration. Valid at any time."""
        response = api_service.restart(session_id)
        if isinstance(response, ErrorResponse):
            return not_found(response)
        return response

    @app.get(
        "/api/v1/sessions/{session_id}/bins",
        response_model=BinListResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Game"],
        summary="Bins of a session",
    )
    async def session_bins(session_id: str) -> Union[BinListResponse, JSONResponse]:
        response = api_service.list_bins(session_id)
        if isinstance(response, ErrorResponse):
            return not_found(response)
        return response

    @app.get(
        "/api/v1/bins",
        response_model=BinListResponse,
        tags=["Game"],
        summary="Default bins",
    )
    async def default_bins() -> BinListResponse:
        return api_service.list_bins()

    # =========================================================================
    # WebSocket Endpoint
    # =========================================================================

    @app.websocket("/api/v1/sessions/{session_id}/ws")
    async def websocket_endpoint(websocket: WebSocket, session_id: str):
        """
        WebSocket for session notifications.

        Messages from server:
        - session_state: Full state, sent on connect
        - items_changed: Items in play changed
        - score_changed: Score or counters changed
        - round_resolved: A drop was resolved
        - time_changed: Clock ticked
        - session_ended: Time ran out
        - error: Error occurred

        Messages from client:
        - ping: Keep-alive
        """
        await websocket.accept()

        response = api_service.get_session(session_id)
        if isinstance(response, ErrorResponse):
            await websocket.send_json({
                "type": "error",
                "payload": response.model_dump(mode="json"),
            })
            await websocket.close()
            return

        ws_connections.setdefault(session_id, []).append(websocket)

        try:
            await websocket.send_json({
                "type": "session_state",
                "payload": response.model_dump(mode="json"),
            })

            # Listen for messages
            while True:
                data = await websocket.receive_text()
                try:
                    message = json.loads(data)
                    if message.get("type") == "ping":
                        await websocket.send_json({"type": "pong"})
                except json.JSONDecodeError:
                    await websocket.send_json({
                        "type": "error",
                        "payload": {"message": "Invalid JSON"},
                    })

        except WebSocketDisconnect:
            logger.debug(f"WebSocket closed for session {session_id}")
        finally:
            if websocket in ws_connections.get(session_id, []):
                ws_connections[session_id].remove(websocket)

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
            service="wastesort-engine",
            version=__version__,
        )

    @app.get("/", tags=["System"])
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "Waste Sort API",
            "version": __version__,
            "environment": WASTESORT_ENV,
            "docs": "/api/docs",
            "health": "/health",
        }

    return app


# Default app instance for uvicorn
app = create_app()
