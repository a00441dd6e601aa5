"""
API Module - Game client interface.

Exposes the engine via REST and WebSocket.
The client:
1. Creates a session (the clock starts right away)
2. Listens for notifications on the WebSocket
3. Selects items and drops them on bins
4. Restarts when time runs out

All state is session-scoped and in memory.
"""

from .schemas import (
    # Requests
    CreateSessionRequest,
    SelectItemRequest,
    DropRequest,
    # Responses
    SessionResponse,
    SelectItemResponse,
    DropResponse,
    BinListResponse,
    SessionListResponse,
    EndSessionResponse,
    ErrorResponse,
    HealthResponse,
    # Shared
    ItemInfo,
    BinInfo,
    RoundInfo,
    # Enums
    ErrorCode,
    EventType,
    SessionStatus,
    SpawnModeName,
)
from .service import APIService, EventForwarder
from .app import create_app

__all__ = [
    # Requests
    "CreateSessionRequest",
    "SelectItemRequest",
    "DropRequest",
    # Responses
    "SessionResponse",
    "SelectItemResponse",
    "DropResponse",
    "BinListResponse",
    "SessionListResponse",
    "EndSessionResponse",
    "ErrorResponse",
    "HealthResponse",
    # Shared
    "ItemInfo",
    "BinInfo",
    "RoundInfo",
    # Enums
    "ErrorCode",
    "EventType",
    "SessionStatus",
    "SpawnModeName",
    # Service
    "APIService",
    "EventForwarder",
    "create_app",
]
