"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the exact contract between the game client (the
renderer) and the engine.

Error Codes:
- SESSION_NOT_FOUND: Session does not exist or has been ended
- INVALID_CONFIG: Session configuration was rejected
- VALIDATION_ERROR: Request body is malformed
- INTERNAL_ERROR: Unexpected failure
"""

from enum import Enum
from typing import Optional, Any
from pydantic import BaseModel, Field

from ..engine_core.state import BinType, Category


# =============================================================================
# Enums
# =============================================================================

class SessionStatus(str, Enum):
    """Session status values."""
    ACTIVE = "active"
    ENDED = "ended"


class SpawnModeName(str, Enum):
    """Spawn modes accepted by the API."""
    SINGLE_SLOT = "single_slot"
    POOL = "pool"


class ErrorCode(str, Enum):
    """Structured error codes."""
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    INVALID_CONFIG = "INVALID_CONFIG"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class EventType(str, Enum):
    """WebSocket message types pushed by the server."""
    ITEMS_CHANGED = "items_changed"
    SCORE_CHANGED = "score_changed"
    ROUND_RESOLVED = "round_resolved"
    TIME_CHANGED = "time_changed"
    SESSION_ENDED = "session_ended"


# =============================================================================
# Shared Models
# =============================================================================

class ItemInfo(BaseModel):
    """An item in play, for display."""
    item_id: int
    category: str
    name: str
    state: str = Field(description="spawned, selected or resolved")
    placed_in: Optional[str] = None
    is_correct: Optional[bool] = None


class BinInfo(BaseModel):
    """A bin and the categories it accepts."""
    bin_type: BinType
    label: str = ""
    description: str = ""
    accepted_categories: list[Category] = Field(default_factory=list)


class RoundInfo(BaseModel):
    """Outcome of one drop."""
    item_id: int
    item_name: str
    category: str
    bin_type: str
    correct: bool
    points_awarded: int
    message: str


# =============================================================================
# Request Models
# =============================================================================

class CreateSessionRequest(BaseModel):
    """Request to create a new session. Unset fields use server defaults."""
    mode: SpawnModeName = Field(SpawnModeName.SINGLE_SLOT, description="single_slot or pool")
    player_name: str = Field("Player", description="Display name of the player")
    session_duration_seconds: Optional[int] = Field(None, ge=1, le=3600)
    pool_capacity: Optional[int] = Field(None, ge=1, le=100)
    pool_low_water_mark: Optional[int] = Field(None, ge=0, le=100)
    refill_batch_size: Optional[int] = Field(None, ge=1, le=100)
    refill_interval_seconds: Optional[float] = Field(None, gt=0)
    initial_pool_size: Optional[int] = Field(None, ge=1, le=100)
    replacement_delay_seconds: Optional[float] = Field(None, ge=0)
    categories: Optional[list[Category]] = Field(
        None, description="Categories to spawn (default: all)"
    )
    bins: Optional[list[BinInfo]] = Field(None, description="Custom bins (default: the four standard bins)")
    points_per_correct: Optional[int] = Field(None, ge=0)
    random_seed: Optional[int] = Field(None, description="Seed for reproducible sessions")


class SelectItemRequest(BaseModel):
    """Select an item in play."""
    item_id: int = Field(..., ge=1)


class DropRequest(BaseModel):
    """Drop the selected item on a bin."""
    bin_type: BinType


# =============================================================================
# Response Models
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str = Field(..., description="Human-readable error message")
    error_code: ErrorCode = Field(..., description="Machine-readable error code")
    details: Optional[dict[str, Any]] = Field(None, description="Additional error context")
    api_version: str = Field("v1", description="API version")


class SessionResponse(BaseModel):
    """Current state of a session."""
    session_id: str
    status: SessionStatus
    mode: SpawnModeName
    player_name: str = "Player"
    score: int = 0
    time_remaining_seconds: int = 0
    correct_count: int = 0
    incorrect_count: int = 0
    items_spawned_total: int = 0
    accuracy: int = Field(0, description="Correct drops in percent")
    selected_item_id: Optional[int] = None
    items: list[ItemInfo] = Field(default_factory=list)
    created_at: float = 0.0
    api_version: str = "v1"


class SelectItemResponse(BaseModel):
    """Response after a selection."""
    session_id: str
    selected: bool
    selected_item_id: Optional[int] = None
    api_version: str = "v1"


class DropResponse(BaseModel):
    """
    Response after a drop.

    resolved is false when the drop was ignored (nothing selected,
    session ended).
    """
    session_id: str
    resolved: bool
    round: Optional[RoundInfo] = None
    session: SessionResponse
    api_version: str = "v1"


class BinListResponse(BaseModel):
    """The bins of a session (or the defaults)."""
    bins: list[BinInfo]


class SessionListResponse(BaseModel):
    """Response listing sessions."""
    sessions: list[str]
    count: int


class EndSessionResponse(BaseModel):
    """Response after ending a session."""
    success: bool
    session_id: str


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    service: str
    version: str
