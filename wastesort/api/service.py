"""
API Service - Business logic layer between API and engine.

The service:
1. Translates API requests to engine calls
2. Manages sessions
3. Forwards session notifications to an event sink (WebSocket push)
4. Formats responses for the game client

This layer is framework-agnostic (can be used with FastAPI, Flask, etc.)
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Callable, Optional
import logging
import uuid

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
    ErrorResponse,
    # Shared
    ItemInfo,
    BinInfo,
    RoundInfo,
    # Enums
    SessionStatus,
    SpawnModeName,
    ErrorCode,
    EventType,
)
from ..engine_core.state import Bin, Item
from ..session import (
    Session,
    SessionConfig,
    SessionListener,
    SessionManager,
    RoundResult,
)

logger = logging.getLogger(__name__)

EventSink = Callable[[str, dict[str, Any]], None]


class EventForwarder(SessionListener):
    """
    Turns session notifications into JSON-ready messages.

    Each message is {"type": ..., "payload": {...}} and is handed to the
    sink together with the session id.
    """

    def __init__(self, session_id: str, sink: EventSink):
        self.session_id = session_id
        self.sink = sink

    def _send(self, event_type: EventType, payload: dict[str, Any]) -> None:
        self.sink(self.session_id, {"type": event_type.value, "payload": payload})

    def on_items_changed(self, items: list[Item]) -> None:
        self._send(EventType.ITEMS_CHANGED, {
            "items": [item_to_info(item).model_dump(mode="json") for item in items],
        })

    def on_score_changed(self, score: int, correct_count: int, incorrect_count: int) -> None:
        self._send(EventType.SCORE_CHANGED, {
            "score": score,
            "correct_count": correct_count,
            "incorrect_count": incorrect_count,
        })

    def on_round_resolved(self, item_id: int, correct: bool, points_awarded: int) -> None:
        self._send(EventType.ROUND_RESOLVED, {
            "item_id": item_id,
            "correct": correct,
            "points_awarded": points_awarded,
        })

    def on_time_changed(self, time_remaining_seconds: int) -> None:
        self._send(EventType.TIME_CHANGED, {"time_remaining_seconds": time_remaining_seconds})

    def on_session_ended(self, final_score: int, correct_count: int, incorrect_count: int) -> None:
        self._send(EventType.SESSION_ENDED, {
            "final_score": final_score,
            "correct_count": correct_count,
            "incorrect_count": incorrect_count,
        })


def item_to_info(item: Item) -> ItemInfo:
    resolution = item.resolution
    return ItemInfo(
        item_id=item.item_id,
        category=item.category.value,
        name=item.name,
        state=item.state.value,
        placed_in=resolution.bin_type.value if resolution else None,
        is_correct=resolution.correct if resolution else None,
    )


def bin_to_info(bin_: Bin) -> BinInfo:
    return BinInfo(
        bin_type=bin_.bin_type,
        label=bin_.label,
        description=bin_.description,
        accepted_categories=sorted(bin_.accepted_categories, key=lambda c: c.value),
    )


def info_to_bin(info: BinInfo) -> Bin:
    return Bin(
        bin_type=info.bin_type,
        accepted_categories=frozenset(info.accepted_categories),
        label=info.label,
        description=info.description,
    )


def round_to_info(result: RoundResult) -> RoundInfo:
    return RoundInfo(
        item_id=result.item_id,
        item_name=result.item_name,
        category=result.category.value,
        bin_type=result.bin_type.value,
        correct=result.correct,
        points_awarded=result.points_awarded,
        message=result.message,
    )


@dataclass
class APIService:
    """
    Main API service for the game client.

    Usage:
        service = APIService()

        # Create session
        response = service.create_session(CreateSessionRequest(mode="pool"))

        # Play
        service.select_item(response.session_id, SelectItemRequest(item_id=1))
        drop = service.drop(response.session_id, DropRequest(bin_type="recycling"))

    Errors are returned as ErrorResponse, except invalid configurations,
    which raise ConfigurationError from create_session.
    """
    session_manager: SessionManager = field(default_factory=SessionManager)
    base_config: SessionConfig = field(default_factory=SessionConfig.from_env)
    event_sink: Optional[EventSink] = None

    def _publish(self, session_id: str, message: dict[str, Any]) -> None:
        if self.event_sink is not None:
            self.event_sink(session_id, message)

    def build_config(self, request: CreateSessionRequest) -> SessionConfig:
        """Overlay the request on the base config. Not validated here."""
        overrides: dict[str, Any] = {
            "mode": request.mode.value,
            "session_duration_seconds": request.session_duration_seconds,
            "pool_capacity": request.pool_capacity,
            "pool_low_water_mark": request.pool_low_water_mark,
            "refill_batch_size": request.refill_batch_size,
            "refill_interval_seconds": request.refill_interval_seconds,
            "initial_pool_size": request.initial_pool_size,
            "replacement_delay_seconds": request.replacement_delay_seconds,
            "points_per_correct": request.points_per_correct,
            "random_seed": request.random_seed,
        }
        if request.categories is not None:
            overrides["categories"] = frozenset(request.categories)
        if request.bins is not None:
            overrides["bins"] = tuple(info_to_bin(b) for b in request.bins)
        return self.base_config.with_overrides(**overrides)

    def create_session(self, request: CreateSessionRequest) -> SessionResponse:
        """
        Create and start a session.

        Raises ConfigurationError if the resulting config is invalid.
        """
        config = self.build_config(request)
        session_id = str(uuid.uuid4())
        listener = EventForwarder(session_id, self._publish)
        session = self.session_manager.create_session(
            config=config,
            listeners=[listener],
            player_name=request.player_name,
            session_id=session_id,
        )
        return self._session_response(session)

    def get_session(self, session_id: str) -> SessionResponse | ErrorResponse:
        session = self.session_manager.get_session(session_id)
        if session is None:
            return self._not_found(session_id)
        return self._session_response(session)

    def end_session(self, session_id: str, reason: str = "user_ended") -> bool:
        return self.session_manager.end_session(session_id, reason)

    def list_sessions(self) -> list[str]:
        return self.session_manager.list_sessions()

    def cleanup_stale_sessions(self, max_age_seconds: int = 3600) -> list[str]:
        """Drop ended sessions older than max_age_seconds. Returns their ids."""
        stale = self.session_manager.cleanup_stale_sessions(max_age_seconds)
        if stale:
            logger.info(f"Cleaned up {len(stale)} stale session(s)")
        return stale

    def select_item(
        self, session_id: str, request: SelectItemRequest
    ) -> SelectItemResponse | ErrorResponse:
        session = self.session_manager.get_session(session_id)
        if session is None:
            return self._not_found(session_id)

        selected = session.controller.select_item(request.item_id)
        return SelectItemResponse(
            session_id=session_id,
            selected=selected,
            selected_item_id=session.controller.selected_item_id,
        )

    def drop(self, session_id: str, request: DropRequest) -> DropResponse | ErrorResponse:
        """
        Drop the selected item on a bin.

        An ignored drop is not an error: resolved is false and the session
        is returned unchanged.
        """
        session = self.session_manager.get_session(session_id)
        if session is None:
            return self._not_found(session_id)

        result = session.controller.drop_on_bin(request.bin_type)
        return DropResponse(
            session_id=session_id,
            resolved=result is not None,
            round=round_to_info(result) if result else None,
            session=self._session_response(session),
        )

    def restart(self, session_id: str) -> SessionResponse | ErrorResponse:
        session = self.session_manager.get_session(session_id)
        if session is None:
            return self._not_found(session_id)
        session.controller.restart()
        logger.info(f"Restarted session {session_id}")
        return self._session_response(session)

    def list_bins(self, session_id: str | None = None) -> BinListResponse | ErrorResponse:
        """Bins of a session, or the configured defaults without one."""
        if session_id is None:
            bins = list(self.base_config.bins)
        else:
            session = self.session_manager.get_session(session_id)
            if session is None:
                return self._not_found(session_id)
            bins = session.controller.bins
        return BinListResponse(bins=[bin_to_info(b) for b in bins])

    # =========================================================================
    # Helpers
    # =========================================================================

    def _not_found(self, session_id: str) -> ErrorResponse:
        return ErrorResponse(
            error=f"Session {session_id} not found",
            error_code=ErrorCode.SESSION_NOT_FOUND,
        )

    def _session_response(self, session: Session) -> SessionResponse:
        controller = session.controller
        snapshot = controller.snapshot()
        return SessionResponse(
            session_id=session.session_id,
            status=SessionStatus.ACTIVE if session.is_active else SessionStatus.ENDED,
            mode=SpawnModeName(controller.config.mode.value),
            player_name=session.player_name,
            score=snapshot.score,
            time_remaining_seconds=snapshot.time_remaining_seconds,
            correct_count=snapshot.correct_count,
            incorrect_count=snapshot.incorrect_count,
            items_spawned_total=snapshot.items_spawned_total,
            accuracy=snapshot.accuracy,
            selected_item_id=snapshot.selected_item_id,
            items=[item_to_info(item) for item in snapshot.items],
            created_at=session.created_at,
        )
