"""
Session Clock - Countdown that drives the session to its end.

State machine:
    ACTIVE --tick--> ACTIVE   while time_remaining > 1
    ACTIVE --tick--> ENDED    when the decrement reaches 0
    ENDED is terminal; a restart builds a new clock

Ticks are one-shot and re-armed: arm() schedules exactly one future tick,
and there is never more than one pending.
"""

from __future__ import annotations
from typing import Any, Callable
import logging

from ..engine_core.state import SessionPhase, SessionState
from .scheduler import Scheduler, ScheduledTask

logger = logging.getLogger(__name__)


class SessionClock:
    """
    Countdown over a SessionState.

    The clock owns time_remaining_seconds and the ACTIVE -> ENDED
    transition of the session it is bound to. When a scheduled tick fires
    it calls on_fire (the controller's tick entry point), which in turn
    calls tick() and re-arms.
    """

    def __init__(
        self,
        session: SessionState,
        scheduler: Scheduler,
        on_fire: Callable[[], Any],
        interval_seconds: float = 1.0,
    ):
        self.session = session
        self.scheduler = scheduler
        self.on_fire = on_fire
        self.interval_seconds = interval_seconds
        self._pending: ScheduledTask | None = None

    @property
    def is_armed(self) -> bool:
        return self._pending is not None and not self._pending.cancelled

    @property
    def ended(self) -> bool:
        return self.session.phase == SessionPhase.ENDED

    def arm(self) -> bool:
        """Schedule the next tick. Returns False if ended or already armed."""
        if self.ended or self.is_armed:
            return False
        self._pending = self.scheduler.call_later(self.interval_seconds, self._fire)
        return True

    def cancel(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def tick(self) -> bool:
        """
        Count down one second.

        Returns True exactly once: on the tick that ends the session.
        """
        if self.ended:
            return False
        self.session.time_remaining_seconds = max(0, self.session.time_remaining_seconds - 1)
        if self.session.time_remaining_seconds == 0:
            self.session.phase = SessionPhase.ENDED
            self.cancel()
            logger.debug("Clock expired")
            return True
        return False

    def _fire(self) -> None:
        self._pending = None
        self.on_fire()
