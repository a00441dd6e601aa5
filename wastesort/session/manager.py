"""
Session Manager - Creates and tracks in-memory sessions.

Sessions are EPHEMERAL:
- No persistence to database
- A session lives until it is ended or goes stale
- Ending a session cancels its timers before it is dropped

Results are reported through listeners; storing them is the host's job.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, Iterable
import logging
import time
import uuid

from .config import SessionConfig
from .controller import SessionController, SessionListener
from .scheduler import ManualScheduler, Scheduler

logger = logging.getLogger(__name__)


@dataclass
class Session:
    """
    A managed session.

    Wraps the controller with an id and bookkeeping for the manager.
    """
    session_id: str
    controller: SessionController
    created_at: float
    player_name: str = "Player"

    @property
    def is_active(self) -> bool:
        return self.controller.is_active


class SessionManager:
    """
    Manages game sessions.

    Responsibilities:
    - Create and start sessions
    - Look them up by id
    - Tear them down (cancel timers) when they end

    scheduler_factory is called once per session; the default gives every
    session its own ManualScheduler.
    """

    def __init__(self, scheduler_factory: Callable[[], Scheduler] | None = None):
        self.scheduler_factory = scheduler_factory or ManualScheduler
        self._sessions: dict[str, Session] = {}

    def create_session(
        self,
        config: SessionConfig | None = None,
        listeners: Iterable[SessionListener] = (),
        player_name: str = "Player",
        session_id: str | None = None,
    ) -> Session:
        """
        Create and start a new session.

        Raises ConfigurationError before anything is registered if the
        config is invalid.
        """
        config = config or SessionConfig()
        config.validate()

        session_id = session_id or str(uuid.uuid4())
        controller = SessionController(
            config=config,
            scheduler=self.scheduler_factory(),
            listeners=listeners,
        )
        session = Session(
            session_id=session_id,
            controller=controller,
            created_at=time.time(),
            player_name=player_name,
        )
        self._sessions[session_id] = session
        controller.start()
        logger.info(f"Created session {session_id} ({config.mode.value})")
        return session

    def get_session(self, session_id: str) -> Session | None:
        return self._sessions.get(session_id)

    def end_session(self, session_id: str, reason: str = "completed") -> bool:
        """
        End a session and release it.

        Timers are cancelled before the session is dropped, so no callback
        can touch it afterwards.
        """
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        session.controller.close()
        logger.info(f"Ended session {session_id} ({reason})")
        return True

    def list_sessions(self) -> list[str]:
        return list(self._sessions)

    def list_active_sessions(self) -> list[str]:
        return [sid for sid, session in self._sessions.items() if session.is_active]

    def cleanup_stale_sessions(self, max_age_seconds: int = 3600) -> list[str]:
        """
        End finished sessions older than max_age_seconds.

        Called periodically to free memory.
        """
        current_time = time.time()
        stale = [
            sid for sid, session in self._sessions.items()
            if current_time - session.created_at > max_age_seconds and not session.is_active
        ]
        for session_id in stale:
            self.end_session(session_id, reason="stale")
        return stale

    def close_all(self) -> None:
        for session_id in list(self._sessions):
            self.end_session(session_id, reason="shutdown")
