"""
Session Module - Runs timed sorting sessions.

A session is one play-through:
- Created when the player starts a game
- Spawns items, resolves drops, counts down
- Ends when the clock reaches zero
- Restartable from any phase

Sessions are EPHEMERAL: in memory only, results go out via listeners.
"""

from .config import SessionConfig, SpawnMode
from .scheduler import Scheduler, ScheduledTask, ManualScheduler, AsyncioScheduler
from .clock import SessionClock
from .spawn import SpawnPolicy, SingleSlotPolicy, PoolPolicy, create_spawn_policy
from .controller import SessionController, SessionListener, SessionSnapshot, RoundResult
from .manager import SessionManager, Session
from .game_loop import GameLoop, GameSummary

__all__ = [
    "SessionConfig",
    "SpawnMode",
    "Scheduler",
    "ScheduledTask",
    "ManualScheduler",
    "AsyncioScheduler",
    "SessionClock",
    "SpawnPolicy",
    "SingleSlotPolicy",
    "PoolPolicy",
    "create_spawn_policy",
    "SessionController",
    "SessionListener",
    "SessionSnapshot",
    "RoundResult",
    "SessionManager",
    "Session",
    "GameLoop",
    "GameSummary",
]
