"""
Session Controller - The session state machine exposed to the host.

The controller orchestrates:
- SessionClock (countdown, end of session)
- SpawnPolicy (single-slot or pool replenishment)
- CategorySelector + ItemRegistry (item creation)
- ResolutionEngine (round verdicts)

Inbound calls from the host:
    start(config), select_item(id), drop_on_bin(bin_type), tick(),
    restart(), close()

Outbound notifications go to SessionListener instances:
    on_items_changed, on_score_changed, on_round_resolved,
    on_time_changed, on_session_ended

All entry points are expected to be called one at a time (a single event
loop or a lock in the host). Every mutation is computed first and applied
as a whole; rejected events are silent no-ops.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from functools import partial
from typing import Iterable
import logging
import random

from ..engine_core.state import (
    Bin,
    BinType,
    Category,
    Item,
    SessionPhase,
    SessionState,
)
from ..engine_core.errors import NotSelected
from ..engine_core.registry import ItemRegistry
from ..engine_core.rules import BinRuleTable
from ..engine_core.selector import CategorySelector
from ..engine_core.resolution import ResolutionEngine
from ..games.recycling.items import pick_item_name
from .clock import SessionClock
from .config import SessionConfig
from .scheduler import ManualScheduler, Scheduler
from .spawn import SpawnPolicy, create_spawn_policy

logger = logging.getLogger(__name__)


class SessionListener:
    """
    Receiver of session notifications.

    Every method is a no-op here; hosts override the ones they need.
    Items passed to on_items_changed are copies.
    """

    def on_items_changed(self, items: list[Item]) -> None:
        pass

    def on_score_changed(self, score: int, correct_count: int, incorrect_count: int) -> None:
        pass

    def on_round_resolved(self, item_id: int, correct: bool, points_awarded: int) -> None:
        pass

    def on_time_changed(self, time_remaining_seconds: int) -> None:
        pass

    def on_session_ended(self, final_score: int, correct_count: int, incorrect_count: int) -> None:
        pass


@dataclass(frozen=True)
class RoundResult:
    """Outcome of one drop, as reported to the caller."""
    item_id: int
    item_name: str
    category: Category
    bin_type: BinType
    correct: bool
    points_awarded: int
    message: str


@dataclass
class SessionSnapshot:
    """Read-only copy of the session for display."""
    phase: SessionPhase
    score: int
    time_remaining_seconds: int
    correct_count: int
    incorrect_count: int
    items_spawned_total: int
    accuracy: int
    selected_item_id: int | None
    items: list[Item] = field(default_factory=list)

    @property
    def is_active(self) -> bool:
        return self.phase == SessionPhase.ACTIVE


class SessionController:
    """
    Runs one sorting session at a time.

    Usage:
        scheduler = ManualScheduler()
        controller = SessionController(config, scheduler=scheduler)
        controller.start()

        item = controller.in_play_items[0]
        controller.select_item(item.item_id)
        result = controller.drop_on_bin(BinType.RECYCLING)

        scheduler.advance(60)  # clock runs out, on_session_ended fires
        controller.restart()
    """

    def __init__(
        self,
        config: SessionConfig | None = None,
        scheduler: Scheduler | None = None,
        listeners: Iterable[SessionListener] = (),
    ):
        self._config = config or SessionConfig()
        self.scheduler = scheduler or ManualScheduler()
        self._listeners: list[SessionListener] = list(listeners)

        self._session: SessionState | None = None
        self._registry: ItemRegistry | None = None
        self._rules: BinRuleTable | None = None
        self._resolver: ResolutionEngine | None = None
        self._selector: CategorySelector | None = None
        self._clock: SessionClock | None = None
        self._spawn_policy: SpawnPolicy | None = None
        self._rng = random.Random()
        self._selected_id: int | None = None
        self._epoch = 0
        self._closed = False

    # =========================================================================
    # Listeners
    # =========================================================================

    def add_listener(self, listener: SessionListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: SessionListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _emit(self, event: str, *args) -> None:
        for listener in list(self._listeners):
            getattr(listener, event)(*args)

    # =========================================================================
    # Read side
    # =========================================================================

    @property
    def config(self) -> SessionConfig:
        return self._config

    @property
    def session(self) -> SessionState | None:
        return self._session

    @property
    def started(self) -> bool:
        return self._session is not None

    @property
    def is_active(self) -> bool:
        return (
            self._session is not None
            and not self._closed
            and self._session.phase == SessionPhase.ACTIVE
        )

    @property
    def in_play_count(self) -> int:
        return self._registry.in_play_count if self._registry else 0

    @property
    def in_play_items(self) -> list[Item]:
        return self._registry.in_play() if self._registry else []

    @property
    def selected_item_id(self) -> int | None:
        return self._selected_id

    @property
    def bins(self) -> list[Bin]:
        return self._rules.bins if self._rules else list(self._config.bins)

    @property
    def spawn_policy(self) -> SpawnPolicy | None:
        return self._spawn_policy

    @property
    def registry(self) -> ItemRegistry | None:
        return self._registry

    def get_item(self, item_id: int) -> Item | None:
        return self._registry.get(item_id) if self._registry else None

    def snapshot(self) -> SessionSnapshot:
        """Copy of the current state. Before start, a zeroed ACTIVE snapshot."""
        session = self._session or SessionState(
            time_remaining_seconds=self._config.session_duration_seconds
        )
        return SessionSnapshot(
            phase=session.phase,
            score=session.score,
            time_remaining_seconds=session.time_remaining_seconds,
            correct_count=session.correct_count,
            incorrect_count=session.incorrect_count,
            items_spawned_total=session.items_spawned_total,
            accuracy=session.accuracy,
            selected_item_id=self._selected_id,
            items=self._item_copies(),
        )

    def _item_copies(self) -> list[Item]:
        return [replace(item) for item in self.in_play_items]

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def start(self, config: SessionConfig | None = None) -> SessionSnapshot:
        """
        Start a session.

        Validates the config first (ConfigurationError leaves the current
        session untouched), then resets everything, arms the clock and runs
        the initial spawn. Calling start on a running session restarts it.
        """
        config = config or self._config
        rule_table = config.validate()

        # Build the new run completely before touching the current one
        rng = random.Random(config.random_seed)
        resolver = ResolutionEngine(rule_table, config.points_per_correct)
        selector = CategorySelector(config.categories, rng)
        registry = ItemRegistry(
            history_limit=config.resolved_history_limit if config.is_pool else 0
        )

        self._cancel_timers()
        self._config = config
        self._epoch += 1
        self._closed = False

        self._rng = rng
        self._rules = rule_table
        self._resolver = resolver
        self._selector = selector
        self._registry = registry
        self._session = SessionState(time_remaining_seconds=config.session_duration_seconds)
        self._selected_id = None

        self._clock = SessionClock(
            self._session,
            self.scheduler,
            on_fire=partial(self._on_clock_fire, self._epoch),
        )
        self._spawn_policy = create_spawn_policy(config, self, self.scheduler)

        logger.info(
            f"Session started: mode={config.mode.value} "
            f"duration={config.session_duration_seconds}s "
            f"categories={len(config.categories)} bins={len(rule_table.bins)}"
        )

        self._emit("on_score_changed", 0, 0, 0)
        self._emit("on_time_changed", self._session.time_remaining_seconds)
        self._clock.arm()
        self._spawn_policy.start()
        return self.snapshot()

    def restart(self) -> SessionSnapshot:
        """Reset to start values with the current config. Valid from any phase."""
        logger.info("Session restart")
        return self.start(self._config)

    def close(self) -> None:
        """Tear down: cancel every timer. Only start/restart act afterwards."""
        self._cancel_timers()
        self._closed = True
        self._epoch += 1

    def _cancel_timers(self) -> None:
        if self._clock is not None:
            self._clock.cancel()
        if self._spawn_policy is not None:
            self._spawn_policy.cancel()

    # =========================================================================
    # Spawning (called by the spawn policy)
    # =========================================================================

    def spawn_items(self, count: int) -> list[Item]:
        """
        Spawn up to count items.

        Dropped silently once the session has ended or been closed.
        """
        if not self.is_active or count <= 0:
            return []

        spawned = []
        for _ in range(count):
            category = self._selector.next(excluding=self._session.last_spawned_category)
            name = pick_item_name(category, self._rng)
            item = self._registry.spawn(category, name)
            self._session.items_spawned_total += 1
            self._session.last_spawned_category = category
            spawned.append(item)
            logger.debug(f"Spawned item {item.item_id}: {item.name} ({category.value})")

        self._emit("on_items_changed", self._item_copies())
        return spawned

    # =========================================================================
    # Player events
    # =========================================================================

    def select_item(self, item_id: int) -> bool:
        """
        Select an in-play item.

        Selecting another item deselects the previous one. Returns False
        (no-op) if the item is not in play or the session is not active.
        """
        if not self.is_active or not self._registry.is_in_play(item_id):
            logger.debug(f"Ignored selection of item {item_id}")
            return False
        if self._selected_id == item_id:
            return True

        previous = self._selected_id
        if previous is not None and self._registry.is_in_play(previous):
            self._registry.deselect(previous)
        self._registry.mark_selected(item_id)
        self._selected_id = item_id
        return True

    def drop_on_bin(self, bin_type: BinType | str) -> RoundResult | None:
        """
        Drop the selected item on a bin.

        Resolves the round against the item selected at call time, applies
        the score, removes the item from play and triggers the replacement.
        Returns None (no-op) when nothing is selected, the bin is unknown or
        the session is not active.
        """
        if not self.is_active:
            return None
        if self._selected_id is None:
            logger.debug("Ignored drop: no item selected")
            return None
        try:
            bin_type = BinType(bin_type)
        except ValueError:
            logger.debug(f"Ignored drop on unknown bin {bin_type!r}")
            return None
        if not self._rules.has_bin(bin_type):
            logger.debug(f"Ignored drop on unconfigured bin {bin_type.value}")
            return None

        item = self._registry.get(self._selected_id)
        try:
            outcome = self._resolver.resolve(item, bin_type)
        except NotSelected:
            self._selected_id = None
            return None

        result = RoundResult(
            item_id=item.item_id,
            item_name=item.name,
            category=item.category,
            bin_type=bin_type,
            correct=outcome.correct,
            points_awarded=outcome.points_awarded,
            message=self._resolver.feedback(item, bin_type, outcome),
        )

        self._registry.mark_resolved(item.item_id, bin_type, outcome.correct)
        self._registry.remove_from_play(item.item_id)
        self._session.score += outcome.points_awarded
        if outcome.correct:
            self._session.correct_count += 1
        else:
            self._session.incorrect_count += 1
        self._selected_id = None

        logger.debug(
            f"Round {item.item_id}: {item.category.value} -> {bin_type.value} "
            f"correct={outcome.correct} score={self._session.score}"
        )

        session = self._session
        self._emit("on_round_resolved", result.item_id, result.correct, result.points_awarded)
        self._emit("on_score_changed", session.score, session.correct_count, session.incorrect_count)
        self._emit("on_items_changed", self._item_copies())

        self._spawn_policy.on_round_resolved()
        return result

    # =========================================================================
    # Clock
    # =========================================================================

    def tick(self) -> None:
        """
        Count down one second.

        Any pending scheduled tick is replaced, so a manual tick never
        leaves two timers armed. On the last second the session ends.
        """
        if not self.is_active:
            return
        self._clock.cancel()
        ended = self._clock.tick()
        self._emit("on_time_changed", self._session.time_remaining_seconds)
        if ended:
            self._end_session()
        else:
            self._clock.arm()

    def _on_clock_fire(self, epoch: int) -> None:
        if epoch != self._epoch:
            return
        self.tick()

    def _end_session(self) -> None:
        self._cancel_timers()
        if self._selected_id is not None and self._registry.is_in_play(self._selected_id):
            self._registry.deselect(self._selected_id)
        self._selected_id = None

        session = self._session
        logger.info(
            f"Session ended: score={session.score} correct={session.correct_count} "
            f"incorrect={session.incorrect_count} accuracy={session.accuracy}%"
        )
        self._emit("on_session_ended", session.score, session.correct_count, session.incorrect_count)
