"""
Spawn Policy - Decides when new items enter play.

Two strategies behind one interface:
- SingleSlotPolicy: exactly one item in play, replaced right after it is sorted
- PoolPolicy: up to N items in play, topped up on an interval and replaced
  after a short delay when sorted

Policies never create items themselves. They ask the controller to spawn,
and the controller drops the request once the session has ended.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from functools import partial
from typing import TYPE_CHECKING
import itertools
import logging

from .scheduler import Scheduler, ScheduledTask
from .config import SessionConfig, SpawnMode

if TYPE_CHECKING:
    from .controller import SessionController

logger = logging.getLogger(__name__)


class SpawnPolicy(ABC):
    """
    Abstract spawn policy.

    A policy instance lives for one session run. restart() cancels the
    old instance and creates a new one, so a cancelled policy never
    spawns again.
    """

    def __init__(self, controller: SessionController, scheduler: Scheduler):
        self.controller = controller
        self.scheduler = scheduler
        self._cancelled = False

    @abstractmethod
    def start(self) -> None:
        """Initial spawn at session start."""
        pass

    @abstractmethod
    def on_round_resolved(self) -> None:
        """Replacement path, called after every resolved round."""
        pass

    def cancel(self) -> None:
        """Cancel pending timers. The policy is inert afterwards."""
        self._cancelled = True

    @property
    def active(self) -> bool:
        return not self._cancelled and self.controller.is_active

    def get_name(self) -> str:
        return self.__class__.__name__


class SingleSlotPolicy(SpawnPolicy):
    """One item at a time."""

    def start(self) -> None:
        if self.active:
            self.controller.spawn_items(1)

    def on_round_resolved(self) -> None:
        if self.active and self.controller.in_play_count == 0:
            self.controller.spawn_items(1)


class PoolPolicy(SpawnPolicy):
    """
    Several items in play at once.

    - start: spawn the initial batch and arm the refill timer
    - every refill interval: if fewer than low_water_mark items are in
      play, spawn up to batch_size more (never above capacity)
    - after each resolution: spawn one replacement after a short delay
    """

    def __init__(
        self,
        controller: SessionController,
        scheduler: Scheduler,
        capacity: int,
        low_water_mark: int,
        batch_size: int,
        interval_seconds: float,
        initial_size: int,
        replacement_delay_seconds: float,
    ):
        super().__init__(controller, scheduler)
        self.capacity = capacity
        self.low_water_mark = low_water_mark
        self.batch_size = batch_size
        self.interval_seconds = interval_seconds
        self.initial_size = initial_size
        self.replacement_delay_seconds = replacement_delay_seconds

        self._refill_task: ScheduledTask | None = None
        self._replacements: dict[int, ScheduledTask] = {}
        self._tokens = itertools.count()

    @property
    def free_slots(self) -> int:
        return max(0, self.capacity - self.controller.in_play_count)

    @property
    def pending_replacements(self) -> int:
        return len(self._replacements)

    def start(self) -> None:
        if not self.active:
            return
        self.controller.spawn_items(min(self.initial_size, self.free_slots))
        self._arm_refill()

    def on_round_resolved(self) -> None:
        if not self.active:
            return
        token = next(self._tokens)
        self._replacements[token] = self.scheduler.call_later(
            self.replacement_delay_seconds, partial(self._replace, token)
        )

    def cancel(self) -> None:
        super().cancel()
        if self._refill_task is not None:
            self._refill_task.cancel()
            self._refill_task = None
        for task in self._replacements.values():
            task.cancel()
        self._replacements.clear()

    def _arm_refill(self) -> None:
        self._refill_task = self.scheduler.call_later(self.interval_seconds, self._refill)

    def _refill(self) -> None:
        self._refill_task = None
        if not self.active:
            return
        in_play = self.controller.in_play_count
        if in_play < self.low_water_mark:
            count = min(self.batch_size, self.free_slots)
            logger.debug(f"Pool refill: {in_play} in play, spawning {count}")
            self.controller.spawn_items(count)
        self._arm_refill()

    def _replace(self, token: int) -> None:
        self._replacements.pop(token, None)
        if self.active and self.free_slots > 0:
            self.controller.spawn_items(1)


def create_spawn_policy(
    config: SessionConfig,
    controller: SessionController,
    scheduler: Scheduler,
) -> SpawnPolicy:
    """Build the spawn policy selected by config.mode."""
    if config.mode == SpawnMode.POOL:
        return PoolPolicy(
            controller,
            scheduler,
            capacity=config.pool_capacity,
            low_water_mark=config.pool_low_water_mark,
            batch_size=config.refill_batch_size,
            interval_seconds=config.refill_interval_seconds,
            initial_size=config.initial_pool_size,
            replacement_delay_seconds=config.replacement_delay_seconds,
        )
    return SingleSlotPolicy(controller, scheduler)
