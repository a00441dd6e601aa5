"""
Game Loop - Plays a whole session with a bot in virtual time.

The loop:
1. Wait think_time seconds (timers fire: clock ticks, pool refills)
2. Ask the sorter for an (item, bin) decision
3. select_item + drop_on_bin on the controller
4. Repeat until the clock runs out

Used by the CLI simulator and the integration tests.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ..engine_core.state import SessionPhase
from .controller import RoundResult, SessionController
from .scheduler import ManualScheduler

if TYPE_CHECKING:
    from ..bots.policy import SorterPolicy


@dataclass
class GameSummary:
    """Result of a simulated session."""
    final_score: int
    correct_count: int
    incorrect_count: int
    items_spawned_total: int
    accuracy: int
    elapsed_seconds: float
    rounds: list[RoundResult] = field(default_factory=list)

    @property
    def rounds_played(self) -> int:
        return len(self.rounds)


class GameLoop:
    """
    Drives a controller with a sorter.

    Usage:
        scheduler = ManualScheduler()
        controller = SessionController(config, scheduler=scheduler)
        loop = GameLoop(controller, scheduler, AccurateSorter(rules))
        summary = loop.run()
    """

    def __init__(
        self,
        controller: SessionController,
        scheduler: ManualScheduler,
        sorter: SorterPolicy,
        think_time_seconds: float = 1.5,
    ):
        if think_time_seconds <= 0:
            raise ValueError("think_time_seconds must be > 0")
        if controller.scheduler is not scheduler:
            raise ValueError("GameLoop needs the scheduler the controller runs on")
        self.controller = controller
        self.scheduler = scheduler
        self.sorter = sorter
        self.think_time_seconds = think_time_seconds
        self.rounds: list[RoundResult] = []

    def step(self) -> RoundResult | None:
        """Think, then sort one item. Returns None if nothing was sorted."""
        self.scheduler.advance(self.think_time_seconds)
        if not self.controller.is_active:
            return None

        decision = self.sorter.decide(self.controller.in_play_items, self.controller.bins)
        if decision is None:
            return None
        if not self.controller.select_item(decision.item_id):
            return None
        result = self.controller.drop_on_bin(decision.bin_type)
        if result is not None:
            self.rounds.append(result)
        return result

    def run(self) -> GameSummary:
        """Play until the session ends (starting it first if needed)."""
        if not self.controller.started:
            self.controller.start()
        started_at = self.scheduler.time()

        while self.controller.is_active:
            self.step()

        session = self.controller.session
        return GameSummary(
            final_score=session.score,
            correct_count=session.correct_count,
            incorrect_count=session.incorrect_count,
            items_spawned_total=session.items_spawned_total,
            accuracy=session.accuracy,
            elapsed_seconds=self.scheduler.time() - started_at,
            rounds=list(self.rounds),
        )

    @property
    def ended(self) -> bool:
        session = self.controller.session
        return session is not None and session.phase == SessionPhase.ENDED
