"""
Pytest fixtures for wastesort tests.
"""

import pytest

from ..engine_core.state import Category, Item
from ..engine_core.rules import BinRuleTable
from ..games.recycling import DEFAULT_BINS
from ..session import ManualScheduler, SessionConfig, SessionController, SessionListener


class RecordingListener(SessionListener):
    """Keeps every notification as an (event, args) tuple."""

    def __init__(self):
        self.events: list[tuple] = []

    def on_items_changed(self, items: list[Item]) -> None:
        self.events.append(("items_changed", items))

    def on_score_changed(self, score: int, correct_count: int, incorrect_count: int) -> None:
        self.events.append(("score_changed", score, correct_count, incorrect_count))

    def on_round_resolved(self, item_id: int, correct: bool, points_awarded: int) -> None:
        self.events.append(("round_resolved", item_id, correct, points_awarded))

    def on_time_changed(self, time_remaining_seconds: int) -> None:
        self.events.append(("time_changed", time_remaining_seconds))

    def on_session_ended(self, final_score: int, correct_count: int, incorrect_count: int) -> None:
        self.events.append(("session_ended", final_score, correct_count, incorrect_count))

    def of_type(self, name: str) -> list[tuple]:
        return [event for event in self.events if event[0] == name]

    def clear(self) -> None:
        self.events.clear()


@pytest.fixture
def deterministic_seed() -> int:
    """Fixed seed for reproducible tests."""
    return 42


@pytest.fixture
def scheduler() -> ManualScheduler:
    """Virtual-time scheduler."""
    return ManualScheduler()


@pytest.fixture
def listener() -> RecordingListener:
    return RecordingListener()


@pytest.fixture
def rule_table() -> BinRuleTable:
    """Rule table of the four default bins."""
    return BinRuleTable(DEFAULT_BINS)


@pytest.fixture
def single_slot_config(deterministic_seed) -> SessionConfig:
    """Default single-slot configuration."""
    return SessionConfig(mode="single_slot", random_seed=deterministic_seed)


@pytest.fixture
def pool_config(deterministic_seed) -> SessionConfig:
    """Default pool configuration (capacity 10, start with 8)."""
    return SessionConfig(mode="pool", random_seed=deterministic_seed)


@pytest.fixture
def plastic_only_config() -> SessionConfig:
    """Single-slot config that only spawns plastic."""
    return SessionConfig(categories=frozenset({Category.PLASTIC}), random_seed=1)


@pytest.fixture
def organic_only_config() -> SessionConfig:
    """Single-slot config that only spawns organic waste."""
    return SessionConfig(categories=frozenset({Category.ORGANIC}), random_seed=1)


@pytest.fixture
def controller(single_slot_config, scheduler, listener) -> SessionController:
    """Unstarted single-slot controller with a recording listener."""
    return SessionController(single_slot_config, scheduler=scheduler, listeners=[listener])


@pytest.fixture
def pool_controller(pool_config, scheduler, listener) -> SessionController:
    """Unstarted pool controller with a recording listener."""
    return SessionController(pool_config, scheduler=scheduler, listeners=[listener])
