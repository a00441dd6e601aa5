"""
Session Configuration - Everything a session needs to start.

A config is validated once, before the session starts. Validation collects
every problem and raises a single ConfigurationError, so a host can show
all of them at once.

Defaults follow the recycling game: 60 second sessions, 100 points per
correct item, all six categories and the four default bins.
"""

from __future__ import annotations
from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import Any
import os

from ..engine_core.state import Bin, Category
from ..engine_core.rules import BinRuleTable
from ..engine_core.errors import ConfigurationError
from ..engine_core.resolution import DEFAULT_POINTS_PER_CORRECT
from ..games.recycling.bins import DEFAULT_BINS


class SpawnMode(Enum):
    """Spawn strategies."""
    SINGLE_SLOT = "single_slot"
    POOL = "pool"


@dataclass(frozen=True)
class SessionConfig:
    """
    Configuration of one session.

    Pool fields are ignored in single-slot mode.
    """
    mode: SpawnMode = SpawnMode.SINGLE_SLOT
    session_duration_seconds: int = 60

    # Pool mode
    pool_capacity: int = 10
    pool_low_water_mark: int = 10
    refill_batch_size: int = 2
    refill_interval_seconds: float = 3.0
    initial_pool_size: int = 8
    replacement_delay_seconds: float = 0.5

    # Content
    categories: frozenset[Category] = field(default_factory=lambda: frozenset(Category))
    bins: tuple[Bin, ...] = DEFAULT_BINS
    points_per_correct: int = DEFAULT_POINTS_PER_CORRECT

    # Bookkeeping
    resolved_history_limit: int = 20
    random_seed: int | None = None

    def __post_init__(self):
        # Names are accepted anywhere an enum is; bad names are config errors
        errors: list[str] = []
        try:
            object.__setattr__(self, "mode", SpawnMode(self.mode))
        except ValueError:
            errors.append(f"Unknown mode {self.mode!r}")

        categories = set()
        for value in self.categories:
            try:
                categories.add(Category(value))
            except ValueError:
                errors.append(f"Unknown category {value!r}")
        object.__setattr__(self, "categories", frozenset(categories))

        if errors:
            raise ConfigurationError(errors)
        if not isinstance(self.bins, tuple):
            object.__setattr__(self, "bins", tuple(self.bins))

    @property
    def is_pool(self) -> bool:
        return self.mode == SpawnMode.POOL

    def with_overrides(self, **kwargs: Any) -> SessionConfig:
        """Return a copy with some fields replaced (None values are ignored)."""
        return replace(self, **{k: v for k, v in kwargs.items() if v is not None})

    def validate(self) -> BinRuleTable:
        """
        Check the configuration.

        Returns the BinRuleTable built from the bins.
        Raises ConfigurationError listing every problem found.
        """
        errors: list[str] = []

        if self.session_duration_seconds < 1:
            errors.append("session_duration_seconds must be >= 1")
        if self.points_per_correct < 0:
            errors.append("points_per_correct must be >= 0")
        if self.resolved_history_limit < 0:
            errors.append("resolved_history_limit must be >= 0")
        if not self.categories:
            errors.append("At least one category is required")
        if not self.bins:
            errors.append("At least one bin is required")

        if self.mode == SpawnMode.POOL:
            if self.pool_capacity < 1:
                errors.append("pool_capacity must be >= 1")
            if self.pool_low_water_mark < 0:
                errors.append("pool_low_water_mark must be >= 0")
            if self.pool_low_water_mark > self.pool_capacity:
                errors.append("pool_low_water_mark must be <= pool_capacity")
            if self.refill_batch_size < 1:
                errors.append("refill_batch_size must be >= 1")
            if self.refill_interval_seconds <= 0:
                errors.append("refill_interval_seconds must be > 0")
            if self.initial_pool_size < 1:
                errors.append("initial_pool_size must be >= 1")
            if self.replacement_delay_seconds < 0:
                errors.append("replacement_delay_seconds must be >= 0")

        rule_table = None
        try:
            rule_table = BinRuleTable(self.bins)
        except ConfigurationError as e:
            errors.extend(e.errors)

        if rule_table is not None:
            for category in rule_table.categories_without_bin(
                c for c in Category if c in self.categories
            ):
                errors.append(f"Category '{category.value}' is not accepted by any bin")

        if errors:
            raise ConfigurationError(errors)
        return rule_table

    @classmethod
    def from_env(cls, prefix: str = "WASTESORT_", base: SessionConfig | None = None) -> SessionConfig:
        """
        Load overrides from environment variables.

        Recognized: {prefix}MODE, SESSION_DURATION, POOL_CAPACITY,
        POOL_LOW_WATER_MARK, REFILL_BATCH_SIZE, REFILL_INTERVAL,
        INITIAL_POOL_SIZE, REPLACEMENT_DELAY, POINTS_PER_CORRECT,
        CATEGORIES (comma separated), RANDOM_SEED.
        """
        base = base or cls()
        env = {
            "mode": (os.getenv(f"{prefix}MODE"), SpawnMode),
            "session_duration_seconds": (os.getenv(f"{prefix}SESSION_DURATION"), int),
            "pool_capacity": (os.getenv(f"{prefix}POOL_CAPACITY"), int),
            "pool_low_water_mark": (os.getenv(f"{prefix}POOL_LOW_WATER_MARK"), int),
            "refill_batch_size": (os.getenv(f"{prefix}REFILL_BATCH_SIZE"), int),
            "refill_interval_seconds": (os.getenv(f"{prefix}REFILL_INTERVAL"), float),
            "initial_pool_size": (os.getenv(f"{prefix}INITIAL_POOL_SIZE"), int),
            "replacement_delay_seconds": (os.getenv(f"{prefix}REPLACEMENT_DELAY"), float),
            "points_per_correct": (os.getenv(f"{prefix}POINTS_PER_CORRECT"), int),
            "random_seed": (os.getenv(f"{prefix}RANDOM_SEED"), int),
        }

        overrides: dict[str, Any] = {}
        errors: list[str] = []
        for name, (raw, parse) in env.items():
            if raw is None or raw.strip() == "":
                continue
            try:
                overrides[name] = parse(raw.strip())
            except ValueError:
                errors.append(f"Invalid value for {name}: {raw!r}")

        raw_categories = os.getenv(f"{prefix}CATEGORIES")
        if raw_categories:
            try:
                overrides["categories"] = frozenset(
                    Category(part.strip().lower())
                    for part in raw_categories.split(",")
                    if part.strip()
                )
            except ValueError:
                errors.append(f"Invalid value for categories: {raw_categories!r}")

        if errors:
            raise ConfigurationError(errors)
        return base.with_overrides(**overrides)

    def to_dict(self) -> dict[str, Any]:
        """Plain representation for logging and API responses."""
        data: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name == "mode":
                value = value.value
            elif f.name == "categories":
                value = sorted(c.value for c in value)
            elif f.name == "bins":
                value = [
                    {
                        "bin_type": b.bin_type.value,
                        "accepted_categories": sorted(c.value for c in b.accepted_categories),
                    }
                    for b in value
                ]
            data[f.name] = value
        return data
