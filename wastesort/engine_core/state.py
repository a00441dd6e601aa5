"""
Session State - Data model for the sorting game.

Design principles:
- Closed sets: categories and bin types are enums
- Bins are immutable for the lifetime of a session
- Items are owned by the ItemRegistry; everyone else reads them
- SessionState is the single mutable record of score, time and phase
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum

from .errors import ConfigurationError


class Category(Enum):
    """Disposal class of a waste item."""
    PLASTIC = "plastic"
    PAPER = "paper"
    GLASS = "glass"
    ORGANIC = "organic"
    METAL = "metal"
    ELECTRONICS = "electronics"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


class BinType(Enum):
    """Disposal targets."""
    RECYCLING = "recycling"
    COMPOST = "compost"
    HAZARDOUS = "hazardous"
    LANDFILL = "landfill"


class ItemState(Enum):
    """Lifecycle of an item within a round."""
    SPAWNED = "spawned"
    SELECTED = "selected"
    RESOLVED = "resolved"


class SessionPhase(Enum):
    """High-level session phases."""
    ACTIVE = "active"
    ENDED = "ended"


@dataclass(frozen=True)
class Bin:
    """
    A disposal target.

    An empty accepted set is legal (landfill takes nothing explicitly,
    so nothing dropped there is ever correct).
    """
    bin_type: BinType
    accepted_categories: frozenset[Category] = frozenset()
    label: str = ""
    description: str = ""

    def __post_init__(self):
        # Accept any iterable of categories (or their names) from callers
        try:
            object.__setattr__(self, "bin_type", BinType(self.bin_type))
            object.__setattr__(
                self,
                "accepted_categories",
                frozenset(Category(c) for c in self.accepted_categories),
            )
        except ValueError as e:
            raise ConfigurationError([f"Invalid bin: {e}"]) from e
        if not self.label:
            object.__setattr__(self, "label", self.bin_type.value.upper())

    def accepts(self, category: Category) -> bool:
        return category in self.accepted_categories


@dataclass(frozen=True)
class Resolution:
    """Where an item ended up and whether that was right."""
    bin_type: BinType
    correct: bool


@dataclass
class Item:
    """
    A waste item in the game.

    item_id is monotonic and unique within a session.
    name is the display name picked from the item catalog.
    """
    item_id: int
    category: Category
    name: str = ""
    state: ItemState = ItemState.SPAWNED
    resolution: Resolution | None = None

    def __post_init__(self):
        if not self.name:
            self.name = self.category.display_name

    @property
    def is_resolved(self) -> bool:
        return self.state == ItemState.RESOLVED


@dataclass
class SessionState:
    """
    Score, countdown and statistics of one session.

    Created on start, reinitialized on restart. Invariants:
    - score == points_per_correct * correct_count
    - correct_count + incorrect_count <= items_spawned_total
    - time_remaining_seconds never increases while ACTIVE, and is 0 once ENDED
    """
    time_remaining_seconds: int
    score: int = 0
    correct_count: int = 0
    incorrect_count: int = 0
    items_spawned_total: int = 0
    last_spawned_category: Category | None = None
    phase: SessionPhase = SessionPhase.ACTIVE

    @property
    def is_active(self) -> bool:
        return self.phase == SessionPhase.ACTIVE

    @property
    def rounds_played(self) -> int:
        return self.correct_count + self.incorrect_count

    @property
    def accuracy(self) -> int:
        """Share of correct rounds as a rounded percentage (0 if none played)."""
        if self.rounds_played == 0:
            return 0
        return round(self.correct_count / self.rounds_played * 100)
