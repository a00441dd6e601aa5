"""
Sorter Policy - Interface for simulated players.

A SorterPolicy looks at the items in play and the bins, and decides:
- Which item to pick up
- Which bin to drop it on

Policies only decide. The game loop feeds their decisions into the
session controller like a human player's clicks.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
import random

from ..engine_core.state import Bin, BinType, Item
from ..engine_core.rules import BinRuleTable


@dataclass
class SortDecision:
    """A decision made by a sorter."""
    item_id: int
    bin_type: BinType
    explanation: str = ""


class SorterPolicy(ABC):
    """
    Abstract base class for sorter policies.

    decide() returns None when there is nothing to sort.
    """

    @abstractmethod
    def choose_item(self, items: list[Item]) -> Item | None:
        pass

    @abstractmethod
    def choose_bin(self, item: Item, bins: list[Bin]) -> Bin:
        pass

    def decide(self, items: list[Item], bins: list[Bin]) -> SortDecision | None:
        item = self.choose_item(items)
        if item is None or not bins:
            return None
        bin_ = self.choose_bin(item, bins)
        return SortDecision(
            item_id=item.item_id,
            bin_type=bin_.bin_type,
            explanation=f"{self.get_name()}: {item.name} -> {bin_.label}",
        )

    def get_name(self) -> str:
        return self.__class__.__name__


class RandomSorter(SorterPolicy):
    """
    Random policy - picks items and bins uniformly at random.

    Used for:
    - Testing
    - Baseline comparison
    """

    def __init__(self, seed: int | None = None):
        self.rng = random.Random(seed)

    def choose_item(self, items: list[Item]) -> Item | None:
        if not items:
            return None
        return self.rng.choice(items)

    def choose_bin(self, item: Item, bins: list[Bin]) -> Bin:
        return self.rng.choice(bins)


class AccurateSorter(SorterPolicy):
    """
    Knows the rules and applies them with a given accuracy.

    accuracy=1.0 always picks an accepting bin (when one exists);
    a miss picks uniformly among the bins that do not accept the item.
    Items are taken oldest first.
    """

    def __init__(self, rule_table: BinRuleTable, accuracy: float = 1.0, seed: int | None = None):
        if not 0.0 <= accuracy <= 1.0:
            raise ValueError("accuracy must be between 0 and 1")
        self.rule_table = rule_table
        self.accuracy = accuracy
        self.rng = random.Random(seed)

    def choose_item(self, items: list[Item]) -> Item | None:
        if not items:
            return None
        return min(items, key=lambda item: item.item_id)

    def choose_bin(self, item: Item, bins: list[Bin]) -> Bin:
        right = [b for b in bins if self.rule_table.accepts(b.bin_type, item.category)]
        wrong = [b for b in bins if b not in right]
        hit = self.rng.random() < self.accuracy
        if right and (hit or not wrong):
            return self.rng.choice(right)
        return self.rng.choice(wrong)
