"""
Category Selector - Picks the category of the next item.

The draw is uniform over the configured categories, excluding only the
category of the previous spawn. This is a soft rule: it guarantees that no
two consecutive spawns share a category (unless a single category is
configured) and nothing more. There is no sliding window.
"""

from __future__ import annotations
import random
from typing import Iterable

from .state import Category


class CategorySelector:
    """
    Draws categories with the no-immediate-repeat rule.

    Usage:
        selector = CategorySelector({Category.PLASTIC, Category.ORGANIC}, rng)
        first = selector.next()
        second = selector.next(excluding=first)  # never equal to first
    """

    def __init__(
        self,
        categories: Iterable[Category],
        rng: random.Random | None = None,
    ):
        wanted = set(categories)
        # Enum order keeps seeded draws reproducible
        self.categories: list[Category] = [c for c in Category if c in wanted]
        if not self.categories:
            raise ValueError("CategorySelector needs at least one category")
        self.rng = rng or random.Random()

    def next(self, excluding: Category | None = None) -> Category:
        candidates = [c for c in self.categories if c != excluding]
        if not candidates:
            candidates = self.categories
        return self.rng.choice(candidates)
