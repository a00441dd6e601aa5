"""
Bin Rule Table - Static mapping of bin -> accepted categories.
"""

from __future__ import annotations
from typing import Iterable

from .state import Bin, BinType, Category
from .errors import ConfigurationError


class BinRuleTable:
    """
    Lookup table of the configured bins.

    Bin types must be distinct. Order of the bins is kept for display.
    """

    def __init__(self, bins: Iterable[Bin]):
        self._bins: dict[BinType, Bin] = {}
        duplicates = []
        for bin_ in bins:
            if bin_.bin_type in self._bins:
                duplicates.append(bin_.bin_type.value)
                continue
            self._bins[bin_.bin_type] = bin_
        if duplicates:
            raise ConfigurationError(
                [f"Duplicate bin type '{name}'" for name in duplicates]
            )

    @property
    def bins(self) -> list[Bin]:
        return list(self._bins.values())

    @property
    def bin_types(self) -> list[BinType]:
        return list(self._bins)

    def get(self, bin_type: BinType) -> Bin | None:
        return self._bins.get(bin_type)

    def has_bin(self, bin_type: BinType) -> bool:
        return bin_type in self._bins

    def accepts(self, bin_type: BinType, category: Category) -> bool:
        """True if category is in the accepted set of the bin."""
        bin_ = self._bins.get(bin_type)
        if bin_ is None:
            raise KeyError(f"Unknown bin type: {bin_type}")
        return bin_.accepts(category)

    def bins_for(self, category: Category) -> list[Bin]:
        """All bins that accept a category."""
        return [b for b in self._bins.values() if b.accepts(category)]

    def categories_without_bin(self, categories: Iterable[Category]) -> list[Category]:
        """Categories that no bin accepts (never correctly placeable)."""
        return [c for c in categories if not self.bins_for(c)]
