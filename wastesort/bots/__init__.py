"""
Bots module - Simulated players.

Provides:
- SorterPolicy: Interface for picking an item and a bin
- SortDecision: One (item, bin) pick with an explanation
- RandomSorter: Uniform random picks
- AccurateSorter: Right bin with a configurable probability
"""

from .policy import SorterPolicy, SortDecision, RandomSorter, AccurateSorter

__all__ = [
    "SorterPolicy",
    "SortDecision",
    "RandomSorter",
    "AccurateSorter",
]
