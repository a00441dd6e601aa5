"""
Engine Core - Session-independent rules of the sorting game.

The core is the pure part of the engine:
1. Data model (categories, bins, items, session state)
2. Category selection with the no-immediate-repeat rule
3. Item registry with identity and lifecycle
4. Bin rule table
5. Round resolution and scoring
"""

from .state import (
    Category,
    BinType,
    Bin,
    Item,
    ItemState,
    Resolution,
    SessionPhase,
    SessionState,
)
from .errors import WasteSortError, InvalidTransition, NotSelected, ConfigurationError
from .selector import CategorySelector
from .registry import ItemRegistry
from .rules import BinRuleTable
from .resolution import ResolutionEngine, ResolutionOutcome, DEFAULT_POINTS_PER_CORRECT

__all__ = [
    "Category",
    "BinType",
    "Bin",
    "Item",
    "ItemState",
    "Resolution",
    "SessionPhase",
    "SessionState",
    "WasteSortError",
    "InvalidTransition",
    "NotSelected",
    "ConfigurationError",
    "CategorySelector",
    "ItemRegistry",
    "BinRuleTable",
    "ResolutionEngine",
    "ResolutionOutcome",
    "DEFAULT_POINTS_PER_CORRECT",
]
