"""
Item Registry - Owns every item of a session.

Responsibilities:
- Assign monotonically increasing ids (starting at 1)
- Track which items are in play
- Apply state transitions (SPAWNED -> SELECTED -> RESOLVED)
- Keep a bounded window of items that left play

Items are never mutated by anyone else. Callers get references for reading
and go through the registry for every transition.
"""

from __future__ import annotations
from collections import deque

from .state import BinType, Category, Item, ItemState, Resolution
from .errors import InvalidTransition


class ItemRegistry:
    """
    Registry of in-play and recently resolved items.

    history_limit bounds the number of items kept after they leave play.
    0 keeps none (single-slot mode only ever holds the current item).
    """

    def __init__(self, history_limit: int = 20):
        if history_limit < 0:
            raise ValueError("history_limit must be >= 0")
        self._next_id = 1
        self._in_play: dict[int, Item] = {}
        self._history: deque[Item] = deque(maxlen=history_limit)

    # =========================================================================
    # Queries
    # =========================================================================

    @property
    def in_play_count(self) -> int:
        return len(self._in_play)

    @property
    def spawned_count(self) -> int:
        return self._next_id - 1

    def in_play(self) -> list[Item]:
        """In-play items ordered by id."""
        return [self._in_play[item_id] for item_id in sorted(self._in_play)]

    def history(self) -> list[Item]:
        """Items that left play, oldest first."""
        return list(self._history)

    def is_in_play(self, item_id: int) -> bool:
        return item_id in self._in_play

    def get(self, item_id: int) -> Item | None:
        """Get an item by id, in play or still in the history window."""
        item = self._in_play.get(item_id)
        if item is not None:
            return item
        for old in self._history:
            if old.item_id == item_id:
                return old
        return None

    # =========================================================================
    # Transitions
    # =========================================================================

    def spawn(self, category: Category, name: str = "") -> Item:
        """Create a new in-play item."""
        item = Item(item_id=self._next_id, category=category, name=name)
        self._next_id += 1
        self._in_play[item.item_id] = item
        return item

    def mark_selected(self, item_id: int) -> Item:
        item = self._require_unresolved(item_id)
        item.state = ItemState.SELECTED
        return item

    def deselect(self, item_id: int) -> Item:
        item = self._require_unresolved(item_id)
        item.state = ItemState.SPAWNED
        return item

    def mark_resolved(self, item_id: int, bin_type: BinType, correct: bool) -> Item:
        item = self._require_unresolved(item_id)
        item.state = ItemState.RESOLVED
        item.resolution = Resolution(bin_type=bin_type, correct=correct)
        return item

    def remove_from_play(self, item_id: int) -> Item:
        """Detach an item from the active pool, keeping its record in history."""
        item = self._in_play.pop(item_id, None)
        if item is None:
            raise InvalidTransition(item_id, "not in play")
        if self._history.maxlen:
            self._history.append(item)
        return item

    def _require_unresolved(self, item_id: int) -> Item:
        item = self.get(item_id)
        if item is None:
            raise InvalidTransition(item_id, "does not exist")
        if item.state == ItemState.RESOLVED:
            raise InvalidTransition(item_id, "already resolved")
        return item
