"""
Resolution Engine - Matches a selected item against a target bin.

Pure function of the item category and the bin rules:
- correct = the bin accepts the category
- points = points_per_correct if correct else 0

No partial credit, streaks or time scaling. Applying the outcome (score,
counters, item state) is the session controller's job.
"""

from __future__ import annotations
from dataclasses import dataclass

from .state import BinType, Item, ItemState
from .rules import BinRuleTable
from .errors import NotSelected

DEFAULT_POINTS_PER_CORRECT = 100


@dataclass(frozen=True)
class ResolutionOutcome:
    """Verdict for one round."""
    correct: bool
    points_awarded: int


class ResolutionEngine:
    """Scores a drop of the selected item into a bin."""

    def __init__(
        self,
        rule_table: BinRuleTable,
        points_per_correct: int = DEFAULT_POINTS_PER_CORRECT,
    ):
        self.rule_table = rule_table
        self.points_per_correct = points_per_correct

    def resolve(self, item: Item, bin_type: BinType) -> ResolutionOutcome:
        """
        Resolve a drop.

        Raises NotSelected if the item is not currently SELECTED, which
        covers stale drops aimed at an item that was already resolved.
        """
        if item.state != ItemState.SELECTED:
            raise NotSelected(item.item_id)
        correct = self.rule_table.accepts(bin_type, item.category)
        return ResolutionOutcome(
            correct=correct,
            points_awarded=self.points_per_correct if correct else 0,
        )

    def feedback(self, item: Item, bin_type: BinType, outcome: ResolutionOutcome) -> str:
        """Short message shown to the player after a round."""
        if outcome.correct:
            return f"Correct! +{outcome.points_awarded} points"
        bin_ = self.rule_table.get(bin_type)
        label = bin_.label if bin_ else bin_type.value.upper()
        return f"Wrong! {item.name} doesn't go in {label}"
