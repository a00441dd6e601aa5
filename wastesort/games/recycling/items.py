"""
Waste Item Catalog - Display names of the items that can be spawned.

The category decides the rules; the name is only what the player sees.
Categories with several entries pick one at random per spawn.
"""

from __future__ import annotations
import random
from dataclasses import dataclass

from ...engine_core.state import Category


@dataclass(frozen=True)
class WasteItemDefinition:
    """A catalog entry."""
    name: str
    category: Category


ITEM_CATALOG: tuple[WasteItemDefinition, ...] = (
    WasteItemDefinition("Plastic Bottle", Category.PLASTIC),
    WasteItemDefinition("Plastic Bag", Category.PLASTIC),
    WasteItemDefinition("Newspaper", Category.PAPER),
    WasteItemDefinition("Paper", Category.PAPER),
    WasteItemDefinition("Cardboard Box", Category.PAPER),
    WasteItemDefinition("Glass Jar", Category.GLASS),
    WasteItemDefinition("Wine Bottle", Category.GLASS),
    WasteItemDefinition("Coca Cola Can", Category.METAL),
    WasteItemDefinition("Soda Can", Category.METAL),
    WasteItemDefinition("Food Can", Category.METAL),
    WasteItemDefinition("Apple", Category.ORGANIC),
    WasteItemDefinition("Banana Peel", Category.ORGANIC),
    WasteItemDefinition("Battery", Category.ELECTRONICS),
    WasteItemDefinition("Phone Charger", Category.ELECTRONICS),
)


def names_for(category: Category) -> list[str]:
    """All catalog names of a category, in catalog order."""
    return [entry.name for entry in ITEM_CATALOG if entry.category == category]


def pick_item_name(category: Category, rng: random.Random) -> str:
    """Pick a display name for a new item of the given category."""
    names = names_for(category)
    if not names:
        return category.display_name
    return rng.choice(names)
