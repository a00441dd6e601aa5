"""
Recycling - The default sorting game.

Six waste categories, four bins:
- RECYCLE takes plastic, paper, glass and metal
- COMPOST takes organic waste
- HAZARDOUS takes electronics
- LANDFILL takes nothing explicitly

This module contains:
- Default bin definitions
- Waste item catalog
- Default session configuration factory
"""

from .bins import DEFAULT_BINS, RECYCLING_BIN, COMPOST_BIN, HAZARDOUS_BIN, LANDFILL_BIN
from .items import ITEM_CATALOG, WasteItemDefinition, names_for, pick_item_name
from .setup import create_default_config

__all__ = [
    "DEFAULT_BINS",
    "RECYCLING_BIN",
    "COMPOST_BIN",
    "HAZARDOUS_BIN",
    "LANDFILL_BIN",
    "ITEM_CATALOG",
    "WasteItemDefinition",
    "names_for",
    "pick_item_name",
    "create_default_config",
]
