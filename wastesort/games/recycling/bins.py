"""
Recycling Bins - The four default disposal targets.
"""

from ...engine_core.state import Bin, BinType, Category

RECYCLING_BIN = Bin(
    bin_type=BinType.RECYCLING,
    accepted_categories=frozenset({
        Category.PLASTIC,
        Category.PAPER,
        Category.GLASS,
        Category.METAL,
    }),
    label="RECYCLE",
    description="Plastic, Paper, Glass, Metal",
)

COMPOST_BIN = Bin(
    bin_type=BinType.COMPOST,
    accepted_categories=frozenset({Category.ORGANIC}),
    label="COMPOST",
    description="Food Waste",
)

HAZARDOUS_BIN = Bin(
    bin_type=BinType.HAZARDOUS,
    accepted_categories=frozenset({Category.ELECTRONICS}),
    label="HAZARDOUS",
    description="Batteries, Electronics",
)

# Catch-all: accepts nothing, so every drop here is wrong
LANDFILL_BIN = Bin(
    bin_type=BinType.LANDFILL,
    accepted_categories=frozenset(),
    label="LANDFILL",
    description="Non-recyclable",
)

DEFAULT_BINS: tuple[Bin, ...] = (
    RECYCLING_BIN,
    COMPOST_BIN,
    HAZARDOUS_BIN,
    LANDFILL_BIN,
)
