"""
Recycling Game Setup - Builds a ready-to-use session configuration.

The two variants of the game differ only in how items are spawned:
- single_slot: one item at a time, replaced as soon as it is sorted
- pool: eight items to start, topped up every three seconds
"""

from __future__ import annotations
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ...session.config import SessionConfig


def create_default_config(
    mode: SpawnMode | str = "single_slot",
    random_seed: int | None = None,
    **overrides: Any,
) -> SessionConfig:
    """
    Create the default recycling game configuration.

    Args:
        mode: "single_slot" or "pool"
        random_seed: Seed for reproducible item sequences
        **overrides: Any other SessionConfig field

    Returns:
        Validated SessionConfig

    Raises:
        ConfigurationError: unknown mode or any invalid field
    """
    from ...session.config import SessionConfig

    config = SessionConfig(mode=mode, random_seed=random_seed)
    config = config.with_overrides(**overrides)
    config.validate()
    return config
