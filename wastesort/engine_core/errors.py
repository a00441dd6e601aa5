"""
Engine errors.

Per-event errors (InvalidTransition, NotSelected) are local and non-fatal:
the session controller turns them into no-ops. ConfigurationError is fatal
and raised before a session starts.
"""


class WasteSortError(Exception):
    """Base class for engine errors."""


class InvalidTransition(WasteSortError):
    """Operation on a non-existent or already-resolved item."""

    def __init__(self, item_id: int, reason: str):
        self.item_id = item_id
        self.reason = reason
        super().__init__(f"Item {item_id}: {reason}")


class NotSelected(WasteSortError):
    """Resolution requested for an item that is not selected."""

    def __init__(self, item_id: int | None = None):
        self.item_id = item_id
        if item_id is None:
            super().__init__("No item is selected")
        else:
            super().__init__(f"Item {item_id} is not selected")


class ConfigurationError(WasteSortError):
    """Raised when a session configuration is invalid."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__(
            f"Invalid configuration ({len(errors)} error(s)): " + "; ".join(errors)
        )
