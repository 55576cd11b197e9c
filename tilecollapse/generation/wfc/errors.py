"""Exceptions raised by the Wave Function Collapse core.

All three are terminal for the current solve attempt. The solver never
retries internally; callers decide whether to restart with a fresh grid.
"""

from __future__ import annotations

from tilecollapse.core.types import Position


class WFCError(Exception):
    """Base exception for WFC errors."""

    pass


class ConfigurationError(WFCError):
    """Invalid catalog or grid definition, raised at construction time."""

    pass


class ContradictionError(WFCError):
    """A cell's candidate set was pruned to empty."""

    def __init__(self, position: Position, message: str | None = None):
        super().__init__(message or f"Contradiction at ({position.x}, {position.y})")
        self.position = position


class AlreadyCompleteError(WFCError):
    """No unresolved cell is left to collapse."""

    pass
