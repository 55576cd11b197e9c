"""Foundational types for tilecollapse.

This module defines the grid geometry shared by every layer:
- Direction: the four sides of a cell, with offsets and opposites
- Position: Grid coordinates (x, y)
- TileId: Type alias for tile identifiers
"""

from __future__ import annotations

from enum import Enum
from typing import NewType, NamedTuple

TileId = NewType("TileId", str)


class Direction(Enum):
    """The four sides of a cell.

    Declaration order (UP, RIGHT, DOWN, LEFT) is the order neighbors are
    visited during propagation.
    """

    UP = "up"
    RIGHT = "right"
    DOWN = "down"
    LEFT = "left"

    @property
    def offset(self) -> tuple[int, int]:
        """Get the (dx, dy) offset for this direction.

        Coordinate system: x increases right, y increases up.
        """
        return _DIRECTION_OFFSETS[self]

    @property
    def dx(self) -> int:
        return _DIRECTION_OFFSETS[self][0]

    @property
    def dy(self) -> int:
        return _DIRECTION_OFFSETS[self][1]

    def opposite(self) -> Direction:
        """Return the opposite direction."""
        return _DIRECTION_OPPOSITES[self]

    @classmethod
    def parse(cls, name: str | Direction) -> Direction:
        """Parse a direction from its name ("up", "Right", "LEFT", ...)."""
        if isinstance(name, Direction):
            return name
        try:
            return cls(name.strip().lower())
        except (ValueError, AttributeError):
            raise ValueError(f"Unknown direction: {name!r}") from None


# Lookup tables for Direction properties
_DIRECTION_OFFSETS: dict[Direction, tuple[int, int]] = {
    Direction.UP: (0, 1),
    Direction.RIGHT: (1, 0),
    Direction.DOWN: (0, -1),
    Direction.LEFT: (-1, 0),
}

_DIRECTION_OPPOSITES: dict[Direction, Direction] = {
    Direction.UP: Direction.DOWN,
    Direction.DOWN: Direction.UP,
    Direction.RIGHT: Direction.LEFT,
    Direction.LEFT: Direction.RIGHT,
}


class Position(NamedTuple):
    """A position in the grid.

    Coordinates use standard Cartesian orientation:
    - x increases to the right
    - y increases upward
    - (0, 0) is the bottom-left cell
    """

    x: int
    y: int

    def __add__(self, other: object) -> Position:
        """Add a direction offset or tuple to this position."""
        if isinstance(other, Direction):
            dx, dy = other.offset
            return Position(self.x + dx, self.y + dy)
        if isinstance(other, tuple) and len(other) == 2:
            return Position(self.x + other[0], self.y + other[1])
        return NotImplemented

    def neighbors(self) -> dict[Direction, Position]:
        """Get all adjacent positions keyed by direction (may be out of bounds)."""
        return {d: self + d for d in Direction}

    def in_bounds(self, width: int, height: int) -> bool:
        """Check if position is within grid bounds (0 to width-1, 0 to height-1)."""
        return 0 <= self.x < width and 0 <= self.y < height
