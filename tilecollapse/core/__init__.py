"""Core geometry types for tilecollapse."""

from .types import Direction, Position, TileId

__all__ = [
    "Direction",
    "Position",
    "TileId",
]
