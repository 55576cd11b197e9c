"""Tile generation for tilecollapse."""

from .generate import generate_tiles, generate_tile_map, GenerationError
from .tilesets import (
    create_road_tileset,
    create_pipe_tileset,
    create_terrain_tileset,
    get_tileset,
    TILESETS,
)

__all__ = [
    "generate_tiles",
    "generate_tile_map",
    "GenerationError",
    "create_road_tileset",
    "create_pipe_tileset",
    "create_terrain_tileset",
    "get_tileset",
    "TILESETS",
]
