"""
Built-in tilesets for Wave Function Collapse.

One tileset per adjacency scheme:

    roads    TAG        every combination of STREET/BLANK sides (16 tiles)
    pipes    SIGNATURE  edge signatures sampled like sprite edge pixels
    terrain  NEIGHBORS  water -> coast -> sand -> grass -> forest/hill -> stone

The road set contains a tile for every possible side combination, so no
neighborhood can ever empty a cell: it never contradicts. Pipes and terrain
are missing combinations and can contradict, which is what the restart
policy in generation.generate is for.
"""

from __future__ import annotations

from itertools import product
from typing import Callable

from tilecollapse.core.types import Direction
from .wfc import AdjacencyScheme, ConnectionType, Tile, TileCatalog, make_bidirectional_rule

# (symbol, rich color) per tile id
TileStyle = tuple[str, str]


# =============================================================================
# Roads (TAG scheme)
# =============================================================================

# Box-drawing glyph keyed by which sides carry a street (up, right, down, left)
_ROAD_GLYPHS: dict[tuple[bool, bool, bool, bool], str] = {
    (False, False, False, False): " ",
    (True, False, False, False): "╵",
    (False, True, False, False): "╶",
    (False, False, True, False): "╷",
    (False, False, False, True): "╴",
    (True, False, True, False): "│",
    (False, True, False, True): "─",
    (True, True, False, False): "└",
    (False, True, True, False): "┌",
    (False, False, True, True): "┐",
    (True, False, False, True): "┘",
    (True, True, True, False): "├",
    (False, True, True, True): "┬",
    (True, False, True, True): "┤",
    (True, True, False, True): "┴",
    (True, True, True, True): "┼",
}

_SIDE_LETTERS = {
    Direction.UP: "u",
    Direction.RIGHT: "r",
    Direction.DOWN: "d",
    Direction.LEFT: "l",
}


def _road_id(streets: tuple[bool, bool, bool, bool]) -> str:
    letters = "".join(
        _SIDE_LETTERS[direction] for direction, street in zip(Direction, streets) if street
    )
    return f"road_{letters}" if letters else "blank"


def create_road_tileset() -> TileCatalog:
    """
    Create the road tileset: one tile per STREET/BLANK side combination.

    Tile IDs are "blank" or "road_" plus the street sides in u, r, d, l
    order (e.g. "road_rl" is a horizontal straight).
    """
    tiles = []
    for streets in product((False, True), repeat=4):
        tiles.append(Tile(
            id=_road_id(streets),
            sockets={
                direction: ConnectionType.STREET if street else ConnectionType.BLANK
                for direction, street in zip(Direction, streets)
            },
        ))
    return TileCatalog(tiles, scheme=AdjacencyScheme.TAG)


ROAD_STYLES: dict[str, TileStyle] = {
    _road_id(streets): (glyph, "white" if any(streets) else "green")
    for streets, glyph in _ROAD_GLYPHS.items()
}


# =============================================================================
# Pipes (SIGNATURE scheme)
# =============================================================================

# Signatures mimic sampling three pixels along each sprite edge.
BACKGROUND = (34, 34, 34)
PIPE = (0, 160, 220)

EMPTY_EDGE = (BACKGROUND, BACKGROUND, BACKGROUND)
PIPE_EDGE = (BACKGROUND, PIPE, BACKGROUND)


def create_pipe_tileset() -> TileCatalog:
    """
    Create the pipe tileset: empty, straights, elbows and a cross.

    There are no tees or dead ends, so a cell squeezed between three pipe
    openings has no candidate left.
    """
    E, P = EMPTY_EDGE, PIPE_EDGE
    tiles = [
        Tile.from_sides("empty", up=E, right=E, down=E, left=E),
        Tile.from_sides("pipe_h", up=E, right=P, down=E, left=P),
        Tile.from_sides("pipe_v", up=P, right=E, down=P, left=E),
        Tile.from_sides("elbow_ur", up=P, right=P, down=E, left=E),
        Tile.from_sides("elbow_rd", up=E, right=P, down=P, left=E),
        Tile.from_sides("elbow_dl", up=E, right=E, down=P, left=P),
        Tile.from_sides("elbow_lu", up=P, right=E, down=E, left=P),
        Tile.from_sides("cross", up=P, right=P, down=P, left=P),
    ]
    return TileCatalog(tiles, scheme=AdjacencyScheme.SIGNATURE)


PIPE_STYLES: dict[str, TileStyle] = {
    "empty": ("·", "bright_black"),
    "pipe_h": ("═", "cyan"),
    "pipe_v": ("║", "cyan"),
    "elbow_ur": ("╚", "cyan"),
    "elbow_rd": ("╔", "cyan"),
    "elbow_dl": ("╗", "cyan"),
    "elbow_lu": ("╝", "cyan"),
    "cross": ("╬", "cyan"),
}


# =============================================================================
# Terrain (NEIGHBORS scheme)
# =============================================================================

TERRAIN_IDS = ("water", "coast", "sand", "grass", "forest", "hill", "stone")


def create_terrain_tileset() -> TileCatalog:
    """
    Create the terrain tileset with adjacency rules that form gradients.

    The key insight: by only allowing certain tiles to neighbor each other,
    we get emergent large-scale structure (coastlines, mountain ranges)
    from purely local rules.
    """
    tiles = {tile_id: Tile(id=tile_id) for tile_id in TERRAIN_IDS}

    #   water <-> coast <-> sand <-> grass <-> forest
    #                                   |         |
    #                                 hill  <->  hill
    #                                   |
    #                                stone

    # Water gradient: water -> coast -> sand -> grass
    make_bidirectional_rule(tiles, "water", "water")
    make_bidirectional_rule(tiles, "water", "coast")
    make_bidirectional_rule(tiles, "coast", "coast")
    make_bidirectional_rule(tiles, "coast", "sand")
    make_bidirectional_rule(tiles, "sand", "sand")
    make_bidirectional_rule(tiles, "sand", "grass")

    # Land: grass is the hub
    make_bidirectional_rule(tiles, "grass", "grass")
    make_bidirectional_rule(tiles, "grass", "forest")
    make_bidirectional_rule(tiles, "grass", "hill")
    make_bidirectional_rule(tiles, "forest", "forest")
    make_bidirectional_rule(tiles, "forest", "hill")

    # Elevation: hill -> stone
    make_bidirectional_rule(tiles, "hill", "hill")
    make_bidirectional_rule(tiles, "hill", "stone")
    make_bidirectional_rule(tiles, "stone", "stone")

    return TileCatalog(tiles.values(), scheme=AdjacencyScheme.NEIGHBORS)


TERRAIN_STYLES: dict[str, TileStyle] = {
    "water": ("≈", "blue"),
    "coast": ("~", "bright_blue"),
    "sand": (":", "yellow"),
    "grass": (".", "green"),
    "forest": ("♣", "bright_green"),
    "hill": ("^", "rgb(160,64,0)"),
    "stone": ("▲", "bright_black"),
}


# =============================================================================
# Registry
# =============================================================================

TILESETS: dict[str, tuple[Callable[[], TileCatalog], dict[str, TileStyle]]] = {
    "roads": (create_road_tileset, ROAD_STYLES),
    "pipes": (create_pipe_tileset, PIPE_STYLES),
    "terrain": (create_terrain_tileset, TERRAIN_STYLES),
}


def get_tileset(name: str) -> tuple[TileCatalog, dict[str, TileStyle]]:
    """
    Build a built-in tileset by name.

    Raises:
        KeyError: If the name is not one of TILESETS
    """
    try:
        factory, styles = TILESETS[name]
    except KeyError:
        raise KeyError(f"Unknown tileset {name!r}; choose from {sorted(TILESETS)}") from None
    return factory(), dict(styles)
