"""
Tile definitions and the tile catalog for Wave Function Collapse.

A Tile is a discrete unit that can occupy a cell in the grid. Each tile
carries one adjacency descriptor per direction, and the TileCatalog turns
those descriptors into a single compatibility predicate:

    compatible(tile_a, direction, tile_b)

"Can tile_b sit on the `direction` side of tile_a?"

Three descriptor schemes are supported, fixed per catalog:

    SIGNATURE  - opaque hashable value per side; sides match when
                 A's signature at d equals B's signature at opposite(d)
    TAG        - connection label per side (ConnectionType or a string);
                 same matching rule as signatures
    NEIGHBORS  - explicit set of allowed neighbor ids per side

Whatever the scheme, the catalog precomputes an allowed-neighbor table at
construction so the solver never needs to know which scheme is in use.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Hashable, Iterable, Iterator

from tilecollapse.core.types import Direction, TileId
from .errors import ConfigurationError

logger = logging.getLogger(__name__)


class ConnectionType(Enum):
    """Connection tags for the explicit tag scheme."""

    NONE = "none"
    BLANK = "blank"
    STREET = "street"


class AdjacencyScheme(Enum):
    """How a catalog's tiles describe their sides."""

    SIGNATURE = "signature"
    TAG = "tag"
    NEIGHBORS = "neighbors"


@dataclass
class Tile:
    """
    A tile type that can appear in the generated output.

    Attributes:
        id: Unique identifier for this tile type (e.g., "road_h", "grass")
        sockets: Signature or tag for each direction. Used by the SIGNATURE
                 and TAG schemes.
        allowed_neighbors: For each direction, the set of tile IDs that can be
                           adjacent. Used by the NEIGHBORS scheme.
    """
    id: TileId
    sockets: dict[Direction, Hashable] = field(default_factory=dict)
    allowed_neighbors: dict[Direction, set[str]] = field(default_factory=dict)

    def __post_init__(self):
        # Accept "up"/"right"/... keys as well as Direction members
        self.sockets = {Direction.parse(d): v for d, v in self.sockets.items()}
        self.allowed_neighbors = {
            Direction.parse(d): set(ids) for d, ids in self.allowed_neighbors.items()
        }
        for direction in Direction:
            if direction not in self.allowed_neighbors:
                self.allowed_neighbors[direction] = set()

    @classmethod
    def from_sides(
        cls,
        tile_id: str,
        up: Hashable,
        right: Hashable,
        down: Hashable,
        left: Hashable,
    ) -> Tile:
        """Create a tile from one socket value per side."""
        return cls(
            id=tile_id,
            sockets={
                Direction.UP: up,
                Direction.RIGHT: right,
                Direction.DOWN: down,
                Direction.LEFT: left,
            },
        )

    def socket(self, direction: Direction) -> Hashable:
        """Get the socket value on the given side."""
        return self.sockets[direction]

    def allow_neighbor(self, direction: Direction, neighbor_id: str):
        """Allow a specific tile to be adjacent in the given direction."""
        self.allowed_neighbors[direction].add(neighbor_id)

    def get_allowed_neighbors(self, direction: Direction) -> set[str]:
        """Get all tile IDs allowed in the given direction."""
        return self.allowed_neighbors.get(direction, set())


def make_bidirectional_rule(tiles: dict[str, Tile], tile_a_id: str, tile_b_id: str):
    """
    Create a bidirectional adjacency rule: A and B can be neighbors in all directions.

    If A can have B above it, then B can have A below it, etc.
    """
    tile_a = tiles[tile_a_id]
    tile_b = tiles[tile_b_id]

    for direction in Direction:
        tile_a.allow_neighbor(direction, tile_b_id)
        tile_b.allow_neighbor(direction.opposite(), tile_a_id)


def _coerce_tag(value: Hashable) -> Hashable:
    """Map string labels that name a ConnectionType onto the enum member."""
    if isinstance(value, str):
        try:
            return ConnectionType(value.strip().lower())
        except ValueError:
            return value
    return value


class TileCatalog:
    """
    Immutable, ordered registry of tiles plus their compatibility predicate.

    Tile order is kept: it is the order of every cell's initial candidate
    list, which makes tie-breaking reproducible for a given random source.
    """

    def __init__(
        self,
        tiles: Iterable[Tile],
        scheme: AdjacencyScheme = AdjacencyScheme.SIGNATURE,
        validate_symmetry: bool = True,
    ):
        """
        Build the catalog and precompute its compatibility table.

        Args:
            tiles: Tiles in catalog order
            scheme: Descriptor scheme shared by every tile
            validate_symmetry: Reject relations where compatible(A, d, B)
                               does not imply compatible(B, opposite(d), A)

        Raises:
            ConfigurationError: If the catalog is empty, ids repeat, a
                                descriptor is missing or malformed, or the
                                relation is asymmetric
        """
        self._tiles: tuple[Tile, ...] = tuple(tiles)
        self._scheme = AdjacencyScheme(scheme)

        if not self._tiles:
            raise ConfigurationError("Tile catalog is empty")

        self._by_id: dict[str, Tile] = {}
        for tile in self._tiles:
            if tile.id in self._by_id:
                raise ConfigurationError(f"Duplicate tile id: {tile.id!r}")
            self._by_id[tile.id] = tile

        if self._scheme == AdjacencyScheme.NEIGHBORS:
            self._allowed = self._build_from_neighbor_lists()
        else:
            self._allowed = self._build_from_sockets()

        if validate_symmetry:
            self._check_symmetry()

        logger.debug(
            f"Built catalog | tiles={len(self._tiles)} | scheme={self._scheme.value}"
        )

    # -------------------------------------------------------------------------
    # Table construction
    # -------------------------------------------------------------------------

    def _build_from_sockets(self) -> dict[tuple[str, Direction], frozenset[str]]:
        """Match sockets side against opposite side for every tile pair."""
        sockets: dict[tuple[str, Direction], Hashable] = {}

        for tile in self._tiles:
            for direction in Direction:
                if direction not in tile.sockets:
                    raise ConfigurationError(
                        f"Tile {tile.id!r} has no socket for {direction.value}"
                    )
                value = tile.sockets[direction]
                if self._scheme == AdjacencyScheme.TAG:
                    if not isinstance(value, (str, Enum)):
                        raise ConfigurationError(
                            f"Tile {tile.id!r} has non-label tag {value!r} "
                            f"for {direction.value}"
                        )
                    value = _coerce_tag(value)
                else:
                    try:
                        hash(value)
                    except TypeError:
                        raise ConfigurationError(
                            f"Tile {tile.id!r} has unhashable signature for "
                            f"{direction.value}"
                        ) from None
                sockets[(tile.id, direction)] = value

        allowed: dict[tuple[str, Direction], frozenset[str]] = {}
        for tile_a in self._tiles:
            for direction in Direction:
                own = sockets[(tile_a.id, direction)]
                opposite = direction.opposite()
                allowed[(tile_a.id, direction)] = frozenset(
                    tile_b.id
                    for tile_b in self._tiles
                    if sockets[(tile_b.id, opposite)] == own
                )
        return allowed

    def _build_from_neighbor_lists(self) -> dict[tuple[str, Direction], frozenset[str]]:
        """Copy each tile's allowed-neighbor sets, checking every id exists."""
        allowed: dict[tuple[str, Direction], frozenset[str]] = {}

        for tile in self._tiles:
            for direction in Direction:
                neighbor_ids = frozenset(tile.get_allowed_neighbors(direction))
                unknown = neighbor_ids - self._by_id.keys()
                if unknown:
                    raise ConfigurationError(
                        f"Tile {tile.id!r} allows unknown neighbors "
                        f"{sorted(unknown)} for {direction.value}"
                    )
                allowed[(tile.id, direction)] = neighbor_ids
        return allowed

    def _check_symmetry(self):
        """Propagation only prunes from the collapsed side, so the relation must be symmetric."""
        for (tile_id, direction), neighbor_ids in self._allowed.items():
            opposite = direction.opposite()
            for neighbor_id in neighbor_ids:
                if tile_id not in self._allowed[(neighbor_id, opposite)]:
                    raise ConfigurationError(
                        f"Asymmetric rule: {tile_id!r} allows {neighbor_id!r} "
                        f"{direction.value}, but {neighbor_id!r} does not allow "
                        f"{tile_id!r} {opposite.value}"
                    )

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @property
    def scheme(self) -> AdjacencyScheme:
        return self._scheme

    @property
    def tiles(self) -> tuple[Tile, ...]:
        """All tiles in catalog order."""
        return self._tiles

    @property
    def tile_ids(self) -> list[TileId]:
        """All tile IDs in catalog order (a fresh list each call)."""
        return [tile.id for tile in self._tiles]

    def get(self, tile_id: str) -> Tile:
        """Get a tile by ID.

        Raises:
            KeyError: If no tile has this ID
        """
        return self._by_id[tile_id]

    def compatible(self, tile_a: Tile | str, direction: Direction, tile_b: Tile | str) -> bool:
        """Can tile_b sit on the `direction` side of tile_a?"""
        a_id = tile_a.id if isinstance(tile_a, Tile) else tile_a
        b_id = tile_b.id if isinstance(tile_b, Tile) else tile_b
        return b_id in self._allowed[(a_id, direction)]

    def allowed(self, tile_id: str, direction: Direction) -> frozenset[str]:
        """All tile IDs that may sit on the `direction` side of tile_id."""
        return self._allowed[(tile_id, direction)]

    def __len__(self) -> int:
        return len(self._tiles)

    def __iter__(self) -> Iterator[Tile]:
        return iter(self._tiles)

    def __contains__(self, tile_id: object) -> bool:
        return tile_id in self._by_id

    def __repr__(self) -> str:
        return f"TileCatalog(tiles={self.tile_ids!r}, scheme={self._scheme.value})"
