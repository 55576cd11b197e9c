"""
Grid representation for Wave Function Collapse.

The Grid is the "wave function" - a 2D array of cells where each cell
is in superposition (multiple candidate tiles) until it collapses to a
single definite tile.

Cells are stored row-major in one flat list and addressed by index, so
every cell owns its own candidate list and no two cells ever share one.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING, Iterator

from tilecollapse.core.types import Direction, Position, TileId
from .errors import ConfigurationError

if TYPE_CHECKING:
    from .tile import TileCatalog


class CellState(Enum):
    """Lifecycle of a single cell."""
    UNRESOLVED = auto()    # Still has candidates to choose from
    COLLAPSED = auto()     # Fixed to exactly one tile
    CONTRADICTED = auto()  # Candidates pruned to nothing


@dataclass
class Cell:
    """
    A single cell in the WFC grid.

    Before collapse: `candidates` holds the possible tile IDs (catalog order).
    There is no default; Grid fills every cell from the catalog.
    After collapse: `tile_id` holds the chosen tile and `candidates` is None
    On contradiction: `candidates` is empty and `tile_id` is None

    The "entropy" of a cell is how uncertain we are about it.
    Lower entropy = fewer candidates = more constrained.
    """
    x: int
    y: int
    candidates: list[TileId] | None
    tile_id: TileId | None = None

    @property
    def position(self) -> Position:
        return Position(self.x, self.y)

    @property
    def state(self) -> CellState:
        if self.tile_id is not None:
            return CellState.COLLAPSED
        if self.candidates:
            return CellState.UNRESOLVED
        return CellState.CONTRADICTED

    @property
    def collapsed(self) -> bool:
        return self.tile_id is not None

    @property
    def unresolved(self) -> bool:
        return self.tile_id is None and bool(self.candidates)

    @property
    def contradicted(self) -> bool:
        return self.tile_id is None and not self.candidates

    @property
    def entropy(self) -> int:
        """Number of remaining candidates (0 once collapsed or contradicted)."""
        return len(self.candidates) if self.candidates else 0

    def collapse_to(self, tile_id: TileId):
        """Fix this cell to a specific tile and discard its candidates."""
        self.tile_id = tile_id
        self.candidates = None

    def constrain_to(self, allowed: frozenset[str] | set[str]) -> bool:
        """
        Keep only the candidates in `allowed`, preserving their order.

        Returns True if the cell changed (lost candidates).
        """
        if self.candidates is None:
            return False
        kept = [tile_id for tile_id in self.candidates if tile_id in allowed]
        changed = len(kept) < len(self.candidates)
        self.candidates = kept
        return changed


class Grid:
    """
    The 2D grid of cells representing the wave function.

    Initially every cell can be any tile in the catalog (maximum superposition).
    The solver mutates cells in place until every cell has collapsed or one
    of them runs out of candidates.
    """

    def __init__(self, width: int, height: int, catalog: TileCatalog):
        """
        Create a grid with all cells in maximum superposition.

        Args:
            width: Number of cells horizontally
            height: Number of cells vertically
            catalog: Tile catalog; every cell starts with all of its tile IDs

        Raises:
            ConfigurationError: If width or height is not a positive integer
        """
        for name, value in (("width", width), ("height", height)):
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ConfigurationError(f"Grid {name} must be a positive integer, got {value!r}")

        self.width = width
        self.height = height
        self.catalog = catalog

        # Row-major: cells[x + y * width]
        self.cells: list[Cell] = [
            Cell(x=x, y=y, candidates=catalog.tile_ids)
            for y in range(height)
            for x in range(width)
        ]

    def __len__(self) -> int:
        return len(self.cells)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Grid):
            return NotImplemented
        return (
            self.width == other.width
            and self.height == other.height
            and self.catalog.tile_ids == other.catalog.tile_ids
            and self.cells == other.cells
        )

    def __repr__(self) -> str:
        return f"Grid(width={self.width}, height={self.height}, tiles={len(self.catalog)})"

    # -------------------------------------------------------------------------
    # Addressing
    # -------------------------------------------------------------------------

    def index(self, x: int, y: int) -> int:
        """Flat index of (x, y). Bounds are the caller's responsibility."""
        return x + y * self.width

    def in_bounds(self, position: Position) -> bool:
        return 0 <= position.x < self.width and 0 <= position.y < self.height

    def get_cell(self, x: int, y: int) -> Cell | None:
        """Get cell at position, or None if out of bounds."""
        if 0 <= x < self.width and 0 <= y < self.height:
            return self.cells[self.index(x, y)]
        return None

    def cell_at(self, position: Position) -> Cell:
        """Get the cell at an in-bounds position.

        Raises:
            IndexError: If the position is outside the grid
        """
        cell = self.get_cell(position.x, position.y)
        if cell is None:
            raise IndexError(f"Position {tuple(position)} outside {self.width}x{self.height} grid")
        return cell

    def neighbor(self, position: Position, direction: Direction) -> Position | None:
        """Position one step in `direction`, or None if that falls off the grid."""
        target = position + direction
        if self.in_bounds(target):
            return target
        return None

    def neighbors(self, cell: Cell) -> Iterator[tuple[Cell, Direction]]:
        """
        Yield all in-bounds neighbors of a cell with their directions.

        Direction is FROM the input cell TO the neighbor, in UP, RIGHT,
        DOWN, LEFT order.
        """
        for direction in Direction:
            neighbor = self.get_cell(cell.x + direction.dx, cell.y + direction.dy)
            if neighbor is not None:
                yield neighbor, direction

    # -------------------------------------------------------------------------
    # Whole-grid queries
    # -------------------------------------------------------------------------

    def all_cells(self) -> Iterator[Cell]:
        """Iterate over all cells in row-major order."""
        return iter(self.cells)

    def unresolved_cells(self) -> list[Cell]:
        return [cell for cell in self.cells if cell.unresolved]

    def contradictions(self) -> list[Position]:
        """Positions of every contradicted cell."""
        return [cell.position for cell in self.cells if cell.contradicted]

    def is_complete(self) -> bool:
        """Check if all cells have collapsed."""
        return all(cell.collapsed for cell in self.cells)

    def collapsed_count(self) -> int:
        return sum(1 for cell in self.cells if cell.collapsed)

    def tile_map(self) -> dict[Position, TileId | CellState | None]:
        """
        Final grid state: the tile ID per position.

        A contradicted cell maps to CellState.CONTRADICTED and a cell that
        is still unresolved maps to None.
        """
        return {
            cell.position: CellState.CONTRADICTED if cell.contradicted else cell.tile_id
            for cell in self.cells
        }

    def rows(self) -> list[list[Cell]]:
        """Cells grouped by row, top row (y = height - 1) first."""
        return [
            self.cells[y * self.width:(y + 1) * self.width]
            for y in reversed(range(self.height))
        ]

    def reset(self):
        """Reset all cells to maximum superposition."""
        tile_ids = self.catalog.tile_ids
        for cell in self.cells:
            cell.candidates = list(tile_ids)
            cell.tile_id = None
