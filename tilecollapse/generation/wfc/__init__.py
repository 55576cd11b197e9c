"""Wave Function Collapse algorithm for tile generation."""

from .errors import WFCError, ConfigurationError, ContradictionError, AlreadyCompleteError
from .tile import Tile, TileCatalog, AdjacencyScheme, ConnectionType, make_bidirectional_rule
from .grid import Grid, Cell, CellState
from .solver import WFCSolver, SolverState, Propagation, CollapseEvent, RandomSource
from .stepper import Stepper

__all__ = [
    "WFCError",
    "ConfigurationError",
    "ContradictionError",
    "AlreadyCompleteError",
    "Tile",
    "TileCatalog",
    "AdjacencyScheme",
    "ConnectionType",
    "make_bidirectional_rule",
    "Grid",
    "Cell",
    "CellState",
    "WFCSolver",
    "SolverState",
    "Propagation",
    "CollapseEvent",
    "RandomSource",
    "Stepper",
]
