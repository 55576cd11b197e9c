"""
Wave Function Collapse solver.

This is the heart of WFC - the algorithm that observes (collapses) cells
and propagates constraints until the entire grid is determined.

The algorithm:
1. Find the cell with lowest entropy (fewest candidates); ties are broken
   uniformly at random
2. Collapse it to one of its candidates (uniform random choice)
3. Propagate: prune neighbors' candidates that are incompatible with it
4. Repeat until complete or contradiction

There is no backtracking. A contradiction is terminal for the solve
attempt and is reported as ContradictionError; restarting is the caller's
decision (see generation.generate).

All randomness comes from an injected source, so a fixed seed and a fixed
starting grid always reproduce the same run.
"""

from __future__ import annotations

import logging
import random
from collections import deque
from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable, Protocol

from tilecollapse.core.types import Direction, Position, TileId
from tilecollapse.logging_config import log_contradiction, log_step
from .errors import AlreadyCompleteError, ContradictionError
from .grid import Cell, Grid

logger = logging.getLogger(__name__)


class SolverState(Enum):
    """The current state of the WFC solver."""
    RUNNING = auto()        # Still solving, more steps needed
    COMPLETE = auto()       # All cells collapsed successfully
    CONTRADICTION = auto()  # Some cell ended up with 0 candidates


class Propagation(Enum):
    """How far constraints travel after a collapse."""
    NEIGHBORS = "neighbors"  # Only the four direct neighbors are pruned
    FULL = "full"            # Keep pruning outward while cells keep changing


class RandomSource(Protocol):
    """Anything that yields uniform integers in [0, n). random.Random fits."""

    def randrange(self, stop: int) -> int: ...


@dataclass(frozen=True)
class CollapseEvent:
    """A cell that was just collapsed, for renderers and other observers."""
    position: Position
    tile_id: TileId
    step: int


CollapseListener = Callable[[CollapseEvent], None]


class WFCSolver:
    """
    The WFC algorithm implementation.

    Usage:
        solver = WFCSolver(grid, seed=42)
        while not grid.is_complete():
            event = solver.step()

    Or for bulk solving:
        solver.simulate()  # Returns SolverState.COMPLETE or raises ContradictionError
    """

    def __init__(
        self,
        grid: Grid,
        rng: RandomSource | None = None,
        seed: int | None = None,
        propagation: Propagation = Propagation.NEIGHBORS,
        on_collapse: CollapseListener | None = None,
    ):
        """
        Initialize the solver.

        Args:
            grid: The Grid to solve (normally in its initial superposition state)
            rng: Random source to draw from. Mutually exclusive with seed.
            seed: Seed for a private random.Random when no rng is given
            propagation: NEIGHBORS (direct neighbors only) or FULL
            on_collapse: Optional callback invoked with every CollapseEvent
        """
        if rng is not None and seed is not None:
            raise ValueError("Pass either rng or seed, not both")

        self.grid = grid
        self.catalog = grid.catalog
        self.rng: RandomSource = rng if rng is not None else random.Random(seed)
        self.propagation = Propagation(propagation)
        self.step_count = 0

        # The last collapsed cell (for visualization/debugging)
        self.last_collapsed: Cell | None = None

        # Cells modified in last propagation (for visualization/debugging)
        self.last_propagated: set[Position] = set()

        self._listeners: list[CollapseListener] = []
        if on_collapse is not None:
            self._listeners.append(on_collapse)

        self._collapsed_count = 0
        self.contradiction: Position | None = None
        self.state = SolverState.RUNNING
        self.refresh_state()

    def refresh_state(self) -> SolverState:
        """
        Re-derive progress from the grid.

        The grid may have been edited or reset directly (a host Reset
        button calls grid.reset()). step() and simulate() call this first.
        """
        self._collapsed_count = self.grid.collapsed_count()
        contradictions = self.grid.contradictions()
        if contradictions:
            if self.contradiction not in contradictions:
                self.contradiction = contradictions[0]
            self.state = SolverState.CONTRADICTION
        else:
            self.contradiction = None
            if self._collapsed_count == len(self.grid):
                self.state = SolverState.COMPLETE
            else:
                self.state = SolverState.RUNNING
        return self.state

    @property
    def collapsed_count(self) -> int:
        """Number of cells that have been collapsed."""
        return self._collapsed_count

    def add_listener(self, listener: CollapseListener):
        """Register a callback for every future CollapseEvent."""
        self._listeners.append(listener)

    # -------------------------------------------------------------------------
    # Observe
    # -------------------------------------------------------------------------

    def select_next_candidate(self) -> Cell:
        """
        Find the unresolved cell with minimum entropy (fewest candidates).

        When there are ties, pick one uniformly at random. Always picking the
        first in row-major order would bias the output toward one corner.

        Raises:
            AlreadyCompleteError: If no unresolved cell remains
        """
        min_entropy: int | None = None
        candidates: list[Cell] = []

        for cell in self.grid.cells:
            if not cell.unresolved:
                continue

            entropy = cell.entropy
            if min_entropy is None or entropy < min_entropy:
                min_entropy = entropy
                candidates = [cell]
            elif entropy == min_entropy:
                candidates.append(cell)

        if not candidates:
            raise AlreadyCompleteError("No unresolved cell left to collapse")

        return candidates[self.rng.randrange(len(candidates))]

    def collapse(self, cell: Cell) -> TileId:
        """
        Collapse a cell to a single tile.

        A cell with one candidate takes it without drawing from the random
        source; otherwise the choice is uniform over the candidates.
        Collapsing an already collapsed cell returns its tile unchanged.

        Raises:
            ContradictionError: If the cell has no candidates left
        """
        if cell.collapsed:
            return cell.tile_id

        if cell.contradicted:
            self._fail(cell.position)

        if len(cell.candidates) == 1:
            chosen = cell.candidates[0]
        else:
            chosen = cell.candidates[self.rng.randrange(len(cell.candidates))]

        cell.collapse_to(chosen)
        self._collapsed_count += 1
        return chosen

    # -------------------------------------------------------------------------
    # Propagate
    # -------------------------------------------------------------------------

    def propagate(self, cell: Cell) -> set[Position]:
        """
        Prune the neighbors of `cell` down to tiles compatible with it.

        In NEIGHBORS mode only the four direct neighbors are touched. In FULL
        mode every neighbor that lost a candidate is queued and pruned from
        in turn, until nothing changes.

        Returns the positions of the cells that lost candidates. Running it a
        second time from the same cell changes nothing.

        Raises:
            ContradictionError: If a neighbor is left with no candidates
        """
        self.last_propagated = set()

        if self.propagation == Propagation.NEIGHBORS:
            self._reduce_neighbors(cell)
            return set(self.last_propagated)

        queue: deque[Cell] = deque([cell])
        in_queue: set[Position] = {cell.position}

        while queue:
            current = queue.popleft()
            in_queue.discard(current.position)

            for neighbor in self._reduce_neighbors(current):
                if neighbor.position not in in_queue:
                    queue.append(neighbor)
                    in_queue.add(neighbor.position)

        return set(self.last_propagated)

    def _reduce_neighbors(self, cell: Cell) -> list[Cell]:
        """Constrain each unresolved neighbor; return the ones that changed."""
        changed: list[Cell] = []

        for neighbor, direction in self.grid.neighbors(cell):
            if not neighbor.unresolved:
                continue

            allowed = self._get_allowed_neighbors(cell, direction)
            if not neighbor.constrain_to(allowed):
                continue

            self.last_propagated.add(neighbor.position)

            if neighbor.contradicted:
                self._fail(neighbor.position)

            changed.append(neighbor)

        return changed

    def _get_allowed_neighbors(self, cell: Cell, direction: Direction) -> frozenset[str]:
        """
        Get all tile IDs allowed adjacent to cell in the given direction.

        For an unresolved cell this unions the allowed neighbors of all tiles
        it could still be.
        """
        if cell.collapsed:
            return self.catalog.allowed(cell.tile_id, direction)

        allowed: set[str] = set()
        for tile_id in cell.candidates or ():
            allowed |= self.catalog.allowed(tile_id, direction)
        return frozenset(allowed)

    def _fail(self, position: Position):
        self.state = SolverState.CONTRADICTION
        self.contradiction = position
        log_contradiction(logger, self.step_count, position)
        raise ContradictionError(position)

    # -------------------------------------------------------------------------
    # Drive
    # -------------------------------------------------------------------------

    def step(self) -> CollapseEvent:
        """
        Perform one select -> collapse -> propagate cycle.

        Returns the CollapseEvent for the cell collapsed in this step.

        Raises:
            AlreadyCompleteError: If no unresolved cell remains
            ContradictionError: If propagation empties a neighbor, or if the
                                solver already hit a contradiction
        """
        if self.refresh_state() == SolverState.CONTRADICTION:
            raise ContradictionError(self.contradiction)

        try:
            cell = self.select_next_candidate()
        except AlreadyCompleteError:
            self.state = SolverState.COMPLETE
            raise

        tile_id = self.collapse(cell)
        self.step_count += 1
        self.last_collapsed = cell

        event = CollapseEvent(position=cell.position, tile_id=tile_id, step=self.step_count)
        log_step(logger, self.step_count, cell.position, tile_id, remaining=len(self.grid) - self._collapsed_count)
        for listener in self._listeners:
            listener(event)

        self.propagate(cell)

        if self._collapsed_count == len(self.grid):
            self.state = SolverState.COMPLETE

        return event

    def simulate(self) -> SolverState:
        """
        Run the solver to completion.

        Returns SolverState.COMPLETE once every cell has collapsed.

        Raises:
            ContradictionError: As soon as a cell runs out of candidates. The
                                solver stays in CONTRADICTION and
                                `self.contradiction` holds the position.
        """
        if self.refresh_state() == SolverState.CONTRADICTION:
            raise ContradictionError(self.contradiction)

        while self.state == SolverState.RUNNING:
            self.step()

        logger.debug(f"Simulation complete | steps={self.step_count} | cells={len(self.grid)}")
        return self.state

    def reset(self, seed: int | None = None):
        """Reset the solver and grid for a new generation.

        Args:
            seed: If given, replace the random source with random.Random(seed)
        """
        self.grid.reset()
        if seed is not None:
            self.rng = random.Random(seed)
        self.step_count = 0
        self.last_collapsed = None
        self.last_propagated = set()
        self._collapsed_count = 0
        self.contradiction = None
        self.state = SolverState.RUNNING
