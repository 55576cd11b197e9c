"""
Tile generation using Wave Function Collapse.

This module provides the main entry point for filling a grid from a tile
catalog. The solver itself never backtracks; this driver is the recovery
policy: on contradiction it throws the grid away and starts over with a
fresh one, up to a retry limit.
"""

from __future__ import annotations

import logging
import random
from typing import Callable

from tilecollapse.core.types import Position
from tilecollapse.logging_config import log_attempt
from .wfc import ContradictionError, Grid, Propagation, TileCatalog, WFCSolver

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Exceptions
# -----------------------------------------------------------------------------


class GenerationError(RuntimeError):
    """Every attempt ended in a contradiction."""

    def __init__(self, message: str, attempts: int):
        super().__init__(message)
        self.attempts = attempts


def generate_tiles(
    catalog: TileCatalog,
    width: int,
    height: int,
    seed: int | None = None,
    max_retries: int = 10,
    propagation: Propagation = Propagation.NEIGHBORS,
    progress_callback: Callable[[int, int], None] | None = None,
) -> Grid:
    """
    Generate a fully collapsed grid.

    Args:
        catalog: Tiles and their compatibility rules
        width: Grid width in cells
        height: Grid height in cells
        seed: Random seed for reproducibility (None = random)
        max_retries: Max attempts before giving up (WFC can hit contradictions)
        propagation: Constraint propagation mode passed to the solver
        progress_callback: Optional callback(collapsed, total_cells) after each step

    Returns:
        The collapsed Grid

    Raises:
        ConfigurationError: If the grid dimensions are invalid
        GenerationError: If every attempt ended in a contradiction
    """
    if max_retries < 1:
        raise ValueError(f"max_retries must be at least 1, got {max_retries}")

    # One stream for all attempts, so each restart continues where the last left off
    rng = random.Random(seed)
    total_cells = width * height
    last_error: ContradictionError | None = None

    for attempt in range(1, max_retries + 1):
        # Create fresh grid for each attempt
        grid = Grid(width, height, catalog)
        solver = WFCSolver(grid, rng=rng, propagation=propagation)
        log_attempt(logger, attempt, max_retries, "START", f"{width}x{height} | seed={seed}")

        if progress_callback is not None:
            solver.add_listener(lambda _event: progress_callback(solver.collapsed_count, total_cells))

        try:
            solver.simulate()
        except ContradictionError as e:
            last_error = e
            log_attempt(
                logger, attempt, max_retries, "FAILED",
                f"contradiction at ({e.position.x}, {e.position.y}) after {solver.step_count} steps",
            )
            continue

        log_attempt(logger, attempt, max_retries, "OK", f"steps={solver.step_count}")
        return grid

    raise GenerationError(
        f"Tile generation failed after {max_retries} attempts. "
        "Try a different seed, a larger retry budget, or full propagation.",
        attempts=max_retries,
    ) from last_error


def generate_tile_map(
    catalog: TileCatalog,
    width: int,
    height: int,
    seed: int | None = None,
    **kwargs,
) -> dict[Position, str]:
    """
    Generate tiles as a position -> tile ID mapping.

    This is a convenience wrapper over generate_tiles() for callers that do
    not need the Grid object.

    Args:
        catalog: Tiles and their compatibility rules
        width: Grid width in cells
        height: Grid height in cells
        seed: Random seed for reproducibility
        **kwargs: Additional arguments passed to generate_tiles()

    Returns:
        Dict mapping every Position to its tile ID
    """
    grid = generate_tiles(catalog, width, height, seed, **kwargs)
    return {cell.position: cell.tile_id for cell in grid.all_cells()}
