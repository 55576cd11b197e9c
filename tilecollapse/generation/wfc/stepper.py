"""
Single-step façade for host-driven use.

A host (editor button, TUI, game loop) wants three verbs: step, reset and
"am I done?". Stepper owns one Grid and one WFCSolver and forwards those
verbs to them; it keeps the collapse history so the host can redraw.
"""

from __future__ import annotations

from .grid import Grid
from .solver import CollapseEvent, Propagation, RandomSource, SolverState, WFCSolver
from .tile import TileCatalog


class Stepper:
    """Drive a WFC run one collapse at a time."""

    def __init__(
        self,
        width: int,
        height: int,
        catalog: TileCatalog,
        seed: int | None = None,
        rng: RandomSource | None = None,
        propagation: Propagation = Propagation.NEIGHBORS,
    ):
        self.grid = Grid(width, height, catalog)
        self.solver = WFCSolver(self.grid, rng=rng, seed=seed, propagation=propagation)
        self.events: list[CollapseEvent] = []
        self.solver.add_listener(self.events.append)

    @property
    def state(self) -> SolverState:
        return self.solver.refresh_state()

    def step(self) -> CollapseEvent:
        """Collapse one cell. See WFCSolver.step for the errors raised."""
        return self.solver.step()

    def simulate(self) -> SolverState:
        """Run the remaining steps to completion."""
        return self.solver.simulate()

    def reset(self, seed: int | None = None):
        """Return the grid to full superposition and clear the history."""
        self.solver.reset(seed=seed)
        self.events.clear()

    def is_complete(self) -> bool:
        return self.state == SolverState.COMPLETE
