"""Tests for the Stepper façade."""

import pytest

from tilecollapse.generation.tilesets import create_road_tileset
from tilecollapse.generation.wfc import (
    AlreadyCompleteError,
    ContradictionError,
    Grid,
    SolverState,
    Stepper,
    WFCSolver,
)


class TestStepper:
    def test_step_until_complete(self):
        stepper = Stepper(4, 3, create_road_tileset(), seed=8)
        steps = 0
        while not stepper.is_complete():
            stepper.step()
            steps += 1

        assert steps == 12
        assert stepper.grid.is_complete()
        assert stepper.state == SolverState.COMPLETE
        assert len(stepper.events) == 12

    def test_step_when_complete_raises(self, single_tile_catalog):
        stepper = Stepper(1, 1, single_tile_catalog, seed=0)
        stepper.step()
        with pytest.raises(AlreadyCompleteError):
            stepper.step()

    def test_matches_solver_with_same_seed(self):
        catalog = create_road_tileset()
        stepper = Stepper(5, 5, catalog, seed=21)
        stepper.simulate()

        grid = Grid(5, 5, catalog)
        WFCSolver(grid, seed=21).simulate()
        assert stepper.grid == grid

    def test_reset_restores_fresh_grid(self):
        catalog = create_road_tileset()
        stepper = Stepper(3, 3, catalog, seed=1)
        stepper.step()
        stepper.step()

        stepper.reset()

        assert stepper.grid == Grid(3, 3, catalog)
        assert stepper.events == []
        assert not stepper.is_complete()
        assert stepper.state == SolverState.RUNNING

    def test_reset_with_seed_replays(self):
        stepper = Stepper(4, 4, create_road_tileset(), seed=6)
        first = [stepper.step() for _ in range(5)]

        stepper.reset(seed=6)
        assert [stepper.step() for _ in range(5)] == first

    def test_contradiction_surfaces(self, clashing_catalog):
        stepper = Stepper(2, 1, clashing_catalog, seed=0)
        with pytest.raises(ContradictionError):
            stepper.step()
        assert stepper.state == SolverState.CONTRADICTION
        assert not stepper.is_complete()

    def test_grid_reset_behind_stepper(self):
        stepper = Stepper(2, 2, create_road_tileset(), seed=3)
        stepper.simulate()
        assert stepper.is_complete()

        stepper.grid.reset()

        assert not stepper.is_complete()
        assert stepper.state == SolverState.RUNNING
        stepper.simulate()
        assert stepper.grid.is_complete()
