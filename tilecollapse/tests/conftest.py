"""Shared test fixtures for tilecollapse."""

import tempfile
from pathlib import Path

import pytest

from tilecollapse.generation.wfc import AdjacencyScheme, Tile, TileCatalog


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "slow: marks tests as slow (skipped by default, run with --run-slow)")


def pytest_addoption(parser):
    """Add --run-slow option to pytest."""
    parser.addoption(
        "--run-slow",
        action="store_true",
        default=False,
        help="Run slow tests (skipped by default)",
    )


def pytest_collection_modifyitems(config, items):
    """Skip slow tests unless --run-slow is passed."""
    if config.getoption("--run-slow"):
        return

    skip_slow = pytest.mark.skip(reason="Slow test (use --run-slow to run)")
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip_slow)


class ForbiddenRandom:
    """Random source that fails the test if it is ever drawn from."""

    def randrange(self, stop: int) -> int:
        raise AssertionError(f"randomness consumed (randrange({stop}))")


class ScriptedRandom:
    """Random source that replays fixed answers and records every call."""

    def __init__(self, answers: list[int]):
        self.answers = list(answers)
        self.calls: list[int] = []

    def randrange(self, stop: int) -> int:
        self.calls.append(stop)
        answer = self.answers.pop(0)
        assert 0 <= answer < stop, f"scripted answer {answer} not in [0, {stop})"
        return answer


@pytest.fixture
def forbidden_rng() -> ForbiddenRandom:
    return ForbiddenRandom()


@pytest.fixture
def scripted_rng():
    """Factory: scripted_rng([0, 2, 1]) -> ScriptedRandom."""
    return ScriptedRandom


@pytest.fixture
def temp_data_dir() -> Path:
    """Create a temporary data directory for tests."""
    with tempfile.TemporaryDirectory(prefix="tilecollapse_test_") as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def single_tile_catalog() -> TileCatalog:
    """One tile that matches itself on every side."""
    return TileCatalog([Tile.from_sides("only", up=0, right=0, down=0, left=0)])


@pytest.fixture
def clashing_catalog() -> TileCatalog:
    """
    Two tiles that can never sit side by side horizontally.

    A's right side never matches B's left side (and vice versa), and
    neither tile matches itself horizontally either, so any 1x2 row is
    a contradiction as soon as one cell collapses.
    """
    return TileCatalog([
        Tile.from_sides("a", up="x", right="a_r", down="x", left="a_l"),
        Tile.from_sides("b", up="x", right="b_r", down="x", left="b_l"),
    ])


@pytest.fixture
def checker_catalog() -> TileCatalog:
    """Black and white tiles that may only touch the other colour."""
    return TileCatalog(
        [
            Tile(id="black", allowed_neighbors={d: {"white"} for d in ("up", "right", "down", "left")}),
            Tile(id="white", allowed_neighbors={d: {"black"} for d in ("up", "right", "down", "left")}),
        ],
        scheme=AdjacencyScheme.NEIGHBORS,
    )
