"""Run configuration for tilecollapse.

A run is described by a YAML file:

    width: 24
    height: 12
    seed: 7
    propagation: neighbors     # or "full"
    tiles:
      - id: blank
        symbol: " "
        tags: {up: blank, right: blank, down: blank, left: blank}
      - id: road_rl
        symbol: "─"
        tags: {up: blank, right: street, down: blank, left: street}

Each tile carries exactly one kind of descriptor: `sockets` (signature
scheme), `tags` (tag scheme) or `neighbors` (neighbor-list scheme), and all
tiles in a file must use the same kind. Alternatively `tileset:` names one
of the built-in tilesets instead of listing tiles.

This module is the only place that reads files; the WFC core only ever
sees the in-memory Tile records built here.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from tilecollapse.core.types import Direction
from tilecollapse.generation.tilesets import TILESETS, TileStyle, get_tileset
from tilecollapse.generation.wfc import AdjacencyScheme, ConfigurationError, Propagation, Tile, TileCatalog


def _freeze(value: Any) -> Any:
    """YAML gives lists; signatures must be hashable, so lists become tuples."""
    if isinstance(value, list):
        return tuple(_freeze(v) for v in value)
    return value


class TileConfig(BaseModel):
    """A single tile as written in a run configuration."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    symbol: str = "?"
    color: str = "white"

    # Exactly one of these must be set
    sockets: dict[Direction, Any] | None = None
    tags: dict[Direction, str] | None = None
    neighbors: dict[Direction, list[str]] | None = None

    @field_validator("sockets", "tags", "neighbors", mode="before")
    @classmethod
    def _normalize_direction_keys(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return {
                (k.strip().lower() if isinstance(k, str) else k): v
                for k, v in value.items()
            }
        return value

    @model_validator(mode="after")
    def _exactly_one_descriptor(self) -> TileConfig:
        present = [
            name for name in ("sockets", "tags", "neighbors")
            if getattr(self, name) is not None
        ]
        if len(present) != 1:
            raise ValueError(
                f"tile {self.id!r} must define exactly one of sockets, tags, "
                f"neighbors (got {present or 'none'})"
            )
        return self

    @property
    def scheme(self) -> AdjacencyScheme:
        if self.sockets is not None:
            return AdjacencyScheme.SIGNATURE
        if self.tags is not None:
            return AdjacencyScheme.TAG
        return AdjacencyScheme.NEIGHBORS

    def to_tile(self) -> Tile:
        """Build the in-memory Tile record."""
        if self.sockets is not None:
            return Tile(id=self.id, sockets={d: _freeze(v) for d, v in self.sockets.items()})
        if self.tags is not None:
            return Tile(id=self.id, sockets=dict(self.tags))
        return Tile(id=self.id, allowed_neighbors={d: set(ids) for d, ids in self.neighbors.items()})


class RunConfig(BaseModel):
    """Everything needed for one generation run."""

    model_config = ConfigDict(frozen=True)

    width: int = Field(default=16, gt=0)
    height: int = Field(default=16, gt=0)
    seed: int | None = None
    max_retries: int = Field(default=10, ge=1)
    propagation: Propagation = Propagation.NEIGHBORS
    validate_symmetry: bool = True

    # Either a built-in tileset name or an explicit tile list
    tileset: str | None = None
    tiles: tuple[TileConfig, ...] = ()

    @model_validator(mode="after")
    def _tiles_or_tileset(self) -> RunConfig:
        if self.tileset is not None and self.tiles:
            raise ValueError("set either tileset or tiles, not both")
        if self.tileset is None and not self.tiles:
            raise ValueError("one of tileset or tiles is required")
        if self.tileset is not None and self.tileset not in TILESETS:
            raise ValueError(f"unknown tileset {self.tileset!r}; choose from {sorted(TILESETS)}")

        schemes = {tile.scheme for tile in self.tiles}
        if len(schemes) > 1:
            raise ValueError(
                f"tiles mix descriptor schemes: {sorted(s.value for s in schemes)}"
            )
        return self

    @property
    def scheme(self) -> AdjacencyScheme:
        if self.tileset is not None:
            return TILESETS[self.tileset][0]().scheme
        return self.tiles[0].scheme

    def build_catalog(self) -> TileCatalog:
        """Build the TileCatalog (raises ConfigurationError on bad rules)."""
        if self.tileset is not None:
            catalog, _ = get_tileset(self.tileset)
            return catalog
        return TileCatalog(
            [tile.to_tile() for tile in self.tiles],
            scheme=self.tiles[0].scheme,
            validate_symmetry=self.validate_symmetry,
        )

    def styles(self) -> dict[str, TileStyle]:
        """(symbol, color) per tile ID for rendering."""
        if self.tileset is not None:
            _, styles = get_tileset(self.tileset)
            return styles
        return {tile.id: (tile.symbol, tile.color) for tile in self.tiles}


def load_config(path: Path | str) -> RunConfig:
    """
    Load and validate a run configuration from YAML.

    Args:
        path: Path to the YAML file

    Returns:
        The validated RunConfig

    Raises:
        ConfigurationError: If the file is missing, is not valid YAML, or
                            fails validation
    """
    config_path = Path(path)
    if not config_path.exists():
        raise ConfigurationError(f"Config file not found: {config_path}")

    try:
        with open(config_path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"{config_path} must contain a mapping at the top level")

    try:
        return RunConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid config {config_path}:\n{e}") from e
