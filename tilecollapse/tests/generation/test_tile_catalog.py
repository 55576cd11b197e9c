"""Tests for Tile and TileCatalog."""

import pytest

from tilecollapse.core import Direction
from tilecollapse.generation.wfc import (
    AdjacencyScheme,
    ConfigurationError,
    ConnectionType,
    Tile,
    TileCatalog,
    make_bidirectional_rule,
)


class TestTile:
    """Test Tile construction."""

    def test_from_sides(self):
        tile = Tile.from_sides("t", up=1, right=2, down=3, left=4)
        assert tile.socket(Direction.UP) == 1
        assert tile.socket(Direction.LEFT) == 4

    def test_string_direction_keys_are_parsed(self):
        tile = Tile(id="t", sockets={"up": "a", "Right": "b"})
        assert tile.sockets == {Direction.UP: "a", Direction.RIGHT: "b"}

    def test_neighbor_sets_default_to_empty(self):
        tile = Tile(id="t")
        for direction in Direction:
            assert tile.get_allowed_neighbors(direction) == set()

    def test_make_bidirectional_rule(self):
        """A/B rule is added on both tiles with opposite directions."""
        tiles = {"a": Tile(id="a"), "b": Tile(id="b")}
        make_bidirectional_rule(tiles, "a", "b")
        for direction in Direction:
            assert "b" in tiles["a"].get_allowed_neighbors(direction)
            assert "a" in tiles["b"].get_allowed_neighbors(direction.opposite())


class TestCatalogConstruction:
    """Test catalog validation."""

    def test_empty_catalog_rejected(self):
        with pytest.raises(ConfigurationError, match="empty"):
            TileCatalog([])

    def test_duplicate_ids_rejected(self):
        tile = Tile.from_sides("t", 0, 0, 0, 0)
        with pytest.raises(ConfigurationError, match="Duplicate"):
            TileCatalog([tile, Tile.from_sides("t", 1, 1, 1, 1)])

    def test_missing_socket_rejected(self):
        with pytest.raises(ConfigurationError, match="no socket"):
            TileCatalog([Tile(id="t", sockets={"up": 0, "right": 0, "down": 0})])

    def test_unhashable_signature_rejected(self):
        with pytest.raises(ConfigurationError, match="unhashable"):
            TileCatalog([Tile.from_sides("t", [0], [0], [0], [0])])

    def test_tag_scheme_requires_labels(self):
        with pytest.raises(ConfigurationError, match="non-label"):
            TileCatalog([Tile.from_sides("t", 1, 1, 1, 1)], scheme=AdjacencyScheme.TAG)

    def test_unknown_neighbor_rejected(self):
        tile = Tile(id="t", allowed_neighbors={"up": {"ghost"}})
        with pytest.raises(ConfigurationError, match="unknown neighbors"):
            TileCatalog([tile], scheme=AdjacencyScheme.NEIGHBORS)

    def test_asymmetric_neighbor_lists_rejected(self):
        """A allows B above it, but B does not allow A below it."""
        a = Tile(id="a", allowed_neighbors={"up": {"b"}})
        b = Tile(id="b")
        with pytest.raises(ConfigurationError, match="Asymmetric"):
            TileCatalog([a, b], scheme=AdjacencyScheme.NEIGHBORS)

    def test_asymmetry_check_can_be_disabled(self):
        a = Tile(id="a", allowed_neighbors={"up": {"b"}})
        b = Tile(id="b")
        catalog = TileCatalog([a, b], scheme=AdjacencyScheme.NEIGHBORS, validate_symmetry=False)
        assert catalog.compatible("a", Direction.UP, "b")
        assert not catalog.compatible("b", Direction.DOWN, "a")

    def test_catalog_keeps_order(self):
        tiles = [Tile.from_sides(name, 0, 0, 0, 0) for name in ("c", "a", "b")]
        catalog = TileCatalog(tiles)
        assert catalog.tile_ids == ["c", "a", "b"]
        assert [tile.id for tile in catalog] == ["c", "a", "b"]

    def test_tile_ids_is_a_fresh_list(self):
        catalog = TileCatalog([Tile.from_sides("t", 0, 0, 0, 0)])
        ids = catalog.tile_ids
        ids.append("other")
        assert catalog.tile_ids == ["t"]

    def test_later_tile_mutation_does_not_change_catalog(self):
        """The compatibility table is computed once, at construction."""
        tiles = {"a": Tile(id="a"), "b": Tile(id="b")}
        make_bidirectional_rule(tiles, "a", "a")
        make_bidirectional_rule(tiles, "b", "b")
        catalog = TileCatalog(tiles.values(), scheme=AdjacencyScheme.NEIGHBORS)

        make_bidirectional_rule(tiles, "a", "b")
        assert not catalog.compatible("a", Direction.UP, "b")


class TestSignatureScheme:
    """Signatures match side against opposite side."""

    def test_matching_sides(self):
        left = Tile.from_sides("left", up=0, right="seam", down=0, left="edge")
        right = Tile.from_sides("right", up=0, right="other", down=0, left="seam")
        catalog = TileCatalog([left, right])

        assert catalog.compatible(left, Direction.RIGHT, right)
        assert catalog.compatible(right, Direction.LEFT, left)
        assert not catalog.compatible(left, Direction.LEFT, right)

    def test_tuple_signatures(self):
        """Sampled-pixel tuples work as signatures."""
        edge = ((1, 2, 3), (4, 5, 6), (1, 2, 3))
        tile = Tile.from_sides("t", edge, edge, edge, edge)
        catalog = TileCatalog([tile])
        for direction in Direction:
            assert catalog.compatible("t", direction, "t")

    def test_allowed_lists_every_match(self):
        a = Tile.from_sides("a", 0, 1, 0, 1)
        b = Tile.from_sides("b", 0, 1, 0, 1)
        c = Tile.from_sides("c", 0, 2, 0, 2)
        catalog = TileCatalog([a, b, c])
        assert catalog.allowed("a", Direction.RIGHT) == frozenset({"a", "b"})
        assert catalog.allowed("c", Direction.UP) == frozenset({"a", "b", "c"})


class TestTagScheme:
    """Tags compare like signatures; ConnectionType names are interchangeable with strings."""

    def test_string_tags_match_enum_tags(self):
        a = Tile.from_sides("a", "blank", "street", "blank", "blank")
        b = Tile.from_sides(
            "b",
            ConnectionType.BLANK, ConnectionType.BLANK,
            ConnectionType.BLANK, ConnectionType.STREET,
        )
        catalog = TileCatalog([a, b], scheme=AdjacencyScheme.TAG)
        assert catalog.compatible("a", Direction.RIGHT, "b")
        assert catalog.compatible("b", Direction.LEFT, "a")

    def test_custom_labels(self):
        a = Tile.from_sides("a", "river", "river", "river", "river")
        b = Tile.from_sides("b", "road", "road", "road", "road")
        catalog = TileCatalog([a, b], scheme=AdjacencyScheme.TAG)
        assert catalog.compatible("a", Direction.UP, "a")
        assert not catalog.compatible("a", Direction.UP, "b")


class TestNeighborScheme:
    """Explicit allowed-neighbor lists."""

    def test_lists_are_used_directly(self, checker_catalog):
        for direction in Direction:
            assert checker_catalog.compatible("black", direction, "white")
            assert not checker_catalog.compatible("black", direction, "black")


class TestSymmetry:
    """Every derived relation must satisfy compatible(A,d,B) == compatible(B,opposite(d),A)."""

    @pytest.mark.parametrize("scheme_catalog", ["single_tile_catalog", "clashing_catalog", "checker_catalog"])
    def test_relation_is_symmetric(self, scheme_catalog, request):
        catalog = request.getfixturevalue(scheme_catalog)
        for a in catalog.tile_ids:
            for b in catalog.tile_ids:
                for direction in Direction:
                    assert catalog.compatible(a, direction, b) == catalog.compatible(
                        b, direction.opposite(), a
                    )


class TestCatalogQueries:
    def test_len_contains_get(self, clashing_catalog):
        assert len(clashing_catalog) == 2
        assert "a" in clashing_catalog
        assert "z" not in clashing_catalog
        assert clashing_catalog.get("b").id == "b"

    def test_unknown_tile_raises_key_error(self, clashing_catalog):
        with pytest.raises(KeyError):
            clashing_catalog.get("z")
