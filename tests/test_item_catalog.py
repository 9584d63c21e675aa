"""
Tests for the item catalog and weighted selection.
"""

import dataclasses
import random
from collections import Counter

import pytest

from fruit_catcher.catcher_core.config_loader import load_config
from fruit_catcher.catcher_core.item_catalog import ItemCatalog, pick_weighted


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def catalog(config):
    return ItemCatalog(config)


class TestPickWeighted:
    """Test cumulative weighted selection."""

    def test_frequencies_converge_to_weights(self):
        """100k draws over [60, 30, 10] land within 2% of 60/30/10."""
        rng = random.Random(1234)
        kinds = ["apple", "orange", "bomb"]
        weights = [60, 30, 10]
        draws = 100_000

        counts = Counter(pick_weighted(kinds, rng.random(), weights) for _ in range(draws))

        assert counts["apple"] / draws == pytest.approx(0.60, abs=0.02)
        assert counts["orange"] / draws == pytest.approx(0.30, abs=0.02)
        assert counts["bomb"] / draws == pytest.approx(0.10, abs=0.02)

    def test_boundary_goes_to_next_entry(self):
        """A draw exactly on a cumulative boundary belongs to the next entry."""
        kinds = ["a", "b", "c"]
        weights = [2, 1, 1]

        assert pick_weighted(kinds, 0.0, weights) == "a"
        assert pick_weighted(kinds, 0.25, weights) == "a"
        assert pick_weighted(kinds, 0.5, weights) == "b"
        assert pick_weighted(kinds, 0.75, weights) == "c"

    def test_top_of_range_returns_last(self):
        """A draw just below 1.0 resolves to the last entry."""
        kinds = ["a", "b", "c"]
        assert pick_weighted(kinds, 0.9999999999, [60, 30, 10]) == "c"

    def test_zero_weight_entry_never_chosen(self):
        """Zero-weight entries are never picked."""
        rng = random.Random(7)
        kinds = ["a", "never", "b"]
        for _ in range(2000):
            assert pick_weighted(kinds, rng.random(), [1, 0, 1]) != "never"

    def test_draw_out_of_range(self):
        """Draws outside [0, 1) should raise."""
        with pytest.raises(ValueError):
            pick_weighted(["a"], 1.0, [1])
        with pytest.raises(ValueError):
            pick_weighted(["a"], -0.1, [1])

    def test_unusable_tables(self):
        """Empty, negative or zero-total tables should raise."""
        with pytest.raises(ValueError):
            pick_weighted([], 0.5, [])
        with pytest.raises(ValueError):
            pick_weighted(["a", "b"], 0.5, [0, 0])
        with pytest.raises(ValueError):
            pick_weighted(["a", "b"], 0.5, [1])


class TestItemCatalog:
    """Test the catalog built from config."""

    def test_reference_table(self, catalog):
        """Shipped catalog has two good items and one hazard."""
        assert len(catalog) == 3
        assert catalog.total_weight == 100
        positives = [kind for kind in catalog if kind.score_delta > 0]
        hazards = [kind for kind in catalog if kind.is_hazard]
        assert len(positives) == 2
        assert [kind.id for kind in hazards] == ["bomb"]

    def test_kind_properties(self, catalog):
        """ItemKind exposes the configured values."""
        apple = catalog.get("apple")
        assert apple.score_delta == 100
        assert apple.base_speed == 2
        assert apple.spawn_weight == 60
        assert apple.icon

    def test_lookup(self, catalog):
        """Lookup by ID is case-insensitive; bad indices raise."""
        assert catalog.get("APPLE") is catalog[0]
        assert catalog.get("banana") is None
        assert catalog.index_of(catalog.get("bomb")) == 2
        with pytest.raises(IndexError):
            catalog[3]

    def test_pick_uses_spawn_weights(self, catalog):
        """Catalog pick follows the cumulative weight boundaries."""
        assert catalog.pick(0.0).id == "apple"
        assert catalog.pick(0.65).id == "orange"
        assert catalog.pick(0.95).id == "bomb"

    def test_empty_catalog_fails_fast(self, config):
        """An empty item table is rejected at construction."""
        with pytest.raises(ValueError):
            ItemCatalog(dataclasses.replace(config, items=()))

    def test_all_zero_weights_fail_fast(self, config):
        """A zero total weight is rejected at construction."""
        items = tuple(dataclasses.replace(item, weight=0) for item in config.items)
        with pytest.raises(ValueError):
            ItemCatalog(dataclasses.replace(config, items=items))

    def test_negative_weight_fails_fast(self, config):
        """A negative weight is rejected at construction."""
        items = (dataclasses.replace(config.items[0], weight=-1),) + config.items[1:]
        with pytest.raises(ValueError):
            ItemCatalog(dataclasses.replace(config, items=items))
