"""Tests for QuestionSelector — random and balanced draws without replacement."""

import random
from collections import Counter

import pytest

from service.catalog import CatalogIndex, QuestionRecord, flatten
from service.selector import QuestionSelector, SelectionMode


def _pool(sizes):
    """Build a pool with one bucket per category: {"A": 2, "B": 3} -> 5 records."""
    records = []
    for category, size in sizes.items():
        for i in range(size):
            records.append(QuestionRecord(f"{category}_P_{i}", category, "P", str(i)))
    return records


# ── Tests: output contract ────────────────────────────────────────────────


class TestSelectionContract:

    @pytest.mark.parametrize("mode", list(SelectionMode))
    @pytest.mark.parametrize("n", [0, 1, 3, 7, 20])
    def test_size_uniqueness_and_membership(self, mode, n):
        pool = _pool({"A": 3, "B": 1, "C": 3})
        selector = QuestionSelector(random.Random(7))

        result = selector.select(pool, n, mode)

        assert len(result) == min(n, len(pool))
        assert len({r.id for r in result}) == len(result)
        assert all(r in pool for r in result)

    @pytest.mark.parametrize("mode", list(SelectionMode))
    def test_negative_count_and_empty_pool(self, mode):
        selector = QuestionSelector(random.Random(1))

        assert selector.select(_pool({"A": 2}), -1, mode) == []
        assert selector.select([], 5, mode) == []

    def test_pool_is_not_mutated(self):
        pool = _pool({"A": 2, "B": 2})
        snapshot = list(pool)

        QuestionSelector(random.Random(3)).select(pool, 3, SelectionMode.BALANCED)
        QuestionSelector(random.Random(3)).select(pool, 3, SelectionMode.RANDOM)

        assert pool == snapshot

    def test_default_rng_when_none_given(self):
        selector = QuestionSelector()

        assert isinstance(selector.rng, random.Random)
        assert len(selector.select(_pool({"A": 3}), 2)) == 2

    def test_same_seed_same_draws(self):
        pool = _pool({"A": 5, "B": 5})

        first = QuestionSelector.from_seed("Chem|P1").select(pool, 6, SelectionMode.RANDOM)
        second = QuestionSelector.from_seed("Chem|P1").select(pool, 6, SelectionMode.RANDOM)

        assert first == second

    def test_completed_ids_never_selected(self, sample_catalog):
        index = CatalogIndex.from_catalog(sample_catalog)
        done = {"Chem_P1_2020", "Bio_P1_2019"}
        pool = index.candidates(exclude=done)

        for seed in range(20):
            result = QuestionSelector(random.Random(seed)).select(pool, 10, SelectionMode.BALANCED)
            assert not done & {r.id for r in result}


# ── Tests: balanced rotation ──────────────────────────────────────────────


class TestBalancedMode:

    def test_one_from_each_category(self):
        pool = flatten({"Chem": {"P1": ["2020"]}, "Bio": {"P1": ["2019"]}})

        result = QuestionSelector(random.Random(0)).select(pool, 2, SelectionMode.BALANCED)

        assert sorted(r.category for r in result) == ["Bio", "Chem"]

    @pytest.mark.parametrize("seed", range(10))
    def test_even_buckets_never_overdraw_one(self, seed):
        pool = _pool({"A": 2, "B": 2, "C": 2})

        result = QuestionSelector(random.Random(seed)).select(pool, 4, SelectionMode.BALANCED)
        counts = Counter(r.category for r in result)

        assert sorted(counts.values()) == [1, 1, 2]
        # first full pass visits buckets in first-appearance order
        assert [r.category for r in result[:3]] == ["A", "B", "C"]
        assert result[3].category == "A"

    def test_exhausted_bucket_leaves_rotation(self):
        pool = _pool({"A": 1, "B": 4, "C": 2})

        result = QuestionSelector(random.Random(5)).select(pool, 7, SelectionMode.BALANCED)

        assert [r.category for r in result] == ["A", "B", "C", "B", "C", "B", "B"]

    @pytest.mark.parametrize("seed", range(10))
    def test_prefix_fairness(self, seed):
        pool = _pool({"A": 4, "B": 3, "C": 4})
        result = QuestionSelector(random.Random(seed)).select(pool, 11, SelectionMode.BALANCED)

        # after k full passes over three buckets still non-empty, counts differ by at most one
        for k in range(1, 4):
            counts = Counter(r.category for r in result[:3 * k])
            assert max(counts.values()) - min(counts.values()) <= 1

    def test_pinned_category_falls_back_to_random(self):
        pool = _pool({"A": 4, "B": 4})

        balanced = QuestionSelector.from_seed("s").select(
            pool, 3, SelectionMode.BALANCED, category_pinned=True)
        plain = QuestionSelector.from_seed("s").select(pool, 3, SelectionMode.RANDOM)

        assert balanced == plain

    def test_single_bucket_matches_random(self):
        pool = _pool({"A": 6})

        balanced = QuestionSelector.from_seed("one").select(pool, 4, SelectionMode.BALANCED)
        plain = QuestionSelector.from_seed("one").select(pool, 4, SelectionMode.RANDOM)

        assert balanced == plain
