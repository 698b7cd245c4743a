"""Tests for multipr.resolver -- dependency ordering and cycle breaking."""

from __future__ import annotations

import random

import pytest

from multipr.exceptions import CycleDetectedError
from multipr.resolver import DependencyResolver, topological_order
from multipr.types import Bucket
from tests.helpers.factories import make_bucket


def _assert_valid_order(order: list[str], buckets: list[Bucket]) -> None:
    by_name = {b.name: b for b in buckets}
    assert sorted(order) == sorted(by_name)
    position = {name: i for i, name in enumerate(order)}
    for bucket in buckets:
        if bucket.depends_on in by_name:
            assert position[bucket.depends_on] < position[bucket.name]


class TestTopologicalOrder:
    """Tests for the raw three-colour sort."""

    def test_independent_buckets_keep_insertion_order(self) -> None:
        buckets = [make_bucket("c"), make_bucket("a"), make_bucket("b")]
        assert topological_order(buckets) == ["c", "a", "b"]

    def test_dependency_comes_first(self) -> None:
        buckets = [make_bucket("ui", depends_on="api"), make_bucket("api")]
        assert topological_order(buckets) == ["api", "ui"]

    def test_chain(self) -> None:
        buckets = [
            make_bucket("c", depends_on="b"),
            make_bucket("b", depends_on="a"),
            make_bucket("a"),
        ]
        assert topological_order(buckets) == ["a", "b", "c"]

    def test_dangling_edge_ignored(self) -> None:
        buckets = [make_bucket("ui", depends_on="deleted")]
        assert topological_order(buckets) == ["ui"]

    def test_cycle_raises(self) -> None:
        buckets = [make_bucket("a", depends_on="b"), make_bucket("b", depends_on="a")]
        with pytest.raises(CycleDetectedError) as exc_info:
            topological_order(buckets)
        assert exc_info.value.cycle == ["a", "b"]
        assert exc_info.value.closing_bucket == "b"

    def test_cycle_not_including_root(self) -> None:
        buckets = [
            make_bucket("x", depends_on="a"),
            make_bucket("a", depends_on="b"),
            make_bucket("b", depends_on="a"),
        ]
        with pytest.raises(CycleDetectedError) as exc_info:
            topological_order(buckets)
        assert exc_info.value.cycle == ["a", "b"]

    @pytest.mark.parametrize("seed", range(20))
    def test_random_acyclic_graphs(self, seed: int) -> None:
        """Edges only point at earlier-created buckets, so the graph is acyclic."""
        rng = random.Random(seed)
        names = [f"b{i}" for i in range(15)]
        buckets = []
        for i, name in enumerate(names):
            dep = rng.choice([None, *names[:i]]) if i else None
            buckets.append(make_bucket(name, depends_on=dep))
        rng.shuffle(buckets)

        _assert_valid_order(topological_order(buckets), buckets)


class TestDependencyResolver:
    """Tests for DependencyResolver.resolve."""

    def test_assigns_order_indices(self) -> None:
        buckets = [make_bucket("ui", depends_on="api"), make_bucket("api")]
        resolution = DependencyResolver().resolve(buckets)
        assert resolution.order == ["api", "ui"]
        assert resolution.broken == []
        assert {b.name: b.order for b in buckets} == {"api": 0, "ui": 1}

    def test_breaks_edge_of_closing_bucket(self) -> None:
        buckets = [make_bucket("a", depends_on="b"), make_bucket("b", depends_on="a")]
        resolution = DependencyResolver().resolve(buckets)
        assert [(e.bucket, e.depends_on) for e in resolution.broken] == [("b", "a")]
        assert buckets[1].depends_on is None
        assert resolution.order == ["b", "a"]

    def test_prefers_breaking_requested_bucket(self) -> None:
        buckets = [make_bucket("a", depends_on="b"), make_bucket("b", depends_on="a")]
        resolution = DependencyResolver().resolve(buckets, prefer_break="a")
        assert [e.bucket for e in resolution.broken] == ["a"]
        assert buckets[0].depends_on is None
        assert buckets[1].depends_on == "a"

    def test_prefer_break_off_cycle_is_ignored(self) -> None:
        buckets = [
            make_bucket("a", depends_on="b"),
            make_bucket("b", depends_on="a"),
            make_bucket("c"),
        ]
        resolution = DependencyResolver().resolve(buckets, prefer_break="c")
        assert [e.bucket for e in resolution.broken] == ["b"]

    @pytest.mark.parametrize("size", [1, 2, 3, 10, 50])
    def test_full_ring_terminates(self, size: int) -> None:
        names = [f"b{i}" for i in range(size)]
        buckets = [make_bucket(name, depends_on=names[(i + 1) % size]) for i, name in enumerate(names)]

        resolution = DependencyResolver().resolve(buckets)

        assert len(resolution.broken) == 1
        _assert_valid_order(resolution.order, buckets)
        assert sorted(b.order for b in buckets) == list(range(size))

    @pytest.mark.parametrize("seed", range(20))
    def test_random_edges_always_resolve(self, seed: int) -> None:
        rng = random.Random(seed)
        names = [f"b{i}" for i in range(12)]
        buckets = [
            make_bucket(name, depends_on=rng.choice([None, *(n for n in names if n != name)]))
            for name in names
        ]

        resolution = DependencyResolver().resolve(buckets)

        _assert_valid_order(resolution.order, buckets)
        topological_order(buckets)
