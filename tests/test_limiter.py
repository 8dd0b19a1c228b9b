"""Tests for the edge limiter."""
from __future__ import annotations

from collections import Counter

from capability_map.application.limiter import limit_edges
from capability_map.config import DiscoveryOptions
from capability_map.domain import CapabilityEdge, RelationshipType


def _edge(source: str, target: str, confidence: float, rel: str = RelationshipType.RELATED_TO) -> CapabilityEdge:
    return CapabilityEdge(source=source, target=target, type=rel, strength=confidence, confidence=confidence)


def test_drops_edges_below_min_confidence():
    edges = [_edge("a", "b", 0.49), _edge("a", "c", 0.5)]
    kept = limit_edges(edges, DiscoveryOptions())
    assert [(e.source, e.target) for e in kept] == [("a", "c")]


def test_sorted_by_confidence_with_stable_ties():
    edges = [_edge("a", "b", 0.6), _edge("c", "d", 0.9), _edge("e", "f", 0.6)]
    kept = limit_edges(edges, DiscoveryOptions())
    assert [(e.source, e.target) for e in kept] == [("c", "d"), ("a", "b"), ("e", "f")]


def test_per_capability_degree_cap():
    edges = [_edge("hub", f"n{i}", 0.9 - i * 0.01) for i in range(8)]
    kept = limit_edges(edges, DiscoveryOptions(max_edges_per_capability=3))
    assert [e.target for e in kept] == ["n0", "n1", "n2"]


def test_total_edge_cap():
    edges = [_edge(f"s{i}", f"t{i}", 0.8) for i in range(10)]
    kept = limit_edges(edges, DiscoveryOptions(max_edges=4))
    assert len(kept) == 4


def test_reverse_duplicate_keeps_higher_confidence():
    forward = _edge("a", "b", 0.6, RelationshipType.RELATED_TO)
    reverse = _edge("b", "a", 0.875, RelationshipType.PART_OF)
    kept = limit_edges([forward, reverse], DiscoveryOptions())
    assert kept == [reverse]


def test_degree_and_uniqueness_bounds_hold():
    nodes = [f"n{i}" for i in range(6)]
    edges = []
    for i, s in enumerate(nodes):
        for j, t in enumerate(nodes):
            if s != t:
                edges.append(_edge(s, t, 0.5 + ((i * 7 + j * 3) % 10) / 20))
    options = DiscoveryOptions(max_edges=12, max_edges_per_capability=3)
    kept = limit_edges(edges, options)

    assert len(kept) <= options.max_edges
    degree = Counter()
    for e in kept:
        degree[e.source] += 1
        degree[e.target] += 1
    assert max(degree.values()) <= options.max_edges_per_capability
    pairs = [e.pair for e in kept]
    assert len(pairs) == len(set(pairs))


def test_empty_input():
    assert limit_edges([]) == []
