"""Tests for relationship discovery between capability nodes."""
from __future__ import annotations

import pytest

from capability_map.application.discovery import create_tag_capabilities
from capability_map.application.enrich import enrich_tasks
from capability_map.application.limiter import limit_edges
from capability_map.application.relationships import (
    discover_relationships,
    dominant_status,
    find_hierarchical_relationships,
    find_semantic_relationships,
    find_sequential_relationships,
    find_task_overlap_relationships,
    keyword_similarity,
)
from capability_map.domain import RelationshipType, Task

from conftest import make_node


# ---------------------------------------------------------------------------
# keyword_similarity
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    "a,b",
    [
        (["auth", "login"], ["login", "session", "token"]),
        (["Search"], ["search", "index"]),
        (["x"], ["y"]),
    ],
)
def test_similarity_is_symmetric(a, b):
    assert keyword_similarity(a, b) == keyword_similarity(b, a)


def test_similarity_identity_and_empty():
    assert keyword_similarity(["a", "b"], ["a", "b"]) == 1.0
    assert keyword_similarity([], ["a"]) == 0.0
    assert keyword_similarity(["a"], []) == 0.0
    assert keyword_similarity([], []) == 0.0


def test_similarity_is_case_insensitive_jaccard():
    assert keyword_similarity(["Auth", "login"], ["auth", "token"]) == pytest.approx(1 / 3)


# ---------------------------------------------------------------------------
# Task overlap
# ---------------------------------------------------------------------------

def test_scenario_disjoint_tag_nodes_have_no_overlap_edge(scenario_tasks):
    nodes = create_tag_capabilities(enrich_tasks(scenario_tasks))
    auth = next(n for n in nodes if n.id == "tag:auth")
    ui = next(n for n in nodes if n.id == "tag:ui")
    assert len(auth.task_set & ui.task_set) == 0
    assert find_task_overlap_relationships([auth, ui], min_overlap=0.25) == []


def test_smaller_node_mostly_inside_larger_is_part_of():
    a = make_node("a", ["1", "2", "3", "4"], keywords=["alpha"])
    b = make_node("b", ["1", "2", "3"], keywords=["beta"])
    edges = find_task_overlap_relationships([a, b], min_overlap=0.25)
    assert len(edges) == 1
    edge = edges[0]
    assert edge.type == RelationshipType.PART_OF
    assert (edge.source, edge.target) == ("b", "a")
    assert edge.strength == pytest.approx(0.75)
    assert edge.confidence == pytest.approx(0.875)
    assert edge.description == "b is part of a"


def test_shared_tasks_scenario_yields_single_part_of_after_limiting():
    a = make_node("a", ["1", "2", "3", "4"], keywords=["alpha"])
    b = make_node("b", ["1", "2", "3"], keywords=["beta"])
    tasks = [Task(str(i), f"task {i}") for i in range(1, 5)]
    edges = limit_edges(discover_relationships([a, b], tasks))
    assert len(edges) == 1
    assert edges[0].type == RelationshipType.PART_OF


def test_moderate_overlap_is_related_to():
    a = make_node("a", ["1", "2", "3", "4"])
    b = make_node("b", ["3", "4", "5", "6"])
    edges = find_task_overlap_relationships([a, b], min_overlap=0.25)
    assert [(e.type, e.description) for e in edges] == [(RelationshipType.RELATED_TO, "Shares 2 tasks")]
    assert edges[0].confidence == pytest.approx(0.75)


def test_small_overlap_is_skipped():
    a = make_node("a", ["1", "2", "3", "4", "5"])
    b = make_node("b", ["5", "6", "7", "8", "9"])
    assert find_task_overlap_relationships([a, b], min_overlap=0.25) == []


def test_equal_sets_fall_through_to_related_to():
    # Both overlap ratios exceed 0.8 but neither side is smaller: the part-of
    # branches do not match and the pair is related-to.
    a = make_node("a", ["1", "2", "3"])
    b = make_node("b", ["1", "2", "3"])
    edges = find_task_overlap_relationships([a, b], min_overlap=0.25)
    assert len(edges) == 1
    assert edges[0].type == RelationshipType.RELATED_TO
    assert edges[0].confidence == pytest.approx(1.0)


# ---------------------------------------------------------------------------
# Semantic similarity
# ---------------------------------------------------------------------------

def test_semantic_edge_types_by_similarity():
    base = make_node("base", ["1"], keywords=["a", "b", "c", "d"])
    very = make_node("very", ["2"], keywords=["a", "b", "c", "d"])
    some = make_node("some", ["3"], keywords=["a", "b", "x", "y"])
    edges = {
        (e.source, e.target): e
        for e in find_semantic_relationships([base, very, some], min_similarity=0.3)
    }
    assert edges[("base", "very")].type == RelationshipType.SIMILAR_TO
    assert edges[("base", "very")].confidence == pytest.approx(0.9)
    # 2 shared of 6 distinct
    assert edges[("base", "some")].type == RelationshipType.RELATED_TO
    assert edges[("base", "some")].description == "Some common elements"
    assert edges[("base", "some")].strength == pytest.approx(1 / 3)


def test_semantic_related_concepts_description():
    a = make_node("a", ["1"], keywords=["a", "b", "c", "d"])
    b = make_node("b", ["2"], keywords=["a", "b", "c", "e"])
    edges = find_semantic_relationships([a, b], min_similarity=0.3)
    # 3 shared of 5 distinct = 0.6
    assert edges[0].type == RelationshipType.RELATED_TO
    assert edges[0].description == "Related concepts: a, b, c"


def test_semantic_below_threshold_is_skipped():
    a = make_node("a", ["1"], keywords=["a", "b", "c", "d"])
    b = make_node("b", ["2"], keywords=["a", "x", "y", "z"])
    assert find_semantic_relationships([a, b], min_similarity=0.3) == []


# ---------------------------------------------------------------------------
# Hierarchical
# ---------------------------------------------------------------------------

def test_hierarchical_child_node_is_part_of_parent_node():
    tasks = [
        Task("p", "Parent"),
        Task("x", "Other"),
        Task("c1", "Child one", parent_id="p"),
        Task("c2", "Child two", parent_id="p"),
    ]
    parents = make_node("parents", ["p", "x"], name="Parents")
    children = make_node("children", ["c1", "c2"], name="Children")
    edges = find_hierarchical_relationships([parents, children], tasks)
    assert len(edges) == 1
    edge = edges[0]
    assert (edge.source, edge.target) == ("children", "parents")
    assert edge.type == RelationshipType.PART_OF
    assert edge.strength == pytest.approx(1.0)
    assert edge.confidence == pytest.approx(0.9)
    assert edge.description == "Children contains sub-tasks of Parents"


def test_hierarchical_single_weak_link_is_skipped():
    tasks = [Task("p", "Parent"), Task("c", "Child", parent_id="p")] + [
        Task(f"o{i}", "Other") for i in range(4)
    ]
    parents = make_node("parents", ["p"])
    children = make_node("children", ["c", "o0", "o1", "o2", "o3"])
    # one sub-task out of five (ratio 0.2) and a count below two
    assert find_hierarchical_relationships([parents, children], tasks) == []


def test_hierarchical_raw_count_passes_despite_low_ratio():
    tasks = [Task("p", "Parent"), Task("c1", "Child", parent_id="p"), Task("c2", "Child", parent_id="p")]
    tasks += [Task(f"o{i}", "Other") for i in range(8)]
    parents = make_node("parents", ["p"])
    children = make_node("children", ["c1", "c2"] + [f"o{i}" for i in range(8)])
    # two sub-tasks out of ten: ratio 0.2, but the count reaches two
    edges = find_hierarchical_relationships([parents, children], tasks)
    assert [(e.source, e.target) for e in edges] == [("children", "parents")]
    assert edges[0].strength == pytest.approx(0.2)
    assert edges[0].confidence == pytest.approx(0.66)


def test_hierarchical_larger_containment_direction_wins():
    tasks = [
        Task("pa", "Parent A"), Task("pb", "Parent B"),
        Task("a1", "Child", parent_id="pa"), Task("a2", "Child", parent_id="pa"),
        Task("b1", "Child", parent_id="pb"),
    ]
    x = make_node("x", ["pa", "b1"])
    y = make_node("y", ["pb", "a1", "a2"])
    # x holds the parents of two y tasks; y holds the parent of one x task
    edges = find_hierarchical_relationships([x, y], tasks)
    assert len(edges) == 1
    assert (edges[0].source, edges[0].target) == ("y", "x")
    assert edges[0].strength == pytest.approx(2 / 3)
    assert edges[0].confidence == pytest.approx(0.6 + (2 / 3) * 0.3)


def test_hierarchical_equal_containment_yields_no_edge():
    tasks = [
        Task("pa", "Parent A"), Task("pb", "Parent B"),
        Task("a1", "Child", parent_id="pa"), Task("b1", "Child", parent_id="pb"),
    ]
    x = make_node("x", ["pa", "b1"])
    y = make_node("y", ["pb", "a1"])
    assert find_hierarchical_relationships([x, y], tasks) == []


def test_hierarchical_no_parent_links():
    tasks = [Task("1", "a"), Task("2", "b")]
    assert find_hierarchical_relationships([make_node("a", ["1"]), make_node("b", ["2"])], tasks) == []


# ---------------------------------------------------------------------------
# Sequential
# ---------------------------------------------------------------------------

def test_dominant_status():
    status = {"1": "todo", "2": "todo", "3": "todo", "4": "done"}
    assert dominant_status(make_node("n", ["1", "2", "3", "4"]), status) == "todo"
    assert dominant_status(make_node("n", ["1", "4"]), status) == "mixed"


def test_sequential_edges_follow_status_progression():
    tasks = [
        Task("t1", "a"), Task("t2", "b"),
        Task("p1", "c", status="in-progress"), Task("p2", "d", status="in-progress"),
        Task("d1", "e", status="done"),
    ]
    planned = make_node("planned", ["t1", "t2"], name="Planned", keywords=["alpha", "beta"])
    active = make_node("active", ["p1", "p2"], name="Active", keywords=["alpha", "beta", "gamma"])
    shipped = make_node("shipped", ["d1"], name="Shipped", keywords=["alpha", "beta", "gamma", "delta"])
    edges = find_sequential_relationships([planned, active, shipped], tasks)
    assert [(e.source, e.target) for e in edges] == [("planned", "active"), ("active", "shipped")]
    assert all(e.type == RelationshipType.SEQUENCED_WITH for e in edges)
    assert edges[0].confidence == pytest.approx(0.5 + (2 / 3) * 0.2)
    assert edges[1].confidence == pytest.approx(0.5 + 0.75 * 0.2)
    assert edges[0].description == "Planned comes before Active"


def test_sequential_requires_similarity_above_threshold():
    tasks = [Task("t1", "a"), Task("p1", "b", status="in-progress")]
    planned = make_node("planned", ["t1"], keywords=["alpha", "beta", "gamma"])
    active = make_node("active", ["p1"], keywords=["alpha", "x", "y"])
    # similarity 1/5 = 0.2
    assert find_sequential_relationships([planned, active], tasks) == []


# ---------------------------------------------------------------------------
# discover_relationships
# ---------------------------------------------------------------------------

def test_discover_relationships_needs_two_nodes():
    assert discover_relationships([make_node("a", ["1"])], [Task("1", "a")]) == []
    assert discover_relationships([], []) == []


def test_no_self_edges(sample_tasks):
    from capability_map.application.discovery import discover_capabilities
    from capability_map.application.redundancy import remove_redundant_capabilities

    nodes = remove_redundant_capabilities(discover_capabilities(enrich_tasks(sample_tasks)))
    for edge in discover_relationships(nodes, sample_tasks):
        assert edge.source != edge.target
