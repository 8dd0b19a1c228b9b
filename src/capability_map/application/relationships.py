"""Relationship discovery between capability nodes.

Four strategies run over the same immutable node/task snapshot:

- task overlap (``part-of`` / ``related-to``)
- keyword similarity (``similar-to`` / ``related-to``)
- parent/child containment (``part-of``)
- status progression (``sequenced-with``)

The result is an unfiltered candidate list; ``limiter.limit_edges`` applies the
confidence threshold, degree caps and pair deduplication.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from capability_map.config.constants import (
    DOMINANT_STATUS_RATIO,
    HIERARCHY_MIN_COUNT,
    HIERARCHY_MIN_RATIO,
    PART_OF_OVERLAP_RATIO,
    SEQUENCE_MIN_SIMILARITY,
    SIMILAR_TO_THRESHOLD,
)
from capability_map.config.schema import DiscoveryOptions
from capability_map.domain import CapabilityEdge, CapabilityNode, RelationshipType, Task

logger = logging.getLogger(__name__)

_MIXED = "mixed"
# Status progression pairs, earlier phase first.
_SEQUENCE: Tuple[Tuple[str, str], ...] = (("todo", "in-progress"), ("in-progress", "done"))


def keyword_similarity(a: Iterable[str], b: Iterable[str]) -> float:
    """Jaccard similarity of two keyword collections, compared case-insensitively. 0 if either is empty."""
    set_a = {k.lower() for k in a}
    set_b = {k.lower() for k in b}
    if not set_a or not set_b:
        return 0.0
    return len(set_a & set_b) / len(set_a | set_b)


def _pairs(nodes: Sequence[CapabilityNode]):
    for i in range(len(nodes)):
        for j in range(i + 1, len(nodes)):
            yield nodes[i], nodes[j]


def find_task_overlap_relationships(
    nodes: Sequence[CapabilityNode], min_overlap: float
) -> List[CapabilityEdge]:
    """Edges for nodes that cover some of the same tasks.

    A node sharing more than ``PART_OF_OVERLAP_RATIO`` of its tasks with a
    strictly larger node is ``part-of`` it.  When both nodes qualify the first
    node of the pair is checked first.  Otherwise the pair is ``related-to``
    when the smaller of the two overlap ratios exceeds *min_overlap*.
    """
    edges: List[CapabilityEdge] = []
    for a, b in _pairs(nodes):
        shared = len(a.task_set & b.task_set)
        if not shared:
            continue
        size_a, size_b = len(a.task_set), len(b.task_set)
        ratio_a, ratio_b = shared / size_a, shared / size_b
        min_ratio = min(ratio_a, ratio_b)

        if ratio_a > PART_OF_OVERLAP_RATIO and size_a < size_b:
            source, target, rel = a, b, RelationshipType.PART_OF
            description = f"{a.name} is part of {b.name}"
        elif ratio_b > PART_OF_OVERLAP_RATIO and size_b < size_a:
            source, target, rel = b, a, RelationshipType.PART_OF
            description = f"{b.name} is part of {a.name}"
        elif min_ratio > min_overlap:
            source, target, rel = a, b, RelationshipType.RELATED_TO
            description = f"Shares {shared} tasks"
        else:
            continue

        edges.append(CapabilityEdge(
            source=source.id,
            target=target.id,
            type=rel,
            strength=min_ratio,
            confidence=0.5 + min_ratio * 0.5,
            description=description,
        ))
    return edges


def find_semantic_relationships(
    nodes: Sequence[CapabilityNode], min_similarity: float
) -> List[CapabilityEdge]:
    """Edges for nodes whose keyword sets are similar enough."""
    edges: List[CapabilityEdge] = []
    for a, b in _pairs(nodes):
        similarity = keyword_similarity(a.keywords, b.keywords)
        if similarity < min_similarity or similarity == 0:
            continue
        if similarity > SIMILAR_TO_THRESHOLD:
            rel, description = RelationshipType.SIMILAR_TO, "Very similar focus areas"
        elif similarity > 0.5:
            lowered_b = {k.lower() for k in b.keywords}
            common = [k for k in a.keywords if k.lower() in lowered_b]
            rel, description = RelationshipType.RELATED_TO, f"Related concepts: {', '.join(common[:3])}"
        else:
            rel, description = RelationshipType.RELATED_TO, "Some common elements"
        edges.append(CapabilityEdge(
            source=a.id,
            target=b.id,
            type=rel,
            strength=similarity,
            confidence=0.4 + similarity * 0.5,
            description=description,
        ))
    return edges


def _children_by_parent(tasks: Sequence[Task]) -> Dict[str, List[str]]:
    children: Dict[str, List[str]] = {}
    for task in tasks:
        if task.parent_id and task.parent_id != task.id:
            children.setdefault(task.parent_id, []).append(task.id)
    return children


def _containment(parents: CapabilityNode, kids: CapabilityNode, children: Dict[str, List[str]]) -> int:
    """Number of tasks in *kids* whose parent task is in *parents*."""
    kid_set = kids.task_set
    return sum(1 for pid in parents.tasks for cid in children.get(pid, ()) if cid in kid_set)


def find_hierarchical_relationships(
    nodes: Sequence[CapabilityNode], tasks: Sequence[Task]
) -> List[CapabilityEdge]:
    """``part-of`` edges from a node holding sub-tasks to the node holding their parents.

    Each unordered pair is considered once.  The dominant direction must have
    a strictly larger count and either cover more than ``HIERARCHY_MIN_RATIO``
    of the child-side node or reach ``HIERARCHY_MIN_COUNT`` sub-tasks.
    """
    children = _children_by_parent(tasks)
    if not children:
        return []

    edges: List[CapabilityEdge] = []
    for a, b in _pairs(nodes):
        a_over_b = _containment(a, b, children)
        b_over_a = _containment(b, a, children)
        if a_over_b > b_over_a:
            parent_node, child_node, count = a, b, a_over_b
        elif b_over_a > a_over_b:
            parent_node, child_node, count = b, a, b_over_a
        else:
            continue

        ratio = count / len(child_node.task_set)
        if not (ratio > HIERARCHY_MIN_RATIO or count >= HIERARCHY_MIN_COUNT):
            continue
        edges.append(CapabilityEdge(
            source=child_node.id,
            target=parent_node.id,
            type=RelationshipType.PART_OF,
            strength=ratio,
            confidence=0.6 + min(1.0, ratio) * 0.3,
            description=f"{child_node.name} contains sub-tasks of {parent_node.name}",
        ))
    return edges


def dominant_status(node: CapabilityNode, status_by_id: Dict[str, str]) -> str:
    """The status held by more than ``DOMINANT_STATUS_RATIO`` of the node's tasks, else ``"mixed"``."""
    counts = {"todo": 0, "in-progress": 0, "done": 0}
    for task_id in node.tasks:
        status = status_by_id.get(task_id)
        if status in counts:
            counts[status] += 1
    total = len(node.tasks)
    for status, count in counts.items():
        if count / total > DOMINANT_STATUS_RATIO:
            return status
    return _MIXED


def find_sequential_relationships(
    nodes: Sequence[CapabilityNode], tasks: Sequence[Task]
) -> List[CapabilityEdge]:
    """``sequenced-with`` edges from mostly-todo to mostly-in-progress nodes, and in-progress to done.

    Each earlier-phase node links to at most one later-phase node: the most
    keyword-similar one, provided similarity exceeds ``SEQUENCE_MIN_SIMILARITY``.
    """
    if len(nodes) < 2:
        return []
    status_by_id = {t.id: t.status for t in tasks}
    by_status: Dict[str, List[CapabilityNode]] = {}
    for node in nodes:
        by_status.setdefault(dominant_status(node, status_by_id), []).append(node)

    edges: List[CapabilityEdge] = []
    for earlier, later in _SEQUENCE:
        for node in by_status.get(earlier, ()):
            best: Optional[CapabilityNode] = None
            best_similarity = SEQUENCE_MIN_SIMILARITY
            for candidate in by_status.get(later, ()):
                similarity = keyword_similarity(node.keywords, candidate.keywords)
                if similarity > best_similarity:
                    best, best_similarity = candidate, similarity
            if best is None:
                continue
            edges.append(CapabilityEdge(
                source=node.id,
                target=best.id,
                type=RelationshipType.SEQUENCED_WITH,
                strength=best_similarity,
                confidence=0.5 + best_similarity * 0.2,
                description=f"{node.name} comes before {best.name}",
            ))
    return edges


def discover_relationships(
    nodes: Sequence[CapabilityNode],
    tasks: Sequence[Task],
    options: Optional[DiscoveryOptions] = None,
) -> List[CapabilityEdge]:
    """Candidate edges from every strategy, in strategy order. Fewer than two nodes yields none."""
    options = options or DiscoveryOptions()
    if len(nodes) < 2:
        return []
    overlap = find_task_overlap_relationships(nodes, options.min_overlap)
    semantic = find_semantic_relationships(nodes, options.min_similarity)
    hierarchical = find_hierarchical_relationships(nodes, tasks)
    sequential = find_sequential_relationships(nodes, tasks)
    logger.debug(
        "Relationship candidates: overlap=%d semantic=%d hierarchical=%d sequential=%d",
        len(overlap), len(semantic), len(hierarchical), len(sequential),
    )
    return [*overlap, *semantic, *hierarchical, *sequential]


discover_edges = discover_relationships  # alias
