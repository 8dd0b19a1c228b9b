"""Heuristic capability discovery.

Five independent strategies each turn the enriched task set into capability
candidates:

1. **Domain**: one node per curated technical domain that matched any task.
2. **Tag**: one node per meaningful tag shared by at least two tasks.
3. **Hierarchy**: one node per parent task with at least two direct children.
4. **Concept**: the most specific phrases/terms shared by at least two tasks.
5. **Status**: planning/execution/completion phases; only used when the other
   four strategies produced fewer than ``STATUS_FALLBACK_THRESHOLD`` candidates.

Strategies know nothing about each other.  Overlapping candidates are expected
and are reconciled afterwards by ``redundancy.remove_redundant_capabilities``.

Node ids are ``"<strategy>:<key>"`` and therefore unique and stable across runs.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Sequence

from capability_map.config.constants import (
    CONCEPT_CONFIDENCE,
    DOMAIN_CONFIDENCE,
    HIERARCHY_CONFIDENCE,
    MAX_CONCEPT_CAPABILITIES,
    MIN_TERM_LENGTH,
    NODE_KEYWORD_COUNT,
    STATUS_CONFIDENCE,
    STATUS_FALLBACK_THRESHOLD,
    STATUS_KEYWORD_COUNT,
    TAG_CONFIDENCE,
)
from capability_map.config.lexicon import LEXICON_TERMS, STOP_WORDS
from capability_map.domain import CapabilityNode, EnrichedTask, Task, unique_in_order

from .enrich import count_keywords, extract_keywords, top_terms

logger = logging.getLogger(__name__)

_NON_WORD = re.compile(r"[^\w\s]")
_NON_SLUG = re.compile(r"[^a-z0-9]+")

# Progress weight per status; any other status counts as 0.
_PROGRESS_WEIGHTS: Dict[str, int] = {"todo": 0, "in-progress": 50, "done": 100}

# status -> (name, description, node type)
_STATUS_PHASES: Dict[str, tuple] = {
    "todo": ("Planned Work", "Tasks in the planning phase", "planning-phase"),
    "in-progress": ("Active Development", "Tasks currently being worked on", "execution-phase"),
    "done": ("Completed Features", "Tasks that have been completed", "completion-phase"),
}


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------

def calculate_progress(tasks: Sequence[Task | EnrichedTask]) -> int:
    """Weighted completion percentage: todo 0, in-progress 50, done 100, rounded half up."""
    if not tasks:
        return 0
    points = sum(_PROGRESS_WEIGHTS.get(t.status, 0) for t in tasks)
    # Half up: 62.5 -> 63 (round() would give 62).
    return int(points / len(tasks) + 0.5)


def status_breakdown(tasks: Sequence[Task | EnrichedTask]) -> Dict[str, int]:
    """Count of tasks per status, in first-seen order."""
    breakdown: Dict[str, int] = {}
    for task in tasks:
        breakdown[task.status] = breakdown.get(task.status, 0) + 1
    return breakdown


def _slug(value: str) -> str:
    return _NON_SLUG.sub("-", value.lower()).strip("-") or "untitled"


def _node_metadata(tasks: Sequence[EnrichedTask], **extra: Any) -> Dict[str, Any]:
    return {
        "tasks": len(tasks),
        "progress": calculate_progress(tasks),
        "status_breakdown": status_breakdown(tasks),
        **extra,
    }


def _top_keywords(tasks: Sequence[EnrichedTask], limit: int = NODE_KEYWORD_COUNT) -> List[str]:
    return top_terms(count_keywords(t.keywords for t in tasks), limit)


def _is_meaningful_tag(tag: str) -> bool:
    lowered = tag.lower()
    if lowered in STOP_WORDS:
        return False
    return len(tag) > MIN_TERM_LENGTH or lowered in LEXICON_TERMS


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------

def create_domain_capabilities(tasks: Sequence[EnrichedTask]) -> List[CapabilityNode]:
    """One ``domain`` node per inferred technical domain."""
    groups: Dict[str, List[EnrichedTask]] = {}
    for task in tasks:
        for domain in task.domains:
            groups.setdefault(domain, []).append(task)

    nodes: List[CapabilityNode] = []
    for domain, members in groups.items():
        keywords = _top_keywords(members)
        focus = f" focusing on {', '.join(keywords)}" if keywords else ""
        nodes.append(CapabilityNode(
            id=f"domain:{_slug(domain)}",
            name=domain,
            type="domain",
            description=f"{domain} tasks{focus}",
            confidence=DOMAIN_CONFIDENCE,
            tasks=unique_in_order(t.id for t in members),
            keywords=tuple(keywords),
            metadata=_node_metadata(members, top_keywords=keywords),
        ))
    return nodes


def create_tag_capabilities(tasks: Sequence[EnrichedTask]) -> List[CapabilityNode]:
    """One ``feature-area`` node per meaningful tag covering two or more tasks.

    Tags that are stop words, or three characters or shorter, are skipped
    unless the short tag is a curated lexicon term (``ui``, ``api``, ``cli`` ...).
    """
    groups: Dict[str, List[EnrichedTask]] = {}
    for task in tasks:
        for tag in unique_in_order(task.tags):
            if _is_meaningful_tag(tag):
                groups.setdefault(tag, []).append(task)

    nodes: List[CapabilityNode] = []
    for tag, members in groups.items():
        if len(members) < 2:
            continue
        keywords = _top_keywords(members)
        name = tag[:1].upper() + tag[1:]
        if keywords and keywords[0].lower() not in name.lower():
            name = f"{name} {keywords[0]}"
        nodes.append(CapabilityNode(
            id=f"tag:{tag}",
            name=name,
            type="feature-area",
            description=f"Tasks related to {tag} functionality",
            confidence=TAG_CONFIDENCE,
            tasks=unique_in_order(t.id for t in members),
            keywords=unique_in_order([tag, *keywords]),
            metadata=_node_metadata(members, tag=tag),
        ))
    return nodes


def _hierarchy_name(title: str) -> str:
    words = [
        w for w in _NON_WORD.sub(" ", title).split()
        if len(w) > MIN_TERM_LENGTH and w.lower() not in STOP_WORDS
    ]
    if not words:
        return " ".join(title.split()[:2])
    name = words[0][:1].upper() + words[0][1:]
    if len(words) > 1:
        name += f" {words[1]}"
    return name


def create_hierarchy_capabilities(tasks: Sequence[EnrichedTask]) -> List[CapabilityNode]:
    """One ``workflow`` node spanning each parent task with at least two direct children."""
    by_id = {t.id: t for t in tasks}
    children: Dict[str, List[EnrichedTask]] = {}
    for task in tasks:
        if task.parent_id and task.parent_id != task.id and task.parent_id in by_id:
            children.setdefault(task.parent_id, []).append(task)

    nodes: List[CapabilityNode] = []
    for parent_id, kids in children.items():
        if len(kids) < 2:
            continue
        parent = by_id[parent_id]
        members = [parent, *kids]
        keywords = _top_keywords(members)
        nodes.append(CapabilityNode(
            id=f"hierarchy:{parent_id}",
            name=_hierarchy_name(parent.title) or parent_id,
            type="workflow",
            description=f"{parent.title} with {len(kids)} sub-tasks",
            confidence=HIERARCHY_CONFIDENCE,
            tasks=unique_in_order(t.id for t in members),
            keywords=tuple(keywords),
            metadata=_node_metadata(
                members, parent_task=parent.title, child_count=len(kids),
            ),
        ))
    return nodes


def create_concept_capabilities(tasks: Sequence[EnrichedTask]) -> List[CapabilityNode]:
    """``concept`` nodes for the most specific concepts shared by two or more tasks.

    A task carries a concept when the concept is in its concept list or occurs
    in its text.  Concepts are ranked by phrase length, then by task count
    (stable), and the top ``MAX_CONCEPT_CAPABILITIES`` become nodes.
    """
    all_concepts = unique_in_order(
        c for t in tasks for c in t.concepts if len(c) > MIN_TERM_LENGTH
    )
    groups: Dict[str, List[EnrichedTask]] = {}
    for concept in all_concepts:
        needle = concept.lower()
        members = [t for t in tasks if concept in t.concepts or needle in t.all_text]
        if len(members) >= 2:
            groups[concept] = members

    ranked = sorted(groups.items(), key=lambda item: (-len(item[0]), -len(item[1])))
    nodes: List[CapabilityNode] = []
    for concept, members in ranked[:MAX_CONCEPT_CAPABILITIES]:
        name = " ".join(w[:1].upper() + w[1:] for w in _NON_WORD.sub(" ", concept).split())
        related = unique_in_order(k for t in members for k in t.keywords)
        nodes.append(CapabilityNode(
            id=f"concept:{concept}",
            name=name or concept,
            type="concept",
            description=f"Tasks involving {concept}",
            confidence=CONCEPT_CONFIDENCE,
            tasks=unique_in_order(t.id for t in members),
            keywords=unique_in_order([concept, *related[:4]]),
            metadata=_node_metadata(members, concept=concept),
        ))
    return nodes


def create_status_capabilities(tasks: Sequence[EnrichedTask]) -> List[CapabilityNode]:
    """One phase node per task status (planned, active, completed, or custom)."""
    groups: Dict[str, List[EnrichedTask]] = {}
    for task in tasks:
        groups.setdefault(task.status, []).append(task)

    nodes: List[CapabilityNode] = []
    for status, members in groups.items():
        if status in _STATUS_PHASES:
            name, description, node_type = _STATUS_PHASES[status]
        else:
            name = f"{status[:1].upper()}{status[1:]} Phase"
            description = f"Tasks with {status} status"
            node_type = "custom-phase"
        keywords = extract_keywords(" ".join(t.all_text for t in members), limit=STATUS_KEYWORD_COUNT)
        nodes.append(CapabilityNode(
            id=f"status:{status}",
            name=name,
            type=node_type,
            description=description,
            confidence=STATUS_CONFIDENCE,
            tasks=unique_in_order(t.id for t in members),
            keywords=tuple(keywords),
            metadata=_node_metadata(members, status=status, count=len(members)),
        ))
    return nodes


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def discover_capabilities(tasks: Sequence[EnrichedTask]) -> List[CapabilityNode]:
    """Run every strategy and return all candidates in strategy order (not yet deduplicated)."""
    domain = create_domain_capabilities(tasks)
    tag = create_tag_capabilities(tasks)
    hierarchy = create_hierarchy_capabilities(tasks)
    concept = create_concept_capabilities(tasks)
    candidates = [*domain, *tag, *hierarchy, *concept]
    logger.debug(
        "Discovery candidates: domain=%d tag=%d hierarchy=%d concept=%d",
        len(domain), len(tag), len(hierarchy), len(concept),
    )

    if len(candidates) < STATUS_FALLBACK_THRESHOLD:
        status = create_status_capabilities(tasks)
        logger.debug("Only %d candidates; adding %d status-phase nodes", len(candidates), len(status))
        candidates.extend(status)

    return candidates


discover = discover_capabilities  # alias
