"""Reconcile overlapping capability candidates into a non-redundant set."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import FrozenSet, List, Sequence, Set

from capability_map.config.constants import REDUNDANCY_OVERLAP_RATIO
from capability_map.domain import CapabilityNode

logger = logging.getLogger(__name__)


def _is_redundant(candidate: FrozenSet[str], accepted: Sequence[FrozenSet[str]]) -> bool:
    for kept in accepted:
        shared = len(candidate & kept)
        if shared == len(candidate):
            return True
        if shared / min(len(candidate), len(kept)) >= REDUNDANCY_OVERLAP_RATIO:
            return True
    return False


def _unique_name(node: CapabilityNode, taken: Set[str]) -> str:
    name = node.name
    if name.lower() not in taken:
        return name
    name = f"{node.name} ({node.type})"
    suffix = 2
    while name.lower() in taken:
        name = f"{node.name} ({node.type}) {suffix}"
        suffix += 1
    return name


def remove_redundant_capabilities(candidates: Sequence[CapabilityNode]) -> List[CapabilityNode]:
    """Greedy selection of the most confident, broadest candidates.

    Candidates are visited by descending confidence, then descending task count
    (ties keep input order).  A candidate is dropped when its task set is a
    subset of an already accepted node's, or when it shares at least
    ``REDUNDANCY_OVERLAP_RATIO`` of the smaller set with one.  Survivors whose
    name collides (case-insensitively) with an accepted name get a
    ``" (<type>)"`` suffix, then a numeric suffix if that still collides.
    """
    ordered = sorted(candidates, key=lambda n: (-n.confidence, -len(n.tasks)))
    accepted: List[CapabilityNode] = []
    accepted_sets: List[FrozenSet[str]] = []
    names: Set[str] = set()

    for node in ordered:
        task_set = node.task_set
        if _is_redundant(task_set, accepted_sets):
            logger.debug("Dropping redundant capability %s (%s)", node.id, node.name)
            continue
        name = _unique_name(node, names)
        if name != node.name:
            node = replace(node, name=name)
        accepted.append(node)
        accepted_sets.append(task_set)
        names.add(name.lower())

    logger.debug("Redundancy pass kept %d of %d candidates", len(accepted), len(candidates))
    return accepted


dedupe = remove_redundant_capabilities  # alias
