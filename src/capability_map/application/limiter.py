"""Bound the relationship set: confidence floor, per-node degree cap, total cap, pair dedup."""

from __future__ import annotations

import logging
from typing import Dict, FrozenSet, List, Optional, Sequence

from capability_map.config.schema import DiscoveryOptions
from capability_map.domain import CapabilityEdge

logger = logging.getLogger(__name__)


def limit_edges(
    edges: Sequence[CapabilityEdge], options: Optional[DiscoveryOptions] = None
) -> List[CapabilityEdge]:
    """Select the most confident edges within the configured limits.

    1. Drop edges below ``min_edge_confidence``.
    2. Stable-sort the rest by descending confidence.
    3. Accept greedily, skipping an edge when either endpoint already has
       ``max_edges_per_capability`` accepted edges; stop at ``max_edges``.
    4. Keep one edge per unordered node pair (the first, i.e. most confident).
    """
    options = options or DiscoveryOptions()
    confident = [e for e in edges if e.confidence >= options.min_edge_confidence]
    ranked = sorted(confident, key=lambda e: -e.confidence)

    degree: Dict[str, int] = {}
    selected: List[CapabilityEdge] = []
    for edge in ranked:
        if (
            degree.get(edge.source, 0) >= options.max_edges_per_capability
            or degree.get(edge.target, 0) >= options.max_edges_per_capability
        ):
            continue
        selected.append(edge)
        degree[edge.source] = degree.get(edge.source, 0) + 1
        degree[edge.target] = degree.get(edge.target, 0) + 1
        if len(selected) >= options.max_edges:
            break

    unique: Dict[FrozenSet[str], CapabilityEdge] = {}
    for edge in selected:
        kept = unique.get(edge.pair)
        if kept is None or edge.confidence > kept.confidence:
            unique[edge.pair] = edge

    logger.debug(
        "Edge limiter: %d candidates, %d above threshold, %d kept",
        len(edges), len(confident), len(unique),
    )
    return list(unique.values())
