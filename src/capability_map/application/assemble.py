"""Final map assembly: node cap, edge filtering and aggregate confidence."""

from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from capability_map.config.schema import DiscoveryOptions
from capability_map.domain import CapabilityEdge, CapabilityMap, CapabilityNode, MapMetadata


def aggregate_confidence(nodes: Sequence[CapabilityNode], edges: Sequence[CapabilityEdge]) -> float:
    """0.7 x mean node confidence + 0.3 x mean edge confidence (each mean is 0 when empty)."""
    node_avg = sum(n.confidence for n in nodes) / len(nodes) if nodes else 0.0
    edge_avg = sum(e.confidence for e in edges) / len(edges) if edges else 0.0
    return node_avg * 0.7 + edge_avg * 0.3


def assemble_map(
    nodes: Sequence[CapabilityNode],
    edges: Sequence[CapabilityEdge],
    task_count: int,
    generation_stats: Dict[str, Any],
    options: Optional[DiscoveryOptions] = None,
) -> CapabilityMap:
    """Build the immutable CapabilityMap.

    When ``max_nodes`` is set and exceeded only the most confident nodes are
    kept (stable, so equal confidence keeps discovery order).  Edges touching a
    dropped node are removed.  ``generation_stats`` is attached as given.
    """
    options = options or DiscoveryOptions()
    kept = list(nodes)
    if options.max_nodes is not None and len(kept) > options.max_nodes:
        kept = sorted(kept, key=lambda n: -n.confidence)[: options.max_nodes]

    kept_ids = {n.id for n in kept}
    kept_edges = [e for e in edges if e.source in kept_ids and e.target in kept_ids]

    return CapabilityMap(
        nodes=tuple(kept),
        edges=tuple(kept_edges),
        metadata=MapMetadata(
            task_count=task_count,
            discovered_capabilities=len(kept),
            relationship_count=len(kept_edges),
            confidence=aggregate_confidence(kept, kept_edges),
            generation_stats=generation_stats,
        ),
    )
