"""Domain models: Task, EnrichedTask, CapabilityNode, CapabilityEdge, CapabilityMap. Pure data, no I/O."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, FrozenSet, Iterable, Mapping, Optional, Tuple


@dataclass(frozen=True)
class Task:
    """Work item supplied by the external task repository. Never mutated by the engine."""
    id: str
    title: str
    description: str = ""
    body: str = ""
    tags: Tuple[str, ...] = ()
    status: str = "todo"
    readiness: Optional[str] = None
    parent_id: Optional[str] = None


def build_task(data: Mapping[str, Any]) -> Task:
    """Construct a Task from an external record, defaulting missing optional fields.

    ``None`` description/body become ``""``, ``None`` tags become ``()`` and a
    single tag given as a bare string becomes a one-tag tuple.
    Both ``parent_id`` and the camelCase ``parentId`` are accepted; an empty
    parent id is treated as "no parent".

    Raises:
        KeyError: If ``id`` or ``title`` is missing.
    """
    parent = data.get("parent_id", data.get("parentId"))
    tags = data.get("tags") or ()
    if isinstance(tags, str):
        tags = (tags,)
    return Task(
        id=str(data["id"]),
        title=str(data["title"]),
        description=data.get("description") or "",
        body=data.get("body") or "",
        tags=tuple(str(t) for t in tags),
        status=data.get("status") or "todo",
        readiness=data.get("readiness"),
        parent_id=str(parent) if parent else None,
    )


@dataclass(frozen=True)
class EnrichedTask:
    """A Task plus the lexical features derived from it once per run."""
    task: Task
    all_text: str                   # title, description, body and tags, lowercased
    normalized_title: str
    keywords: Tuple[str, ...]       # top terms by frequency
    domains: Tuple[str, ...]        # curated domain names whose lexicon matched
    concepts: Tuple[str, ...]       # tags + phrases + top keywords, deduplicated

    @property
    def id(self) -> str:
        return self.task.id

    @property
    def title(self) -> str:
        return self.task.title

    @property
    def tags(self) -> Tuple[str, ...]:
        return self.task.tags

    @property
    def status(self) -> str:
        return self.task.status

    @property
    def parent_id(self) -> Optional[str]:
        return self.task.parent_id


class RelationshipType:
    """Edge type labels."""
    DEPENDS_ON = "depends-on"
    EXTENDS = "extends"
    RELATED_TO = "related-to"
    PART_OF = "part-of"
    SIMILAR_TO = "similar-to"
    SEQUENCED_WITH = "sequenced-with"


@dataclass(frozen=True)
class CapabilityNode:
    """A discovered thematic cluster of tasks.

    ``tasks`` keeps the covered task ids in discovery order (no duplicates) so
    every downstream tie-break is reproducible; use ``task_set`` for set algebra.
    ``confidence`` reflects the reliability of the strategy that produced the
    node, not how many tasks it covers.
    """
    id: str
    name: str
    type: str
    description: str
    confidence: float
    tasks: Tuple[str, ...]
    keywords: Tuple[str, ...] = ()
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.tasks:
            raise ValueError(f"CapabilityNode {self.id!r} must cover at least one task")

    @property
    def task_set(self) -> FrozenSet[str]:
        return frozenset(self.tasks)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "description": self.description,
            "confidence": self.confidence,
            "tasks": list(self.tasks),
            "keywords": list(self.keywords),
            "metadata": dict(self.metadata),
        }


@dataclass(frozen=True)
class CapabilityEdge:
    """Typed relationship between two capability nodes.

    ``strength`` is the raw overlap/similarity metric; ``confidence`` is derived
    from it by the strategy that proposed the edge.
    """
    source: str
    target: str
    type: str
    strength: float
    confidence: float
    description: str = ""

    def __post_init__(self) -> None:
        if self.source == self.target:
            raise ValueError(f"CapabilityEdge cannot connect {self.source!r} to itself")

    @property
    def pair(self) -> FrozenSet[str]:
        """Unordered endpoint pair, used to detect forward/reverse duplicates."""
        return frozenset((self.source, self.target))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source": self.source,
            "target": self.target,
            "type": self.type,
            "strength": self.strength,
            "confidence": self.confidence,
            "description": self.description,
        }


@dataclass(frozen=True)
class MapMetadata:
    task_count: int
    discovered_capabilities: int
    relationship_count: int
    confidence: float
    generation_stats: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class CapabilityMap:
    """Final node/edge sets handed to external renderers. Immutable once built."""
    nodes: Tuple[CapabilityNode, ...]
    edges: Tuple[CapabilityEdge, ...]
    metadata: MapMetadata
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def empty(cls, task_count: int, generation_stats: Dict[str, Any]) -> "CapabilityMap":
        """Map with no nodes or edges; ``generation_stats`` should carry an ``error`` entry."""
        return cls(
            nodes=(),
            edges=(),
            metadata=MapMetadata(
                task_count=task_count,
                discovered_capabilities=0,
                relationship_count=0,
                confidence=0.0,
                generation_stats=generation_stats,
            ),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "created_at": self.created_at.isoformat(),
            "nodes": [n.to_dict() for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
            "metadata": {
                "task_count": self.metadata.task_count,
                "discovered_capabilities": self.metadata.discovered_capabilities,
                "relationship_count": self.metadata.relationship_count,
                "confidence": self.metadata.confidence,
                "generation_stats": dict(self.metadata.generation_stats),
            },
        }


@dataclass
class LLMResponse:
    """Text returned by the chat collaborator for one completion call."""
    content: Optional[str]


def unique_in_order(items: Iterable[str]) -> Tuple[str, ...]:
    """Drop repeated items, keeping the first occurrence of each."""
    return tuple(dict.fromkeys(items))
