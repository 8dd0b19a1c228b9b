"""Domain layer: entities and value objects. No I/O."""

from .models import (
    CapabilityEdge,
    CapabilityMap,
    CapabilityNode,
    EnrichedTask,
    LLMResponse,
    MapMetadata,
    RelationshipType,
    Task,
    build_task,
    unique_in_order,
)
from .errors import CapabilityMapError, ExtractionError, MapGenerationError, TaskSourceError

__all__ = [
    "CapabilityEdge",
    "CapabilityMap",
    "CapabilityNode",
    "EnrichedTask",
    "LLMResponse",
    "MapMetadata",
    "RelationshipType",
    "Task",
    "build_task",
    "unique_in_order",
    "CapabilityMapError",
    "ExtractionError",
    "MapGenerationError",
    "TaskSourceError",
]
