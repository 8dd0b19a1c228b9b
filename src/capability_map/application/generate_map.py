"""Generate a capability map from a task snapshot.

Pipeline::

    tasks -> enrich -> discover capabilities -> remove redundancy
          -> discover relationships -> limit edges -> assemble map

``generate_capability_map`` runs the heuristic pipeline synchronously.
``llm_generate_capability_map`` first asks an LLM to extract capabilities and
falls back to the heuristic strategies when that step fails for any reason.

"Nothing to analyse" outcomes are not errors: they yield an empty map whose
``generation_stats["error"]`` says why.  Unexpected failures are raised as
``MapGenerationError`` with the original exception chained.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional, Sequence, Union

from capability_map.config.constants import AI_EXTRACTION_DEFAULT_TIMEOUT_S
from capability_map.config.schema import DiscoveryOptions
from capability_map.domain import (
    CapabilityMap,
    CapabilityMapError,
    CapabilityNode,
    MapGenerationError,
    Task,
    build_task,
)

from .ai_extraction import extract_capabilities
from .assemble import assemble_map
from .discovery import discover_capabilities
from .enrich import enrich_tasks
from .limiter import limit_edges
from .redundancy import remove_redundant_capabilities
from .relationships import discover_relationships

if TYPE_CHECKING:
    from capability_map.application.ports import ChatClient

logger = logging.getLogger(__name__)

NO_TASKS_ERROR = "No tasks available for analysis"
NO_CAPABILITIES_ERROR = "No capabilities could be discovered"

TaskInput = Union[Task, Mapping[str, Any]]


def _as_tasks(tasks: Sequence[TaskInput]) -> List[Task]:
    return [t if isinstance(t, Task) else build_task(t) for t in tasks]


def select_tasks(tasks: Sequence[Task], options: DiscoveryOptions) -> List[Task]:
    """Tasks to analyse: all of them, or all but ``done`` ones when completed tasks are excluded.

    Custom statuses (``blocked``, ``review`` ...) are kept; only ``done`` counts as completed.
    """
    if options.include_completed_tasks:
        return list(tasks)
    return [t for t in tasks if t.status != "done"]


def _new_stats(task_count: int) -> Dict[str, Any]:
    return {
        "tasks_fetched": task_count,
        "start_time": datetime.now(timezone.utc).isoformat(),
        "discovery_method": "heuristic",
    }


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


def _empty_map(task_count: int, stats: Dict[str, Any], error: str, started: float) -> CapabilityMap:
    logger.warning("Capability map is empty: %s", error)
    stats["error"] = error
    stats["capabilities_discovered"] = 0
    stats["relationships_discovered"] = 0
    stats["processing_time_ms"] = _elapsed_ms(started)
    return CapabilityMap.empty(task_count, stats)


def _heuristic_capabilities(tasks: Sequence[Task]) -> List[CapabilityNode]:
    return remove_redundant_capabilities(discover_capabilities(enrich_tasks(tasks)))


def _build_map(
    nodes: List[CapabilityNode],
    tasks: Sequence[Task],
    options: DiscoveryOptions,
    stats: Dict[str, Any],
    started: float,
) -> CapabilityMap:
    edges = limit_edges(discover_relationships(nodes, tasks, options), options)
    stats["capabilities_discovered"] = len(nodes)
    stats["relationships_discovered"] = len(edges)
    stats["processing_time_ms"] = _elapsed_ms(started)
    cap_map = assemble_map(nodes, edges, len(tasks), stats, options)
    logger.info(
        "Capability map: %d tasks, %d capabilities, %d relationships (%s, %d ms)",
        len(tasks), cap_map.metadata.discovered_capabilities,
        cap_map.metadata.relationship_count, stats["discovery_method"], stats["processing_time_ms"],
    )
    return cap_map


def generate_capability_map(
    tasks: Sequence[TaskInput],
    options: Optional[DiscoveryOptions] = None,
) -> CapabilityMap:
    """Build a capability map with the heuristic discovery strategies.

    Deterministic: the same tasks and options always give the same nodes and
    edges (only the map id, timestamps and timings differ).

    Raises:
        MapGenerationError: If the pipeline fails unexpectedly.
    """
    options = options or DiscoveryOptions()
    started = time.perf_counter()
    try:
        selected = select_tasks(_as_tasks(tasks), options)
        stats = _new_stats(len(selected))
        if not selected:
            return _empty_map(0, stats, NO_TASKS_ERROR, started)
        nodes = _heuristic_capabilities(selected)
        if not nodes:
            return _empty_map(len(selected), stats, NO_CAPABILITIES_ERROR, started)
        return _build_map(nodes, selected, options, stats, started)
    except CapabilityMapError:
        raise
    except Exception as exc:
        raise MapGenerationError(f"Capability map generation failed: {exc}") from exc


async def llm_generate_capability_map(
    tasks: Sequence[TaskInput],
    options: Optional[DiscoveryOptions] = None,
    *,
    chat_client: "ChatClient",
    model: str,
    timeout_s: float = AI_EXTRACTION_DEFAULT_TIMEOUT_S,
    temperature: float = 0.3,
    top_p: float = 0.9,
    max_tokens: int = 4000,
) -> CapabilityMap:
    """Build a capability map using LLM extraction, falling back to heuristics.

    The LLM reply is validated and filtered by ``options.confidence_threshold``;
    its capabilities then go through redundancy removal and the same
    relationship, limiting and assembly steps as the heuristic path.  A failed,
    timed-out or unusable extraction is logged as a warning and recorded in
    ``generation_stats["fallback_reason"]``.

    Raises:
        MapGenerationError: If the pipeline fails unexpectedly.
    """
    options = options or DiscoveryOptions()
    started = time.perf_counter()
    try:
        selected = select_tasks(_as_tasks(tasks), options)
        stats = _new_stats(len(selected))
        if not selected:
            return _empty_map(0, stats, NO_TASKS_ERROR, started)

        try:
            extracted = await extract_capabilities(
                selected,
                chat_client=chat_client,
                model=model,
                confidence_threshold=options.confidence_threshold,
                timeout_s=timeout_s,
                temperature=temperature,
                top_p=top_p,
                max_tokens=max_tokens,
            )
            nodes = remove_redundant_capabilities(extracted)
            stats["discovery_method"] = "ai"
        except Exception as exc:
            logger.warning("AI capability extraction failed (%s); falling back to heuristic discovery", exc)
            stats["fallback_reason"] = str(exc) or type(exc).__name__
            nodes = _heuristic_capabilities(selected)

        if not nodes:
            return _empty_map(len(selected), stats, NO_CAPABILITIES_ERROR, started)
        return _build_map(nodes, selected, options, stats, started)
    except CapabilityMapError:
        raise
    except Exception as exc:
        raise MapGenerationError(f"Capability map generation failed: {exc}") from exc
