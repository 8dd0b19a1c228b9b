"""AI-based capability extraction.

One chat-completion call receives the whole task corpus and is asked for a
JSON array of capabilities.  The reply is parsed, validated item by item and
filtered:

- task ids the model invented are dropped, and so is any item left with none
- confidence is clamped to [0, 1], then items below the threshold are dropped

Every failure mode (timeout, transport error, unparsable or empty reply)
surfaces as an exception; the caller decides to fall back to the heuristic
pipeline.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import TYPE_CHECKING, Any, Dict, List, Sequence

from pydantic import BaseModel, ConfigDict, Field, ValidationError, ValidationInfo, field_validator

from capability_map.config.constants import AI_EXTRACTION_DEFAULT_TIMEOUT_S
from capability_map.domain import CapabilityNode, ExtractionError, Task, unique_in_order

from .discovery import calculate_progress, status_breakdown
from .json_parsing import extract_json

if TYPE_CHECKING:
    from capability_map.application.ports import ChatClient

logger = logging.getLogger(__name__)

_SYSTEM_PROMPT = """You are an expert system architect who identifies capabilities, features and technical domains from task descriptions.

Discover the capabilities inherent in the provided task data without relying on predefined categories or taxonomies. Look for:
1. Core capabilities: major functional areas or features
2. Technical domains: technology areas or specialties
3. Cross-cutting concerns: aspects that span multiple areas

For each capability:
- give a clear name (2-4 words)
- categorize its type (e.g. 'core-feature', 'technical-domain', 'cross-cutting-concern')
- write a brief description
- list related keywords found in the tasks
- give a confidence score between 0 and 1
- list the ids of the tasks that relate to it

Avoid generic categories such as "task management" unless the tasks clearly call for them.

Reply with ONLY a JSON array of objects with these fields:
- name: string
- type: string
- description: string
- confidence: number between 0 and 1
- tasks: array of task id strings
- keywords: array of strings"""


class ExtractedCapability(BaseModel):
    """One capability as returned by the model. Unknown fields are ignored."""

    model_config = ConfigDict(extra="ignore")

    name: str = Field(..., min_length=1)
    type: str = "ai-discovered"
    description: str = ""
    confidence: float = 0.0
    tasks: List[str] = Field(default_factory=list)
    keywords: List[str] = Field(default_factory=list)

    @field_validator("name", mode="before")
    @classmethod
    def _strip_name(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @field_validator("type", "description", mode="before")
    @classmethod
    def _none_to_default(cls, v: Any, info: ValidationInfo) -> Any:
        if v is None or v == "":
            return "ai-discovered" if info.field_name == "type" else ""
        return v

    @field_validator("confidence", mode="before")
    @classmethod
    def _clamp_confidence(cls, v: Any) -> float:
        value = float(v) if v is not None else 0.0
        return min(1.0, max(0.0, value))

    @field_validator("tasks", "keywords", mode="before")
    @classmethod
    def _coerce_str_list(cls, v: Any) -> List[str]:
        if v is None:
            return []
        if isinstance(v, str):
            return [v]
        return [str(item) for item in v]


def build_extraction_messages(tasks: Sequence[Task]) -> List[Dict[str, Any]]:
    """System + user messages carrying the task corpus as JSON."""
    corpus = [
        {
            "id": t.id,
            "title": t.title,
            "description": t.description,
            "body": t.body,
            "tags": list(t.tags),
            "status": t.status,
            "readiness": t.readiness,
        }
        for t in tasks
    ]
    user = (
        f"Analyze these {len(corpus)} tasks and discover the capabilities present in them:\n\n"
        f"{json.dumps(corpus, indent=2)}"
    )
    return [
        {"role": "system", "content": _SYSTEM_PROMPT},
        {"role": "user", "content": user},
    ]


def parse_extracted_capabilities(
    text: str,
    tasks: Sequence[Task],
    confidence_threshold: float,
) -> List[CapabilityNode]:
    """Turn the model reply into capability nodes ``ai:1``, ``ai:2``, ...

    Raises:
        ExtractionError: If no JSON array can be parsed or no item survives validation.
    """
    ok, data, err = extract_json(text, expect="array")
    if ok and isinstance(data, dict):
        data = data.get("capabilities")
    if not ok or not isinstance(data, list):
        raise ExtractionError(err or "AI reply is not a JSON array")

    by_id = {t.id: t for t in tasks}
    nodes: List[CapabilityNode] = []
    for raw in data:
        try:
            item = ExtractedCapability.model_validate(raw)
        except ValidationError as exc:
            logger.debug("Skipping invalid AI capability %r: %s", raw, exc)
            continue
        task_ids = unique_in_order(tid for tid in item.tasks if tid in by_id)
        if not task_ids or item.confidence < confidence_threshold:
            continue
        members = [by_id[tid] for tid in task_ids]
        nodes.append(CapabilityNode(
            id=f"ai:{len(nodes) + 1}",
            name=item.name,
            type=item.type,
            description=item.description,
            confidence=item.confidence,
            tasks=task_ids,
            keywords=unique_in_order(item.keywords),
            metadata={
                "tasks": len(members),
                "progress": calculate_progress(members),
                "status_breakdown": status_breakdown(members),
            },
        ))

    if not nodes:
        raise ExtractionError("AI extraction returned no usable capabilities")
    return nodes


async def extract_capabilities(
    tasks: Sequence[Task],
    *,
    chat_client: "ChatClient",
    model: str,
    confidence_threshold: float = 0.5,
    timeout_s: float = AI_EXTRACTION_DEFAULT_TIMEOUT_S,
    temperature: float = 0.3,
    top_p: float = 0.9,
    max_tokens: int = 4000,
) -> List[CapabilityNode]:
    """Ask the model for capabilities over *tasks* and return the validated nodes.

    Raises:
        ExtractionError: On timeout or an unusable reply.
        Exception: Transport errors from the chat client propagate unchanged.
    """
    messages = build_extraction_messages(tasks)
    try:
        response = await asyncio.wait_for(
            chat_client.chat(
                messages, model, temperature=temperature, top_p=top_p, max_tokens=max_tokens,
            ),
            timeout=timeout_s,
        )
    except asyncio.TimeoutError as exc:
        raise ExtractionError(f"AI extraction timed out after {timeout_s}s") from exc

    nodes = parse_extracted_capabilities(response.content or "", tasks, confidence_threshold)
    logger.info("AI extraction produced %d capabilities", len(nodes))
    return nodes
