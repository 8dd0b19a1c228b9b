"""Configuration schema. The AI endpoint defaults to Ollama; any OpenAI-compatible backend works via base_url + model."""

from __future__ import annotations

from typing import Dict, Optional

from pydantic import BaseModel, Field, model_validator

from .constants import AI_EXTRACTION_DEFAULT_TIMEOUT_S


class DiscoveryOptions(BaseModel):
    """Knobs for capability discovery, relationship discovery and map assembly."""

    confidence_threshold: float = Field(
        0.5, ge=0.0, le=1.0,
        description="Minimum confidence for a capability returned by the AI extraction path.",
    )
    max_nodes: Optional[int] = Field(
        20, ge=1,
        description="Keep only the N most confident capabilities. None disables the cap.",
    )
    max_edges: int = Field(50, ge=1, description="Maximum relationships in the final map.")
    min_overlap: float = Field(
        0.25, ge=0.0, le=1.0,
        description="Minimum shared-task ratio (of both nodes) for a task-overlap related-to edge.",
    )
    min_similarity: float = Field(
        0.3, ge=0.0, le=1.0,
        description="Minimum keyword Jaccard similarity for a semantic edge.",
    )
    max_edges_per_capability: int = Field(
        5, ge=1, description="Maximum relationships touching any single capability.",
    )
    min_edge_confidence: float = Field(
        0.5, ge=0.0, le=1.0, description="Relationships below this confidence are dropped.",
    )
    include_completed_tasks: bool = Field(
        True, description="When False, tasks with status 'done' are excluded before analysis.",
    )


class ModelConfig(BaseModel):
    """LLM endpoint and model name (OpenAI chat-completions API). Defaults: Ollama."""
    base_url: str = Field(..., description="e.g. http://localhost:11434/v1 or https://api.openai.com/v1")
    model: str = Field(..., description="Model name (e.g. qwen2.5:14b for Ollama, or your server's model id)")
    api_key: str = Field("", description="Bearer token; empty for local backends (no header sent), set for cloud.")
    backend: str = Field(
        "ollama",
        description=(
            "LLM client backend to use. "
            "'ollama' (default): Ollama-compatible client with 400-retry. "
            "'generic': bare OpenAI-compatible client for cloud providers and other servers."
        ),
    )
    temperature: float = 0.3
    top_p: float = 0.9
    max_tokens: int = 4000
    timeout_s: float = Field(default=120.0, description="HTTP timeout for the chat request (read).")


class AIExtractionConfig(BaseModel):
    """Optional AI-based capability extraction.

    When enabled, one completion call is made with the whole task corpus
    before the heuristic strategies. Any failure, timeout or unusable reply
    falls back to the heuristic pipeline.
    """

    enabled: bool = False
    model_key: str = Field("quality", description="Key into ``models`` for the extraction model.")
    timeout_s: float = Field(
        AI_EXTRACTION_DEFAULT_TIMEOUT_S, gt=0,
        description="Wall-clock bound on the extraction call; on expiry the heuristic path runs.",
    )


class CapabilityMapConfig(BaseModel):
    """Root config: model endpoints, discovery options and AI extraction."""
    models: Dict[str, ModelConfig] = Field(default_factory=dict)
    discovery: DiscoveryOptions = Field(default_factory=DiscoveryOptions)
    ai_extraction: AIExtractionConfig = Field(default_factory=AIExtractionConfig)

    @model_validator(mode="after")
    def _ai_model_key_exists(self) -> "CapabilityMapConfig":
        """An enabled extraction step must reference a configured model."""
        if self.ai_extraction.enabled and self.ai_extraction.model_key not in self.models:
            raise ValueError(
                f"ai_extraction.model_key {self.ai_extraction.model_key!r} is not defined in models "
                f"(available: {sorted(self.models)})."
            )
        return self


# Default: Ollama on localhost:11434, AI extraction off.
DEFAULT_CONFIG = CapabilityMapConfig(
    models={
        "quality": ModelConfig(
            base_url="http://localhost:11434/v1",
            model="qwen2.5:14b",
            temperature=0.3,
            max_tokens=4000,
        ),
    },
)
