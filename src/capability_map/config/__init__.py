"""Configuration: schema, loading from env/file, lexicons and shared constants."""

from .schema import (
    DEFAULT_CONFIG,
    AIExtractionConfig,
    CapabilityMapConfig,
    DiscoveryOptions,
    ModelConfig,
)
from .loader import load_config
from .constants import AI_EXTRACTION_DEFAULT_TIMEOUT_S, LLM_CHAT_DEFAULT_TIMEOUT_S

get_config = load_config  # alias

__all__ = [
    "DEFAULT_CONFIG", "AIExtractionConfig", "CapabilityMapConfig", "DiscoveryOptions", "ModelConfig",
    "load_config", "get_config",
    "AI_EXTRACTION_DEFAULT_TIMEOUT_S", "LLM_CHAT_DEFAULT_TIMEOUT_S",
]
