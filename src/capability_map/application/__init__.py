"""Application layer: the capability discovery and relationship graph engine."""

from .generate_map import generate_capability_map, llm_generate_capability_map

__all__ = ["generate_capability_map", "llm_generate_capability_map"]
