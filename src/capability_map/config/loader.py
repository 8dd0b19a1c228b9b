"""Load config from CAPMAP_CONFIG_PATH or return default.

``load_config()`` is memoised with ``functools.lru_cache`` so the file is read
and parsed at most once per process.  Call ``load_config.cache_clear()`` to
force a re-read (useful in tests and when ``CAPMAP_CONFIG_PATH`` changes at
runtime).
"""

from __future__ import annotations

import functools
import json
import logging
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from .schema import CapabilityMapConfig, DEFAULT_CONFIG

logger = logging.getLogger(__name__)

_LEGACY_OPTION_NAMES = {
    "confidenceThreshold": "confidence_threshold",
    "maxNodes": "max_nodes",
    "maxEdges": "max_edges",
    "minOverlap": "min_overlap",
    "minSimilarity": "min_similarity",
    "maxEdgesPerCapability": "max_edges_per_capability",
    "minEdgeConfidence": "min_edge_confidence",
    "includeCompletedTasks": "include_completed_tasks",
}


class _Env(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="CAPMAP_", extra="ignore")
    config_path: Optional[str] = None


_env: Optional[_Env] = None


def _get_env() -> _Env:
    global _env
    if _env is None:
        _env = _Env()
    return _env


@functools.lru_cache(maxsize=1)
def load_config() -> CapabilityMapConfig:
    """Load config from CAPMAP_CONFIG_PATH if set and present; else return DEFAULT_CONFIG.

    Result is cached for the lifetime of the process.  Call
    ``load_config.cache_clear()`` to force a reload.

    Raises:
        json.JSONDecodeError: If the file is not valid JSON.
        pydantic.ValidationError: If the file does not match the schema.
    """
    path = _get_env().config_path
    if not path or not path.strip():
        return DEFAULT_CONFIG
    p = Path(path).expanduser().resolve()
    if not p.is_file():
        logger.debug("Config path %s does not exist; using defaults", p)
        return DEFAULT_CONFIG
    data = json.loads(p.read_text(encoding="utf-8"))
    # Legacy exports keep the options under "options" with camelCase names.
    if "options" in data and "discovery" not in data:
        data["discovery"] = {
            _LEGACY_OPTION_NAMES.get(k, k): v for k, v in data.pop("options").items()
        }
    return CapabilityMapConfig.model_validate(data)
