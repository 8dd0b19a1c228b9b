"""Tests for config loading."""
from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from capability_map.config import DEFAULT_CONFIG, CapabilityMapConfig, DiscoveryOptions, get_config, load_config
from capability_map.config import loader as config_loader


def _write(tmp_path, data) -> str:
    path = tmp_path / "capmap.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)


def test_get_config_default(monkeypatch):
    monkeypatch.delenv("CAPMAP_CONFIG_PATH", raising=False)
    cfg = get_config()
    assert cfg is DEFAULT_CONFIG
    assert "quality" in cfg.models
    assert cfg.ai_extraction.enabled is False
    assert cfg.discovery == DiscoveryOptions()


def test_default_discovery_options():
    opts = DiscoveryOptions()
    assert opts.confidence_threshold == 0.5
    assert opts.max_nodes == 20
    assert opts.max_edges == 50
    assert opts.min_overlap == 0.25
    assert opts.min_similarity == 0.3
    assert opts.max_edges_per_capability == 5
    assert opts.min_edge_confidence == 0.5
    assert opts.include_completed_tasks is True


def test_missing_config_file_uses_defaults(monkeypatch, tmp_path):
    monkeypatch.setenv("CAPMAP_CONFIG_PATH", str(tmp_path / "nope.json"))
    assert load_config() is DEFAULT_CONFIG


def test_get_config_from_file(monkeypatch, tmp_path):
    path = _write(tmp_path, {
        "models": {
            "custom": {
                "base_url": "http://127.0.0.1:9000/v1",
                "model": "my-model",
                "temperature": 0.2,
                "max_tokens": 1000,
            }
        },
        "discovery": {"max_edges": 10, "include_completed_tasks": False},
        "ai_extraction": {"enabled": True, "model_key": "custom", "timeout_s": 15},
    })
    monkeypatch.setenv("CAPMAP_CONFIG_PATH", path)
    cfg = get_config()
    assert cfg.models["custom"].model == "my-model"
    assert cfg.models["custom"].temperature == 0.2
    assert cfg.models["custom"].backend == "ollama"
    assert cfg.discovery.max_edges == 10
    assert cfg.discovery.include_completed_tasks is False
    assert cfg.discovery.min_overlap == 0.25
    assert cfg.ai_extraction.timeout_s == 15


def test_legacy_camel_case_options(monkeypatch, tmp_path):
    path = _write(tmp_path, {"options": {"maxNodes": 7, "minEdgeConfidence": 0.6, "includeCompletedTasks": False}})
    monkeypatch.setenv("CAPMAP_CONFIG_PATH", path)
    cfg = load_config()
    assert cfg.discovery.max_nodes == 7
    assert cfg.discovery.min_edge_confidence == 0.6
    assert cfg.discovery.include_completed_tasks is False


def test_load_config_is_cached(monkeypatch, tmp_path):
    path = _write(tmp_path, {"discovery": {"max_edges": 3}})
    monkeypatch.setenv("CAPMAP_CONFIG_PATH", path)
    first = load_config()
    assert load_config() is first
    load_config.cache_clear()
    config_loader._env = None
    assert load_config() is not first


def test_invalid_json_raises(monkeypatch, tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    monkeypatch.setenv("CAPMAP_CONFIG_PATH", str(path))
    with pytest.raises(json.JSONDecodeError):
        load_config()


def test_enabled_ai_extraction_requires_known_model():
    with pytest.raises(ValidationError, match="model_key"):
        CapabilityMapConfig.model_validate({"ai_extraction": {"enabled": True, "model_key": "missing"}})


def test_disabled_ai_extraction_ignores_model_key():
    cfg = CapabilityMapConfig.model_validate({"ai_extraction": {"model_key": "missing"}})
    assert cfg.ai_extraction.enabled is False


@pytest.mark.parametrize(
    "field,value",
    [
        ("confidence_threshold", 1.5),
        ("min_overlap", -0.1),
        ("max_edges", 0),
        ("max_nodes", 0),
        ("max_edges_per_capability", 0),
    ],
)
def test_discovery_option_bounds(field, value):
    with pytest.raises(ValidationError):
        DiscoveryOptions(**{field: value})


def test_max_nodes_can_be_disabled():
    assert DiscoveryOptions(max_nodes=None).max_nodes is None
