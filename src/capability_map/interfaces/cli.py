"""CLI: Typer app wired to the capability map generator."""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, NoReturn, Optional

import typer
from pydantic import ValidationError
from rich import print as rprint
from rich import print_json
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from capability_map.application import generate_capability_map, llm_generate_capability_map
from capability_map.application.ports import TaskSource
from capability_map.config import CapabilityMapConfig, DiscoveryOptions, load_config
from capability_map.domain import CapabilityMap, CapabilityMapError
from capability_map.infrastructure.chat import build_chat_client
from capability_map.infrastructure.tasks import JsonFileTaskSource

app = typer.Typer(help="capmap: discover capabilities and their relationships from a task list.")


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _fail(message: str) -> NoReturn:
    rprint(f"[red]{escape(message)}[/red]", file=sys.stderr)
    sys.exit(1)


def _load_config() -> CapabilityMapConfig:
    try:
        return load_config()
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        _fail(f"Invalid config (CAPMAP_CONFIG_PATH): {e}")


def _task_source(tasks_file: Path) -> TaskSource:
    return JsonFileTaskSource(tasks_file)


def _discovery_options(base: DiscoveryOptions, overrides: Dict[str, Any]) -> DiscoveryOptions:
    data = base.model_dump()
    data.update({k: v for k, v in overrides.items() if v is not None})
    if data.get("max_nodes") == 0:
        data["max_nodes"] = None
    return DiscoveryOptions.model_validate(data)


def _summary(cap_map: CapabilityMap) -> Panel:
    meta = cap_map.metadata
    stats = meta.generation_stats
    lines = [
        f"[bold]Tasks:[/bold] {meta.task_count}",
        f"[bold]Capabilities:[/bold] {meta.discovered_capabilities}",
        f"[bold]Relationships:[/bold] {meta.relationship_count}",
        f"[bold]Confidence:[/bold] {meta.confidence:.2f}",
        f"[bold]Method:[/bold] {stats.get('discovery_method', '?')}",
    ]
    if stats.get("fallback_reason"):
        lines.append(f"[yellow]AI fallback:[/yellow] {escape(str(stats['fallback_reason']))}")
    if stats.get("error"):
        lines.append(f"[red]{stats['error']}[/red]")
    return Panel.fit("\n".join(lines), title="Capability map")


@app.command()
def generate(
    tasks_file: Path = typer.Argument(..., help="JSON file with a list of tasks (or {\"tasks\": [...]})."),
    max_nodes: Optional[int] = typer.Option(None, help="Keep at most N capabilities (0 = no limit)."),
    max_edges: Optional[int] = typer.Option(None, help="Keep at most N relationships."),
    min_overlap: Optional[float] = typer.Option(None, help="Minimum shared-task ratio for related-to edges."),
    min_similarity: Optional[float] = typer.Option(None, help="Minimum keyword similarity for semantic edges."),
    max_edges_per_capability: Optional[int] = typer.Option(None, help="Maximum relationships per capability."),
    min_edge_confidence: Optional[float] = typer.Option(None, help="Drop relationships below this confidence."),
    exclude_completed: bool = typer.Option(False, "--exclude-completed", help="Ignore tasks with status 'done'."),
    ai: Optional[bool] = typer.Option(None, "--ai/--no-ai", help="Use AI extraction (default: from config)."),
    model_key: Optional[str] = typer.Option(None, help="Model profile for AI extraction (default: from config)."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the map JSON here instead of stdout."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose (DEBUG) logging to stderr."),
) -> None:
    """Generate a capability map from TASKS_FILE and print it as JSON."""
    _setup_logging(verbose)
    config = _load_config()

    try:
        options = _discovery_options(config.discovery, {
            "max_nodes": max_nodes,
            "max_edges": max_edges,
            "min_overlap": min_overlap,
            "min_similarity": min_similarity,
            "max_edges_per_capability": max_edges_per_capability,
            "min_edge_confidence": min_edge_confidence,
            "include_completed_tasks": False if exclude_completed else None,
        })
    except ValidationError as e:
        _fail(f"Invalid option: {e}")

    use_ai = config.ai_extraction.enabled if ai is None else ai
    try:
        tasks = _task_source(tasks_file).list_tasks()
        if use_ai:
            key = model_key or config.ai_extraction.model_key
            model_cfg = config.models.get(key)
            if model_cfg is None:
                _fail(f"Unknown model profile {key!r} (available: {', '.join(sorted(config.models)) or 'none'}).")
            try:
                chat_client = build_chat_client(model_cfg)
            except ValueError as e:
                _fail(str(e))
            rprint(f"[dim]Using model: {model_cfg.model} at {model_cfg.base_url}[/dim]", file=sys.stderr)
            cap_map = asyncio.run(
                llm_generate_capability_map(
                    tasks,
                    options,
                    chat_client=chat_client,
                    model=model_cfg.model,
                    timeout_s=config.ai_extraction.timeout_s,
                    temperature=model_cfg.temperature,
                    top_p=model_cfg.top_p,
                    max_tokens=model_cfg.max_tokens,
                )
            )
        else:
            cap_map = generate_capability_map(tasks, options)
    except CapabilityMapError as e:
        _fail(str(e))

    Console(stderr=True).print(_summary(cap_map))
    text = json.dumps(cap_map.to_dict(), indent=2, ensure_ascii=False)
    if output is not None:
        output.write_text(text + "\n", encoding="utf-8")
        rprint(f"[dim]Wrote {output}[/dim]", file=sys.stderr)
    else:
        print_json(text)


@app.command("config")
def show_config() -> None:
    """Print the effective configuration (defaults merged with CAPMAP_CONFIG_PATH)."""
    config = _load_config()
    print_json(config.model_dump_json())
