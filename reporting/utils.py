"""Utility helpers for summarizing catalog state on console/log surfaces."""

from __future__ import annotations

from typing import Any, Dict, Iterable, Optional

DEFAULT_MAX_LIST_ITEMS = 3


def truncate_list(items: Iterable[Any], max_items: int = DEFAULT_MAX_LIST_ITEMS) -> str:
    """Return a comma-separated string capped at *max_items* with a suffix when truncated."""
    if not items:
        return ""

    materialized = [str(item) for item in items if item is not None and str(item).strip()]
    if not materialized:
        return ""

    if len(materialized) <= max_items:
        return ", ".join(materialized)

    visible = materialized[:max_items]
    remaining = len(materialized) - max_items
    return f"{', '.join(visible)} (+{remaining} more)"


def format_percentage(value: Optional[float], precision: int = 1) -> str:
    """Format a numeric ratio as a percentage string, handling None gracefully."""
    if value is None:
        return "N/A"
    return f"{round(float(value), precision):.{precision}f}%"


def catalog_snapshot(model) -> Dict[str, Any]:
    """Collect per-project counts from a TestModel."""
    projects = []
    for project in model.projects.values():
        files = list(project.files.values())
        discovered = [f for f in files if f.is_discovered]
        projects.append({
            "name": project.name,
            "test_dir": project.test_dir,
            "is_first": project.is_first,
            "files": len(files),
            "discovered": len(discovered),
            "tests": len(model.test_entries(project)),
            "undiscovered_files": sorted(f.file for f in files if not f.is_discovered),
        })
    return {
        "total_files": len(model.all_files),
        "projects": projects,
    }


def _discovery_ratio(files: int, discovered: int) -> Optional[float]:
    if not files:
        return None
    return discovered * 100.0 / files


def render_condensed_summary(snapshot: Dict[str, Any]) -> str:
    """Render a compact multi-line summary of a catalog snapshot."""
    projects = snapshot.get("projects", [])
    lines = [f"Catalog: {len(projects)} project(s), {snapshot.get('total_files', 0)} file(s)"]
    for project in projects:
        marker = "*" if project.get("is_first") else " "
        ratio = format_percentage(_discovery_ratio(project["files"], project["discovered"]))
        lines.append(
            f"{marker} {project['name']}: {project['files']} file(s), "
            f"{project['tests']} test(s), discovered {ratio}"
        )
        pending = project.get("undiscovered_files") or []
        if pending and project["discovered"]:
            lines.append(f"    pending: {truncate_list(pending)}")
    return "\n".join(lines)
