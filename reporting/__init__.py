"""Shared reporting utilities."""

from .utils import (
    catalog_snapshot,
    format_percentage,
    render_condensed_summary,
    truncate_list,
)

__all__ = [
    "catalog_snapshot",
    "format_percentage",
    "render_condensed_summary",
    "truncate_list",
]
