"""Pipeline stages for timeblock processing.

Stages (all pure, no store access):
1. stage_parse - Time interval extraction from record text
2. stage_resolve - Category inheritance through the ancestor chain
3. stage_layout - Column placement for overlapping intervals
4. stage_rewrite - Text edits for the host to apply

The orchestrator runs stages 1-3 over record batches.
"""

from .orchestrator import Orchestrator, ScopeBatch, run_pipeline
from .stage_layout import LayoutInvariantError, OverlapLayoutEngine, calculate_layout
from .stage_parse import (
    IntervalMatch,
    IntervalParser,
    TimeFormat,
    format_interval,
    format_time,
    format_time_range,
    parse_time_range,
    snap_to_grid,
)
from .stage_resolve import (
    CategoryResolver,
    find_category,
    find_category_batch,
    find_category_in_text,
    iter_ancestor_chain,
)
from .stage_rewrite import (
    compose_entry_text,
    replace_time_range,
    retag,
    strip_categories,
    strip_time_and_categories,
)

__all__ = [
    # Parse
    "IntervalParser",
    "IntervalMatch",
    "TimeFormat",
    "parse_time_range",
    "format_time",
    "format_time_range",
    "format_interval",
    "snap_to_grid",
    # Resolve
    "CategoryResolver",
    "find_category",
    "find_category_batch",
    "find_category_in_text",
    "iter_ancestor_chain",
    # Layout
    "OverlapLayoutEngine",
    "LayoutInvariantError",
    "calculate_layout",
    # Rewrite
    "compose_entry_text",
    "replace_time_range",
    "retag",
    "strip_categories",
    "strip_time_and_categories",
    # Orchestration
    "Orchestrator",
    "ScopeBatch",
    "run_pipeline",
]
