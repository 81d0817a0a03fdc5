"""Models for timeblock.

This module defines the Pydantic models that flow between the pipeline
stages. All models are frozen: the host hands in snapshots and receives new
objects back, nothing is mutated in place.

Model Hierarchy:
- Record → TimeInterval (parse) → Category (resolve) → PositionedInterval
- LayoutItem → LayoutSlot (layout engine input/output)
"""

from .base import (
    MINUTES_PER_DAY,
    BaseCoreModel,
    ScopeKind,
    SurfaceFormKind,
)
from .category import Category, parse_surface_form
from .interval import TimeInterval
from .layout import LayoutItem, LayoutSlot, PositionedInterval
from .record import Record

__all__ = [
    # Base types
    "MINUTES_PER_DAY",
    "BaseCoreModel",
    "ScopeKind",
    "SurfaceFormKind",
    # Record
    "Record",
    # Interval
    "TimeInterval",
    # Category
    "Category",
    "parse_surface_form",
    # Layout
    "LayoutItem",
    "LayoutSlot",
    "PositionedInterval",
]
