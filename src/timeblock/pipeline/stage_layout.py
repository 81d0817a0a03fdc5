"""Layout Stage - Side-by-side columns for concurrent intervals.

Two passes over the intervals:
1. Greedy interval-graph coloring assigns each interval the leftmost column
   that is free at its start time.
2. A sweep line over start/end events finds the overlap groups and gives
   every member the column count of its whole group, so all entries in a
   cluster share one lane width.

Intervals are half-open: one ending at 10:00 and another starting at 10:00
do not overlap.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from timeblock.models import LayoutItem, LayoutSlot

logger = logging.getLogger(__name__)


# Event ranks for equal times: ends free their column before new starts
# arrive, instants close only after everything starting with them.
END = 0
START = 1
INSTANT_END = 2


@dataclass
class _Placement:
    index: int
    item: LayoutItem
    column: int = 0
    max_column: int = 0


class LayoutInvariantError(RuntimeError):
    """Computed layout places overlapping intervals in one column."""


def layout_order(items: list[LayoutItem]) -> list[int]:
    """Indices of `items` by start, longer first on equal starts.

    Exact ties keep input order.
    """
    return sorted(range(len(items)), key=lambda i: (items[i].start, -items[i].duration))


def assign_columns(items: list[LayoutItem]) -> list[int]:
    """Greedy column assignment for items already in layout order.

    `frontiers[c]` is the end time of the interval last placed in column c
    and whether that interval was an instant. An instant still occupies its
    column at its own minute.
    """
    frontiers: list[tuple[int, bool]] = []
    columns: list[int] = []
    for item in items:
        occupant = (item.end, item.duration == 0)
        for column, (end, instant) in enumerate(frontiers):
            if end < item.start or (end == item.start and not instant):
                frontiers[column] = occupant
                break
        else:
            column = len(frontiers)
            frontiers.append(occupant)
        columns.append(column)
    return columns


def _build_events(placements: list[_Placement]) -> list[tuple[int, int, int]]:
    events = []
    for position, placement in enumerate(placements):
        item = placement.item
        end_rank = INSTANT_END if item.duration == 0 else END
        events.append((item.start, START, position))
        events.append((item.end, end_rank, position))
    events.sort()
    return events


def size_overlap_groups(placements: list[_Placement]) -> None:
    """Sweep start/end events and record each placement's max group column.

    Each active interval's `max_column` is raised to the highest column
    active alongside it. When the active set empties an overlap group is
    complete and all its members take the group's maximum.
    """
    active: set[int] = set()
    group: list[int] = []
    current_max = -1

    for _time, kind, position in _build_events(placements):
        placement = placements[position]
        if kind == START:
            active.add(position)
            group.append(position)
            current_max = max(current_max, placement.column)
            for other in active:
                placements[other].max_column = max(placements[other].max_column, current_max)
            continue

        placement.max_column = max(placement.max_column, current_max)
        active.discard(position)
        if active:
            current_max = max(placements[other].column for other in active)
            continue

        group_max = max(placements[member].max_column for member in group)
        for member in group:
            placements[member].max_column = group_max
        group = []
        current_max = -1


def check_layout(placements: list[_Placement]) -> None:
    """Raise LayoutInvariantError if the placements are inconsistent."""
    by_column: dict[int, list[LayoutItem]] = {}
    for placement in placements:
        if placement.column > placement.max_column:
            raise LayoutInvariantError(
                f"Item {placement.item.id} column {placement.column} "
                f"exceeds group max {placement.max_column}"
            )
        by_column.setdefault(placement.column, []).append(placement.item)

    for column, items in by_column.items():
        reach: Optional[LayoutItem] = None
        for item in sorted(items, key=lambda item: (item.start, item.end)):
            if not item.duration:
                continue
            if reach is not None and item.start < reach.end:
                raise LayoutInvariantError(
                    f"Items {reach.id} and {item.id} overlap in column {column}"
                )
            if reach is None or item.end > reach.end:
                reach = item


class OverlapLayoutEngine:
    """Computes column placement for a set of intervals.

    The result is a pure function of the input set; ties between equal
    starts with equal durations fall back to input order.
    """

    def __init__(self, validate: bool = True):
        """Initialize the engine.

        Args:
            validate: Check the non-overlap invariant after computing and
                fall back to one column per interval if it is breached.
        """
        self.validate = validate

    def layout(self, items: list[LayoutItem]) -> list[LayoutSlot]:
        """Place `items` into columns.

        Args:
            items: Intervals with resolved start/end minutes.

        Returns:
            One LayoutSlot per item, in the same order as `items`.
        """
        if not items:
            return []

        indexed = layout_order(items)
        ordered = [items[i] for i in indexed]
        placements = [
            _Placement(index=i, item=item, column=column, max_column=column)
            for i, item, column in zip(indexed, ordered, assign_columns(ordered))
        ]
        size_overlap_groups(placements)

        if self.validate:
            try:
                check_layout(placements)
            except LayoutInvariantError as e:
                logger.warning("Layout invariant breached, using one column per item: %s", e)
                return self._fallback(items)

        slots: list[Optional[LayoutSlot]] = [None] * len(items)
        for placement in placements:
            slots[placement.index] = LayoutSlot(
                id=placement.item.id,
                column=placement.column,
                total_columns=placement.max_column + 1,
            )
        return slots

    @staticmethod
    def _fallback(items: list[LayoutItem]) -> list[LayoutSlot]:
        total = len(items)
        return [
            LayoutSlot(id=item.id, column=column, total_columns=total)
            for column, item in enumerate(items)
        ]


def calculate_layout(items: list[LayoutItem]) -> list[LayoutSlot]:
    """Lay out `items` with a default engine."""
    return OverlapLayoutEngine().layout(items)
