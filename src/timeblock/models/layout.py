"""Layout IR models: engine input/output and positioned results."""

from typing import Optional

from pydantic import Field, model_validator

from .base import BaseCoreModel
from .category import Category
from .interval import TimeInterval
from .record import Record


class LayoutItem(BaseCoreModel):
    """Interval handed to the layout engine, in already-resolved minutes."""

    id: str
    start: int
    end: int

    @model_validator(mode="after")
    def _check_order(self) -> "LayoutItem":
        if self.end < self.start:
            raise ValueError(f"Layout item {self.id} ends before it starts")
        return self

    @property
    def duration(self) -> int:
        return self.end - self.start


class LayoutSlot(BaseCoreModel):
    """Column placement computed for one layout item."""

    id: str
    column: int = Field(..., ge=0)
    total_columns: int = Field(..., ge=1)

    @model_validator(mode="after")
    def _check_column(self) -> "LayoutSlot":
        if self.column >= self.total_columns:
            raise ValueError(
                f"Column {self.column} out of range for {self.total_columns} columns"
            )
        return self


class PositionedInterval(BaseCoreModel):
    """
    Final output unit: a record with its interval, category and placement.

    Renderers size the entry to `1 / total_columns` of the lane width and
    offset it by `column` lanes.
    """

    record: Record
    interval: TimeInterval
    category: Optional[Category] = None
    column: int = Field(default=0, ge=0)
    total_columns: int = Field(default=1, ge=1)
    scope: str = Field(default="", description="Name of the batch the record came from")

    @model_validator(mode="after")
    def _check_column(self) -> "PositionedInterval":
        if self.column >= self.total_columns:
            raise ValueError(
                f"Column {self.column} out of range for {self.total_columns} columns"
            )
        return self

    @property
    def is_categorized(self) -> bool:
        return self.category is not None

    def color(self, default_color: str = "#9E9E9E") -> str:
        """Display color, falling back to `default_color` when uncategorized."""
        return self.category.color if self.category else default_color
