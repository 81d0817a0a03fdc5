"""Time interval models."""

from pydantic import Field, model_validator

from .base import MINUTES_PER_DAY, BaseCoreModel


class TimeInterval(BaseCoreModel):
    """
    Parsed start/end range in minutes since local midnight.

    Parsed values fall within a single day. The orchestrator may shift an
    interval by a whole day to place early next-day entries after the
    primary day; the parser never does.
    """

    start_minute: int = Field(..., ge=0)
    end_minute: int = Field(..., ge=0)
    source_text: str = Field(..., description="Exact substring that was matched")

    @model_validator(mode="after")
    def _check_order(self) -> "TimeInterval":
        if self.end_minute < self.start_minute:
            raise ValueError(
                f"end_minute {self.end_minute} is before start_minute {self.start_minute}"
            )
        return self

    @property
    def duration(self) -> int:
        """Length in minutes (zero for instant markers)."""
        return self.end_minute - self.start_minute

    @property
    def start_hour(self) -> int:
        return self.start_minute // 60

    @property
    def end_hour(self) -> int:
        return self.end_minute // 60

    @property
    def is_shifted(self) -> bool:
        """True once moved past the end of its own day."""
        return self.start_minute >= MINUTES_PER_DAY

    def shifted(self, offset: int = MINUTES_PER_DAY) -> "TimeInterval":
        """Return a copy moved by `offset` minutes, keeping the source text."""
        return TimeInterval(
            start_minute=self.start_minute + offset,
            end_minute=self.end_minute + offset,
            source_text=self.source_text,
        )

    def overlaps(self, other: "TimeInterval") -> bool:
        """Half-open overlap test; touching intervals do not overlap."""
        return (
            self.start_minute < other.end_minute
            and other.start_minute < self.end_minute
        )
