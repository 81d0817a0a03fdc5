"""Interval Parsing Stage - Extract time ranges from record text.

Recognizes a small fixed grammar of interval annotations, tried most specific
first:
- 24-hour:            10:00-12:00, 9:30 - 11:15
- 12-hour w/ minutes: 10:00am-12:30pm
- 12-hour short:      9am-11am

The matched substring is preserved so callers can rewrite just that span.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from timeblock.models import MINUTES_PER_DAY, TimeInterval


class TimeFormat(str, Enum):
    """Interval grammars, in the order they are tried."""

    H24 = "24h"
    H12 = "12h"
    H12_SHORT = "12h_short"


DASH = r"\s*[-–]\s*"

# The 24-hour lookahead keeps "10:00-12:00pm" from being read as 24-hour.
TIME_PATTERNS = [
    (
        TimeFormat.H24,
        r"(?<!\d)(?P<sh>\d{1,2}):(?P<sm>\d{2})" + DASH
        + r"(?P<eh>\d{1,2}):(?P<em>\d{2})(?!\d)(?!\s*[ap]m\b)",
    ),
    (
        TimeFormat.H12,
        r"(?<!\d)(?P<sh>\d{1,2}):(?P<sm>\d{2})\s*(?P<sp>am|pm)" + DASH
        + r"(?P<eh>\d{1,2}):(?P<em>\d{2})\s*(?P<ep>am|pm)\b",
    ),
    (
        TimeFormat.H12_SHORT,
        r"(?<![\d:])(?P<sh>\d{1,2})\s*(?P<sp>am|pm)" + DASH
        + r"(?P<eh>\d{1,2})\s*(?P<ep>am|pm)\b",
    ),
]


@dataclass(frozen=True)
class IntervalMatch:
    """A validated interval and where it was found."""

    format: TimeFormat
    interval: TimeInterval
    span: tuple[int, int]  # [start, end) offsets into the parsed text


def convert_12_to_24(hour: int, period: str) -> int:
    """Convert a 12-hour clock hour to 24-hour.

    12am is midnight (0) and 12pm is noon (12).
    """
    is_pm = period.lower() == "pm"
    if hour == 12:
        return 12 if is_pm else 0
    return hour + 12 if is_pm else hour


def is_valid_time_range(
    start_hour: int, start_minute: int, end_hour: int, end_minute: int
) -> bool:
    """Check clock bounds and that the range does not run backwards."""
    if not (0 <= start_hour <= 23 and 0 <= end_hour <= 23):
        return False
    if not (0 <= start_minute <= 59 and 0 <= end_minute <= 59):
        return False
    return end_hour * 60 + end_minute >= start_hour * 60 + start_minute


def _fields_24h(match: re.Match) -> tuple[int, int, int, int]:
    return (
        int(match["sh"]),
        int(match["sm"]),
        int(match["eh"]),
        int(match["em"]),
    )


def _fields_12h(match: re.Match) -> tuple[int, int, int, int]:
    return (
        convert_12_to_24(int(match["sh"]), match["sp"]),
        int(match["sm"]),
        convert_12_to_24(int(match["eh"]), match["ep"]),
        int(match["em"]),
    )


def _fields_12h_short(match: re.Match) -> tuple[int, int, int, int]:
    return (
        convert_12_to_24(int(match["sh"]), match["sp"]),
        0,
        convert_12_to_24(int(match["eh"]), match["ep"]),
        0,
    )


FIELD_EXTRACTORS: dict[TimeFormat, Callable[[re.Match], tuple[int, int, int, int]]] = {
    TimeFormat.H24: _fields_24h,
    TimeFormat.H12: _fields_12h,
    TimeFormat.H12_SHORT: _fields_12h_short,
}


class IntervalParser:
    """Extracts the first valid time interval from a line of text.

    Each pattern is tried once, in order; the first one that matches and
    validates wins. Anything else yields None rather than an exception.
    """

    def __init__(self, formats: Optional[list[TimeFormat]] = None):
        """Initialize the parser.

        Args:
            formats: Subset of formats to recognize, kept in the canonical
                order. Defaults to all of them.
        """
        enabled = set(formats) if formats is not None else set(TimeFormat)
        self.patterns = [
            (fmt, re.compile(pattern, re.IGNORECASE))
            for fmt, pattern in TIME_PATTERNS
            if fmt in enabled
        ]

    def match(self, text: str) -> Optional[IntervalMatch]:
        """Find the first valid interval in `text` with its format and span."""
        if not text:
            return None

        for fmt, pattern in self.patterns:
            found = pattern.search(text)
            if not found:
                continue
            start_hour, start_minute, end_hour, end_minute = FIELD_EXTRACTORS[fmt](found)
            if not is_valid_time_range(start_hour, start_minute, end_hour, end_minute):
                continue
            interval = TimeInterval(
                start_minute=start_hour * 60 + start_minute,
                end_minute=end_hour * 60 + end_minute,
                source_text=found.group(0),
            )
            return IntervalMatch(format=fmt, interval=interval, span=found.span())

        return None

    def parse(self, text: str) -> Optional[TimeInterval]:
        """Parse a time interval from `text`, or return None."""
        result = self.match(text)
        return result.interval if result else None


_default_parser = IntervalParser()


def parse_time_range(text: str) -> Optional[TimeInterval]:
    """Parse `text` with the default parser."""
    return _default_parser.parse(text)


def format_time(hour: int, minute: int) -> str:
    """Format a clock time as zero-padded ``HH:MM``."""
    return f"{hour:02d}:{minute:02d}"


def format_time_range(
    start_hour: int, start_minute: int, end_hour: int, end_minute: int
) -> str:
    """Format a range in the canonical 24-hour ``HH:MM-HH:MM`` form."""
    return f"{format_time(start_hour, start_minute)}-{format_time(end_hour, end_minute)}"


def format_interval(interval: TimeInterval) -> str:
    """Format an interval, folding shifted minutes back into a single day."""
    start = interval.start_minute % MINUTES_PER_DAY
    end = start + interval.duration
    if end >= MINUTES_PER_DAY:
        end = MINUTES_PER_DAY - 1
    return format_time_range(start // 60, start % 60, end // 60, end % 60)


def snap_to_grid(minutes: int, granularity: int) -> int:
    """Round `minutes` to the nearest multiple of `granularity`.

    Exact halves round up, so 5 snaps to 10 on a 10-minute grid.
    """
    if granularity <= 0:
        return minutes
    return ((minutes + granularity // 2) // granularity) * granularity
