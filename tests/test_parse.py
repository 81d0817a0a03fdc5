"""Tests for interval parsing stage."""

import pytest

from timeblock.models import TimeInterval
from timeblock.pipeline.stage_parse import (
    IntervalParser,
    TimeFormat,
    convert_12_to_24,
    format_interval,
    format_time,
    format_time_range,
    is_valid_time_range,
    parse_time_range,
    snap_to_grid,
)


class TestConvert12To24:
    """Tests for 12-hour clock conversion."""

    @pytest.mark.parametrize(
        "hour,period,expected",
        [
            (12, "am", 0),
            (12, "pm", 12),
            (1, "am", 1),
            (1, "pm", 13),
            (11, "PM", 23),
            (9, "AM", 9),
        ],
    )
    def test_conversion(self, hour, period, expected):
        assert convert_12_to_24(hour, period) == expected


class TestIsValidTimeRange:
    """Tests for range validation."""

    def test_valid(self):
        assert is_valid_time_range(9, 0, 10, 30)

    def test_zero_duration_accepted(self):
        assert is_valid_time_range(9, 0, 9, 0)

    def test_end_before_start_rejected(self):
        assert not is_valid_time_range(10, 0, 9, 59)

    def test_hour_out_of_range(self):
        assert not is_valid_time_range(24, 0, 24, 30)

    def test_minute_out_of_range(self):
        assert not is_valid_time_range(9, 60, 10, 0)


class TestIntervalParser:
    """Tests for IntervalParser."""

    @pytest.fixture
    def parser(self):
        return IntervalParser()

    def test_24_hour(self, parser):
        """24-hour ranges parse via the 24-hour pattern."""
        found = parser.match("10:00-12:00")
        assert found is not None
        assert found.format == TimeFormat.H24
        assert found.interval.start_minute == 600
        assert found.interval.end_minute == 720
        assert found.interval.source_text == "10:00-12:00"

    def test_24_hour_with_spaces(self, parser):
        interval = parser.parse("Meeting 9:30 - 11:15 with team")
        assert interval.start_minute == 9 * 60 + 30
        assert interval.end_minute == 11 * 60 + 15
        assert interval.source_text == "9:30 - 11:15"

    def test_12_hour_not_read_as_24_hour(self, parser):
        """The lookahead keeps 12-hour text away from the 24-hour pattern."""
        found = parser.match("10:00am-12:00pm")
        assert found.format == TimeFormat.H12
        assert found.interval.start_minute == 600
        assert found.interval.end_minute == 720
        assert found.interval.source_text == "10:00am-12:00pm"

    def test_12_hour_afternoon(self, parser):
        interval = parser.parse("1:30pm - 3:00PM dentist")
        assert interval.start_minute == 13 * 60 + 30
        assert interval.end_minute == 15 * 60
        assert interval.source_text == "1:30pm - 3:00PM"

    def test_12_hour_short(self, parser):
        found = parser.match("gym 9am-11am")
        assert found.format == TimeFormat.H12_SHORT
        assert found.interval.start_minute == 540
        assert found.interval.end_minute == 660
        assert found.interval.source_text == "9am-11am"

    def test_12_hour_midnight(self, parser):
        interval = parser.parse("12am-1am")
        assert interval.start_minute == 0
        assert interval.end_minute == 60

    def test_noon(self, parser):
        interval = parser.parse("11am-12pm")
        assert interval.start_minute == 660
        assert interval.end_minute == 720

    def test_24_hour_followed_by_word_starting_with_a(self, parser):
        """Only a real am/pm marker blocks the 24-hour pattern."""
        interval = parser.parse("10:00-11:00 agenda")
        assert interval.end_minute == 660

    def test_trailing_pm_on_24_hour_range_is_rejected(self, parser):
        assert parser.parse("10:00-12:00pm") is None

    @pytest.mark.parametrize("text", ["25:00-26:00", "10:70-11:00", "10:00-09:00", "13pm-14pm"])
    def test_invalid_rejected(self, parser, text):
        assert parser.parse(text) is None

    @pytest.mark.parametrize("text", ["", "no time here", "10:00", "at 10 until 12", "10-12"])
    def test_no_interval(self, parser, text):
        assert parser.parse(text) is None

    def test_zero_duration(self, parser):
        interval = parser.parse("09:00-09:00 reminder")
        assert interval.start_minute == interval.end_minute == 540
        assert interval.duration == 0

    def test_span_points_at_match(self, parser):
        text = "Call #work 14:00-15:30 with Ann"
        found = parser.match(text)
        start, end = found.span
        assert text[start:end] == "14:00-15:30"

    def test_first_valid_pattern_wins(self, parser):
        """A 24-hour range wins over a 12-hour range later on the line."""
        interval = parser.parse("9am-10am moved to 14:00-15:00")
        assert interval.source_text == "14:00-15:00"

    def test_invalid_first_pattern_falls_through(self, parser):
        """An invalid 24-hour match does not block a later valid format."""
        interval = parser.parse("25:00-26:00 or 9am-10am")
        assert interval.source_text == "9am-10am"

    def test_digits_not_split(self, parser):
        assert parser.parse("110:00-12:00") is None

    def test_period_must_end_the_word(self, parser):
        assert parser.parse("10:00am-11:00pmx") is None

    def test_restricted_formats(self):
        parser = IntervalParser(formats=[TimeFormat.H24])
        assert parser.parse("9am-10am") is None
        assert parser.parse("09:00-10:00") is not None

    def test_never_shifts(self, parser):
        interval = parser.parse("01:00-02:00")
        assert not interval.is_shifted

    def test_module_level_parse(self):
        assert parse_time_range("08:00-09:00").start_minute == 480


class TestRoundTrip:
    """Formatting a parsed 24-hour range reproduces the literal."""

    @pytest.mark.parametrize(
        "text",
        ["00:00-00:00", "00:00-23:59", "08:05-08:06", "12:30-18:45", "23:00-23:59"],
    )
    def test_round_trip(self, text):
        interval = parse_time_range(text)
        assert interval.source_text == text
        assert format_interval(interval) == text

    def test_every_quarter_hour(self):
        """Sweep start/end pairs on a coarse grid."""
        starts = range(0, 24 * 60, 75)
        for start in starts:
            for end in (start, min(start + 45, 1439), 1439):
                text = format_time_range(start // 60, start % 60, end // 60, end % 60)
                interval = parse_time_range(text)
                assert interval is not None, text
                assert (interval.start_minute, interval.end_minute) == (start, end)
                assert format_interval(interval) == text


class TestFormatting:
    """Tests for formatting helpers."""

    def test_format_time(self):
        assert format_time(7, 5) == "07:05"

    def test_format_shifted_interval(self):
        interval = TimeInterval(start_minute=60, end_minute=120, source_text="01:00-02:00")
        assert format_interval(interval.shifted()) == "01:00-02:00"

    @pytest.mark.parametrize(
        "minutes,granularity,expected",
        [(0, 15, 0), (7, 15, 0), (8, 15, 15), (22, 15, 15), (23, 15, 30), (5, 10, 10), (17, 0, 17)],
    )
    def test_snap_to_grid(self, minutes, granularity, expected):
        assert snap_to_grid(minutes, granularity) == expected
