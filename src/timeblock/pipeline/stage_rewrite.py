"""Text Rewrite Helpers - Compute new record text after a user edit.

The host applies the returned strings to its store; nothing here touches
records directly. Only the matched interval span and configured category
markers are changed, everything else on the line is kept.
"""

import re
from typing import Optional

from timeblock.models import Category, TimeInterval, parse_surface_form

from .stage_parse import IntervalParser, format_interval

# Legacy spans written by older clients: 0930-1100, 0930 – 1100
COMPACT_RANGE_PATTERN = re.compile(r"(?<!\d)\d{4}\s*[-–]\s*\d{4}(?!\d)")
WHITESPACE_PATTERN = re.compile(r"\s+")

_parser = IntervalParser()


def _collapse(text: str) -> str:
    return WHITESPACE_PATTERN.sub(" ", text).strip()


def marker_removal_pattern(categories: list[Category]) -> Optional[re.Pattern]:
    """Pattern matching every spelling of every configured marker.

    Each name is removed as ``#name``, ``#[[name]]`` and ``[[name]]``
    regardless of how it was configured.
    """
    alternatives = []
    for category in categories:
        for form in category.patterns:
            _kind, name = parse_surface_form(form)
            escaped = re.escape(name)
            alternatives.append(rf"#\[\[{escaped}\]\]|\[\[{escaped}\]\]|#{escaped}(?![\w-])")
    if not alternatives:
        return None
    return re.compile("|".join(alternatives), re.IGNORECASE)


def strip_categories(text: str, categories: list[Category]) -> str:
    """Remove all configured category markers and tidy whitespace."""
    pattern = marker_removal_pattern(categories)
    if pattern is not None:
        text = pattern.sub("", text)
    return _collapse(text)


def strip_time_ranges(text: str) -> str:
    """Remove every recognized interval span, including compact legacy ones."""
    while True:
        found = _parser.match(text)
        if found is None:
            break
        start, end = found.span
        text = text[:start] + text[end:]
    return _collapse(COMPACT_RANGE_PATTERN.sub("", text))


def strip_time_and_categories(text: str, categories: list[Category]) -> str:
    """Remove category markers and interval spans, keeping free text."""
    return strip_time_ranges(strip_categories(text, categories))


def retag(text: str, category: Category, categories: list[Category]) -> str:
    """Replace any configured marker on the line with `category`'s marker."""
    base = strip_categories(text, categories)
    return f"{base} {category.primary_marker}".strip()


def replace_time_range(text: str, interval: TimeInterval) -> str:
    """Swap the line's interval span for `interval`, or prepend it.

    Shifted intervals are written back in their own day's clock time.
    """
    new_range = format_interval(interval)
    found = _parser.match(text)
    if found is not None:
        start, end = found.span
        return text[:start] + new_range + text[end:]
    if COMPACT_RANGE_PATTERN.search(text):
        return COMPACT_RANGE_PATTERN.sub(new_range, text, count=1)
    return f"{new_range} {text}".strip()


def compose_entry_text(interval: TimeInterval, category: Optional[Category] = None) -> str:
    """Text for a newly created entry: the range, two spaces, the marker."""
    text = format_interval(interval)
    if category is not None:
        text += f"  {category.primary_marker}"
    return text
