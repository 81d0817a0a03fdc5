"""Exceptions raised to callers of timeblock.

Per-record problems (unparseable text, unresolvable ancestry) never raise;
only batch-level configuration mistakes do.
"""


class TimeblockError(Exception):
    """Base class for timeblock errors."""


class ConfigurationError(TimeblockError, ValueError):
    """Category or pipeline configuration cannot be used."""
