"""timeblock - time-block extraction and column layout for outline notes."""

__version__ = "0.1.0"
