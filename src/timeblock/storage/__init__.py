"""Storage layer for timeblock.

The core never talks to the host document store directly; it reads through
the RecordStore protocol or through precomputed lookup maps.
"""

from .memory import InMemoryRecordStore, RecordStore, build_lookup_maps

__all__ = [
    "RecordStore",
    "InMemoryRecordStore",
    "build_lookup_maps",
]
