"""In-memory record store.

The host document store owns the real records. This module describes the
read interface the resolver needs from it and provides an in-memory
implementation over a record snapshot, plus the precomputed lookup maps used
by batch resolution.
"""

from typing import Iterable, Optional, Protocol

from timeblock.models import Record


class RecordStore(Protocol):
    """Read access to record text and parent pointers."""

    def get_text(self, record_id: str) -> str:
        """Text of the record, empty string if unknown."""
        ...

    def get_parent_id(self, record_id: str) -> Optional[str]:
        """Parent id of the record, None for roots and unknown ids."""
        ...


class InMemoryRecordStore:
    """RecordStore backed by a dict of records.

    Later records with the same id replace earlier ones.
    """

    def __init__(self, records: Iterable[Record] = ()):
        self._records: dict[str, Record] = {}
        self.add_all(records)

    def add(self, record: Record) -> None:
        self._records[record.id] = record

    def add_all(self, records: Iterable[Record]) -> None:
        for record in records:
            self.add(record)

    def get(self, record_id: str) -> Optional[Record]:
        return self._records.get(record_id)

    def get_text(self, record_id: str) -> str:
        record = self._records.get(record_id)
        return record.text if record else ""

    def get_parent_id(self, record_id: str) -> Optional[str]:
        record = self._records.get(record_id)
        return record.parent_id if record else None

    def content_map(self) -> dict[str, str]:
        """Snapshot of record id to text, for batch resolution."""
        return {record_id: record.text for record_id, record in self._records.items()}

    def parent_map(self) -> dict[str, Optional[str]]:
        """Snapshot of record id to parent id, for batch resolution."""
        return {
            record_id: record.parent_id for record_id, record in self._records.items()
        }

    def __contains__(self, record_id: object) -> bool:
        return record_id in self._records

    def __len__(self) -> int:
        return len(self._records)


def build_lookup_maps(
    records: Iterable[Record],
) -> tuple[dict[str, str], dict[str, Optional[str]]]:
    """Build the (content_by_id, parent_by_id) cache for a record batch."""
    store = InMemoryRecordStore(records)
    return store.content_map(), store.parent_map()
