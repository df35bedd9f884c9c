"""In-memory row store implementation.

This module provides MemoryStore, a simple row store backed by a dict.
It's useful for testing, prototyping, and ephemeral admin sessions.
"""

import uuid
from collections.abc import Iterable, Mapping
from dataclasses import fields as dataclass_fields
from dataclasses import replace
from typing import Any

from typing_extensions import override

from eventseries.errors import PersistenceError
from eventseries.records import EventRecord
from eventseries.store import RowStore

_COLUMNS = frozenset(f.name for f in dataclass_fields(EventRecord))


class MemoryStore(RowStore):
    """Row store keeping records in insertion order in a dict.

    Attributes:
        _records: Record ID -> stored record
    """

    def __init__(self, records: Iterable[EventRecord] = ()) -> None:
        """Initialize an empty or pre-populated store.

        Args:
            records: Optional initial records; each gets a fresh ID
        """
        self._records: dict[str, EventRecord] = {}
        for record in records:
            self.insert(record)

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, record_id: object) -> bool:
        return record_id in self._records

    def records(self) -> list[EventRecord]:
        return list(self._records.values())

    def _new_id(self) -> str:
        return str(uuid.uuid4())

    @override
    def insert(self, record: EventRecord) -> str:
        record_id = self._new_id()
        self._records[record_id] = replace(record, id=record_id)
        return record_id

    @override
    def bulk_insert(self, records: Iterable[EventRecord]) -> list[str]:
        batch = list(records)
        # Validate the whole batch first so a bad row writes nothing
        for record in batch:
            parent_id = record.series_parent_id
            if parent_id is not None and parent_id not in self._records:
                raise PersistenceError(
                    f"Parent record {parent_id!r} does not exist.",
                    record_id=parent_id,
                )
        return [self.insert(record) for record in batch]

    @override
    def update(self, record_id: str, fields: Mapping[str, Any]) -> None:
        stored = self._get(record_id)
        unknown = set(fields) - _COLUMNS
        if unknown or "id" in fields:
            bad = ", ".join(sorted(unknown | ({"id"} & set(fields))))
            raise PersistenceError(
                f"Cannot update column(s) {bad} on record {record_id!r}.",
                record_id=record_id,
            )
        self._records[record_id] = replace(stored, **fields)

    @override
    def delete(self, record_id: str) -> None:
        self._get(record_id)
        del self._records[record_id]

    @override
    def fetch(self, record_id: str) -> EventRecord:
        return self._get(record_id)

    @override
    def fetch_children(self, parent_id: str) -> list[EventRecord]:
        children = [r for r in self._records.values() if r.series_parent_id == parent_id]
        return sorted(children, key=lambda r: r.series_index or 0)

    def _get(self, record_id: str) -> EventRecord:
        try:
            return self._records[record_id]
        except KeyError:
            raise PersistenceError(
                f"Record {record_id!r} not found in memory store.",
                record_id=record_id,
            ) from None


def store(*records: EventRecord) -> MemoryStore:
    """Create a memory store holding the given records.

    This is a convenience function for creating in-memory stores without
    needing to instantiate MemoryStore directly.

    Example:
        >>> from eventseries.store.memory import store
        >>> from eventseries import EventRecord
        >>>
        >>> rows = store(
        ...     EventRecord(title="Meetup", venue="Hall", capacity=40,
        ...                 community_id="c1"),
        ... )
        >>> len(rows)
        1
    """
    return MemoryStore(records)


__all__ = ["MemoryStore", "store"]
