"""Row store support for persisting event records.

This module provides the abstract base class the engine writes through,
along with implementations for different backends.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from eventseries.records import EventRecord


@dataclass(frozen=True)
class WriteResult:
    """Result of a single write against the store.

    Attributes:
        success: True if the write succeeded, False otherwise
        record_id: ID of the record that was written (or attempted)
        error: The exception that occurred if failed, None if successful
    """

    success: bool
    record_id: str
    error: Exception | None


class RowStore(ABC):
    """Abstract base class for record stores.

    Backends implement single-row primitives and raise ``PersistenceError``
    for any failure, including unknown IDs. There are no multi-record
    transactions; callers compensate explicitly.
    """

    @abstractmethod
    def insert(self, record: EventRecord) -> str:
        """Insert a record and return its generated ID.

        The record's own ``id`` is ignored.
        """
        pass

    @abstractmethod
    def bulk_insert(self, records: Iterable[EventRecord]) -> list[str]:
        """Insert records in one request, returning their IDs in order.

        Either every record is written or none is.
        """
        pass

    @abstractmethod
    def update(self, record_id: str, fields: Mapping[str, Any]) -> None:
        """Overwrite ``fields`` on an existing record."""
        pass

    @abstractmethod
    def delete(self, record_id: str) -> None:
        pass

    @abstractmethod
    def fetch(self, record_id: str) -> EventRecord:
        pass

    @abstractmethod
    def fetch_children(self, parent_id: str) -> list[EventRecord]:
        """Return the children of a series parent ordered by ``series_index``."""
        pass

    def try_update(self, record_id: str, fields: Mapping[str, Any]) -> WriteResult:
        """Update a record, reporting failure as a WriteResult instead of raising.

        Args:
            record_id: Record to update
            fields: Field values to write

        Returns:
            WriteResult with success=False and the raised exception on failure
        """
        try:
            self.update(record_id, fields)
        except Exception as exc:
            return WriteResult(success=False, record_id=record_id, error=exc)
        return WriteResult(success=True, record_id=record_id, error=None)


__all__ = ["RowStore", "WriteResult"]
