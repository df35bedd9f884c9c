from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any

from eventseries.util import SHARED_FIELDS

if TYPE_CHECKING:
    from eventseries.recurrence import RecurrenceRule


@dataclass(frozen=True, kw_only=True)
class EventTemplate:
    """Instance-independent fields shared by every member of a series."""

    title: str
    venue: str
    capacity: int
    community_id: str
    description: str | None = None
    price: float = 0
    image_url: str | None = None
    external_link: str | None = None
    host_id: str | None = None

    def shared_fields(self) -> dict[str, Any]:
        return {name: getattr(self, name) for name in SHARED_FIELDS}


@dataclass(frozen=True, kw_only=True)
class EventRecord(EventTemplate):
    """A persisted (or about to be persisted) event row.

    Attributes:
        id: Store-assigned ID (None until inserted)
        date_time: When this instance happens; never touched by propagation
        series_parent_id: ID of the series parent (None for the parent itself
            and for standalone events)
        series_index: 1-based position within the series (None if standalone)
        is_recurring_parent: True only for the single parent of a series
        is_cancelled: Cancelled events are read-only
        recurrence: The originating rule, parent only. Stored for reference
            and never re-evaluated.
    """

    date_time: datetime | None = None
    id: str | None = None
    series_parent_id: str | None = None
    series_index: int | None = None
    is_recurring_parent: bool = False
    is_cancelled: bool = False
    recurrence: "RecurrenceRule | None" = None

    @property
    def in_series(self) -> bool:
        return self.is_recurring_parent or self.series_parent_id is not None

    @property
    def series_id(self) -> str | None:
        """ID of the parent of this record's series (None if standalone)."""
        if self.series_parent_id is not None:
            return self.series_parent_id
        return self.id if self.is_recurring_parent else None

    @classmethod
    def from_template(
        cls, template: EventTemplate, date_time: datetime | None, **fields: Any
    ) -> "EventRecord":
        return cls(**template.shared_fields(), date_time=date_time, **fields)

    def __str__(self) -> str:
        when = self.date_time.isoformat() if self.date_time else "unscheduled"
        if self.series_index is not None:
            return f"EventRecord('{self.title}', {when}, #{self.series_index})"
        return f"EventRecord('{self.title}', {when})"


__all__ = ["EventTemplate", "EventRecord"]
