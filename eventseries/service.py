"""Event creation and editing on top of a row store.

EventService is the entry point an admin application calls: it decides
between a plain event and a recurring series on create, and between a
single-record update and a series-wide edit on update.
"""

import logging
from collections.abc import Callable, Mapping
from datetime import datetime
from typing import Any

from eventseries.coordinator import SeriesCreated, SeriesWriteCoordinator
from eventseries.errors import ValidationError
from eventseries.propagator import PropagationResult, SeriesEditPropagator
from eventseries.recurrence import RecurrenceRule, preview_occurrences
from eventseries.records import EventRecord, EventTemplate
from eventseries.store import RowStore
from eventseries.util import SERIES_FIELDS, SHARED_FIELDS

logger = logging.getLogger(__name__)


class EventService:
    """Create and edit standalone events and recurring series.

    Args:
        store: Row store backend
        clock: Zero-argument callable returning "now"; only used to check
            recurrence end dates (default: ``datetime.now``)
    """

    def __init__(
        self, store: RowStore, clock: Callable[[], datetime] = datetime.now
    ) -> None:
        self.store = store
        self.clock = clock
        self.coordinator = SeriesWriteCoordinator(store)
        self.propagator = SeriesEditPropagator(store)

    def create_event(
        self, template: EventTemplate, date_time: datetime | None = None
    ) -> str:
        """Insert one standalone event with no series fields."""
        record_id = self.store.insert(EventRecord.from_template(template, date_time))
        logger.info("Created event %s: %s", record_id, template.title)
        return record_id

    def preview(self, rule: RecurrenceRule, limit: int | None = None) -> list[datetime]:
        return preview_occurrences(rule, now=self.clock(), limit=limit)

    def create_recurring(
        self, template: EventTemplate, rule: RecurrenceRule
    ) -> SeriesCreated:
        """Generate a rule's occurrences and persist them as a series.

        Raises:
            ValidationError: End date in the past, or the rule produced no
                occurrences (nothing written)
            PersistenceError: See ``SeriesWriteCoordinator.create_series``
            PartialSeriesCreationFailure: See ``SeriesWriteCoordinator.create_series``
        """
        dates = self.preview(rule)
        if not dates:
            raise ValidationError(
                "The recurrence configuration did not produce any event dates.\n"
                "Fix: move the end date after the start, or pick weekdays "
                "that occur before it."
            )
        return self.coordinator.create_series(template, dates, rule=rule)

    def update_event(
        self,
        member_id: str,
        fields: Mapping[str, Any],
        apply_to_all: bool = False,
    ) -> PropagationResult:
        """Update one event and optionally its whole series.

        Only the shared fields in ``fields`` are propagated; ``date_time``
        stays specific to the edited event.

        Raises:
            ValidationError: The event is cancelled, or ``fields`` touches
                series metadata
            PersistenceError: The event could not be read or updated
            PartialPropagationFailure: The event was updated but some other
                members of its series were not
        """
        managed = sorted(set(fields) & set(SERIES_FIELDS))
        if managed:
            raise ValidationError(
                f"Series fields cannot be edited: {', '.join(managed)}.",
                field=managed[0],
            )

        member = self.store.fetch(member_id)
        if member.is_cancelled:
            raise ValidationError(
                f"Event {member_id!r} has been cancelled and can no longer be edited."
            )

        self.store.update(member_id, fields)
        logger.info("Updated event %s", member_id)

        shared = {k: v for k, v in fields.items() if k in SHARED_FIELDS}
        return self.propagator.propagate_edit(member_id, shared, apply_to_all)

    def series_members(self, member_id: str) -> list[EventRecord]:
        """Return every member of ``member_id``'s series, parent first.

        A standalone event is returned on its own.
        """
        member = self.store.fetch(member_id)
        series_id = member.series_id
        if series_id is None:
            return [member]
        parent = member if series_id == member.id else self.store.fetch(series_id)
        return [parent, *self.store.fetch_children(series_id)]


__all__ = ["EventService"]
