"""Create a series against a row store without multi-record transactions.

The parent is written first, then the children in one bulk insert. If the
children fail the parent is deleted again, so the visible outcome is all or
nothing. If that delete fails as well, the orphan is reported as
:class:`PartialSeriesCreationFailure`.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime

from eventseries.errors import PartialSeriesCreationFailure
from eventseries.recurrence import RecurrenceRule
from eventseries.records import EventTemplate
from eventseries.series import build_series
from eventseries.store import RowStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SeriesCreated:
    """IDs of a freshly written series."""

    parent_id: str
    child_ids: tuple[str, ...]

    @property
    def ids(self) -> tuple[str, ...]:
        return (self.parent_id, *self.child_ids)

    @property
    def total(self) -> int:
        return 1 + len(self.child_ids)


class SeriesWriteCoordinator:
    def __init__(self, store: RowStore) -> None:
        self.store = store

    def create_series(
        self,
        template: EventTemplate,
        dates: Sequence[datetime],
        *,
        rule: RecurrenceRule | None = None,
    ) -> SeriesCreated:
        """Persist a parent and its children.

        Args:
            template: Shared fields for every member
            dates: Occurrences; the first becomes the parent
            rule: Originating rule, stored on the parent

        Returns:
            SeriesCreated with the parent ID and child IDs in series order

        Raises:
            ValidationError: If the dates cannot form a series (nothing written)
            PersistenceError: Parent insert failed (nothing written)
            Exception: Whatever the child insert raised, re-raised after the
                parent was deleted again
            PartialSeriesCreationFailure: Child insert failed and the parent
                could not be deleted
        """
        plan = build_series(dates, template, rule=rule)

        parent_id = self.store.insert(plan.parent)
        logger.debug("Inserted series parent %s (%s)", parent_id, template.title)

        if not plan.children:
            logger.info("Created series %s with a single occurrence", parent_id)
            return SeriesCreated(parent_id=parent_id, child_ids=())

        try:
            child_ids = self.store.bulk_insert(plan.bind(parent_id))
        except Exception as exc:
            logger.warning(
                "Child insert for series %s failed, deleting parent: %s",
                parent_id,
                exc,
            )
            try:
                self.store.delete(parent_id)
            except Exception as cleanup_exc:
                logger.error(
                    "Compensating delete of series parent %s failed, "
                    "record is orphaned: %s",
                    parent_id,
                    cleanup_exc,
                )
                raise PartialSeriesCreationFailure(
                    parent_id, exc, cleanup_exc
                ) from exc
            raise

        logger.info(
            "Created series %s: %s (%d events)",
            parent_id,
            template.title,
            plan.total,
        )
        return SeriesCreated(parent_id=parent_id, child_ids=tuple(child_ids))


__all__ = ["SeriesCreated", "SeriesWriteCoordinator"]
