"""Turn a list of occurrences into the records of a series.

Children reference their parent by its store-assigned ID, which does not
exist until the parent has been inserted. A :class:`SeriesPlan` therefore
holds unbound children and binds them once that ID is known.
"""

from collections.abc import Sequence
from dataclasses import dataclass, replace
from datetime import datetime

from eventseries.errors import ValidationError
from eventseries.recurrence import RecurrenceRule
from eventseries.records import EventRecord, EventTemplate


@dataclass(frozen=True)
class SeriesPlan:
    """Record descriptions for one series, ready to be written.

    Attributes:
        parent: First occurrence, ``series_index=1``
        children: Remaining occurrences, ``series_index=2..n``, not yet bound
            to a parent ID
    """

    parent: EventRecord
    children: tuple[EventRecord, ...]

    @property
    def total(self) -> int:
        return 1 + len(self.children)

    def bind(self, parent_id: str) -> list[EventRecord]:
        """Return the children pointing at the persisted parent."""
        return [replace(child, series_parent_id=parent_id) for child in self.children]


def build_series(
    dates: Sequence[datetime],
    template: EventTemplate,
    *,
    rule: RecurrenceRule | None = None,
) -> SeriesPlan:
    """Build the parent and child records of a series.

    A single date is valid: it yields a recurring parent with no children.

    Args:
        dates: Occurrences, strictly increasing (as produced by
            ``generate_occurrences``)
        template: Shared fields copied onto every record
        rule: Originating rule, stored on the parent for reference

    Raises:
        ValidationError: If ``dates`` is empty or not strictly increasing

    Example:
        >>> plan = build_series(generate_occurrences(rule), template, rule=rule)
        >>> plan.parent.series_index, [c.series_index for c in plan.children]
        (1, [2, 3, 4, 5])
    """
    if not dates:
        raise ValidationError(
            "Cannot build a series from zero occurrences.\n"
            "The recurrence configuration did not produce any event dates; "
            "adjust the rule's start, pattern or end condition.",
            field="dates",
        )
    for earlier, later in zip(dates, dates[1:]):
        if later <= earlier:
            raise ValidationError(
                f"Occurrences must be strictly increasing, "
                f"got {later.isoformat()} after {earlier.isoformat()}.",
                field="dates",
            )

    parent = EventRecord.from_template(
        template,
        dates[0],
        series_index=1,
        is_recurring_parent=True,
        recurrence=rule,
    )
    children = tuple(
        EventRecord.from_template(template, date_time, series_index=index)
        for index, date_time in enumerate(dates[1:], start=2)
    )
    return SeriesPlan(parent=parent, children=children)


__all__ = ["SeriesPlan", "build_series"]
