"""Tests for the event service facade."""

from datetime import date, datetime

import pytest

from eventseries import (
    Count,
    EventService,
    EventTemplate,
    PartialPropagationFailure,
    PersistenceError,
    RecurrenceRule,
    Until,
    ValidationError,
    Weekly,
)
from eventseries.store.memory import MemoryStore
from eventseries.util import THURSDAY, TUESDAY

TEMPLATE = EventTemplate(
    title="Coding Dojo",
    venue="Library Room 2",
    capacity=20,
    community_id="community-9",
    external_link="https://example.org/dojo",
)


def _service(mem: MemoryStore | None = None) -> EventService:
    store = mem if mem is not None else MemoryStore()
    return EventService(store, clock=lambda: datetime(2025, 1, 1, 12, 0))


def _rule(**kwargs) -> RecurrenceRule:
    defaults = dict(
        start=datetime(2025, 1, 7, 18, 0),
        pattern=Weekly(days_of_week={TUESDAY, THURSDAY}),
        end=Count(5),
    )
    return RecurrenceRule(**{**defaults, **kwargs})


def test_create_event_has_no_series_fields():
    service = _service()

    record_id = service.create_event(TEMPLATE, datetime(2025, 2, 1, 10, 0))

    record = service.store.fetch(record_id)
    assert record.series_index is None
    assert record.series_parent_id is None
    assert not record.is_recurring_parent
    assert not record.in_series


def test_create_event_without_date():
    service = _service()

    record_id = service.create_event(TEMPLATE)

    assert service.store.fetch(record_id).date_time is None


def test_create_recurring_persists_whole_series():
    service = _service()
    rule = _rule()

    created = service.create_recurring(TEMPLATE, rule)

    assert created.total == 5
    members = service.series_members(created.parent_id)
    assert [m.date_time.date() for m in members] == [
        date(2025, 1, 7),
        date(2025, 1, 9),
        date(2025, 1, 14),
        date(2025, 1, 16),
        date(2025, 1, 21),
    ]
    assert members[0].recurrence == rule
    assert members[0].recurrence.to_fields()["recurrence_days_of_week"] == [2, 4]


def test_create_recurring_with_no_dates_writes_nothing():
    mem = MemoryStore()
    rule = _rule(end=Until(date(2025, 1, 6)))

    with pytest.raises(ValidationError):
        _service(mem).create_recurring(TEMPLATE, rule)

    assert len(mem) == 0


def test_create_recurring_rejects_end_date_in_past():
    mem = MemoryStore()
    rule = _rule(start=datetime(2024, 11, 5, 18, 0), end=Until(date(2024, 12, 1)))

    with pytest.raises(ValidationError):
        _service(mem).create_recurring(TEMPLATE, rule)

    assert len(mem) == 0


def test_preview_uses_clock():
    service = _service()

    assert len(service.preview(_rule(end=Count(30)), limit=3)) == 3


def test_update_with_apply_to_all_keeps_dates():
    """Title and venue change on every member; each date stays its own."""
    service = _service()
    created = service.create_recurring(TEMPLATE, _rule())
    before = [m.date_time for m in service.series_members(created.parent_id)]
    edited = created.child_ids[1]

    service.update_event(
        edited,
        {"title": "Coding Dojo: Katas", "venue": "Library Room 5"},
        apply_to_all=True,
    )

    members = service.series_members(edited)
    assert all(m.title == "Coding Dojo: Katas" for m in members)
    assert all(m.venue == "Library Room 5" for m in members)
    assert [m.date_time for m in members] == before


def test_update_date_time_stays_on_edited_member():
    service = _service()
    created = service.create_recurring(TEMPLATE, _rule())
    edited = created.child_ids[0]
    moved = datetime(2025, 1, 10, 19, 0)

    result = service.update_event(
        edited, {"date_time": moved, "capacity": 25}, apply_to_all=True
    )

    assert service.store.fetch(edited).date_time == moved
    others = [m for m in service.series_members(edited) if m.id != edited]
    assert all(m.date_time != moved for m in others)
    assert all(m.capacity == 25 for m in others)
    assert len(result.updated_ids) == 4


def test_update_without_apply_to_all_touches_one_record():
    service = _service()
    created = service.create_recurring(TEMPLATE, _rule())

    service.update_event(created.parent_id, {"title": "Only this one"})

    titles = [m.title for m in service.series_members(created.parent_id)]
    assert titles == ["Only this one"] + ["Coding Dojo"] * 4


def test_cancelled_event_cannot_be_edited():
    service = _service()
    record_id = service.create_event(TEMPLATE, datetime(2025, 2, 1, 10, 0))
    service.update_event(record_id, {"is_cancelled": True})

    with pytest.raises(ValidationError):
        service.update_event(record_id, {"title": "Revived"})

    assert service.store.fetch(record_id).title == "Coding Dojo"


def test_series_fields_cannot_be_edited():
    service = _service()
    created = service.create_recurring(TEMPLATE, _rule())

    with pytest.raises(ValidationError):
        service.update_event(created.child_ids[0], {"series_index": 1})


def test_partial_propagation_surfaces_after_member_update():
    class _Store(MemoryStore):
        fail_id: str | None = None

        def update(self, record_id, fields):
            if record_id == self.fail_id:
                raise PersistenceError("update rejected", record_id=record_id)
            super().update(record_id, fields)

    mem = _Store()
    service = _service(mem)
    created = service.create_recurring(TEMPLATE, _rule())
    mem.fail_id = created.parent_id

    with pytest.raises(PartialPropagationFailure):
        service.update_event(created.child_ids[0], {"title": "New"}, apply_to_all=True)

    assert mem.fetch(created.child_ids[0]).title == "New"
    assert mem.fetch(created.parent_id).title == "Coding Dojo"


def test_series_members_of_standalone_event():
    service = _service()
    record_id = service.create_event(TEMPLATE, datetime(2025, 2, 1, 10, 0))

    assert [m.id for m in service.series_members(record_id)] == [record_id]
