"""Tests for turning occurrences into series records."""

from datetime import datetime, timedelta

import pytest

from eventseries import (
    Count,
    EventTemplate,
    RecurrenceRule,
    ValidationError,
    Weekly,
    build_series,
    generate_occurrences,
)

TEMPLATE = EventTemplate(
    title="Board Game Night",
    venue="Community Hall",
    capacity=30,
    community_id="community-1",
    description="Bring your favourite game",
    price=150,
    host_id="host-7",
)


def _weekly_dates(n: int) -> list[datetime]:
    start = datetime(2025, 1, 6, 19, 0)
    return [start + timedelta(weeks=i) for i in range(n)]


def test_first_date_becomes_parent():
    plan = build_series(_weekly_dates(5), TEMPLATE)

    assert plan.parent.series_index == 1
    assert plan.parent.is_recurring_parent
    assert plan.parent.series_parent_id is None
    assert plan.parent.date_time == datetime(2025, 1, 6, 19, 0)


def test_remaining_dates_become_children():
    dates = _weekly_dates(5)
    plan = build_series(dates, TEMPLATE)

    assert plan.total == 5
    assert [c.series_index for c in plan.children] == [2, 3, 4, 5]
    assert [c.date_time for c in plan.children] == dates[1:]
    assert not any(c.is_recurring_parent for c in plan.children)
    # Unbound until the parent has an ID
    assert all(c.series_parent_id is None for c in plan.children)


def test_every_record_copies_the_template():
    plan = build_series(_weekly_dates(3), TEMPLATE)

    for record in (plan.parent, *plan.children):
        assert record.shared_fields() == TEMPLATE.shared_fields()


def test_rule_is_stored_on_parent_only():
    rule = RecurrenceRule(
        start=datetime(2025, 1, 6, 19, 0), pattern=Weekly(), end=Count(3)
    )
    plan = build_series(generate_occurrences(rule), TEMPLATE, rule=rule)

    assert plan.parent.recurrence == rule
    assert all(c.recurrence is None for c in plan.children)


def test_bind_points_children_at_parent():
    plan = build_series(_weekly_dates(4), TEMPLATE)

    bound = plan.bind("parent-123")

    assert [c.series_parent_id for c in bound] == ["parent-123"] * 3
    assert [c.series_index for c in bound] == [2, 3, 4]


def test_single_date_is_a_parent_without_children():
    """A one-occurrence series is still tagged as a recurring parent."""
    plan = build_series(_weekly_dates(1), TEMPLATE)

    assert plan.parent.is_recurring_parent
    assert plan.children == ()
    assert plan.bind("parent-1") == []


def test_empty_dates_are_rejected():
    with pytest.raises(ValidationError):
        build_series([], TEMPLATE)


def test_unordered_dates_are_rejected():
    dates = _weekly_dates(3)

    with pytest.raises(ValidationError):
        build_series([dates[0], dates[2], dates[1]], TEMPLATE)

    with pytest.raises(ValidationError):
        build_series([dates[0], dates[0]], TEMPLATE)
