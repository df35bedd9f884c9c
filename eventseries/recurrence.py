"""Recurrence rules and occurrence generation.

A rule pairs an anchor date-time with a pattern variant and an end condition.
Patterns and end conditions are separate frozen dataclasses, so fields such as
``day_of_month`` or ``Count.n`` only exist where they mean something.

Generation is backed by python-dateutil's rrule implementation and is pure:
the same rule always yields the same list.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date, datetime, time
from itertools import islice
from typing import Any, ClassVar, TypeAlias

from dateutil.rrule import DAILY, FR, MO, MONTHLY, SA, SU, TH, TU, WE, WEEKLY, rrule

from eventseries.errors import ValidationError
from eventseries.util import DAY_INDEX, SAFETY_CAPS, Day

# dateutil weekday constants indexed 0=Sunday .. 6=Saturday
_WEEKDAYS = (SU, MO, TU, WE, TH, FR, SA)


def _check_frequency(frequency: int) -> None:
    if isinstance(frequency, bool) or not isinstance(frequency, int) or frequency < 1:
        raise ValidationError(
            f"frequency must be a positive integer, got {frequency!r}.\n"
            f"Example: Weekly(frequency=2) for every other week",
            field="frequency",
        )


def _normalize_days(days: Iterable[int | Day]) -> frozenset[int]:
    """Convert weekday names or indices to a set of indices (0=Sunday)."""
    indices: set[int] = set()
    for d in days:
        if isinstance(d, str):
            d_lower = d.lower()
            if d_lower not in DAY_INDEX:
                valid = ", ".join(DAY_INDEX)
                raise ValidationError(
                    f"Invalid day name: '{d}'\nValid days: {valid}\n",
                    field="days_of_week",
                )
            indices.add(DAY_INDEX[d_lower])  # type: ignore[index]
        elif isinstance(d, int) and not isinstance(d, bool) and 0 <= d <= 6:
            indices.add(d)
        else:
            raise ValidationError(
                f"Weekday index must be in range [0, 6] (0=Sunday), got {d!r}.",
                field="days_of_week",
            )
    return frozenset(indices)


@dataclass(frozen=True, kw_only=True)
class Daily:
    """Every ``frequency`` days."""

    name: ClassVar[str] = "daily"

    frequency: int = 1

    def __post_init__(self) -> None:
        _check_frequency(self.frequency)

    def rrule_kwargs(self, start: datetime) -> dict[str, Any]:
        return {"freq": DAILY, "interval": self.frequency}


@dataclass(frozen=True, kw_only=True)
class Weekly:
    """Every ``frequency`` weeks on the given weekdays.

    Attributes:
        frequency: Repeat every N weeks, counted from the Sunday-started week
            containing the rule's start
        days_of_week: Weekday indices (0=Sunday .. 6=Saturday) or lowercase
            day names. Empty means the start's own weekday.
    """

    name: ClassVar[str] = "weekly"

    frequency: int = 1
    days_of_week: frozenset[int] = frozenset()

    def __post_init__(self) -> None:
        _check_frequency(self.frequency)
        object.__setattr__(self, "days_of_week", _normalize_days(self.days_of_week))

    def rrule_kwargs(self, start: datetime) -> dict[str, Any]:
        kwargs: dict[str, Any] = {
            "freq": WEEKLY,
            "interval": self.frequency,
            "wkst": SU,
        }
        # Without byweekday rrule falls back to the start's weekday
        if self.days_of_week:
            kwargs["byweekday"] = [_WEEKDAYS[d] for d in sorted(self.days_of_week)]
        return kwargs


@dataclass(frozen=True, kw_only=True)
class Custom(Weekly):
    """User-picked weekdays; generated exactly like :class:`Weekly`."""

    name: ClassVar[str] = "custom"


@dataclass(frozen=True, kw_only=True)
class Monthly:
    """Every ``frequency`` months on ``day_of_month``.

    Days past the end of a short month are clipped to its last day, so
    ``day_of_month=31`` lands on February 28 (or 29), never in March.
    ``None`` uses the day of the rule's start.
    """

    name: ClassVar[str] = "monthly"

    frequency: int = 1
    day_of_month: int | None = None

    def __post_init__(self) -> None:
        _check_frequency(self.frequency)
        if self.day_of_month is not None and not (
            isinstance(self.day_of_month, int)
            and not isinstance(self.day_of_month, bool)
            and 1 <= self.day_of_month <= 31
        ):
            raise ValidationError(
                f"day_of_month must be in range [1, 31], got {self.day_of_month!r}.\n"
                f"Use 31 for the last day of every month.",
                field="day_of_month",
            )

    def resolve_day(self, start: datetime) -> int:
        return self.day_of_month if self.day_of_month is not None else start.day

    def rrule_kwargs(self, start: datetime) -> dict[str, Any]:
        day = self.resolve_day(start)
        # Last matching day out of [min(day, 28), day] clips to the month length
        return {
            "freq": MONTHLY,
            "interval": self.frequency,
            "bymonthday": tuple(range(min(day, 28), day + 1)),
            "bysetpos": -1,
        }


Pattern: TypeAlias = Daily | Weekly | Custom | Monthly


@dataclass(frozen=True)
class Count:
    """Stop after ``n`` occurrences."""

    name: ClassVar[str] = "count"

    n: int

    def __post_init__(self) -> None:
        if isinstance(self.n, bool) or not isinstance(self.n, int) or self.n < 1:
            raise ValidationError(
                f"Count must be at least 1, got {self.n!r}.", field="count"
            )


@dataclass(frozen=True)
class Until:
    """Stop after the last occurrence on or before ``date`` (inclusive).

    A bare ``date`` covers that whole day.
    """

    name: ClassVar[str] = "date"

    date: datetime | date


@dataclass(frozen=True)
class OpenEnded:
    """No end; generation stops at the pattern's safety cap."""

    name: ClassVar[str] = "never"


EndCondition: TypeAlias = Count | Until | OpenEnded

_PATTERNS: dict[str, type[Daily] | type[Weekly] | type[Monthly]] = {
    "daily": Daily,
    "weekly": Weekly,
    "monthly": Monthly,
    "custom": Custom,
}


@dataclass(frozen=True, kw_only=True)
class RecurrenceRule:
    """A transient description of when a recurring event happens.

    Attributes:
        start: Anchor date-time. It is the first candidate occurrence and
            supplies the time of day of every occurrence. A bare ``date``
            anchors at midnight.
        pattern: One of :class:`Daily`, :class:`Weekly`, :class:`Custom`,
            :class:`Monthly`
        end: One of :class:`Count`, :class:`Until`, :class:`OpenEnded`
    """

    start: datetime
    pattern: Pattern
    end: EndCondition = field(default_factory=OpenEnded)

    def __post_init__(self) -> None:
        if not isinstance(self.start, datetime):
            if not isinstance(self.start, date):
                raise ValidationError(
                    f"start must be a datetime or date, "
                    f"got {type(self.start).__name__!r}.",
                    field="start",
                )
            object.__setattr__(self, "start", datetime.combine(self.start, time.min))
        if isinstance(self.end, Until):
            until = self.end.date
            if (
                isinstance(until, datetime)
                and until.tzinfo is not None
                and self.start.tzinfo is None
            ):
                raise ValidationError(
                    "Until bound is timezone-aware but start is naive.\n"
                    "Fix: give start a tzinfo, or pass a naive Until bound.",
                    field="end_date",
                )

    @property
    def until(self) -> datetime | None:
        """The inclusive end bound as a datetime comparable with ``start``."""
        if not isinstance(self.end, Until):
            return None
        until = self.end.date
        if not isinstance(until, datetime):
            until = datetime.combine(until, time.max)
        if until.tzinfo is None and self.start.tzinfo is not None:
            until = until.replace(tzinfo=self.start.tzinfo)
        return until

    @property
    def rrule_kwargs(self) -> dict[str, Any]:
        kwargs = self.pattern.rrule_kwargs(self.start)
        kwargs["dtstart"] = self.start
        if isinstance(self.end, Count):
            kwargs["count"] = self.end.n
        elif isinstance(self.end, Until):
            kwargs["until"] = self.until
        return kwargs

    @property
    def recurrence_rule(self) -> rrule:
        """The uncapped rrule equivalent to this rule."""
        return rrule(**self.rrule_kwargs)

    @classmethod
    def from_fields(
        cls,
        *,
        start: datetime,
        pattern: str,
        frequency: int = 1,
        days_of_week: Iterable[int | Day] | None = None,
        day_of_month: int | None = None,
        end_type: str = "never",
        end_date: datetime | date | None = None,
        count: int | None = None,
    ) -> "RecurrenceRule":
        """Build a rule from the flat, string-typed fields of an event form.

        Args:
            start: Anchor date-time
            pattern: "daily", "weekly", "monthly" or "custom"
            frequency: Repeat every N days/weeks/months
            days_of_week: Weekdays for weekly/custom patterns (ignored otherwise)
            day_of_month: Day for monthly patterns (ignored otherwise)
            end_type: "count", "date" or "never"
            end_date: Required when end_type is "date"
            count: Required when end_type is "count"

        Raises:
            ValidationError: Unknown pattern or end type, missing end value,
                or any invariant violation of the resulting rule

        Example:
            >>> rule = RecurrenceRule.from_fields(
            ...     start=datetime(2025, 1, 6, 18, 30),
            ...     pattern="weekly",
            ...     days_of_week=[1, 3],
            ...     end_type="count",
            ...     count=10,
            ... )
        """
        pattern_cls = _PATTERNS.get(pattern)
        if pattern_cls is None:
            valid = ", ".join(_PATTERNS)
            raise ValidationError(
                f"Unknown recurrence pattern: '{pattern}'\nValid patterns: {valid}\n",
                field="pattern",
            )

        rule_pattern: Pattern
        if issubclass(pattern_cls, Weekly):
            rule_pattern = pattern_cls(
                frequency=frequency, days_of_week=frozenset(days_of_week or ())
            )
        elif pattern_cls is Monthly:
            rule_pattern = Monthly(frequency=frequency, day_of_month=day_of_month)
        else:
            rule_pattern = Daily(frequency=frequency)

        end: EndCondition
        if end_type == "count":
            if count is None:
                raise ValidationError(
                    "end_type 'count' requires a count.", field="count"
                )
            end = Count(count)
        elif end_type == "date":
            if end_date is None:
                raise ValidationError(
                    "end_type 'date' requires an end_date.", field="end_date"
                )
            end = Until(end_date)
        elif end_type == "never":
            end = OpenEnded()
        else:
            raise ValidationError(
                f"Unknown end type: '{end_type}'\nValid end types: count, date, never\n",
                field="end_type",
            )

        return cls(start=start, pattern=rule_pattern, end=end)

    def to_fields(self) -> dict[str, Any]:
        """Flatten the rule into the ``recurrence_*`` columns of a parent record."""
        pattern = self.pattern
        end = self.end
        days = (
            sorted(pattern.days_of_week)
            if isinstance(pattern, Weekly) and pattern.days_of_week
            else None
        )
        until = end.date.isoformat() if isinstance(end, Until) else None
        return {
            "recurrence_pattern": pattern.name,
            "recurrence_frequency": pattern.frequency,
            "recurrence_days_of_week": days,
            "recurrence_day_of_month": (
                pattern.resolve_day(self.start) if isinstance(pattern, Monthly) else None
            ),
            "recurrence_end_type": end.name,
            "recurrence_end_date": until,
            "recurrence_count": end.n if isinstance(end, Count) else None,
        }

    @classmethod
    def from_record_fields(
        cls, start: datetime, fields: Mapping[str, Any]
    ) -> "RecurrenceRule":
        """Inverse of :meth:`to_fields`, for reading a stored parent back."""
        end_date = fields.get("recurrence_end_date")
        if isinstance(end_date, str):
            end_date = (
                datetime.fromisoformat(end_date)
                if "T" in end_date
                else date.fromisoformat(end_date)
            )
        return cls.from_fields(
            start=start,
            pattern=fields["recurrence_pattern"],
            frequency=fields.get("recurrence_frequency") or 1,
            days_of_week=fields.get("recurrence_days_of_week"),
            day_of_month=fields.get("recurrence_day_of_month"),
            end_type=fields.get("recurrence_end_type") or "never",
            end_date=end_date,
            count=fields.get("recurrence_count"),
        )


def generate_occurrences(rule: RecurrenceRule, *, cap: int | None = None) -> list[datetime]:
    """Generate the ordered occurrence date-times of a rule.

    Every occurrence keeps the exact time of day of ``rule.start``.
    Candidates earlier than ``rule.start`` are never produced, so a weekly
    rule anchored on a Wednesday does not emit that week's Monday.

    Args:
        rule: The recurrence rule
        cap: Maximum number of occurrences. Defaults to the pattern's entry in
            ``SAFETY_CAPS`` (daily 365, weekly/custom 52, monthly 24)

    Returns:
        Strictly increasing list of datetimes. Empty is a valid result, e.g.
        for an ``Until`` bound earlier than ``rule.start``.

    Raises:
        ValidationError: If ``cap`` is less than 1

    Examples:
        >>> rule = RecurrenceRule(
        ...     start=datetime(2025, 1, 31, 10, 0),
        ...     pattern=Monthly(day_of_month=31),
        ...     end=Count(3),
        ... )
        >>> [d.date().isoformat() for d in generate_occurrences(rule)]
        ['2025-01-31', '2025-02-28', '2025-03-31']
    """
    limit = SAFETY_CAPS[rule.pattern.name] if cap is None else cap
    if limit < 1:
        raise ValidationError(f"cap must be at least 1, got {limit}.", field="cap")

    # rrule truncates dtstart to whole seconds; put the fraction back and
    # re-check the bound it may now overshoot
    fraction = rule.start.microsecond
    occurrences = islice(rule.recurrence_rule, limit)
    if not fraction:
        return list(occurrences)
    until = rule.until
    restored = (o.replace(microsecond=fraction) for o in occurrences)
    return [o for o in restored if until is None or o <= until]


def preview_occurrences(
    rule: RecurrenceRule, *, now: datetime, limit: int | None = None
) -> list[datetime]:
    """Generate occurrences for display while the rule is being defined.

    Args:
        rule: The recurrence rule
        now: Current time from the caller's clock
        limit: Show at most this many dates (default: the full capped sequence)

    Raises:
        ValidationError: If the rule's ``Until`` bound is already in the past
    """
    until = rule.until
    if until is not None:
        reference = now
        if reference.tzinfo is None and until.tzinfo is not None:
            reference = reference.replace(tzinfo=until.tzinfo)
        elif reference.tzinfo is not None and until.tzinfo is None:
            # naive bounds are local wall time
            reference = reference.astimezone().replace(tzinfo=None)
        if until < reference:
            raise ValidationError(
                f"End date {until.isoformat()} is in the past.\n"
                f"Fix: pick an end date after {reference.isoformat()}.",
                field="end_date",
            )

    occurrences = generate_occurrences(rule)
    return occurrences if limit is None else occurrences[:limit]


__all__ = [
    "Daily",
    "Weekly",
    "Custom",
    "Monthly",
    "Pattern",
    "Count",
    "Until",
    "OpenEnded",
    "EndCondition",
    "RecurrenceRule",
    "generate_occurrences",
    "preview_occurrences",
]
