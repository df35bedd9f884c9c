"""Utility constants and helpers for eventseries.

Weekday indices follow the convention used at the UI boundary:
0 is Sunday and 6 is Saturday.
"""

from typing import Literal, TypeAlias

# Weekday indices (0=Sunday .. 6=Saturday)
SUNDAY = 0
MONDAY = 1
TUESDAY = 2
WEDNESDAY = 3
THURSDAY = 4
FRIDAY = 5
SATURDAY = 6

Day: TypeAlias = Literal[
    "sunday", "monday", "tuesday", "wednesday", "thursday", "friday", "saturday"
]

DAY_INDEX: dict[Day, int] = {
    "sunday": SUNDAY,
    "monday": MONDAY,
    "tuesday": TUESDAY,
    "wednesday": WEDNESDAY,
    "thursday": THURSDAY,
    "friday": FRIDAY,
    "saturday": SATURDAY,
}

# Maximum occurrences generated per pattern, whatever the end condition
SAFETY_CAPS: dict[str, int] = {
    "daily": 365,
    "weekly": 52,
    "monthly": 24,
    "custom": 52,
}

# Fields copied from the template onto every series member
SHARED_FIELDS: tuple[str, ...] = (
    "title",
    "description",
    "venue",
    "capacity",
    "price",
    "image_url",
    "external_link",
    "community_id",
    "host_id",
)

# Fields owned by the series machinery; never written by an edit
SERIES_FIELDS: tuple[str, ...] = (
    "id",
    "series_parent_id",
    "series_index",
    "is_recurring_parent",
    "recurrence",
)
