from .coordinator import SeriesCreated, SeriesWriteCoordinator
from .errors import (
    PartialPropagationFailure,
    PartialSeriesCreationFailure,
    PersistenceError,
    SeriesError,
    ValidationError,
)
from .propagator import PropagationResult, SeriesEditPropagator
from .records import EventRecord, EventTemplate
from .recurrence import (
    Count,
    Custom,
    Daily,
    Monthly,
    OpenEnded,
    RecurrenceRule,
    Until,
    Weekly,
    generate_occurrences,
    preview_occurrences,
)
from .series import SeriesPlan, build_series
from .service import EventService
from .store import RowStore, WriteResult
from .util import FRIDAY, MONDAY, SATURDAY, SUNDAY, THURSDAY, TUESDAY, WEDNESDAY

__all__ = [
    "RecurrenceRule",
    "Daily",
    "Weekly",
    "Custom",
    "Monthly",
    "Count",
    "Until",
    "OpenEnded",
    "generate_occurrences",
    "preview_occurrences",
    "EventTemplate",
    "EventRecord",
    "SeriesPlan",
    "build_series",
    "SeriesCreated",
    "SeriesWriteCoordinator",
    "PropagationResult",
    "SeriesEditPropagator",
    "EventService",
    "RowStore",
    "WriteResult",
    "SeriesError",
    "ValidationError",
    "PersistenceError",
    "PartialSeriesCreationFailure",
    "PartialPropagationFailure",
    "SUNDAY",
    "MONDAY",
    "TUESDAY",
    "WEDNESDAY",
    "THURSDAY",
    "FRIDAY",
    "SATURDAY",
]
