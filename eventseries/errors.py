"""Error taxonomy for the recurring-event engine.

Every error carries enough context (which record, which step) for a caller
to reconcile the store by hand. None of them are retried by the engine.
"""

from collections.abc import Mapping, Sequence


class SeriesError(Exception):
    """Base exception for all eventseries errors."""

    pass


class ValidationError(SeriesError):
    """Raised when a rule, plan or edit is malformed.

    Always raised before anything is written to the store.
    """

    def __init__(self, message: str, field: str | None = None):
        self.message = message
        self.field = field
        super().__init__(message)


class PersistenceError(SeriesError):
    """Raised by a row store when an insert, update, delete or read fails."""

    def __init__(self, message: str, record_id: str | None = None):
        self.message = message
        self.record_id = record_id
        super().__init__(message)


class PartialSeriesCreationFailure(SeriesError):
    """Child insert failed and the compensating parent delete failed too.

    The store now holds an orphan parent with no children.

    Attributes:
        parent_id: ID of the orphaned parent record
        error: The original child insert failure
        cleanup_error: The failure of the compensating delete
    """

    def __init__(
        self, parent_id: str, error: Exception, cleanup_error: Exception
    ):
        self.parent_id = parent_id
        self.error = error
        self.cleanup_error = cleanup_error
        super().__init__(
            f"Series creation left an orphan parent record {parent_id!r}.\n"
            f"Child insert failed: {error}\n"
            f"Compensating delete failed: {cleanup_error}\n"
            f"Fix: delete record {parent_id!r} manually or recreate its children."
        )


class PartialPropagationFailure(SeriesError):
    """Some series members were updated by an edit, others were not.

    Updates already applied are not rolled back.

    Attributes:
        series_id: ID of the series parent
        updated_ids: Members that received the shared fields
        failures: Member ID -> exception for every update that failed
    """

    def __init__(
        self,
        series_id: str,
        updated_ids: Sequence[str],
        failures: Mapping[str, Exception],
    ):
        self.series_id = series_id
        self.updated_ids = tuple(updated_ids)
        self.failures = dict(failures)
        failed = ", ".join(repr(member_id) for member_id in self.failures)
        super().__init__(
            f"Edit reached {len(self.updated_ids)} member(s) of series "
            f"{series_id!r} but failed for {len(self.failures)}: {failed}.\n"
            f"Fix: retry the edit with apply_to_all=True, or update the failed "
            f"members individually."
        )


__all__ = [
    "SeriesError",
    "ValidationError",
    "PersistenceError",
    "PartialSeriesCreationFailure",
    "PartialPropagationFailure",
]
