"""Push shared field edits from one series member to the rest of its series."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from eventseries.errors import PartialPropagationFailure, ValidationError
from eventseries.store import RowStore, WriteResult
from eventseries.util import SHARED_FIELDS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PropagationResult:
    """Outcome of a successful propagation.

    Attributes:
        series_id: Parent ID of the series (None if nothing was propagated)
        updated_ids: Members that received the shared fields
        skipped_ids: Cancelled members, which are read-only
    """

    series_id: str | None = None
    updated_ids: tuple[str, ...] = field(default=())
    skipped_ids: tuple[str, ...] = field(default=())


def _check_shared(shared_fields: Mapping[str, Any]) -> None:
    other = sorted(set(shared_fields) - set(SHARED_FIELDS))
    if other:
        raise ValidationError(
            f"Only shared fields can be applied to a whole series, got: "
            f"{', '.join(other)}.\n"
            f"Shared fields: {', '.join(SHARED_FIELDS)}",
            field=other[0],
        )


class SeriesEditPropagator:
    def __init__(self, store: RowStore) -> None:
        self.store = store

    def propagate_edit(
        self,
        member_id: str,
        shared_fields: Mapping[str, Any],
        apply_to_all: bool,
    ) -> PropagationResult:
        """Copy shared fields onto every other member of ``member_id``'s series.

        The edited member itself is updated by the caller. Children are
        updated first, then the parent if the edited member is a child.
        ``date_time`` and series metadata are never written.

        Args:
            member_id: The member that was edited
            shared_fields: Subset of the shared template fields
            apply_to_all: When False nothing is propagated

        Returns:
            PropagationResult listing updated and skipped members

        Raises:
            ValidationError: ``shared_fields`` names a non-shared field
            PersistenceError: The member or its series could not be read
            PartialPropagationFailure: At least one member update failed;
                successful updates stay in place
        """
        _check_shared(shared_fields)
        if not apply_to_all or not shared_fields:
            return PropagationResult()

        member = self.store.fetch(member_id)
        series_id = member.series_id
        if series_id is None:
            return PropagationResult()

        targets = [c for c in self.store.fetch_children(series_id) if c.id != member.id]
        if member.series_parent_id is not None:
            targets.append(self.store.fetch(series_id))

        results: list[WriteResult] = []
        skipped: list[str] = []
        for target in targets:
            if target.is_cancelled:
                skipped.append(target.id)
                continue
            results.append(self.store.try_update(target.id, shared_fields))

        updated = [r.record_id for r in results if r.success]
        failures = {r.record_id: r.error for r in results if r.error is not None}
        if failures:
            logger.error(
                "Edit of %s reached %d of %d members of series %s",
                member_id,
                len(updated),
                len(results),
                series_id,
            )
            raise PartialPropagationFailure(series_id, updated, failures)

        logger.info(
            "Propagated %s from %s to %d members of series %s",
            ", ".join(sorted(shared_fields)),
            member_id,
            len(updated),
            series_id,
        )
        return PropagationResult(
            series_id=series_id,
            updated_ids=tuple(updated),
            skipped_ids=tuple(skipped),
        )


__all__ = ["PropagationResult", "SeriesEditPropagator"]
