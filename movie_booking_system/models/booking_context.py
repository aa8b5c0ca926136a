"""
The booking context: everything a single in-progress purchase has collected.
"""

from dataclasses import dataclass, replace
from decimal import Decimal
from typing import List, Optional, Tuple

from ..schemas.catalog import Movie
from ..utils.exceptions import InvalidTransitionError
from .flow import FlowStep


@dataclass(frozen=True)
class BookingContext:
    """
    Immutable snapshot of a patron's booking in progress.

    Only the flow controller produces new snapshots; every change goes
    through ``merge`` or ``advance`` and yields a fresh instance.
    """

    movie: Optional[Movie] = None
    showtime_id: Optional[int] = None
    showtime_label: Optional[str] = None
    seats: Tuple[str, ...] = ()
    seat_ids: Tuple[int, ...] = ()
    total: Decimal = Decimal("0")

    @property
    def is_empty(self) -> bool:
        return self == BookingContext()

    def missing_for(self, step: FlowStep) -> List[str]:
        """List the fields that must be set before ``step`` can be entered."""
        missing = []
        if step in (FlowStep.SEATS, FlowStep.PAYMENT, FlowStep.TICKET) and self.movie is None:
            missing.append("movie")
        if step in (FlowStep.PAYMENT, FlowStep.TICKET):
            if self.showtime_id is None:
                missing.append("showtime")
            if not self.seats:
                missing.append("seats")
        return missing

    def merge(self, **changes) -> "BookingContext":
        """Return a copy with ``changes`` applied."""
        if "seats" in changes:
            changes["seats"] = tuple(changes["seats"])
        if "seat_ids" in changes:
            changes["seat_ids"] = tuple(changes["seat_ids"])
        return replace(self, **changes)

    def advance(self, step: FlowStep, **payload) -> "BookingContext":
        """
        Apply the payload of the step being left and check the entry
        precondition of ``step``.

        Raises:
            InvalidTransitionError: If the resulting context cannot enter ``step``
        """
        updated = self.merge(**payload) if payload else self
        missing = updated.missing_for(step)
        if missing:
            raise InvalidTransitionError(step.value, missing)
        return updated

    @classmethod
    def reset(cls) -> "BookingContext":
        """Return an empty context."""
        return cls()
