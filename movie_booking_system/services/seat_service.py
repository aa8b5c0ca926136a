"""
Seat service for deriving seat grids and resolving seat occupancy.
"""

import logging
import random
from collections import defaultdict
from typing import Dict, FrozenSet, Iterable, Optional, Protocol, Sequence, Set

from ..models.seat import Seat, SeatGrid, SeatStatus, row_label
from ..schemas.catalog import BackendSeat, Showtime

logger = logging.getLogger(__name__)


def build_grid(
    seats: Sequence[BackendSeat],
    row_length: int,
    occupied_ids: Iterable[int] = (),
) -> SeatGrid:
    """
    Lay a flat seat list out into rows.

    Row and in-row position depend only on each seat's position in
    ``seats``: the i-th seat lands in row ``i // row_length`` at position
    ``i % row_length + 1``. Backend ids only decide occupancy.

    Args:
        seats: Seats of one (theater, screen), in backend order
        row_length: Seats per row
        occupied_ids: Backend ids of seats that cannot be selected

    Returns:
        A grid of ceil(len(seats) / row_length) rows

    Raises:
        ValueError: If row_length is not positive
    """
    if row_length <= 0:
        raise ValueError(f"row_length must be positive, got {row_length}")

    occupied = set(occupied_ids)
    rows = []
    for start in range(0, len(seats), row_length):
        letter = row_label(start // row_length)
        rows.append(tuple(
            Seat(
                seat_id=backend_seat.seat_id,
                row=letter,
                number=offset + 1,
                status=SeatStatus.OCCUPIED if backend_seat.seat_id in occupied else SeatStatus.AVAILABLE,
                seat_type=backend_seat.seat_type,
            )
            for offset, backend_seat in enumerate(seats[start:start + row_length])
        ))

    screen_key = seats[0].screen_key if seats else None
    return SeatGrid(rows=tuple(rows), screen_key=screen_key)


def seats_for_showtime(seats: Iterable[BackendSeat], showtime: Showtime) -> list:
    """Keep the seats of the showtime's (theater, screen), in backend order."""
    return [seat for seat in seats if seat.screen_key == showtime.screen_key]


class OccupancySource(Protocol):
    """Anything that can tell which seats of a showtime are taken."""

    def occupied_ids(self, showtime: Showtime, seats: Sequence[BackendSeat]) -> FrozenSet[int]:
        ...


class SeededOccupancy:
    """
    Deterministic stand-in for a real occupancy feed.

    Each seat's fate is drawn from a generator seeded with the seat's
    showtime and id, so reloading the same showtime always marks the same
    seats occupied.
    """

    def __init__(self, seed: str, ratio: float = 0.25):
        if not 0.0 <= ratio <= 1.0:
            raise ValueError("occupancy ratio must be between 0 and 1")
        self.seed = seed
        self.ratio = ratio

    def occupied_ids(self, showtime: Showtime, seats: Sequence[BackendSeat]) -> FrozenSet[int]:
        if self.ratio == 0.0:
            return frozenset()
        return frozenset(
            seat.seat_id
            for seat in seats
            if random.Random(f"{self.seed}:{showtime.showtime_id}:{seat.seat_id}").random() < self.ratio
        )


class BookedSeatLedger:
    """Seats booked through this process, per showtime. Read model only."""

    def __init__(self):
        self._booked: Dict[int, Set[int]] = defaultdict(set)

    def record(self, showtime_id: int, seat_ids: Iterable[int]) -> None:
        self._booked[showtime_id].update(seat_ids)
        logger.debug(f"Ledger now holds {len(self._booked[showtime_id])} seats for showtime {showtime_id}")

    def occupied_ids(self, showtime: Showtime, seats: Sequence[BackendSeat]) -> FrozenSet[int]:
        booked = self._booked.get(showtime.showtime_id, set())
        return frozenset(seat.seat_id for seat in seats if seat.seat_id in booked)


class CombinedOccupancy:
    """Union of several occupancy sources."""

    def __init__(self, *sources: OccupancySource):
        self.sources = sources

    def occupied_ids(self, showtime: Showtime, seats: Sequence[BackendSeat]) -> FrozenSet[int]:
        occupied: Set[int] = set()
        for source in self.sources:
            occupied |= source.occupied_ids(showtime, seats)
        return frozenset(occupied)


class SeatService:
    """Builds the seat grid for a showtime from the backend seat list."""

    def __init__(
        self,
        row_length: int = 10,
        occupancy: Optional[OccupancySource] = None,
        ledger: Optional[BookedSeatLedger] = None,
    ):
        if row_length <= 0:
            raise ValueError(f"row_length must be positive, got {row_length}")
        self.row_length = row_length
        self.ledger = ledger
        sources = [source for source in (ledger, occupancy) if source is not None]
        self.occupancy = CombinedOccupancy(*sources)

    def grid_for(self, showtime: Showtime, all_seats: Iterable[BackendSeat]) -> SeatGrid:
        """Filter the seat list to the showtime's screen and lay it out."""
        seats = seats_for_showtime(all_seats, showtime)
        occupied = self.occupancy.occupied_ids(showtime, seats)
        grid = build_grid(seats, self.row_length, occupied)
        logger.debug(
            f"Built {len(grid.rows)}-row grid for showtime {showtime.showtime_id} "
            f"({len(grid)} seats, {len(occupied)} occupied)"
        )
        return grid

    def record_booking(self, showtime_id: int, seat_ids: Iterable[int]) -> None:
        """Mark seats of a successful booking as occupied for later loads."""
        if self.ledger is not None:
            self.ledger.record(showtime_id, seat_ids)
