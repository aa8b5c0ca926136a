"""
Seat inventory model: seats and the row/column grid derived from them.
"""

import enum
from dataclasses import dataclass, field, replace
from typing import Iterator, Optional, Tuple


class SeatStatus(enum.Enum):
    """Enumeration for seat status."""
    AVAILABLE = "available"
    OCCUPIED = "occupied"
    SELECTED = "selected"


def row_label(index: int) -> str:
    """Letter a zero-based row index: A..Z, AA, AB, ..."""
    if index < 0:
        raise ValueError("row index must be non-negative")
    letters = ""
    n = index + 1
    while n:
        n, rem = divmod(n - 1, 26)
        letters = chr(ord("A") + rem) + letters
    return letters


@dataclass(frozen=True)
class Seat:
    """A seat as shown to the patron."""

    seat_id: int
    row: str
    number: int
    status: SeatStatus = SeatStatus.AVAILABLE
    seat_type: str = "standard"

    @property
    def label(self) -> str:
        return f"{self.row}{self.number}"

    @property
    def is_occupied(self) -> bool:
        return self.status is SeatStatus.OCCUPIED

    @property
    def is_selected(self) -> bool:
        return self.status is SeatStatus.SELECTED


@dataclass(frozen=True)
class SeatGrid:
    """
    Ordered rows of seats for one (theater, screen).

    Grids are immutable; selection changes return a new grid. Occupancy is
    fixed when the grid is built and never changes through patron action.
    """

    rows: Tuple[Tuple[Seat, ...], ...] = ()
    screen_key: Optional[Tuple[int, int]] = None
    _index: dict = field(default=None, init=False, repr=False, compare=False)

    def __post_init__(self):
        index = {seat.label: (r, c) for r, row in enumerate(self.rows) for c, seat in enumerate(row)}
        object.__setattr__(self, "_index", index)

    def __iter__(self) -> Iterator[Seat]:
        for row in self.rows:
            yield from row

    def __len__(self) -> int:
        return len(self._index)

    @property
    def is_empty(self) -> bool:
        return not self.rows

    def find(self, label: str) -> Optional[Seat]:
        """Look up a seat by its label."""
        position = self._index.get(label)
        if position is None:
            return None
        r, c = position
        return self.rows[r][c]

    def toggle(self, label: str) -> "SeatGrid":
        """
        Flip a seat between available and selected.

        Occupied and unknown seats are ignored and the same grid is returned.
        """
        position = self._index.get(label)
        if position is None:
            return self
        r, c = position
        seat = self.rows[r][c]
        if seat.is_occupied:
            return self

        flipped = replace(
            seat,
            status=SeatStatus.AVAILABLE if seat.is_selected else SeatStatus.SELECTED,
        )
        row = self.rows[r][:c] + (flipped,) + self.rows[r][c + 1:]
        return SeatGrid(rows=self.rows[:r] + (row,) + self.rows[r + 1:], screen_key=self.screen_key)

    def clear_selection(self) -> "SeatGrid":
        """Return the grid with every selected seat made available again."""
        if not any(seat.is_selected for seat in self):
            return self
        rows = tuple(
            tuple(replace(seat, status=SeatStatus.AVAILABLE) if seat.is_selected else seat for seat in row)
            for row in self.rows
        )
        return SeatGrid(rows=rows, screen_key=self.screen_key)

    @property
    def selected(self) -> Tuple[Seat, ...]:
        """Selected seats in row-major order."""
        return tuple(seat for seat in self if seat.is_selected)

    @property
    def selected_labels(self) -> Tuple[str, ...]:
        return tuple(seat.label for seat in self.selected)

    @property
    def selected_ids(self) -> Tuple[int, ...]:
        return tuple(seat.seat_id for seat in self.selected)

    @property
    def available_count(self) -> int:
        return sum(1 for seat in self if seat.status is SeatStatus.AVAILABLE)

    @property
    def occupied_count(self) -> int:
        return sum(1 for seat in self if seat.is_occupied)
