"""Unit tests for seat grid derivation and occupancy."""

import pytest

from movie_booking_system.models.seat import SeatGrid, SeatStatus, row_label
from movie_booking_system.schemas.catalog import BackendSeat, Showtime
from movie_booking_system.services.seat_service import (
    BookedSeatLedger,
    CombinedOccupancy,
    SeatService,
    SeededOccupancy,
    build_grid,
    seats_for_showtime,
)


def make_seats(count, first_id=101, screen_number=1):
    return [
        BackendSeat(seat_id=first_id + i, theater_id=1, screen_number=screen_number, seat_number=i + 1)
        for i in range(count)
    ]


def make_showtime(showtime_id=10, screen_number=1, base_price="12.50"):
    return Showtime(
        showtime_id=showtime_id,
        movie_id=1,
        theater_id=1,
        screen_number=screen_number,
        show_date_time="2026-11-01T19:30:00",
        base_price=base_price,
    )


class TestRowLabel:
    @pytest.mark.parametrize(
        "index,expected",
        [(0, "A"), (1, "B"), (25, "Z"), (26, "AA"), (27, "AB"), (51, "AZ"), (52, "BA"), (701, "ZZ"), (702, "AAA")],
    )
    def test_row_letters(self, index, expected):
        assert row_label(index) == expected

    def test_negative_index_rejected(self):
        with pytest.raises(ValueError):
            row_label(-1)


class TestBuildGrid:
    @pytest.mark.parametrize("count,row_length,expected_rows", [(25, 10, 3), (10, 10, 1), (1, 10, 1), (30, 7, 5)])
    def test_row_count_is_ceiling(self, count, row_length, expected_rows):
        grid = build_grid(make_seats(count), row_length)

        assert len(grid.rows) == expected_rows
        assert len(grid) == count
        assert all(len(row) <= row_length for row in grid.rows)

    def test_rows_fill_in_input_order(self):
        grid = build_grid(make_seats(25), 10)

        assert [len(row) for row in grid.rows] == [10, 10, 5]
        assert [seat.label for seat in grid.rows[0][:3]] == ["A1", "A2", "A3"]
        assert grid.rows[2][-1].label == "C5"
        assert grid.find("B1").seat_id == 111

    def test_position_ignores_backend_ids(self):
        seats = [
            BackendSeat(seat_id=seat_id, theater_id=1, screen_number=1, seat_number=1)
            for seat_id in (907, 3, 55)
        ]

        grid = build_grid(seats, 2)

        assert [seat.label for seat in grid] == ["A1", "A2", "B1"]
        assert [seat.seat_id for seat in grid] == [907, 3, 55]

    def test_deterministic(self):
        seats = make_seats(25)

        assert build_grid(seats, 10, {103}) == build_grid(seats, 10, {103})

    def test_twenty_seven_rows_reach_double_letters(self):
        grid = build_grid(make_seats(27), 1)

        assert grid.rows[25][0].label == "Z1"
        assert grid.rows[26][0].label == "AA1"

    def test_occupied_ids_mark_seats(self):
        grid = build_grid(make_seats(5), 10, occupied_ids=[102, 104])

        assert grid.find("A2").status is SeatStatus.OCCUPIED
        assert grid.find("A1").status is SeatStatus.AVAILABLE
        assert grid.occupied_count == 2
        assert grid.available_count == 3

    def test_empty_seat_list(self):
        grid = build_grid([], 10)

        assert grid.is_empty
        assert len(grid) == 0
        assert grid.screen_key is None
        assert grid.find("A1") is None

    @pytest.mark.parametrize("row_length", [0, -3])
    def test_non_positive_row_length_rejected(self, row_length):
        with pytest.raises(ValueError):
            build_grid(make_seats(5), row_length)


class TestSeatGridSelection:
    @pytest.fixture
    def grid(self):
        return build_grid(make_seats(25), 10, occupied_ids=[105])

    def test_toggle_twice_restores_grid(self, grid):
        assert grid.toggle("A1").toggle("A1") == grid

    def test_toggle_returns_new_grid(self, grid):
        toggled = grid.toggle("A1")

        assert toggled is not grid
        assert toggled.find("A1").is_selected
        assert not grid.find("A1").is_selected

    def test_occupied_seat_is_ignored(self, grid):
        assert grid.toggle("A5") is grid

    def test_unknown_seat_is_ignored(self, grid):
        assert grid.toggle("Z9") is grid

    def test_selected_in_row_major_order(self, grid):
        selected = grid.toggle("B1").toggle("A2").toggle("A10")

        assert selected.selected_labels == ("A2", "A10", "B1")
        assert selected.selected_ids == (102, 110, 111)

    def test_clear_selection(self, grid):
        cleared = grid.toggle("A1").toggle("C3").clear_selection()

        assert cleared.selected == ()
        assert cleared.find("A5").is_occupied
        assert grid.clear_selection() is grid

    def test_empty_grid_default(self):
        assert SeatGrid().is_empty
        assert SeatGrid().selected == ()


class TestOccupancy:
    def test_seeded_occupancy_is_stable(self):
        seats = make_seats(25)
        showtime = make_showtime()

        first = SeededOccupancy("seed", 0.25).occupied_ids(showtime, seats)
        second = SeededOccupancy("seed", 0.25).occupied_ids(showtime, seats)

        assert first == second
        assert first <= {seat.seat_id for seat in seats}

    def test_ratio_bounds(self):
        seats = make_seats(10)
        showtime = make_showtime()

        assert SeededOccupancy("seed", 0.0).occupied_ids(showtime, seats) == frozenset()
        assert SeededOccupancy("seed", 1.0).occupied_ids(showtime, seats) == {seat.seat_id for seat in seats}

    @pytest.mark.parametrize("ratio", [-0.1, 1.5])
    def test_invalid_ratio_rejected(self, ratio):
        with pytest.raises(ValueError):
            SeededOccupancy("seed", ratio)

    def test_ledger_is_per_showtime(self):
        ledger = BookedSeatLedger()
        seats = make_seats(5)

        ledger.record(10, [101, 102])

        assert ledger.occupied_ids(make_showtime(10), seats) == {101, 102}
        assert ledger.occupied_ids(make_showtime(11), seats) == frozenset()

    def test_combined_occupancy_is_union(self):
        ledger = BookedSeatLedger()
        ledger.record(10, [101])
        combined = CombinedOccupancy(ledger, SeededOccupancy("seed", 1.0))

        assert combined.occupied_ids(make_showtime(), make_seats(3)) == {101, 102, 103}


class TestSeatService:
    def test_grid_uses_showtime_screen(self):
        seats = make_seats(25) + make_seats(12, first_id=201, screen_number=2)
        service = SeatService(row_length=10)

        grid = service.grid_for(make_showtime(11, screen_number=2), seats)

        assert grid.screen_key == (1, 2)
        assert len(grid) == 12
        assert grid.find("A1").seat_id == 201

    def test_seats_for_showtime_keeps_order(self):
        seats = make_seats(3, first_id=201, screen_number=2) + make_seats(3)

        filtered = seats_for_showtime(seats, make_showtime(screen_number=1))

        assert [seat.seat_id for seat in filtered] == [101, 102, 103]

    def test_recorded_booking_shows_as_occupied(self):
        service = SeatService(row_length=10, ledger=BookedSeatLedger())
        showtime = make_showtime()

        service.record_booking(10, [101, 102])
        grid = service.grid_for(showtime, make_seats(25))

        assert grid.find("A1").is_occupied
        assert grid.find("A2").is_occupied
        assert grid.find("A3").status is SeatStatus.AVAILABLE

    def test_record_without_ledger_is_ignored(self):
        service = SeatService(row_length=10)

        service.record_booking(10, [101])

        assert service.grid_for(make_showtime(), make_seats(5)).occupied_count == 0

    def test_rejects_non_positive_row_length(self):
        with pytest.raises(ValueError):
            SeatService(row_length=0)
