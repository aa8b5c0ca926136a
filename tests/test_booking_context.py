"""Unit tests for the booking context, flow transitions and tickets."""

import json
from dataclasses import FrozenInstanceError
from decimal import Decimal

import pytest

from movie_booking_system.models.booking_context import BookingContext
from movie_booking_system.models.flow import FlowStep, FlowTrigger, next_step
from movie_booking_system.models.ticket import Ticket
from movie_booking_system.schemas.catalog import Movie
from movie_booking_system.utils.exceptions import InvalidTransitionError


@pytest.fixture
def movie():
    return Movie(movie_id=1, title="Inception", genre="Sci-Fi", duration_min=120)


class TestBookingContext:
    def test_reset_is_empty(self):
        assert BookingContext.reset().is_empty
        assert BookingContext.reset().total == Decimal("0")

    def test_missing_for_each_step(self, movie):
        empty = BookingContext()
        chosen = BookingContext(movie=movie)
        ready = BookingContext(movie=movie, showtime_id=10, seats=("A1",), seat_ids=(101,))

        assert empty.missing_for(FlowStep.MOVIES) == []
        assert empty.missing_for(FlowStep.SEATS) == ["movie"]
        assert chosen.missing_for(FlowStep.SEATS) == []
        assert chosen.missing_for(FlowStep.PAYMENT) == ["showtime", "seats"]
        assert ready.missing_for(FlowStep.PAYMENT) == []
        assert ready.missing_for(FlowStep.TICKET) == []

    def test_advance_applies_payload(self, movie):
        context = BookingContext().advance(FlowStep.SEATS, movie=movie)

        assert context.movie == movie

    def test_advance_rejects_incomplete_context(self, movie):
        with pytest.raises(InvalidTransitionError) as exc_info:
            BookingContext(movie=movie, showtime_id=10).advance(FlowStep.PAYMENT)

        assert exc_info.value.missing == ["seats"]
        assert exc_info.value.step == "payment"

    def test_merge_returns_new_snapshot(self, movie):
        original = BookingContext(movie=movie)

        merged = original.merge(seats=["A1", "A2"], seat_ids=[101, 102], total=Decimal("25.00"))

        assert merged.seats == ("A1", "A2")
        assert merged.seat_ids == (101, 102)
        assert original.seats == ()

    def test_context_is_immutable(self):
        with pytest.raises(FrozenInstanceError):
            BookingContext().showtime_id = 10


class TestFlowTransitions:
    @pytest.mark.parametrize(
        "current,trigger,expected",
        [
            (FlowStep.LOGIN, FlowTrigger.LOGIN, FlowStep.MOVIES),
            (FlowStep.LOGIN, FlowTrigger.ADMIN_LOGIN, FlowStep.ADMIN),
            (FlowStep.MOVIES, FlowTrigger.MOVIE_CHOSEN, FlowStep.SEATS),
            (FlowStep.SEATS, FlowTrigger.SEATS_CONFIRMED, FlowStep.PAYMENT),
            (FlowStep.PAYMENT, FlowTrigger.PAYMENT_CONFIRMED, FlowStep.TICKET),
            (FlowStep.TICKET, FlowTrigger.RETURN_HOME, FlowStep.MOVIES),
            (FlowStep.SEATS, FlowTrigger.BACK, FlowStep.MOVIES),
            (FlowStep.PAYMENT, FlowTrigger.BACK, FlowStep.SEATS),
        ],
    )
    def test_legal_transitions(self, current, trigger, expected):
        assert next_step(current, trigger) is expected

    @pytest.mark.parametrize(
        "current,trigger",
        [
            (FlowStep.MOVIES, FlowTrigger.SEATS_CONFIRMED),
            (FlowStep.SEATS, FlowTrigger.PAYMENT_CONFIRMED),
            (FlowStep.LOGIN, FlowTrigger.MOVIE_CHOSEN),
            (FlowStep.ADMIN, FlowTrigger.MOVIE_CHOSEN),
            (FlowStep.LOGIN, FlowTrigger.LOGOUT),
        ],
    )
    def test_illegal_transitions(self, current, trigger):
        assert next_step(current, trigger) is None

    @pytest.mark.parametrize(
        "current", [FlowStep.MOVIES, FlowStep.SEATS, FlowStep.PAYMENT, FlowStep.TICKET, FlowStep.ADMIN]
    )
    def test_logout_from_any_logged_in_step(self, current):
        assert next_step(current, FlowTrigger.LOGOUT) is FlowStep.LOGIN

    @pytest.mark.parametrize("current", [FlowStep.LOGIN, FlowStep.MOVIES, FlowStep.TICKET, FlowStep.ADMIN])
    def test_back_without_predecessor_stays(self, current):
        assert next_step(current, FlowTrigger.BACK) is current


class TestTicket:
    @pytest.fixture
    def ticket(self):
        return Ticket(
            booking_id="42",
            movie_title="Inception",
            showtime_id=10,
            showtime_label="2026-11-01 19:30",
            seats=("A1", "A2"),
            subtotal=Decimal("25.0"),
            booking_fee=Decimal("0"),
            total_paid=Decimal("25.0"),
            payment_method="credit",
        )

    def test_display_values(self, ticket):
        assert ticket.seats_display == "A1, A2"
        assert ticket.total_display() == "$25.00"

    def test_qr_payload(self, ticket):
        payload = json.loads(ticket.qr_payload())

        assert payload == {
            "bookingId": "42",
            "movie": "Inception",
            "showtime": "2026-11-01 19:30",
            "seats": ["A1", "A2"],
            "total": "25.00",
        }
