"""Domain models for the Movie Booking System."""

from .seat import Seat, SeatGrid, SeatStatus, row_label
from .flow import FlowStep, FlowTrigger, next_step
from .booking_context import BookingContext
from .ticket import PaymentSummary, Ticket

__all__ = [
    "Seat",
    "SeatGrid",
    "SeatStatus",
    "row_label",
    "FlowStep",
    "FlowTrigger",
    "next_step",
    "BookingContext",
    "PaymentSummary",
    "Ticket",
]
