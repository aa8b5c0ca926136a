"""
Pydantic schemas for the booking flow API.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..models.flow import FlowStep
from ..services.showtime_service import format_showtime
from ..utils.money import format_money, quantize_money

if TYPE_CHECKING:
    from ..services.flow_controller import FlowController, FlowOutcome


class SelectMovieRequest(BaseModel):
    """Schema for choosing a movie."""
    movie_id: int


class SelectShowtimeRequest(BaseModel):
    """Schema for switching the active showtime."""
    showtime_id: int


class ToggleSeatRequest(BaseModel):
    """Schema for selecting or deselecting a seat."""
    label: str = Field(..., min_length=2, max_length=8, description="Seat label, e.g. A1")


class PaymentRequest(BaseModel):
    """Schema for submitting payment."""
    payment_method: Optional[str] = Field(None, min_length=1, max_length=30)


class MovieResponse(BaseModel):
    """Schema for a catalog movie."""
    model_config = ConfigDict(from_attributes=True)

    movie_id: int
    title: str
    genre: str
    duration_min: int
    rating: str
    release_date: Optional[date] = None
    cover_image_url: Optional[str] = None
    description: Optional[str] = None


class ShowtimeResponse(BaseModel):
    """Schema for a selectable showtime."""
    showtime_id: int
    theater_id: int
    screen_number: int
    starts_at: datetime
    time_label: str
    base_price: Decimal
    is_active: bool


class SeatResponse(BaseModel):
    """Schema for one seat of the grid."""
    label: str
    seat_id: int
    number: int
    status: str
    seat_type: str


class SeatRowResponse(BaseModel):
    """Schema for one row of the grid."""
    row: str
    seats: List[SeatResponse]


class BookingContextResponse(BaseModel):
    """Schema for the booking context."""
    movie: Optional[MovieResponse] = None
    showtime_id: Optional[int] = None
    showtime_label: Optional[str] = None
    seats: List[str] = []
    seat_ids: List[int] = []
    total: Decimal
    total_display: str


class PaymentSummaryResponse(BaseModel):
    """Schema for the payment step's order summary."""
    subtotal: Decimal
    booking_fee: Decimal
    total: Decimal
    subtotal_display: str
    booking_fee_display: str
    total_display: str


class TicketResponse(BaseModel):
    """Schema for an issued ticket."""
    booking_id: str
    movie_title: str
    showtime_label: str
    seats: List[str]
    seats_display: str
    subtotal: Decimal
    booking_fee: Decimal
    total_paid: Decimal
    total_display: str
    payment_method: str
    qr_code_data: str


class FlowStateResponse(BaseModel):
    """Read-only view of a booking session."""
    step: FlowStep
    email: Optional[str] = None
    is_admin: bool = False
    context: BookingContextResponse
    showtimes: List[ShowtimeResponse] = []
    seat_rows: List[SeatRowResponse] = []
    can_confirm_seats: bool = False
    loading: List[str] = []
    errors: Dict[str, str] = {}
    payment: Optional[PaymentSummaryResponse] = None
    ticket: Optional[TicketResponse] = None

    @classmethod
    def from_controller(
        cls,
        controller: "FlowController",
        currency_symbol: str = "$",
        time_format: str = "%H:%M",
    ) -> "FlowStateResponse":
        context = controller.context
        active_id = controller.active_showtime.showtime_id if controller.active_showtime else None

        payment = None
        if controller.step is FlowStep.PAYMENT:
            summary = controller.payment_summary()
            payment = PaymentSummaryResponse(
                subtotal=quantize_money(summary.subtotal),
                booking_fee=quantize_money(summary.booking_fee),
                total=quantize_money(summary.total),
                subtotal_display=format_money(summary.subtotal, currency_symbol),
                booking_fee_display=format_money(summary.booking_fee, currency_symbol),
                total_display=format_money(summary.total, currency_symbol),
            )

        ticket = None
        if controller.ticket is not None:
            t = controller.ticket
            ticket = TicketResponse(
                booking_id=t.booking_id,
                movie_title=t.movie_title,
                showtime_label=t.showtime_label,
                seats=list(t.seats),
                seats_display=t.seats_display,
                subtotal=quantize_money(t.subtotal),
                booking_fee=quantize_money(t.booking_fee),
                total_paid=quantize_money(t.total_paid),
                total_display=t.total_display(currency_symbol),
                payment_method=t.payment_method,
                qr_code_data=t.qr_payload(),
            )

        return cls(
            step=controller.step,
            email=controller.user_email,
            is_admin=controller.is_admin,
            context=BookingContextResponse(
                movie=MovieResponse.model_validate(context.movie) if context.movie else None,
                showtime_id=context.showtime_id,
                showtime_label=context.showtime_label,
                seats=list(context.seats),
                seat_ids=list(context.seat_ids),
                total=quantize_money(context.total),
                total_display=format_money(context.total, currency_symbol),
            ),
            showtimes=[
                ShowtimeResponse(
                    showtime_id=s.showtime_id,
                    theater_id=s.theater_id,
                    screen_number=s.screen_number,
                    starts_at=s.show_date_time,
                    time_label=format_showtime(s, time_format),
                    base_price=quantize_money(s.base_price),
                    is_active=s.showtime_id == active_id,
                )
                for s in controller.showtimes
            ],
            seat_rows=[
                SeatRowResponse(
                    row=row[0].row,
                    seats=[
                        SeatResponse(
                            label=seat.label,
                            seat_id=seat.seat_id,
                            number=seat.number,
                            status=seat.status.value,
                            seat_type=seat.seat_type,
                        )
                        for seat in row
                    ],
                )
                for row in controller.grid.rows
            ],
            can_confirm_seats=controller.can_confirm_seats,
            loading=controller.loading,
            errors={step.value: message for step, message in controller.errors.items()},
            payment=payment,
            ticket=ticket,
        )


class FlowActionResponse(BaseModel):
    """Schema for the result of a flow action."""
    accepted: bool
    discarded: bool = False
    state: FlowStateResponse

    @classmethod
    def from_outcome(cls, outcome: "FlowOutcome", state: FlowStateResponse) -> "FlowActionResponse":
        return cls(accepted=outcome.accepted, discarded=outcome.discarded, state=state)
