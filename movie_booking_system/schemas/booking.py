"""
Pydantic schemas for booking submission to the backend.
"""

from decimal import Decimal
from typing import List, Optional, Union

from pydantic import Field, field_serializer

from ..utils.money import quantize_money
from .catalog import BackendModel


class BookingCreateRequest(BackendModel):
    """Payload of ``POST /bookings``."""

    user_id: int
    showtime_id: int
    total_amount: Decimal = Field(..., ge=0)
    payment_status: str = "completed"
    payment_method: str = "credit"
    seat_ids: List[int] = Field(..., min_length=1)

    @field_serializer("total_amount")
    def serialize_total(self, value: Decimal) -> float:
        """The backend expects a JSON number rounded to cents."""
        return float(quantize_money(value))

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True)


class BookingCreatedResponse(BackendModel):
    """Response of ``POST /bookings``; only the id matters to the flow."""

    booking_id: Optional[Union[int, str]] = None

    @property
    def is_confirmed(self) -> bool:
        return self.booking_id not in (None, "", 0)
