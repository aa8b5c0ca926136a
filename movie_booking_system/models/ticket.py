"""
Payment summaries and issued tickets.
"""

import json
from dataclasses import dataclass
from decimal import Decimal
from typing import Tuple

from ..utils.money import format_money, quantize_money


@dataclass(frozen=True)
class PaymentSummary:
    """Amounts shown on the payment step."""

    subtotal: Decimal
    booking_fee: Decimal
    total: Decimal


@dataclass(frozen=True)
class Ticket:
    """Snapshot issued when a booking is accepted by the backend."""

    booking_id: str
    movie_title: str
    showtime_id: int
    showtime_label: str
    seats: Tuple[str, ...]
    subtotal: Decimal
    booking_fee: Decimal
    total_paid: Decimal
    payment_method: str

    @property
    def seats_display(self) -> str:
        return ", ".join(self.seats)

    def total_display(self, symbol: str = "$") -> str:
        return format_money(self.total_paid, symbol)

    def qr_payload(self) -> str:
        """JSON text to encode in the entrance QR code."""
        return json.dumps(
            {
                "bookingId": self.booking_id,
                "movie": self.movie_title,
                "showtime": self.showtime_label,
                "seats": list(self.seats),
                "total": str(quantize_money(self.total_paid)),
            },
            separators=(",", ":"),
        )
