"""
Pricing engine for seat subtotals, booking fees and payment totals.
"""

from decimal import Decimal
from typing import Sized, Union

from ..models.ticket import PaymentSummary
from ..utils.money import Amount, format_money, to_decimal


def compute_total(selected_seats: Union[Sized, int], base_price: Amount) -> Decimal:
    """
    Compute the seat subtotal.

    The total is always recomputed from the current selection as
    count x base price, never accumulated seat by seat.

    Args:
        selected_seats: The selected seats, or their count
        base_price: The active showtime's base price

    Returns:
        Exact subtotal, unrounded
    """
    count = selected_seats if isinstance(selected_seats, int) else len(selected_seats)
    if count < 0:
        raise ValueError("seat count must be non-negative")
    price = to_decimal(base_price)
    if price < 0:
        raise ValueError("base price must be non-negative")
    return price * count


class PricingService:
    """Applies the configured booking fee on the payment step."""

    def __init__(self, booking_fee: Amount = Decimal("0"), currency_symbol: str = "$"):
        self.booking_fee = to_decimal(booking_fee)
        if self.booking_fee < 0:
            raise ValueError("booking fee must be non-negative")
        self.currency_symbol = currency_symbol

    def compute_booking_fee(self, subtotal: Amount) -> Decimal:
        """The flat booking fee; empty orders carry none."""
        return self.booking_fee if to_decimal(subtotal) > 0 else Decimal("0")

    def summarize_payment(self, subtotal: Amount) -> PaymentSummary:
        """Add the booking fee to a seat subtotal."""
        subtotal = to_decimal(subtotal)
        fee = self.compute_booking_fee(subtotal)
        return PaymentSummary(subtotal=subtotal, booking_fee=fee, total=subtotal + fee)

    def format(self, amount: Amount) -> str:
        return format_money(amount, self.currency_symbol)
