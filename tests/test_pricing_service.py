"""Unit tests for seat totals, booking fees and money formatting."""

from decimal import Decimal

import pytest

from movie_booking_system.services.pricing_service import PricingService, compute_total
from movie_booking_system.utils.money import format_money, quantize_money, to_decimal


class TestComputeTotal:
    @pytest.mark.parametrize("price", ["10.00", "12.50"])
    @pytest.mark.parametrize("count", [0, 1, 5, 80])
    def test_total_is_count_times_price(self, price, count):
        assert compute_total(count, Decimal(price)) == Decimal(price) * count

    def test_accepts_selected_seats(self):
        assert compute_total(["A1", "A2"], Decimal("12.50")) == Decimal("25.00")

    def test_no_rounding_drift(self):
        assert compute_total(3, Decimal("0.10")) == Decimal("0.30")

    def test_monotonic_in_count(self):
        totals = [compute_total(n, Decimal("12.50")) for n in range(0, 20)]

        assert totals == sorted(totals)

    def test_rejects_negative_count(self):
        with pytest.raises(ValueError):
            compute_total(-1, Decimal("10"))

    def test_rejects_negative_price(self):
        with pytest.raises(ValueError):
            compute_total(1, Decimal("-1"))

    def test_rejects_float_price(self):
        with pytest.raises(TypeError):
            compute_total(1, 12.5)


class TestPricingService:
    def test_no_fee_by_default(self):
        summary = PricingService().summarize_payment(Decimal("25.00"))

        assert summary.booking_fee == Decimal("0")
        assert summary.total == Decimal("25.00")

    def test_fee_added_to_subtotal(self):
        summary = PricingService(booking_fee=Decimal("2.50")).summarize_payment(Decimal("25.00"))

        assert summary.subtotal == Decimal("25.00")
        assert summary.booking_fee == Decimal("2.50")
        assert summary.total == Decimal("27.50")

    def test_compute_booking_fee(self):
        pricing = PricingService(booking_fee=Decimal("1.75"))

        assert pricing.compute_booking_fee(Decimal("10")) == Decimal("1.75")
        assert pricing.compute_booking_fee(0) == Decimal("0")

    def test_no_fee_on_empty_order(self):
        summary = PricingService(booking_fee="2.50").summarize_payment(Decimal("0"))

        assert summary.total == Decimal("0")

    def test_rejects_negative_fee(self):
        with pytest.raises(ValueError):
            PricingService(booking_fee=Decimal("-0.01"))

    def test_format_uses_currency_symbol(self):
        assert PricingService(currency_symbol="€").format(Decimal("9")) == "€9.00"


class TestMoney:
    @pytest.mark.parametrize(
        "amount,expected",
        [
            (Decimal("25"), "$25.00"),
            (Decimal("25.0"), "$25.00"),
            (Decimal("0"), "$0.00"),
            (Decimal("1250"), "$1,250.00"),
            (Decimal("0.005"), "$0.01"),
        ],
    )
    def test_format_money(self, amount, expected):
        assert format_money(amount) == expected

    def test_quantize_rounds_half_up(self):
        assert quantize_money(Decimal("2.345")) == Decimal("2.35")

    def test_to_decimal(self):
        assert to_decimal(3) == Decimal("3")
        assert to_decimal("1.10") == Decimal("1.10")
        with pytest.raises(TypeError):
            to_decimal(1.1)
