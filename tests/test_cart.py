"""
Tests for cart arithmetic.
"""
import pytest

from retailpos.services.cart import (
    compute_cart_summary,
    line_subtotal,
    max_redeemable_points,
    points_earned,
    points_value,
)


class TestCartSummary:
    """Test cases for compute_cart_summary."""

    @pytest.fixture
    def lines(self):
        return [
            {"unit_price": 10.0, "quantity": 2},
            {"unit_price": 5.5, "quantity": 1, "discount_amount": 0.5},
        ]

    def test_totals_with_discount_and_tax(self, lines):
        summary = compute_cart_summary(lines, discount_percentage=10, tax_rate=10)

        assert summary["subtotal"] == 25.0
        assert summary["discount_amount"] == 2.5
        assert summary["tax_amount"] == 2.25
        assert summary["total"] == 24.75
        assert summary["final_total"] == 24.75
        assert summary["items_count"] == 3

    def test_points_reduce_final_total(self, lines):
        summary = compute_cart_summary(lines, tax_rate=0, points_redeemed=100, points_per_unit=20)

        assert summary["points_discount"] == 5.0
        assert summary["final_total"] == 20.0

    def test_points_discount_never_exceeds_total(self):
        summary = compute_cart_summary(
            [{"unit_price": 2.0, "quantity": 1}], points_redeemed=1000, points_per_unit=20
        )

        assert summary["points_discount"] == 2.0
        assert summary["final_total"] == 0.0

    def test_empty_cart(self):
        summary = compute_cart_summary([], tax_rate=10)

        assert summary["subtotal"] == 0.0
        assert summary["final_total"] == 0.0
        assert summary["items_count"] == 0


def test_line_subtotal_not_negative():
    assert line_subtotal(3.0, 1, discount_amount=5.0) == 0.0
    assert line_subtotal(3.0, 3, discount_amount=1.0) == 8.0


def test_points_value():
    assert points_value(20, 20) == 1.0
    assert points_value(0, 20) == 0.0


def test_max_redeemable_points_bounded_by_balance_and_bill():
    assert max_redeemable_points(10.0, 1000, 20) == 200
    assert max_redeemable_points(10.0, 50, 20) == 50
    assert max_redeemable_points(0.03, 100, 20) == 1


def test_points_earned_rounds_down():
    assert points_earned(24.99, 1.0) == 24
    assert points_earned(10.0, 0.5) == 5
    assert points_earned(10.0, 0) == 0
