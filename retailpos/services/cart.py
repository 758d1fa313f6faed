"""
Cart arithmetic shared by the checkout service and the terminal UI.
"""
import math
from typing import Any, Dict, Iterable, Mapping


def _money(value: float) -> float:
    return round(value, 2)


def line_subtotal(unit_price: float, quantity: int, discount_amount: float = 0.0) -> float:
    """Price of one cart line after its own discount, never below zero."""
    return _money(max(0.0, unit_price * quantity - (discount_amount or 0.0)))


def points_value(points: int, points_per_unit: int) -> float:
    return _money(points / points_per_unit) if points else 0.0


def max_redeemable_points(total: float, balance: int, points_per_unit: int) -> int:
    """Points a customer may spend: bounded by the balance and the bill."""
    by_total = math.ceil(round(total * points_per_unit, 6))
    return max(0, min(balance or 0, by_total))


def points_earned(total: float, loyalty_rate: float) -> int:
    if total <= 0 or loyalty_rate <= 0:
        return 0
    return int(math.floor(round(total * loyalty_rate, 6)))


def compute_cart_summary(
    lines: Iterable[Mapping[str, Any]],
    discount_percentage: float = 0.0,
    tax_rate: float = 0.0,
    points_redeemed: int = 0,
    points_per_unit: int = 20,
) -> Dict[str, Any]:
    """
    Compute totals for a cart.

    Args:
        lines: Iterable of mappings with unit_price, quantity and an optional
            discount_amount
        discount_percentage: Order-level discount, 0-100
        tax_rate: Tax percentage applied after the discount
        points_redeemed: Loyalty points spent against the total
        points_per_unit: Points worth one currency unit

    Returns:
        Dict with subtotal, discount_amount, tax_amount, total, points_discount,
        final_total and items_count
    """
    subtotal = 0.0
    items_count = 0
    for line in lines:
        subtotal += line_subtotal(
            float(line["unit_price"]),
            int(line["quantity"]),
            float(line.get("discount_amount") or 0.0),
        )
        items_count += int(line["quantity"])

    subtotal = _money(subtotal)
    discount_amount = _money(subtotal * (discount_percentage or 0.0) / 100)
    taxable = subtotal - discount_amount
    tax_amount = _money(taxable * (tax_rate or 0.0) / 100)
    total = _money(taxable + tax_amount)

    points_discount = min(points_value(points_redeemed, points_per_unit), total)
    final_total = _money(max(0.0, total - points_discount))

    return {
        "subtotal": subtotal,
        "discount_amount": discount_amount,
        "tax_amount": tax_amount,
        "total": total,
        "points_discount": points_discount,
        "final_total": final_total,
        "items_count": items_count,
    }
