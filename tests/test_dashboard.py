"""
Tests for dashboard data shaping.
"""
import pytest

from retailpos.dashboard import main as dashboard


@pytest.fixture
def dashboard_data(monkeypatch):
    data = {
        "analytics": {
            "today": {"total_sales": 4, "total_revenue": 88.0},
            "sales_trend": [{"date": "Jan 01", "amount": 10.0}, {"date": "Jan 02", "amount": 15.5}],
            "top_products": [{"name": "Milk", "quantity": 9, "price": 4.0}],
            "payment_methods": [{"name": "CASH", "value": 3}],
            "low_stock_products": [{"product_id": 2, "sku": "BREAD001", "name": "Bread", "stock_quantity": 2}],
        },
        "recent_sales": [],
        "products": [],
        "customers": [{"id": 1, "full_name": "Jordan Lee", "loyalty_points": 50}],
        "settings": {"currency": "USD", "tax_rate": 10.0, "points_per_currency_unit": 20},
    }
    monkeypatch.setattr(dashboard, "dashboard_data", data)
    return data


def test_update_metrics(dashboard_data):
    assert dashboard.update_metrics(0) == ("4", "USD 25.50", "1", "Milk")


def test_cart_summary_matches_server_arithmetic(dashboard_data):
    cart = [{"product_id": 1, "name": "Milk", "unit_price": 4.0, "quantity": 5}]

    summary = dashboard.summarize(cart, discount=0, points=40)

    assert summary["total"] == 22.0
    assert summary["final_total"] == 20.0


def test_render_cart_shows_redeemable_points(dashboard_data):
    cart = [{"product_id": 1, "name": "Milk", "unit_price": 4.0, "quantity": 1}]

    _, _, hint = dashboard.render_cart(cart, 0, 0, 1)

    assert hint == "Up to 50 points redeemable"
