"""
RetailPOS Dashboard - store overview and checkout terminal.
"""
import logging
import threading
import time

import dash
from dash import dcc, html, Input, Output, State
import dash_bootstrap_components as dbc
import plotly.express as px
import pandas as pd
import requests

from retailpos.core.config import settings
from retailpos.services.cart import compute_cart_summary, max_redeemable_points

logger = logging.getLogger(__name__)

# Initialize Dash app
app = dash.Dash(
    __name__,
    external_stylesheets=[dbc.themes.BOOTSTRAP],
    title="RetailPOS Dashboard",
    update_title="RetailPOS - Loading..."
)

API_BASE_URL = f"{settings.dashboard_api_url}{settings.api_v1_str}"
PAYMENT_METHODS = ["CASH", "CARD", "DIGITAL"]

# Global data storage
dashboard_data = {
    "analytics": {},
    "recent_sales": [],
    "products": [],
    "customers": [],
    "settings": {},
}

api_session = requests.Session()


def login() -> bool:
    """Log the dashboard's API session in with the configured credentials."""
    if not settings.dashboard_password:
        logger.warning("DASHBOARD_PASSWORD is not set, API requests will be unauthorized")
        return False
    try:
        response = api_session.post(
            f"{API_BASE_URL}/auth/login",
            json={"email": settings.dashboard_email, "password": settings.dashboard_password},
            timeout=10,
        )
        response.raise_for_status()
        return True
    except requests.RequestException as e:
        logger.error(f"Dashboard login failed: {e}")
        return False


def fetch_api_data(endpoint: str, params: dict = None):
    """Fetch data from API endpoint, logging in again once if the session expired."""
    url = f"{API_BASE_URL}/{endpoint}"
    try:
        response = api_session.get(url, params=params, timeout=10)
        if response.status_code == 401 and login():
            response = api_session.get(url, params=params, timeout=10)
        response.raise_for_status()
        return response.json()
    except requests.RequestException as e:
        logger.error(f"Error fetching data from {endpoint}: {e}")
        return {}


def update_dashboard_data():
    """Update dashboard data from API."""
    dashboard_data["analytics"] = fetch_api_data("analytics") or {}
    dashboard_data["recent_sales"] = (fetch_api_data("sales", {"limit": 10}) or {}).get("data", [])
    dashboard_data["products"] = (
        fetch_api_data("products", {"active_only": True, "limit": 100}) or {}
    ).get("data", [])
    dashboard_data["customers"] = (fetch_api_data("customers", {"limit": 100}) or {}).get("data", [])
    dashboard_data["settings"] = fetch_api_data("settings") or {}


def background_data_updater():
    """Background thread to update data every 30 seconds."""
    while True:
        update_dashboard_data()
        time.sleep(30)


def money(value) -> str:
    currency = dashboard_data["settings"].get("currency", settings.default_currency)
    return f"{currency} {float(value or 0):,.2f}"


def metric_card(title: str, value_id: str, caption: str, color: str):
    return dbc.Col([
        dbc.Card([
            dbc.CardBody([
                html.H4(title, className="card-title"),
                html.H2(id=value_id, children="0", className=f"text-{color}"),
                html.P(caption, className="card-text")
            ])
        ])
    ], width=3)


def table(headers, rows):
    return dbc.Table(
        [html.Thead(html.Tr([html.Th(h) for h in headers]))] +
        [html.Tbody([html.Tr([html.Td(cell) for cell in row]) for row in rows])],
        bordered=False,
        hover=True,
        size="sm",
    )


overview_tab = html.Div([
    # Key Metrics Row
    dbc.Row([
        metric_card("Sales Today", "total-sales", "Transactions", "primary"),
        metric_card("Revenue (7 Days)", "week-revenue", "Completed sales", "success"),
        metric_card("Low Stock Items", "low-stock-count", "Items Need Restocking", "warning"),
        metric_card("Top Product", "top-product", "By units sold", "info"),
    ], className="mb-4 mt-3"),

    # Charts Row
    dbc.Row([
        dbc.Col([
            dbc.Card([
                dbc.CardHeader("Sales Trend (Last 7 Days)"),
                dbc.CardBody([dcc.Graph(id="sales-chart")])
            ])
        ], width=7),
        dbc.Col([
            dbc.Card([
                dbc.CardHeader("Payment Methods"),
                dbc.CardBody([dcc.Graph(id="payment-chart")])
            ])
        ], width=5)
    ], className="mb-4"),

    dbc.Row([
        dbc.Col([
            dbc.Card([
                dbc.CardHeader("Low Stock"),
                dbc.CardBody([html.Div(id="low-stock-table")])
            ])
        ], width=5),
        dbc.Col([
            dbc.Card([
                dbc.CardHeader("Recent Sales"),
                dbc.CardBody([html.Div(id="recent-sales-table")])
            ])
        ], width=7)
    ]),
])

checkout_tab = dbc.Row([
    dbc.Col([
        dbc.Card([
            dbc.CardHeader("Cart"),
            dbc.CardBody([
                dbc.Row([
                    dbc.Col(dcc.Dropdown(id="product-picker", placeholder="Select product"), width=7),
                    dbc.Col(dbc.Input(id="quantity-input", type="number", min=1, step=1, value=1), width=2),
                    dbc.Col(dbc.Button("Add", id="add-button", color="primary"), width=1),
                    dbc.Col(dbc.Button("Clear", id="clear-button", color="secondary", outline=True), width=2),
                ], className="mb-3"),
                html.Div(id="cart-table"),
            ])
        ])
    ], width=7),
    dbc.Col([
        dbc.Card([
            dbc.CardHeader("Payment"),
            dbc.CardBody([
                dbc.Label("Customer"),
                dcc.Dropdown(id="customer-picker", placeholder="Walk-in customer", className="mb-2"),
                html.Small(id="points-hint", className="text-muted"),
                dbc.Row([
                    dbc.Col([
                        dbc.Label("Discount %"),
                        dbc.Input(id="discount-input", type="number", min=0, max=100, value=0),
                    ]),
                    dbc.Col([
                        dbc.Label("Redeem points"),
                        dbc.Input(id="points-input", type="number", min=0, step=1, value=0),
                    ]),
                ], className="mb-2 mt-2"),
                dbc.Label("Payment method"),
                dbc.RadioItems(
                    id="payment-method",
                    options=[{"label": m.title(), "value": m} for m in PAYMENT_METHODS],
                    value="CASH",
                    inline=True,
                    className="mb-2",
                ),
                dbc.Label("Amount paid"),
                dbc.Input(id="amount-paid-input", type="number", min=0, className="mb-3"),
                html.Div(id="cart-summary", className="mb-3"),
                dbc.Button("Checkout", id="checkout-button", color="success", className="w-100"),
                html.Div(id="checkout-message", className="mt-3"),
            ])
        ])
    ], width=5),
], className="mt-3")

app.layout = dbc.Container([
    dbc.Row([
        dbc.Col([
            html.H1("RetailPOS Dashboard", className="text-center mb-4"),
            html.Hr()
        ])
    ]),
    dbc.Tabs([
        dbc.Tab(overview_tab, label="Overview"),
        dbc.Tab(checkout_tab, label="Checkout"),
    ]),

    dcc.Store(id="cart-store", data=[]),

    # Interval component for auto-refresh
    dcc.Interval(
        id="interval-component",
        interval=30*1000,  # 30 seconds
        n_intervals=0
    )
], fluid=True)


# Callbacks
@app.callback(
    [Output("total-sales", "children"),
     Output("week-revenue", "children"),
     Output("low-stock-count", "children"),
     Output("top-product", "children")],
    [Input("interval-component", "n_intervals")]
)
def update_metrics(n):
    analytics = dashboard_data["analytics"]
    today = analytics.get("today", {})
    week_revenue = sum(day.get("amount", 0) for day in analytics.get("sales_trend", []))
    top_products = analytics.get("top_products", [])

    return (
        str(today.get("total_sales", 0)),
        money(week_revenue),
        str(len(analytics.get("low_stock_products", []))),
        top_products[0]["name"] if top_products else "-",
    )


@app.callback(
    [Output("sales-chart", "figure"),
     Output("payment-chart", "figure")],
    [Input("interval-component", "n_intervals")]
)
def update_charts(n):
    """Update sales trend and payment method charts."""
    analytics = dashboard_data["analytics"]

    trend = pd.DataFrame(analytics.get("sales_trend", []), columns=["date", "amount"])
    sales_fig = px.bar(trend, x="date", y="amount", labels={"date": "Date", "amount": "Revenue"})
    sales_fig.update_layout(height=350, showlegend=False)

    payments = pd.DataFrame(analytics.get("payment_methods", []), columns=["name", "value"])
    payment_fig = px.pie(payments, names="name", values="value", hole=0.4)
    payment_fig.update_layout(height=350)

    return sales_fig, payment_fig


@app.callback(
    [Output("low-stock-table", "children"),
     Output("recent-sales-table", "children")],
    [Input("interval-component", "n_intervals")]
)
def update_tables(n):
    low_stock = dashboard_data["analytics"].get("low_stock_products", [])
    recent_sales = dashboard_data["recent_sales"]

    low_stock_table = table(
        ["Product", "SKU", "Stock"],
        [[p["name"], p["sku"], p["stock_quantity"]] for p in low_stock]
    ) if low_stock else html.P("All products are well stocked")

    sales_table = table(
        ["Invoice #", "Customer", "Total", "Payment", "Time"],
        [
            [
                f"#{s['id']}",
                (s.get("customer") or {}).get("full_name", "Walk-in"),
                money(s["total_amount"]),
                s["payment_method"],
                (s.get("created_at") or "")[:19],
            ]
            for s in recent_sales
        ]
    ) if recent_sales else html.P("No recent sales data")

    return low_stock_table, sales_table


@app.callback(
    [Output("product-picker", "options"),
     Output("customer-picker", "options")],
    [Input("interval-component", "n_intervals")]
)
def update_pickers(n):
    products = [
        {
            "label": f"{p['name']} ({money(p['price'])}, {p['stock_quantity']} in stock)",
            "value": p["id"],
            "disabled": p["stock_quantity"] <= 0,
        }
        for p in dashboard_data["products"]
    ]
    customers = [
        {"label": f"{c['full_name']} ({c['loyalty_points']} pts)", "value": c["id"]}
        for c in dashboard_data["customers"]
    ]
    return products, customers


def summarize(cart, discount, points):
    return compute_cart_summary(
        [{"unit_price": line["unit_price"], "quantity": line["quantity"]} for line in cart],
        discount_percentage=float(discount or 0),
        tax_rate=float(dashboard_data["settings"].get("tax_rate", settings.default_tax_rate)),
        points_redeemed=int(points or 0),
        points_per_unit=int(dashboard_data["settings"].get(
            "points_per_currency_unit", settings.points_per_currency_unit
        )),
    )


@app.callback(
    [Output("cart-table", "children"),
     Output("cart-summary", "children"),
     Output("points-hint", "children")],
    [Input("cart-store", "data"),
     Input("discount-input", "value"),
     Input("points-input", "value"),
     Input("customer-picker", "value")]
)
def render_cart(cart, discount, points, customer_id):
    """Show cart lines and the live totals."""
    if not cart:
        cart_view = html.P("Cart is empty")
    else:
        cart_view = table(
            ["Product", "Qty", "Price", "Subtotal"],
            [[line["name"], line["quantity"], money(line["unit_price"]), money(line["unit_price"] * line["quantity"])] for line in cart]
        )

    summary = summarize(cart or [], discount, points)
    summary_view = html.Div([
        html.Div(f"Subtotal: {money(summary['subtotal'])}"),
        html.Div(f"Discount: -{money(summary['discount_amount'])}"),
        html.Div(f"Tax: {money(summary['tax_amount'])}"),
        html.Div(f"Points: -{money(summary['points_discount'])}"),
        html.H4(f"Total: {money(summary['final_total'])}", className="mt-2"),
    ])

    hint = ""
    customer = next((c for c in dashboard_data["customers"] if c["id"] == customer_id), None)
    if customer:
        ppu = int(dashboard_data["settings"].get("points_per_currency_unit", settings.points_per_currency_unit))
        hint = f"Up to {max_redeemable_points(summary['total'], customer['loyalty_points'], ppu)} points redeemable"

    return cart_view, summary_view, hint


@app.callback(
    [Output("cart-store", "data"),
     Output("checkout-message", "children")],
    [Input("add-button", "n_clicks"),
     Input("clear-button", "n_clicks"),
     Input("checkout-button", "n_clicks")],
    [State("product-picker", "value"),
     State("quantity-input", "value"),
     State("cart-store", "data"),
     State("customer-picker", "value"),
     State("discount-input", "value"),
     State("points-input", "value"),
     State("payment-method", "value"),
     State("amount-paid-input", "value")],
    prevent_initial_call=True,
)
def update_cart(add_clicks, clear_clicks, checkout_clicks, product_id, quantity, cart,
                customer_id, discount, points, payment_method, amount_paid):
    """Add to, clear or check out the cart."""
    cart = cart or []
    triggered = dash.ctx.triggered_id

    if triggered == "clear-button":
        return [], ""

    if triggered == "add-button":
        product = next((p for p in dashboard_data["products"] if p["id"] == product_id), None)
        if not product:
            return cart, dbc.Alert("Select a product first", color="warning")
        quantity = int(quantity or 1)
        for line in cart:
            if line["product_id"] == product_id:
                line["quantity"] += quantity
                break
        else:
            cart.append({
                "product_id": product["id"],
                "name": product["name"],
                "unit_price": product["price"],
                "quantity": quantity,
            })
        return cart, ""

    if not cart:
        return cart, dbc.Alert("Cart is empty", color="warning")

    payload = {
        "items": [{"product_id": line["product_id"], "quantity": line["quantity"]} for line in cart],
        "payment_method": payment_method,
        "customer_id": customer_id,
        "discount_percentage": float(discount or 0),
        "points_redeemed": int(points or 0),
        "amount_paid": float(amount_paid) if amount_paid is not None else None,
    }
    try:
        response = api_session.post(f"{API_BASE_URL}/sales", json=payload, timeout=10)
    except requests.RequestException as e:
        logger.error(f"Checkout failed: {e}")
        return cart, dbc.Alert("Could not reach the API", color="danger")

    if response.status_code != 201:
        detail = response.json().get("detail", "Checkout failed")
        return cart, dbc.Alert(str(detail), color="danger")

    sale = response.json()
    update_dashboard_data()
    message = f"Sale #{sale['id']} recorded: {money(sale['total_amount'])}"
    if sale.get("change_due"):
        message += f", change {money(sale['change_due'])}"
    return [], dbc.Alert(message, color="success")


if __name__ == "__main__":
    login()
    threading.Thread(target=background_data_updater, daemon=True).start()
    app.run(
        debug=settings.debug,
        host=settings.dashboard_host,
        port=settings.dashboard_port
    )
