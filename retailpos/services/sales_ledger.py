"""
Sales Ledger service for recording POS transactions.
"""
import logging
from datetime import datetime, time
from typing import List, Dict, Any, Optional, Tuple
from sqlalchemy.orm import Session, joinedload
from sqlalchemy import or_

from retailpos.core.config import settings as app_settings
from retailpos.core.exceptions import BusinessRuleError, NotFoundError
from retailpos.core.pagination import paginate
from retailpos.models.customers import Customer
from retailpos.models.inventory import Product, StockActionType
from retailpos.models.sales import Sale, SaleItem, PaymentMethod, SaleStatus
from retailpos.services.cart import compute_cart_summary, line_subtotal, max_redeemable_points, points_earned
from retailpos.services.inventory_monitor import InventoryMonitor
from retailpos.services.store_settings import StoreSettingsService

logger = logging.getLogger(__name__)

SALES_EXPORT_HEADERS = ["Date", "Time", "Invoice #", "Customer", "Cashier", "Total", "Status", "Payment Method"]


def parse_date_bound(value: Optional[str], end_of_day: bool = False) -> Optional[datetime]:
    """
    Parse an ISO date or datetime query value.

    A bare date (YYYY-MM-DD) used as an end bound covers the whole day.
    """
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        raise BusinessRuleError(f"Invalid date: {value}")
    if end_of_day and len(value) <= 10:
        parsed = datetime.combine(parsed.date(), time.max)
    return parsed


def sale_item_to_dict(item: SaleItem) -> Dict[str, Any]:
    return {
        "id": item.id,
        "product_id": item.product_id,
        "product": {"name": item.product.name, "sku": item.product.sku} if item.product else None,
        "quantity": item.quantity,
        "unit_price": item.unit_price,
        "discount_amount": item.discount_amount,
        "subtotal": item.subtotal,
    }


def sale_to_dict(sale: Sale, include_items: bool = True) -> Dict[str, Any]:
    data = {
        "id": sale.id,
        "user_id": sale.user_id,
        "user": {"id": sale.user.id, "full_name": sale.user.full_name} if sale.user else None,
        "customer_id": sale.customer_id,
        "customer": {
            "id": sale.customer.id,
            "full_name": sale.customer.full_name,
            "loyalty_points": sale.customer.loyalty_points,
        } if sale.customer else None,
        "payment_method": sale.payment_method.value,
        "status": sale.status.value,
        "subtotal": sale.subtotal,
        "discount_amount": sale.discount_amount,
        "tax_amount": sale.tax_amount,
        "total_amount": sale.total_amount,
        "amount_paid": sale.amount_paid,
        "change_due": sale.change_due,
        "points_redeemed": sale.points_redeemed,
        "points_earned": sale.points_earned,
        "notes": sale.notes,
        "created_at": sale.created_at.isoformat() if sale.created_at else None,
    }
    if include_items:
        data["items"] = [sale_item_to_dict(item) for item in sale.items]
    else:
        data["items_count"] = len(sale.items)
    return data


class SalesLedger:
    """Service for recording and querying sales."""

    def __init__(self):
        self.inventory_monitor = InventoryMonitor()
        self.store_settings = StoreSettingsService()

    async def create_sale(self, db: Session, cashier_id: int, sale_data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Record a sale in a single transaction.

        Args:
            db: Database session
            cashier_id: ID of the logged-in staff member
            sale_data: Dictionary containing sale information
                - items: List[Dict] with product_id, quantity, optional
                  unit_price and discount_amount
                - payment_method: str (CASH, CARD, DIGITAL)
                - customer_id: Optional[int]
                - discount_percentage: float
                - points_redeemed: int
                - amount_paid: Optional[float]
                - notes: Optional[str]

        Returns:
            Dict containing the created sale with its items
        """
        items = sale_data.get("items") or []
        if not items:
            raise BusinessRuleError("Sale must contain at least one item")

        payment_method = PaymentMethod(sale_data["payment_method"])
        points_redeemed = int(sale_data.get("points_redeemed") or 0)
        if points_redeemed < 0:
            raise BusinessRuleError("Points redeemed cannot be negative")

        store = await self.store_settings.get_settings(db)
        points_per_unit = store.get("points_per_currency_unit", app_settings.points_per_currency_unit)

        try:
            lines = self._resolve_lines(db, items)

            customer = None
            if sale_data.get("customer_id"):
                customer = db.query(Customer).filter(Customer.id == sale_data["customer_id"]).first()
                if not customer:
                    raise NotFoundError("Customer", sale_data["customer_id"])

            summary = compute_cart_summary(
                lines,
                discount_percentage=sale_data.get("discount_percentage") or 0.0,
                tax_rate=store["tax_rate"],
                points_redeemed=points_redeemed,
                points_per_unit=points_per_unit,
            )

            # Loyalty redemption
            if points_redeemed:
                if customer is None:
                    raise BusinessRuleError("Loyalty points can only be redeemed for a customer")
                if points_redeemed > customer.loyalty_points:
                    raise BusinessRuleError("Insufficient loyalty points")
                if points_redeemed > max_redeemable_points(summary["total"], customer.loyalty_points, points_per_unit):
                    raise BusinessRuleError("Points redeemed exceed the sale total")
                customer.loyalty_points -= points_redeemed

            final_total = summary["final_total"]
            earned = points_earned(final_total, store["loyalty_rate"]) if customer else 0
            if customer is not None and earned:
                customer.loyalty_points += earned

            amount_paid = sale_data.get("amount_paid")
            if amount_paid is None or payment_method != PaymentMethod.CASH:
                amount_paid = final_total
            if amount_paid < final_total:
                raise BusinessRuleError("Amount paid must be at least the total amount")

            sale = Sale(
                user_id=cashier_id,
                customer_id=customer.id if customer else None,
                payment_method=payment_method,
                subtotal=summary["subtotal"],
                discount_amount=round(summary["discount_amount"] + summary["points_discount"], 2),
                tax_amount=summary["tax_amount"],
                total_amount=final_total,
                amount_paid=round(amount_paid, 2),
                change_due=round(amount_paid - final_total, 2),
                points_redeemed=points_redeemed,
                points_earned=earned,
                status=SaleStatus.COMPLETED,
                notes=sale_data.get("notes"),
            )
            db.add(sale)
            db.flush()  # Get the sale ID

            for line in lines:
                product = line["product"]
                db.add(SaleItem(
                    sale_id=sale.id,
                    product_id=product.id,
                    quantity=line["quantity"],
                    unit_price=line["unit_price"],
                    discount_amount=line["discount_amount"],
                    subtotal=line_subtotal(line["unit_price"], line["quantity"], line["discount_amount"]),
                ))

                self.inventory_monitor.record_stock_change(
                    db,
                    product,
                    product.stock_quantity - line["quantity"],
                    StockActionType.SALE,
                    reason=f"Sale #{sale.id}",
                    user_id=cashier_id,
                )

            db.commit()
        except Exception as e:
            db.rollback()
            logger.error(f"Failed to record sale: {e}")
            raise

        logger.info(f"Sale recorded successfully: #{sale.id} total={sale.total_amount}")
        return sale_to_dict(self._get(db, sale.id))

    def _resolve_lines(self, db: Session, items: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Load products for cart lines and check stock against the total quantity per product."""
        products: Dict[int, Product] = {}
        requested: Dict[int, int] = {}
        lines = []
        for item in items:
            quantity = int(item["quantity"])
            if quantity <= 0:
                raise BusinessRuleError("Quantity must be greater than zero")

            product_id = item["product_id"]
            product = products.get(product_id)
            if product is None:
                product = db.query(Product).filter(Product.id == product_id).first()
                if not product:
                    raise NotFoundError("Product", product_id)
                if not product.is_active:
                    raise BusinessRuleError(f"Product {product.name} is not available for sale")
                products[product_id] = product

            requested[product_id] = requested.get(product_id, 0) + quantity
            unit_price = item.get("unit_price")
            lines.append({
                "product": product,
                "quantity": quantity,
                "unit_price": float(unit_price if unit_price is not None else product.price),
                "discount_amount": float(item.get("discount_amount") or 0.0),
            })

        for product_id, quantity in requested.items():
            product = products[product_id]
            if product.stock_quantity < quantity:
                raise BusinessRuleError(f"Insufficient stock for {product.name}")

        return lines

    async def get_sale(self, db: Session, sale_id: int) -> Dict[str, Any]:
        return sale_to_dict(self._get(db, sale_id))

    async def list_sales(
        self,
        db: Session,
        search: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        user_id: Optional[int] = None,
        customer_id: Optional[int] = None,
        payment_method: Optional[PaymentMethod] = None,
        page: int = 1,
        limit: int = 100,
    ) -> Tuple[List[Dict[str, Any]], Dict[str, int]]:
        """Get a page of sales, newest first."""
        query = self._filtered_query(db, search, start_date, end_date, user_id, customer_id, payment_method)
        sales, meta = paginate(query, page, limit)
        return [sale_to_dict(sale) for sale in sales], meta

    async def export_rows(
        self,
        db: Session,
        search: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        user_id: Optional[int] = None,
        customer_id: Optional[int] = None,
        payment_method: Optional[PaymentMethod] = None,
    ) -> List[List[Any]]:
        """Rows for the sales report CSV."""
        sales = self._filtered_query(db, search, start_date, end_date, user_id, customer_id, payment_method).all()
        return [
            [
                sale.created_at.strftime("%Y-%m-%d") if sale.created_at else "",
                sale.created_at.strftime("%H:%M:%S") if sale.created_at else "",
                sale.id,
                sale.customer.full_name if sale.customer else "Walk-in",
                sale.user.full_name if sale.user else "Unknown",
                f"{sale.total_amount:.2f}",
                sale.status.value,
                sale.payment_method.value,
            ]
            for sale in sales
        ]

    def _filtered_query(self, db, search, start_date, end_date, user_id, customer_id, payment_method):
        query = db.query(Sale).options(
            joinedload(Sale.user),
            joinedload(Sale.customer),
        ).outerjoin(Customer, Sale.customer_id == Customer.id)

        if search:
            conditions = [Customer.full_name.ilike(f"%{search}%")]
            if search.strip().lstrip("#").isdigit():
                conditions.append(Sale.id == int(search.strip().lstrip("#")))
            query = query.filter(or_(*conditions))

        start = parse_date_bound(start_date)
        end = parse_date_bound(end_date, end_of_day=True)
        if start:
            query = query.filter(Sale.created_at >= start)
        if end:
            query = query.filter(Sale.created_at <= end)

        if user_id:
            query = query.filter(Sale.user_id == user_id)
        if customer_id:
            query = query.filter(Sale.customer_id == customer_id)
        if payment_method:
            query = query.filter(Sale.payment_method == payment_method)

        return query.order_by(Sale.created_at.desc(), Sale.id.desc())

    def _get(self, db: Session, sale_id: int) -> Sale:
        sale = db.query(Sale).options(
            joinedload(Sale.user),
            joinedload(Sale.customer),
            joinedload(Sale.items).joinedload(SaleItem.product),
        ).filter(Sale.id == sale_id).first()
        if not sale:
            raise NotFoundError("Sale", sale_id)
        return sale
