"""
Inventory Monitor service for stock adjustments and the stock audit trail.
"""
import logging
from typing import List, Dict, Any, Optional, Tuple
from sqlalchemy.orm import Session, joinedload
from sqlalchemy import desc

from retailpos.core.exceptions import BusinessRuleError, NotFoundError
from retailpos.core.pagination import paginate
from retailpos.models.inventory import Product, StockLog, StockActionType

logger = logging.getLogger(__name__)

INVENTORY_EXPORT_HEADERS = ["Name", "SKU", "Stock", "Cost Price", "Selling Price", "Total Value", "Status"]
STOCK_HISTORY_HEADERS = ["Date", "Product", "SKU", "Action", "User", "Change", "New Stock", "Reason"]


def infer_action_type(reason: Optional[str], default: StockActionType = StockActionType.ADJUSTMENT) -> StockActionType:
    """Derive the stock action from a free-text reason."""
    text = (reason or "").lower()
    if "restock" in text:
        return StockActionType.RESTOCK
    if "return" in text:
        return StockActionType.RETURN
    if "theft" in text:
        return StockActionType.THEFT
    return default


def stock_log_to_dict(log: StockLog) -> Dict[str, Any]:
    return {
        "id": log.id,
        "product_id": log.product_id,
        "product": {"name": log.product.name, "sku": log.product.sku} if log.product else None,
        "user_id": log.user_id,
        "user": {"full_name": log.user.full_name} if log.user else None,
        "action_type": log.action_type.value,
        "quantity_change": log.quantity_change,
        "previous_stock": log.previous_stock,
        "new_stock": log.new_stock,
        "reason": log.reason,
        "created_at": log.created_at.isoformat() if log.created_at else None,
    }


class InventoryMonitor:
    """Service for updating stock levels and reading the stock history."""

    def record_stock_change(
        self,
        db: Session,
        product: Product,
        new_stock: int,
        action_type: StockActionType,
        reason: Optional[str] = None,
        user_id: Optional[int] = None,
    ) -> Optional[StockLog]:
        """
        Set a product's stock and add the matching audit row.

        Does not commit; the caller owns the transaction. Returns None when
        the quantity does not change.
        """
        if new_stock < 0:
            raise BusinessRuleError(f"Stock for {product.name} cannot go below zero")

        previous_stock = product.stock_quantity
        if new_stock == previous_stock:
            return None

        product.stock_quantity = new_stock
        log = StockLog(
            product_id=product.id,
            user_id=user_id,
            action_type=action_type,
            quantity_change=new_stock - previous_stock,
            previous_stock=previous_stock,
            new_stock=new_stock,
            reason=reason,
        )
        db.add(log)

        logger.info(f"Stock updated for product {product.id}: {previous_stock} -> {new_stock} ({action_type.value})")
        return log

    async def adjust_stock(
        self,
        db: Session,
        product_id: int,
        quantity: int,
        direction: str = "add",
        reason: Optional[str] = None,
        action_type: Optional[StockActionType] = None,
        user_id: Optional[int] = None,
    ) -> Dict[str, Any]:
        """
        Add or remove units from a product's stock.

        Removals clamp at zero, so the logged change is the change that
        actually happened.

        Args:
            db: Database session
            product_id: Product ID
            quantity: Units to add or remove, must be positive
            direction: "add" or "remove"
            reason: Optional free-text reason
            action_type: Explicit action; inferred from the reason when omitted
            user_id: Staff member making the change

        Returns:
            Dict containing the updated stock information
        """
        if quantity <= 0:
            raise BusinessRuleError("Quantity must be greater than zero")
        if direction not in ("add", "remove"):
            raise BusinessRuleError(f"Invalid adjustment direction: {direction}")

        product = db.query(Product).filter(Product.id == product_id).first()
        if not product:
            raise NotFoundError("Product", product_id)

        previous_stock = product.stock_quantity
        if direction == "add":
            new_stock = previous_stock + quantity
        else:
            new_stock = max(0, previous_stock - quantity)
            if previous_stock - quantity < 0:
                logger.warning(f"Stock level for product {product_id} would go negative, set to 0")

        action = action_type or infer_action_type(reason)
        try:
            log = self.record_stock_change(
                db,
                product,
                new_stock,
                action,
                reason=reason or "Manual Adjustment",
                user_id=user_id,
            )
            db.commit()
        except Exception as e:
            db.rollback()
            logger.error(f"Failed to adjust stock for product {product_id}: {e}")
            raise

        return {
            "product_id": product.id,
            "product_name": product.name,
            "previous_stock": previous_stock,
            "new_stock": product.stock_quantity,
            "quantity_change": product.stock_quantity - previous_stock,
            "action_type": action.value,
            "log_id": log.id if log else None,
        }

    async def list_logs(
        self,
        db: Session,
        product_id: Optional[int] = None,
        action_type: Optional[StockActionType] = None,
        page: int = 1,
        limit: int = 10,
    ) -> Tuple[List[Dict[str, Any]], Dict[str, int]]:
        """Get a page of stock history, newest first."""
        query = self._logs_query(db, product_id, action_type)
        logs, meta = paginate(query, page, limit)
        return [stock_log_to_dict(log) for log in logs], meta

    async def low_stock_products(self, db: Session, threshold: int, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """Get active products at or below the threshold, lowest stock first."""
        query = db.query(Product).filter(
            Product.is_active == True,  # noqa: E712
            Product.stock_quantity <= threshold,
        ).order_by(Product.stock_quantity.asc(), Product.name.asc())

        if limit:
            query = query.limit(limit)

        return [
            {
                "product_id": product.id,
                "sku": product.sku,
                "name": product.name,
                "stock_quantity": product.stock_quantity,
                "threshold": threshold,
            }
            for product in query.all()
        ]

    async def inventory_export_rows(self, db: Session, threshold: int, low_stock_only: bool = False) -> List[List[Any]]:
        """Rows for the inventory audit CSV."""
        query = db.query(Product).order_by(Product.name.asc())
        if low_stock_only:
            query = query.filter(Product.stock_quantity <= threshold)

        return [
            [
                p.name,
                p.sku,
                p.stock_quantity,
                p.cost,
                p.price,
                f"{p.stock_quantity * p.cost:.2f}",
                "Low Stock" if p.stock_quantity <= threshold else "In Stock",
            ]
            for p in query.all()
        ]

    async def stock_history_rows(
        self,
        db: Session,
        product_id: Optional[int] = None,
        action_type: Optional[StockActionType] = None,
    ) -> List[List[Any]]:
        """Rows for the stock history CSV."""
        logs = self._logs_query(db, product_id, action_type).all()
        return [
            [
                log.created_at.strftime("%Y-%m-%d %H:%M:%S") if log.created_at else "",
                log.product.name,
                log.product.sku,
                log.action_type.value,
                log.user.full_name if log.user else "System",
                log.quantity_change,
                log.new_stock,
                log.reason or "",
            ]
            for log in logs
        ]

    def _logs_query(self, db: Session, product_id: Optional[int], action_type: Optional[StockActionType]):
        query = db.query(StockLog).options(
            joinedload(StockLog.product),
            joinedload(StockLog.user),
        )
        if product_id:
            query = query.filter(StockLog.product_id == product_id)
        if action_type:
            query = query.filter(StockLog.action_type == action_type)
        return query.order_by(desc(StockLog.created_at), desc(StockLog.id))
