"""
Customer directory service.
"""
import logging
from typing import List, Dict, Any, Optional, Tuple
from sqlalchemy.orm import Session
from sqlalchemy import or_

from retailpos.core.exceptions import NotFoundError
from retailpos.core.pagination import paginate
from retailpos.models.customers import Customer
from retailpos.models.sales import Sale

logger = logging.getLogger(__name__)

RECENT_SALES_LIMIT = 5


def customer_to_dict(customer: Customer) -> Dict[str, Any]:
    return {
        "id": customer.id,
        "full_name": customer.full_name,
        "email": customer.email,
        "phone": customer.phone,
        "loyalty_points": customer.loyalty_points,
        "created_at": customer.created_at.isoformat() if customer.created_at else None,
        "updated_at": customer.updated_at.isoformat() if customer.updated_at else None,
    }


class CustomerDirectory:
    """Service for managing loyalty customers."""

    async def list_customers(
        self,
        db: Session,
        search: Optional[str] = None,
        page: int = 1,
        limit: int = 10,
    ) -> Tuple[List[Dict[str, Any]], Dict[str, int]]:
        query = db.query(Customer)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(
                Customer.full_name.ilike(pattern),
                Customer.email.ilike(pattern),
                Customer.phone.ilike(pattern),
            ))

        query = query.order_by(Customer.created_at.desc(), Customer.id.desc())
        customers, meta = paginate(query, page, limit)
        return [customer_to_dict(c) for c in customers], meta

    async def get_customer(self, db: Session, customer_id: int) -> Dict[str, Any]:
        """Get a customer with their most recent sales."""
        customer = self._get(db, customer_id)

        recent_sales = db.query(Sale).filter(
            Sale.customer_id == customer_id
        ).order_by(Sale.created_at.desc(), Sale.id.desc()).limit(RECENT_SALES_LIMIT).all()

        data = customer_to_dict(customer)
        data["sales"] = [
            {
                "id": sale.id,
                "total_amount": sale.total_amount,
                "payment_method": sale.payment_method.value,
                "status": sale.status.value,
                "points_earned": sale.points_earned,
                "points_redeemed": sale.points_redeemed,
                "created_at": sale.created_at.isoformat() if sale.created_at else None,
            }
            for sale in recent_sales
        ]
        return data

    async def create_customer(self, db: Session, data: Dict[str, Any]) -> Dict[str, Any]:
        customer = Customer(
            full_name=data["full_name"],
            email=data.get("email") or None,
            phone=data.get("phone") or None,
            loyalty_points=0,
        )
        db.add(customer)
        db.commit()
        db.refresh(customer)

        logger.info(f"Customer created: {customer.id}")
        return customer_to_dict(customer)

    async def update_customer(self, db: Session, customer_id: int, data: Dict[str, Any]) -> Dict[str, Any]:
        customer = self._get(db, customer_id)

        customer.full_name = data["full_name"]
        customer.email = data.get("email") or None
        customer.phone = data.get("phone") or None

        db.commit()
        db.refresh(customer)
        return customer_to_dict(customer)

    async def delete_customer(self, db: Session, customer_id: int) -> None:
        """Delete a customer; their past sales stay as walk-in sales."""
        customer = self._get(db, customer_id)

        try:
            db.query(Sale).filter(Sale.customer_id == customer_id).update(
                {Sale.customer_id: None}, synchronize_session=False
            )
            db.delete(customer)
            db.commit()
        except Exception:
            db.rollback()
            raise

        logger.info(f"Customer deleted: {customer_id}")

    def _get(self, db: Session, customer_id: int) -> Customer:
        customer = db.query(Customer).filter(Customer.id == customer_id).first()
        if not customer:
            raise NotFoundError("Customer", customer_id)
        return customer
