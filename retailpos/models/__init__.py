"""
Database models for RetailPOS application.
"""

from .users import User, UserRole
from .inventory import Category, Product, StockLog, StockActionType
from .customers import Customer
from .sales import Sale, SaleItem, PaymentMethod, SaleStatus
from .settings import StoreSettings

__all__ = [
    "User", "UserRole",
    "Category", "Product", "StockLog", "StockActionType",
    "Customer",
    "Sale", "SaleItem", "PaymentMethod", "SaleStatus",
    "StoreSettings",
]
