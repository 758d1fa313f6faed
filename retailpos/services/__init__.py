"""
Business logic services for RetailPOS application.
"""

from .sales_ledger import SalesLedger
from .inventory_monitor import InventoryMonitor
from .product_catalog import ProductCatalog
from .customer_directory import CustomerDirectory
from .staff_registry import StaffRegistry
from .store_settings import StoreSettingsService
from .sales_analytics import SalesAnalytics

__all__ = [
    "SalesLedger",
    "InventoryMonitor",
    "ProductCatalog",
    "CustomerDirectory",
    "StaffRegistry",
    "StoreSettingsService",
    "SalesAnalytics",
]
