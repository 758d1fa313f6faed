#!/usr/bin/env python3
"""
Sample data population script for RetailPOS.
Creates staff accounts, store settings, categories, products and customers
for local development and demonstration.
"""
import sys
import os

# Add the project root to Python path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from retailpos.core.config import settings
from retailpos.core.database import get_db_context, init_db
from retailpos.core.security import hash_password
from retailpos.models import Category, Customer, Product, StockActionType, StoreSettings, User, UserRole
from retailpos.services.inventory_monitor import InventoryMonitor

SAMPLE_USERS = [
    {"email": "admin@example.com", "full_name": "Store Admin", "password": "admin123", "role": UserRole.ADMIN},
    {"email": "cashier@example.com", "full_name": "Casey Cashier", "password": "cashier123", "role": UserRole.STAFF},
]

SAMPLE_CATEGORIES = {
    "Groceries": "Everyday food items",
    "Beverages": "Drinks and coffee",
    "Household": "Cleaning and home supplies",
    "Personal Care": "Soap, shampoo and toiletries",
}

SAMPLE_PRODUCTS = [
    {"sku": "MILK001", "name": "Fresh Whole Milk", "category": "Groceries", "cost": 2.50, "price": 3.99, "stock": 40, "barcode": "0001234500011"},
    {"sku": "BREAD001", "name": "Artisan Sourdough Bread", "category": "Groceries", "cost": 1.80, "price": 4.50, "stock": 25, "barcode": "0001234500028"},
    {"sku": "SNACK001", "name": "Organic Trail Mix", "category": "Groceries", "cost": 5.00, "price": 9.99, "stock": 8, "barcode": "0001234500035"},
    {"sku": "COFFEE001", "name": "Premium Coffee Beans", "category": "Beverages", "cost": 8.00, "price": 12.99, "stock": 15, "barcode": "0001234500042"},
    {"sku": "WATER001", "name": "Spring Water", "category": "Beverages", "cost": 0.80, "price": 1.99, "stock": 120, "barcode": "0001234500059"},
    {"sku": "CLEAN001", "name": "All-Purpose Cleaner", "category": "Household", "cost": 4.20, "price": 8.50, "stock": 5, "barcode": "0001234500066"},
    {"sku": "BATTERY001", "name": "AA Batteries (Pack of 4)", "category": "Household", "cost": 2.50, "price": 5.99, "stock": 30, "barcode": "0001234500073"},
    {"sku": "SOAP001", "name": "Natural Hand Soap", "category": "Personal Care", "cost": 3.50, "price": 6.99, "stock": 18, "barcode": "0001234500080"},
]

SAMPLE_CUSTOMERS = [
    {"full_name": "Jordan Lee", "email": "jordan@example.com", "phone": "555-0101", "loyalty_points": 120},
    {"full_name": "Sam Rivera", "email": "sam@example.com", "phone": "555-0102", "loyalty_points": 0},
    {"full_name": "Alex Kim", "email": None, "phone": "555-0103", "loyalty_points": 45},
]


def create_sample_users(db):
    """Create the admin and a staff account."""
    for user_data in SAMPLE_USERS:
        if db.query(User).filter(User.email == user_data["email"]).first():
            print(f"User {user_data['email']} already exists, skipping...")
            continue

        db.add(User(
            email=user_data["email"],
            full_name=user_data["full_name"],
            password_hash=hash_password(user_data["password"]),
            role=user_data["role"],
            is_active=True,
        ))
        print(f"Created user: {user_data['email']} ({user_data['role'].value})")
    db.commit()


def create_store_settings(db):
    if db.query(StoreSettings).first():
        print("Store settings already exist, skipping...")
        return

    db.add(StoreSettings(
        store_name="Corner Market",
        address="12 High Street",
        phone="555-0100",
        email="hello@cornermarket.example",
        currency=settings.default_currency,
        tax_rate=settings.default_tax_rate,
        loyalty_rate=settings.default_loyalty_rate,
        low_stock_threshold=settings.default_low_stock_threshold,
    ))
    db.commit()
    print("Created store settings")


def create_sample_products(db):
    """Create categories and products, logging opening stock as a restock."""
    categories = {}
    for name, description in SAMPLE_CATEGORIES.items():
        category = db.query(Category).filter(Category.name == name).first()
        if not category:
            category = Category(name=name, description=description)
            db.add(category)
            db.flush()
        categories[name] = category

    admin = db.query(User).filter(User.email == SAMPLE_USERS[0]["email"]).first()
    inventory_monitor = InventoryMonitor()

    for product_data in SAMPLE_PRODUCTS:
        if db.query(Product).filter(Product.sku == product_data["sku"]).first():
            print(f"Product {product_data['sku']} already exists, skipping...")
            continue

        product = Product(
            sku=product_data["sku"],
            barcode=product_data["barcode"],
            name=product_data["name"],
            category_id=categories[product_data["category"]].id,
            cost=product_data["cost"],
            price=product_data["price"],
            stock_quantity=0,
            is_active=True,
        )
        db.add(product)
        db.flush()

        inventory_monitor.record_stock_change(
            db,
            product,
            product_data["stock"],
            StockActionType.RESTOCK,
            reason="Initial stock",
            user_id=admin.id if admin else None,
        )
        print(f"Created product: {product.name} ({product_data['stock']} in stock)")

    db.commit()


def create_sample_customers(db):
    for customer_data in SAMPLE_CUSTOMERS:
        if db.query(Customer).filter(Customer.full_name == customer_data["full_name"]).first():
            print(f"Customer {customer_data['full_name']} already exists, skipping...")
            continue
        db.add(Customer(**customer_data))
        print(f"Created customer: {customer_data['full_name']}")
    db.commit()


def main():
    """Main function to populate sample data."""
    print("Populating RetailPOS with sample data...")

    try:
        init_db()
        print("Database initialized")

        with get_db_context() as db:
            create_sample_users(db)
            create_store_settings(db)
            create_sample_products(db)
            create_sample_customers(db)

        print("\nSample data population completed!")
        print("Log in with admin@example.com / admin123")

    except Exception as e:
        print(f"Error populating sample data: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
