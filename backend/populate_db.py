import os
import sys
import logging

# Add 'backend' folder to Python path
sys.path.append(os.path.abspath(os.path.dirname(__file__)))

from database import SessionLocal, init_db
from models.users import User
from models.product import Product, Category
from models.supplier import Supplier
from services.store_settings import get_store_settings
from utils.hashing import get_password_hash

logger = logging.getLogger("populate_db")

# Configuration
DEFAULT_PASSWORD = os.getenv("SEED_PASSWORD", "password123")

USERS = [
    ("admin@pos.example.com", "Administrator", "admin"),
    ("manager@pos.example.com", "Store Manager", "manager"),
    ("cashier@pos.example.com", "Cashier", "cashier"),
]

CATEGORIES = [
    ("Makanan", "Produk makanan"),
    ("Minuman", "Produk minuman"),
    ("Snack", "Produk camilan"),
    ("Alat Tulis", "Peralatan tulis"),
    ("Kebutuhan Rumah", "Produk kebutuhan rumah tangga"),
]

# name, sku, barcode, price, cost, stock, low_stock_threshold, category
PRODUCTS = [
    ("Mie Instan", "MI001", "8992388111114", 3500, 3000, 50, 10, "Makanan"),
    ("Air Mineral 600ml", "AM001", "8992388222225", 4000, 3200, 24, 12, "Minuman"),
    ("Keripik Kentang", "KK001", "8992388333336", 10000, 8000, 15, 5, "Snack"),
    ("Pulpen", "PP001", "8992388444447", 2500, 1500, 30, 10, "Alat Tulis"),
    ("Sabun Cuci Piring", "SB001", "8992388555558", 15000, 12000, 8, 5, "Kebutuhan Rumah"),
    ("Teh Botol 350ml", "TB001", "8992388666669", 5000, 4200, 36, 12, "Minuman"),
    ("Buku Tulis", "BT001", "8992388777770", 5500, 4500, 25, 10, "Alat Tulis"),
    ("Roti Tawar", "RT001", "8992388888881", 14000, 11000, 4, 5, "Makanan"),
]

SUPPLIERS = [
    ("PT Sumber Makmur", "Budi Santoso", "081234567890", "sales@sumbermakmur.example.com"),
    ("CV Segar Jaya", "Siti Aminah", "081298765432", "order@segarjaya.example.com"),
]
# End Configuration


def seed_users(session):
    for email, name, role in USERS:
        if session.query(User).filter(User.email == email).first():
            continue
        session.add(User(email=email, name=name, role=role, password_hash=get_password_hash(DEFAULT_PASSWORD)))
    session.commit()


def seed_catalog(session):
    categories = {}
    for name, description in CATEGORIES:
        category = session.query(Category).filter(Category.name == name).first()
        if not category:
            category = Category(name=name, description=description)
            session.add(category)
            session.flush()
        categories[name] = category

    # Opening stock is the product's starting balance, not an adjustment
    for name, sku, barcode, price, cost, stock, threshold, category in PRODUCTS:
        if session.query(Product).filter(Product.sku == sku).first():
            continue
        session.add(Product(
            name=name, sku=sku, barcode=barcode, price=price, cost=cost, stock=stock,
            low_stock_threshold=threshold, category_id=categories[category].id,
        ))

    for name, contact, phone, email in SUPPLIERS:
        if session.query(Supplier).filter(Supplier.email == email).first():
            continue
        session.add(Supplier(name=name, contact_name=contact, phone=phone, email=email))

    session.commit()


def populate_database():
    """Create the schema if needed and insert demo data. Safe to run twice."""
    init_db()
    session = SessionLocal()
    try:
        seed_users(session)
        seed_catalog(session)
        get_store_settings(session)
        logger.info("seeded %d users, %d categories, %d products", len(USERS), len(CATEGORIES), len(PRODUCTS))
    finally:
        session.close()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    populate_database()
