import os

# Keep the test run away from the on-disk database
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database import Base, get_db
from main import app
from models.users import User
from models.product import Product, Category
from models.supplier import Supplier
from models.customer import Customer
from utils.hashing import get_password_hash
from utils.tokenJWT import create_access_token

PASSWORD = "secret123"


@pytest.fixture(scope="session")
def password_hash():
    # bcrypt is slow on purpose; hash once per run
    return get_password_hash(PASSWORD)


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def db(engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def make_user(db, password_hash):
    def _make(role="cashier", email=None, name=None, is_active=True):
        user = User(
            email=email or f"{role}@pos.example.com",
            name=name or role.title(),
            role=role,
            password_hash=password_hash,
            is_active=is_active,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _make


def auth_headers(user):
    token = create_access_token({"sub": user.email, "role": user.role})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def admin(make_user):
    return make_user("admin")


@pytest.fixture()
def manager(make_user):
    return make_user("manager")


@pytest.fixture()
def cashier(make_user):
    return make_user("cashier")


@pytest.fixture()
def admin_headers(admin):
    return auth_headers(admin)


@pytest.fixture()
def manager_headers(manager):
    return auth_headers(manager)


@pytest.fixture()
def cashier_headers(cashier):
    return auth_headers(cashier)


@pytest.fixture()
def category(db):
    category = Category(name="Makanan", description="Produk makanan")
    db.add(category)
    db.commit()
    db.refresh(category)
    return category


@pytest.fixture()
def make_product(db):
    counter = {"n": 0}

    def _make(name=None, price=3500.0, cost=3000.0, stock=50, low_stock_threshold=10,
              category=None, is_active=True, sku=None, barcode=None):
        counter["n"] += 1
        n = counter["n"]
        product = Product(
            name=name or f"Product {n}",
            sku=sku or f"SKU{n:03d}",
            barcode=barcode,
            price=price,
            cost=cost,
            stock=stock,
            low_stock_threshold=low_stock_threshold,
            category_id=category.id if category else None,
            is_active=is_active,
        )
        db.add(product)
        db.commit()
        db.refresh(product)
        return product
    return _make


@pytest.fixture()
def supplier(db):
    supplier = Supplier(name="PT Sumber Makmur", contact_name="Budi", email="sales@sumber.example.com")
    db.add(supplier)
    db.commit()
    db.refresh(supplier)
    return supplier


@pytest.fixture()
def customer(db):
    customer = Customer(name="Andi", phone="0811111111", email="andi@pos.example.com")
    db.add(customer)
    db.commit()
    db.refresh(customer)
    return customer


@pytest.fixture()
def password():
    return PASSWORD


@pytest.fixture()
def headers_for():
    return auth_headers
