import os
import tempfile
from decimal import Decimal
from pathlib import Path

# Settings are read on import, so the environment must be in place first
_DB_DIR = Path(tempfile.mkdtemp(prefix="pos-tests-"))
os.environ["DATABASE_URL"] = f"sqlite:///{_DB_DIR / 'test.db'}"
os.environ["SECRET_KEY"] = "test-secret"
os.environ["RATE_LIMIT_ENABLED"] = "false"

import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.database import Base, SessionLocal, engine
from app.core.hashing import hash_password
from app.core.jwt import create_user_token
from app.models.categories import Category
from app.models.products import Product
from app.models.store_settings import StoreSettings, STORE_SETTINGS_ID
from app.models.toppings import Topping
from app.models.users import User
from app.services.checkout import checkout_registry


@pytest.fixture(autouse=True)
def _fresh_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    checkout_registry.reset()
    yield
    checkout_registry.reset()


@pytest.fixture()
def client():
    with TestClient(app) as client:
        yield client


@pytest.fixture()
def db_session():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def _create_user(db, name, username, role, password="secret123"):
    user = User(
        name=name,
        username=username,
        password_hash=hash_password(password),
        role=role,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture()
def admin_user(db_session):
    return _create_user(db_session, "Store Admin", "admin", "admin")


@pytest.fixture()
def employee_user(db_session):
    return _create_user(db_session, "Rina Cashier", "rina", "employee")


@pytest.fixture()
def other_employee(db_session):
    return _create_user(db_session, "Budi Cashier", "budi", "employee")


def _headers(user):
    return {"Authorization": f"Bearer {create_user_token(user)}"}


@pytest.fixture()
def admin_headers(admin_user):
    return _headers(admin_user)


@pytest.fixture()
def employee_headers(employee_user):
    return _headers(employee_user)


@pytest.fixture()
def other_employee_headers(other_employee):
    return _headers(other_employee)


@pytest.fixture()
def store(db_session):
    settings_row = StoreSettings(
        id=STORE_SETTINGS_ID,
        store_name="Kopi Senja",
        address="Jl. Merdeka 10",
        phone="081234567890",
        owner="Sari",
        logo_url="",
        profit_percentage=30,
    )
    db_session.add(settings_row)
    db_session.commit()
    return settings_row


@pytest.fixture()
def catalog(db_session):
    """Latte (20000, stock 10) in Drinks and a Boba topping (3000, stock 10)."""
    drinks = Category(name="Drinks", description="Coffee and tea")
    db_session.add(drinks)
    db_session.flush()

    latte = Product(
        name="Latte",
        category_id=drinks.id,
        price=Decimal("20000"),
        stock=10,
    )
    boba = Topping(name="Boba", price=Decimal("3000"), stock=10)
    cheese = Topping(name="Cheese Foam", price=Decimal("5000"), stock=4)

    db_session.add_all([latte, boba, cheese])
    db_session.commit()

    for row in (drinks, latte, boba, cheese):
        db_session.refresh(row)

    return {"category": drinks, "latte": latte, "boba": boba, "cheese": cheese}
