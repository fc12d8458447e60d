import os
import tempfile

# must be set before shopcart.config is imported
os.environ["DATABASE_URL"] = "sqlite:///" + os.path.join(
    tempfile.gettempdir(), "shopcart_test.db"
)
os.environ["BCRYPT_ROUNDS"] = "4"

import pytest

from shopcart.adapters.mock_mailer import mailer
from shopcart.db import SessionLocal, init_db
from shopcart.models.product import Product
from shopcart.models.user import User


@pytest.fixture(autouse=True)
def fresh_db():
    # every test starts from empty tables and an empty outbox
    init_db(reset=True)
    mailer.outbox.clear()
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def user(db):
    u = User(email="shopper@example.com", username="shopper", status=1)
    db.add(u)
    db.commit()
    db.refresh(u)
    return u


@pytest.fixture
def products(db):
    items = [
        Product(name="Green Tea", category="drinks", price_cents=300, stock=5),
        Product(name="Notebook", category="stationery", price_cents=450, stock=10),
        Product(name="Mystery Box", category=None, price_cents=999, stock=2),
    ]
    db.add_all(items)
    db.commit()
    for p in items:
        db.refresh(p)
    return items
