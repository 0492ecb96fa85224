from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

import shopapi.models  # noqa: F401
from shopapi.database import Base, make_engine, get_session_factory
from shopapi.main import create_app
from shopapi.models.product import Product
from shopapi.models.users import User, UserRole
from shopapi.services.orders import OrderEngine
from shopapi.utils.hashing import get_password_hash


@pytest.fixture()
def db_engine(tmp_path):
    """Fresh SQLite database file per test."""
    engine = make_engine(f"sqlite:///{tmp_path / 'shop.db'}")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(db_engine):
    return sessionmaker(bind=db_engine, autocommit=False, autoflush=False)


@pytest.fixture()
def order_engine(session_factory):
    return OrderEngine(session_factory)


@pytest.fixture()
def make_user(session_factory):
    def _make(email="buyer@example.com", role=UserRole.CUSTOMER, password="secret123"):
        with session_factory() as session:
            user = User(email=email, password_hash=get_password_hash(password), role=role)
            session.add(user)
            session.commit()
            return user.id
    return _make


@pytest.fixture()
def user_id(make_user):
    return make_user()


@pytest.fixture()
def make_product(session_factory):
    def _make(name="Widget", price="10.00", stock=5):
        with session_factory() as session:
            product = Product(name=name, description="", price=Decimal(price), stock_quantity=stock)
            session.add(product)
            session.commit()
            return product.id
    return _make


@pytest.fixture()
def stock_of(session_factory):
    def _stock(product_id):
        with session_factory() as session:
            return session.get(Product, product_id).stock_quantity
    return _stock


@pytest.fixture()
def client(session_factory):
    app = create_app(create_tables=False)
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    return TestClient(app)
