from decimal import Decimal

import pytest

from shopapi.errors import ConflictError, InsufficientStockError, NotFoundError
from shopapi.models.product import Product
from shopapi.repositories.catalog import CatalogStore
from shopapi.services.orders import OrderLine


def test_decrement_is_guarded(session_factory, make_product, stock_of):
    product_id = make_product(stock=2)

    with session_factory() as session:
        store = CatalogStore(session)
        with pytest.raises(InsufficientStockError) as excinfo:
            store.decrement_stock(product_id, 3)
        assert excinfo.value.details == {"product_id": product_id, "available": 2, "requested": 3}

        assert store.decrement_stock(product_id, 2).stock_quantity == 0
        session.commit()

    assert stock_of(product_id) == 0


def test_stale_read_cannot_drive_stock_negative(session_factory, make_product, stock_of):
    product_id = make_product(stock=5)

    with session_factory() as first, session_factory() as second:
        first_store, second_store = CatalogStore(first), CatalogStore(second)
        assert first_store.get_by_id(product_id).stock_quantity == 5
        assert second_store.get_by_id(product_id).stock_quantity == 5

        first_store.decrement_stock(product_id, 3)
        first.commit()

        # The second reader still believes 5 are available
        with pytest.raises(InsufficientStockError):
            second_store.decrement_stock(product_id, 3)
        second.rollback()

    assert stock_of(product_id) == 2


def test_decrement_unknown_product(session_factory):
    with session_factory() as session:
        with pytest.raises(NotFoundError):
            CatalogStore(session).decrement_stock("missing", 1)


def test_increment_unknown_product(session_factory):
    with session_factory() as session:
        with pytest.raises(NotFoundError):
            CatalogStore(session).increment_stock("missing", 1)


def test_increment_refreshes_loaded_instance(session_factory, make_product):
    product_id = make_product(stock=1)

    with session_factory() as session:
        store = CatalogStore(session)
        product = store.get_by_id(product_id)
        store.increment_stock(product_id, 4)
        assert product.stock_quantity == 5


def test_update_unknown_product(session_factory):
    with session_factory() as session:
        with pytest.raises(NotFoundError):
            CatalogStore(session).update(
                "missing", name="X", description="", price=Decimal("1.00"), stock_quantity=1
            )


def test_create_rejects_non_positive_price(session_factory):
    with session_factory() as session:
        with pytest.raises(ConflictError) as excinfo:
            CatalogStore(session).create(Product(name="Free", price=Decimal("0"), stock_quantity=1))
        assert str(excinfo.value).startswith("create product:")


def test_list_newest_first(session_factory, make_product):
    older = make_product(name="Older")
    newer = make_product(name="Newer")

    with session_factory() as session:
        ids = [p.id for p in CatalogStore(session).list()]

    assert ids == [newer, older]


def test_referenced_product_cannot_be_deleted(session_factory, order_engine, user_id, make_product):
    product_id = make_product(stock=5)
    order_engine.create_order(user_id, [OrderLine(product_id, 1)])

    with session_factory() as session:
        with pytest.raises(ConflictError):
            CatalogStore(session).delete(product_id)


def test_delete_unreferenced_product(session_factory, make_product):
    product_id = make_product()

    with session_factory() as session:
        CatalogStore(session).delete(product_id)
        session.commit()

    with session_factory() as session:
        assert session.get(Product, product_id) is None
