# shopapi/repositories/catalog.py
from typing import List

from sqlalchemy import select, update, exists
from sqlalchemy.orm import Session

from shopapi.errors import NotFoundError, InsufficientStockError, ConflictError
from shopapi.models.product import Product
from shopapi.models.order import OrderItem
from shopapi.repositories.base import translate_db_errors
from shopapi.utils.ids import utcnow


class CatalogStore:
    """Product persistence bound to one session.

    Every method runs inside the caller's transaction; nothing here commits.
    """

    def __init__(self, session: Session):
        self.session = session

    @translate_db_errors("get product by id")
    def get_by_id(self, product_id: str, for_update: bool = False) -> Product:
        stmt = select(Product).where(Product.id == product_id)
        if for_update:
            # Row lock on PostgreSQL; rendered as a plain SELECT on SQLite
            stmt = stmt.with_for_update()
        product = self.session.execute(stmt).scalar_one_or_none()
        if product is None:
            raise NotFoundError(f"product {product_id} not found")
        return product

    @translate_db_errors("list products")
    def list(self) -> List[Product]:
        stmt = select(Product).order_by(Product.created_at.desc())
        return list(self.session.execute(stmt).scalars())

    @translate_db_errors("create product")
    def create(self, product: Product) -> Product:
        self.session.add(product)
        self.session.flush()
        return product

    @translate_db_errors("update product")
    def update(self, product_id: str, *, name: str, description: str, price, stock_quantity: int) -> Product:
        product = self.get_by_id(product_id, for_update=True)
        product.name = name
        product.description = description
        product.price = price
        product.stock_quantity = stock_quantity
        product.updated_at = utcnow()
        self.session.flush()
        return product

    @translate_db_errors("delete product")
    def delete(self, product_id: str) -> None:
        product = self.get_by_id(product_id)
        referenced = self.session.execute(
            select(exists().where(OrderItem.product_id == product_id))
        ).scalar()
        if referenced:
            raise ConflictError(f"product {product_id} is referenced by existing orders")
        self.session.delete(product)
        self.session.flush()

    @translate_db_errors("decrement stock")
    def decrement_stock(self, product_id: str, quantity: int) -> Product:
        # Compare-and-decrement: the WHERE guard keeps stock_quantity >= 0 even
        # when another transaction changed the row after it was read.
        result = self.session.execute(
            update(Product)
            .where(Product.id == product_id, Product.stock_quantity >= quantity)
            .values(stock_quantity=Product.stock_quantity - quantity, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            product = self._reload(product_id)
            if product is None:
                raise NotFoundError(f"product {product_id} not found")
            raise InsufficientStockError(
                f"product {product_id} has {product.stock_quantity} in stock, {quantity} requested",
                details={"product_id": product_id, "available": product.stock_quantity, "requested": quantity},
            )
        return self._reload(product_id)

    @translate_db_errors("increment stock")
    def increment_stock(self, product_id: str, quantity: int) -> Product:
        result = self.session.execute(
            update(Product)
            .where(Product.id == product_id)
            .values(stock_quantity=Product.stock_quantity + quantity, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise NotFoundError(f"product {product_id} not found")
        return self._reload(product_id)

    def _reload(self, product_id: str) -> Product:
        # Bring any instance already in the identity map in line with the row
        return self.session.get(Product, product_id, populate_existing=True)
