# shopapi/models/product.py
from sqlalchemy import Column, String, Text, Integer, Numeric, DateTime, CheckConstraint

from shopapi.database import Base
from shopapi.utils.ids import generate_id, utcnow


# Model Product
# Catalog entry. Stock is decremented by order placement and restored by
# cancellation; both constraints below are also enforced by the database.
class Product(Base):
    __tablename__ = "products"

    id = Column(String(32), primary_key=True, default=generate_id)
    name = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=False, default="")

    price = Column(Numeric(10, 2), CheckConstraint("price > 0", name="ck_products_price_positive"), nullable=False)
    stock_quantity = Column(
        Integer,
        CheckConstraint("stock_quantity >= 0", name="ck_products_stock_non_negative"),
        nullable=False,
        default=0,
    )

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    def __repr__(self):
        return f"<Product {self.id} stock={self.stock_quantity}>"
