# shopapi/models/order.py
import enum

from sqlalchemy import (
    Column, String, Integer, Numeric, DateTime, ForeignKey, Enum,
    CheckConstraint, UniqueConstraint, Computed,
)
from sqlalchemy.orm import relationship

from shopapi.database import Base
from shopapi.utils.ids import generate_id, utcnow


class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED})


class Order(Base):
    __tablename__ = "orders"

    id = Column(String(32), primary_key=True, default=generate_id)
    user_id = Column(String(32), ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True)
    status = Column(
        Enum(OrderStatus, native_enum=False, length=20, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=OrderStatus.PENDING,
        index=True,
    )
    # Fixed at creation from the unit prices of the time; never recomputed
    total_amount = Column(
        Numeric(10, 2), CheckConstraint("total_amount >= 0", name="ck_orders_total_non_negative"), nullable=False
    )
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    items = relationship(
        "OrderItem", back_populates="order", cascade="all, delete-orphan", passive_deletes=True,
        order_by=lambda: [OrderItem.created_at, OrderItem.id],
    )


class OrderItem(Base):
    __tablename__ = "order_items"
    __table_args__ = (UniqueConstraint("order_id", "product_id", name="unique_order_product"),)

    id = Column(String(32), primary_key=True, default=generate_id)
    order_id = Column(String(32), ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(String(32), ForeignKey("products.id", ondelete="RESTRICT"), nullable=False, index=True)
    quantity = Column(Integer, CheckConstraint("quantity > 0", name="ck_order_items_quantity_positive"), nullable=False)
    unit_price = Column(
        Numeric(10, 2), CheckConstraint("unit_price >= 0", name="ck_order_items_price_non_negative"), nullable=False
    )
    # Stored generated column; never written by the application
    subtotal = Column(Numeric(10, 2), Computed("quantity * unit_price", persisted=True))
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    order = relationship("Order", back_populates="items")
    product = relationship("Product")
