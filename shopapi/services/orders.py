# shopapi/services/orders.py
import logging
from decimal import Decimal
from typing import Callable, Iterable, List, NamedTuple, Union

from sqlalchemy.orm import Session

from shopapi.errors import (
    operation, ValidationError, InsufficientStockError, UnauthorizedError, OrderNotPendingError, TerminalStateError,
)
from shopapi.models.order import Order, OrderItem, OrderStatus, TERMINAL_STATUSES
from shopapi.services.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
NON_TERMINAL_STATUSES = tuple(s for s in OrderStatus if s not in TERMINAL_STATUSES)


class OrderLine(NamedTuple):
    product_id: str
    quantity: int


def _validate_lines(items) -> List[OrderLine]:
    lines = [OrderLine(it.product_id, it.quantity) for it in items or []]
    if not lines:
        raise ValidationError("order must contain at least one item", details={"items": "empty"})

    seen = set()
    for index, line in enumerate(lines):
        if not line.product_id:
            raise ValidationError("product id is required", details={f"items[{index}].product_id": "required"})
        if isinstance(line.quantity, bool) or not isinstance(line.quantity, int) or line.quantity <= 0:
            raise ValidationError(
                f"quantity for product {line.product_id} must be a positive integer",
                details={f"items[{index}].quantity": "must be > 0"},
            )
        if line.product_id in seen:
            raise ValidationError(
                f"product {line.product_id} appears more than once",
                details={f"items[{index}].product_id": "duplicate"},
            )
        seen.add(line.product_id)
    return lines


def _coerce_status(status: Union[str, OrderStatus]) -> OrderStatus:
    try:
        return OrderStatus(status)
    except ValueError:
        raise ValidationError(
            f"unknown order status {status!r}",
            details={"status": f"one of {', '.join(s.value for s in OrderStatus)}"},
        )


class OrderEngine:
    """Places, cancels and moves orders while keeping product stock consistent.

    Each mutating call runs as exactly one unit of work spanning the catalog
    and the ledger: either every stock change and order row it makes is
    committed, or none is.
    """

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def _unit_of_work(self) -> UnitOfWork:
        return UnitOfWork(self.session_factory)

    def create_order(self, user_id: str, items: Iterable) -> Order:
        lines = _validate_lines(items)

        with operation("create order"), self._unit_of_work() as uow:
            total = Decimal("0")
            resolved = []

            # Rows are locked in product id order, lines are then handled in input order
            locked = {}
            for product_id in sorted(line.product_id for line in lines):
                with operation(f"getting product {product_id}"):
                    locked[product_id] = uow.catalog.get_by_id(product_id, for_update=True)

            for line in lines:
                product = locked[line.product_id]
                if product.stock_quantity < line.quantity:
                    raise InsufficientStockError(
                        f"product {product.id} has {product.stock_quantity} in stock, {line.quantity} requested",
                        details={
                            "product_id": product.id,
                            "available": product.stock_quantity,
                            "requested": line.quantity,
                        },
                    )

                unit_price = Decimal(product.price)
                with operation("updating product stock"):
                    uow.catalog.decrement_stock(product.id, line.quantity)

                resolved.append(OrderItem(product_id=product.id, quantity=line.quantity, unit_price=unit_price))
                total += unit_price * line.quantity

            order = Order(
                user_id=user_id,
                status=OrderStatus.PENDING,
                total_amount=total.quantize(CENT),
                items=resolved,
            )
            uow.ledger.create(order)
            uow.commit()

        logger.info("order %s created for user %s: %d items, total %s", order.id, user_id, len(resolved), order.total_amount)
        return order

    def cancel_order(self, order_id: str, user_id: str) -> Order:
        with operation("cancel order"), self._unit_of_work() as uow:
            with operation("getting order"):
                order = uow.ledger.get_by_id(order_id)

            if order.user_id != user_id:
                raise UnauthorizedError(f"user {user_id} does not own order {order_id}")
            if order.status != OrderStatus.PENDING:
                raise OrderNotPendingError(f"order {order_id} is {order.status.value}")

            # Compare-and-set on the status: of two racing cancellations only
            # one gets here with a row updated, so stock is restored once.
            with operation("updating order status"):
                applied = uow.ledger.update_status(order_id, OrderStatus.CANCELLED, only_from=[OrderStatus.PENDING])
            if not applied:
                raise OrderNotPendingError(f"order {order_id} is no longer pending")

            for item in order.items:
                with operation(f"restoring stock for product {item.product_id}"):
                    uow.catalog.increment_stock(item.product_id, item.quantity)

            uow.commit()
            order = uow.ledger.get_by_id(order_id)

        logger.info("order %s cancelled by user %s, stock restored for %d items", order_id, user_id, len(order.items))
        return order

    def update_status(self, order_id: str, status: Union[str, OrderStatus]) -> Order:
        new_status = _coerce_status(status)

        with operation("update order status"), self._unit_of_work() as uow:
            with operation("getting order"):
                order = uow.ledger.get_by_id(order_id)

            old_status = order.status
            if old_status.is_terminal:
                raise TerminalStateError(f"cannot update {old_status.value} order")

            # Any non-terminal status may move to any status, backwards included
            applied = uow.ledger.update_status(order_id, new_status, only_from=NON_TERMINAL_STATUSES)
            if not applied:
                raise TerminalStateError(f"order {order_id} reached a terminal state")

            uow.commit()
            order = uow.ledger.get_by_id(order_id)

        logger.info("order %s status changed: %s -> %s", order_id, old_status.value, new_status.value)
        return order

    def get_order(self, order_id: str) -> Order:
        with operation("get order"), self._unit_of_work() as uow:
            return uow.ledger.get_by_id(order_id)

    def list_user_orders(self, user_id: str) -> List[Order]:
        with operation("list user orders"), self._unit_of_work() as uow:
            return uow.ledger.get_by_user_id(user_id)
