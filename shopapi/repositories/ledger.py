# shopapi/repositories/ledger.py
from typing import Iterable, List, Optional

from sqlalchemy import select, update
from sqlalchemy.orm import Session, selectinload

from shopapi.errors import NotFoundError
from shopapi.models.order import Order, OrderStatus
from shopapi.repositories.base import translate_db_errors
from shopapi.utils.ids import utcnow


class OrderLedger:
    """Order and order-item persistence bound to one session.

    Orders are written once with all of their items; afterwards only
    the status column changes.
    """

    def __init__(self, session: Session):
        self.session = session

    @translate_db_errors("create order")
    def create(self, order: Order) -> Order:
        self.session.add(order)
        self.session.flush()
        # Pull server-side values (generated subtotals) into the instances
        self.session.refresh(order, attribute_names=["created_at", "updated_at", "items"])
        for item in order.items:
            self.session.refresh(item)
        return order

    @translate_db_errors("get order by id")
    def get_by_id(self, order_id: str) -> Order:
        stmt = (
            select(Order)
            .options(selectinload(Order.items))
            .where(Order.id == order_id)
            .execution_options(populate_existing=True)
        )
        order = self.session.execute(stmt).scalar_one_or_none()
        if order is None:
            raise NotFoundError(f"order {order_id} not found")
        return order

    @translate_db_errors("get orders by user id")
    def get_by_user_id(self, user_id: str) -> List[Order]:
        stmt = (
            select(Order)
            .where(Order.user_id == user_id)
            .order_by(Order.created_at.desc(), Order.id.desc())
        )
        return list(self.session.execute(stmt).scalars())

    @translate_db_errors("update order status")
    def update_status(
        self, order_id: str, status: OrderStatus, only_from: Optional[Iterable[OrderStatus]] = None
    ) -> bool:
        """Set the status of an order.

        With ``only_from`` the write is a compare-and-set: it only applies while
        the stored status is one of the given values, and False is returned
        when it did not apply. A missing order raises NotFoundError.
        """
        stmt = update(Order).where(Order.id == order_id)
        if only_from is not None:
            stmt = stmt.where(Order.status.in_(list(only_from)))
        stmt = stmt.values(status=status, updated_at=utcnow()).execution_options(synchronize_session=False)

        result = self.session.execute(stmt)
        if result.rowcount == 0:
            exists = self.session.execute(select(Order.id).where(Order.id == order_id)).first()
            if exists is None:
                raise NotFoundError(f"order {order_id} not found")
            return False
        return True
