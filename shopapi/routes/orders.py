# shopapi/routes/orders.py
import logging
from typing import List

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from shopapi.database import get_db, get_session_factory
from shopapi.errors import UnauthorizedError
from shopapi.models.users import User, UserRole
from shopapi.schemas.order import OrderCreate, OrderResponse, OrderStatusPatch, OrderSummary
from shopapi.services.orders import OrderEngine
from shopapi.utils.audit import write_log, client_ip
from shopapi.utils.tokenJWT import get_current_user, role_required

router = APIRouter(prefix="/orders", tags=["Orders"])
logger = logging.getLogger(__name__)


def get_order_engine(session_factory=Depends(get_session_factory)) -> OrderEngine:
    return OrderEngine(session_factory)


# Place an order from the requested lines, deducting stock atomically
@router.post("", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
def create_order(
    payload: OrderCreate,
    request: Request,
    engine: OrderEngine = Depends(get_order_engine),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    order = engine.create_order(current_user.id, payload.items)
    write_log(db, user_id=current_user.id, action="ORDER_CREATE", resource="orders", status="SUCCESS",
              ip=client_ip(request), meta={"order_id": order.id, "total": str(order.total_amount)})
    return order


# List the current user's orders, newest first
@router.get("", response_model=List[OrderSummary])
def list_my_orders(
    engine: OrderEngine = Depends(get_order_engine),
    current_user: User = Depends(get_current_user),
):
    return engine.list_user_orders(current_user.id)


# Get details of a specific order (owner or admin)
@router.get("/{order_id}", response_model=OrderResponse)
def get_order_detail(
    order_id: str,
    engine: OrderEngine = Depends(get_order_engine),
    current_user: User = Depends(get_current_user),
):
    order = engine.get_order(order_id)
    if order.user_id != current_user.id and current_user.role != UserRole.ADMIN:
        raise UnauthorizedError(f"get order: user {current_user.id} does not own order {order_id}")
    return order


# Cancel a pending order and put its stock back
@router.post("/{order_id}/cancel", response_model=OrderResponse)
def cancel_order(
    order_id: str,
    request: Request,
    engine: OrderEngine = Depends(get_order_engine),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    order = engine.cancel_order(order_id, current_user.id)
    write_log(db, user_id=current_user.id, action="ORDER_CANCEL", resource="orders", status="SUCCESS",
              ip=client_ip(request), meta={"order_id": order.id})
    return order


# Manually update order status (Admin only)
@router.put("/{order_id}/status", response_model=OrderResponse)
def update_order_status(
    order_id: str,
    payload: OrderStatusPatch,
    request: Request,
    engine: OrderEngine = Depends(get_order_engine),
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required("admin")),
):
    order = engine.update_status(order_id, payload.status)
    write_log(db, user_id=current_user.id, action="ORDER_STATUS_CHANGE", resource="orders", status="SUCCESS",
              ip=client_ip(request), meta={"order_id": order.id, "new": order.status.value})
    return order
