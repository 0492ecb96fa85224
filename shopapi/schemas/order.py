from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from shopapi.models.order import OrderStatus
from shopapi.schemas.product import Money


# Input schema for one requested line
class OrderItemIn(BaseModel):
    product_id: str = Field(min_length=1)
    quantity: int = Field(gt=0)


# Input schema for placing an order
class OrderCreate(BaseModel):
    items: List[OrderItemIn] = Field(min_length=1)


# Output schema for an individual order line item
class OrderItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    product_id: str
    quantity: int
    unit_price: Money
    subtotal: Optional[Money] = None


# Order without its lines, as returned by listings
class OrderSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    status: OrderStatus
    total_amount: Money
    created_at: datetime
    updated_at: datetime


# Output schema representing the full order details
class OrderResponse(OrderSummary):
    items: List[OrderItemOut]


# Schema for updating order status
class OrderStatusPatch(BaseModel):
    status: OrderStatus
