from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from bakery.app.db.models.core_types import OrderStatus


class OrderItemCreate(BaseModel):
    product_id: int
    quantity: int = Field(gt=0)
    price: Decimal = Field(ge=0)
    # filled as quantity * price when omitted
    subtotal: Decimal | None = Field(default=None, ge=0)


class OrderCreate(BaseModel):
    user_id: int | None = None
    customer_name: str = Field(min_length=1, max_length=255)
    customer_email: str = Field(min_length=1, max_length=255)
    customer_phone: str = Field(min_length=1, max_length=64)
    address: str = Field(min_length=1)
    city: str = Field(min_length=1, max_length=128)
    state: str = Field(min_length=1, max_length=128)
    zip_code: str = Field(min_length=1, max_length=32)
    total: Decimal = Field(ge=0)
    payment_method: str = Field(min_length=1, max_length=64)
    status: OrderStatus | None = None


class OrderRead(BaseModel):
    id: int
    user_id: int | None = None
    customer_name: str
    customer_email: str
    customer_phone: str
    address: str
    city: str
    state: str
    zip_code: str
    total: Decimal
    status: OrderStatus
    payment_method: str
    created_at: datetime

    class Config:
        from_attributes = True


class OrderItemRead(BaseModel):
    id: int
    order_id: int
    product_id: int
    quantity: int
    price: Decimal
    subtotal: Decimal

    class Config:
        from_attributes = True
