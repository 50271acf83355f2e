from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from bakery.app.db.models.core_types import PurchaseStatus


class PurchaseItemCreate(BaseModel):
    product_id: int
    quantity: int = Field(gt=0)
    unit_cost: Decimal = Field(ge=0)
    # filled as quantity * unit_cost when omitted
    subtotal: Decimal | None = Field(default=None, ge=0)


class PurchaseCreate(BaseModel):
    supplier_id: int
    invoice_number: str = Field(min_length=1, max_length=64)
    date: datetime | None = None
    status: PurchaseStatus | None = None
    total_amount: Decimal = Field(ge=0)
    notes: str | None = None


class PurchaseRead(BaseModel):
    id: int
    supplier_id: int
    invoice_number: str
    date: datetime
    status: PurchaseStatus
    total_amount: Decimal
    notes: str | None = None
    created_at: datetime

    class Config:
        from_attributes = True


class PurchaseItemRead(BaseModel):
    id: int
    purchase_id: int
    product_id: int
    quantity: int
    unit_cost: Decimal
    subtotal: Decimal

    class Config:
        from_attributes = True
