from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field


class ProductCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    slug: str = Field(min_length=1, max_length=255)
    price: Decimal = Field(ge=0)
    stock: int = Field(default=0, ge=0)
    low_stock_threshold: int = Field(default=5, ge=0)


class ProductRead(BaseModel):
    id: int
    name: str
    slug: str
    price: Decimal
    stock: int
    low_stock_threshold: int
    created_at: datetime

    class Config:
        from_attributes = True


class StockRead(BaseModel):
    product_id: int
    stock: int
    low_stock: bool
