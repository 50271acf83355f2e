from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from bakery.app.api.deps import get_store
from bakery.app.api.v1.errors import to_http
from bakery.app.db.models.core_types import OrderStatus
from bakery.app.schemas.order import OrderCreate, OrderItemCreate
from bakery.services.errors import InventoryError
from bakery.services.orders import get_order, process_order, update_order_status
from bakery.services.store import InventoryStore

router = APIRouter(prefix="/orders")


class OrderPlace(OrderCreate):
    items: list[OrderItemCreate] = Field(default_factory=list)


class OrderStatusUpdate(BaseModel):
    status: OrderStatus


@router.post("", status_code=201)
def place_order(payload: OrderPlace, store: InventoryStore = Depends(get_store)):
    draft = OrderCreate(**payload.model_dump(exclude={"items"}))
    try:
        order = process_order(store, draft, payload.items)
    except InventoryError as exc:
        raise to_http(exc) from exc
    return {"order": order}


@router.get("/{order_id}")
def read_order(order_id: int, store: InventoryStore = Depends(get_store)):
    try:
        order, items = get_order(store, order_id)
    except InventoryError as exc:
        raise to_http(exc) from exc
    return {"order": order, "items": items}


@router.patch("/{order_id}/status")
def set_order_status(order_id: int, payload: OrderStatusUpdate, store: InventoryStore = Depends(get_store)):
    try:
        order = update_order_status(store, order_id, payload.status)
    except InventoryError as exc:
        raise to_http(exc) from exc
    return {"order": order}
