from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import Field

from bakery.app.api.deps import get_store
from bakery.app.api.v1.errors import to_http
from bakery.app.schemas.purchase import PurchaseCreate, PurchaseItemCreate
from bakery.services.errors import InventoryError
from bakery.services.procurement import get_purchase, process_purchase, update_purchase
from bakery.services.store import InventoryStore

router = APIRouter(prefix="/purchases")


class PurchaseInvoice(PurchaseCreate):
    items: list[PurchaseItemCreate] = Field(default_factory=list)


def _split(payload: PurchaseInvoice) -> tuple[PurchaseCreate, list[PurchaseItemCreate]]:
    return PurchaseCreate(**payload.model_dump(exclude={"items"})), payload.items


@router.post("", status_code=201)
def create_purchase(payload: PurchaseInvoice, store: InventoryStore = Depends(get_store)):
    draft, items = _split(payload)
    try:
        purchase = process_purchase(store, draft, items)
    except InventoryError as exc:
        raise to_http(exc) from exc
    return {"purchase": purchase}


@router.get("/{purchase_id}")
def read_purchase(purchase_id: int, store: InventoryStore = Depends(get_store)):
    try:
        purchase, items = get_purchase(store, purchase_id)
    except InventoryError as exc:
        raise to_http(exc) from exc
    return {"purchase": purchase, "items": items}


@router.put("/{purchase_id}")
def edit_purchase(purchase_id: int, payload: PurchaseInvoice, store: InventoryStore = Depends(get_store)):
    draft, items = _split(payload)
    try:
        purchase = update_purchase(store, purchase_id, draft, items)
    except InventoryError as exc:
        raise to_http(exc) from exc
    return {"purchase": purchase}
