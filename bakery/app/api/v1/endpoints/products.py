from __future__ import annotations

from fastapi import APIRouter, Depends

from bakery.app.api.deps import get_store
from bakery.app.api.v1.errors import to_http
from bakery.app.schemas.product import StockRead
from bakery.services import stock_ledger
from bakery.services.errors import InventoryError
from bakery.services.store import InventoryStore

router = APIRouter(prefix="/products")


@router.get("/{product_id}/stock", response_model=StockRead)
def get_product_stock(product_id: int, store: InventoryStore = Depends(get_store)):
    """Stock (READ ONLY): it only moves through orders and purchases."""
    try:
        with store.transaction() as tx:
            stock = stock_ledger.read_stock(tx, product_id)
            product = tx.get_product(product_id)
    except InventoryError as exc:
        raise to_http(exc) from exc

    return StockRead(
        product_id=product_id,
        stock=stock,
        low_stock=stock <= product.low_stock_threshold,
    )
