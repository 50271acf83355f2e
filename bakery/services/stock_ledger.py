"""
Stock ledger accessor.

Every stock mutation of the engine goes through this module. Writes are
single `stock = stock + delta` statements run inside the caller's
transaction; nothing here reads a value and writes it back.
"""

from __future__ import annotations

import logging

from bakery.services.errors import InsufficientStock, ProductNotFound
from bakery.services.store import StoreTransaction

logger = logging.getLogger(__name__)


def read_stock(tx: StoreTransaction, product_id: int) -> int:
    stock = tx.read_stock(product_id)
    if stock is None:
        raise ProductNotFound(product_id)
    return int(stock)


def apply_delta(tx: StoreTransaction, product_id: int, delta: int) -> None:
    """
    Add a signed delta to a product's stock.

    Non-negativity is NOT checked here: restocks never need it, and callers
    applying a negative delta validate beforehand.
    """
    if delta == 0:
        return
    if not tx.add_stock(product_id, delta):
        raise ProductNotFound(product_id)
    logger.debug("stock delta", extra={"product_id": product_id, "delta": delta})


def take(tx: StoreTransaction, product_id: int, quantity: int) -> None:
    """
    Conditional decrement: UPDATE ... SET stock = stock - q WHERE stock >= q.

    When no row is updated, another transaction consumed the stock since it
    was validated (or the product vanished).
    """
    if tx.take_stock(product_id, quantity):
        logger.debug("stock delta", extra={"product_id": product_id, "delta": -quantity})
        return

    product = tx.get_product(product_id)
    if product is None:
        raise ProductNotFound(product_id)
    logger.warning(
        "Lost stock race",
        extra={"product_id": product_id, "available": product.stock, "requested": quantity},
    )
    raise InsufficientStock(product_id, product.name, product.stock, quantity)
