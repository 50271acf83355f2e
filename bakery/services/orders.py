"""
Order processing (checkout and POS).

process_order is validate-then-commit: every line is checked against
current stock before the first decrement, so a failing line never leaves
earlier lines decremented. The decrement itself is conditional, which
closes the window between the check and the write.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Sequence

from bakery.app.db.models.core_types import OrderStatus
from bakery.app.schemas.order import OrderCreate, OrderItemCreate, OrderItemRead, OrderRead
from bakery.services import stock_ledger
from bakery.services.errors import InsufficientStock, OrderNotFound, ProductNotFound
from bakery.services.store import InventoryStore

logger = logging.getLogger(__name__)


def _with_defaults(
    draft: OrderCreate, items: Sequence[OrderItemCreate]
) -> tuple[OrderCreate, list[OrderItemCreate]]:
    """status -> pending, item subtotal -> quantity * price."""
    if draft.status is None:
        draft = draft.model_copy(update={"status": OrderStatus.pending})
    filled = [
        it if it.subtotal is not None else it.model_copy(update={"subtotal": it.price * it.quantity})
        for it in items
    ]
    return draft, filled


def process_order(
    store: InventoryStore,
    draft: OrderCreate,
    items: Sequence[OrderItemCreate],
) -> OrderRead:
    draft, items = _with_defaults(draft, items)

    # several lines may name the same product: check the summed demand
    requested: dict[int, int] = defaultdict(int)
    for it in items:
        requested[it.product_id] += it.quantity

    with store.transaction() as tx:
        # ---------- 1) VALIDATE ----------
        for product_id, qty in requested.items():
            product = tx.get_product(product_id)
            if product is None:
                raise ProductNotFound(product_id)
            if product.stock < qty:
                logger.warning(
                    "Order rejected: insufficient stock",
                    extra={"product_id": product_id, "available": product.stock, "requested": qty},
                )
                raise InsufficientStock(product_id, product.name, product.stock, qty)

        # ---------- 2) DECREMENT ----------
        # fixed order so concurrent orders lock rows in the same sequence
        for product_id in sorted(requested):
            stock_ledger.take(tx, product_id, requested[product_id])

        # ---------- 3) PERSIST ----------
        order = tx.insert_order(draft.model_dump())
        tx.insert_order_items(order.id, items)

    logger.info(
        "Order placed",
        extra={"order_id": order.id, "lines": len(items), "status": order.status.value},
    )
    return order


def get_order(store: InventoryStore, order_id: int) -> tuple[OrderRead, list[OrderItemRead]]:
    with store.transaction() as tx:
        order = tx.get_order(order_id)
        if order is None:
            raise OrderNotFound(order_id)
        return order, tx.list_order_items(order_id)


def update_order_status(store: InventoryStore, order_id: int, status: OrderStatus) -> OrderRead:
    """Plain status write: no stock effect in either direction."""
    with store.transaction() as tx:
        order = tx.set_order_status(order_id, status)
        if order is None:
            raise OrderNotFound(order_id)

    logger.info("Order status updated", extra={"order_id": order_id, "status": status.value})
    return order
