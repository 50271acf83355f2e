"""
Procurement service: purchase invoices and the stock they bring in.

Rule kept true after every committed call:

    stock contributed by a purchase ==
        SUM(quantity of its current items)   if status == received
        0                                    otherwise

process_purchase applies the contribution once. update_purchase reverses
the old contribution in full (old items read from storage before they are
deleted), replaces the items, then re-applies the contribution of the new
version. Two write passes instead of a diff, but the rule holds trivially.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import datetime, timezone
from typing import Iterable, Sequence

from bakery.app.db.models.core_types import PurchaseStatus
from bakery.app.schemas.purchase import (
    PurchaseCreate,
    PurchaseItemCreate,
    PurchaseItemRead,
    PurchaseRead,
)
from bakery.services import stock_ledger
from bakery.services.errors import (
    InsufficientStock,
    ProductNotFound,
    PurchaseNotFound,
    SupplierNotFound,
)
from bakery.services.store import InventoryStore, StoreTransaction

logger = logging.getLogger(__name__)


def _fill_items(items: Sequence[PurchaseItemCreate]) -> list[PurchaseItemCreate]:
    return [
        it if it.subtotal is not None else it.model_copy(update={"subtotal": it.unit_cost * it.quantity})
        for it in items
    ]


def _quantities(items: Iterable[PurchaseItemCreate | PurchaseItemRead]) -> dict[int, int]:
    qty: dict[int, int] = defaultdict(int)
    for it in items:
        qty[it.product_id] += it.quantity
    return qty


def _validate_refs(tx: StoreTransaction, supplier_id: int, items: Sequence[PurchaseItemCreate]) -> None:
    # FK checks, fail fast before the first write
    if tx.get_supplier(supplier_id) is None:
        raise SupplierNotFound(supplier_id)
    for it in items:
        if tx.get_product(it.product_id) is None:
            raise ProductNotFound(it.product_id)


def _restock(tx: StoreTransaction, items: Iterable[PurchaseItemCreate | PurchaseItemRead], sign: int) -> None:
    for it in items:
        stock_ledger.apply_delta(tx, it.product_id, sign * it.quantity)


def process_purchase(
    store: InventoryStore,
    draft: PurchaseCreate,
    items: Sequence[PurchaseItemCreate],
) -> PurchaseRead:
    values = draft.model_dump()
    values["status"] = draft.status or PurchaseStatus.pending
    values["date"] = draft.date or datetime.now(timezone.utc)
    items = _fill_items(items)

    with store.transaction() as tx:
        _validate_refs(tx, draft.supplier_id, items)

        purchase = tx.insert_purchase(values)
        tx.insert_purchase_items(purchase.id, items)

        if purchase.status == PurchaseStatus.received:
            _restock(tx, items, +1)

    logger.info(
        "Purchase recorded",
        extra={
            "purchase_id": purchase.id,
            "lines": len(items),
            "status": purchase.status.value,
            "stock_applied": purchase.status == PurchaseStatus.received,
        },
    )
    return purchase


def update_purchase(
    store: InventoryStore,
    purchase_id: int,
    draft: PurchaseCreate,
    items: Sequence[PurchaseItemCreate],
) -> PurchaseRead:
    items = _fill_items(items)

    with store.transaction() as tx:
        existing = tx.get_purchase(purchase_id)
        if existing is None:
            raise PurchaseNotFound(purchase_id)

        values = draft.model_dump()
        values["status"] = draft.status or existing.status
        values["date"] = draft.date or existing.date

        was_received = existing.status == PurchaseStatus.received
        is_received = values["status"] == PurchaseStatus.received

        # ---------- 1) VALIDATE ----------
        _validate_refs(tx, draft.supplier_id, items)

        # must be read before the delete below, or there is nothing to reverse
        old_items = tx.list_purchase_items(purchase_id)

        net: dict[int, int] = defaultdict(int)
        if was_received:
            for pid, qty in _quantities(old_items).items():
                net[pid] -= qty
        if is_received:
            for pid, qty in _quantities(items).items():
                net[pid] += qty
        _check_non_negative(tx, net)

        # ---------- 2) REVERSE ----------
        if was_received:
            _restock(tx, old_items, -1)

        # ---------- 3) REPLACE ----------
        tx.delete_purchase_items(purchase_id)
        purchase = tx.update_purchase(purchase_id, values)
        tx.insert_purchase_items(purchase_id, items)

        # ---------- 4) RE-APPLY ----------
        if is_received:
            _restock(tx, items, +1)

        # a sale may have landed between the check and the writes
        _recheck_after_write(tx, net)

    logger.info(
        "Purchase revised",
        extra={
            "purchase_id": purchase_id,
            "lines": len(items),
            "old_status": existing.status.value,
            "status": purchase.status.value,
            "reversed": was_received,
            "reapplied": is_received,
        },
    )
    return purchase


def _check_non_negative(tx: StoreTransaction, deltas: dict[int, int]) -> None:
    for pid in sorted(deltas):
        delta = deltas[pid]
        if delta > 0:
            continue
        product = tx.get_product(pid)
        if product is None:
            raise ProductNotFound(pid)
        if product.stock + delta < 0:
            logger.warning(
                "Purchase revision rejected: stock would go negative",
                extra={"product_id": pid, "available": product.stock, "requested": -delta},
            )
            # requested = units the revision has to take back out
            raise InsufficientStock(pid, product.name, product.stock, -delta)


def _recheck_after_write(tx: StoreTransaction, deltas: dict[int, int]) -> None:
    for pid in sorted(deltas):
        stock = stock_ledger.read_stock(tx, pid)
        if stock < 0:
            product = tx.get_product(pid)
            before = stock - deltas[pid]
            logger.warning(
                "Purchase revision rolled back: concurrent sale drained stock",
                extra={"product_id": pid, "available": before, "requested": -deltas[pid]},
            )
            raise InsufficientStock(pid, product.name, before, -deltas[pid])


def get_purchase(store: InventoryStore, purchase_id: int) -> tuple[PurchaseRead, list[PurchaseItemRead]]:
    with store.transaction() as tx:
        purchase = tx.get_purchase(purchase_id)
        if purchase is None:
            raise PurchaseNotFound(purchase_id)
        return purchase, tx.list_purchase_items(purchase_id)
