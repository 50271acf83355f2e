from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Any, Iterator, Mapping, Sequence

from pydantic import BaseModel

from bakery.app.db.models.core_types import OrderStatus, PurchaseStatus
from bakery.app.db.models.models_v1 import utcnow
from bakery.app.schemas.order import OrderItemCreate, OrderItemRead, OrderRead
from bakery.app.schemas.product import ProductCreate, ProductRead
from bakery.app.schemas.purchase import PurchaseItemCreate, PurchaseItemRead, PurchaseRead
from bakery.app.schemas.supplier import SupplierCreate, SupplierRead
from bakery.services.errors import InventoryError, TransactionFailure
from bakery.services.store import InventoryStore, StoreTransaction

logger = logging.getLogger(__name__)

TABLES = ("products", "suppliers", "orders", "order_items", "purchases", "purchase_items")


class MemoryStoreTransaction(StoreTransaction):
    """
    Rows are pydantic read models, replaced on write and never mutated in
    place, so a shallow copy of each table is a complete snapshot.
    """

    def __init__(self, store: "MemoryInventoryStore"):
        self._store = store

    def _rows(self, table: str) -> dict[int, BaseModel]:
        return self._store._tables[table]

    def _next_id(self, table: str) -> int:
        self._store._last_ids[table] += 1
        return self._store._last_ids[table]

    def _get(self, table: str, row_id: int):
        row = self._rows(table).get(row_id)
        return row.model_copy() if row is not None else None

    # ---------- PRODUCTS ----------
    def get_product(self, product_id: int) -> ProductRead | None:
        return self._get("products", product_id)

    def read_stock(self, product_id: int) -> int | None:
        p = self._rows("products").get(product_id)
        return p.stock if p is not None else None

    def add_stock(self, product_id: int, delta: int) -> bool:
        products = self._rows("products")
        p = products.get(product_id)
        if p is None:
            return False
        products[product_id] = p.model_copy(update={"stock": p.stock + delta})
        return True

    def take_stock(self, product_id: int, quantity: int) -> bool:
        p = self._rows("products").get(product_id)
        if p is None or p.stock < quantity:
            return False
        return self.add_stock(product_id, -quantity)

    def get_product_by_slug(self, slug: str) -> ProductRead | None:
        for _, p in sorted(self._rows("products").items()):
            if p.slug == slug:
                return p.model_copy()
        return None

    def create_product(self, draft: ProductCreate) -> ProductRead:
        p = ProductRead(id=self._next_id("products"), created_at=utcnow(), **draft.model_dump())
        self._rows("products")[p.id] = p
        return p.model_copy()

    # ---------- SUPPLIERS ----------
    def get_supplier(self, supplier_id: int) -> SupplierRead | None:
        return self._get("suppliers", supplier_id)

    def get_supplier_by_name(self, name: str) -> SupplierRead | None:
        for _, s in sorted(self._rows("suppliers").items()):
            if s.name == name:
                return s.model_copy()
        return None

    def create_supplier(self, draft: SupplierCreate) -> SupplierRead:
        s = SupplierRead(id=self._next_id("suppliers"), created_at=utcnow(), **draft.model_dump())
        self._rows("suppliers")[s.id] = s
        return s.model_copy()

    # ---------- ORDERS ----------
    def insert_order(self, values: Mapping[str, Any]) -> OrderRead:
        data = {"status": OrderStatus.pending, **values}
        order = OrderRead(id=self._next_id("orders"), created_at=utcnow(), **data)
        self._rows("orders")[order.id] = order
        return order.model_copy()

    def insert_order_items(self, order_id: int, items: Sequence[OrderItemCreate]) -> list[OrderItemRead]:
        out = []
        for it in items:
            row = OrderItemRead(
                id=self._next_id("order_items"),
                order_id=order_id,
                product_id=it.product_id,
                quantity=it.quantity,
                price=it.price,
                subtotal=it.subtotal,
            )
            self._rows("order_items")[row.id] = row
            out.append(row.model_copy())
        return out

    def get_order(self, order_id: int) -> OrderRead | None:
        return self._get("orders", order_id)

    def list_order_items(self, order_id: int) -> list[OrderItemRead]:
        return [
            r.model_copy()
            for _, r in sorted(self._rows("order_items").items())
            if r.order_id == order_id
        ]

    def set_order_status(self, order_id: int, status: OrderStatus) -> OrderRead | None:
        orders = self._rows("orders")
        order = orders.get(order_id)
        if order is None:
            return None
        orders[order_id] = order.model_copy(update={"status": status})
        return orders[order_id].model_copy()

    # ---------- PURCHASES ----------
    def insert_purchase(self, values: Mapping[str, Any]) -> PurchaseRead:
        data = {"status": PurchaseStatus.pending, "date": utcnow(), **values}
        purchase = PurchaseRead(id=self._next_id("purchases"), created_at=utcnow(), **data)
        self._rows("purchases")[purchase.id] = purchase
        return purchase.model_copy()

    def update_purchase(self, purchase_id: int, values: Mapping[str, Any]) -> PurchaseRead | None:
        purchases = self._rows("purchases")
        purchase = purchases.get(purchase_id)
        if purchase is None:
            return None
        # re-validate so bad values fail here like they would in the database
        purchases[purchase_id] = PurchaseRead(**{**purchase.model_dump(), **values})
        return purchases[purchase_id].model_copy()

    def get_purchase(self, purchase_id: int) -> PurchaseRead | None:
        return self._get("purchases", purchase_id)

    def list_purchase_items(self, purchase_id: int) -> list[PurchaseItemRead]:
        return [
            r.model_copy()
            for _, r in sorted(self._rows("purchase_items").items())
            if r.purchase_id == purchase_id
        ]

    def insert_purchase_items(
        self, purchase_id: int, items: Sequence[PurchaseItemCreate]
    ) -> list[PurchaseItemRead]:
        out = []
        for it in items:
            row = PurchaseItemRead(
                id=self._next_id("purchase_items"),
                purchase_id=purchase_id,
                product_id=it.product_id,
                quantity=it.quantity,
                unit_cost=it.unit_cost,
                subtotal=it.subtotal,
            )
            self._rows("purchase_items")[row.id] = row
            out.append(row.model_copy())
        return out

    def delete_purchase_items(self, purchase_id: int) -> int:
        rows = self._rows("purchase_items")
        doomed = [rid for rid, r in rows.items() if r.purchase_id == purchase_id]
        for rid in doomed:
            del rows[rid]
        return len(doomed)


class MemoryInventoryStore(InventoryStore):
    """
    Fallback store used when no DATABASE_URL is configured.

    A single re-entrant lock is held for the whole transaction, so
    transactions are serialized. A failed transaction restores the
    snapshot taken when it started.
    """

    name = "memory"

    def __init__(self):
        self._lock = threading.RLock()
        self._tables: dict[str, dict[int, BaseModel]] = {t: {} for t in TABLES}
        self._last_ids: dict[str, int] = {t: 0 for t in TABLES}

    @contextmanager
    def transaction(self) -> Iterator[StoreTransaction]:
        with self._lock:
            tables = {t: dict(rows) for t, rows in self._tables.items()}
            last_ids = dict(self._last_ids)
            try:
                yield MemoryStoreTransaction(self)
            except InventoryError:
                self._tables, self._last_ids = tables, last_ids
                raise
            except Exception as exc:
                self._tables, self._last_ids = tables, last_ids
                logger.error("Transaction rolled back: %s", exc.__class__.__name__, exc_info=True)
                raise TransactionFailure(str(exc)) from exc
            except BaseException:
                self._tables, self._last_ids = tables, last_ids
                raise

    def ping(self) -> bool:
        return True

