"""
Store contract used by the engine.

The engine never knows whether it runs against the SQL store or the
in-memory one: it only opens `store.transaction()` and calls the
capabilities below on the yielded object.

Rules shared by every implementation:
    - leaving the `transaction()` block normally commits
    - leaving it with an exception rolls back every write made through it
    - engine errors propagate unchanged, any other error surfaces as
      TransactionFailure
    - reads always reflect the writes already made in the same transaction
"""

from __future__ import annotations

import abc
from contextlib import AbstractContextManager
from typing import Any, Mapping, Sequence

from bakery.app.db.models.core_types import OrderStatus
from bakery.app.schemas.order import OrderItemCreate, OrderItemRead, OrderRead
from bakery.app.schemas.product import ProductCreate, ProductRead
from bakery.app.schemas.purchase import PurchaseItemCreate, PurchaseItemRead, PurchaseRead
from bakery.app.schemas.supplier import SupplierCreate, SupplierRead


class StoreTransaction(abc.ABC):
    # ---------- PRODUCTS ----------
    @abc.abstractmethod
    def get_product(self, product_id: int) -> ProductRead | None: ...

    @abc.abstractmethod
    def read_stock(self, product_id: int) -> int | None: ...

    @abc.abstractmethod
    def add_stock(self, product_id: int, delta: int) -> bool:
        """stock = stock + delta in one statement. False if the product is missing."""

    @abc.abstractmethod
    def take_stock(self, product_id: int, quantity: int) -> bool:
        """stock = stock - quantity only where stock >= quantity. False if nothing was updated."""

    @abc.abstractmethod
    def get_product_by_slug(self, slug: str) -> ProductRead | None: ...

    @abc.abstractmethod
    def create_product(self, draft: ProductCreate) -> ProductRead: ...

    # ---------- SUPPLIERS ----------
    @abc.abstractmethod
    def get_supplier(self, supplier_id: int) -> SupplierRead | None: ...

    @abc.abstractmethod
    def get_supplier_by_name(self, name: str) -> SupplierRead | None: ...

    @abc.abstractmethod
    def create_supplier(self, draft: SupplierCreate) -> SupplierRead: ...

    # ---------- ORDERS ----------
    @abc.abstractmethod
    def insert_order(self, values: Mapping[str, Any]) -> OrderRead: ...

    @abc.abstractmethod
    def insert_order_items(self, order_id: int, items: Sequence[OrderItemCreate]) -> list[OrderItemRead]: ...

    @abc.abstractmethod
    def get_order(self, order_id: int) -> OrderRead | None: ...

    @abc.abstractmethod
    def list_order_items(self, order_id: int) -> list[OrderItemRead]: ...

    @abc.abstractmethod
    def set_order_status(self, order_id: int, status: OrderStatus) -> OrderRead | None: ...

    # ---------- PURCHASES ----------
    @abc.abstractmethod
    def insert_purchase(self, values: Mapping[str, Any]) -> PurchaseRead: ...

    @abc.abstractmethod
    def update_purchase(self, purchase_id: int, values: Mapping[str, Any]) -> PurchaseRead | None: ...

    @abc.abstractmethod
    def get_purchase(self, purchase_id: int) -> PurchaseRead | None: ...

    @abc.abstractmethod
    def list_purchase_items(self, purchase_id: int) -> list[PurchaseItemRead]: ...

    @abc.abstractmethod
    def insert_purchase_items(
        self, purchase_id: int, items: Sequence[PurchaseItemCreate]
    ) -> list[PurchaseItemRead]: ...

    @abc.abstractmethod
    def delete_purchase_items(self, purchase_id: int) -> int: ...


class InventoryStore(abc.ABC):
    name: str = "store"

    @abc.abstractmethod
    def transaction(self) -> AbstractContextManager[StoreTransaction]: ...

    @abc.abstractmethod
    def ping(self) -> bool: ...
