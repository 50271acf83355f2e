from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterator, Mapping, Sequence

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from bakery.app.db.models.core_types import OrderStatus
from bakery.app.db.models.models_v1 import (
    Order,
    OrderItem,
    Product,
    Purchase,
    PurchaseItem,
    Supplier,
)
from bakery.app.schemas.order import OrderItemCreate, OrderItemRead, OrderRead
from bakery.app.schemas.product import ProductCreate, ProductRead
from bakery.app.schemas.purchase import PurchaseItemCreate, PurchaseItemRead, PurchaseRead
from bakery.app.schemas.supplier import SupplierCreate, SupplierRead
from bakery.services.errors import InventoryError, TransactionFailure
from bakery.services.store import InventoryStore, StoreTransaction

logger = logging.getLogger(__name__)


class SqlStoreTransaction(StoreTransaction):
    """
    One SQLAlchemy session inside an open transaction.

    Stock is only ever written with UPDATE ... SET stock = stock +/- n, never
    by loading a Product and assigning to it. Entity reads use
    populate_existing so they never return an identity-map copy that
    predates one of those bulk UPDATEs.
    """

    def __init__(self, session: Session):
        self.session = session

    def _fresh(self, stmt):
        return self.session.execute(stmt.execution_options(populate_existing=True))

    # ---------- PRODUCTS ----------
    def get_product(self, product_id: int) -> ProductRead | None:
        row = self._fresh(select(Product).where(Product.id == product_id)).scalar_one_or_none()
        return ProductRead.model_validate(row) if row else None

    def read_stock(self, product_id: int) -> int | None:
        return self.session.execute(
            select(Product.stock).where(Product.id == product_id)
        ).scalar_one_or_none()

    def add_stock(self, product_id: int, delta: int) -> bool:
        result = self.session.execute(
            update(Product)
            .where(Product.id == product_id)
            .values(stock=Product.stock + delta)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def take_stock(self, product_id: int, quantity: int) -> bool:
        result = self.session.execute(
            update(Product)
            .where(Product.id == product_id)
            .where(Product.stock >= quantity)
            .values(stock=Product.stock - quantity)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def get_product_by_slug(self, slug: str) -> ProductRead | None:
        row = self._fresh(select(Product).where(Product.slug == slug)).scalar_one_or_none()
        return ProductRead.model_validate(row) if row else None

    def create_product(self, draft: ProductCreate) -> ProductRead:
        p = Product(**draft.model_dump())
        self.session.add(p)
        self.session.flush()
        return ProductRead.model_validate(p)

    # ---------- SUPPLIERS ----------
    def get_supplier(self, supplier_id: int) -> SupplierRead | None:
        s = self.session.get(Supplier, supplier_id)
        return SupplierRead.model_validate(s) if s else None

    def get_supplier_by_name(self, name: str) -> SupplierRead | None:
        # name is not unique: oldest match wins
        row = self.session.scalars(select(Supplier).where(Supplier.name == name).order_by(Supplier.id)).first()
        return SupplierRead.model_validate(row) if row else None

    def create_supplier(self, draft: SupplierCreate) -> SupplierRead:
        s = Supplier(**draft.model_dump())
        self.session.add(s)
        self.session.flush()
        return SupplierRead.model_validate(s)

    # ---------- ORDERS ----------
    def insert_order(self, values: Mapping[str, Any]) -> OrderRead:
        order = Order(**values)
        self.session.add(order)
        self.session.flush()  # get order.id
        return OrderRead.model_validate(order)

    def insert_order_items(self, order_id: int, items: Sequence[OrderItemCreate]) -> list[OrderItemRead]:
        rows = [
            OrderItem(
                order_id=order_id,
                product_id=it.product_id,
                quantity=it.quantity,
                price=it.price,
                subtotal=it.subtotal,
            )
            for it in items
        ]
        self.session.add_all(rows)
        self.session.flush()
        return [OrderItemRead.model_validate(r) for r in rows]

    def get_order(self, order_id: int) -> OrderRead | None:
        row = self._fresh(select(Order).where(Order.id == order_id)).scalar_one_or_none()
        return OrderRead.model_validate(row) if row else None

    def list_order_items(self, order_id: int) -> list[OrderItemRead]:
        rows = (
            self._fresh(select(OrderItem).where(OrderItem.order_id == order_id).order_by(OrderItem.id))
            .scalars()
            .all()
        )
        return [OrderItemRead.model_validate(r) for r in rows]

    def set_order_status(self, order_id: int, status: OrderStatus) -> OrderRead | None:
        order = self.session.get(Order, order_id)
        if not order:
            return None
        order.status = status
        self.session.flush()
        return OrderRead.model_validate(order)

    # ---------- PURCHASES ----------
    def insert_purchase(self, values: Mapping[str, Any]) -> PurchaseRead:
        purchase = Purchase(**values)
        self.session.add(purchase)
        self.session.flush()  # get purchase.id
        return PurchaseRead.model_validate(purchase)

    def update_purchase(self, purchase_id: int, values: Mapping[str, Any]) -> PurchaseRead | None:
        purchase = self.session.get(Purchase, purchase_id)
        if not purchase:
            return None
        for field, value in values.items():
            setattr(purchase, field, value)
        self.session.flush()
        return PurchaseRead.model_validate(purchase)

    def get_purchase(self, purchase_id: int) -> PurchaseRead | None:
        row = self._fresh(select(Purchase).where(Purchase.id == purchase_id)).scalar_one_or_none()
        return PurchaseRead.model_validate(row) if row else None

    def list_purchase_items(self, purchase_id: int) -> list[PurchaseItemRead]:
        rows = (
            self._fresh(
                select(PurchaseItem)
                .where(PurchaseItem.purchase_id == purchase_id)
                .order_by(PurchaseItem.id)
            )
            .scalars()
            .all()
        )
        return [PurchaseItemRead.model_validate(r) for r in rows]

    def insert_purchase_items(
        self, purchase_id: int, items: Sequence[PurchaseItemCreate]
    ) -> list[PurchaseItemRead]:
        rows = [
            PurchaseItem(
                purchase_id=purchase_id,
                product_id=it.product_id,
                quantity=it.quantity,
                unit_cost=it.unit_cost,
                subtotal=it.subtotal,
            )
            for it in items
        ]
        self.session.add_all(rows)
        self.session.flush()
        return [PurchaseItemRead.model_validate(r) for r in rows]

    def delete_purchase_items(self, purchase_id: int) -> int:
        result = self.session.execute(
            delete(PurchaseItem).where(PurchaseItem.purchase_id == purchase_id)
        )
        return result.rowcount


class SqlInventoryStore(InventoryStore):
    name = "sql"

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    @contextmanager
    def transaction(self) -> Iterator[StoreTransaction]:
        session = self._session_factory()
        try:
            with session.begin():
                yield SqlStoreTransaction(session)
        except InventoryError:
            raise
        except Exception as exc:
            logger.error("Transaction rolled back: %s", exc.__class__.__name__, exc_info=True)
            raise TransactionFailure(str(exc)) from exc
        finally:
            session.close()

    def ping(self) -> bool:
        try:
            with self._session_factory() as session:
                session.execute(select(1))
            return True
        except SQLAlchemyError:
            logger.error("Database ping failed", exc_info=True)
            return False
