from contextlib import contextmanager
from decimal import Decimal

import pytest

from bakery.app.db.base import Base
from bakery.app.db.memory_store import MemoryInventoryStore
from bakery.app.db.models import models_v1  # noqa: F401  (registers tables)
from bakery.app.db.session import make_engine, make_session_factory
from bakery.app.db.sql_store import SqlInventoryStore
from bakery.app.schemas.order import OrderCreate, OrderItemCreate
from bakery.app.schemas.product import ProductCreate
from bakery.app.schemas.purchase import PurchaseCreate, PurchaseItemCreate
from bakery.app.schemas.supplier import SupplierCreate


@pytest.fixture(scope="function")
def sql_store(tmp_path):
    """
    SQL store on a throw-away SQLite file, one per test.

    A file (not :memory:) so that several sessions, and threads, share the
    same database the way they would share a PostgreSQL one.
    """
    engine = make_engine(f"sqlite+pysqlite:///{tmp_path / 'bakery.db'}")
    Base.metadata.create_all(bind=engine)
    try:
        yield SqlInventoryStore(make_session_factory(engine))
    finally:
        engine.dispose()


@pytest.fixture(scope="function")
def memory_store():
    return MemoryInventoryStore()


@pytest.fixture(params=["sql", "memory"])
def store(request):
    """Engine tests run once per store implementation."""
    return request.getfixturevalue(f"{request.param}_store")


@pytest.fixture
def supplier(store):
    with store.transaction() as tx:
        return tx.create_supplier(SupplierCreate(name="TEST-SUP", phone="+8801700000000"))


@pytest.fixture
def make_product(store):
    counter = {"n": 0}

    def _make(stock: int = 0, name: str | None = None, price: str = "100.00", low_stock_threshold: int = 5):
        counter["n"] += 1
        n = counter["n"]
        with store.transaction() as tx:
            return tx.create_product(
                ProductCreate(
                    name=name or f"TEST-PROD-{n}",
                    slug=f"test-prod-{n}",
                    price=Decimal(price),
                    stock=stock,
                    low_stock_threshold=low_stock_threshold,
                )
            )

    return _make


@pytest.fixture
def stock_of(store):
    def _stock(product_id: int) -> int:
        with store.transaction() as tx:
            return tx.read_stock(product_id)

    return _stock


@pytest.fixture
def order_draft():
    def _draft(**overrides) -> OrderCreate:
        data = dict(
            customer_name="Rahim Uddin",
            customer_email="rahim@example.com",
            customer_phone="+8801711111111",
            address="12 Road 5, Dhanmondi",
            city="Dhaka",
            state="Dhaka",
            zip_code="1205",
            total=Decimal("360.00"),
            payment_method="cash_on_delivery",
        )
        data.update(overrides)
        return OrderCreate(**data)

    return _draft


@pytest.fixture
def order_line():
    def _line(product_id: int, quantity: int, price: str = "120.00") -> OrderItemCreate:
        return OrderItemCreate(product_id=product_id, quantity=quantity, price=Decimal(price))

    return _line


@pytest.fixture
def purchase_draft(supplier):
    def _draft(**overrides) -> PurchaseCreate:
        data = dict(
            supplier_id=supplier.id,
            invoice_number="INV-0001",
            total_amount=Decimal("1000.00"),
        )
        data.update(overrides)
        return PurchaseCreate(**data)

    return _draft


@pytest.fixture
def purchase_line():
    def _line(product_id: int, quantity: int, unit_cost: str = "50.00") -> PurchaseItemCreate:
        return PurchaseItemCreate(product_id=product_id, quantity=quantity, unit_cost=Decimal(unit_cost))

    return _line


class _TxSpy:
    """Records calls made on a store transaction; can run a hook once before a given call."""

    def __init__(self, tx, calls, hooks):
        self._tx = tx
        self._calls = calls
        self._hooks = hooks

    def __getattr__(self, name):
        attr = getattr(self._tx, name)
        if not callable(attr):
            return attr

        def wrapper(*args, **kwargs):
            self._calls.append(name)
            hook = self._hooks.pop(name, None)
            if hook is not None:
                hook()
            return attr(*args, **kwargs)

        return wrapper


class SpyStore:
    name = "spy"

    def __init__(self, store, hooks=None):
        self.inner = store
        self.calls: list[str] = []
        self.hooks = dict(hooks or {})

    @contextmanager
    def transaction(self):
        with self.inner.transaction() as tx:
            yield _TxSpy(tx, self.calls, self.hooks)

    def ping(self) -> bool:
        return self.inner.ping()


@pytest.fixture
def spy_store():
    return SpyStore
