from decimal import Decimal

import pytest

from bakery.app.db.models.core_types import PurchaseStatus
from bakery.services.errors import (
    InsufficientStock,
    ProductNotFound,
    PurchaseNotFound,
    SupplierNotFound,
)
from bakery.services.orders import process_order
from bakery.services.procurement import get_purchase, process_purchase, update_purchase


def test_pending_purchase_leaves_stock_alone(store, make_product, stock_of, purchase_draft, purchase_line):
    p = make_product(stock=7)

    purchase = process_purchase(store, purchase_draft(status=PurchaseStatus.pending), [purchase_line(p.id, 20)])

    assert purchase.status == PurchaseStatus.pending
    assert stock_of(p.id) == 7
    _, items = get_purchase(store, purchase.id)
    assert [(it.product_id, it.quantity) for it in items] == [(p.id, 20)]


def test_status_and_date_default_when_omitted(store, make_product, stock_of, purchase_draft, purchase_line):
    p = make_product(stock=0)

    purchase = process_purchase(store, purchase_draft(), [purchase_line(p.id, 3, unit_cost="12.50")])

    assert purchase.status == PurchaseStatus.pending
    assert purchase.date is not None
    assert stock_of(p.id) == 0
    _, items = get_purchase(store, purchase.id)
    assert items[0].subtotal == Decimal("37.50")


def test_received_purchase_restocks(store, make_product, stock_of, purchase_draft, purchase_line):
    p = make_product(stock=7)
    q = make_product(stock=0)

    process_purchase(
        store,
        purchase_draft(status=PurchaseStatus.received),
        [purchase_line(p.id, 20), purchase_line(q.id, 5)],
    )

    assert stock_of(p.id) == 27
    assert stock_of(q.id) == 5


def test_purchase_with_unknown_product_writes_nothing(store, make_product, stock_of, purchase_draft, purchase_line):
    p = make_product(stock=1)

    with pytest.raises(ProductNotFound):
        process_purchase(
            store,
            purchase_draft(status=PurchaseStatus.received),
            [purchase_line(p.id, 10), purchase_line(424_242, 1)],
        )

    assert stock_of(p.id) == 1
    with pytest.raises(PurchaseNotFound):
        get_purchase(store, 1)


def test_purchase_with_unknown_supplier(store, make_product, stock_of, purchase_draft, purchase_line):
    p = make_product(stock=1)

    with pytest.raises(SupplierNotFound):
        process_purchase(
            store,
            purchase_draft(supplier_id=777, status=PurchaseStatus.received),
            [purchase_line(p.id, 10)],
        )

    assert stock_of(p.id) == 1


# ---------- REVISION ----------
@pytest.fixture
def received_20(store, make_product, stock_of, purchase_draft, purchase_line):
    """A received purchase of 20 units on a product that started at 5."""
    p = make_product(stock=5)
    purchase = process_purchase(store, purchase_draft(status=PurchaseStatus.received), [purchase_line(p.id, 20)])
    assert stock_of(p.id) == 25
    return p, purchase


def test_revise_received_to_smaller_quantity(store, received_20, stock_of, purchase_draft, purchase_line):
    """-20 reversal then +5 re-application: net -15 from the post-receipt value."""
    p, purchase = received_20

    updated = update_purchase(
        store, purchase.id, purchase_draft(status=PurchaseStatus.received), [purchase_line(p.id, 5)]
    )

    assert updated.status == PurchaseStatus.received
    assert stock_of(p.id) == 10
    _, items = get_purchase(store, purchase.id)
    assert [(it.product_id, it.quantity) for it in items] == [(p.id, 5)]


def test_revise_received_back_to_pending(store, received_20, stock_of, purchase_draft, purchase_line):
    p, purchase = received_20

    updated = update_purchase(
        store, purchase.id, purchase_draft(status=PurchaseStatus.pending), [purchase_line(p.id, 20)]
    )

    assert updated.status == PurchaseStatus.pending
    assert stock_of(p.id) == 5


def test_identical_revision_is_a_no_op_on_stock(store, received_20, stock_of, purchase_draft, purchase_line):
    p, purchase = received_20

    update_purchase(store, purchase.id, purchase_draft(status=PurchaseStatus.received), [purchase_line(p.id, 20)])
    update_purchase(store, purchase.id, purchase_draft(status=PurchaseStatus.received), [purchase_line(p.id, 20)])

    assert stock_of(p.id) == 25


def test_revision_keeps_status_and_date_when_omitted(store, received_20, stock_of, purchase_draft, purchase_line):
    p, purchase = received_20

    updated = update_purchase(store, purchase.id, purchase_draft(), [purchase_line(p.id, 8)])

    assert updated.status == PurchaseStatus.received
    # SQLite hands datetimes back without tzinfo
    assert updated.date.replace(tzinfo=None) == purchase.date.replace(tzinfo=None)
    assert stock_of(p.id) == 13


def test_pending_to_received_applies_new_items_only(
    store, make_product, stock_of, purchase_draft, purchase_line
):
    p = make_product(stock=2)
    q = make_product(stock=0)
    purchase = process_purchase(store, purchase_draft(), [purchase_line(p.id, 50)])

    update_purchase(store, purchase.id, purchase_draft(status=PurchaseStatus.received), [purchase_line(q.id, 6)])

    assert stock_of(p.id) == 2
    assert stock_of(q.id) == 6


def test_moving_items_to_another_product(store, received_20, make_product, stock_of, purchase_draft, purchase_line):
    p, purchase = received_20
    q = make_product(stock=1)

    update_purchase(
        store, purchase.id, purchase_draft(status=PurchaseStatus.received), [purchase_line(q.id, 20)]
    )

    assert stock_of(p.id) == 5
    assert stock_of(q.id) == 21


def test_revising_unknown_purchase(store, make_product, stock_of, purchase_draft, purchase_line):
    p = make_product(stock=3)

    with pytest.raises(PurchaseNotFound) as exc_info:
        update_purchase(store, 9_999, purchase_draft(status=PurchaseStatus.received), [purchase_line(p.id, 4)])

    assert exc_info.value.entity_id == 9_999
    assert stock_of(p.id) == 3


def test_revision_with_unknown_product_changes_nothing(store, received_20, stock_of, purchase_draft, purchase_line):
    p, purchase = received_20

    with pytest.raises(ProductNotFound):
        update_purchase(
            store, purchase.id, purchase_draft(status=PurchaseStatus.pending), [purchase_line(31_337, 1)]
        )

    assert stock_of(p.id) == 25
    saved, items = get_purchase(store, purchase.id)
    assert saved.status == PurchaseStatus.received
    assert [(it.product_id, it.quantity) for it in items] == [(p.id, 20)]


def test_revision_cannot_take_back_stock_already_sold(
    store, received_20, stock_of, purchase_draft, purchase_line, order_draft, order_line
):
    p, purchase = received_20
    process_order(store, order_draft(), [order_line(p.id, 22)])
    assert stock_of(p.id) == 3

    with pytest.raises(InsufficientStock) as exc_info:
        update_purchase(store, purchase.id, purchase_draft(status=PurchaseStatus.pending), [purchase_line(p.id, 20)])

    assert (exc_info.value.available, exc_info.value.requested) == (3, 20)
    assert stock_of(p.id) == 3
    saved, _ = get_purchase(store, purchase.id)
    assert saved.status == PurchaseStatus.received


def test_revision_after_sales_only_needs_net_stock(
    store, received_20, stock_of, purchase_draft, purchase_line, order_draft, order_line
):
    """Stock 3 after sales; correcting 20 -> 18 received only takes 2 back."""
    p, purchase = received_20
    process_order(store, order_draft(), [order_line(p.id, 22)])

    update_purchase(store, purchase.id, purchase_draft(status=PurchaseStatus.received), [purchase_line(p.id, 18)])

    assert stock_of(p.id) == 1


def test_old_items_are_read_before_they_are_deleted(store, received_20, purchase_draft, purchase_line, spy_store):
    p, purchase = received_20
    spy = spy_store(store)

    update_purchase(spy, purchase.id, purchase_draft(status=PurchaseStatus.received), [purchase_line(p.id, 5)])

    calls = spy.calls
    assert calls.index("list_purchase_items") < calls.index("delete_purchase_items")
    first_write = min(calls.index(m) for m in ("add_stock", "delete_purchase_items", "update_purchase"))
    assert calls.index("list_purchase_items") < first_write


@pytest.mark.parametrize("store", ["sql"], indirect=True)
def test_sale_landing_during_revision_rolls_it_back(
    store, received_20, stock_of, purchase_draft, purchase_line, spy_store
):
    """
    The pre-check sees 25 units, then a checkout takes 24 before our writes.
    Reversing 20 would leave -19: the post-write check must roll back.
    """
    p, purchase = received_20

    def competing_sale():
        with store.transaction() as other:
            assert other.take_stock(p.id, 24)

    racing = spy_store(store, hooks={"add_stock": competing_sale})

    with pytest.raises(InsufficientStock):
        update_purchase(racing, purchase.id, purchase_draft(status=PurchaseStatus.pending), [purchase_line(p.id, 20)])

    assert stock_of(p.id) == 1
    saved, items = get_purchase(store, purchase.id)
    assert saved.status == PurchaseStatus.received
    assert len(items) == 1


def test_purchase_contribution_tracks_current_version(store, make_product, stock_of, purchase_draft, purchase_line):
    """Net contribution == sum(current quantities) iff received, after every call."""
    p = make_product(stock=10)
    base = 10

    versions = [
        (PurchaseStatus.pending, [4]),
        (PurchaseStatus.received, [4, 6]),
        (PurchaseStatus.received, [1]),
        (PurchaseStatus.pending, [9, 9]),
        (PurchaseStatus.received, [9, 9]),
        (PurchaseStatus.received, [3, 2, 1]),
    ]

    status, qtys = versions[0]
    purchase = process_purchase(store, purchase_draft(status=status), [purchase_line(p.id, q) for q in qtys])
    assert stock_of(p.id) == base

    for status, qtys in versions[1:]:
        update_purchase(store, purchase.id, purchase_draft(status=status), [purchase_line(p.id, q) for q in qtys])
        expected = base + (sum(qtys) if status == PurchaseStatus.received else 0)
        assert stock_of(p.id) == expected
