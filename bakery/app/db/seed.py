from __future__ import annotations

import logging
from decimal import Decimal

from bakery.app.schemas.product import ProductCreate
from bakery.app.schemas.supplier import SupplierCreate
from bakery.services.store import InventoryStore

logger = logging.getLogger(__name__)

SUPPLIER = SupplierCreate(name="Dhaka Flour Mills", contact_name="Front desk", phone="+8801700000000")

PRODUCTS = [
    ProductCreate(name="Butter Croissant", slug="butter-croissant", price=Decimal("120.00"), stock=24),
    ProductCreate(name="Chocolate Cake", slug="chocolate-cake", price=Decimal("1450.00"), stock=4, low_stock_threshold=2),
    ProductCreate(name="Sourdough Loaf", slug="sourdough-loaf", price=Decimal("380.00"), stock=10),
]


def run_seed(store: InventoryStore) -> dict[str, int]:
    """
    Seed one supplier and a few products. Idempotent: rows are matched on
    supplier name and product slug, existing ones are left untouched, so
    re-running never resets stock.
    """
    created = {"suppliers": 0, "products": 0}
    with store.transaction() as tx:
        if tx.get_supplier_by_name(SUPPLIER.name) is None:
            tx.create_supplier(SUPPLIER)
            created["suppliers"] += 1

        for draft in PRODUCTS:
            if tx.get_product_by_slug(draft.slug) is None:
                tx.create_product(draft)
                created["products"] += 1

    logger.info("Seed done", extra=created)
    return created


if __name__ == "__main__":
    from bakery.app.api.deps import get_store
    from bakery.app.core.config import get_settings
    from bakery.app.core.log_config import configure_logging

    settings = get_settings()
    configure_logging(settings.log_level, settings.log_format)
    run_seed(get_store())
