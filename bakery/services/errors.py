"""
Error taxonomy of the inventory engine.

NotFound and InsufficientStock are raised before any write of the current
transaction, or trigger its rollback. TransactionFailure wraps a persistence
error (constraint violation, lost connection...) and always means the whole
transaction was rolled back.
"""

from __future__ import annotations


class InventoryError(Exception):
    """Base class for every error raised by the engine."""


class NotFound(InventoryError):
    entity = "Entity"

    def __init__(self, entity_id: int):
        self.entity_id = entity_id
        super().__init__(f"{self.entity} {entity_id} not found")


class ProductNotFound(NotFound):
    entity = "Product"


class SupplierNotFound(NotFound):
    entity = "Supplier"


class OrderNotFound(NotFound):
    entity = "Order"


class PurchaseNotFound(NotFound):
    entity = "Purchase"


class InsufficientStock(InventoryError):
    def __init__(self, product_id: int, product_name: str, available: int, requested: int):
        self.product_id = product_id
        self.product_name = product_name
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient stock for product {product_name}. "
            f"Available: {available}, Requested: {requested}"
        )

    def as_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "product_name": self.product_name,
            "available": self.available,
            "requested": self.requested,
        }


class TransactionFailure(InventoryError):
    """A write failed after validation passed; nothing was committed."""
