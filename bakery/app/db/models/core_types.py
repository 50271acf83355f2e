import enum

class OrderStatus(str, enum.Enum):
    pending = "pending"
    processing = "processing"
    shipped = "shipped"
    delivered = "delivered"
    cancelled = "cancelled"

class PurchaseStatus(str, enum.Enum):
    pending = "pending"
    received = "received"
