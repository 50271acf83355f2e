from __future__ import annotations

from fastapi import APIRouter, Depends

from bakery.app.api.deps import get_store
from bakery.services.store import InventoryStore

router = APIRouter()


@router.get("/health")
def health(store: InventoryStore = Depends(get_store)):
    return {"status": "ok" if store.ping() else "degraded", "store": store.name}
