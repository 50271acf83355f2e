from __future__ import annotations

import logging
from functools import lru_cache

from bakery.app.core.config import get_settings
from bakery.app.db.memory_store import MemoryInventoryStore
from bakery.app.db.session import make_engine, make_session_factory
from bakery.app.db.sql_store import SqlInventoryStore
from bakery.services.store import InventoryStore

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_store() -> InventoryStore:
    settings = get_settings()
    if settings.store_backend == "sql":
        engine = make_engine(settings.database_url)
        return SqlInventoryStore(make_session_factory(engine))

    logger.warning(
        "DATABASE_URL not set. Running with in-memory storage. "
        "Data will not persist between restarts."
    )
    return MemoryInventoryStore()
