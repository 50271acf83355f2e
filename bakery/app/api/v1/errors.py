from __future__ import annotations

from fastapi import HTTPException

from bakery.services.errors import (
    InsufficientStock,
    InventoryError,
    NotFound,
    TransactionFailure,
)


def to_http(exc: InventoryError) -> HTTPException:
    if isinstance(exc, NotFound):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, InsufficientStock):
        return HTTPException(status_code=409, detail={"message": str(exc), **exc.as_dict()})
    if isinstance(exc, TransactionFailure):
        # never leak driver messages to clients
        return HTTPException(status_code=500, detail="Transaction failed, nothing was saved")
    return HTTPException(status_code=400, detail=str(exc))
