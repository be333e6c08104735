# restaurant_pos/api/errors.py
from fastapi import HTTPException

from restaurant_pos.domain.errors import (
    IncompleteOrderError,
    InvalidRedemptionError,
    NotFoundError,
    PosError,
    StaleLoyaltyBalanceError,
    StockLimitExceeded,
)
from restaurant_pos.utils.logging import get_logger

logger = get_logger(__name__)


def http_error(e: Exception) -> HTTPException:
    """Map a domain error to the HTTP response the terminal shows the operator."""
    if isinstance(e, NotFoundError):
        return HTTPException(status_code=404, detail=str(e))

    if isinstance(e, StockLimitExceeded):
        return HTTPException(
            status_code=409,
            detail={
                "message": str(e),
                "product_id": e.product_id,
                "available": e.available,
                "requested": e.requested,
            },
        )

    if isinstance(e, StaleLoyaltyBalanceError):
        return HTTPException(status_code=409, detail=str(e))

    if isinstance(e, InvalidRedemptionError):
        return HTTPException(
            status_code=400,
            detail={"message": str(e), "requested": e.requested, "maximum": e.maximum},
        )

    if isinstance(e, IncompleteOrderError):
        logger.critical(f"Incomplete order surfaced to client: {e}")
        return HTTPException(
            status_code=500,
            detail={"message": str(e), "order_id": e.order_id, "alert": "incomplete_order"},
        )

    if isinstance(e, (PosError, ValueError)):
        return HTTPException(status_code=400, detail=str(e))

    logger.error(f"Unmapped error: {e!r}")
    return HTTPException(status_code=500, detail="Internal error")
