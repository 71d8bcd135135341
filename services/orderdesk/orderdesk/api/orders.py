"""
OrderDesk — Orders API

Flow for POST /orders:
  1. Idempotency-Key replay handled by IdempotencyMiddleware
  2. Placement runs as one transaction, bounded by ORDER_PLACEMENT_TIMEOUT_SECONDS
  3. Typed errors (InsufficientStock, ItemNotFound, ...) rendered by the app's
     OrderDeskError handler
"""
import asyncio
import logging
from typing import Sequence

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from orderdesk.core.config import get_settings
from orderdesk.core.errors import OrderNotFound
from orderdesk.db.database import get_db
from orderdesk.db.order_ops import OrderLine, place_order
from orderdesk.db.order_store import get_order, list_orders, update_order_status
from orderdesk.models.order import Order, OrderStatus
from orderdesk.schemas.order import OrderRequest, OrderResponse, OrderStatusUpdate

settings = get_settings()
logger = logging.getLogger(__name__)
router = APIRouter(prefix="/orders", tags=["orders"])


async def place_order_with_timeout(
    db: AsyncSession, lines: Sequence[OrderLine], declared_total: int | None
) -> Order:
    """Run a placement under the configured deadline; a timed-out placement commits nothing."""
    try:
        return await asyncio.wait_for(
            place_order(db, lines, declared_total),
            timeout=settings.ORDER_PLACEMENT_TIMEOUT_SECONDS,
        )
    except asyncio.TimeoutError:
        await db.rollback()
        logger.error("Order placement timed out after %.1fs", settings.ORDER_PLACEMENT_TIMEOUT_SECONDS)
        raise HTTPException(
            status_code=status.HTTP_504_GATEWAY_TIMEOUT,
            detail="Order placement timed out. No stock was reserved; please retry.",
        )


@router.post("", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
async def create_order(payload: OrderRequest, db: AsyncSession = Depends(get_db)):
    """Reserve stock for every line and record a pending order, or change nothing."""
    return await place_order_with_timeout(db, payload.items, payload.total_amount)


@router.get("", response_model=list[OrderResponse])
async def list_all_orders(
    status: OrderStatus | None = Query(None, description="Filter by status (pending, preparing, completed, cancelled)"),
    db: AsyncSession = Depends(get_db),
):
    """All orders, newest first."""
    return await list_orders(db, status)


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order_by_id(order_id: str, db: AsyncSession = Depends(get_db)):
    order = await get_order(db, order_id)
    if order is None:
        raise OrderNotFound(order_id)
    return order


@router.put("/{order_id}/status", response_model=OrderResponse)
async def set_order_status(order_id: str, payload: OrderStatusUpdate, db: AsyncSession = Depends(get_db)):
    """Set the order's status. Any of the four values is accepted from any state."""
    return await update_order_status(db, order_id, payload.status)
