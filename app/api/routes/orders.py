"""
Order endpoints.

Checkout and cancel run the role gate and the order country gate before
the handler; the order service applies the same policy again so the
rules hold for callers outside HTTP too.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_actor, order_country, require_roles, restrict_by_country
from app.database import get_db
from app.models import OrderStatus, Role
from app.schemas import (
    ErrorResponse,
    OrderCreate,
    OrderEnvelope,
    OrderListResponse,
    OrderResponse,
)
from app.services import orders as order_service
from app.services.policy import Actor

router = APIRouter(prefix="/orders", tags=["Orders"])

ORDER_GATES = [
    Depends(require_roles(Role.ADMIN, Role.MANAGER)),
    Depends(restrict_by_country(order_country)),
]

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
}


@router.post(
    "",
    response_model=OrderEnvelope,
    status_code=201,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def create_order(
    payload: OrderCreate,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> OrderEnvelope:
    """
    Create an order from explicit items.

    ``restaurantId`` is optional; the first item's restaurant is used when
    it is omitted.
    """
    order = await order_service.create_order(db, actor, payload.items, payload.restaurant_id)
    return OrderEnvelope(
        message="Order created successfully",
        order=OrderResponse.model_validate(order),
    )


@router.get("", response_model=OrderListResponse)
async def list_orders(
    status: Optional[OrderStatus] = Query(None),
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> OrderListResponse:
    """Orders visible to the caller, newest first."""
    orders = await order_service.list_orders(db, actor, status)
    return OrderListResponse(
        total=len(orders),
        orders=[OrderResponse.model_validate(o) for o in orders],
    )


@router.get("/{order_id}", response_model=OrderEnvelope, responses=ERROR_RESPONSES)
async def get_order(
    order_id: int,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> OrderEnvelope:
    order = await order_service.get_order(db, actor, order_id)
    return OrderEnvelope(order=OrderResponse.model_validate(order))


@router.post(
    "/{order_id}/checkout",
    response_model=OrderEnvelope,
    dependencies=ORDER_GATES,
    responses=ERROR_RESPONSES,
)
async def checkout_order(
    order_id: int,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> OrderEnvelope:
    """Mark a CREATED order as PAID."""
    order = await order_service.checkout_order(db, actor, order_id)
    return OrderEnvelope(
        message="Order checked out successfully",
        order=OrderResponse.model_validate(order),
    )


@router.post(
    "/{order_id}/cancel",
    response_model=OrderEnvelope,
    dependencies=ORDER_GATES,
    responses=ERROR_RESPONSES,
)
async def cancel_order(
    order_id: int,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> OrderEnvelope:
    """Cancel a CREATED or PAID order."""
    order = await order_service.cancel_order(db, actor, order_id)
    return OrderEnvelope(
        message="Order cancelled successfully",
        order=OrderResponse.model_validate(order),
    )
