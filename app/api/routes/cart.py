"""
Cart endpoints. Every operation is scoped to the caller's own cart.
"""

from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_actor
from app.database import get_db
from app.models import Cart
from app.schemas import (
    CartAddRequest,
    CartEnvelope,
    CartItemResponse,
    CartResponse,
    CartUpdateRequest,
    ErrorResponse,
    MessageResponse,
    OrderEnvelope,
    OrderResponse,
)
from app.services import cart as cart_service
from app.services import orders as order_service
from app.services.policy import Actor

router = APIRouter(prefix="/cart", tags=["Cart"])


def to_cart_response(cart: Optional[Cart]) -> CartResponse:
    if cart is None:
        return CartResponse()
    return CartResponse(
        id=cart.id,
        country=cart.country,
        items=[CartItemResponse.model_validate(item) for item in cart.items],
        total=cart_service.cart_total(cart),
    )


@router.get("", response_model=CartEnvelope)
async def get_cart(
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> CartEnvelope:
    """The caller's cart; an empty cart when nothing was added yet."""
    cart = await cart_service.get_cart(db, actor)
    return CartEnvelope(cart=to_cart_response(cart))


@router.post(
    "",
    response_model=CartEnvelope,
    responses={404: {"model": ErrorResponse}},
)
async def add_to_cart(
    payload: CartAddRequest,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> CartEnvelope:
    cart = await cart_service.add_item(db, actor, payload.menu_item_id, payload.quantity)
    return CartEnvelope(message="Item added to cart", cart=to_cart_response(cart))


@router.put(
    "",
    response_model=CartEnvelope,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_cart_item(
    payload: CartUpdateRequest,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> CartEnvelope:
    cart = await cart_service.set_quantity(db, actor, payload.menu_item_id, payload.quantity)
    return CartEnvelope(message="Cart updated", cart=to_cart_response(cart))


@router.post(
    "/checkout",
    response_model=OrderEnvelope,
    status_code=201,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def checkout_cart(
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> OrderEnvelope:
    """Create an order from the cart and delete the cart, atomically."""
    order = await order_service.checkout_cart(db, actor)
    return OrderEnvelope(
        message="Order created successfully",
        order=OrderResponse.model_validate(order),
    )


@router.delete(
    "/{menu_item_id}",
    response_model=CartEnvelope,
    responses={404: {"model": ErrorResponse}},
)
async def remove_cart_item(
    menu_item_id: int,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> CartEnvelope:
    cart = await cart_service.remove_item(db, actor, menu_item_id)
    return CartEnvelope(message="Item removed", cart=to_cart_response(cart))


@router.delete("", response_model=MessageResponse)
async def clear_cart(
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    await cart_service.clear_cart(db, actor)
    return MessageResponse(message="Cart cleared")
