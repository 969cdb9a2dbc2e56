"""
Order Lifecycle Manager

            create
    (none) -------> CREATED
                     |     \\
             checkout|      \\cancel
                     v       v
                    PAID --> CANCELLED

Orders copy the name and price of every menu item at creation time, and
``total_amount`` is computed once. Checkout and cancel are reserved for
ADMIN and MANAGER actors; access to a specific order always goes through
``policy.authorize_order``.
"""

import logging
from decimal import Decimal
from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import InvalidTransitionError, NotFoundError, ValidationError
from app.database import commit
from app.models import Order, OrderItem, OrderStatus, Restaurant, Role
from app.schemas import OrderItemCreate
from app.services import cart as cart_service
from app.services.catalog import get_menu_items
from app.services.policy import Actor, authorize_order, permit

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")
ORDER_OPERATORS = (Role.ADMIN, Role.MANAGER)


# =============================================================================
# CREATION
# =============================================================================

async def _build_order(
    db: AsyncSession,
    actor: Actor,
    items: Sequence[OrderItemCreate],
    restaurant_id: Optional[int],
) -> Order:
    """Resolve menu items and restaurant, and build an unsaved order."""
    if not items:
        raise ValidationError("Order must contain at least one item")

    menu = await get_menu_items(db, [item.menu_item_id for item in items])
    for item in items:
        if item.menu_item_id not in menu:
            raise NotFoundError(f"Menu item with ID {item.menu_item_id} not found")

    # Fall back to the restaurant of the first item
    if restaurant_id is None:
        restaurant_id = menu[items[0].menu_item_id].restaurant_id

    restaurant = await db.get(Restaurant, restaurant_id)
    if restaurant is None:
        raise NotFoundError("Restaurant not found")

    lines = []
    for item in items:
        menu_item = menu[item.menu_item_id]
        if menu_item.restaurant_id != restaurant.id:
            raise ValidationError(
                f"Menu item with ID {menu_item.id} does not belong to restaurant #{restaurant.id}"
            )
        lines.append(
            OrderItem(
                menu_item_id=menu_item.id,
                name=menu_item.name,
                price=Decimal(menu_item.price),
                quantity=item.quantity or 1,
            )
        )

    total = sum((line.price * line.quantity for line in lines), Decimal("0"))

    return Order(
        user_id=actor.id,
        restaurant_id=restaurant.id,
        country=restaurant.country,
        status=OrderStatus.CREATED,
        total_amount=total.quantize(CENTS),
        items=lines,
    )


async def create_order(
    db: AsyncSession,
    actor: Actor,
    items: Sequence[OrderItemCreate],
    restaurant_id: Optional[int] = None,
) -> Order:
    """
    Create an order from an explicit item list.

    Args:
        db: Database session
        actor: User placing the order
        items: Menu item ids with optional quantities (default 1)
        restaurant_id: Owning restaurant; defaults to the first item's

    Raises:
        ValidationError: Empty list, or items from another restaurant
        NotFoundError: Unknown restaurant or menu item
    """
    order = await _build_order(db, actor, items, restaurant_id)
    db.add(order)
    await commit(db, "Order")

    logger.info(
        f"Order #{order.id} created by user #{actor.id} "
        f"({order.country.value}, total {order.total_amount})"
    )
    return order


async def checkout_cart(db: AsyncSession, actor: Actor) -> Order:
    """
    Turn the actor's cart into an order and delete the cart.

    Both happen in one transaction: either the order exists and the cart is
    gone, or nothing changed.
    """
    cart = await cart_service.get_cart(db, actor)
    if cart is None or not cart.items:
        raise ValidationError("Cart is empty")

    items = [
        OrderItemCreate(menu_item_id=line.menu_item_id, quantity=line.quantity)
        for line in cart.items
    ]
    order = await _build_order(db, actor, items, restaurant_id=None)
    db.add(order)
    await db.delete(cart)
    await commit(db, "Order")

    logger.info(f"Cart of user #{actor.id} checked out as order #{order.id}")
    return order


# =============================================================================
# STATUS TRANSITIONS
# =============================================================================

async def checkout_order(db: AsyncSession, actor: Actor, order_id: int) -> Order:
    """Mark a CREATED order as PAID."""
    permit(actor, ORDER_OPERATORS)
    order = authorize_order(actor, await db.get(Order, order_id), order_id)

    if order.status != OrderStatus.CREATED:
        raise InvalidTransitionError("Order cannot be checked out", order.status.value)

    order.status = OrderStatus.PAID
    await commit(db, "Order")

    logger.info(f"Order #{order.id} paid (by user #{actor.id})")
    return order


async def cancel_order(db: AsyncSession, actor: Actor, order_id: int) -> Order:
    """Cancel a CREATED or PAID order."""
    permit(actor, ORDER_OPERATORS)
    order = authorize_order(actor, await db.get(Order, order_id), order_id)

    if order.status == OrderStatus.CANCELLED:
        raise InvalidTransitionError("Order is already cancelled", order.status.value)

    order.status = OrderStatus.CANCELLED
    await commit(db, "Order")

    logger.info(f"Order #{order.id} cancelled (by user #{actor.id})")
    return order


# =============================================================================
# QUERIES
# =============================================================================

async def get_order(db: AsyncSession, actor: Actor, order_id: int) -> Order:
    return authorize_order(actor, await db.get(Order, order_id), order_id)


async def get_order_country(db: AsyncSession, order_id: int):
    """Country of an order, or None if it does not exist."""
    result = await db.execute(select(Order.country).where(Order.id == order_id))
    return result.scalar_one_or_none()


async def list_orders(
    db: AsyncSession,
    actor: Actor,
    status: Optional[OrderStatus] = None,
) -> list[Order]:
    """
    Orders visible to the actor, newest first.

    ADMIN sees everything, MANAGER their country, MEMBER their own orders.
    """
    query = select(Order).order_by(Order.created_at.desc(), Order.id.desc())

    if actor.role == Role.MANAGER:
        query = query.where(Order.country == actor.country)
    elif actor.role != Role.ADMIN:
        query = query.where(Order.user_id == actor.id)

    if status is not None:
        query = query.where(Order.status == status)

    result = await db.execute(query)
    return list(result.scalars().all())
