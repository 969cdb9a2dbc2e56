"""
Cart Manager

One cart per user, keyed by menu item and holding items from a single
restaurant. Adding an item already in the cart merges quantities; a
quantity of zero is never stored (use remove_item).
"""

import logging
from decimal import Decimal
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import NotFoundError, ValidationError
from app.database import commit
from app.models import Cart, CartItem, MenuItem, Restaurant
from app.schemas import MAX_LINE_QUANTITY
from app.services.policy import Actor

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")


async def get_cart(db: AsyncSession, actor: Actor) -> Optional[Cart]:
    """Return the actor's cart, or None when nothing has been added yet."""
    result = await db.execute(select(Cart).where(Cart.user_id == actor.id))
    return result.scalar_one_or_none()


def cart_total(cart: Optional[Cart]) -> Decimal:
    if cart is None:
        return Decimal("0.00")
    total = sum(
        (Decimal(item.menu_item.price) * item.quantity for item in cart.items),
        Decimal("0"),
    )
    return total.quantize(CENTS)


async def add_item(
    db: AsyncSession,
    actor: Actor,
    menu_item_id: int,
    quantity: int = 1,
) -> Cart:
    """
    Add ``quantity`` of a menu item to the actor's cart.

    The cart is created on first add and takes the country of that item's
    restaurant. Re-adding an item increments its quantity. Items from another
    restaurant are rejected until the cart is cleared.
    """
    if quantity < 1:
        raise ValidationError("Quantity must be at least 1")

    menu_item = await db.get(MenuItem, menu_item_id)
    if menu_item is None:
        raise NotFoundError("Menu item not found")

    restaurant = await db.get(Restaurant, menu_item.restaurant_id)
    if restaurant is None:
        raise NotFoundError("Restaurant not found")

    cart = await get_cart(db, actor)
    if cart is None:
        cart = Cart(user_id=actor.id, country=restaurant.country, items=[])
        db.add(cart)
        logger.debug(f"Created cart for user #{actor.id} ({restaurant.country.value})")
    elif cart.restaurant_id is None:
        cart.country = restaurant.country
    elif cart.restaurant_id != restaurant.id:
        raise ValidationError(
            "Cart already holds items from another restaurant, clear it first"
        )

    line = cart.find_item(menu_item_id)
    merged = quantity + (line.quantity if line is not None else 0)
    if merged > MAX_LINE_QUANTITY:
        raise ValidationError(f"Quantity cannot exceed {MAX_LINE_QUANTITY} per item")

    if line is not None:
        line.quantity = merged
    else:
        cart.items.append(
            CartItem(menu_item_id=menu_item.id, menu_item=menu_item, quantity=quantity)
        )
    cart.touch()

    await commit(db, "Cart")
    logger.info(f"User #{actor.id} added {quantity} x menu item #{menu_item_id} to cart")
    return cart


async def set_quantity(
    db: AsyncSession,
    actor: Actor,
    menu_item_id: int,
    quantity: int,
) -> Cart:
    """Overwrite the quantity of a line already in the cart."""
    if quantity < 1:
        raise ValidationError("Quantity must be at least 1, remove the item instead")
    if quantity > MAX_LINE_QUANTITY:
        raise ValidationError(f"Quantity cannot exceed {MAX_LINE_QUANTITY} per item")

    cart = await get_cart(db, actor)
    if cart is None:
        raise NotFoundError("Cart not found")

    line = cart.find_item(menu_item_id)
    if line is None:
        raise NotFoundError("Item not found in cart")

    line.quantity = quantity
    cart.touch()
    await commit(db, "Cart")
    return cart


async def remove_item(db: AsyncSession, actor: Actor, menu_item_id: int) -> Cart:
    """Remove a line from the cart. Removing an absent item is a no-op."""
    cart = await get_cart(db, actor)
    if cart is None:
        raise NotFoundError("Cart not found")

    line = cart.find_item(menu_item_id)
    if line is not None:
        cart.items.remove(line)
        cart.touch()
        await commit(db, "Cart")
    return cart


async def clear_cart(db: AsyncSession, actor: Actor) -> None:
    """Delete the actor's cart entirely."""
    cart = await get_cart(db, actor)
    if cart is None:
        return
    await db.delete(cart)
    await commit(db, "Cart")
    logger.info(f"Cart cleared for user #{actor.id}")
