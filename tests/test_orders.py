from decimal import Decimal

import pytest

from app.core.errors import (
    ConflictError,
    ForbiddenError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from app.database import commit
from app.models import Country, MenuItem, Order, OrderStatus
from app.schemas import OrderItemCreate
from app.services import cart as cart_service
from app.services import orders as order_service


def items(*pairs):
    return [OrderItemCreate(menu_item_id=mid, quantity=qty) for mid, qty in pairs]


async def create_member_order(db, world):
    return await order_service.create_order(
        db,
        world.actors["member_india"],
        items((world.butter_chicken.id, 2), (world.paneer_tikka.id, 1)),
    )


# =============================================================================
# CREATION
# =============================================================================

async def test_create_order_snapshots_items_and_total(db, world):
    order = await create_member_order(db, world)

    assert order.status == OrderStatus.CREATED
    assert order.country == Country.INDIA
    assert order.restaurant_id == world.india.id
    assert order.user_id == world.users["member_india"].id
    assert order.total_amount == Decimal("25.48")
    assert [(i.name, i.price, i.quantity) for i in order.items] == [
        ("Butter Chicken", Decimal("8.99"), 2),
        ("Paneer Tikka", Decimal("7.50"), 1),
    ]


async def test_total_is_not_recomputed_after_price_change(db, world):
    order = await create_member_order(db, world)

    menu_item = await db.get(MenuItem, world.butter_chicken.id)
    menu_item.price = Decimal("100.00")
    await db.commit()

    reloaded = await order_service.get_order(db, world.actors["admin"], order.id)
    assert reloaded.total_amount == Decimal("25.48")
    assert reloaded.items[0].price == Decimal("8.99")


async def test_quantity_defaults_to_one(db, world):
    order = await order_service.create_order(
        db, world.actors["member_india"], [OrderItemCreate(menu_item_id=world.paneer_tikka.id)]
    )
    assert order.items[0].quantity == 1
    assert order.total_amount == Decimal("7.50")


async def test_explicit_restaurant_sets_country(db, world):
    order = await order_service.create_order(
        db,
        world.actors["member_india"],
        items((world.club_sandwich.id, 1)),
        restaurant_id=world.america.id,
    )
    # Availability is advisory; the unavailable sandwich can still be ordered
    assert order.country == Country.AMERICA


async def test_unknown_menu_item_or_restaurant_is_not_found(db, world):
    member = world.actors["member_india"]

    with pytest.raises(NotFoundError, match="9999"):
        await order_service.create_order(db, member, items((9999, 1)))
    with pytest.raises(NotFoundError, match="Restaurant"):
        await order_service.create_order(
            db, member, items((world.butter_chicken.id, 1)), restaurant_id=9999
        )


async def test_items_from_another_restaurant_are_rejected(db, world):
    with pytest.raises(ValidationError):
        await order_service.create_order(
            db,
            world.actors["member_india"],
            items((world.butter_chicken.id, 1), (world.club_sandwich.id, 1)),
        )


async def test_empty_order_is_rejected(db, world):
    with pytest.raises(ValidationError):
        await order_service.create_order(db, world.actors["member_india"], [])


# =============================================================================
# TRANSITIONS
# =============================================================================

async def test_manager_checkout_then_second_checkout_conflicts(db, world):
    order = await create_member_order(db, world)
    manager = world.actors["manager_india"]

    paid = await order_service.checkout_order(db, manager, order.id)
    assert paid.status == OrderStatus.PAID

    with pytest.raises(InvalidTransitionError, match="current status: PAID") as exc:
        await order_service.checkout_order(db, manager, order.id)
    assert exc.value.current_status == "PAID"


async def test_checkout_of_cancelled_order_conflicts(db, world):
    order = await create_member_order(db, world)
    await order_service.cancel_order(db, world.actors["admin"], order.id)

    with pytest.raises(InvalidTransitionError, match="CANCELLED"):
        await order_service.checkout_order(db, world.actors["admin"], order.id)


async def test_member_cannot_checkout_even_own_order(db, world):
    order = await create_member_order(db, world)

    with pytest.raises(ForbiddenError):
        await order_service.checkout_order(db, world.actors["member_india"], order.id)
    with pytest.raises(ForbiddenError):
        await order_service.checkout_order(db, world.actors["member_india"], 9999)


async def test_foreign_manager_is_forbidden_admin_is_not(db, world):
    order = await create_member_order(db, world)

    with pytest.raises(ForbiddenError):
        await order_service.checkout_order(db, world.actors["manager_america"], order.id)
    with pytest.raises(ForbiddenError):
        await order_service.cancel_order(db, world.actors["manager_america"], order.id)

    paid = await order_service.checkout_order(db, world.actors["admin"], order.id)
    assert paid.status == OrderStatus.PAID


async def test_cancel_from_created_and_paid_but_not_twice(db, world):
    manager = world.actors["manager_india"]
    created = await create_member_order(db, world)
    paid = await create_member_order(db, world)
    await order_service.checkout_order(db, manager, paid.id)

    assert (await order_service.cancel_order(db, manager, created.id)).status == OrderStatus.CANCELLED
    assert (await order_service.cancel_order(db, manager, paid.id)).status == OrderStatus.CANCELLED

    with pytest.raises(InvalidTransitionError, match="already cancelled"):
        await order_service.cancel_order(db, manager, created.id)


async def test_transition_of_missing_order_is_not_found(db, world):
    with pytest.raises(NotFoundError):
        await order_service.cancel_order(db, world.actors["manager_india"], 9999)


async def test_concurrent_status_change_is_reported(db, session_maker, world):
    order = await create_member_order(db, world)

    async with session_maker() as other:
        stale = await other.get(Order, order.id)
        await order_service.checkout_order(db, world.actors["manager_india"], order.id)

        stale.status = OrderStatus.CANCELLED
        with pytest.raises(ConflictError, match="modified concurrently"):
            await commit(other, "Order")


# =============================================================================
# QUERIES
# =============================================================================

async def test_get_order_visibility(db, world):
    order = await create_member_order(db, world)

    for key in ("admin", "manager_india", "member_india"):
        assert (await order_service.get_order(db, world.actors[key], order.id)).id == order.id

    for key in ("manager_america", "other_member_india", "member_america"):
        with pytest.raises(ForbiddenError):
            await order_service.get_order(db, world.actors[key], order.id)

    with pytest.raises(NotFoundError):
        await order_service.get_order(db, world.actors["admin"], 9999)


async def test_list_orders_is_scoped_and_newest_first(db, world):
    india_first = await create_member_order(db, world)
    india_second = await order_service.create_order(
        db, world.actors["other_member_india"], items((world.paneer_tikka.id, 1))
    )
    america = await order_service.create_order(
        db, world.actors["member_america"], items((world.club_sandwich.id, 1))
    )

    def ids(orders):
        return [o.id for o in orders]

    assert ids(await order_service.list_orders(db, world.actors["admin"])) == [
        america.id, india_second.id, india_first.id
    ]
    assert ids(await order_service.list_orders(db, world.actors["manager_india"])) == [
        india_second.id, india_first.id
    ]
    assert ids(await order_service.list_orders(db, world.actors["manager_america"])) == [america.id]
    assert ids(await order_service.list_orders(db, world.actors["member_india"])) == [india_first.id]


async def test_list_orders_status_filter(db, world):
    first = await create_member_order(db, world)
    await create_member_order(db, world)
    await order_service.checkout_order(db, world.actors["admin"], first.id)

    paid = await order_service.list_orders(db, world.actors["admin"], OrderStatus.PAID)
    assert [o.id for o in paid] == [first.id]


# =============================================================================
# CART CHECKOUT
# =============================================================================

async def test_checkout_cart_creates_order_and_deletes_cart(db, world):
    member = world.actors["member_india"]
    await cart_service.add_item(db, member, world.butter_chicken.id, 2)
    await cart_service.add_item(db, member, world.paneer_tikka.id, 1)

    order = await order_service.checkout_cart(db, member)

    assert order.total_amount == Decimal("25.48")
    assert order.status == OrderStatus.CREATED
    assert order.country == Country.INDIA
    assert await cart_service.get_cart(db, member) is None


async def test_checkout_of_empty_cart_is_rejected(db, world):
    with pytest.raises(ValidationError, match="Cart is empty"):
        await order_service.checkout_cart(db, world.actors["member_india"])


async def test_checkout_cart_after_switching_restaurant(db, world):
    member = world.actors["member_india"]
    await cart_service.add_item(db, member, world.butter_chicken.id)
    with pytest.raises(ValidationError):
        await cart_service.add_item(db, member, world.club_sandwich.id)

    order = await order_service.checkout_cart(db, member)

    assert order.restaurant_id == world.india.id
    assert [i.menu_item_id for i in order.items] == [world.butter_chicken.id]
