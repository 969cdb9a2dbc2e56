"""
Catalog Reader

Public, read-only restaurant and menu listing. No country scoping and no
availability filtering: ``is_available`` is shown to clients as-is.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import NotFoundError
from app.models import MenuItem, Restaurant


async def list_restaurants(db: AsyncSession) -> list[Restaurant]:
    result = await db.execute(select(Restaurant).order_by(Restaurant.id))
    return list(result.scalars().all())


async def get_menu(db: AsyncSession, restaurant_id: int) -> tuple[Restaurant, list[MenuItem]]:
    """Return the restaurant and all of its menu items."""
    restaurant = await db.get(Restaurant, restaurant_id)
    if restaurant is None:
        raise NotFoundError("Restaurant not found")

    result = await db.execute(
        select(MenuItem)
        .where(MenuItem.restaurant_id == restaurant_id)
        .order_by(MenuItem.id)
    )
    return restaurant, list(result.scalars().all())


async def get_menu_items(db: AsyncSession, menu_item_ids: list[int]) -> dict[int, MenuItem]:
    """Look up menu items by id; missing ids are simply absent from the result."""
    if not menu_item_ids:
        return {}
    result = await db.execute(select(MenuItem).where(MenuItem.id.in_(set(menu_item_ids))))
    return {item.id: item for item in result.scalars().all()}
