from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.schemas import (
    ErrorResponse,
    MenuItemResponse,
    MenuResponse,
    RestaurantListResponse,
    RestaurantResponse,
)
from app.services import catalog

router = APIRouter(prefix="/restaurants", tags=["Restaurants"])


@router.get("", response_model=RestaurantListResponse)
async def list_restaurants(db: AsyncSession = Depends(get_db)) -> RestaurantListResponse:
    """All restaurants, every country."""
    restaurants = await catalog.list_restaurants(db)
    return RestaurantListResponse(
        restaurants=[RestaurantResponse.model_validate(r) for r in restaurants]
    )


@router.get(
    "/{restaurant_id}/menu",
    response_model=MenuResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_menu(
    restaurant_id: int,
    db: AsyncSession = Depends(get_db),
) -> MenuResponse:
    """A restaurant and its full menu, including unavailable items."""
    restaurant, menu = await catalog.get_menu(db, restaurant_id)
    return MenuResponse(
        restaurant=RestaurantResponse.model_validate(restaurant),
        menu=[MenuItemResponse.model_validate(item) for item in menu],
    )
