"""
Request Dependencies

Identity resolution and the composable authorization gates, applied in
order: get_current_user -> require_roles -> restrict_by_country.
"""

import logging
from typing import Awaitable, Callable, Optional

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.database import get_db
from app.models import Country, Role, User
from app.services import orders as order_service
from app.services.accounts import resolve_token
from app.services.policy import Actor, check_country, permit

logger = logging.getLogger(__name__)

CountryResolver = Callable[[Request, AsyncSession], Awaitable[Optional[Country]]]


async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> User:
    """Resolve the session cookie to a user, or fail with 401."""
    token = request.cookies.get(get_settings().cookie_name)
    return await resolve_token(db, token)


async def get_actor(user: User = Depends(get_current_user)) -> Actor:
    return Actor.from_user(user)


def require_roles(*roles: Role):
    """Role gate: only the listed roles pass."""

    async def role_gate(actor: Actor = Depends(get_actor)) -> Actor:
        permit(actor, roles)
        return actor

    return role_gate


def restrict_by_country(resolve: CountryResolver):
    """
    Country gate: the resource's country must match the actor's.

    ADMIN always passes. ``resolve`` returns None when the resource does not
    exist, which is reported as 404.
    """

    async def country_gate(
        request: Request,
        actor: Actor = Depends(get_actor),
        db: AsyncSession = Depends(get_db),
    ) -> Actor:
        if actor.is_admin:
            return actor
        check_country(actor, await resolve(request, db))
        return actor

    return country_gate


async def order_country(request: Request, db: AsyncSession) -> Optional[Country]:
    try:
        order_id = int(request.path_params["order_id"])
    except (KeyError, ValueError):
        return None
    return await order_service.get_order_country(db, order_id)
