"""
Authorization Policy

Role gate, country gate and the single order access decision used by every
order read and mutation.

    ADMIN    -> any resource, any country
    MANAGER  -> resources of their own country
    MEMBER   -> orders they placed
"""

import enum
import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from app.core.errors import ForbiddenError, NotFoundError
from app.models import Country, Order, Role, User

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Actor:
    """The authenticated identity performing an operation."""
    id: int
    role: Role
    country: Country

    @classmethod
    def from_user(cls, user: User) -> "Actor":
        return cls(id=user.id, role=Role(user.role), country=Country(user.country))

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


class AccessDecision(str, enum.Enum):
    ALLOW = "allow"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"


# =============================================================================
# ROLE GATE
# =============================================================================

def permit(actor: Actor, allowed_roles: Iterable[Role]) -> None:
    """Raise ForbiddenError unless the actor's role is allowed."""
    allowed = set(allowed_roles)
    if actor.role not in allowed:
        logger.info(f"Role {actor.role.value} of user #{actor.id} not in {sorted(r.value for r in allowed)}")
        raise ForbiddenError("Forbidden")


# =============================================================================
# COUNTRY GATE
# =============================================================================

def country_decision(actor: Actor, resource_country: Optional[Country]) -> AccessDecision:
    if actor.is_admin:
        return AccessDecision.ALLOW
    if resource_country is None:
        return AccessDecision.NOT_FOUND
    if Country(resource_country) != actor.country:
        return AccessDecision.FORBIDDEN
    return AccessDecision.ALLOW


def check_country(actor: Actor, resource_country: Optional[Country]) -> None:
    """
    Raise unless the actor may act on a resource in ``resource_country``.

    ``None`` means the resource could not be found.
    """
    decision = country_decision(actor, resource_country)
    if decision == AccessDecision.NOT_FOUND:
        raise NotFoundError("Resource not found")
    if decision == AccessDecision.FORBIDDEN:
        raise ForbiddenError("Not allowed in this country")


# =============================================================================
# ORDERS
# =============================================================================

def can_access_order(actor: Actor, order: Optional[Order]) -> AccessDecision:
    if order is None:
        return AccessDecision.NOT_FOUND
    if actor.is_admin:
        return AccessDecision.ALLOW
    if actor.role == Role.MANAGER:
        return country_decision(actor, order.country)
    if order.user_id == actor.id:
        return AccessDecision.ALLOW
    return AccessDecision.FORBIDDEN


def authorize_order(actor: Actor, order: Optional[Order], order_id: Optional[int] = None) -> Order:
    """Return ``order`` if the actor may access it, raise otherwise."""
    decision = can_access_order(actor, order)
    if decision == AccessDecision.NOT_FOUND:
        raise NotFoundError(f"Order #{order_id} not found" if order_id else "Order not found")
    if decision == AccessDecision.FORBIDDEN:
        logger.info(f"User #{actor.id} ({actor.role.value}) denied access to order #{order.id}")
        if actor.role == Role.MANAGER:
            raise ForbiddenError("Not allowed in this country")
        raise ForbiddenError("Unauthorized order access")
    return order
