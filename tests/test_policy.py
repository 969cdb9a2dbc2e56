from decimal import Decimal

import pytest

from app.core.errors import ForbiddenError, NotFoundError
from app.models import Country, Order, OrderStatus, Role
from app.services.policy import (
    AccessDecision,
    Actor,
    authorize_order,
    can_access_order,
    check_country,
    permit,
)

ADMIN = Actor(id=1, role=Role.ADMIN, country=Country.AMERICA)
MANAGER_INDIA = Actor(id=2, role=Role.MANAGER, country=Country.INDIA)
MANAGER_AMERICA = Actor(id=3, role=Role.MANAGER, country=Country.AMERICA)
MEMBER = Actor(id=4, role=Role.MEMBER, country=Country.INDIA)
OTHER_MEMBER = Actor(id=5, role=Role.MEMBER, country=Country.INDIA)


def make_order(user_id=4, country=Country.INDIA):
    return Order(
        id=10,
        user_id=user_id,
        restaurant_id=1,
        country=country,
        status=OrderStatus.CREATED,
        total_amount=Decimal("25.48"),
    )


def test_permit_allows_listed_roles():
    permit(MANAGER_INDIA, [Role.ADMIN, Role.MANAGER])


def test_permit_rejects_unlisted_roles():
    with pytest.raises(ForbiddenError):
        permit(MEMBER, [Role.ADMIN, Role.MANAGER])


def test_country_gate_admin_bypasses_everything():
    check_country(ADMIN, Country.INDIA)
    check_country(ADMIN, None)


def test_country_gate_unresolved_resource_is_not_found():
    with pytest.raises(NotFoundError):
        check_country(MANAGER_INDIA, None)


def test_country_gate_mismatch_is_forbidden():
    check_country(MANAGER_INDIA, Country.INDIA)
    with pytest.raises(ForbiddenError):
        check_country(MANAGER_AMERICA, Country.INDIA)


@pytest.mark.parametrize(
    "actor, expected",
    [
        (ADMIN, AccessDecision.ALLOW),
        (MANAGER_INDIA, AccessDecision.ALLOW),
        (MANAGER_AMERICA, AccessDecision.FORBIDDEN),
        (MEMBER, AccessDecision.ALLOW),
        (OTHER_MEMBER, AccessDecision.FORBIDDEN),
    ],
)
def test_order_access_by_role(actor, expected):
    assert can_access_order(actor, make_order()) == expected


def test_missing_order_is_not_found_for_every_role():
    for actor in (ADMIN, MANAGER_INDIA, MEMBER):
        assert can_access_order(actor, None) == AccessDecision.NOT_FOUND
        with pytest.raises(NotFoundError):
            authorize_order(actor, None, 99)


def test_member_of_same_country_cannot_see_foreign_order():
    with pytest.raises(ForbiddenError, match="Unauthorized order access"):
        authorize_order(OTHER_MEMBER, make_order())


def test_manager_error_names_country():
    with pytest.raises(ForbiddenError, match="country"):
        authorize_order(MANAGER_AMERICA, make_order())
