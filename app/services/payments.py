"""
Payment Methods

Stored, labeled payment instrument metadata. Nothing here talks to a
payment provider or validates card details.
"""

import logging
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import NotFoundError, ValidationError
from app.database import commit
from app.models import PaymentMethod, Role
from app.services.policy import Actor, permit

logger = logging.getLogger(__name__)


async def list_payment_methods(db: AsyncSession, actor: Actor) -> list[PaymentMethod]:
    result = await db.execute(
        select(PaymentMethod)
        .where(PaymentMethod.user_id == actor.id)
        .order_by(PaymentMethod.id)
    )
    return list(result.scalars().all())


async def create_payment_method(
    db: AsyncSession,
    actor: Actor,
    type: str,
    details: dict[str, Any],
) -> PaymentMethod:
    if not type or not details:
        raise ValidationError("type and details required")

    method = PaymentMethod(user_id=actor.id, type=type, details=details)
    db.add(method)
    await commit(db, "Payment method")

    logger.info(f"Payment method #{method.id} ({type}) added for user #{actor.id}")
    return method


async def update_payment_method(
    db: AsyncSession,
    actor: Actor,
    method_id: int,
    type: Optional[str] = None,
    details: Optional[dict[str, Any]] = None,
) -> PaymentMethod:
    """Edit any payment method. ADMIN only."""
    permit(actor, [Role.ADMIN])

    method = await db.get(PaymentMethod, method_id)
    if method is None:
        raise NotFoundError("Payment method not found")

    if type is not None:
        method.type = type
    if details is not None:
        method.details = details
    await commit(db, "Payment method")

    logger.info(f"Payment method #{method.id} updated by admin #{actor.id}")
    return method
