from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_actor, require_roles
from app.database import get_db
from app.models import Role
from app.schemas import (
    ErrorResponse,
    PaymentMethodCreate,
    PaymentMethodEnvelope,
    PaymentMethodListResponse,
    PaymentMethodResponse,
    PaymentMethodUpdate,
)
from app.services import payments
from app.services.policy import Actor

router = APIRouter(prefix="/payments", tags=["Payments"])


@router.get("", response_model=PaymentMethodListResponse)
async def list_payment_methods(
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> PaymentMethodListResponse:
    """The caller's own payment methods."""
    methods = await payments.list_payment_methods(db, actor)
    return PaymentMethodListResponse(
        methods=[PaymentMethodResponse.model_validate(m) for m in methods]
    )


@router.post(
    "",
    response_model=PaymentMethodEnvelope,
    status_code=201,
    responses={400: {"model": ErrorResponse}},
)
async def create_payment_method(
    payload: PaymentMethodCreate,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> PaymentMethodEnvelope:
    method = await payments.create_payment_method(db, actor, payload.type, payload.details)
    return PaymentMethodEnvelope(method=PaymentMethodResponse.model_validate(method))


@router.put(
    "/{method_id}",
    response_model=PaymentMethodEnvelope,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_payment_method(
    method_id: int,
    payload: PaymentMethodUpdate,
    actor: Actor = Depends(require_roles(Role.ADMIN)),
    db: AsyncSession = Depends(get_db),
) -> PaymentMethodEnvelope:
    """Edit any user's payment method. ADMIN only."""
    method = await payments.update_payment_method(
        db, actor, method_id, type=payload.type, details=payload.details
    )
    return PaymentMethodEnvelope(
        message="Updated",
        method=PaymentMethodResponse.model_validate(method),
    )
