from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.models.enums.payment_status import PaymentStatus
from app.utils.check_roles import require_role
from app.utils.response import success_response, APIResponse

from app.services.payments.payment_service import (
    create_payment,
    get_payment,
    list_payments,
    update_payment_status,
)

from app.schemas.payments.payment_schemas import (
    PaymentCreate,
    PaymentStatusUpdate,
    PaymentOut,
    PaymentListData,
)

router = APIRouter(
    prefix="/payments",
    tags=["Payments"],
)

PAYMENT_ROLES = ["admin", "manager"]


# =====================================================
# CREATE PAYMENT
# =====================================================
@router.post(
    "",
    response_model=APIResponse[PaymentOut],
)
async def create_payment_api(
    payload: PaymentCreate,
    db: AsyncSession = Depends(get_db),
    actor=Depends(require_role(PAYMENT_ROLES)),
):
    payment = await create_payment(db, payload, actor)
    return success_response("Payment recorded successfully", payment)


# =====================================================
# GET PAYMENT BY ID
# =====================================================
@router.get(
    "/{payment_id}",
    response_model=APIResponse[PaymentOut],
)
async def get_payment_api(
    payment_id: int,
    db: AsyncSession = Depends(get_db),
    _=Depends(require_role(PAYMENT_ROLES)),
):
    payment = await get_payment(db, payment_id)
    return success_response("Payment retrieved successfully", payment)


# =====================================================
# LIST PAYMENTS
# =====================================================
@router.get(
    "/",
    response_model=APIResponse[PaymentListData],
)
async def list_payments_api(
    db: AsyncSession = Depends(get_db),
    _=Depends(require_role(PAYMENT_ROLES)),

    quote_id: int | None = Query(None),
    status: PaymentStatus | None = Query(None),

    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),

    sort_by: str = Query("created_at"),
    order: str = Query("desc"),
):
    data = await list_payments(
        db=db,
        quote_id=quote_id,
        status=status,
        page=page,
        page_size=page_size,
        sort_by=sort_by,
        order=order,
    )

    return success_response("Payments retrieved successfully", data)


# =====================================================
# UPDATE PAYMENT STATUS
# =====================================================
@router.post(
    "/{payment_id}/status",
    response_model=APIResponse[PaymentOut],
)
async def update_payment_status_api(
    payment_id: int,
    payload: PaymentStatusUpdate,
    db: AsyncSession = Depends(get_db),
    actor=Depends(require_role(PAYMENT_ROLES)),
):
    payment = await update_payment_status(db, payment_id, payload.status, actor)
    return success_response("Payment status updated successfully", payment)
