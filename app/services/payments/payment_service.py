from datetime import datetime, timezone
import logging

from sqlalchemy import select, func, asc, desc
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.payments.payment_models import Payment
from app.models.quotes.quote_models import Quote
from app.models.enums.payment_status import PaymentStatus
from app.models.enums.quote_status import QuoteStatus

from app.schemas.payments.payment_schemas import (
    PaymentCreate,
    PaymentOut,
    PaymentListData,
)

from app.core.exceptions import AppException
from app.constants.error_codes import ErrorCode
from app.constants.activity_codes import ActivityCode
from app.utils.activity_helpers import emit_activity

logger = logging.getLogger(__name__)

FINAL_PAYMENT_STATUSES = frozenset({PaymentStatus.paid, PaymentStatus.cancelled})


# =====================================================
# MAPPER
# =====================================================
def _map_payment(payment: Payment) -> PaymentOut:
    return PaymentOut.model_validate(payment)


async def _get_payment_or_404(db: AsyncSession, payment_id: int) -> Payment:
    payment = await db.get(Payment, payment_id)
    if not payment:
        raise AppException(
            404,
            "Payment not found",
            ErrorCode.PAYMENT_NOT_FOUND,
        )
    return payment


# =====================================================
# PAYMENT LOCK (used by quote write paths)
# =====================================================
async def has_paid_payment(db: AsyncSession, quote_id: int) -> bool:
    paid = await db.scalar(
        select(
            select(Payment.id)
            .where(
                Payment.quote_id == quote_id,
                Payment.status == PaymentStatus.paid,
            )
            .exists()
        )
    )
    return bool(paid)


# =====================================================
# CREATE PAYMENT
# =====================================================
async def create_payment(
    db: AsyncSession,
    payload: PaymentCreate,
    actor,
) -> PaymentOut:
    # serialises payment creation per quote
    result = await db.execute(
        select(Quote)
        .where(
            Quote.id == payload.quote_id,
            Quote.is_deleted.is_(False),
        )
        .with_for_update(of=Quote)
        .execution_options(populate_existing=True)
    )
    quote = result.scalar_one_or_none()
    if not quote:
        raise AppException(404, "Quote not found", ErrorCode.QUOTE_NOT_FOUND)

    if quote.status != QuoteStatus.approved:
        raise AppException(
            409,
            "Payments can only be recorded for approved quotes",
            ErrorCode.QUOTE_INVALID_STATE,
        )

    open_payment = await db.scalar(
        select(
            select(Payment.id)
            .where(
                Payment.quote_id == quote.id,
                Payment.status != PaymentStatus.cancelled,
            )
            .exists()
        )
    )
    if open_payment:
        raise AppException(
            409,
            "Quote already has an active payment",
            ErrorCode.PAYMENT_ALREADY_EXISTS,
        )

    payment = Payment(
        quote_id=quote.id,
        amount=payload.amount,
        payment_method=payload.payment_method,
        status=PaymentStatus.pending,
    )
    payment.stamp_created(actor)
    db.add(payment)

    await emit_activity(
        db,
        actor_id=actor.id,
        actor_name=actor.username,
        code=ActivityCode.CREATE_PAYMENT,
        actor_role=actor.display_role,
        target_name=quote.quote_number,
        amount=payload.amount,
    )

    await db.commit()
    await db.refresh(payment)

    logger.info("Payment recorded", extra={"payment_id": payment.id, "quote_id": quote.id})
    return _map_payment(payment)


# =====================================================
# GET PAYMENT BY ID
# =====================================================
async def get_payment(
    db: AsyncSession,
    payment_id: int,
) -> PaymentOut:
    logger.info("Get payment", extra={"payment_id": payment_id})
    return _map_payment(await _get_payment_or_404(db, payment_id))


# =====================================================
# LIST PAYMENTS
# =====================================================
async def list_payments(
    db: AsyncSession,
    *,
    quote_id: int | None = None,
    status: PaymentStatus | None = None,
    page: int = 1,
    page_size: int = 20,
    sort_by: str = "created_at",
    order: str = "desc",
) -> PaymentListData:
    logger.info(
        "List payments",
        extra={
            "quote_id": quote_id,
            "status": status,
            "page": page,
            "page_size": page_size,
        },
    )

    base_query = (
        select(Payment)
        .join(Quote, Payment.quote_id == Quote.id)
        .where(Quote.is_deleted.is_(False))
    )

    if quote_id:
        base_query = base_query.where(Payment.quote_id == quote_id)

    if status:
        base_query = base_query.where(Payment.status == status)

    # -------------------------------
    # COUNT (NO SORT)
    # -------------------------------
    total = await db.scalar(
        select(func.count()).select_from(base_query.subquery())
    )

    # -------------------------------
    # SORT + PAGINATION
    # -------------------------------
    sort_map = {
        "created_at": Payment.created_at,
        "amount": Payment.amount,
    }
    sort_col = sort_map.get(sort_by, Payment.created_at)
    order_fn = asc if order == "asc" else desc

    result = await db.execute(
        base_query
        .order_by(order_fn(sort_col), order_fn(Payment.id))
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    payments = result.scalars().all()

    return PaymentListData(
        total=total or 0,
        items=[_map_payment(p) for p in payments],
    )


# =====================================================
# UPDATE PAYMENT STATUS
# =====================================================
async def update_payment_status(
    db: AsyncSession,
    payment_id: int,
    status: PaymentStatus,
    actor,
) -> PaymentOut:
    payment = await _get_payment_or_404(db, payment_id)

    if payment.status in FINAL_PAYMENT_STATUSES:
        raise AppException(
            409,
            f"Payment is already {payment.status.value}",
            ErrorCode.PAYMENT_INVALID_STATE,
        )

    if payment.status == status:
        return _map_payment(payment)

    payment.status = status
    payment.updated_at = datetime.now(timezone.utc)
    payment.stamp_updated(actor)

    await emit_activity(
        db,
        actor_id=actor.id,
        actor_name=actor.username,
        code=ActivityCode.UPDATE_PAYMENT_STATUS,
        actor_role=actor.display_role,
        payment_id=payment.id,
        to_status=status.value,
    )

    await db.commit()
    await db.refresh(payment)
    return _map_payment(payment)
