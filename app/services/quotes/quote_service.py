from datetime import datetime, timezone
import logging
from uuid import uuid4

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, func, asc, desc

from app.models.quotes.quote_models import Quote
from app.models.enums.quote_status import QuoteStatus
from app.constants.quote_status_labels import get_status_label

from app.schemas.quotes.quote_schemas import (
    QuoteCreate,
    QuoteUpdate,
    QuoteOut,
    QuoteListItem,
    QuoteListData,
)

from app.services.quotes.status_machine import (
    TransitionContext,
    can_receive_actions,
    coerce_status,
    is_locked,
    next_automatic_status,
    valid_transitions,
)
from app.services.payments.payment_service import has_paid_payment

from app.core.exceptions import AppException
from app.constants.error_codes import ErrorCode
from app.constants.activity_codes import ActivityCode
from app.utils.activity_helpers import emit_activity

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = (
    "title",
    "client_name",
    "description",
    "suppliers_sent_count",
    "visit_date",
    "total_amount",
)


def suggested_status_for(q: Quote) -> QuoteStatus | None:
    context = TransitionContext.from_counts(q.responses_count, q.suppliers_sent_count)
    return next_automatic_status(q.status, context)


def map_quote(q: Quote) -> QuoteOut:
    return QuoteOut(
        id=q.id,
        quote_number=q.quote_number,
        title=q.title,
        description=q.description,
        client_name=q.client_name,
        status=q.status,
        status_label=get_status_label(q.status),
        locked=is_locked(q.status),
        can_receive_actions=can_receive_actions(q.status),
        available_transitions=list(valid_transitions(q.status)),
        suggested_status=suggested_status_for(q),
        suppliers_sent_count=q.suppliers_sent_count,
        responses_count=q.responses_count,
        visit_date=q.visit_date,
        total_amount=q.total_amount,
        version=q.version,
        created_by_id=q.created_by_id,
        updated_by_id=q.updated_by_id,
        created_by_name=q.created_by_name,
        updated_by_name=q.updated_by_name,
        created_at=q.created_at,
        updated_at=q.updated_at,
    )


async def get_quote_or_404(
    db: AsyncSession,
    quote_id: int,
) -> Quote:
    result = await db.execute(
        select(Quote)
        .where(
            Quote.id == quote_id,
            Quote.is_deleted.is_(False),
        )
        .execution_options(populate_existing=True)
    )
    q = result.scalar_one_or_none()
    if not q:
        raise AppException(404, "Quote not found", ErrorCode.QUOTE_NOT_FOUND)
    return q


async def get_quote_for_update(
    db: AsyncSession,
    quote_id: int,
) -> Quote:
    result = await db.execute(
        select(Quote)
        .where(
            Quote.id == quote_id,
            Quote.is_deleted.is_(False),
        )
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    q = result.scalar_one_or_none()
    if not q:
        raise AppException(404, "Quote not found", ErrorCode.QUOTE_NOT_FOUND)
    return q


async def _raise_write_conflict(db: AsyncSession, quote_id: int) -> None:
    """A guarded UPDATE matched no row: report why from the committed state."""
    await db.rollback()
    current = await get_quote_or_404(db, quote_id)

    if is_locked(current.status):
        raise AppException(
            409,
            f"Quote is locked in status '{current.status.value}'",
            ErrorCode.QUOTE_LOCKED,
        )
    raise AppException(409, "Version conflict", ErrorCode.QUOTE_VERSION_CONFLICT)


async def ensure_quote_actionable(db: AsyncSession, q: Quote) -> None:
    """Edit/approval guard: locked statuses plus a settled payment on the quote."""
    if is_locked(q.status):
        raise AppException(
            409,
            f"Quote is locked in status '{q.status.value}'",
            ErrorCode.QUOTE_LOCKED,
        )

    if await has_paid_payment(db, q.id):
        raise AppException(
            409,
            "Quote already has a paid payment",
            ErrorCode.QUOTE_LOCKED,
        )


async def create_quote(
    db: AsyncSession,
    payload: QuoteCreate,
    actor,
) -> QuoteOut:
    q = Quote(
        quote_number=f"TMP-{uuid4().hex[:16]}",
        title=payload.title,
        description=payload.description,
        client_name=payload.client_name,
        status=QuoteStatus.draft,
        suppliers_sent_count=payload.suppliers_sent_count,
        responses_count=0,
        visit_date=payload.visit_date,
        total_amount=payload.total_amount,
        version=1,
    )
    q.stamp_created(actor)

    db.add(q)
    await db.flush()

    q.quote_number = f"QT-{q.id:06d}"

    await emit_activity(
        db,
        actor_id=actor.id,
        actor_name=actor.username,
        code=ActivityCode.CREATE_QUOTE,
        actor_role=actor.display_role,
        target_name=q.quote_number,
    )

    await db.commit()
    await db.refresh(q)

    logger.info("Quote created", extra={"quote_id": q.id, "quote_number": q.quote_number})
    return map_quote(q)


async def get_quote(
    db: AsyncSession,
    quote_id: int,
) -> QuoteOut:
    q = await get_quote_or_404(db, quote_id)
    return map_quote(q)


async def list_quotes(
    db: AsyncSession,
    status: str | None = None,
    client_name: str | None = None,
    page: int = 1,
    page_size: int = 20,
    sort_by: str = "created_at",
    order: str = "desc",
) -> QuoteListData:
    conditions = [Quote.is_deleted.is_(False)]

    if status:
        resolved = coerce_status(status)
        if resolved is None:
            raise AppException(
                400,
                f"Unknown quote status '{status}'",
                ErrorCode.VALIDATION_ERROR,
            )
        conditions.append(Quote.status == resolved)

    if client_name:
        conditions.append(Quote.client_name.ilike(f"%{client_name}%"))

    total = await db.scalar(
        select(func.count(Quote.id)).where(*conditions)
    )

    sort_map = {
        "created_at": Quote.created_at,
        "updated_at": Quote.updated_at,
        "quote_number": Quote.quote_number,
    }
    sort_col = sort_map.get(sort_by, Quote.created_at)
    order_fn = asc if order == "asc" else desc

    result = await db.execute(
        select(Quote)
        .where(*conditions)
        .order_by(order_fn(sort_col), order_fn(Quote.id))
        .offset((page - 1) * page_size)
        .limit(page_size)
    )

    items = [
        QuoteListItem(
            id=q.id,
            quote_number=q.quote_number,
            title=q.title,
            client_name=q.client_name,
            status=q.status,
            status_label=get_status_label(q.status),
            locked=is_locked(q.status),
            responses_count=q.responses_count,
            suppliers_sent_count=q.suppliers_sent_count,
            total_amount=q.total_amount,
            version=q.version,
            created_at=q.created_at,
        )
        for q in result.scalars().all()
    ]

    return QuoteListData(
        total=total or 0,
        items=items,
    )


async def update_quote(
    db: AsyncSession,
    quote_id: int,
    payload: QuoteUpdate,
    actor,
) -> QuoteOut:
    q = await get_quote_for_update(db, quote_id)

    await ensure_quote_actionable(db, q)

    if q.version != payload.version:
        raise AppException(409, "Version conflict", ErrorCode.QUOTE_VERSION_CONFLICT)

    changes: dict = {}
    for field in EDITABLE_FIELDS:
        value = getattr(payload, field)
        if value is not None and value != getattr(q, field):
            changes[field] = value

    if not changes:
        return map_quote(q)

    # status and version are re-checked in the WHERE clause
    result = await db.execute(
        update(Quote)
        .where(
            Quote.id == q.id,
            Quote.status == q.status,
            Quote.version == payload.version,
            Quote.is_deleted.is_(False),
        )
        .values(
            **changes,
            version=Quote.version + 1,
            updated_by_id=actor.id,
            updated_by_name=actor.username,
            updated_at=datetime.now(timezone.utc),
        )
        .returning(Quote.id)
        .execution_options(synchronize_session=False)
    )
    if result.scalar_one_or_none() is None:
        await _raise_write_conflict(db, q.id)

    await emit_activity(
        db,
        actor_id=actor.id,
        actor_name=actor.username,
        code=ActivityCode.UPDATE_QUOTE,
        actor_role=actor.display_role,
        target_name=q.quote_number,
        changes=", ".join(changes),
    )

    await db.commit()
    await db.refresh(q)
    return map_quote(q)


async def delete_quote(
    db: AsyncSession,
    quote_id: int,
    version: int,
    actor,
) -> QuoteOut:
    q = await get_quote_for_update(db, quote_id)

    if q.status != QuoteStatus.draft:
        raise AppException(409, "Only draft quotes can be deleted", ErrorCode.QUOTE_CANNOT_DELETE)

    if q.version != version:
        raise AppException(409, "Version conflict", ErrorCode.QUOTE_VERSION_CONFLICT)

    result = await db.execute(
        update(Quote)
        .where(
            Quote.id == q.id,
            Quote.status == QuoteStatus.draft,
            Quote.version == version,
            Quote.is_deleted.is_(False),
        )
        .values(
            is_deleted=True,
            version=Quote.version + 1,
            updated_by_id=actor.id,
            updated_by_name=actor.username,
            updated_at=datetime.now(timezone.utc),
        )
        .returning(Quote.id)
        .execution_options(synchronize_session=False)
    )
    if result.scalar_one_or_none() is None:
        await db.rollback()
        current = await get_quote_or_404(db, q.id)
        if current.status != QuoteStatus.draft:
            raise AppException(409, "Only draft quotes can be deleted", ErrorCode.QUOTE_CANNOT_DELETE)
        raise AppException(409, "Version conflict", ErrorCode.QUOTE_VERSION_CONFLICT)

    await emit_activity(
        db,
        actor_id=actor.id,
        actor_name=actor.username,
        code=ActivityCode.DELETE_QUOTE,
        actor_role=actor.display_role,
        target_name=q.quote_number,
    )

    await db.commit()
    await db.refresh(q)
    return map_quote(q)
