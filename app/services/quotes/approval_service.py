"""
Amount-based approval routing.

A quote submitted for approval is matched against the active approval
levels: the level with the highest ``amount_threshold`` not above the quote
total wins. Without a matching level the quote is approved straight away;
otherwise an ``Approval`` request is recorded and the quote waits in
``pending_approval`` until an approver decides.
"""

from datetime import datetime, timezone
import logging

from sqlalchemy import select, func, or_, asc, desc
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.quotes.approval_models import Approval, ApprovalLevel
from app.models.enums.approval_status import ApprovalStatus
from app.models.enums.quote_status import QuoteStatus

from app.schemas.quotes.approval_schemas import (
    ApprovalLevelCreate,
    ApprovalLevelUpdate,
    ApprovalLevelOut,
    ApprovalOut,
    ApprovalListData,
    ApprovalSubmissionOut,
)

from app.services.quotes.quote_service import (
    ensure_quote_actionable,
    get_quote_for_update,
    get_quote_or_404,
    map_quote,
)
from app.services.quotes.quote_status_service import (
    _apply_transition,
    approve_quote,
    get_pending_approval,
    reject_quote,
)

from app.core.exceptions import AppException
from app.constants.error_codes import ErrorCode
from app.constants.activity_codes import ActivityCode
from app.utils.activity_helpers import emit_activity

logger = logging.getLogger(__name__)

AUTO_APPROVAL_REASON = "No approval level applies to this amount"

LEVEL_EDITABLE_FIELDS = ("name", "amount_threshold", "order_level", "approvers", "active")


# =====================================================
# APPROVAL LEVELS
# =====================================================
async def _get_level_or_404(db: AsyncSession, level_id: int) -> ApprovalLevel:
    level = await db.get(ApprovalLevel, level_id)
    if not level:
        raise AppException(404, "Approval level not found", ErrorCode.APPROVAL_LEVEL_NOT_FOUND)
    return level


async def create_approval_level(
    db: AsyncSession,
    payload: ApprovalLevelCreate,
    actor,
) -> ApprovalLevelOut:
    level = ApprovalLevel(
        name=payload.name,
        client_name=payload.client_name,
        amount_threshold=payload.amount_threshold,
        order_level=payload.order_level,
        approvers=list(payload.approvers),
        active=payload.active,
    )
    level.stamp_created(actor)
    db.add(level)

    await emit_activity(
        db,
        actor_id=actor.id,
        actor_name=actor.username,
        code=ActivityCode.CREATE_APPROVAL_LEVEL,
        actor_role=actor.display_role,
        target_name=payload.name,
        amount=payload.amount_threshold,
    )

    await db.commit()
    await db.refresh(level)
    return ApprovalLevelOut.model_validate(level)


async def list_approval_levels(
    db: AsyncSession,
    *,
    client_name: str | None = None,
    active: bool | None = None,
) -> list[ApprovalLevelOut]:
    query = select(ApprovalLevel)

    if client_name:
        query = query.where(
            or_(
                ApprovalLevel.client_name == client_name,
                ApprovalLevel.client_name.is_(None),
            )
        )
    if active is not None:
        query = query.where(ApprovalLevel.active.is_(active))

    result = await db.execute(
        query.order_by(ApprovalLevel.order_level, ApprovalLevel.amount_threshold, ApprovalLevel.id)
    )
    return [ApprovalLevelOut.model_validate(level) for level in result.scalars().all()]


async def update_approval_level(
    db: AsyncSession,
    level_id: int,
    payload: ApprovalLevelUpdate,
    actor,
) -> ApprovalLevelOut:
    level = await _get_level_or_404(db, level_id)

    changes: list[str] = []
    for field in LEVEL_EDITABLE_FIELDS:
        value = getattr(payload, field)
        if value is not None and value != getattr(level, field):
            setattr(level, field, value)
            changes.append(field)

    if not changes:
        return ApprovalLevelOut.model_validate(level)

    level.updated_at = datetime.now(timezone.utc)
    level.stamp_updated(actor)

    await emit_activity(
        db,
        actor_id=actor.id,
        actor_name=actor.username,
        code=ActivityCode.UPDATE_APPROVAL_LEVEL,
        actor_role=actor.display_role,
        target_name=level.name,
        changes=", ".join(changes),
    )

    await db.commit()
    await db.refresh(level)
    return ApprovalLevelOut.model_validate(level)


async def find_approval_level(
    db: AsyncSession,
    client_name: str,
    amount,
) -> ApprovalLevel | None:
    return await db.scalar(
        select(ApprovalLevel)
        .where(
            ApprovalLevel.active.is_(True),
            ApprovalLevel.amount_threshold <= amount,
            or_(
                ApprovalLevel.client_name == client_name,
                ApprovalLevel.client_name.is_(None),
            ),
        )
        .order_by(
            desc(ApprovalLevel.amount_threshold),
            desc(ApprovalLevel.order_level),
            asc(ApprovalLevel.id),
        )
        .limit(1)
    )


# =====================================================
# SUBMISSION
# =====================================================
async def submit_for_approval(
    db: AsyncSession,
    quote_id: int,
    version: int,
    actor,
    comments: str | None = None,
) -> ApprovalSubmissionOut:
    q = await get_quote_for_update(db, quote_id)

    await ensure_quote_actionable(db, q)

    if q.total_amount is None:
        raise AppException(
            409,
            "Quote total must be set before requesting approval",
            ErrorCode.QUOTE_INVALID_STATE,
        )

    if await get_pending_approval(db, q.id) is not None:
        raise AppException(
            409,
            "Quote already has a pending approval",
            ErrorCode.APPROVAL_ALREADY_PENDING,
        )

    amount = q.total_amount
    level = await find_approval_level(db, q.client_name, amount)

    if level is None:
        await _apply_transition(db, q, QuoteStatus.approved, version, actor, AUTO_APPROVAL_REASON)
        await emit_activity(
            db,
            actor_id=actor.id,
            actor_name=actor.username,
            code=ActivityCode.AUTO_APPROVE_QUOTE,
            actor_role=actor.display_role,
            target_name=q.quote_number,
            amount=amount,
        )
        await db.commit()

        logger.info("Quote auto-approved", extra={"quote_id": q.id, "amount": str(amount)})
        return ApprovalSubmissionOut(auto_approved=True, quote=map_quote(q))

    await _apply_transition(db, q, QuoteStatus.pending_approval, version, actor, comments)

    approval = Approval(
        quote_id=q.id,
        approval_level_id=level.id,
        status=ApprovalStatus.pending,
        amount=amount,
        requested_by_id=actor.id,
        requested_by_name=actor.username,
        approver_id=level.approvers[0] if level.approvers else None,
        comments=comments,
    )
    db.add(approval)

    await emit_activity(
        db,
        actor_id=actor.id,
        actor_name=actor.username,
        code=ActivityCode.REQUEST_APPROVAL,
        actor_role=actor.display_role,
        target_name=q.quote_number,
        amount=amount,
        level_name=level.name,
    )

    await db.commit()
    await db.refresh(approval)

    logger.info(
        "Approval requested",
        extra={"quote_id": q.id, "approval_id": approval.id, "level_id": level.id},
    )
    return ApprovalSubmissionOut(
        auto_approved=False,
        quote=map_quote(q),
        approval=ApprovalOut.model_validate(approval),
        level=ApprovalLevelOut.model_validate(level),
    )


# =====================================================
# APPROVAL REQUESTS
# =====================================================
async def _get_approval_or_404(db: AsyncSession, approval_id: int) -> Approval:
    approval = await db.get(Approval, approval_id, populate_existing=True)
    if not approval:
        raise AppException(404, "Approval not found", ErrorCode.APPROVAL_NOT_FOUND)
    return approval


async def get_approval(db: AsyncSession, approval_id: int) -> ApprovalOut:
    return ApprovalOut.model_validate(await _get_approval_or_404(db, approval_id))


async def list_approvals(
    db: AsyncSession,
    *,
    quote_id: int | None = None,
    status: ApprovalStatus | None = None,
    approver_id: str | None = None,
    page: int = 1,
    page_size: int = 20,
) -> ApprovalListData:
    conditions = []
    if quote_id:
        conditions.append(Approval.quote_id == quote_id)
    if status:
        conditions.append(Approval.status == status)
    if approver_id:
        conditions.append(Approval.approver_id == approver_id)

    total = await db.scalar(select(func.count(Approval.id)).where(*conditions))

    result = await db.execute(
        select(Approval)
        .where(*conditions)
        .order_by(desc(Approval.created_at), desc(Approval.id))
        .offset((page - 1) * page_size)
        .limit(page_size)
    )

    return ApprovalListData(
        total=total or 0,
        items=[ApprovalOut.model_validate(a) for a in result.scalars().all()],
    )


async def decide_approval(
    db: AsyncSession,
    approval_id: int,
    approve: bool,
    actor,
    comments: str | None = None,
) -> ApprovalOut:
    approval = await _get_approval_or_404(db, approval_id)

    if approval.status != ApprovalStatus.pending:
        raise AppException(
            409,
            f"Approval is already {approval.status.value}",
            ErrorCode.APPROVAL_INVALID_STATE,
        )

    q = await get_quote_or_404(db, approval.quote_id)

    decide = approve_quote if approve else reject_quote
    await decide(db, q.id, q.version, actor, comments)

    await db.refresh(approval)
    return ApprovalOut.model_validate(approval)
