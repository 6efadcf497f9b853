"""
Authoritative write path for quote status changes.

Every persisted move goes through ``_apply_transition``: the status machine
decides legality, then a conditional UPDATE (id + current status + version)
guards against lost updates between the read and the write.
"""

from datetime import datetime, timezone
import logging

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.quotes.quote_models import Quote, QuoteStatusHistory
from app.models.quotes.approval_models import Approval, ApprovalLevel
from app.models.enums.approval_status import ApprovalStatus
from app.models.enums.quote_status import QuoteStatus
from app.constants.quote_status_labels import get_status_label, get_status_color

from app.schemas.quotes.quote_schemas import (
    QuoteOut,
    QuoteTransitionsOut,
    QuoteStatusInfo,
    QuoteStatusHistoryOut,
)

from app.services.quotes.status_machine import (
    TransitionContext,
    can_receive_actions,
    is_locked,
    is_terminal,
    is_valid_transition,
    next_automatic_status,
    valid_transitions,
)
from app.services.quotes.quote_service import (
    map_quote,
    ensure_quote_actionable,
    get_quote_or_404,
    suggested_status_for,
)

from app.core.exceptions import AppException, TransitionNotAllowed
from app.constants.error_codes import ErrorCode
from app.constants.activity_codes import ActivityCode
from app.utils.activity_helpers import emit_activity

logger = logging.getLogger(__name__)

ALL_PROPOSALS_RECEIVED_REASON = "All supplier proposals received"


# =====================================================
# CORE WRITE
# =====================================================
async def _apply_transition(
    db: AsyncSession,
    q: Quote,
    to_status: QuoteStatus,
    expected_version: int,
    actor,
    reason: str | None = None,
) -> None:
    from_status = q.status

    if not is_valid_transition(from_status, to_status):
        logger.warning(
            "Rejected quote status change",
            extra={
                "quote_id": q.id,
                "from_status": from_status.value,
                "to_status": to_status.value,
                "actor": actor.username,
            },
        )
        raise TransitionNotAllowed(from_status.value, to_status.value)

    result = await db.execute(
        update(Quote)
        .where(
            Quote.id == q.id,
            Quote.status == from_status,
            Quote.version == expected_version,
            Quote.is_deleted.is_(False),
        )
        .values(
            status=to_status,
            version=Quote.version + 1,
            updated_by_id=actor.id,
            updated_by_name=actor.username,
            updated_at=datetime.now(timezone.utc),
        )
        .returning(Quote.id)
        .execution_options(synchronize_session=False)
    )

    if result.scalar_one_or_none() is None:
        raise AppException(
            409,
            "Quote modified by another process",
            ErrorCode.QUOTE_VERSION_CONFLICT,
        )

    db.add(
        QuoteStatusHistory(
            quote_id=q.id,
            from_status=from_status,
            to_status=to_status,
            reason=reason,
            triggered_by=actor.username,
        )
    )

    await emit_activity(
        db,
        actor_id=actor.id,
        actor_name=actor.username,
        code=ActivityCode.CHANGE_QUOTE_STATUS,
        actor_role=actor.display_role,
        target_name=q.quote_number,
        from_status=from_status.value,
        to_status=to_status.value,
    )

    await db.refresh(q)

    logger.info(
        "Quote status changed",
        extra={
            "quote_id": q.id,
            "from_status": from_status.value,
            "to_status": to_status.value,
        },
    )


# =====================================================
# STATUS CHANGE
# =====================================================
async def change_quote_status(
    db: AsyncSession,
    quote_id: int,
    to_status: QuoteStatus,
    version: int,
    actor,
    reason: str | None = None,
) -> QuoteOut:
    q = await get_quote_or_404(db, quote_id)

    await _apply_transition(db, q, QuoteStatus(to_status), version, actor, reason)

    await db.commit()
    return map_quote(q)


# =====================================================
# APPROVALS
# =====================================================
async def get_pending_approval(db: AsyncSession, quote_id: int) -> Approval | None:
    return await db.scalar(
        select(Approval)
        .where(
            Approval.quote_id == quote_id,
            Approval.status == ApprovalStatus.pending,
        )
        .order_by(Approval.id.desc())
        .limit(1)
    )


async def _ensure_can_decide(db: AsyncSession, approval: Approval, actor) -> None:
    """Levels with named approvers only accept decisions from them (or an admin)."""
    if approval.approval_level_id is None or actor.role == "admin":
        return

    level = await db.get(ApprovalLevel, approval.approval_level_id)
    if level and level.approvers and actor.id not in level.approvers:
        raise AppException(
            403,
            "You are not an approver for this quote",
            ErrorCode.APPROVER_NOT_ALLOWED,
        )


async def _decide(
    db: AsyncSession,
    quote_id: int,
    to_status: QuoteStatus,
    code: ActivityCode,
    version: int,
    actor,
    comments: str | None,
) -> QuoteOut:
    q = await get_quote_or_404(db, quote_id)

    await ensure_quote_actionable(db, q)

    approval = await get_pending_approval(db, q.id)
    if approval is not None:
        await _ensure_can_decide(db, approval, actor)

    await _apply_transition(db, q, to_status, version, actor, comments)

    if approval is not None:
        approval.status = (
            ApprovalStatus.approved if to_status == QuoteStatus.approved else ApprovalStatus.rejected
        )
        approval.approver_id = actor.id
        approval.approver_name = actor.username
        approval.decided_at = datetime.now(timezone.utc)
        if comments:
            approval.comments = comments

    await emit_activity(
        db,
        actor_id=actor.id,
        actor_name=actor.username,
        code=code,
        actor_role=actor.display_role,
        target_name=q.quote_number,
    )

    await db.commit()
    return map_quote(q)


async def approve_quote(
    db: AsyncSession,
    quote_id: int,
    version: int,
    actor,
    comments: str | None = None,
) -> QuoteOut:
    return await _decide(
        db, quote_id, QuoteStatus.approved, ActivityCode.APPROVE_QUOTE, version, actor, comments
    )


async def reject_quote(
    db: AsyncSession,
    quote_id: int,
    version: int,
    actor,
    comments: str | None = None,
) -> QuoteOut:
    return await _decide(
        db, quote_id, QuoteStatus.rejected, ActivityCode.REJECT_QUOTE, version, actor, comments
    )


# =====================================================
# SUPPLIER PROPOSALS
# =====================================================
async def register_proposal(
    db: AsyncSession,
    quote_id: int,
    actor,
) -> QuoteOut:
    q = await get_quote_or_404(db, quote_id)

    if q.status != QuoteStatus.receiving:
        raise AppException(
            409,
            "Quote is not receiving proposals",
            ErrorCode.QUOTE_INVALID_STATE,
        )

    result = await db.execute(
        update(Quote)
        .where(
            Quote.id == q.id,
            Quote.status == QuoteStatus.receiving,
            Quote.is_deleted.is_(False),
        )
        .values(
            responses_count=Quote.responses_count + 1,
            version=Quote.version + 1,
            updated_at=datetime.now(timezone.utc),
        )
        .returning(Quote.id)
        .execution_options(synchronize_session=False)
    )
    if result.scalar_one_or_none() is None:
        raise AppException(
            409,
            "Quote is no longer receiving proposals",
            ErrorCode.QUOTE_INVALID_STATE,
        )

    await db.refresh(q)

    await emit_activity(
        db,
        actor_id=actor.id,
        actor_name=actor.username,
        code=ActivityCode.REGISTER_PROPOSAL,
        actor_role=actor.display_role,
        target_name=q.quote_number,
        responses_count=q.responses_count,
        expected_count=q.suppliers_sent_count,
    )

    context = TransitionContext.from_counts(q.responses_count, q.suppliers_sent_count)
    suggestion = next_automatic_status(q.status, context)

    # under_review is not a table move from receiving; settle on received
    if suggestion is not None:
        logger.info(
            "All proposals received",
            extra={"quote_id": q.id, "suggested_status": suggestion.value},
        )
        await _apply_transition(
            db,
            q,
            QuoteStatus.received,
            q.version,
            actor,
            ALL_PROPOSALS_RECEIVED_REASON,
        )

    await db.commit()
    return map_quote(q)


# =====================================================
# READ HELPERS
# =====================================================
async def get_quote_transitions(
    db: AsyncSession,
    quote_id: int,
) -> QuoteTransitionsOut:
    q = await get_quote_or_404(db, quote_id)
    return QuoteTransitionsOut(
        quote_id=q.id,
        status=q.status,
        locked=is_locked(q.status),
        can_receive_actions=can_receive_actions(q.status),
        available_transitions=list(valid_transitions(q.status)),
        suggested_status=suggested_status_for(q),
    )


async def list_status_history(
    db: AsyncSession,
    quote_id: int,
) -> list[QuoteStatusHistoryOut]:
    await get_quote_or_404(db, quote_id)

    result = await db.execute(
        select(QuoteStatusHistory)
        .where(QuoteStatusHistory.quote_id == quote_id)
        .order_by(QuoteStatusHistory.id)
    )
    return [QuoteStatusHistoryOut.model_validate(h) for h in result.scalars().all()]


def describe_statuses() -> list[QuoteStatusInfo]:
    return [
        QuoteStatusInfo(
            value=status,
            label=get_status_label(status),
            color=get_status_color(status),
            locked=is_locked(status),
            terminal=is_terminal(status),
            transitions=list(valid_transitions(status)),
        )
        for status in QuoteStatus
    ]
