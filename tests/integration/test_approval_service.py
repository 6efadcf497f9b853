"""
Integration tests for amount-based approval routing
"""

from decimal import Decimal

import pytest
from sqlalchemy import select

from app.core.exceptions import AppException, TransitionNotAllowed
from app.constants.error_codes import ErrorCode
from app.models.enums.approval_status import ApprovalStatus
from app.models.enums.quote_status import QuoteStatus
from app.models.quotes.quote_models import Quote
from app.models.support.activity_models import ActivityLog
from app.schemas.quotes.approval_schemas import ApprovalLevelCreate, ApprovalLevelUpdate
from app.services.quotes.approval_service import (
    AUTO_APPROVAL_REASON,
    create_approval_level,
    decide_approval,
    find_approval_level,
    list_approval_levels,
    list_approvals,
    submit_for_approval,
    update_approval_level,
)
from app.services.quotes.quote_status_service import approve_quote, list_status_history
from app.utils.get_actor import Actor


@pytest.fixture
def board_member():
    return Actor(id="user-board-7", username="conselho@condominio.test", role="client")


@pytest.fixture
def make_priced_quote(session_factory, make_quote):
    async def _make(amount: str, status: QuoteStatus = QuoteStatus.received):
        q = await make_quote(status)
        async with session_factory() as session:
            stored = await session.get(Quote, q.id)
            stored.total_amount = Decimal(amount)
            await session.commit()
        return q

    return _make


@pytest.fixture
def make_level(db, manager):
    async def _make(name: str, threshold: str, approvers=None, client_name=None, active=True):
        return await create_approval_level(
            db,
            ApprovalLevelCreate(
                name=name,
                amount_threshold=Decimal(threshold),
                approvers=approvers or [],
                client_name=client_name,
                active=active,
            ),
            manager,
        )

    return _make


@pytest.mark.integration
class TestLevelSelection:

    @pytest.mark.asyncio
    async def test_highest_threshold_not_above_amount_wins(self, db, make_level):
        await make_level("Síndico", "1000")
        await make_level("Conselho", "5000")
        await make_level("Assembleia", "20000")

        level = await find_approval_level(db, "Aurora", Decimal("7500"))

        assert level.name == "Conselho"

    @pytest.mark.asyncio
    async def test_below_every_threshold_has_no_level(self, db, make_level):
        await make_level("Síndico", "1000")

        assert await find_approval_level(db, "Aurora", Decimal("999.99")) is None

    @pytest.mark.asyncio
    async def test_inactive_and_foreign_levels_are_ignored(self, db, make_level):
        await make_level("Inativo", "100", active=False)
        await make_level("Outro condomínio", "100", client_name="Outro")
        await make_level("Aurora", "50", client_name="Aurora")

        level = await find_approval_level(db, "Aurora", Decimal("500"))

        assert level.name == "Aurora"

    @pytest.mark.asyncio
    async def test_list_and_update_levels(self, db, make_level, manager):
        created = await make_level("Síndico", "1000")

        updated = await update_approval_level(
            db, created.id, ApprovalLevelUpdate(active=False, approvers=["user-board-7"]), manager
        )

        assert updated.active is False
        assert updated.approvers == ["user-board-7"]
        assert await list_approval_levels(db, active=True) == []


@pytest.mark.integration
class TestSubmitForApproval:

    @pytest.mark.asyncio
    async def test_without_matching_level_the_quote_is_auto_approved(self, db, make_priced_quote, manager):
        q = await make_priced_quote("800.00")

        result = await submit_for_approval(db, q.id, 1, manager)

        assert result.auto_approved is True
        assert result.approval is None
        assert result.quote.status is QuoteStatus.approved
        assert result.quote.version == 2

        history = await list_status_history(db, q.id)
        assert history[-1].reason == AUTO_APPROVAL_REASON
        assert (await list_approvals(db, quote_id=q.id)).total == 0

    @pytest.mark.asyncio
    async def test_matching_level_records_a_pending_approval(
        self, db, make_priced_quote, make_level, manager, board_member
    ):
        level = await make_level("Conselho", "5000", approvers=[board_member.id, "user-board-8"])
        q = await make_priced_quote("12000.00")

        result = await submit_for_approval(db, q.id, 1, manager, comments="Reforma do telhado")

        assert result.auto_approved is False
        assert result.quote.status is QuoteStatus.pending_approval
        assert result.level.id == level.id
        assert result.approval.status is ApprovalStatus.pending
        assert result.approval.amount == Decimal("12000.00")
        assert result.approval.approver_id == board_member.id
        assert result.approval.requested_by_name == manager.username
        assert result.approval.comments == "Reforma do telhado"

        messages = (await db.execute(select(ActivityLog.message).order_by(ActivityLog.id))).scalars().all()
        assert messages[-1] == (
            f"Manager ({manager.username}) requested approval of quote "
            f"{q.quote_number} (12000.00) at level Conselho"
        )

    @pytest.mark.asyncio
    async def test_quote_without_total_cannot_be_submitted(self, db, make_quote, manager):
        q = await make_quote(QuoteStatus.received)

        with pytest.raises(AppException) as exc:
            await submit_for_approval(db, q.id, 1, manager)
        assert exc.value.error_code == ErrorCode.QUOTE_INVALID_STATE

    @pytest.mark.asyncio
    async def test_submission_follows_the_transition_table(self, db, make_priced_quote, make_level, manager):
        await make_level("Síndico", "100")
        q = await make_priced_quote("500.00", status=QuoteStatus.receiving)

        with pytest.raises(TransitionNotAllowed):
            await submit_for_approval(db, q.id, 1, manager)

        await db.rollback()
        assert (await list_approvals(db, quote_id=q.id)).total == 0

    @pytest.mark.asyncio
    async def test_second_submission_is_refused_while_pending(self, db, make_priced_quote, make_level, manager):
        await make_level("Síndico", "100")
        q = await make_priced_quote("500.00")
        first = await submit_for_approval(db, q.id, 1, manager)

        with pytest.raises(AppException) as exc:
            await submit_for_approval(db, q.id, first.quote.version, manager)
        assert exc.value.error_code == ErrorCode.APPROVAL_ALREADY_PENDING

    @pytest.mark.asyncio
    async def test_stale_version_conflicts(self, db, make_priced_quote, manager):
        q = await make_priced_quote("10.00")

        with pytest.raises(AppException) as exc:
            await submit_for_approval(db, q.id, 9, manager)
        assert exc.value.error_code == ErrorCode.QUOTE_VERSION_CONFLICT


@pytest.mark.integration
class TestDecideApproval:

    @pytest.mark.asyncio
    async def test_named_approver_approves(self, db, make_priced_quote, make_level, manager, board_member):
        await make_level("Conselho", "5000", approvers=[board_member.id])
        q = await make_priced_quote("6000.00")
        submitted = await submit_for_approval(db, q.id, 1, manager)

        approval = await decide_approval(db, submitted.approval.id, True, board_member, comments="De acordo")

        assert approval.status is ApprovalStatus.approved
        assert approval.approver_id == board_member.id
        assert approval.approver_name == board_member.username
        assert approval.comments == "De acordo"
        assert approval.decided_at is not None

        stored = await db.get(Quote, q.id, populate_existing=True)
        assert stored.status is QuoteStatus.approved

    @pytest.mark.asyncio
    async def test_rejection_closes_the_request(self, db, make_priced_quote, make_level, manager, board_member):
        await make_level("Conselho", "5000", approvers=[board_member.id])
        q = await make_priced_quote("6000.00")
        submitted = await submit_for_approval(db, q.id, 1, manager)

        approval = await decide_approval(db, submitted.approval.id, False, board_member, comments="Caro demais")

        assert approval.status is ApprovalStatus.rejected
        stored = await db.get(Quote, q.id, populate_existing=True)
        assert stored.status is QuoteStatus.rejected

        with pytest.raises(AppException) as exc:
            await decide_approval(db, submitted.approval.id, True, board_member)
        assert exc.value.error_code == ErrorCode.APPROVAL_INVALID_STATE

    @pytest.mark.asyncio
    async def test_only_named_approvers_decide(self, db, make_priced_quote, make_level, manager, board_member):
        await make_level("Conselho", "5000", approvers=[board_member.id])
        q = await make_priced_quote("6000.00")
        submitted = await submit_for_approval(db, q.id, 1, manager)

        with pytest.raises(AppException) as exc:
            await decide_approval(db, submitted.approval.id, True, manager)
        assert exc.value.status_code == 403
        assert exc.value.error_code == ErrorCode.APPROVER_NOT_ALLOWED

        admin = Actor(id="user-admin-1", username="admin@plataforma.test", role="admin")
        approval = await decide_approval(db, submitted.approval.id, True, admin)
        assert approval.status is ApprovalStatus.approved

    @pytest.mark.asyncio
    async def test_direct_approval_also_resolves_the_request(
        self, db, make_priced_quote, make_level, manager
    ):
        await make_level("Síndico", "100")
        q = await make_priced_quote("500.00")
        submitted = await submit_for_approval(db, q.id, 1, manager)

        await approve_quote(db, q.id, submitted.quote.version, manager)

        pending = await list_approvals(db, quote_id=q.id, status=ApprovalStatus.pending)
        assert pending.total == 0
        approved = await list_approvals(db, quote_id=q.id, status=ApprovalStatus.approved)
        assert approved.items[0].approver_id == manager.id

    @pytest.mark.asyncio
    async def test_missing_approval_is_404(self, db, manager):
        with pytest.raises(AppException) as exc:
            await decide_approval(db, 404, True, manager)
        assert exc.value.error_code == ErrorCode.APPROVAL_NOT_FOUND
