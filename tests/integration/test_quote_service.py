"""
Integration tests for quote CRUD against an in-memory database
"""

from decimal import Decimal

import pytest
from sqlalchemy import select

from app.core.exceptions import AppException
from app.constants.error_codes import ErrorCode
from app.models.enums.payment_status import PaymentStatus
from app.models.enums.quote_status import QuoteStatus
from app.models.payments.payment_models import Payment
from app.models.quotes.quote_models import Quote
from app.models.support.activity_models import ActivityLog
from app.schemas.quotes.quote_schemas import QuoteCreate, QuoteUpdate
from app.services.quotes.quote_status_service import approve_quote
from app.services.quotes import quote_service
from app.services.quotes.quote_service import (
    create_quote,
    delete_quote,
    get_quote,
    list_quotes,
    update_quote,
)


@pytest.mark.integration
class TestCreateQuote:

    @pytest.mark.asyncio
    async def test_new_quote_starts_in_draft(self, db, manager):
        quote = await create_quote(
            db,
            QuoteCreate(title="Troca de bombas", client_name="Condomínio Aurora", suppliers_sent_count=3),
            manager,
        )

        assert quote.status is QuoteStatus.draft
        assert quote.version == 1
        assert quote.quote_number == f"QT-{quote.id:06d}"
        assert quote.status_label == "Rascunho"
        assert quote.locked is False
        assert quote.available_transitions == [
            QuoteStatus.sent,
            QuoteStatus.awaiting_visit,
            QuoteStatus.cancelled,
        ]
        assert quote.suggested_status is None
        assert quote.created_by_id == manager.id

    @pytest.mark.asyncio
    async def test_creation_is_audited(self, db, manager):
        quote = await create_quote(db, QuoteCreate(title="Jardinagem", client_name="Aurora"), manager)

        messages = (await db.execute(select(ActivityLog.message))).scalars().all()
        assert messages == [f"Manager ({manager.username}) created quote {quote.quote_number}"]


@pytest.mark.integration
class TestReadQuotes:

    @pytest.mark.asyncio
    async def test_missing_quote_is_404(self, db):
        with pytest.raises(AppException) as exc:
            await get_quote(db, 999)
        assert exc.value.status_code == 404
        assert exc.value.error_code == ErrorCode.QUOTE_NOT_FOUND

    @pytest.mark.asyncio
    async def test_list_filters_by_status(self, db, make_quote):
        await make_quote(QuoteStatus.draft)
        receiving = await make_quote(QuoteStatus.receiving)
        await make_quote(QuoteStatus.approved)

        data = await list_quotes(db, status="receiving")

        assert data.total == 1
        assert [item.id for item in data.items] == [receiving.id]
        assert data.items[0].status_label == "Recebendo Propostas"

    @pytest.mark.asyncio
    async def test_list_rejects_unknown_status(self, db):
        with pytest.raises(AppException) as exc:
            await list_quotes(db, status="paid")
        assert exc.value.status_code == 400

    @pytest.mark.asyncio
    async def test_list_paginates(self, db, make_quote):
        for _ in range(5):
            await make_quote()

        data = await list_quotes(db, page=2, page_size=2, sort_by="quote_number", order="asc")

        assert data.total == 5
        assert len(data.items) == 2
        assert data.items[0].quote_number < data.items[1].quote_number


@pytest.mark.integration
class TestUpdateQuote:

    @pytest.mark.asyncio
    async def test_update_bumps_version(self, db, make_quote, manager):
        q = await make_quote(QuoteStatus.received)

        quote = await update_quote(
            db, q.id, QuoteUpdate(title="Nova descrição", total_amount=Decimal("1500.00"), version=1), manager
        )

        assert quote.title == "Nova descrição"
        assert quote.total_amount == Decimal("1500.00")
        assert quote.version == 2
        assert quote.updated_by_name == manager.username

    @pytest.mark.asyncio
    async def test_update_without_changes_is_noop(self, db, make_quote, manager):
        q = await make_quote()

        quote = await update_quote(db, q.id, QuoteUpdate(title=q.title, version=1), manager)

        assert quote.version == 1

    @pytest.mark.asyncio
    async def test_stale_version_conflicts(self, db, make_quote, manager):
        q = await make_quote()

        with pytest.raises(AppException) as exc:
            await update_quote(db, q.id, QuoteUpdate(title="x", version=7), manager)
        assert exc.value.error_code == ErrorCode.QUOTE_VERSION_CONFLICT

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [QuoteStatus.approved, QuoteStatus.finalized, QuoteStatus.trash])
    async def test_locked_quotes_cannot_be_edited(self, db, make_quote, manager, status):
        q = await make_quote(status)

        with pytest.raises(AppException) as exc:
            await update_quote(db, q.id, QuoteUpdate(title="x", version=1), manager)
        assert exc.value.status_code == 409
        assert exc.value.error_code == ErrorCode.QUOTE_LOCKED

    @pytest.mark.asyncio
    async def test_paid_payment_locks_quote(self, db, make_quote, manager):
        q = await make_quote(QuoteStatus.under_review)
        db.add(Payment(quote_id=q.id, amount=Decimal("10.00"), status=PaymentStatus.paid))
        await db.commit()

        with pytest.raises(AppException) as exc:
            await update_quote(db, q.id, QuoteUpdate(title="x", version=1), manager)
        assert exc.value.error_code == ErrorCode.QUOTE_LOCKED


@pytest.mark.integration
class TestDeleteQuote:

    @pytest.mark.asyncio
    async def test_draft_can_be_deleted(self, db, make_quote, manager):
        q = await make_quote()

        await delete_quote(db, q.id, 1, manager)

        with pytest.raises(AppException):
            await get_quote(db, q.id)

    @pytest.mark.asyncio
    async def test_only_drafts_can_be_deleted(self, db, make_quote, manager):
        q = await make_quote(QuoteStatus.sent)

        with pytest.raises(AppException) as exc:
            await delete_quote(db, q.id, 1, manager)
        assert exc.value.error_code == ErrorCode.QUOTE_CANNOT_DELETE


@pytest.mark.integration
class TestConcurrentEdits:

    @staticmethod
    def _interleave(monkeypatch, action):
        """Run ``action`` once, between the edit's guard checks and its write."""
        original = quote_service.has_paid_payment
        fired = []

        async def _check_then_interfere(db, quote_id):
            if not fired:
                fired.append(quote_id)
                await action(quote_id)
            return await original(db, quote_id)

        monkeypatch.setattr(quote_service, "has_paid_payment", _check_then_interfere)
        return fired

    @pytest.mark.asyncio
    async def test_approval_landing_before_the_write_blocks_the_edit(
        self, db, session_factory, make_quote, manager, monkeypatch
    ):
        q = await make_quote(QuoteStatus.pending_approval)

        async def approve_elsewhere(quote_id):
            async with session_factory() as other:
                await approve_quote(other, quote_id, 1, manager)

        fired = self._interleave(monkeypatch, approve_elsewhere)

        with pytest.raises(AppException) as exc:
            await update_quote(db, q.id, QuoteUpdate(title="Edited after approval", version=1), manager)

        assert fired == [q.id]
        assert exc.value.status_code == 409
        assert exc.value.error_code == ErrorCode.QUOTE_LOCKED

        await db.rollback()
        stored = await db.get(Quote, q.id, populate_existing=True)
        assert stored.status is QuoteStatus.approved
        assert stored.title == q.title
        assert stored.version == 2

    @pytest.mark.asyncio
    async def test_concurrent_edit_with_same_version_conflicts(
        self, db, session_factory, make_quote, manager, monkeypatch
    ):
        q = await make_quote(QuoteStatus.received)

        async def edit_elsewhere(quote_id):
            async with session_factory() as other:
                await update_quote(other, quote_id, QuoteUpdate(title="First writer", version=1), manager)

        self._interleave(monkeypatch, edit_elsewhere)

        with pytest.raises(AppException) as exc:
            await update_quote(db, q.id, QuoteUpdate(title="Second writer", version=1), manager)
        assert exc.value.error_code == ErrorCode.QUOTE_VERSION_CONFLICT

        await db.rollback()
        stored = await db.get(Quote, q.id, populate_existing=True)
        assert stored.title == "First writer"
        assert stored.version == 2
