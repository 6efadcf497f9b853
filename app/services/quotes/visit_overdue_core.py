from datetime import date, datetime, timezone

from sqlalchemy import update

from app.models.quotes.quote_models import Quote
from app.models.enums.quote_status import QuoteStatus
from app.services.quotes.status_machine import is_valid_transition

OVERDUE_SOURCE_STATUS = QuoteStatus.visit_scheduled


def _mark_visit_overdue_stmt(today: date, updated_by_name: str = "system"):
    if not is_valid_transition(OVERDUE_SOURCE_STATUS, QuoteStatus.visit_overdue):
        return None

    return (
        update(Quote)
        .where(
            Quote.status == OVERDUE_SOURCE_STATUS,
            Quote.is_deleted.is_(False),
            Quote.visit_date.isnot(None),
            Quote.visit_date < today,
        )
        .values(
            status=QuoteStatus.visit_overdue,
            version=Quote.version + 1,
            updated_by_id=None,
            updated_by_name=updated_by_name,
            updated_at=datetime.now(timezone.utc),
        )
        .returning(Quote.id, Quote.quote_number, Quote.visit_date)
        .execution_options(synchronize_session=False)
    )
