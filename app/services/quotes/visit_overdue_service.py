from datetime import date
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.quotes.quote_models import QuoteStatusHistory
from app.models.enums.quote_status import QuoteStatus
from app.utils.activity_helpers import emit_activity
from app.utils.get_actor import SYSTEM_ACTOR
from app.constants.activity_codes import ActivityCode
from app.services.quotes.visit_overdue_core import (
    OVERDUE_SOURCE_STATUS,
    _mark_visit_overdue_stmt,
)

logger = logging.getLogger(__name__)


async def auto_mark_visits_overdue(db: AsyncSession, today: date | None = None) -> int:
    today = today or date.today()

    stmt = _mark_visit_overdue_stmt(today, updated_by_name=SYSTEM_ACTOR.username)
    if stmt is None:
        return 0

    result = await db.execute(stmt)
    overdue = result.all()

    if not overdue:
        return 0

    for row in overdue:
        db.add(
            QuoteStatusHistory(
                quote_id=row.id,
                from_status=OVERDUE_SOURCE_STATUS,
                to_status=QuoteStatus.visit_overdue,
                reason=f"Visit date {row.visit_date} passed",
                triggered_by=SYSTEM_ACTOR.username,
            )
        )
        await emit_activity(
            db,
            actor_id=SYSTEM_ACTOR.id,
            actor_name=SYSTEM_ACTOR.username,
            code=ActivityCode.MARK_VISIT_OVERDUE,
            actor_role=SYSTEM_ACTOR.display_role,
            target_name=row.quote_number,
            changes=f"visit planned for {row.visit_date}, checked on {today}",
        )

    await db.commit()

    logger.info("Visits marked overdue", extra={"count": len(overdue)})
    return len(overdue)
