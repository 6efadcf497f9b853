from apscheduler.schedulers.asyncio import AsyncIOScheduler
from app.core.config import VISIT_OVERDUE_JOB_HOUR, VISIT_OVERDUE_JOB_MINUTE
from app.core.db import AsyncSessionLocal

from app.services.quotes.visit_overdue_service import auto_mark_visits_overdue

scheduler = AsyncIOScheduler()


@scheduler.scheduled_job(
    "cron",
    id="visit_overdue",
    hour=VISIT_OVERDUE_JOB_HOUR,
    minute=VISIT_OVERDUE_JOB_MINUTE,
)  # daily, 00:15 by default
async def visit_overdue_job():
    async with AsyncSessionLocal() as db:
        await auto_mark_visits_overdue(db)
