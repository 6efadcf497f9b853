# app/services/support/activity_service.py

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, desc, asc

from app.models.support.activity_models import ActivityLog
from app.schemas.support.activity_schemas import (
    ActivityOut,
    ActivityFilters,
    ActivityListData,
)
from app.core.exceptions import AppException
from app.constants.error_codes import ErrorCode
from app.utils.logger import get_logger

logger = get_logger(__name__)

ALLOWED_SORT_FIELDS = {
    "created_at": ActivityLog.created_at,
    "actor_name": ActivityLog.actor_name_snapshot,
}


async def list_activities(
    *,
    db: AsyncSession,
    filters: ActivityFilters,
) -> ActivityListData:
    sort_column = ALLOWED_SORT_FIELDS.get(filters.sort_by)
    if sort_column is None:
        raise AppException(
            400,
            "Invalid sort field",
            ErrorCode.VALIDATION_ERROR,
        )

    # -------------------------
    # Filters
    # -------------------------
    conditions = []
    if filters.actor_id:
        conditions.append(ActivityLog.actor_id == filters.actor_id)

    if filters.actor_name:
        conditions.append(
            ActivityLog.actor_name_snapshot.ilike(f"%{filters.actor_name}%")
        )

    query = select(ActivityLog).where(*conditions)
    count_query = select(func.count(ActivityLog.id)).where(*conditions)

    # -------------------------
    # Sorting + pagination
    # -------------------------
    order_fn = desc if filters.sort_order == "desc" else asc
    query = (
        query
        .order_by(order_fn(sort_column), order_fn(ActivityLog.id))
        .limit(filters.page_size)
        .offset((filters.page - 1) * filters.page_size)
    )

    total = await db.scalar(count_query)
    result = await db.execute(query)
    activities = result.scalars().all()

    logger.info(
        "Activities fetched",
        extra={
            "total": total,
            "page": filters.page,
            "page_size": filters.page_size,
        },
    )

    return ActivityListData(
        total=total or 0,
        items=[ActivityOut.model_validate(a) for a in activities],
    )
