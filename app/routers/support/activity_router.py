# app/routers/support/activity_router.py

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.schemas.support.activity_schemas import ActivityFilters, ActivityListData
from app.services.support.activity_service import list_activities
from app.utils.check_roles import require_role
from app.utils.response import success_response, APIResponse
from app.utils.logger import get_logger

router = APIRouter(prefix="/activities", tags=["Activities"])
logger = get_logger(__name__)


@router.get("/", response_model=APIResponse[ActivityListData])
async def list_activities_api(
    db: AsyncSession = Depends(get_db),
    _=Depends(require_role(["admin"])),
    actor_id: str | None = Query(None),
    actor_name: str | None = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    sort_by: str = Query("created_at"),
    sort_order: str = Query("desc"),
):
    filters = ActivityFilters(
        actor_id=actor_id,
        actor_name=actor_name,
        page=page,
        page_size=page_size,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    logger.info(
        "List activities requested",
        extra=filters.model_dump(exclude_none=True),
    )

    result = await list_activities(db=db, filters=filters)

    return success_response(
        "Activities fetched successfully",
        result,
    )
