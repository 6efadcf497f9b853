from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.models.enums.approval_status import ApprovalStatus
from app.utils.check_roles import require_role
from app.utils.get_actor import get_current_actor
from app.utils.response import success_response, APIResponse, LIFECYCLE_ERROR_RESPONSES

from app.schemas.quotes.approval_schemas import (
    ApprovalLevelCreate,
    ApprovalLevelUpdate,
    ApprovalLevelOut,
    ApprovalDecisionIn,
    ApprovalOut,
    ApprovalListData,
)

from app.services.quotes.approval_service import (
    create_approval_level,
    list_approval_levels,
    update_approval_level,
    get_approval,
    list_approvals,
    decide_approval,
)

router = APIRouter(
    prefix="/approvals",
    tags=["Approvals"],
)

LEVEL_ADMIN_ROLES = ["admin", "manager"]
DECISION_ROLES = ["admin", "manager", "client"]


# =====================================================
# APPROVAL LEVELS
# =====================================================
@router.post(
    "/levels",
    response_model=APIResponse[ApprovalLevelOut],
)
async def create_approval_level_api(
    payload: ApprovalLevelCreate,
    db: AsyncSession = Depends(get_db),
    actor=Depends(require_role(LEVEL_ADMIN_ROLES)),
):
    level = await create_approval_level(db, payload, actor)
    return success_response("Approval level created successfully", level)


@router.get(
    "/levels",
    response_model=APIResponse[list[ApprovalLevelOut]],
)
async def list_approval_levels_api(
    db: AsyncSession = Depends(get_db),
    _=Depends(get_current_actor),
    client_name: str | None = Query(None),
    active: bool | None = Query(None),
):
    levels = await list_approval_levels(db, client_name=client_name, active=active)
    return success_response("Approval levels retrieved successfully", levels)


@router.patch(
    "/levels/{level_id}",
    response_model=APIResponse[ApprovalLevelOut],
)
async def update_approval_level_api(
    level_id: int,
    payload: ApprovalLevelUpdate,
    db: AsyncSession = Depends(get_db),
    actor=Depends(require_role(LEVEL_ADMIN_ROLES)),
):
    level = await update_approval_level(db, level_id, payload, actor)
    return success_response("Approval level updated successfully", level)


# =====================================================
# APPROVAL REQUESTS
# =====================================================
@router.get(
    "/",
    response_model=APIResponse[ApprovalListData],
)
async def list_approvals_api(
    db: AsyncSession = Depends(get_db),
    _=Depends(get_current_actor),
    quote_id: int | None = Query(None),
    status: ApprovalStatus | None = Query(None),
    approver_id: str | None = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
):
    data = await list_approvals(
        db,
        quote_id=quote_id,
        status=status,
        approver_id=approver_id,
        page=page,
        page_size=page_size,
    )
    return success_response("Approvals retrieved successfully", data)


@router.get(
    "/{approval_id}",
    response_model=APIResponse[ApprovalOut],
)
async def get_approval_api(
    approval_id: int,
    db: AsyncSession = Depends(get_db),
    _=Depends(get_current_actor),
):
    approval = await get_approval(db, approval_id)
    return success_response("Approval retrieved successfully", approval)


@router.post(
    "/{approval_id}/approve",
    response_model=APIResponse[ApprovalOut],
    responses=LIFECYCLE_ERROR_RESPONSES,
)
async def approve_approval_api(
    approval_id: int,
    payload: ApprovalDecisionIn,
    db: AsyncSession = Depends(get_db),
    actor=Depends(require_role(DECISION_ROLES)),
):
    approval = await decide_approval(db, approval_id, True, actor, payload.comments)
    return success_response("Quote approved successfully", approval)


@router.post(
    "/{approval_id}/reject",
    response_model=APIResponse[ApprovalOut],
    responses=LIFECYCLE_ERROR_RESPONSES,
)
async def reject_approval_api(
    approval_id: int,
    payload: ApprovalDecisionIn,
    db: AsyncSession = Depends(get_db),
    actor=Depends(require_role(DECISION_ROLES)),
):
    approval = await decide_approval(db, approval_id, False, actor, payload.comments)
    return success_response("Quote rejected successfully", approval)
