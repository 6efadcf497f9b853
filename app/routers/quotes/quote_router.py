from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.utils.check_roles import require_role
from app.utils.get_actor import get_current_actor
from app.utils.response import success_response, APIResponse, LIFECYCLE_ERROR_RESPONSES

from app.schemas.quotes.quote_schemas import (
    QuoteCreate,
    QuoteUpdate,
    QuoteOut,
    QuoteListData,
    QuoteStatusChange,
    QuoteDecision,
    QuoteTransitionsOut,
    QuoteStatusInfo,
    QuoteStatusHistoryOut,
)
from app.schemas.quotes.approval_schemas import (
    ApprovalSubmit,
    ApprovalSubmissionOut,
)

from app.services.quotes.quote_service import (
    create_quote,
    update_quote,
    delete_quote,
    get_quote,
    list_quotes,
)
from app.services.quotes.quote_status_service import (
    change_quote_status,
    approve_quote,
    reject_quote,
    register_proposal,
    get_quote_transitions,
    list_status_history,
    describe_statuses,
)
from app.services.quotes.approval_service import (
    submit_for_approval,
)

router = APIRouter(
    prefix="/quotes",
    tags=["Quotes"],
)

EDITOR_ROLES = ["admin", "manager", "client"]


@router.get(
    "/statuses",
    response_model=APIResponse[list[QuoteStatusInfo]],
)
async def list_quote_statuses_api(
    _=Depends(get_current_actor),
):
    return success_response(
        "Quote statuses retrieved successfully",
        describe_statuses(),
    )


@router.post(
    "",
    response_model=APIResponse[QuoteOut],
)
async def create_quote_api(
    payload: QuoteCreate,
    db: AsyncSession = Depends(get_db),
    actor=Depends(require_role(EDITOR_ROLES)),
):
    quote = await create_quote(db, payload, actor)
    return success_response(
        "Quote created successfully",
        quote,
    )


@router.get(
    "/",
    response_model=APIResponse[QuoteListData],
)
async def list_quotes_api(
    db: AsyncSession = Depends(get_db),
    _=Depends(get_current_actor),
    status: str | None = Query(None, description="Filter by status (e.g., draft, receiving)"),
    client_name: str | None = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    sort_by: str = Query("created_at"),
    order: str = Query("desc"),
):
    data = await list_quotes(
        db=db,
        status=status,
        client_name=client_name,
        page=page,
        page_size=page_size,
        sort_by=sort_by,
        order=order,
    )
    return success_response(
        "Quotes retrieved successfully",
        data,
    )


@router.get(
    "/{quote_id}",
    response_model=APIResponse[QuoteOut],
)
async def get_quote_api(
    quote_id: int,
    db: AsyncSession = Depends(get_db),
    _=Depends(get_current_actor),
):
    quote = await get_quote(db=db, quote_id=quote_id)
    return success_response(
        "Quote retrieved successfully",
        quote,
    )


@router.patch(
    "/{quote_id}",
    response_model=APIResponse[QuoteOut],
)
async def update_quote_api(
    quote_id: int,
    payload: QuoteUpdate,
    db: AsyncSession = Depends(get_db),
    actor=Depends(require_role(EDITOR_ROLES)),
):
    quote = await update_quote(
        db=db,
        quote_id=quote_id,
        payload=payload,
        actor=actor,
    )
    return success_response(
        "Quote updated successfully",
        quote,
    )


@router.delete(
    "/{quote_id}",
    response_model=APIResponse[QuoteOut],
)
async def delete_quote_api(
    quote_id: int,
    version: int = Query(...),
    db: AsyncSession = Depends(get_db),
    actor=Depends(require_role(["admin", "manager"])),
):
    quote = await delete_quote(
        db=db,
        quote_id=quote_id,
        version=version,
        actor=actor,
    )
    return success_response(
        "Quote deleted successfully",
        quote,
    )


# =====================================================
# LIFECYCLE
# =====================================================
@router.get(
    "/{quote_id}/transitions",
    response_model=APIResponse[QuoteTransitionsOut],
)
async def get_quote_transitions_api(
    quote_id: int,
    db: AsyncSession = Depends(get_db),
    _=Depends(get_current_actor),
):
    data = await get_quote_transitions(db, quote_id)
    return success_response(
        "Quote transitions retrieved successfully",
        data,
    )


@router.post(
    "/{quote_id}/status",
    response_model=APIResponse[QuoteOut],
    responses=LIFECYCLE_ERROR_RESPONSES,
)
async def change_quote_status_api(
    quote_id: int,
    payload: QuoteStatusChange,
    db: AsyncSession = Depends(get_db),
    actor=Depends(require_role(EDITOR_ROLES)),
):
    quote = await change_quote_status(
        db=db,
        quote_id=quote_id,
        to_status=payload.to_status,
        version=payload.version,
        actor=actor,
        reason=payload.reason,
    )
    return success_response(
        "Quote status updated successfully",
        quote,
    )


@router.post(
    "/{quote_id}/approve",
    response_model=APIResponse[QuoteOut],
    responses=LIFECYCLE_ERROR_RESPONSES,
)
async def approve_quote_api(
    quote_id: int,
    payload: QuoteDecision,
    db: AsyncSession = Depends(get_db),
    actor=Depends(require_role(EDITOR_ROLES)),
):
    quote = await approve_quote(
        db=db,
        quote_id=quote_id,
        version=payload.version,
        actor=actor,
        comments=payload.comments,
    )
    return success_response(
        "Quote approved successfully",
        quote,
    )


@router.post(
    "/{quote_id}/reject",
    response_model=APIResponse[QuoteOut],
    responses=LIFECYCLE_ERROR_RESPONSES,
)
async def reject_quote_api(
    quote_id: int,
    payload: QuoteDecision,
    db: AsyncSession = Depends(get_db),
    actor=Depends(require_role(EDITOR_ROLES)),
):
    quote = await reject_quote(
        db=db,
        quote_id=quote_id,
        version=payload.version,
        actor=actor,
        comments=payload.comments,
    )
    return success_response(
        "Quote rejected successfully",
        quote,
    )


@router.post(
    "/{quote_id}/proposals",
    response_model=APIResponse[QuoteOut],
    responses=LIFECYCLE_ERROR_RESPONSES,
)
async def register_proposal_api(
    quote_id: int,
    db: AsyncSession = Depends(get_db),
    actor=Depends(require_role(["admin", "supplier"])),
):
    quote = await register_proposal(db=db, quote_id=quote_id, actor=actor)
    return success_response(
        "Proposal registered successfully",
        quote,
    )


@router.get(
    "/{quote_id}/history",
    response_model=APIResponse[list[QuoteStatusHistoryOut]],
)
async def list_quote_history_api(
    quote_id: int,
    db: AsyncSession = Depends(get_db),
    _=Depends(get_current_actor),
):
    data = await list_status_history(db, quote_id)
    return success_response(
        "Quote status history retrieved successfully",
        data,
    )


@router.post(
    "/{quote_id}/submit-approval",
    response_model=APIResponse[ApprovalSubmissionOut],
    responses=LIFECYCLE_ERROR_RESPONSES,
)
async def submit_quote_for_approval_api(
    quote_id: int,
    payload: ApprovalSubmit,
    db: AsyncSession = Depends(get_db),
    actor=Depends(require_role(EDITOR_ROLES)),
):
    data = await submit_for_approval(
        db=db,
        quote_id=quote_id,
        version=payload.version,
        actor=actor,
        comments=payload.comments,
    )
    return success_response(
        "Quote submitted for approval",
        data,
    )
