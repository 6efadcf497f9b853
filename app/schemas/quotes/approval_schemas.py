from pydantic import BaseModel, Field
from typing import List, Optional
from decimal import Decimal
from datetime import datetime

from app.models.enums.approval_status import ApprovalStatus
from app.schemas.quotes.quote_schemas import QuoteOut

# =====================================================
# APPROVAL LEVELS
# =====================================================

class ApprovalLevelCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=150)
    client_name: Optional[str] = Field(None, max_length=255)
    amount_threshold: Decimal = Field(..., ge=0)
    order_level: int = Field(1, ge=1)
    approvers: List[str] = Field(default_factory=list)
    active: bool = True


class ApprovalLevelUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=150)
    amount_threshold: Optional[Decimal] = Field(None, ge=0)
    order_level: Optional[int] = Field(None, ge=1)
    approvers: Optional[List[str]] = None
    active: Optional[bool] = None


class ApprovalLevelOut(BaseModel):
    id: int
    name: str
    client_name: Optional[str]
    amount_threshold: Decimal
    order_level: int
    approvers: List[str]
    active: bool
    created_at: datetime
    updated_at: Optional[datetime]

    model_config = {"from_attributes": True}


# =====================================================
# APPROVALS
# =====================================================

class ApprovalSubmit(BaseModel):
    version: int
    comments: Optional[str] = None


class ApprovalDecisionIn(BaseModel):
    comments: Optional[str] = None


class ApprovalOut(BaseModel):
    id: int
    quote_id: int
    approval_level_id: Optional[int]
    status: ApprovalStatus
    amount: Decimal
    requested_by_id: Optional[str]
    requested_by_name: str
    approver_id: Optional[str]
    approver_name: Optional[str]
    comments: Optional[str]
    decided_at: Optional[datetime]
    created_at: datetime

    model_config = {"from_attributes": True}


class ApprovalListData(BaseModel):
    total: int
    items: List[ApprovalOut]


class ApprovalSubmissionOut(BaseModel):
    auto_approved: bool
    quote: QuoteOut
    approval: Optional[ApprovalOut] = None
    level: Optional[ApprovalLevelOut] = None
