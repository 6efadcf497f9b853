from pydantic import BaseModel, Field
from typing import List, Optional
from decimal import Decimal
from datetime import datetime, date

from app.models.enums.quote_status import QuoteStatus

# =====================================================
# QUOTE CREATE / UPDATE
# =====================================================

class QuoteCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    client_name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    suppliers_sent_count: int = Field(0, ge=0)
    visit_date: Optional[date] = None
    total_amount: Optional[Decimal] = Field(None, ge=0)


class QuoteUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    client_name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    suppliers_sent_count: Optional[int] = Field(None, ge=0)
    visit_date: Optional[date] = None
    total_amount: Optional[Decimal] = Field(None, ge=0)
    version: int


# =====================================================
# STATUS ACTIONS
# =====================================================

class QuoteStatusChange(BaseModel):
    to_status: QuoteStatus
    version: int
    reason: Optional[str] = None


class QuoteDecision(BaseModel):
    version: int
    comments: Optional[str] = None


# =====================================================
# QUOTE RESPONSES
# =====================================================

class QuoteOut(BaseModel):
    id: int
    quote_number: str
    title: str
    description: Optional[str]
    client_name: str

    status: QuoteStatus
    status_label: str
    locked: bool
    can_receive_actions: bool
    available_transitions: List[QuoteStatus]
    suggested_status: Optional[QuoteStatus]

    suppliers_sent_count: int
    responses_count: int
    visit_date: Optional[date]
    total_amount: Optional[Decimal]

    version: int

    created_by_id: Optional[str]
    updated_by_id: Optional[str]
    created_by_name: Optional[str]
    updated_by_name: Optional[str]

    created_at: datetime
    updated_at: Optional[datetime]


class QuoteListItem(BaseModel):
    id: int
    quote_number: str
    title: str
    client_name: str
    status: QuoteStatus
    status_label: str
    locked: bool
    responses_count: int
    suppliers_sent_count: int
    total_amount: Optional[Decimal]
    version: int
    created_at: datetime


class QuoteListData(BaseModel):
    total: int
    items: List[QuoteListItem]


# =====================================================
# STATUS CATALOG / HISTORY
# =====================================================

class QuoteTransitionsOut(BaseModel):
    quote_id: int
    status: QuoteStatus
    locked: bool
    can_receive_actions: bool
    available_transitions: List[QuoteStatus]
    suggested_status: Optional[QuoteStatus]


class QuoteStatusInfo(BaseModel):
    value: QuoteStatus
    label: str
    color: str
    locked: bool
    terminal: bool
    transitions: List[QuoteStatus]


class QuoteStatusHistoryOut(BaseModel):
    id: int
    quote_id: int
    from_status: QuoteStatus
    to_status: QuoteStatus
    reason: Optional[str]
    triggered_by: str
    created_at: datetime

    model_config = {"from_attributes": True}
