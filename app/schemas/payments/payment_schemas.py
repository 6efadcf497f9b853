from pydantic import BaseModel, Field
from datetime import datetime
from decimal import Decimal
from typing import Optional, List

from app.models.enums.payment_status import PaymentStatus


# =========================
# IN
# =========================
class PaymentCreate(BaseModel):
    quote_id: int
    amount: Decimal = Field(..., gt=0)
    payment_method: Optional[str] = Field(None, max_length=50)


class PaymentStatusUpdate(BaseModel):
    status: PaymentStatus


# =========================
# OUT
# =========================
class PaymentOut(BaseModel):
    id: int
    quote_id: int
    amount: Decimal
    payment_method: Optional[str]
    status: PaymentStatus
    created_at: datetime
    updated_at: Optional[datetime]

    model_config = {"from_attributes": True}


# =========================
# LIST DATA
# =========================
class PaymentListData(BaseModel):
    total: int
    items: List[PaymentOut]
