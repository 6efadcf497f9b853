# app/schemas/support/activity_schemas.py

from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class ActivityFilters(BaseModel):
    actor_id: Optional[str] = None
    actor_name: Optional[str] = None

    page: int = Field(1, ge=1)
    page_size: int = Field(20, ge=1, le=100)

    sort_by: str = "created_at"
    sort_order: str = "desc"


class ActivityOut(BaseModel):
    id: int
    actor_id: Optional[str]
    actor_name_snapshot: str
    message: str
    created_at: datetime

    model_config = {"from_attributes": True}


class ActivityListData(BaseModel):
    total: int
    items: list[ActivityOut]
