from pydantic import BaseModel, Field, field_validator
from datetime import date, datetime
from decimal import Decimal
from typing import List, Literal, Optional

from rentflow.schemas.common import blank_to_none


class WorkDetailBase(BaseModel):
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    category: Optional[str] = None
    status: Literal["To Do", "In Progress", "Completed"] = "To Do"
    assigned_to_id: Optional[str] = None
    product_cost: Optional[Decimal] = None
    worker_cost: Optional[Decimal] = None
    due_date: Optional[date] = None

    @field_validator(
        "description", "category", "assigned_to_id", "product_cost", "worker_cost", "due_date",
        mode="before",
    )
    @classmethod
    def empty_strings_are_null(cls, v):
        return blank_to_none(v)


class WorkDetailCreate(WorkDetailBase):
    pass


class WorkDetailUpdate(WorkDetailBase):
    pass


class WorkDetailBatchCreate(BaseModel):
    work_details: List[WorkDetailCreate] = []


class WorkDetailOut(WorkDetailBase):
    id: str
    created_at: datetime
    deleted_at: Optional[datetime] = None

    class Config:
        from_attributes = True
