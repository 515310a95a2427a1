from pydantic import BaseModel, Field, field_validator
from datetime import date, datetime
from decimal import Decimal
from typing import List, Literal, Optional

from rentflow.schemas.common import blank_to_none, validate_month

RentStatus = Literal["Pending", "Paid", "Overdue"]


class RentEntryDraft(BaseModel):
    """A rent row before it is bound to a period."""
    tenant_id: Optional[str] = None  # resolved (or created) from name + property when missing
    name: str = Field(..., min_length=1)
    property: str = Field(..., min_length=1)
    rent: Decimal = Field(..., ge=0)
    status: RentStatus = "Pending"
    payment_date: Optional[date] = None
    collected_by: Optional[str] = None
    payment_for_month: Optional[int] = None
    avatar: Optional[str] = None

    @field_validator("tenant_id", "collected_by", "avatar", "payment_date", mode="before")
    @classmethod
    def empty_strings_are_null(cls, v):
        return blank_to_none(v)


class RentEntryCreate(RentEntryDraft):
    year: int
    month: int

    @field_validator("month")
    @classmethod
    def month_in_range(cls, v):
        return validate_month(v)


class RentEntryBatchCreate(BaseModel):
    year: int
    month: int
    entries: List[RentEntryDraft] = []

    @field_validator("month")
    @classmethod
    def month_in_range(cls, v):
        return validate_month(v)


class RentEntryUpdate(RentEntryCreate):
    """Full record; due_date is recomputed from year/month."""
    tenant_id: str = Field(..., min_length=1)


class RentEntryOut(BaseModel):
    id: str
    tenant_id: str
    name: str
    property: str
    rent: Decimal
    due_date: date
    status: str
    avatar: Optional[str] = None
    year: int
    month: int
    payment_date: Optional[date] = None
    collected_by: Optional[str] = None
    payment_for_month: Optional[int] = None
    created_at: datetime
    deleted_at: Optional[datetime] = None

    class Config:
        from_attributes = True
