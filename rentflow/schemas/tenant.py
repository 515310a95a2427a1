from pydantic import BaseModel, Field, field_validator
from datetime import date, datetime
from decimal import Decimal
from typing import List, Literal, Optional

from rentflow.schemas.common import blank_to_none

DEFAULT_AVATAR = "https://placehold.co/80x80.png"

KYC_FIELDS = (
    "phone",
    "notes",
    "type",
    "father_name",
    "address",
    "date_of_birth",
    "nid_number",
    "advance_deposit",
    "gas_meter_number",
    "electric_meter_number",
)


class TenantBase(BaseModel):
    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=1)
    phone: Optional[str] = None
    property: str = Field(..., min_length=1)  # flat / unit label
    rent: Decimal = Field(..., ge=0)
    join_date: date
    notes: Optional[str] = None
    status: Literal["Active", "Paid", "Overdue"] = "Active"
    avatar: str = DEFAULT_AVATAR
    type: Optional[str] = None

    # KYC
    father_name: Optional[str] = None
    address: Optional[str] = None
    date_of_birth: Optional[date] = None
    nid_number: Optional[str] = None
    advance_deposit: Optional[Decimal] = None
    gas_meter_number: Optional[str] = None
    electric_meter_number: Optional[str] = None

    documents: List[str] = []

    @field_validator(*KYC_FIELDS, mode="before")
    @classmethod
    def empty_strings_are_null(cls, v):
        return blank_to_none(v)

    @field_validator("avatar", mode="before")
    @classmethod
    def default_avatar(cls, v):
        return blank_to_none(v) or DEFAULT_AVATAR


class TenantCreate(TenantBase):
    pass


class TenantUpdate(TenantBase):
    """Full record; every mutable field is written."""
    pass


class TenantOut(TenantBase):
    id: str
    created_at: datetime
    updated_at: datetime
    deleted_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TenantWriteOut(BaseModel):
    """Primary write result plus any best-effort follow-up failures."""
    tenant: TenantOut
    warnings: List[str] = []
