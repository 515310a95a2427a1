from pydantic import BaseModel, Field, field_validator
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from rentflow.schemas.common import validate_month


class DepositBase(BaseModel):
    year: int
    month: int
    amount: Decimal = Field(..., gt=0)
    deposit_date: date

    @field_validator("month")
    @classmethod
    def month_in_range(cls, v):
        return validate_month(v)


class DepositCreate(DepositBase):
    pass


class DepositUpdate(DepositBase):
    pass


class DepositOut(DepositBase):
    id: str
    receipt_url: Optional[str] = None
    created_at: datetime
    deleted_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class DepositWriteOut(BaseModel):
    deposit: DepositOut
    warnings: List[str] = []
