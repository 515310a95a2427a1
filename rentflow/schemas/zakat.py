from pydantic import BaseModel, Field, field_validator
from datetime import date, datetime
from decimal import Decimal
from typing import List, Literal, Optional

from rentflow.schemas.common import blank_to_none


class ZakatTransactionBase(BaseModel):
    transaction_date: date
    type: Literal["inflow", "outflow"]
    amount: Decimal = Field(..., gt=0)
    source_or_recipient: str = Field(..., min_length=1)
    description: Optional[str] = None

    @field_validator("description", mode="before")
    @classmethod
    def empty_description_is_null(cls, v):
        return blank_to_none(v)


class ZakatTransactionCreate(ZakatTransactionBase):
    pass


class ZakatTransactionUpdate(ZakatTransactionBase):
    pass


class ZakatTransactionOut(ZakatTransactionBase):
    id: str
    receipt_url: Optional[str] = None
    created_at: datetime
    deleted_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ZakatTransactionWriteOut(BaseModel):
    transaction: ZakatTransactionOut
    warnings: List[str] = []


class ZakatSummaryOut(BaseModel):
    inflow: Decimal
    outflow: Decimal
    balance: Decimal


class ZakatBankDetailBase(BaseModel):
    bank_name: str = Field(..., min_length=1)
    account_number: str = Field(..., min_length=1)
    account_holder: Optional[str] = None
    logo_url: Optional[str] = None
    location: Optional[str] = None


class ZakatBankDetailCreate(ZakatBankDetailBase):
    pass


class ZakatBankDetailUpdate(ZakatBankDetailBase):
    pass


class ZakatBankDetailOut(ZakatBankDetailBase):
    id: str
    created_at: datetime

    class Config:
        from_attributes = True
