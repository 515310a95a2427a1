import datetime

from pydantic import BaseModel, Field
from decimal import Decimal
from typing import List, Literal, Optional


class ExpenseBase(BaseModel):
    date: datetime.date
    category: str = Field(..., min_length=1)
    amount: Decimal = Field(..., ge=0)
    description: str = ""
    status: Literal["Paid", "Due"] = "Due"


class ExpenseCreate(ExpenseBase):
    pass


class ExpenseUpdate(ExpenseBase):
    pass


class ExpenseBatchCreate(BaseModel):
    expenses: List[ExpenseCreate] = []


class ExpenseOut(ExpenseBase):
    id: str
    created_at: datetime.datetime
    deleted_at: Optional[datetime.datetime] = None

    class Config:
        from_attributes = True
