from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import Optional

from rentflow.schemas.common import validate_month


class NoticeCreate(BaseModel):
    year: int
    month: int
    content: str = Field(..., min_length=1)

    @field_validator("month")
    @classmethod
    def month_in_range(cls, v):
        return validate_month(v)


class NoticeUpdate(BaseModel):
    # Period is fixed once a notice is posted
    content: str = Field(..., min_length=1)


class NoticeOut(BaseModel):
    id: str
    year: int
    month: int
    content: str
    created_at: datetime
    deleted_at: Optional[datetime] = None

    class Config:
        from_attributes = True
