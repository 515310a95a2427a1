from pydantic import BaseModel, field_validator
from typing import List


def blank_to_none(v):
    """Form fields arrive as '' when left empty; store NULL instead."""
    if isinstance(v, str) and v.strip() == "":
        return None
    return v


def validate_month(v: int) -> int:
    if v < 1 or v > 12:
        raise ValueError("month must be between 1 and 12")
    return v


class IdList(BaseModel):
    """Body for batch soft-delete / undo."""
    ids: List[str] = []


class BatchResult(BaseModel):
    count: int
    warnings: List[str] = []


class PeriodIn(BaseModel):
    year: int
    month: int

    @field_validator("month")
    @classmethod
    def month_in_range(cls, v):
        return validate_month(v)
