"""
Period rollover routes.

- POST /rollover/rent: Pending rent entries for every tenant not yet billed in the period.
- POST /rollover/previous-year: carry last year's active tenants into the period.
- POST /rollover/expenses: clone last month's expenses into the period (status Due).
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from rentflow.api.deps import get_db
from rentflow.core.auth import User, get_current_user
from rentflow.core.rollover import (
    sync_expenses_from_previous_month,
    sync_rent_for_period,
    sync_tenants_from_previous_year,
)
from rentflow.schemas.common import BatchResult, PeriodIn

router = APIRouter(prefix="/rollover", tags=["rollover"])


@router.post("/rent", response_model=BatchResult)
def rollover_rent(
    payload: PeriodIn,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return {"count": sync_rent_for_period(db, payload.year, payload.month)}


@router.post("/previous-year", response_model=BatchResult)
def rollover_previous_year(
    payload: PeriodIn,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return {"count": sync_tenants_from_previous_year(db, payload.year, payload.month)}


@router.post("/expenses", response_model=BatchResult)
def rollover_expenses(
    payload: PeriodIn,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Not idempotent: calling it twice clones the expenses twice."""
    return {"count": sync_expenses_from_previous_month(db, payload.year, payload.month)}
