from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional

from rentflow.api.deps import get_db
from rentflow.core.auth import User, get_current_user
from rentflow.core.lifecycle import create_record, create_records, get_record, soft_delete, undo_delete, update_record
from rentflow.core.rollover import next_period_start, period_start
from rentflow.models.expense import Expense
from rentflow.schemas.common import BatchResult, IdList
from rentflow.schemas.expense import ExpenseBatchCreate, ExpenseCreate, ExpenseOut, ExpenseUpdate

router = APIRouter(prefix="/expenses", tags=["expenses"])


@router.get("", response_model=List[ExpenseOut])
def list_expenses(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    year: Optional[int] = Query(None),
    month: Optional[int] = Query(None, ge=1, le=12, description="Needs year"),
    category: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    deleted: bool = Query(False, description="List soft-deleted expenses instead"),
):
    query = db.query(Expense)
    query = query.filter(Expense.deleted_at.isnot(None) if deleted else Expense.deleted_at.is_(None))

    if year is not None and month is not None:
        query = query.filter(Expense.date >= period_start(year, month), Expense.date < next_period_start(year, month))
    elif year is not None:
        query = query.filter(Expense.date >= period_start(year, 1), Expense.date < period_start(year + 1, 1))
    if category:
        query = query.filter(Expense.category == category)
    if status:
        query = query.filter(Expense.status == status)

    return query.order_by(Expense.date.desc()).all()


@router.get("/{expense_id}", response_model=ExpenseOut)
def get_expense(
    expense_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return get_record(db, Expense, expense_id)


@router.post("", response_model=ExpenseOut, status_code=201)
def add_expense(
    payload: ExpenseCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return create_record(db, Expense, payload.model_dump())


@router.post("/batch", response_model=BatchResult, status_code=201)
def add_expenses(
    payload: ExpenseBatchCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Import several expenses in one transaction (spreadsheet import)."""
    created = create_records(db, Expense, [e.model_dump() for e in payload.expenses])
    return {"count": len(created)}


@router.put("/{expense_id}", response_model=ExpenseOut)
def edit_expense(
    expense_id: str,
    payload: ExpenseUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    expense = get_record(db, Expense, expense_id)
    return update_record(db, expense, payload.model_dump())


@router.delete("/{expense_id}", response_model=BatchResult)
def delete_expense(
    expense_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    get_record(db, Expense, expense_id)
    return {"count": soft_delete(db, Expense, [expense_id])}


@router.post("/delete", response_model=BatchResult)
def delete_expenses(
    payload: IdList,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return {"count": soft_delete(db, Expense, payload.ids)}


@router.post("/undo", response_model=BatchResult)
def undo_delete_expenses(
    payload: IdList,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return {"count": undo_delete(db, Expense, payload.ids)}
