from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional

from rentflow.api.deps import get_db
from rentflow.core.auth import User, get_current_user
from rentflow.core.lifecycle import get_record, soft_delete, undo_delete
from rentflow.core.tenants import create_rent_entries, create_rent_entry, update_rent_entry
from rentflow.models.rent_entry import RentEntry
from rentflow.schemas.common import BatchResult, IdList
from rentflow.schemas.rent_entry import (
    RentEntryBatchCreate,
    RentEntryCreate,
    RentEntryOut,
    RentEntryUpdate,
)

router = APIRouter(prefix="/rent-entries", tags=["rent-entries"])


@router.get("", response_model=List[RentEntryOut])
def list_rent_entries(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    year: Optional[int] = Query(None),
    month: Optional[int] = Query(None, ge=1, le=12),
    tenant_id: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    deleted: bool = Query(False, description="List soft-deleted entries instead"),
):
    query = db.query(RentEntry)
    query = query.filter(RentEntry.deleted_at.isnot(None) if deleted else RentEntry.deleted_at.is_(None))

    if year is not None:
        query = query.filter(RentEntry.year == year)
    if month is not None:
        query = query.filter(RentEntry.month == month)
    if tenant_id:
        query = query.filter(RentEntry.tenant_id == tenant_id)
    if status:
        query = query.filter(RentEntry.status == status)

    return query.order_by(RentEntry.due_date.desc(), RentEntry.name).all()


@router.get("/{entry_id}", response_model=RentEntryOut)
def get_rent_entry(
    entry_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return get_record(db, RentEntry, entry_id)


@router.post("", response_model=RentEntryOut, status_code=201)
def add_rent_entry(
    payload: RentEntryCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Add one rent entry. Without ``tenant_id`` the tenant is looked up by name
    and property, and created when missing. 409 if the tenant already has an
    entry for the period.
    """
    return create_rent_entry(db, payload)


@router.post("/batch", response_model=BatchResult, status_code=201)
def add_rent_entries(
    payload: RentEntryBatchCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    entries, warnings = create_rent_entries(db, payload)
    return {"count": len(entries), "warnings": warnings}


@router.put("/{entry_id}", response_model=RentEntryOut)
def edit_rent_entry(
    entry_id: str,
    payload: RentEntryUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return update_rent_entry(db, entry_id, payload)


@router.delete("/{entry_id}", response_model=BatchResult)
def delete_rent_entry(
    entry_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    get_record(db, RentEntry, entry_id)
    return {"count": soft_delete(db, RentEntry, [entry_id])}


@router.post("/delete", response_model=BatchResult)
def delete_rent_entries(
    payload: IdList,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return {"count": soft_delete(db, RentEntry, payload.ids)}


@router.post("/undo", response_model=BatchResult)
def undo_delete_rent_entries(
    payload: IdList,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Restore soft-deleted entries. 409 if one would clash with a live entry of the same period."""
    return {"count": undo_delete(db, RentEntry, payload.ids)}
