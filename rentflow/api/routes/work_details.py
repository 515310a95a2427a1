from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional

from rentflow.api.deps import get_db
from rentflow.core.auth import User, get_current_user
from rentflow.core.lifecycle import create_record, create_records, get_record, soft_delete, undo_delete, update_record
from rentflow.models.work_detail import WorkDetail
from rentflow.schemas.common import BatchResult, IdList
from rentflow.schemas.work_detail import WorkDetailBatchCreate, WorkDetailCreate, WorkDetailOut, WorkDetailUpdate

router = APIRouter(prefix="/work-details", tags=["work-details"])


@router.get("", response_model=List[WorkDetailOut])
def list_work_details(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    status: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    q: Optional[str] = Query(None),  # search in title
):
    query = db.query(WorkDetail).filter(WorkDetail.deleted_at.is_(None))
    if status:
        query = query.filter(WorkDetail.status == status)
    if category:
        query = query.filter(WorkDetail.category == category)
    if q:
        query = query.filter(WorkDetail.title.ilike(f"%{q}%"))
    return query.order_by(WorkDetail.created_at.desc()).all()


@router.post("", response_model=WorkDetailOut, status_code=201)
def add_work_detail(
    payload: WorkDetailCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return create_record(db, WorkDetail, payload.model_dump())


@router.post("/batch", response_model=BatchResult, status_code=201)
def add_work_details(
    payload: WorkDetailBatchCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Import several work items in one transaction."""
    created = create_records(db, WorkDetail, [w.model_dump() for w in payload.work_details])
    return {"count": len(created)}


@router.put("/{work_id}", response_model=WorkDetailOut)
def edit_work_detail(
    work_id: str,
    payload: WorkDetailUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    work = get_record(db, WorkDetail, work_id)
    return update_record(db, work, payload.model_dump())


@router.delete("/{work_id}", response_model=BatchResult)
def delete_work_detail(
    work_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    get_record(db, WorkDetail, work_id)
    return {"count": soft_delete(db, WorkDetail, [work_id])}


@router.post("/undo", response_model=BatchResult)
def undo_delete_work_details(
    payload: IdList,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return {"count": undo_delete(db, WorkDetail, payload.ids)}
