from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional

from rentflow.api.deps import get_db
from rentflow.core.auth import User, get_current_user
from rentflow.core.lifecycle import create_record, get_record, soft_delete, undo_delete, update_record
from rentflow.models.notice import Notice
from rentflow.schemas.common import BatchResult, IdList
from rentflow.schemas.notice import NoticeCreate, NoticeOut, NoticeUpdate

router = APIRouter(prefix="/notices", tags=["notices"])


@router.get("", response_model=List[NoticeOut])
def list_notices(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    year: Optional[int] = Query(None),
    month: Optional[int] = Query(None, ge=1, le=12),
):
    query = db.query(Notice).filter(Notice.deleted_at.is_(None))
    if year is not None:
        query = query.filter(Notice.year == year)
    if month is not None:
        query = query.filter(Notice.month == month)
    return query.order_by(Notice.created_at.desc()).all()


@router.post("", response_model=NoticeOut, status_code=201)
def add_notice(
    payload: NoticeCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return create_record(db, Notice, payload.model_dump())


@router.put("/{notice_id}", response_model=NoticeOut)
def edit_notice(
    notice_id: str,
    payload: NoticeUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    notice = get_record(db, Notice, notice_id)
    return update_record(db, notice, payload.model_dump())


@router.delete("/{notice_id}", response_model=BatchResult)
def delete_notice(
    notice_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    get_record(db, Notice, notice_id)
    return {"count": soft_delete(db, Notice, [notice_id])}


@router.post("/undo", response_model=BatchResult)
def undo_delete_notices(
    payload: IdList,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return {"count": undo_delete(db, Notice, payload.ids)}
