from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from sqlalchemy.orm import Session
from typing import List, Optional

from rentflow.api.deps import get_db, parse_json_form
from rentflow.core.attachments import create_with_file, update_with_file
from rentflow.core.auth import User, get_current_user
from rentflow.core.config import settings
from rentflow.core.lifecycle import get_record, soft_delete, undo_delete
from rentflow.core.storage import StorageClient, get_optional_storage, read_upload
from rentflow.models.deposit import Deposit
from rentflow.schemas.common import BatchResult, IdList
from rentflow.schemas.deposit import DepositCreate, DepositOut, DepositUpdate, DepositWriteOut

router = APIRouter(prefix="/deposits", tags=["deposits"])

RECEIPT_TYPES = ("image/", "application/pdf")


@router.get("", response_model=List[DepositOut])
def list_deposits(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    year: Optional[int] = Query(None),
    month: Optional[int] = Query(None, ge=1, le=12),
):
    query = db.query(Deposit).filter(Deposit.deleted_at.is_(None))
    if year is not None:
        query = query.filter(Deposit.year == year)
    if month is not None:
        query = query.filter(Deposit.month == month)
    return query.order_by(Deposit.deposit_date.desc()).all()


@router.post("", response_model=DepositOut, status_code=201)
async def add_deposit(
    payload: str = Form(..., description="DepositCreate as JSON"),
    receipt_file: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    storage: Optional[StorageClient] = Depends(get_optional_storage),
    current_user: User = Depends(get_current_user),
):
    """Record a bank deposit of collected rent, with an optional receipt image."""
    data = parse_json_form(payload, DepositCreate)
    receipt = await read_upload(receipt_file, RECEIPT_TYPES) if receipt_file else None
    return create_with_file(
        db, storage, Deposit, data.model_dump(), settings.DEPOSIT_RECEIPTS_BUCKET, "receipt_url", receipt
    )


@router.put("/{deposit_id}", response_model=DepositWriteOut)
async def edit_deposit(
    deposit_id: str,
    payload: str = Form(..., description="DepositUpdate as JSON"),
    receipt_file: Optional[UploadFile] = File(None, description="Replacement receipt"),
    db: Session = Depends(get_db),
    storage: Optional[StorageClient] = Depends(get_optional_storage),
    current_user: User = Depends(get_current_user),
):
    deposit = get_record(db, Deposit, deposit_id)
    data = parse_json_form(payload, DepositUpdate)
    receipt = await read_upload(receipt_file, RECEIPT_TYPES) if receipt_file else None

    deposit, warnings = update_with_file(
        db, storage, deposit, data.model_dump(), settings.DEPOSIT_RECEIPTS_BUCKET, "receipt_url", receipt
    )
    return {"deposit": deposit, "warnings": warnings}


@router.delete("/{deposit_id}", response_model=BatchResult)
def delete_deposit(
    deposit_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    get_record(db, Deposit, deposit_id)
    return {"count": soft_delete(db, Deposit, [deposit_id])}


@router.post("/undo", response_model=BatchResult)
def undo_delete_deposits(
    payload: IdList,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return {"count": undo_delete(db, Deposit, payload.ids)}
