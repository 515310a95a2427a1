from decimal import Decimal

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from sqlalchemy import func
from sqlalchemy.orm import Session
from typing import List, Optional

from rentflow.api.deps import get_db, parse_json_form
from rentflow.core.attachments import create_with_file, update_with_file
from rentflow.core.auth import User, get_current_user
from rentflow.core.config import settings
from rentflow.core.lifecycle import (
    create_record,
    get_record,
    live,
    soft_delete,
    undo_delete,
    update_record,
)
from rentflow.core.storage import StorageClient, get_optional_storage, read_upload
from rentflow.models.zakat import ZakatBankDetail, ZakatTransaction
from rentflow.schemas.common import BatchResult, IdList
from rentflow.schemas.zakat import (
    ZakatBankDetailCreate,
    ZakatBankDetailOut,
    ZakatBankDetailUpdate,
    ZakatSummaryOut,
    ZakatTransactionCreate,
    ZakatTransactionOut,
    ZakatTransactionUpdate,
    ZakatTransactionWriteOut,
)

router = APIRouter(prefix="/zakat", tags=["zakat"])

RECEIPT_TYPES = ("image/", "application/pdf")


# --- Transactions ---

@router.get("/transactions", response_model=List[ZakatTransactionOut])
def list_transactions(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    type: Optional[str] = Query(None, description="inflow or outflow"),
    deleted: bool = Query(False, description="List soft-deleted transactions instead"),
):
    query = db.query(ZakatTransaction)
    query = query.filter(
        ZakatTransaction.deleted_at.isnot(None) if deleted else ZakatTransaction.deleted_at.is_(None)
    )
    if type:
        query = query.filter(ZakatTransaction.type == type)
    return query.order_by(ZakatTransaction.transaction_date.desc()).all()


@router.get("/summary", response_model=ZakatSummaryOut)
def zakat_summary(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Fund balance: total inflow minus total outflow over live transactions."""
    rows = (
        live(db.query(ZakatTransaction.type, func.sum(ZakatTransaction.amount)), ZakatTransaction)
        .group_by(ZakatTransaction.type)
        .all()
    )
    totals = {t: Decimal(str(amount or 0)) for t, amount in rows}
    inflow = totals.get("inflow", Decimal("0"))
    outflow = totals.get("outflow", Decimal("0"))
    return {"inflow": inflow, "outflow": outflow, "balance": inflow - outflow}


@router.get("/transactions/{transaction_id}", response_model=ZakatTransactionOut)
def get_transaction(
    transaction_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return get_record(db, ZakatTransaction, transaction_id)


@router.post("/transactions", response_model=ZakatTransactionOut, status_code=201)
async def add_transaction(
    payload: str = Form(..., description="ZakatTransactionCreate as JSON"),
    receipt_file: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    storage: Optional[StorageClient] = Depends(get_optional_storage),
    current_user: User = Depends(get_current_user),
):
    data = parse_json_form(payload, ZakatTransactionCreate)
    receipt = await read_upload(receipt_file, RECEIPT_TYPES) if receipt_file else None
    return create_with_file(
        db, storage, ZakatTransaction, data.model_dump(), settings.ZAKAT_RECEIPTS_BUCKET, "receipt_url", receipt
    )


@router.put("/transactions/{transaction_id}", response_model=ZakatTransactionWriteOut)
async def edit_transaction(
    transaction_id: str,
    payload: str = Form(..., description="ZakatTransactionUpdate as JSON"),
    receipt_file: Optional[UploadFile] = File(None, description="Replacement receipt"),
    db: Session = Depends(get_db),
    storage: Optional[StorageClient] = Depends(get_optional_storage),
    current_user: User = Depends(get_current_user),
):
    transaction = get_record(db, ZakatTransaction, transaction_id)
    data = parse_json_form(payload, ZakatTransactionUpdate)
    receipt = await read_upload(receipt_file, RECEIPT_TYPES) if receipt_file else None

    transaction, warnings = update_with_file(
        db, storage, transaction, data.model_dump(), settings.ZAKAT_RECEIPTS_BUCKET, "receipt_url", receipt
    )
    return {"transaction": transaction, "warnings": warnings}


@router.delete("/transactions/{transaction_id}", response_model=BatchResult)
def delete_transaction(
    transaction_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    get_record(db, ZakatTransaction, transaction_id)
    return {"count": soft_delete(db, ZakatTransaction, [transaction_id])}


@router.post("/transactions/delete", response_model=BatchResult)
def delete_transactions(
    payload: IdList,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return {"count": soft_delete(db, ZakatTransaction, payload.ids)}


@router.post("/transactions/undo", response_model=BatchResult)
def undo_delete_transactions(
    payload: IdList,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return {"count": undo_delete(db, ZakatTransaction, payload.ids)}


# --- Bank details (where Zakat is paid in) ---

@router.get("/bank-details", response_model=List[ZakatBankDetailOut])
def list_bank_details(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return live(db.query(ZakatBankDetail), ZakatBankDetail).order_by(ZakatBankDetail.bank_name).all()


@router.post("/bank-details", response_model=ZakatBankDetailOut, status_code=201)
def add_bank_detail(
    payload: ZakatBankDetailCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return create_record(db, ZakatBankDetail, payload.model_dump())


@router.put("/bank-details/{detail_id}", response_model=ZakatBankDetailOut)
def edit_bank_detail(
    detail_id: str,
    payload: ZakatBankDetailUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    detail = get_record(db, ZakatBankDetail, detail_id)
    return update_record(db, detail, payload.model_dump())


@router.delete("/bank-details/{detail_id}", response_model=BatchResult)
def delete_bank_detail(
    detail_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    get_record(db, ZakatBankDetail, detail_id)
    return {"count": soft_delete(db, ZakatBankDetail, [detail_id])}
