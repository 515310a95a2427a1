"""
Dashboard payload and data management.

- GET /dashboard: every live entity list within the history window, plus settings.
- GET /data/export, GET /data/export.sql: downloadable backups.
- POST /data/restore: replace all entity tables from a JSON backup file.
- POST /data/clear, /data/clear-tenant/{tenant_id}, /data/clear-all: physical deletes.
"""
import json
import logging
from datetime import date

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import Response
from sqlalchemy.orm import Session

from rentflow.api.deps import get_db, get_settings_store
from rentflow.core.auth import User, get_current_user
from rentflow.core.backup import TRANSACTIONAL_MODELS, export_json, restore_snapshot, sql_backup
from rentflow.core.config import settings
from rentflow.core.errors import RecordValidationError
from rentflow.core.lifecycle import list_records
from rentflow.core.rollover import clear_all, clear_period, clear_tenant, period_start
from rentflow.core.settings_store import SettingsStore
from rentflow.models.deposit import Deposit
from rentflow.models.document import Document
from rentflow.models.expense import Expense
from rentflow.models.notice import Notice
from rentflow.models.rent_entry import RentEntry
from rentflow.models.tenant import Tenant
from rentflow.models.work_detail import WorkDetail
from rentflow.models.zakat import ZakatBankDetail, ZakatTransaction
from rentflow.schemas.dashboard import ClearPeriodIn, DashboardOut, TableCounts

logger = logging.getLogger(__name__)

router = APIRouter(tags=["data"])


@router.get("/dashboard", response_model=DashboardOut)
def read_dashboard(
    db: Session = Depends(get_db),
    store: SettingsStore = Depends(get_settings_store),
    current_user: User = Depends(get_current_user),
):
    """
    Live rows only. Dated records (rent entries, expenses, deposits, notices,
    zakat transactions) are limited to the last ``HISTORY_YEARS`` years;
    tenants and reference data are always returned in full.
    """
    first_year = date.today().year - settings.HISTORY_YEARS
    cutoff = period_start(first_year, 1)

    return DashboardOut(
        tenants=list_records(db, Tenant, order_by=Tenant.name),
        rent_entries=list_records(db, RentEntry, RentEntry.year >= first_year, order_by=RentEntry.due_date.desc()),
        expenses=list_records(db, Expense, Expense.date >= cutoff, order_by=Expense.date.desc()),
        deposits=list_records(db, Deposit, Deposit.year >= first_year, order_by=Deposit.deposit_date.desc()),
        notices=list_records(db, Notice, Notice.year >= first_year, order_by=Notice.created_at.desc()),
        work_details=list_records(db, WorkDetail, order_by=WorkDetail.created_at.desc()),
        zakat_transactions=list_records(
            db, ZakatTransaction, ZakatTransaction.transaction_date >= cutoff,
            order_by=ZakatTransaction.transaction_date.desc(),
        ),
        zakat_bank_details=list_records(db, ZakatBankDetail, order_by=ZakatBankDetail.bank_name),
        documents=list_records(db, Document, order_by=Document.created_at.desc()),
        settings=store.load(db),
    )


@router.get("/data/export")
def export_data(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    filename = f"rentflow-backup-{date.today().isoformat()}.json"
    return Response(
        content=export_json(db),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/data/export.sql")
def export_sql(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    filename = f"rentflow-backup-{date.today().isoformat()}.sql"
    return Response(
        content=sql_backup(db),
        media_type="application/sql",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/data/restore", response_model=TableCounts)
async def restore_data(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Every entity table is emptied and refilled from the file; nothing is merged."""
    raw = await file.read()
    try:
        snapshot = json.loads(raw)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise RecordValidationError(f"Backup file is not valid JSON: {e}", field="file")
    if not isinstance(snapshot, dict):
        raise RecordValidationError("Backup file must contain a JSON object", field="file")

    counts = restore_snapshot(db, snapshot)
    logger.info("User %s restored a backup (%s)", current_user.id, file.filename)
    return {"counts": counts}


@router.post("/data/clear", response_model=TableCounts)
def clear_data(
    payload: ClearPeriodIn,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    counts = clear_period(db, payload.year, payload.month)
    logger.info("Cleared %s-%s: %s", payload.year, payload.month or "all", counts)
    return {"counts": counts}


@router.post("/data/clear-tenant/{tenant_id}", response_model=TableCounts)
def clear_tenant_data(
    tenant_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    counts = clear_tenant(db, tenant_id)
    logger.info("Cleared tenant %s: %s", tenant_id, counts)
    return {"counts": counts}


@router.post("/data/clear-all", response_model=TableCounts)
def clear_all_data(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    counts = clear_all(db, TRANSACTIONAL_MODELS)
    logger.warning("User %s cleared all transactional data: %s", current_user.id, counts)
    return {"counts": counts}
