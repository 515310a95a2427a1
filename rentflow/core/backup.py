"""
Whole-database JSON snapshot and restore, plus an SQL INSERT dump.

The snapshot holds every row of every entity table, soft-deleted ones included.
Restore replaces each table wholesale inside one transaction. Identifiers and
creation timestamps are regenerated on the way in, and rent entries are
re-pointed at the new tenant ids.
"""
import json
import logging
import uuid
from datetime import date, datetime
from decimal import Decimal
from functools import lru_cache
from typing import Any, Dict, List, Mapping

from fastapi.encoders import jsonable_encoder
from pydantic import TypeAdapter, ValidationError
from sqlalchemy import JSON
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from rentflow.core.errors import RecordValidationError
from rentflow.core.lifecycle import now_utc, purge
from rentflow.models.deposit import Deposit
from rentflow.models.document import Document
from rentflow.models.expense import Expense
from rentflow.models.notice import Notice
from rentflow.models.property_settings import PropertySettings
from rentflow.models.rent_entry import RentEntry
from rentflow.models.tenant import Tenant
from rentflow.models.work_detail import WorkDetail
from rentflow.models.zakat import ZakatBankDetail, ZakatTransaction

logger = logging.getLogger(__name__)

# Restore inserts in this order; tenants first so their new ids are known
SNAPSHOT_MODELS = [
    Tenant,
    RentEntry,
    Expense,
    Deposit,
    Notice,
    WorkDetail,
    ZakatTransaction,
    ZakatBankDetail,
    Document,
]

# Tables wiped by "clear all data"; configuration tables are kept
TRANSACTIONAL_MODELS = [m for m in SNAPSHOT_MODELS if m is not ZakatBankDetail]

# Older exports used the dashboard key for rent entries
KEY_ALIASES = {"rentData": "rent_entries"}

STRIPPED_COLUMNS = {"id", "created_at", "updated_at"}


def _row_dict(obj) -> Dict[str, Any]:
    return {c.name: getattr(obj, c.name) for c in obj.__table__.columns}


def export_snapshot(db: Session) -> Dict[str, Any]:
    snapshot: Dict[str, Any] = {"exported_at": now_utc()}
    for model in SNAPSHOT_MODELS:
        rows = db.query(model).order_by(model.created_at).all()
        snapshot[model.__tablename__] = [_row_dict(r) for r in rows]
    return jsonable_encoder(snapshot)


def export_json(db: Session) -> str:
    return json.dumps(export_snapshot(db), indent=2, ensure_ascii=False)


@lru_cache(maxsize=None)
def _adapter(python_type: type) -> TypeAdapter:
    return TypeAdapter(python_type)


def _coerce_row(model, table: str, raw: Mapping[str, Any]) -> Dict[str, Any]:
    row: Dict[str, Any] = {}
    for column in model.__table__.columns:
        if column.name in STRIPPED_COLUMNS or column.name not in raw:
            continue
        value = raw[column.name]
        if value is None or isinstance(column.type, JSON):
            row[column.name] = value
            continue
        try:
            row[column.name] = _adapter(column.type.python_type).validate_python(value)
        except ValidationError:
            raise RecordValidationError(f"Invalid value for {table}.{column.name}: {value!r}", field=f"{table}.{column.name}")
    return row


def _normalize(snapshot: Mapping[str, Any]) -> Dict[str, List[Mapping[str, Any]]]:
    tables: Dict[str, List[Mapping[str, Any]]] = {}
    known = {m.__tablename__ for m in SNAPSHOT_MODELS}
    for key, rows in snapshot.items():
        table = KEY_ALIASES.get(key, key)
        if table not in known:
            continue
        if not isinstance(rows, list) or not all(isinstance(r, Mapping) for r in rows):
            raise RecordValidationError(f"Backup section {key!r} must be a list of objects", field=key)
        tables[table] = rows
    if not tables:
        raise RecordValidationError("Backup contains no known tables")
    return tables


def restore_snapshot(db: Session, snapshot: Mapping[str, Any]) -> Dict[str, int]:
    """
    Replace every entity table with the rows of ``snapshot``.

    Tables absent from the snapshot are cleared too. The settings row is not
    part of the snapshot and is left alone. Returns rows inserted per table.
    """
    tables = _normalize(snapshot)

    # Validate before deleting anything
    prepared: Dict[str, List[Dict[str, Any]]] = {}
    old_tenant_ids: List[Any] = []
    for model in SNAPSHOT_MODELS:
        name = model.__tablename__
        raw_rows = tables.get(name, [])
        prepared[name] = [_coerce_row(model, name, r) for r in raw_rows]
        if model is Tenant:
            old_tenant_ids = [r.get("id") for r in raw_rows]

    counts: Dict[str, int] = {}
    try:
        for model in reversed(SNAPSHOT_MODELS):
            purge(db, model, commit=False)

        id_map: Dict[Any, str] = {}
        for model in SNAPSHOT_MODELS:
            name = model.__tablename__
            objs = []
            for index, row in enumerate(prepared[name]):
                row = dict(row, id=str(uuid.uuid4()))
                if model is Tenant and old_tenant_ids[index]:
                    id_map[old_tenant_ids[index]] = row["id"]
                if model is RentEntry:
                    row["tenant_id"] = id_map.get(row.get("tenant_id"), row.get("tenant_id"))
                objs.append(model(**row))
            db.add_all(objs)
            db.flush()
            counts[name] = len(objs)
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise RecordValidationError(f"Backup rows could not be restored: {e.orig}")
    except Exception:
        db.rollback()
        raise

    logger.info("Restored snapshot: %s", ", ".join(f"{k}={v}" for k, v in counts.items()))
    return counts


# --- SQL dump ---

def _sql_literal(value: Any) -> str:
    if value is None:
        return "NULL"
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, (int, float, Decimal)):
        return str(value)
    if isinstance(value, (list, dict)):
        return "'" + json.dumps(value).replace("'", "''") + "'::jsonb"
    if isinstance(value, (date, datetime)):
        return f"'{value.isoformat()}'"
    return "'" + str(value).replace("'", "''") + "'"


def sql_backup(db: Session) -> str:
    lines = ["-- RentFlow SQL Backup", f"-- Generated on: {now_utc().isoformat()}", ""]
    for model in SNAPSHOT_MODELS + [PropertySettings]:
        rows = db.query(model).all()
        if not rows:
            continue
        table = model.__tablename__
        columns = [c.name for c in model.__table__.columns]
        lines.append(f"-- Data for table: {table}")
        col_sql = ", ".join(f'"{c}"' for c in columns)
        for row in rows:
            values = ", ".join(_sql_literal(getattr(row, c)) for c in columns)
            lines.append(f"INSERT INTO public.{table} ({col_sql}) VALUES ({values});")
        lines.append("")
    return "\n".join(lines)
