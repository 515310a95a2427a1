"""
Shared create / update / soft-delete / undo helpers for the entity tables.

Every entity model carries a ``deleted_at`` column. Normal flows never remove
rows; ``purge()`` is the only physical delete and is reserved for the data
management endpoints.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Sequence

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Query, Session

from rentflow.core.errors import DuplicateRecordError, RecordNotFoundError, RecordValidationError

logger = logging.getLogger(__name__)


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def live(query: Query, model) -> Query:
    return query.filter(model.deleted_at.is_(None))


def _label(model) -> str:
    return model.__tablename__


def get_record(db: Session, model, record_id: str, include_deleted: bool = False):
    if not record_id:
        raise RecordValidationError("Record id is required", field="id")
    q = db.query(model).filter(model.id == record_id)
    if not include_deleted:
        q = live(q, model)
    obj = q.first()
    if obj is None:
        raise RecordNotFoundError(f"{_label(model)} record {record_id} not found")
    return obj


def list_records(db: Session, model, *criteria, order_by=None) -> List[Any]:
    q = live(db.query(model), model)
    if criteria:
        q = q.filter(*criteria)
    if order_by is not None:
        q = q.order_by(order_by)
    return q.all()


def _commit(db: Session, model) -> None:
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning("Integrity error on %s: %s", _label(model), e.orig)
        raise DuplicateRecordError(f"Conflicting {_label(model)} record: {e.orig}")


def create_record(db: Session, model, data: Dict[str, Any]):
    obj = model(**data)
    db.add(obj)
    _commit(db, model)
    db.refresh(obj)
    logger.info("Created %s %s", _label(model), obj.id)
    return obj


def create_records(db: Session, model, rows: Iterable[Dict[str, Any]]) -> List[Any]:
    """Insert many rows in one transaction."""
    objs = [model(**row) for row in rows]
    if not objs:
        return []
    db.add_all(objs)
    _commit(db, model)
    for obj in objs:
        db.refresh(obj)
    logger.info("Created %d %s records", len(objs), _label(model))
    return objs


def update_record(db: Session, obj, data: Dict[str, Any]):
    model = type(obj)
    for k, v in data.items():
        setattr(obj, k, v)
    _commit(db, model)
    db.refresh(obj)
    logger.info("Updated %s %s", _label(model), obj.id)
    return obj


def soft_delete(db: Session, model, ids: Sequence[str]) -> int:
    """
    Mark records deleted in a single UPDATE.

    An empty id list is a successful no-op. Returns the number of rows marked.
    """
    ids = [i for i in ids if i]
    if not ids:
        return 0
    count = (
        db.query(model)
        .filter(model.id.in_(ids), model.deleted_at.is_(None))
        .update({model.deleted_at: now_utc()}, synchronize_session=False)
    )
    db.commit()
    logger.info("Soft-deleted %d %s records", count, _label(model))
    return count


def undo_delete(db: Session, model, ids: Sequence[str]) -> int:
    """Clear the deletion timestamp on the given records. Empty list is a no-op."""
    ids = [i for i in ids if i]
    if not ids:
        return 0
    count = (
        db.query(model)
        .filter(model.id.in_(ids), model.deleted_at.isnot(None))
        .update({model.deleted_at: None}, synchronize_session=False)
    )
    _commit(db, model)
    logger.info("Restored %d %s records", count, _label(model))
    return count


def purge(db: Session, model, *criteria, commit: bool = True) -> int:
    """Physically delete rows matching ``criteria`` (all rows when none given)."""
    q = db.query(model)
    if criteria:
        q = q.filter(*criteria)
    count = q.delete(synchronize_session=False)
    if commit:
        db.commit()
    logger.info("Purged %d %s records", count, _label(model))
    return count


def changed_fields(obj, data: Dict[str, Any], fields: Optional[Iterable[str]] = None) -> List[str]:
    """Names of the keys in ``data`` whose value differs from ``obj``."""
    keys = fields if fields is not None else data.keys()
    return [k for k in keys if k in data and getattr(obj, k) != data[k]]
