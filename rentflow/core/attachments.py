"""
Create / update for records that keep one uploaded file's public URL in a column
(documents, Zakat receipts, deposit receipts).
"""
import logging
import uuid
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from rentflow.core.lifecycle import create_record, update_record
from rentflow.core.storage import FilePayload, StorageClient, require_storage

logger = logging.getLogger(__name__)


def create_with_file(
    db: Session,
    storage: Optional[StorageClient],
    model,
    data: Dict[str, Any],
    bucket: str,
    url_field: str,
    payload: Optional[FilePayload] = None,
):
    """Upload ``payload`` under the new record's id, then insert the row."""
    record_id = str(uuid.uuid4())
    url = None
    if payload is not None:
        url = require_storage(storage).upload_file(bucket, record_id, payload)
        data = dict(data, **{url_field: url})

    try:
        return create_record(db, model, {"id": record_id, **data})
    except Exception:
        if url:
            storage.discard(bucket, [url])
        raise


def update_with_file(
    db: Session,
    storage: Optional[StorageClient],
    obj,
    data: Dict[str, Any],
    bucket: str,
    url_field: str,
    payload: Optional[FilePayload] = None,
) -> Tuple[Any, List[str]]:
    """
    Write ``data`` and, when a new file is given, swap the stored URL.

    The replaced object is removed only after the row points at the new one;
    a failed removal is returned as a warning.
    """
    old_url = getattr(obj, url_field)
    new_url = None
    if payload is not None:
        new_url = require_storage(storage).upload_file(bucket, obj.id, payload)
        data = dict(data, **{url_field: new_url})

    try:
        obj = update_record(db, obj, data)
    except Exception:
        if new_url:
            storage.discard(bucket, [new_url])
        raise

    warnings: List[str] = []
    if payload is not None and old_url and old_url != getattr(obj, url_field):
        warnings = storage.discard(bucket, [old_url])
    return obj, warnings
