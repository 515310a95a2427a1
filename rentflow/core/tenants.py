"""
Tenant and rent-entry write paths.

Tenants carry an avatar (public bucket) and a list of document URLs (tenant
documents bucket). Uploads happen before the row is written; objects that the
write replaces or drops are removed afterwards, best effort.
"""
import logging
import re
import uuid
from typing import List, Optional, Sequence, Tuple

from sqlalchemy.orm import Session

from rentflow.core.config import settings
from rentflow.core.errors import DuplicateRecordError
from rentflow.core.events import EventBus, TenantUpdated
from rentflow.core.lifecycle import changed_fields, create_record, get_record, live, update_record
from rentflow.core.rollover import covered_tenant_ids, period_start, rent_entry_from_tenant
from rentflow.core.storage import FilePayload, StorageClient, require_storage
from rentflow.models.rent_entry import RentEntry
from rentflow.models.tenant import Tenant
from rentflow.schemas.rent_entry import RentEntryBatchCreate, RentEntryCreate, RentEntryDraft, RentEntryUpdate
from rentflow.schemas.tenant import DEFAULT_AVATAR, TenantCreate, TenantUpdate

logger = logging.getLogger(__name__)


def _upload_tenant_files(
    storage: Optional[StorageClient],
    tenant_id: str,
    avatar: Optional[FilePayload],
    documents: Sequence[FilePayload],
) -> Tuple[Optional[str], List[str], List[str]]:
    """Returns (avatar url, uploaded document urls, warnings)."""
    if avatar is None and not documents:
        return None, [], []
    storage = require_storage(storage)

    avatar_url = None
    if avatar is not None:
        # A failed avatar upload fails the write
        avatar_url = storage.upload_file(settings.PUBLIC_ASSETS_BUCKET, tenant_id, avatar)

    urls, warnings = storage.upload_many(settings.TENANT_DOCUMENTS_BUCKET, tenant_id, documents)
    return avatar_url, [u for u in urls if u], warnings


def create_tenant(
    db: Session,
    storage: Optional[StorageClient],
    payload: TenantCreate,
    avatar: Optional[FilePayload] = None,
    documents: Sequence[FilePayload] = (),
    create_rent_entry: bool = True,
) -> Tuple[Tenant, List[str]]:
    """
    Create a tenant, upload its files, and open its first rent entry.

    The initial Pending entry is for the join month, unless that period is
    already covered.
    """
    tenant_id = str(uuid.uuid4())
    data = payload.model_dump()

    avatar_url, doc_urls, warnings = _upload_tenant_files(storage, tenant_id, avatar, documents)
    if avatar_url:
        data["avatar"] = avatar_url
    data["documents"] = list(data.get("documents") or []) + doc_urls

    try:
        tenant = create_record(db, Tenant, {"id": tenant_id, **data})
    except Exception:
        if storage is not None and (avatar_url or doc_urls):
            storage.discard(settings.PUBLIC_ASSETS_BUCKET, [avatar_url])
            storage.discard(settings.TENANT_DOCUMENTS_BUCKET, doc_urls)
        raise

    if create_rent_entry:
        year, month = tenant.join_date.year, tenant.join_date.month
        if tenant.id not in covered_tenant_ids(db, year, month):
            db.add(rent_entry_from_tenant(tenant, year, month))
            db.commit()
            logger.info("Opened rent entry %04d-%02d for new tenant %s", year, month, tenant.id)

    return tenant, warnings


def update_tenant(
    db: Session,
    storage: Optional[StorageClient],
    bus: EventBus,
    tenant_id: str,
    payload: TenantUpdate,
    avatar: Optional[FilePayload] = None,
    documents: Sequence[FilePayload] = (),
) -> Tuple[Tenant, List[str]]:
    """
    Write every mutable tenant field, then publish ``TenantUpdated``.

    The tenant write stays committed whatever happens afterwards; storage
    cleanup and rent-entry sync failures come back as warnings.
    """
    tenant = get_record(db, Tenant, tenant_id)
    old_avatar = tenant.avatar
    old_documents = list(tenant.documents or [])

    data = payload.model_dump()
    avatar_url, doc_urls, warnings = _upload_tenant_files(storage, tenant.id, avatar, documents)
    if avatar_url:
        data["avatar"] = avatar_url
    data["documents"] = list(data.get("documents") or []) + doc_urls

    changed = changed_fields(tenant, data)
    try:
        tenant = update_record(db, tenant, data)
    except Exception:
        if storage is not None and (avatar_url or doc_urls):
            storage.discard(settings.PUBLIC_ASSETS_BUCKET, [avatar_url])
            storage.discard(settings.TENANT_DOCUMENTS_BUCKET, doc_urls)
        raise

    stale_avatar = [old_avatar] if old_avatar != tenant.avatar and old_avatar != DEFAULT_AVATAR else []
    dropped = [u for u in old_documents if u not in tenant.documents]
    if stale_avatar or dropped:
        if storage is None:
            warnings.append("Old files were kept because file storage is not configured.")
        else:
            warnings += storage.discard(settings.PUBLIC_ASSETS_BUCKET, stale_avatar)
            warnings += storage.discard(settings.TENANT_DOCUMENTS_BUCKET, dropped)

    if changed:
        warnings += bus.publish(db, TenantUpdated(tenant_id=tenant.id, changed_fields=frozenset(changed)))
        db.refresh(tenant)
    return tenant, warnings


# --- Rent entries ---

def _placeholder_email(name: str) -> str:
    local_part = re.sub(r"\s+", ".", name.strip()).lower()
    return f"{local_part}@example.com"


def resolve_tenant(db: Session, draft: RentEntryDraft, year: int, month: int) -> Tenant:
    """
    Tenant for a rent draft: by id when given, otherwise the live tenant with
    the same name and property, created on the fly when there is none.
    """
    if draft.tenant_id:
        return get_record(db, Tenant, draft.tenant_id)

    tenant = (
        live(db.query(Tenant), Tenant)
        .filter(Tenant.name == draft.name, Tenant.property == draft.property)
        .order_by(Tenant.created_at)
        .first()
    )
    if tenant is not None:
        return tenant

    tenant = create_record(db, Tenant, {
        "name": draft.name,
        "property": draft.property,
        "rent": draft.rent,
        "join_date": period_start(year, month),
        "avatar": draft.avatar or DEFAULT_AVATAR,
        "status": "Active",
        "email": _placeholder_email(draft.name),
        "documents": [],
    })
    logger.info("Auto-created tenant %s for rent entry %s / %s", tenant.id, draft.name, draft.property)
    return tenant


def ensure_period_free(db: Session, tenant_id: str, year: int, month: int, exclude_id: Optional[str] = None) -> None:
    q = live(db.query(RentEntry), RentEntry).filter(
        RentEntry.tenant_id == tenant_id, RentEntry.year == year, RentEntry.month == month
    )
    if exclude_id:
        q = q.filter(RentEntry.id != exclude_id)
    if q.first() is not None:
        raise DuplicateRecordError(
            f"Tenant {tenant_id} already has a rent entry for {year:04d}-{month:02d}", field="tenant_id"
        )


def _entry_data(draft: RentEntryDraft, tenant: Tenant, year: int, month: int) -> dict:
    data = draft.model_dump(exclude={"tenant_id"})
    data.update(
        tenant_id=tenant.id,
        year=year,
        month=month,
        due_date=period_start(year, month),
        avatar=draft.avatar or tenant.avatar or DEFAULT_AVATAR,
    )
    return data


def create_rent_entry(db: Session, payload: RentEntryCreate) -> RentEntry:
    period_start(payload.year, payload.month)
    tenant = resolve_tenant(db, payload, payload.year, payload.month)
    ensure_period_free(db, tenant.id, payload.year, payload.month)
    return create_record(db, RentEntry, _entry_data(payload, tenant, payload.year, payload.month))


def create_rent_entries(db: Session, batch: RentEntryBatchCreate) -> Tuple[List[RentEntry], List[str]]:
    """
    Add several entries to one period. Drafts whose tenant is already billed
    for the period are skipped and reported as warnings.
    """
    period_start(batch.year, batch.month)
    covered = covered_tenant_ids(db, batch.year, batch.month)
    entries: List[RentEntry] = []
    warnings: List[str] = []
    for draft in batch.entries:
        tenant = resolve_tenant(db, draft, batch.year, batch.month)
        if tenant.id in covered:
            warnings.append(f"{draft.name} ({draft.property}) already has an entry for this month")
            continue
        covered.add(tenant.id)
        entries.append(RentEntry(**_entry_data(draft, tenant, batch.year, batch.month)))

    if entries:
        db.add_all(entries)
        db.commit()
        for entry in entries:
            db.refresh(entry)
    logger.info("Added %d rent entries to %04d-%02d", len(entries), batch.year, batch.month)
    return entries, warnings


def update_rent_entry(db: Session, entry_id: str, payload: RentEntryUpdate) -> RentEntry:
    entry = get_record(db, RentEntry, entry_id)
    get_record(db, Tenant, payload.tenant_id, include_deleted=True)
    ensure_period_free(db, payload.tenant_id, payload.year, payload.month, exclude_id=entry.id)

    data = payload.model_dump()
    data["due_date"] = period_start(payload.year, payload.month)
    data["avatar"] = payload.avatar or entry.avatar or DEFAULT_AVATAR
    return update_record(db, entry, data)
