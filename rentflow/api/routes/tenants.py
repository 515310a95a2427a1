from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from sqlalchemy.orm import Session
from typing import List, Optional

from rentflow.api.deps import get_db, get_event_bus, parse_json_form
from rentflow.core.auth import User, get_current_user
from rentflow.core.events import EventBus
from rentflow.core.lifecycle import get_record, soft_delete, undo_delete
from rentflow.core.storage import StorageClient, get_optional_storage, read_upload
from rentflow.core.tenants import create_tenant, update_tenant
from rentflow.models.tenant import Tenant
from rentflow.schemas.common import BatchResult, IdList
from rentflow.schemas.tenant import TenantCreate, TenantOut, TenantUpdate, TenantWriteOut

router = APIRouter(prefix="/tenants", tags=["tenants"])

AVATAR_TYPES = ("image/",)


@router.get("", response_model=List[TenantOut])
def list_tenants(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    status: Optional[str] = Query(None),
    property: Optional[str] = Query(None),
    q: Optional[str] = Query(None),  # search in name
    deleted: bool = Query(False, description="List soft-deleted tenants instead"),
):
    query = db.query(Tenant)
    query = query.filter(Tenant.deleted_at.isnot(None) if deleted else Tenant.deleted_at.is_(None))

    if status:
        query = query.filter(Tenant.status == status)
    if property:
        query = query.filter(Tenant.property == property)
    if q:
        query = query.filter(Tenant.name.ilike(f"%{q}%"))

    return query.order_by(Tenant.name).all()


@router.get("/{tenant_id}", response_model=TenantOut)
def get_tenant(
    tenant_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return get_record(db, Tenant, tenant_id)


@router.post("", response_model=TenantWriteOut, status_code=201)
async def add_tenant(
    payload: str = Form(..., description="TenantCreate as JSON"),
    avatar_file: Optional[UploadFile] = File(None),
    document_files: Optional[List[UploadFile]] = File(None),
    create_rent_entry: bool = Query(True, description="Open a Pending rent entry for the join month"),
    db: Session = Depends(get_db),
    storage: Optional[StorageClient] = Depends(get_optional_storage),
    current_user: User = Depends(get_current_user),
):
    """
    Create a tenant. Multipart form: ``payload`` (JSON), optional ``avatar_file``
    and any number of ``document_files``.
    """
    data = parse_json_form(payload, TenantCreate)
    avatar = await read_upload(avatar_file, AVATAR_TYPES) if avatar_file else None
    documents = [await read_upload(f) for f in (document_files or [])]

    tenant, warnings = create_tenant(db, storage, data, avatar, documents, create_rent_entry=create_rent_entry)
    return {"tenant": tenant, "warnings": warnings}


@router.put("/{tenant_id}", response_model=TenantWriteOut)
async def edit_tenant(
    tenant_id: str,
    payload: str = Form(..., description="TenantUpdate as JSON (full record)"),
    avatar_file: Optional[UploadFile] = File(None),
    document_files: Optional[List[UploadFile]] = File(None),
    db: Session = Depends(get_db),
    storage: Optional[StorageClient] = Depends(get_optional_storage),
    bus: EventBus = Depends(get_event_bus),
    current_user: User = Depends(get_current_user),
):
    """
    Update a tenant. Name, property, rent and avatar changes are copied to the
    tenant's unpaid rent entries due after today; a failure there is returned
    in ``warnings`` and does not undo the tenant update.
    """
    data = parse_json_form(payload, TenantUpdate)
    avatar = await read_upload(avatar_file, AVATAR_TYPES) if avatar_file else None
    documents = [await read_upload(f) for f in (document_files or [])]

    tenant, warnings = update_tenant(db, storage, bus, tenant_id, data, avatar, documents)
    return {"tenant": tenant, "warnings": warnings}


@router.delete("/{tenant_id}", response_model=BatchResult)
def delete_tenant(
    tenant_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    get_record(db, Tenant, tenant_id)
    return {"count": soft_delete(db, Tenant, [tenant_id])}


@router.post("/delete", response_model=BatchResult)
def delete_tenants(
    payload: IdList,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return {"count": soft_delete(db, Tenant, payload.ids)}


@router.post("/undo", response_model=BatchResult)
def undo_delete_tenants(
    payload: IdList,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return {"count": undo_delete(db, Tenant, payload.ids)}
