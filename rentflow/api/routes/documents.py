from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from sqlalchemy.orm import Session
from typing import List, Optional

from rentflow.api.deps import get_db
from rentflow.core.attachments import create_with_file, update_with_file
from rentflow.core.auth import User, get_current_user
from rentflow.core.config import settings
from rentflow.core.errors import RecordValidationError
from rentflow.core.lifecycle import get_record, soft_delete, undo_delete
from rentflow.core.storage import StorageClient, get_optional_storage, get_storage, read_upload
from rentflow.models.document import Document
from rentflow.schemas.common import BatchResult, IdList, blank_to_none
from rentflow.schemas.document import DocumentOut, DocumentWriteOut

router = APIRouter(prefix="/documents", tags=["documents"])


def _category(value: str) -> str:
    value = (value or "").strip()
    if not value:
        raise RecordValidationError("category is required", field="category")
    return value


@router.get("", response_model=List[DocumentOut])
def list_documents(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    category: Optional[str] = Query(None),
    deleted: bool = Query(False, description="List soft-deleted documents instead"),
):
    query = db.query(Document)
    query = query.filter(Document.deleted_at.isnot(None) if deleted else Document.deleted_at.is_(None))
    if category:
        query = query.filter(Document.category == category)
    return query.order_by(Document.created_at.desc()).all()


@router.get("/{document_id}", response_model=DocumentOut)
def get_document(
    document_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return get_record(db, Document, document_id)


@router.post("", response_model=DocumentOut, status_code=201)
async def upload_document(
    file: UploadFile = File(..., description="Document to store"),
    category: str = Form(...),
    description: Optional[str] = Form(None),
    db: Session = Depends(get_db),
    storage: StorageClient = Depends(get_storage),
    current_user: User = Depends(get_current_user),
):
    """Upload a file to the documents bucket and record it."""
    data = {"category": _category(category), "description": blank_to_none(description)}
    payload = await read_upload(file)
    data.update(file_type=payload.content_type, file_name=payload.filename)
    return create_with_file(db, storage, Document, data, settings.GENERAL_DOCUMENTS_BUCKET, "file_url", payload)


@router.put("/{document_id}", response_model=DocumentWriteOut)
async def edit_document(
    document_id: str,
    category: str = Form(...),
    description: Optional[str] = Form(None),
    file: Optional[UploadFile] = File(None, description="Replacement file"),
    db: Session = Depends(get_db),
    storage: Optional[StorageClient] = Depends(get_optional_storage),
    current_user: User = Depends(get_current_user),
):
    """Update category/description; a new ``file`` replaces the stored one."""
    document = get_record(db, Document, document_id)
    data = {"category": _category(category), "description": blank_to_none(description)}

    payload = await read_upload(file) if file else None
    if payload is not None:
        data.update(file_type=payload.content_type, file_name=payload.filename)

    document, warnings = update_with_file(
        db, storage, document, data, settings.GENERAL_DOCUMENTS_BUCKET, "file_url", payload
    )
    return {"document": document, "warnings": warnings}


@router.delete("/{document_id}", response_model=BatchResult)
def delete_document(
    document_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    get_record(db, Document, document_id)
    return {"count": soft_delete(db, Document, [document_id])}


@router.post("/delete", response_model=BatchResult)
def delete_documents(
    payload: IdList,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return {"count": soft_delete(db, Document, payload.ids)}


@router.post("/undo", response_model=BatchResult)
def undo_delete_documents(
    payload: IdList,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return {"count": undo_delete(db, Document, payload.ids)}
