"""
Settings routes.

- GET /settings: the unified view (defaults + property_settings row + local overlay).
- PATCH /settings: commit changes; each field goes to the store that owns it.
- POST /settings/assets/{asset}: upload a branding image and commit its URL.
- GET /settings/theme.css: theme colors as HSL CSS variables (no auth, the
  login page needs it too).
"""
from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import Response
from sqlalchemy.orm import Session
from typing import Dict, Literal

from rentflow.api.deps import get_db, get_settings_store
from rentflow.core.auth import User, get_current_user
from rentflow.core.config import settings
from rentflow.core.settings_store import SettingsStore
from rentflow.core.storage import StorageClient, get_storage, read_upload
from rentflow.core.theme import theme_css
from rentflow.schemas.settings import FIELD_REGISTRY, SettingsChanges, UnifiedSettings

router = APIRouter(prefix="/settings", tags=["settings"])

# Upload slot -> settings field holding its public URL
ASSET_FIELDS = {
    "bank_logo": "bank_logo_url",
    "app_logo": "app_logo_url",
    "owner_photo": "owner_photo_url",
    "favicon": "favicon_url",
}


@router.get("", response_model=UnifiedSettings)
def read_settings(
    db: Session = Depends(get_db),
    store: SettingsStore = Depends(get_settings_store),
    current_user: User = Depends(get_current_user),
):
    return store.load(db)


@router.patch("", response_model=UnifiedSettings)
def commit_settings(
    payload: SettingsChanges,
    db: Session = Depends(get_db),
    store: SettingsStore = Depends(get_settings_store),
    current_user: User = Depends(get_current_user),
):
    """
    Body: ``{"changes": {"house_name": "Green Villa", "tab_names.overview": "Home"}}``.
    Dotted paths address nested fields; a nested object commits all of its
    leaves. Unknown fields are rejected before anything is written.
    """
    return store.commit_many(db, payload.changes)


@router.get("/ownership", response_model=Dict[str, Literal["server", "local"]])
def settings_ownership(current_user: User = Depends(get_current_user)):
    """Which store owns each settings field."""
    return {path: field.owner for path, field in FIELD_REGISTRY.items()}


@router.post("/assets/{asset}", response_model=UnifiedSettings)
async def upload_asset(
    asset: Literal["bank_logo", "app_logo", "owner_photo", "favicon"],
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    store: SettingsStore = Depends(get_settings_store),
    storage: StorageClient = Depends(get_storage),
    current_user: User = Depends(get_current_user),
):
    field = ASSET_FIELDS[asset]
    payload = await read_upload(file, ("image/",))
    old_url = getattr(store.load(db), field)

    url = storage.upload_file(settings.PUBLIC_ASSETS_BUCKET, asset, payload)
    unified = store.commit(db, field, url)

    if old_url and old_url != url:
        # Advisory cleanup; a leftover object does not fail the upload
        storage.discard(settings.PUBLIC_ASSETS_BUCKET, [old_url])
    return unified


@router.get("/theme.css")
def read_theme_css(
    db: Session = Depends(get_db),
    store: SettingsStore = Depends(get_settings_store),
):
    return Response(content=theme_css(store.load(db)), media_type="text/css")
