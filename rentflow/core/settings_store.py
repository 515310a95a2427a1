"""
Settings reconciliation.

The unified view is built from two sources:

- the single ``property_settings`` row (server-owned fields), and
- the local overlay, a JSON blob kept under a fixed key in a small key-value
  file (local-only labels, plus any unsynced edits).

``reconcile()`` is a pure function of those two inputs. ``SettingsStore`` holds
the current view and is the only writer: ``commit()`` routes each field to the
store that owns it according to ``FIELD_REGISTRY``.
"""
import json
import logging
import threading
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Type

from pydantic import BaseModel, TypeAdapter, ValidationError
from sqlalchemy.orm import Session

from rentflow.core.errors import RecordValidationError
from rentflow.models.property_settings import PropertySettings
from rentflow.schemas.settings import (
    FIELD_REGISTRY,
    SERVER,
    SERVER_FIELDS,
    UnifiedSettings,
    nested_model,
)

logger = logging.getLogger(__name__)


@lru_cache(maxsize=None)
def _adapter(annotation: Any) -> TypeAdapter:
    return TypeAdapter(annotation)


def _set_path(data: Dict[str, Any], path: str, value: Any) -> None:
    parts = path.split(".")
    for part in parts[:-1]:
        child = data.get(part)
        if not isinstance(child, dict):
            child = data[part] = {}
        data = child
    data[parts[-1]] = value


def _pop_path(data: Dict[str, Any], path: str) -> bool:
    parts = path.split(".")
    for part in parts[:-1]:
        data = data.get(part)
        if not isinstance(data, dict):
            return False
    return data.pop(parts[-1], None) is not None


def _server_values(row: PropertySettings) -> Iterable[Tuple[str, Any]]:
    for path, field in SERVER_FIELDS.items():
        value = getattr(row, field.column, None)
        # Unset columns keep the default
        if value is None or value == "":
            continue
        try:
            yield path, _adapter(field.annotation).validate_python(value)
        except ValidationError:
            logger.warning("Ignoring invalid value in property_settings.%s: %r", field.column, value)


def merge_overlay(model: Type[BaseModel], base: Dict[str, Any], overlay: Mapping[str, Any],
                  prefix: str = "") -> Dict[str, Any]:
    """
    Merge ``overlay`` onto ``base`` field by field, following ``model``.

    Nested models recurse; scalars and lists from the overlay replace the base
    value wholesale. Keys the schema does not know, and values of the wrong
    type, are skipped so the result stays a valid ``model``.
    """
    merged = dict(base)
    for key, value in overlay.items():
        info = model.model_fields.get(key)
        if info is None:
            logger.debug("Ignoring unknown settings key %s%s", prefix, key)
            continue

        sub = nested_model(info.annotation)
        if sub is not None:
            if isinstance(value, Mapping):
                merged[key] = merge_overlay(sub, base[key], value, f"{prefix}{key}.")
            else:
                logger.warning("Ignoring non-object overlay value for %s%s", prefix, key)
            continue

        try:
            merged[key] = _adapter(info.annotation).validate_python(value)
        except ValidationError:
            logger.warning("Ignoring invalid overlay value for %s%s: %r", prefix, key, value)
    return merged


def reconcile(server_settings: Optional[PropertySettings], local_overlay: Optional[Mapping[str, Any]]) -> UnifiedSettings:
    """
    Build the unified settings view.

    Starts from defaults, applies the server row (null or empty columns fall
    back to the default), then deep-merges the local overlay on top. The result
    is always fully populated.
    """
    data = UnifiedSettings().model_dump()

    if server_settings is not None:
        for path, value in _server_values(server_settings):
            _set_path(data, path, value)

    if local_overlay:
        data = merge_overlay(UnifiedSettings, data, local_overlay)

    return UnifiedSettings.model_validate(data)


class LocalOverlayStore:
    """
    JSON file holding the overlay blob under a fixed key.

    Other keys in the file are preserved on write.
    """

    def __init__(self, path: str, key: str = "appSettings"):
        self.path = Path(path)
        self.key = key
        self._lock = threading.Lock()

    def _read_file(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            logger.exception("Local settings file %s is unreadable; treating it as empty", self.path)
            return {}
        return data if isinstance(data, dict) else {}

    def read(self) -> Dict[str, Any]:
        blob = self._read_file().get(self.key)
        if blob is None:
            return {}
        if not isinstance(blob, dict):
            logger.warning("Local settings blob %r is not an object; treating it as empty", self.key)
            return {}
        return blob

    def write(self, overlay: Mapping[str, Any]) -> None:
        with self._lock:
            data = self._read_file()
            data[self.key] = dict(overlay)
            if self.path.parent and not self.path.parent.exists():
                self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")


def _expand_change(path: str, value: Any) -> List[Tuple[str, Any]]:
    # A nested group ("tab_names": {...}) is committed leaf by leaf
    if path in FIELD_REGISTRY:
        return [(path, value)]
    prefix = f"{path}."
    if isinstance(value, Mapping) and any(p.startswith(prefix) for p in FIELD_REGISTRY):
        leaves: List[Tuple[str, Any]] = []
        for key, sub_value in value.items():
            leaves.extend(_expand_change(f"{prefix}{key}", sub_value))
        return leaves
    raise RecordValidationError(f"Unknown settings field: {path}", field=path)


class SettingsStore:
    """Holds the current unified view and routes writes to their owning store."""

    def __init__(self, overlay_store: LocalOverlayStore, row_id: int = 1):
        self.overlay_store = overlay_store
        self.row_id = row_id
        self._current: Optional[UnifiedSettings] = None

    @property
    def current(self) -> UnifiedSettings:
        if self._current is None:
            self._current = reconcile(None, self.overlay_store.read())
        return self._current

    def _row(self, db: Session) -> Optional[PropertySettings]:
        return db.query(PropertySettings).filter(PropertySettings.id == self.row_id).first()

    def load(self, db: Session) -> UnifiedSettings:
        self._current = reconcile(self._row(db), self.overlay_store.read())
        return self._current

    def commit(self, db: Session, field: str, value: Any) -> UnifiedSettings:
        return self.commit_many(db, {field: value})

    def commit_many(self, db: Session, changes: Mapping[str, Any]) -> UnifiedSettings:
        # Validate everything before touching either store
        server_changes: Dict[str, Any] = {}
        local_changes: Dict[str, Any] = {}
        for path, value in changes.items():
            for leaf, leaf_value in _expand_change(path, value):
                field = FIELD_REGISTRY[leaf]
                if leaf_value is not None:
                    try:
                        leaf_value = _adapter(field.annotation).validate_python(leaf_value)
                    except ValidationError as e:
                        raise RecordValidationError(
                            f"Invalid value for {leaf}: {e.errors()[0]['msg']}", field=leaf
                        )
                if field.owner == SERVER:
                    server_changes[leaf] = leaf_value
                else:
                    local_changes[leaf] = leaf_value

        row = self._row(db)
        if server_changes:
            if row is None:
                row = PropertySettings(id=self.row_id)
                db.add(row)
            for leaf, value in server_changes.items():
                setattr(row, FIELD_REGISTRY[leaf].column, value)
            db.commit()
            db.refresh(row)
            logger.info("Saved server settings: %s", ", ".join(sorted(server_changes)))

        overlay = self.overlay_store.read()
        overlay_changed = False
        for leaf, value in local_changes.items():
            if value is None:
                # None resets a local label to its default
                overlay_changed = _pop_path(overlay, leaf) or overlay_changed
                continue
            _set_path(overlay, leaf, value)
            overlay_changed = True
        # A stale local copy would shadow the value just saved to the server
        for leaf in server_changes:
            overlay_changed = _pop_path(overlay, leaf) or overlay_changed
        if overlay_changed:
            self.overlay_store.write(overlay)
            if local_changes:
                logger.info("Saved local settings: %s", ", ".join(sorted(local_changes)))

        self._current = reconcile(row, overlay)
        return self._current
