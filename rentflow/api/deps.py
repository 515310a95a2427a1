from typing import Type, TypeVar

from fastapi import Request
from pydantic import BaseModel, ValidationError
from sqlalchemy.orm import Session

from rentflow.core.database import SessionLocal
from rentflow.core.errors import RecordValidationError
from rentflow.core.events import EventBus
from rentflow.core.settings_store import SettingsStore

M = TypeVar("M", bound=BaseModel)


def get_db():
    db: Session = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_settings_store(request: Request) -> SettingsStore:
    return request.app.state.settings_store


def get_event_bus(request: Request) -> EventBus:
    return request.app.state.event_bus


def parse_json_form(raw: str, schema: Type[M]) -> M:
    """Validate the JSON ``payload`` field of a multipart form."""
    try:
        return schema.model_validate_json(raw)
    except ValidationError as e:
        err = e.errors()[0]
        field = ".".join(str(p) for p in err.get("loc", ())) or None
        raise RecordValidationError(f"{field or 'payload'}: {err['msg']}", field=field)
