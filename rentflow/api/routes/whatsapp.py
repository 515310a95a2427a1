import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from rentflow.api.deps import get_db, get_settings_store
from rentflow.core.auth import User, get_current_user
from rentflow.core.lifecycle import get_record
from rentflow.core.reminders import reminder_for_entry
from rentflow.core.settings_store import SettingsStore
from rentflow.models.rent_entry import RentEntry
from rentflow.models.tenant import Tenant

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/whatsapp", tags=["whatsapp"])


class ReminderOut(BaseModel):
    text: str
    phone: str
    url: str  # wa.me click-to-chat link


@router.get("/reminders/{entry_id}", response_model=ReminderOut)
def rent_reminder(
    entry_id: str,
    db: Session = Depends(get_db),
    store: SettingsStore = Depends(get_settings_store),
    current_user: User = Depends(get_current_user),
):
    """Reminder text for a rent entry, rendered from the configured template."""
    entry = get_record(db, RentEntry, entry_id)
    tenant = db.query(Tenant).filter(Tenant.id == entry.tenant_id).first()
    reminder = reminder_for_entry(entry, tenant.phone if tenant else None, store.load(db))
    logger.info("WhatsApp reminder prepared for rent entry %s (%s)", entry.id, reminder["phone"])
    return reminder
