"""
WhatsApp rent reminders.

Messages are rendered from the configured template and handed back as a
``wa.me`` click-to-chat link; nothing is sent from the server.
"""
import logging
import re
from datetime import date
from decimal import Decimal
from typing import Optional
from urllib.parse import quote

from rentflow.core.errors import RecordValidationError
from rentflow.models.rent_entry import RentEntry
from rentflow.schemas.settings import UnifiedSettings

logger = logging.getLogger(__name__)

WA_ME_URL = "https://wa.me/{number}?text={text}"

_PLACEHOLDER_RE = re.compile(r"\{(\w+)\}")

# Dashboard date tokens (date-fns style), longest first
_DATE_TOKENS = [
    ("yyyy", "%Y"),
    ("MMMM", "%B"),
    ("MMM", "%b"),
    ("MM", "%m"),
    ("dd", "%d"),
    ("yy", "%y"),
]


def format_date(value: date, pattern: str) -> str:
    """Render ``value`` with a dashboard date pattern such as ``dd MMM, yyyy``."""
    out = pattern
    for token, directive in _DATE_TOKENS:
        out = out.replace(token, directive)
    return value.strftime(out)


def format_amount(amount: Decimal) -> str:
    if amount == amount.to_integral_value():
        return f"{int(amount):,}"
    return f"{amount:,.2f}"


def render_template(template: str, values: dict) -> str:
    """Fill ``{placeholder}`` slots; unknown placeholders are left as written."""
    return _PLACEHOLDER_RE.sub(lambda m: str(values.get(m.group(1), m.group(0))), template)


def clean_number(number: Optional[str]) -> str:
    digits = re.sub(r"[^0-9]", "", number or "")
    if not digits:
        raise RecordValidationError("Tenant has no WhatsApp number set", field="phone")
    return digits


def reminder_for_entry(entry: RentEntry, phone: Optional[str], unified: UnifiedSettings) -> dict:
    values = {
        "tenantName": entry.name,
        "rentAmount": format_amount(Decimal(entry.rent)),
        "property": entry.property,
        "dueDate": format_date(entry.due_date, unified.date_format),
        "houseName": unified.house_name,
    }
    text = render_template(unified.whatsapp_reminder_template, values)
    number = clean_number(phone)
    return {
        "text": text,
        "phone": number,
        "url": WA_ME_URL.format(number=number, text=quote(text)),
    }
