from sqlalchemy import Column, String, Integer, Boolean, DateTime, JSON, Text
from sqlalchemy.sql import func
from rentflow.core.database import Base


class PropertySettings(Base):
    """The single server-side settings row (keyed by ``SETTINGS_ROW_ID``)."""
    __tablename__ = "property_settings"

    id = Column(Integer, primary_key=True)

    # Property / bank
    house_name = Column(String, nullable=True)
    house_address = Column(String, nullable=True)
    bank_name = Column(String, nullable=True)
    bank_account_number = Column(String, nullable=True)
    bank_logo_url = Column(String, nullable=True)
    owner_name = Column(String, nullable=True)
    owner_photo_url = Column(String, nullable=True)

    # Protection
    passcode = Column(String, nullable=True)
    passcode_protection_enabled = Column(Boolean, nullable=True)

    # Contact / branding
    about_us = Column(Text, nullable=True)
    contact_phone = Column(String, nullable=True)
    contact_email = Column(String, nullable=True)
    contact_address = Column(String, nullable=True)
    footer_name = Column(String, nullable=True)
    tenant_view_style = Column(String, nullable=True)
    metadata_title = Column(String, nullable=True)
    favicon_url = Column(String, nullable=True)
    app_logo_url = Column(String, nullable=True)

    # Locale
    date_format = Column(String, nullable=True)
    currency_symbol = Column(String, nullable=True)

    document_categories = Column(JSON, nullable=True)

    # WhatsApp reminders
    whatsapp_reminders_enabled = Column(Boolean, nullable=True)
    whatsapp_reminder_schedule = Column(JSON, nullable=True)
    whatsapp_reminder_template = Column(Text, nullable=True)

    # Theme (hex strings)
    theme_primary = Column(String, nullable=True)
    theme_table_header_background = Column(String, nullable=True)
    theme_table_header_foreground = Column(String, nullable=True)
    theme_table_footer_background = Column(String, nullable=True)
    theme_mobile_nav_background = Column(String, nullable=True)
    theme_mobile_nav_foreground = Column(String, nullable=True)
    theme_primary_dark = Column(String, nullable=True)
    theme_table_header_background_dark = Column(String, nullable=True)
    theme_table_header_foreground_dark = Column(String, nullable=True)
    theme_table_footer_background_dark = Column(String, nullable=True)
    theme_mobile_nav_background_dark = Column(String, nullable=True)
    theme_mobile_nav_foreground_dark = Column(String, nullable=True)

    updated_at = Column(DateTime(timezone=True), onupdate=func.now(), server_default=func.now(), nullable=False)
