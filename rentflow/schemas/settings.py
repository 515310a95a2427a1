"""
Schema of the unified settings view.

Every field is tagged with the store that owns it:

- ``server_field(..., column=...)``: persisted in the ``property_settings`` row.
  A column containing ``{}`` is a template filled with the leaf name, so one
  nested model can map onto a family of columns (``theme_{}_dark``).
- ``local_field(...)``: kept in the local overlay only, never sent to the database.

Nested models inherit the tag of the field that holds them. ``FIELD_REGISTRY``
maps every leaf path (``"theme.colors.primary"``) to its owner and column and is
built at import time; a leaf without an owner fails the import.
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Literal, Optional, Type

from pydantic import BaseModel, Field

SERVER = "server"
LOCAL = "local"


def server_field(default: Any = None, *, column: str, default_factory=None) -> Any:
    extra = {"owner": SERVER, "column": column}
    if default_factory is not None:
        return Field(default_factory=default_factory, json_schema_extra=extra)
    return Field(default, json_schema_extra=extra)


def local_field(default_factory) -> Any:
    return Field(default_factory=default_factory, json_schema_extra={"owner": LOCAL})


# --- Theme ---

LIGHT_THEME = {
    "primary": "#14b8a6",
    "table_header_background": "#14b8a6",
    "table_header_foreground": "#ffffff",
    "table_footer_background": "#84cc16",
    "mobile_nav_background": "#008080",
    "mobile_nav_foreground": "#ffffff",
}

DARK_THEME = {
    "primary": "#2dd4bf",
    "table_header_background": "#2dd4bf",
    "table_header_foreground": "#000000",
    "table_footer_background": "#a3e635",
    "mobile_nav_background": "#0d9488",
    "mobile_nav_foreground": "#ffffff",
}


class ColorSet(BaseModel):
    primary: str
    table_header_background: str
    table_header_foreground: str
    table_footer_background: str
    mobile_nav_background: str
    mobile_nav_foreground: str


class Theme(BaseModel):
    colors: ColorSet = server_field(column="theme_{}", default_factory=lambda: ColorSet(**LIGHT_THEME))
    dark_colors: ColorSet = server_field(column="theme_{}_dark", default_factory=lambda: ColorSet(**DARK_THEME))


# --- Labels (local only) ---

class TabNames(BaseModel):
    overview: str = "Overview"
    tenants: str = "Tenants"
    work: str = "Work"
    reports: str = "Reports"
    zakat: str = "Zakat"
    documents: str = "Documents"


class PageDashboard(BaseModel):
    nav_dashboard: str = "Dashboard"
    nav_settings: str = "Settings"


class PageOverview(BaseModel):
    financial_overview_title: str = "Financial Overview"
    financial_overview_description: str = "A summary of your income and expenses for the month."


class PropertyDetailsLabels(BaseModel):
    title: str = "Property & Bank Details"
    description: str = "Set your property and bank details. This is stored in the database."
    house_name_label: str = "House Name"
    house_address_label: str = "House Address"


class AppSettingsLabels(BaseModel):
    title: str = "Application Settings"
    description: str = "Customize the names and labels used throughout the application. These are saved in your browser."


class OverviewSettingsLabels(BaseModel):
    title: str = "Overview Settings"
    description: str = "Customize the text on the monthly overview page. These are saved in your browser."
    financial_title_label: str = "Financial Overview Title"
    financial_description_label: str = "Financial Overview Description"


class PageSettings(BaseModel):
    title: str = "Settings"
    property_details: PropertyDetailsLabels = Field(default_factory=PropertyDetailsLabels)
    app_settings: AppSettingsLabels = Field(default_factory=AppSettingsLabels)
    overview_settings: OverviewSettingsLabels = Field(default_factory=OverviewSettingsLabels)


DEFAULT_DOCUMENT_CATEGORIES = [
    "Legal",
    "Agreements",
    "Receipts",
    "ID Cards",
    "Property Deeds",
    "Blueprints",
    "Miscellaneous",
]

DEFAULT_REMINDER_TEMPLATE = (
    "Hi {tenantName}, a friendly reminder that your rent of ৳{rentAmount} "
    "for {property} is due on {dueDate}. Thank you!"
)


class UnifiedSettings(BaseModel):
    # Property / bank
    house_name: str = server_field("RentFlow", column="house_name")
    house_address: str = server_field("Property Address", column="house_address")
    bank_name: str = server_field("", column="bank_name")
    bank_account_number: str = server_field("", column="bank_account_number")
    bank_logo_url: Optional[str] = server_field(None, column="bank_logo_url")
    owner_name: str = server_field("Owner Name", column="owner_name")
    owner_photo_url: Optional[str] = server_field(None, column="owner_photo_url")

    # Protection
    passcode: str = server_field("", column="passcode")
    passcode_protection_enabled: bool = server_field(True, column="passcode_protection_enabled")

    # Contact / branding
    footer_name: str = server_field("© 2024 RentFlow. All Rights Reserved.", column="footer_name")
    about_us: str = server_field(
        "Your trusted partner in property management. Providing seamless rental experiences.",
        column="about_us",
    )
    contact_phone: str = server_field("+1 (555) 123-4567", column="contact_phone")
    contact_email: str = server_field("contact@rentflow.com", column="contact_email")
    contact_address: str = server_field("123 Property Lane, Real Estate City, 12345", column="contact_address")
    tenant_view_style: Literal["grid", "list"] = server_field("grid", column="tenant_view_style")
    metadata_title: str = server_field("RentFlow", column="metadata_title")
    favicon_url: str = server_field("/favicon.ico", column="favicon_url")
    app_logo_url: Optional[str] = server_field(None, column="app_logo_url")

    # Locale
    date_format: str = server_field("dd MMM, yyyy", column="date_format")
    currency_symbol: str = server_field("৳", column="currency_symbol")

    document_categories: List[str] = server_field(
        column="document_categories", default_factory=lambda: list(DEFAULT_DOCUMENT_CATEGORIES)
    )

    # WhatsApp reminders
    whatsapp_reminders_enabled: bool = server_field(False, column="whatsapp_reminders_enabled")
    whatsapp_reminder_schedule: List[Literal["before", "on", "after"]] = server_field(
        column="whatsapp_reminder_schedule", default_factory=lambda: ["before", "on", "after"]
    )
    whatsapp_reminder_template: str = server_field(DEFAULT_REMINDER_TEMPLATE, column="whatsapp_reminder_template")

    theme: Theme = Field(default_factory=Theme)

    # Browser-only labels
    tab_names: TabNames = local_field(TabNames)
    page_dashboard: PageDashboard = local_field(PageDashboard)
    page_overview: PageOverview = local_field(PageOverview)
    page_settings: PageSettings = local_field(PageSettings)


# --- Ownership registry ---

@dataclass(frozen=True)
class FieldOwner:
    path: str
    owner: str  # SERVER or LOCAL
    column: Optional[str]
    annotation: Any


def nested_model(annotation: Any) -> Optional[Type[BaseModel]]:
    if isinstance(annotation, type) and issubclass(annotation, BaseModel):
        return annotation
    return None


def _walk(model: Type[BaseModel], prefix: str, owner: Optional[str], column: Optional[str],
          registry: Dict[str, FieldOwner]) -> None:
    for name, info in model.model_fields.items():
        path = f"{prefix}{name}"
        extra = info.json_schema_extra if isinstance(info.json_schema_extra, dict) else {}
        field_owner = extra.get("owner", owner)
        field_column = extra.get("column", column)

        sub = nested_model(info.annotation)
        if sub is not None:
            _walk(sub, f"{path}.", field_owner, field_column, registry)
            continue

        if field_owner is None:
            raise TypeError(f"Settings field {path!r} has no owner")
        if field_owner == SERVER:
            if not field_column:
                raise TypeError(f"Server-owned settings field {path!r} has no column")
            if "{}" in field_column:
                field_column = field_column.format(name)
        else:
            field_column = None
        registry[path] = FieldOwner(path, field_owner, field_column, info.annotation)


def build_registry(model: Type[BaseModel] = UnifiedSettings) -> Dict[str, FieldOwner]:
    registry: Dict[str, FieldOwner] = {}
    _walk(model, "", None, None, registry)
    return registry


FIELD_REGISTRY = build_registry()

SERVER_FIELDS = {path: field for path, field in FIELD_REGISTRY.items() if field.owner == SERVER}
LOCAL_FIELDS = {path: field for path, field in FIELD_REGISTRY.items() if field.owner == LOCAL}


class SettingsChanges(BaseModel):
    """Body for PATCH /settings: ``{"changes": {"theme.colors.primary": "#0ea5e9"}}``."""
    changes: Dict[str, Any]
