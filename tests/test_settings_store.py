import json

import pytest

from rentflow.core.errors import RecordValidationError
from rentflow.core.settings_store import LocalOverlayStore, SettingsStore, reconcile
from rentflow.models.property_settings import PropertySettings
from rentflow.schemas.settings import (
    DEFAULT_DOCUMENT_CATEGORIES,
    FIELD_REGISTRY,
    LOCAL,
    SERVER,
    UnifiedSettings,
    build_registry,
    local_field,
)
from pydantic import BaseModel


def test_every_leaf_has_exactly_one_owner():
    assert FIELD_REGISTRY["house_name"].owner == SERVER
    assert FIELD_REGISTRY["house_name"].column == "house_name"
    assert FIELD_REGISTRY["theme.colors.primary"].column == "theme_primary"
    assert FIELD_REGISTRY["theme.dark_colors.mobile_nav_foreground"].column == "theme_mobile_nav_foreground_dark"
    assert FIELD_REGISTRY["tab_names.overview"].owner == LOCAL
    assert FIELD_REGISTRY["page_settings.property_details.title"].owner == LOCAL
    assert all(spec.column for spec in FIELD_REGISTRY.values() if spec.owner == SERVER)


def test_untagged_field_fails_registry_build():
    class Labels(BaseModel):
        title: str = "x"

    class Broken(BaseModel):
        labels: Labels = local_field(Labels)
        orphan: str = "no owner"

    with pytest.raises(TypeError, match="orphan"):
        build_registry(Broken)


def test_reconcile_without_any_source_is_fully_default():
    unified = reconcile(None, {})

    assert unified == UnifiedSettings()
    assert unified.house_name == "RentFlow"
    assert unified.tab_names.overview == "Overview"
    assert unified.document_categories == DEFAULT_DOCUMENT_CATEGORIES
    assert unified.theme.colors.primary == "#14b8a6"


def test_reconcile_maps_server_columns_and_skips_empty_ones():
    row = PropertySettings(
        id=1,
        house_name="Green Villa",
        house_address="",
        bank_name=None,
        passcode_protection_enabled=False,
        theme_primary="#0ea5e9",
        theme_primary_dark="#38bdf8",
        whatsapp_reminder_schedule=["on"],
    )
    unified = reconcile(row, None)

    assert unified.house_name == "Green Villa"
    assert unified.house_address == "Property Address"
    assert unified.bank_name == ""
    assert unified.passcode_protection_enabled is False
    assert unified.theme.colors.primary == "#0ea5e9"
    assert unified.theme.dark_colors.primary == "#38bdf8"
    assert unified.theme.colors.table_header_background == "#14b8a6"
    assert unified.whatsapp_reminder_schedule == ["on"]


def test_reconcile_overlay_merges_field_by_field():
    row = PropertySettings(id=1, house_name="Green Villa", owner_name="Rahim")
    overlay = {
        "house_name": "Local Villa",
        "tab_names": {"overview": "Home"},
        "page_settings": {"property_details": {"title": "Building"}},
    }
    unified = reconcile(row, overlay)

    assert unified.house_name == "Local Villa"
    assert unified.owner_name == "Rahim"
    assert unified.tab_names.overview == "Home"
    assert unified.tab_names.tenants == "Tenants"
    assert unified.page_settings.property_details.title == "Building"
    assert unified.page_settings.property_details.house_name_label == "House Name"


def test_reconcile_overlay_theme_color_wins_over_server():
    row = PropertySettings(id=1, theme_primary="#111111", theme_mobile_nav_background="#222222")
    unified = reconcile(row, {"theme": {"colors": {"primary": "#ABCDEF"}}})

    assert unified.theme.colors.primary == "#ABCDEF"
    assert unified.theme.colors.mobile_nav_background == "#222222"
    assert unified.theme.colors.table_header_background == "#14b8a6"
    assert unified.theme.dark_colors.primary == UnifiedSettings().theme.dark_colors.primary


def test_reconcile_ignores_unknown_and_ill_typed_overlay_values():
    overlay = {
        "no_such_field": 1,
        "tenant_view_style": "carousel",
        "passcode_protection_enabled": "definitely",
        "tab_names": "not an object",
        "document_categories": ["Leases"],
    }
    unified = reconcile(None, overlay)

    assert unified.tenant_view_style == "grid"
    assert unified.passcode_protection_enabled is True
    assert unified.tab_names.overview == "Overview"
    assert unified.document_categories == ["Leases"]


def test_overlay_store_treats_corrupt_file_as_empty(tmp_path):
    path = tmp_path / "local-settings.json"
    path.write_text("{not json", encoding="utf-8")
    assert LocalOverlayStore(str(path)).read() == {}

    path.write_text(json.dumps({"appSettings": ["wrong"]}), encoding="utf-8")
    assert LocalOverlayStore(str(path)).read() == {}


def test_overlay_store_write_keeps_other_keys(tmp_path):
    path = tmp_path / "local-settings.json"
    path.write_text(json.dumps({"theme": "dark"}), encoding="utf-8")
    store = LocalOverlayStore(str(path))

    store.write({"tab_names": {"overview": "Home"}})

    data = json.loads(path.read_text(encoding="utf-8"))
    assert data == {"theme": "dark", "appSettings": {"tab_names": {"overview": "Home"}}}


def test_commit_routes_server_field_to_row(db, settings_store):
    unified = settings_store.commit(db, "house_name", "Green Villa")

    row = db.query(PropertySettings).filter(PropertySettings.id == 1).one()
    assert row.house_name == "Green Villa"
    assert unified.house_name == "Green Villa"
    assert settings_store.overlay_store.read() == {}


def test_commit_routes_local_field_to_overlay_only(db, settings_store):
    unified = settings_store.commit(db, "tab_names.overview", "Home")

    assert db.query(PropertySettings).count() == 0
    assert settings_store.overlay_store.read() == {"tab_names": {"overview": "Home"}}
    assert unified.tab_names.overview == "Home"
    assert settings_store.current.tab_names.overview == "Home"


def test_commit_many_expands_nested_groups(db, settings_store):
    unified = settings_store.commit_many(db, {
        "theme": {"colors": {"primary": "#0ea5e9"}},
        "tab_names": {"tenants": "Residents"},
    })

    row = db.query(PropertySettings).one()
    assert row.theme_primary == "#0ea5e9"
    assert unified.theme.colors.primary == "#0ea5e9"
    assert unified.tab_names.tenants == "Residents"


def test_commit_server_field_drops_stale_overlay_copy(db, settings_store):
    settings_store.overlay_store.write({"house_name": "Unsynced", "tab_names": {"work": "Jobs"}})

    unified = settings_store.commit(db, "house_name", "Green Villa")

    assert unified.house_name == "Green Villa"
    assert settings_store.overlay_store.read() == {"tab_names": {"work": "Jobs"}}


def test_commit_none_resets_local_label(db, settings_store):
    settings_store.commit(db, "tab_names.overview", "Home")
    unified = settings_store.commit(db, "tab_names.overview", None)
    assert unified.tab_names.overview == "Overview"


def test_commit_rejects_unknown_field_before_writing(db, settings_store):
    with pytest.raises(RecordValidationError) as exc:
        settings_store.commit_many(db, {"house_name": "Green Villa", "nope": 1})

    assert exc.value.field == "nope"
    assert db.query(PropertySettings).count() == 0


def test_commit_rejects_ill_typed_value(db, settings_store):
    with pytest.raises(RecordValidationError) as exc:
        settings_store.commit(db, "tenant_view_style", "carousel")
    assert exc.value.field == "tenant_view_style"


def test_settings_survive_a_new_store_instance(db, settings_store):
    settings_store.commit_many(db, {"owner_name": "Rahim", "tab_names.zakat": "Charity"})

    fresh = SettingsStore(LocalOverlayStore(str(settings_store.overlay_store.path)), row_id=1)
    unified = fresh.load(db)
    assert unified.owner_name == "Rahim"
    assert unified.tab_names.zakat == "Charity"
