from datetime import date, timedelta
from decimal import Decimal

import pytest

from rentflow.core import tenants as tenants_service
from rentflow.core.errors import DuplicateRecordError, GatewayError
from rentflow.core.events import EventBus, TenantUpdated, build_event_bus
from rentflow.core.lifecycle import soft_delete
from rentflow.core.rollover import period_start, sync_future_rent_entries
from rentflow.core.storage import FilePayload
from rentflow.core.tenants import create_rent_entries, create_rent_entry, create_tenant, update_tenant
from rentflow.models.rent_entry import RentEntry
from rentflow.models.tenant import Tenant
from rentflow.schemas.rent_entry import RentEntryBatchCreate, RentEntryCreate
from rentflow.schemas.tenant import DEFAULT_AVATAR, TenantCreate, TenantUpdate

NEXT_YEAR = date.today().year + 1


def _tenant_payload(**overrides):
    data = {
        "name": "Alice",
        "email": "alice@example.com",
        "property": "Flat 1A",
        "rent": "1000",
        "join_date": "2024-01-15",
    }
    data.update(overrides)
    return data


def _entry(db, tenant, year, month, status="Pending"):
    entry = RentEntry(
        tenant_id=tenant.id, year=year, month=month, due_date=period_start(year, month),
        rent=tenant.rent, status=status, name=tenant.name, property=tenant.property, avatar=tenant.avatar,
    )
    db.add(entry)
    db.commit()
    return entry


def test_create_tenant_opens_join_month_entry(db, storage):
    tenant, warnings = create_tenant(db, storage, TenantCreate(**_tenant_payload()))

    assert warnings == []
    assert tenant.avatar == DEFAULT_AVATAR
    (entry,) = db.query(RentEntry).all()
    assert (entry.tenant_id, entry.year, entry.month, entry.status) == (tenant.id, 2024, 1, "Pending")


def test_create_tenant_without_rent_entry(db, storage):
    create_tenant(db, storage, TenantCreate(**_tenant_payload()), create_rent_entry=False)
    assert db.query(RentEntry).count() == 0


def test_create_tenant_uploads_files_and_reports_partial_failures(db, storage):
    avatar = FilePayload("me.png", "image/png", b"avatar")
    ok = FilePayload("lease.pdf", "application/pdf", b"lease")
    bad = FilePayload("nid.pdf", "application/pdf", b"broken")
    storage.fail_data.add(b"broken")

    tenant, warnings = create_tenant(db, storage, TenantCreate(**_tenant_payload()), avatar, [ok, bad])

    assert tenant.avatar.startswith("https://project.supabase.co/storage/v1/object/public/rentflow-public/")
    assert f"/{tenant.id}/" in tenant.avatar
    assert len(tenant.documents) == 1
    assert "/tenant-documents/" in tenant.documents[0]
    assert warnings == ["Could not upload nid.pdf: Storage error 500: upload rejected"]


def test_update_cascades_to_future_unpaid_entries_only(db, storage, make_tenant):
    alice = make_tenant("Alice", "Flat 1A", "1000")
    past = _entry(db, alice, 2024, 1)
    future_pending = _entry(db, alice, NEXT_YEAR, 1)
    future_overdue = _entry(db, alice, NEXT_YEAR, 2, status="Overdue")
    future_paid = _entry(db, alice, NEXT_YEAR, 3, status="Paid")

    payload = TenantUpdate(**_tenant_payload(name="Alice Rahman", property="Flat 2B", rent="1200"))
    tenant, warnings = update_tenant(db, storage, build_event_bus(), alice.id, payload)

    assert warnings == []
    assert tenant.name == "Alice Rahman"
    for entry in (past, future_pending, future_overdue, future_paid):
        db.refresh(entry)
    assert (future_pending.name, future_pending.property, future_pending.rent) == ("Alice Rahman", "Flat 2B", Decimal("1200"))
    assert future_overdue.name == "Alice Rahman"
    assert (future_paid.name, future_paid.rent) == ("Alice", Decimal("1000"))
    assert (past.name, past.rent) == ("Alice", Decimal("1000"))


def test_update_without_snapshot_changes_leaves_entries_alone(db, storage, make_tenant):
    alice = make_tenant("Alice", "Flat 1A", "1000")
    entry = _entry(db, alice, NEXT_YEAR, 1)
    calls = []
    bus = EventBus()
    bus.subscribe(TenantUpdated, lambda db, event: calls.append(event))

    update_tenant(db, storage, bus, alice.id, TenantUpdate(**_tenant_payload(phone="+8801712345678")))

    assert [sorted(e.changed_fields) for e in calls] == [["phone"]]
    assert sync_future_rent_entries(db, calls[0]) == 0
    db.refresh(entry)
    assert entry.name == "Alice"


def test_failing_listener_becomes_warning_and_tenant_stays_updated(db, storage, make_tenant):
    alice = make_tenant("Alice")

    def broken(db, event):
        raise RuntimeError("rent table unavailable")

    bus = EventBus()
    bus.subscribe(TenantUpdated, broken)
    tenant, warnings = update_tenant(db, storage, bus, alice.id, TenantUpdate(**_tenant_payload(name="Alicia")))

    assert warnings == ["Saved, but follow-up update failed: rent table unavailable"]
    db.expire_all()
    assert db.query(Tenant).filter(Tenant.id == alice.id).one().name == "Alicia"


def test_new_avatar_discards_old_object(db, storage):
    tenant, _ = create_tenant(
        db, storage, TenantCreate(**_tenant_payload()), FilePayload("a.png", "image/png", b"old"),
        create_rent_entry=False,
    )
    old_avatar = tenant.avatar

    tenant, warnings = update_tenant(
        db, storage, build_event_bus(), tenant.id,
        TenantUpdate(**_tenant_payload(avatar=old_avatar)), FilePayload("b.png", "image/png", b"new"),
    )

    assert warnings == []
    assert tenant.avatar != old_avatar
    assert storage.removed == [("rentflow-public", storage.path_from_public_url("rentflow-public", old_avatar))]


def test_failed_cleanup_is_a_warning(db, storage):
    tenant, _ = create_tenant(
        db, storage, TenantCreate(**_tenant_payload()), documents=[FilePayload("x.pdf", "application/pdf", b"x")],
        create_rent_entry=False,
    )
    storage.fail_remove = True

    tenant, warnings = update_tenant(
        db, storage, build_event_bus(), tenant.id, TenantUpdate(**_tenant_payload(documents=[]))
    )

    assert tenant.documents == []
    assert warnings == ["Old file cleanup failed: Storage error 503: unavailable"]


def test_rent_entry_auto_creates_missing_tenant(db):
    entry = create_rent_entry(db, RentEntryCreate(
        name="Karim Uddin", property="Shop 3", rent="500", year=2024, month=5,
    ))

    tenant = db.query(Tenant).filter(Tenant.id == entry.tenant_id).one()
    assert tenant.email == "karim.uddin@example.com"
    assert tenant.join_date == date(2024, 5, 1)
    assert entry.due_date == date(2024, 5, 1)


def test_rent_entry_reuses_tenant_and_rejects_duplicate_period(db, make_tenant):
    alice = make_tenant("Alice", "Flat 1A")
    entry = create_rent_entry(db, RentEntryCreate(name="Alice", property="Flat 1A", rent="1000", year=2024, month=5))
    assert entry.tenant_id == alice.id

    with pytest.raises(DuplicateRecordError):
        create_rent_entry(db, RentEntryCreate(tenant_id=alice.id, name="Alice", property="Flat 1A",
                                              rent="1000", year=2024, month=5))


def test_batch_rent_entries_skip_covered_tenants(db, make_tenant):
    alice = make_tenant("Alice", "Flat 1A")
    _entry(db, alice, 2024, 6)

    entries, warnings = create_rent_entries(db, RentEntryBatchCreate(year=2024, month=6, entries=[
        {"name": "Alice", "property": "Flat 1A", "rent": "1000"},
        {"name": "Bob", "property": "Flat 2B", "rent": "800", "status": "Paid"},
        {"name": "Bob", "property": "Flat 2B", "rent": "800"},
    ]))

    assert [e.name for e in entries] == ["Bob"]
    assert entries[0].status == "Paid"
    assert len(warnings) == 2
    assert db.query(RentEntry).filter(RentEntry.month == 6).count() == 2


def test_failed_tenant_write_discards_new_uploads(db, storage, monkeypatch):
    tenant, _ = create_tenant(db, storage, TenantCreate(**_tenant_payload()), create_rent_entry=False)

    def failing_update(db, obj, data):
        raise GatewayError("Database error 500: write rejected")

    monkeypatch.setattr(tenants_service, "update_record", failing_update)
    with pytest.raises(GatewayError):
        update_tenant(
            db, storage, build_event_bus(), tenant.id, TenantUpdate(**_tenant_payload()),
            FilePayload("b.png", "image/png", b"new"), [FilePayload("lease.pdf", "application/pdf", b"lease")],
        )

    assert storage.objects == {}
    assert sorted(bucket for bucket, _ in storage.removed) == ["rentflow-public", "tenant-documents"]


def test_cascade_skips_soft_deleted_entries(db, storage, make_tenant):
    alice = make_tenant("Alice", "Flat 1A", "1000")
    deleted = _entry(db, alice, NEXT_YEAR, 1)
    soft_delete(db, RentEntry, [deleted.id])
    live_entry = _entry(db, alice, NEXT_YEAR, 2)

    update_tenant(db, storage, build_event_bus(), alice.id, TenantUpdate(**_tenant_payload(rent="1500")))

    db.refresh(deleted)
    db.refresh(live_entry)
    assert deleted.rent == Decimal("1000")
    assert live_entry.rent == Decimal("1500")
