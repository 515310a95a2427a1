import json
from datetime import date
from decimal import Decimal

import pytest

from rentflow.core.backup import export_json, export_snapshot, restore_snapshot, sql_backup
from rentflow.core.errors import RecordValidationError
from rentflow.core.rollover import sync_rent_for_period
from rentflow.models.expense import Expense
from rentflow.models.rent_entry import RentEntry
from rentflow.models.tenant import Tenant


def test_export_contains_every_table_and_timestamp(db, make_tenant):
    make_tenant("Alice")
    snapshot = export_snapshot(db)

    assert "exported_at" in snapshot
    assert len(snapshot["tenants"]) == 1
    assert snapshot["rent_entries"] == []
    assert json.loads(export_json(db))["tenants"][0]["name"] == "Alice"


def test_restore_regenerates_ids_and_remaps_rent_entries(db, make_tenant):
    alice_id = make_tenant("Alice").id
    bob_id = make_tenant("Bob", "Flat 2B", "800").id
    sync_rent_for_period(db, 2024, 3)
    db.add(Expense(date=date(2024, 3, 4), category="Utilities", amount=Decimal("75")))
    db.commit()
    snapshot = export_snapshot(db)

    counts = restore_snapshot(db, snapshot)

    assert counts["tenants"] == 2
    assert counts["rent_entries"] == 2
    assert counts["expenses"] == 1
    tenants = {t.name: t for t in db.query(Tenant).all()}
    assert tenants["Alice"].id != alice_id
    assert tenants["Bob"].id != bob_id
    for entry in db.query(RentEntry).all():
        assert tenants[entry.name].id == entry.tenant_id


def test_restore_accepts_legacy_rent_key_and_clears_missing_tables(db, make_tenant):
    make_tenant("Alice")
    db.add(Expense(date=date(2024, 3, 4), category="Utilities", amount=Decimal("75")))
    db.commit()

    counts = restore_snapshot(db, {
        "tenants": [{"id": "old-1", "name": "Zara", "email": "zara@example.com", "property": "Flat 9",
                     "rent": "900", "join_date": "2023-05-01", "status": "Active",
                     "avatar": "https://placehold.co/80x80.png", "documents": []}],
        "rentData": [{"id": "r-1", "tenant_id": "old-1", "year": 2024, "month": 1, "due_date": "2024-01-01",
                      "rent": "900", "status": "Paid", "name": "Zara", "property": "Flat 9"}],
    })

    assert counts["rent_entries"] == 1
    assert db.query(Expense).count() == 0
    zara = db.query(Tenant).one()
    assert db.query(RentEntry).one().tenant_id == zara.id


def test_restore_rejects_bad_rows_without_touching_data(db, make_tenant):
    make_tenant("Alice")

    with pytest.raises(RecordValidationError):
        restore_snapshot(db, {"tenants": [{"name": "Zara", "join_date": "not a date"}]})
    with pytest.raises(RecordValidationError):
        restore_snapshot(db, {"unrelated": []})

    assert db.query(Tenant).count() == 1


def test_sql_backup_dumps_insert_statements(db, make_tenant):
    make_tenant("O'Brien")
    dump = sql_backup(db)

    assert dump.startswith("-- RentFlow SQL Backup")
    assert "INSERT INTO public.tenants" in dump
    assert "'O''Brien'" in dump
