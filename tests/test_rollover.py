from datetime import date
from decimal import Decimal

import pytest

from rentflow.core.errors import RecordValidationError
from rentflow.core.rollover import (
    clamp_day,
    clear_all,
    clear_period,
    clear_tenant,
    previous_period,
    sync_expenses_from_previous_month,
    sync_rent_for_period,
    sync_tenants_from_previous_year,
)
from rentflow.core.backup import TRANSACTIONAL_MODELS
from rentflow.core.lifecycle import now_utc
from rentflow.models.expense import Expense
from rentflow.models.rent_entry import RentEntry
from rentflow.models.tenant import Tenant
from rentflow.models.zakat import ZakatBankDetail


def _entries(db, year, month):
    return (
        db.query(RentEntry)
        .filter(RentEntry.year == year, RentEntry.month == month, RentEntry.deleted_at.is_(None))
        .order_by(RentEntry.name)
        .all()
    )


def test_rent_sync_creates_pending_entry_with_tenant_snapshot(db, make_tenant):
    alice = make_tenant("Alice", "Flat 1A", "1000", join_date=date(2024, 1, 15))

    assert sync_rent_for_period(db, 2024, 3) == 1

    (entry,) = _entries(db, 2024, 3)
    assert entry.tenant_id == alice.id
    assert entry.status == "Pending"
    assert entry.due_date == date(2024, 3, 1)
    assert entry.rent == Decimal("1000")
    assert (entry.name, entry.property, entry.avatar) == ("Alice", "Flat 1A", alice.avatar)


def test_rent_sync_is_idempotent(db, make_tenant):
    make_tenant("Alice")
    make_tenant("Bob", "Flat 2B", "800")

    assert sync_rent_for_period(db, 2024, 3) == 2
    assert sync_rent_for_period(db, 2024, 3) == 0
    assert len(_entries(db, 2024, 3)) == 2


def test_rent_sync_skips_future_joiners_and_deleted_tenants(db, make_tenant):
    make_tenant("Alice", join_date=date(2024, 1, 15))
    make_tenant("Later", join_date=date(2024, 4, 1))
    make_tenant("Midmonth", join_date=date(2024, 3, 20))
    make_tenant("Gone", deleted_at=now_utc())

    sync_rent_for_period(db, 2024, 3)

    assert [e.name for e in _entries(db, 2024, 3)] == ["Alice", "Midmonth"]


def test_rent_sync_ignores_soft_deleted_entry_when_checking_coverage(db, make_tenant):
    alice = make_tenant("Alice")
    db.add(RentEntry(
        tenant_id=alice.id, year=2024, month=3, due_date=date(2024, 3, 1), rent=Decimal("1000"),
        status="Paid", name="Alice", property="Flat 1A", deleted_at=now_utc(),
    ))
    db.commit()

    assert sync_rent_for_period(db, 2024, 3) == 1


def test_rent_sync_rejects_bad_month(db):
    with pytest.raises(RecordValidationError):
        sync_rent_for_period(db, 2024, 13)


def test_previous_year_sync_carries_active_tenants(db, make_tenant):
    alice = make_tenant("Alice")
    bob = make_tenant("Bob", "Flat 2B", status="Overdue")
    carol = make_tenant("Carol", "Flat 3C")
    for t in (alice, bob):
        db.add(RentEntry(
            tenant_id=t.id, year=2023, month=11, due_date=date(2023, 11, 1), rent=t.rent,
            status="Paid", name=t.name, property=t.property,
        ))
    db.commit()

    assert sync_tenants_from_previous_year(db, 2024, 1) == 1
    assert [e.tenant_id for e in _entries(db, 2024, 1)] == [alice.id]
    assert carol.id not in {e.tenant_id for e in _entries(db, 2024, 1)}
    assert sync_tenants_from_previous_year(db, 2024, 1) == 0


def test_clamp_day():
    assert clamp_day(2024, 4, 31) == date(2024, 4, 30)
    assert clamp_day(2023, 2, 30) == date(2023, 2, 28)
    assert clamp_day(2024, 2, 30) == date(2024, 2, 29)
    assert clamp_day(2024, 3, 29) == date(2024, 3, 29)


def test_previous_period_wraps_year():
    assert previous_period(2024, 1) == (2023, 12)
    assert previous_period(2024, 7) == (2024, 6)


def test_expense_sync_clones_with_clamped_day_and_due_status(db):
    db.add_all([
        Expense(date=date(2024, 3, 31), category="Utilities", amount=Decimal("120"), description="Electricity", status="Paid"),
        Expense(date=date(2024, 3, 5), category="Maintenance", amount=Decimal("40"), description="Plumber", status="Due"),
        Expense(date=date(2024, 2, 10), category="Other", amount=Decimal("9"), description="Out of range"),
    ])
    db.commit()

    assert sync_expenses_from_previous_month(db, 2024, 4) == 2

    clones = db.query(Expense).filter(Expense.date >= date(2024, 4, 1)).order_by(Expense.date).all()
    assert [(c.date, c.category, c.status) for c in clones] == [
        (date(2024, 4, 5), "Maintenance", "Due"),
        (date(2024, 4, 30), "Utilities", "Due"),
    ]
    assert clones[1].amount == Decimal("120")
    assert clones[1].description == "Electricity"


def test_expense_sync_leap_day_and_january(db):
    db.add_all([
        Expense(date=date(2024, 2, 29), category="Utilities", amount=Decimal("50")),
        Expense(date=date(2023, 12, 31), category="Insurance", amount=Decimal("300")),
    ])
    db.commit()

    assert sync_expenses_from_previous_month(db, 2024, 3) == 1
    assert db.query(Expense).filter(Expense.date == date(2024, 3, 29)).count() == 1

    assert sync_expenses_from_previous_month(db, 2024, 1) == 1
    assert db.query(Expense).filter(Expense.date == date(2024, 1, 31)).count() == 1


def test_expense_sync_has_no_duplicate_guard(db):
    db.add(Expense(date=date(2024, 3, 10), category="Utilities", amount=Decimal("10")))
    db.commit()

    sync_expenses_from_previous_month(db, 2024, 4)
    sync_expenses_from_previous_month(db, 2024, 4)

    assert db.query(Expense).filter(Expense.date == date(2024, 4, 10)).count() == 2


def test_expense_sync_skips_deleted_expenses(db):
    db.add(Expense(date=date(2024, 3, 10), category="Utilities", amount=Decimal("10"), deleted_at=now_utc()))
    db.commit()
    assert sync_expenses_from_previous_month(db, 2024, 4) == 0


def test_clear_period_month_and_year(db, make_tenant):
    alice = make_tenant("Alice")
    sync_rent_for_period(db, 2024, 3)
    sync_rent_for_period(db, 2024, 4)
    db.add_all([
        Expense(date=date(2024, 3, 2), category="Utilities", amount=Decimal("10")),
        Expense(date=date(2024, 4, 2), category="Utilities", amount=Decimal("10")),
    ])
    db.commit()

    assert clear_period(db, 2024, 3) == {"rent_entries": 1, "expenses": 1}
    assert clear_period(db, 2024) == {"rent_entries": 1, "expenses": 1}
    assert db.query(Tenant).filter(Tenant.id == alice.id).count() == 1


def test_clear_tenant_removes_tenant_and_its_entries(db, make_tenant):
    alice = make_tenant("Alice")
    bob = make_tenant("Bob", "Flat 2B")
    sync_rent_for_period(db, 2024, 3)

    assert clear_tenant(db, alice.id) == {"rent_entries": 1, "tenants": 1}
    assert db.query(Tenant).count() == 1
    assert db.query(RentEntry).one().tenant_id == bob.id


def test_clear_all_keeps_configuration_tables(db, make_tenant):
    make_tenant("Alice")
    sync_rent_for_period(db, 2024, 3)
    db.add(ZakatBankDetail(bank_name="City Bank", account_number="001"))
    db.commit()

    counts = clear_all(db, TRANSACTIONAL_MODELS)

    assert counts["tenants"] == 1
    assert counts["rent_entries"] == 1
    assert db.query(ZakatBankDetail).count() == 1


def test_rent_sync_bills_from_join_month_only(db, make_tenant):
    alice = make_tenant("Alice", "Flat 1A", "1200", join_date=date(2024, 1, 15))

    assert sync_rent_for_period(db, 2024, 1) == 1
    assert sync_rent_for_period(db, 2023, 12) == 0

    (entry,) = db.query(RentEntry).all()
    assert (entry.tenant_id, entry.year, entry.month) == (alice.id, 2024, 1)
    assert entry.status == "Pending"
    assert entry.due_date == date(2024, 1, 1)
    assert entry.rent == Decimal("1200")
