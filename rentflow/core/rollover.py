"""
Period rollover: materializing rent entries and cloning expenses into a new month.

Months are 1-based. The due date of period (year, month) is its first day.
"""
import logging
from calendar import monthrange
from datetime import date
from typing import Iterable, List, Optional, Tuple

from sqlalchemy.orm import Session

from rentflow.core.errors import RecordValidationError
from rentflow.core.lifecycle import live, purge
from rentflow.models.expense import Expense
from rentflow.models.rent_entry import RentEntry
from rentflow.models.tenant import Tenant

logger = logging.getLogger(__name__)

# Tenant fields copied onto rent entries
SNAPSHOT_FIELDS = ("name", "property", "rent", "avatar")


def period_start(year: int, month: int) -> date:
    if not 1 <= month <= 12:
        raise RecordValidationError(f"month must be between 1 and 12, got {month}", field="month")
    if not 1 <= year <= 9999:
        raise RecordValidationError(f"Invalid year {year}", field="year")
    return date(year, month, 1)


def next_period_start(year: int, month: int) -> date:
    if month == 12:
        return date(year + 1, 1, 1)
    return date(year, month + 1, 1)


def previous_period(year: int, month: int) -> Tuple[int, int]:
    if month == 1:
        return year - 1, 12
    return year, month - 1


def rent_entry_from_tenant(tenant: Tenant, year: int, month: int, status: str = "Pending") -> RentEntry:
    """A rent entry for (year, month) carrying a snapshot of the tenant."""
    return RentEntry(
        tenant_id=tenant.id,
        year=year,
        month=month,
        due_date=period_start(year, month),
        rent=tenant.rent,
        status=status,
        name=tenant.name,
        property=tenant.property,
        avatar=tenant.avatar,
    )


def covered_tenant_ids(db: Session, year: int, month: int) -> set:
    rows = live(db.query(RentEntry.tenant_id), RentEntry).filter(
        RentEntry.year == year, RentEntry.month == month
    ).all()
    return {tenant_id for (tenant_id,) in rows}


def _insert_entries(db: Session, tenants: Iterable[Tenant], year: int, month: int) -> int:
    entries = [rent_entry_from_tenant(t, year, month) for t in tenants]
    if not entries:
        return 0
    db.add_all(entries)
    db.commit()
    return len(entries)


def sync_rent_for_period(db: Session, year: int, month: int) -> int:
    """
    Create Pending rent entries for tenants not yet billed in (year, month).

    A tenant qualifies when it has no live entry for the period and joined in
    or before that month. Tenants without a join date are never billed.
    Running it again for the same period creates nothing new.
    """
    start = period_start(year, month)
    covered = covered_tenant_ids(db, year, month)

    tenants = live(db.query(Tenant), Tenant).order_by(Tenant.name).all()
    due = [
        t for t in tenants
        if t.id not in covered
        and t.join_date is not None
        and t.join_date.replace(day=1) <= start
    ]
    if not due:
        logger.info("Rent sync %04d-%02d: nothing to create", year, month)
        return 0

    count = _insert_entries(db, due, year, month)
    logger.info("Rent sync %04d-%02d: created %d entries", year, month, count)
    return count


def sync_tenants_from_previous_year(db: Session, year: int, month: int) -> int:
    """
    Carry last year's tenants into (year, month).

    Only Active, non-deleted tenants that had a live rent entry in ``year - 1``
    and are not yet billed for the target period get a Pending entry.
    """
    period_start(year, month)
    covered = covered_tenant_ids(db, year, month)

    prev_ids = {
        tenant_id
        for (tenant_id,) in live(db.query(RentEntry.tenant_id), RentEntry)
        .filter(RentEntry.year == year - 1)
        .distinct()
        .all()
    }
    if not prev_ids:
        logger.info("Previous-year sync %04d-%02d: no tenants in %d", year, month, year - 1)
        return 0

    tenants = (
        live(db.query(Tenant), Tenant)
        .filter(Tenant.id.in_(prev_ids), Tenant.status == "Active")
        .order_by(Tenant.name)
        .all()
    )
    count = _insert_entries(db, [t for t in tenants if t.id not in covered], year, month)
    logger.info("Previous-year sync %04d-%02d: created %d entries", year, month, count)
    return count


def clamp_day(year: int, month: int, day: int) -> date:
    _, last_day = monthrange(year, month)
    return date(year, month, min(day, last_day))


def sync_expenses_from_previous_month(db: Session, year: int, month: int) -> int:
    """
    Clone last month's expenses into (year, month) with status Due.

    The day of month is kept, clamped to the target month's length. There is
    no duplicate guard: running it twice clones the expenses twice.
    """
    start = period_start(year, month)
    prev_year, prev_month = previous_period(year, month)
    prev_start = period_start(prev_year, prev_month)

    expenses = (
        live(db.query(Expense), Expense)
        .filter(Expense.date >= prev_start, Expense.date < start)
        .order_by(Expense.date)
        .all()
    )
    if not expenses:
        logger.info("Expense sync %04d-%02d: no expenses in %04d-%02d", year, month, prev_year, prev_month)
        return 0

    clones = [
        Expense(
            date=clamp_day(year, month, e.date.day),
            category=e.category,
            amount=e.amount,
            description=e.description,
            status="Due",
        )
        for e in expenses
    ]
    db.add_all(clones)
    db.commit()
    logger.info("Expense sync %04d-%02d: cloned %d expenses", year, month, len(clones))
    return len(clones)


def sync_future_rent_entries(db: Session, event) -> int:
    """
    ``TenantUpdated`` listener: push the tenant's new snapshot fields onto its
    unpaid, non-deleted rent entries due after today. Paid and past entries are
    history and stay as they are.
    """
    fields = [f for f in SNAPSHOT_FIELDS if f in event.changed_fields]
    if not fields:
        return 0

    tenant = db.query(Tenant).filter(Tenant.id == event.tenant_id).first()
    if tenant is None:
        return 0

    patch = {getattr(RentEntry, f): getattr(tenant, f) for f in fields}
    count = (
        live(db.query(RentEntry), RentEntry)
        .filter(
            RentEntry.tenant_id == tenant.id,
            RentEntry.status != "Paid",
            RentEntry.due_date > date.today(),
        )
        .update(patch, synchronize_session=False)
    )
    db.commit()
    logger.info("Synced %s to %d future rent entries of tenant %s", ", ".join(fields), count, tenant.id)
    return count


# --- Data management (physical deletes) ---

def clear_period(db: Session, year: int, month: Optional[int] = None) -> dict:
    """Remove all rent entries and expenses of a month, or of a whole year."""
    if month is None:
        start, end = date(year, 1, 1), date(year + 1, 1, 1)
        rent_criteria = [RentEntry.year == year]
    else:
        start, end = period_start(year, month), next_period_start(year, month)
        rent_criteria = [RentEntry.year == year, RentEntry.month == month]

    rent_count = purge(db, RentEntry, *rent_criteria, commit=False)
    expense_count = purge(db, Expense, Expense.date >= start, Expense.date < end, commit=False)
    db.commit()
    return {"rent_entries": rent_count, "expenses": expense_count}


def clear_tenant(db: Session, tenant_id: str) -> dict:
    """Remove a tenant together with all of its rent entries."""
    if not tenant_id:
        raise RecordValidationError("tenant_id is required", field="tenant_id")
    rent_count = purge(db, RentEntry, RentEntry.tenant_id == tenant_id, commit=False)
    tenant_count = purge(db, Tenant, Tenant.id == tenant_id, commit=False)
    db.commit()
    return {"rent_entries": rent_count, "tenants": tenant_count}


def clear_all(db: Session, models: List) -> dict:
    """Remove every row of the given transactional tables in one transaction."""
    counts = {}
    for model in models:
        counts[model.__tablename__] = purge(db, model, commit=False)
    db.commit()
    return counts
