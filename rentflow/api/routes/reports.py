"""
Reports endpoints.
Monthly rent-roll / expense totals and a yearly trend, plus CSV export of the
monthly report.
"""
import csv
import io
from datetime import date

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from sqlalchemy import func
from sqlalchemy.orm import Session

from rentflow.api.deps import get_db
from rentflow.core.auth import User, get_current_user
from rentflow.core.rollover import next_period_start, period_start
from rentflow.models.deposit import Deposit
from rentflow.models.expense import Expense
from rentflow.models.rent_entry import RentEntry
from rentflow.schemas.report import ExpenseCategoryItem, MonthPoint, MonthlyReportOut, YearlyReportOut

router = APIRouter(prefix="/reports", tags=["reports"])


def _sum(query) -> float:
    return float(query.scalar() or 0.0)


def _rent_query(db: Session, year: int, month: int):
    return db.query(func.coalesce(func.sum(RentEntry.rent), 0)).filter(
        RentEntry.deleted_at.is_(None),
        RentEntry.year == year,
        RentEntry.month == month,
    )


def _expense_query(db: Session, start: date, end: date):
    return db.query(func.coalesce(func.sum(Expense.amount), 0)).filter(
        Expense.deleted_at.is_(None),
        Expense.date >= start,
        Expense.date < end,
    )


def _build_monthly(db: Session, year: int, month: int) -> MonthlyReportOut:
    start, end = period_start(year, month), next_period_start(year, month)

    rent_due = _sum(_rent_query(db, year, month))
    rent_collected = _sum(_rent_query(db, year, month).filter(RentEntry.status == "Paid"))

    entries = db.query(RentEntry).filter(
        RentEntry.deleted_at.is_(None), RentEntry.year == year, RentEntry.month == month
    )
    entries_total = entries.count()
    entries_paid = entries.filter(RentEntry.status == "Paid").count()

    expenses_total = _sum(_expense_query(db, start, end))
    expenses_paid = _sum(_expense_query(db, start, end).filter(Expense.status == "Paid"))

    deposited = _sum(
        db.query(func.coalesce(func.sum(Deposit.amount), 0)).filter(
            Deposit.deleted_at.is_(None), Deposit.year == year, Deposit.month == month
        )
    )

    # --- Expense breakdown by category ---
    cat_rows = (
        db.query(Expense.category, func.sum(Expense.amount))
        .filter(Expense.deleted_at.is_(None), Expense.date >= start, Expense.date < end)
        .group_by(Expense.category)
        .order_by(func.sum(Expense.amount).desc())
        .all()
    )
    breakdown = [
        ExpenseCategoryItem(
            category=r[0],
            amount=round(float(r[1] or 0), 2),
            percentage=round(float(r[1] or 0) / expenses_total * 100, 1) if expenses_total > 0 else 0,
        )
        for r in cat_rows
    ]

    return MonthlyReportOut(
        year=year,
        month=month,
        rent_due=round(rent_due, 2),
        rent_collected=round(rent_collected, 2),
        rent_pending=round(rent_due - rent_collected, 2),
        entries_total=entries_total,
        entries_paid=entries_paid,
        expenses_total=round(expenses_total, 2),
        expenses_paid=round(expenses_paid, 2),
        expenses_due=round(expenses_total - expenses_paid, 2),
        deposited=round(deposited, 2),
        net=round(rent_collected - expenses_paid, 2),
        expense_breakdown=breakdown,
    )


@router.get("/monthly", response_model=MonthlyReportOut)
def monthly_report(
    year: int = Query(...),
    month: int = Query(..., ge=1, le=12),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return _build_monthly(db, year, month)


@router.get("/monthly/csv")
def monthly_report_csv(
    year: int = Query(...),
    month: int = Query(..., ge=1, le=12),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Monthly report plus the month's rent roll as CSV."""
    report = _build_monthly(db, year, month)

    buf = io.StringIO()
    writer = csv.writer(buf)
    writer.writerow(["Metric", "Value"])
    for key in ("rent_due", "rent_collected", "rent_pending", "expenses_total", "expenses_paid",
                "expenses_due", "deposited", "net"):
        writer.writerow([key, getattr(report, key)])

    writer.writerow([])
    writer.writerow(["Tenant", "Property", "Rent", "Status", "Payment Date", "Collected By"])
    entries = (
        db.query(RentEntry)
        .filter(RentEntry.deleted_at.is_(None), RentEntry.year == year, RentEntry.month == month)
        .order_by(RentEntry.name)
        .all()
    )
    for e in entries:
        writer.writerow([e.name, e.property, e.rent, e.status, e.payment_date or "", e.collected_by or ""])

    buf.seek(0)
    filename = f"rentflow-report-{year:04d}-{month:02d}.csv"
    return StreamingResponse(
        iter([buf.getvalue()]),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/yearly", response_model=YearlyReportOut)
def yearly_report(
    year: int = Query(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    months = []
    for month in range(1, 13):
        start, end = period_start(year, month), next_period_start(year, month)
        collected = _sum(_rent_query(db, year, month).filter(RentEntry.status == "Paid"))
        expenses = _sum(_expense_query(db, start, end))
        months.append(MonthPoint(month=start.strftime("%b %Y"), collected=round(collected, 2), expenses=round(expenses, 2)))

    total_collected = sum(m.collected for m in months)
    total_expenses = sum(m.expenses for m in months)
    return YearlyReportOut(
        year=year,
        months=months,
        total_collected=round(total_collected, 2),
        total_expenses=round(total_expenses, 2),
        net=round(total_collected - total_expenses, 2),
    )
