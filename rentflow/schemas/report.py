from pydantic import BaseModel
from typing import List


class ExpenseCategoryItem(BaseModel):
    """Expense total for one category."""
    category: str
    amount: float = 0.0
    percentage: float = 0.0


class MonthlyReportOut(BaseModel):
    """Rent roll and expense totals for one month."""
    year: int
    month: int
    rent_due: float = 0.0
    rent_collected: float = 0.0
    rent_pending: float = 0.0
    entries_total: int = 0
    entries_paid: int = 0
    expenses_total: float = 0.0
    expenses_paid: float = 0.0
    expenses_due: float = 0.0
    deposited: float = 0.0
    net: float = 0.0  # collected rent minus paid expenses
    expense_breakdown: List[ExpenseCategoryItem] = []


class MonthPoint(BaseModel):
    """Single point in the yearly income/expense trend."""
    month: str
    collected: float = 0.0
    expenses: float = 0.0


class YearlyReportOut(BaseModel):
    year: int
    months: List[MonthPoint] = []
    total_collected: float = 0.0
    total_expenses: float = 0.0
    net: float = 0.0
