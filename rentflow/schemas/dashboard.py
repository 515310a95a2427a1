from pydantic import BaseModel
from typing import Dict, List, Optional

from rentflow.schemas.deposit import DepositOut
from rentflow.schemas.document import DocumentOut
from rentflow.schemas.expense import ExpenseOut
from rentflow.schemas.notice import NoticeOut
from rentflow.schemas.rent_entry import RentEntryOut
from rentflow.schemas.settings import UnifiedSettings
from rentflow.schemas.tenant import TenantOut
from rentflow.schemas.work_detail import WorkDetailOut
from rentflow.schemas.zakat import ZakatBankDetailOut, ZakatTransactionOut


class DashboardOut(BaseModel):
    """Everything the dashboard renders, fetched in one round trip."""
    tenants: List[TenantOut] = []
    rent_entries: List[RentEntryOut] = []
    expenses: List[ExpenseOut] = []
    deposits: List[DepositOut] = []
    notices: List[NoticeOut] = []
    work_details: List[WorkDetailOut] = []
    zakat_transactions: List[ZakatTransactionOut] = []
    zakat_bank_details: List[ZakatBankDetailOut] = []
    documents: List[DocumentOut] = []
    settings: UnifiedSettings


class ClearPeriodIn(BaseModel):
    """Clear one month, or the whole year when ``month`` is omitted."""
    year: int
    month: Optional[int] = None


class TableCounts(BaseModel):
    """Rows inserted or removed per table."""
    counts: Dict[str, int]
