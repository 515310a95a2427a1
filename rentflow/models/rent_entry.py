import uuid

from sqlalchemy import Column, String, Integer, Date, DateTime, Numeric, Index
from sqlalchemy.sql import func
from rentflow.core.database import Base


class RentEntry(Base):
    __tablename__ = "rent_entries"

    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))

    # Weak back-reference: no FK so the row survives tenant purges and restores
    tenant_id = Column(String, nullable=False, index=True)

    # Billing period, month is 1-based
    year = Column(Integer, nullable=False, index=True)
    month = Column(Integer, nullable=False, index=True)
    due_date = Column(Date, nullable=False, index=True)  # first day of the period

    rent = Column(Numeric(12, 2), nullable=False)
    status = Column(String, nullable=False, default="Pending")  # Pending / Paid / Overdue
    payment_date = Column(Date, nullable=True)
    collected_by = Column(String, nullable=True)
    payment_for_month = Column(Integer, nullable=True)

    # Denormalized snapshot of the tenant at write time
    name = Column(String, nullable=False)
    property = Column(String, nullable=False)
    avatar = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now(), server_default=func.now(), nullable=False)
    deleted_at = Column(DateTime(timezone=True), nullable=True, index=True)

    __table_args__ = (
        # One live entry per tenant per period
        Index(
            "uq_rent_entries_tenant_period",
            "tenant_id",
            "year",
            "month",
            unique=True,
            postgresql_where=deleted_at.is_(None),
            sqlite_where=deleted_at.is_(None),
        ),
    )
