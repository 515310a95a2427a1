import uuid

from sqlalchemy import Column, String, Date, DateTime, Numeric
from sqlalchemy.sql import func
from rentflow.core.database import Base


class ZakatTransaction(Base):
    __tablename__ = "zakat_transactions"

    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    transaction_date = Column(Date, nullable=False, index=True)
    type = Column(String, nullable=False)  # inflow / outflow
    amount = Column(Numeric(12, 2), nullable=False)
    source_or_recipient = Column(String, nullable=False)
    description = Column(String, nullable=True)
    receipt_url = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    deleted_at = Column(DateTime(timezone=True), nullable=True, index=True)


class ZakatBankDetail(Base):
    __tablename__ = "zakat_bank_details"

    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    bank_name = Column(String, nullable=False)
    account_number = Column(String, nullable=False)
    account_holder = Column(String, nullable=True)
    logo_url = Column(String, nullable=True)
    location = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    deleted_at = Column(DateTime(timezone=True), nullable=True, index=True)
