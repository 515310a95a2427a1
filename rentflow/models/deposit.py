import uuid

from sqlalchemy import Column, String, Integer, Date, DateTime, Numeric
from sqlalchemy.sql import func
from rentflow.core.database import Base


class Deposit(Base):
    __tablename__ = "deposits"

    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    year = Column(Integer, nullable=False, index=True)
    month = Column(Integer, nullable=False)  # 1-based
    amount = Column(Numeric(12, 2), nullable=False)
    deposit_date = Column(Date, nullable=False)
    receipt_url = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    deleted_at = Column(DateTime(timezone=True), nullable=True, index=True)
