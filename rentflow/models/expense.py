import uuid

from sqlalchemy import Column, String, Date, DateTime, Numeric
from sqlalchemy.sql import func
from rentflow.core.database import Base


class Expense(Base):
    __tablename__ = "expenses"

    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))

    date = Column(Date, nullable=False, index=True)
    category = Column(String, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    description = Column(String, nullable=False, default="")
    status = Column(String, nullable=False, default="Due")  # Paid / Due

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    deleted_at = Column(DateTime(timezone=True), nullable=True, index=True)
