import uuid

from sqlalchemy import Column, String, Date, DateTime, Numeric
from sqlalchemy.sql import func
from rentflow.core.database import Base


class WorkDetail(Base):
    __tablename__ = "work_details"

    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    title = Column(String, nullable=False)
    description = Column(String, nullable=True)
    category = Column(String, nullable=True)
    status = Column(String, nullable=False, default="To Do")  # To Do / In Progress / Completed
    assigned_to_id = Column(String, nullable=True)
    product_cost = Column(Numeric(12, 2), nullable=True)
    worker_cost = Column(Numeric(12, 2), nullable=True)
    due_date = Column(Date, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    deleted_at = Column(DateTime(timezone=True), nullable=True, index=True)
