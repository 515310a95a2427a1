import uuid

from sqlalchemy import Column, String, Date, DateTime, Numeric, JSON
from sqlalchemy.sql import func
from rentflow.core.database import Base


class Tenant(Base):
    __tablename__ = "tenants"

    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))

    # Identity
    name = Column(String, nullable=False, index=True)
    email = Column(String, nullable=False)
    phone = Column(String, nullable=True)

    # Occupancy
    property = Column(String, nullable=False, index=True)  # flat / unit label
    rent = Column(Numeric(12, 2), nullable=False)
    join_date = Column(Date, nullable=False)
    status = Column(String, nullable=False, default="Active")  # Active / Paid / Overdue
    type = Column(String, nullable=True)
    notes = Column(String, nullable=True)
    avatar = Column(String, nullable=False, default="https://placehold.co/80x80.png")

    # KYC
    father_name = Column(String, nullable=True)
    address = Column(String, nullable=True)
    date_of_birth = Column(Date, nullable=True)
    nid_number = Column(String, nullable=True)
    advance_deposit = Column(Numeric(12, 2), nullable=True)
    gas_meter_number = Column(String, nullable=True)
    electric_meter_number = Column(String, nullable=True)

    # Public URLs of uploaded documents
    documents = Column(JSON, nullable=False, default=list)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now(), server_default=func.now(), nullable=False)
    deleted_at = Column(DateTime(timezone=True), nullable=True, index=True)
