import uuid

from sqlalchemy import Column, String, Integer, DateTime, Text
from sqlalchemy.sql import func
from rentflow.core.database import Base


class Notice(Base):
    __tablename__ = "notices"

    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    year = Column(Integer, nullable=False, index=True)
    month = Column(Integer, nullable=False)  # 1-based
    content = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    deleted_at = Column(DateTime(timezone=True), nullable=True, index=True)
