import uuid

from sqlalchemy import Column, String, DateTime
from sqlalchemy.sql import func
from rentflow.core.database import Base


class Document(Base):
    __tablename__ = "documents"

    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    category = Column(String, nullable=False, index=True)
    description = Column(String, nullable=True)
    file_url = Column(String, nullable=False)
    file_type = Column(String, nullable=True)  # MIME type
    file_name = Column(String, nullable=True)  # original filename
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    deleted_at = Column(DateTime(timezone=True), nullable=True, index=True)
