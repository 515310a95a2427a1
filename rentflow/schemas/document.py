from pydantic import BaseModel, Field
from datetime import datetime
from typing import List, Optional


class DocumentUpdate(BaseModel):
    category: str = Field(..., min_length=1)
    description: Optional[str] = None


class DocumentOut(BaseModel):
    id: str
    category: str
    description: Optional[str] = None
    file_url: str
    file_type: Optional[str] = None
    file_name: Optional[str] = None
    created_at: datetime
    deleted_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class DocumentWriteOut(BaseModel):
    document: DocumentOut
    warnings: List[str] = []
