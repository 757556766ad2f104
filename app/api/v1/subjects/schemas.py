from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class SubjectCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    code: str = Field(..., min_length=1, max_length=50)


class SubjectResponse(BaseModel):
    id: UUID
    name: str
    code: str
    created_at: datetime

    class Config:
        from_attributes = True
