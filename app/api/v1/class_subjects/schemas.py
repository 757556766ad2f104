from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class ClassSubjectCreate(BaseModel):
    subject_id: UUID = Field(..., description="Subject taught in this class")


class ClassSubjectResponse(BaseModel):
    id: UUID
    grade: str
    subject_id: UUID
    subject_name: str
    subject_code: str
    created_at: datetime
