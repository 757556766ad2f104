"""Grade (marks) schemas."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, Field


class GradeUpsert(BaseModel):
    """One row of a bulk marks upload. (student_id, subject, term) identifies the grade."""

    student_id: UUID
    subject: str = Field(..., min_length=1, max_length=100)
    marks: Decimal = Field(..., ge=0, le=100)
    term: str = Field(..., min_length=1, max_length=50)


class GradeResponse(BaseModel):
    id: UUID
    student_id: UUID
    subject: str
    marks: Decimal
    term: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class GradeBulkResult(BaseModel):
    processed: int
    skipped: int
