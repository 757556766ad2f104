"""Student schemas."""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from app.core.enums import ImportStrategy, StudentStatus


class StudentCreate(BaseModel):
    admission_number: str = Field(..., min_length=1, max_length=50)
    name: str = Field(..., min_length=1, max_length=255)
    date_of_birth: date
    admission_date: date
    aadhar_number: Optional[str] = Field(None, max_length=20)
    pen_number: Optional[str] = Field(None, max_length=30)
    aapar_id: Optional[str] = Field(None, max_length=30)
    mobile_number: Optional[str] = Field(None, max_length=20)
    address: Optional[str] = None
    grade: Optional[str] = Field(None, max_length=20, description="Class, e.g. 5 or UKG")
    section: Optional[str] = Field(None, max_length=20)
    father_name: Optional[str] = Field(None, max_length=255)
    mother_name: Optional[str] = Field(None, max_length=255)
    yearly_fee_amount: Decimal = Field(..., ge=0)
    status: StudentStatus = StudentStatus.ACTIVE
    left_date: Optional[date] = None
    leaving_reason: Optional[str] = None


class StudentUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    date_of_birth: Optional[date] = None
    admission_date: Optional[date] = None
    aadhar_number: Optional[str] = Field(None, max_length=20)
    pen_number: Optional[str] = Field(None, max_length=30)
    aapar_id: Optional[str] = Field(None, max_length=30)
    mobile_number: Optional[str] = Field(None, max_length=20)
    address: Optional[str] = None
    grade: Optional[str] = Field(None, max_length=20)
    section: Optional[str] = Field(None, max_length=20)
    father_name: Optional[str] = Field(None, max_length=255)
    mother_name: Optional[str] = Field(None, max_length=255)
    yearly_fee_amount: Optional[Decimal] = Field(None, ge=0)
    status: Optional[StudentStatus] = None
    left_date: Optional[date] = None
    leaving_reason: Optional[str] = None


class StudentResponse(BaseModel):
    id: UUID
    admission_number: str
    name: str
    date_of_birth: date
    admission_date: date
    aadhar_number: Optional[str] = None
    pen_number: Optional[str] = None
    aapar_id: Optional[str] = None
    mobile_number: Optional[str] = None
    address: Optional[str] = None
    grade: Optional[str] = None
    section: Optional[str] = None
    father_name: Optional[str] = None
    mother_name: Optional[str] = None
    yearly_fee_amount: Decimal
    status: str
    left_date: Optional[date] = None
    leaving_reason: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class StudentDeleteResponse(BaseModel):
    deleted: UUID


# --- Bulk import ---
class StudentImportRequest(BaseModel):
    students: List[Dict[str, Any]] = Field(..., description="Rows as StudentCreate-shaped objects")
    strategy: ImportStrategy = ImportStrategy.SKIP


class StudentImportResult(BaseModel):
    added: int
    updated: int
    skipped: int
    skipped_admission_numbers: List[str]
    invalid: int
