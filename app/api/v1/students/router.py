from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.enums import ImportStrategy
from app.core.exceptions import ServiceError
from app.db.session import get_db

from .schemas import (
    StudentCreate,
    StudentDeleteResponse,
    StudentImportRequest,
    StudentImportResult,
    StudentResponse,
    StudentUpdate,
)
from . import service

router = APIRouter(prefix="/api/v1/students", tags=["students"])


@router.get("", response_model=List[StudentResponse])
async def list_students(
    grade: Optional[str] = Query(None, description="Filter by class"),
    db: AsyncSession = Depends(get_db),
):
    return await service.list_students(db, grade=grade)


@router.post("", response_model=StudentResponse, status_code=status.HTTP_201_CREATED)
async def create_student(
    payload: StudentCreate,
    db: AsyncSession = Depends(get_db),
):
    try:
        return await service.create_student(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post("/import", response_model=StudentImportResult)
async def import_students(
    payload: StudentImportRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    Bulk import. Existing admission numbers are skipped (strategy=skip) or updated (strategy=upsert).
    Rows failing validation are counted in `invalid`.
    """
    try:
        return await service.import_students(db, payload.students, payload.strategy)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post("/import/csv", response_model=StudentImportResult)
async def import_students_csv(
    file: UploadFile = File(..., description="CSV with a header row"),
    strategy: ImportStrategy = Query(ImportStrategy.SKIP),
    db: AsyncSession = Depends(get_db),
):
    """Bulk import from a CSV upload (export headers or snake_case headers)."""
    content = await file.read()
    try:
        return await service.import_students_csv(db, content, strategy)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/{student_id}", response_model=StudentResponse)
async def get_student(
    student_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    obj = await service.get_student(db, student_id)
    if not obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Student not found")
    return obj


@router.put("/{admission_number}", response_model=StudentResponse)
async def update_student(
    admission_number: str,
    payload: StudentUpdate,
    db: AsyncSession = Depends(get_db),
):
    """Partial update addressed by admission number."""
    try:
        obj = await service.update_student(db, admission_number, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    if not obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Student not found")
    return obj


@router.delete("/{student_id}", response_model=StudentDeleteResponse)
async def delete_student(
    student_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    """Delete a student together with their grades and fee transactions."""
    deleted = await service.delete_student(db, student_id)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Student not found")
    return StudentDeleteResponse(deleted=student_id)
