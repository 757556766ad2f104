from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ServiceError
from app.db.session import get_db

from .schemas import ClassSubjectCreate, ClassSubjectResponse
from . import service

router = APIRouter(prefix="/api/v1/classes", tags=["class-subjects"])


@router.get("/{grade}/subjects", response_model=List[ClassSubjectResponse])
async def list_class_subjects(
    grade: str,
    db: AsyncSession = Depends(get_db),
):
    return await service.list_class_subjects(db, grade)


@router.post(
    "/{grade}/subjects",
    response_model=ClassSubjectResponse,
    status_code=status.HTTP_201_CREATED,
)
async def assign_subject(
    grade: str,
    payload: ClassSubjectCreate,
    db: AsyncSession = Depends(get_db),
):
    try:
        return await service.assign_subject(db, grade, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.delete("/{grade}/subjects/{subject_id}", status_code=status.HTTP_204_NO_CONTENT)
async def unassign_subject(
    grade: str,
    subject_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    deleted = await service.unassign_subject(db, grade, subject_id)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Class-subject assignment not found")
