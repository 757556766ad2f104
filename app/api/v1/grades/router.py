from typing import Any, Dict, List, Optional
from uuid import UUID

from fastapi import APIRouter, Body, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ServiceError
from app.db.session import get_db

from .schemas import GradeBulkResult, GradeResponse
from . import service

router = APIRouter(prefix="/api/v1/grades", tags=["grades"])


@router.get("", response_model=List[GradeResponse])
async def list_grades(
    student_id: Optional[UUID] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    return await service.list_grades(db, student_id=student_id)


@router.post("", response_model=GradeBulkResult)
async def upsert_grades(
    rows: List[Dict[str, Any]] = Body(..., description="[{student_id, subject, marks, term}, ...]"),
    db: AsyncSession = Depends(get_db),
):
    """Bulk upsert by (student, subject, term). Invalid rows are skipped and counted."""
    try:
        return await service.upsert_grades(db, rows)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
