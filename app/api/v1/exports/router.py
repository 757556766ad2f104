from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ServiceError
from app.db.session import get_db

from . import service

router = APIRouter(prefix="/api/v1/export", tags=["export"])

CSV_MEDIA_TYPE = "text/csv; charset=utf-8"


def _attachment(content, media_type: str, filename: str) -> Response:
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/students/csv")
async def export_students_csv(
    grade: Optional[str] = Query(None, description="Only this class"),
    db: AsyncSession = Depends(get_db),
) -> Response:
    content = await service.students_csv(db, grade=grade)
    prefix = f"students_class_{grade}" if grade else "students"
    return _attachment(content, CSV_MEDIA_TYPE, service.dated_filename(prefix, "csv"))


@router.get("/transactions/csv")
async def export_transactions_csv(db: AsyncSession = Depends(get_db)) -> Response:
    content = await service.transactions_csv(db)
    return _attachment(content, CSV_MEDIA_TYPE, service.dated_filename("fee_transactions", "csv"))


@router.get("/grades/csv")
async def export_grades_csv(db: AsyncSession = Depends(get_db)) -> Response:
    content = await service.grades_csv(db)
    return _attachment(content, CSV_MEDIA_TYPE, service.dated_filename("grades", "csv"))


@router.get("/students/excel")
async def export_students_excel(
    cols: Optional[str] = Query(None, description="Comma-separated column keys, e.g. admissionNumber,name,grade"),
    grade: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
) -> Response:
    """Students sheet with the chosen columns in the given order."""
    try:
        columns = service.parse_columns(cols)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    content = await service.students_excel(db, columns, grade=grade)
    return _attachment(content, service.XLSX_MEDIA_TYPE, service.dated_filename("students", "xlsx"))
