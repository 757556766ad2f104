"""Grades service: listing and bulk upsert of marks."""

import logging
from typing import Any, Dict, Iterable, List, Optional
from uuid import UUID

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ConflictError
from app.core.models import Grade, Student

from .schemas import GradeBulkResult, GradeResponse, GradeUpsert

logger = logging.getLogger(__name__)


async def list_grades(db: AsyncSession, student_id: Optional[UUID] = None) -> List[GradeResponse]:
    stmt = select(Grade)
    if student_id is not None:
        stmt = stmt.where(Grade.student_id == student_id)
    stmt = stmt.order_by(Grade.student_id, Grade.term, Grade.subject)
    result = await db.execute(stmt)
    return [GradeResponse.model_validate(g) for g in result.scalars().all()]


async def upsert_grades(db: AsyncSession, rows: Iterable[Dict[str, Any]]) -> GradeBulkResult:
    """
    Insert or update marks keyed by (student, subject, term).
    Rows that fail validation or reference an unknown student are skipped.
    """
    processed = 0
    skipped = 0
    valid: List[GradeUpsert] = []
    for index, row in enumerate(rows, start=1):
        try:
            valid.append(GradeUpsert.model_validate(row))
        except ValidationError as e:
            skipped += 1
            logger.warning("Grade row %d rejected: %s", index, e.errors()[0].get("msg"))

    student_ids = {g.student_id for g in valid}
    known = set()
    if student_ids:
        result = await db.execute(select(Student.id).where(Student.id.in_(student_ids)))
        known = set(result.scalars().all())

    for item in valid:
        if item.student_id not in known:
            skipped += 1
            continue
        subject = item.subject.strip()
        term = item.term.strip()
        existing = (
            await db.execute(
                select(Grade).where(
                    Grade.student_id == item.student_id,
                    Grade.subject == subject,
                    Grade.term == term,
                )
            )
        ).scalar_one_or_none()
        if existing:
            existing.marks = item.marks
        else:
            db.add(Grade(student_id=item.student_id, subject=subject, term=term, marks=item.marks))
        processed += 1

    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError("Grade upload conflicted with a concurrent change; please retry")
    logger.info("Grade upload finished: processed=%d skipped=%d", processed, skipped)
    return GradeBulkResult(processed=processed, skipped=skipped)
