from typing import List
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ConflictError, NotFoundError
from app.core.models import ClassSubject, Subject

from .schemas import ClassSubjectCreate, ClassSubjectResponse


def _to_response(cs: ClassSubject, subject: Subject) -> ClassSubjectResponse:
    return ClassSubjectResponse(
        id=cs.id,
        grade=cs.grade,
        subject_id=cs.subject_id,
        subject_name=subject.name,
        subject_code=subject.code,
        created_at=cs.created_at,
    )


async def list_class_subjects(db: AsyncSession, grade: str) -> List[ClassSubjectResponse]:
    result = await db.execute(
        select(ClassSubject, Subject)
        .join(Subject, ClassSubject.subject_id == Subject.id)
        .where(ClassSubject.grade == grade)
        .order_by(Subject.name)
    )
    return [_to_response(cs, s) for cs, s in result.all()]


async def assign_subject(db: AsyncSession, grade: str, payload: ClassSubjectCreate) -> ClassSubjectResponse:
    grade = grade.strip()
    subject = await db.get(Subject, payload.subject_id)
    if not subject:
        raise NotFoundError("Subject not found")
    existing = (
        await db.execute(
            select(ClassSubject).where(
                ClassSubject.grade == grade,
                ClassSubject.subject_id == payload.subject_id,
            )
        )
    ).scalar_one_or_none()
    if existing:
        raise ConflictError(f"Subject '{subject.code}' is already assigned to class {grade}")
    cs = ClassSubject(grade=grade, subject_id=payload.subject_id)
    db.add(cs)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError(f"Subject '{subject.code}' is already assigned to class {grade}")
    await db.refresh(cs)
    return _to_response(cs, subject)


async def unassign_subject(db: AsyncSession, grade: str, subject_id: UUID) -> bool:
    cs = (
        await db.execute(
            select(ClassSubject).where(
                ClassSubject.grade == grade,
                ClassSubject.subject_id == subject_id,
            )
        )
    ).scalar_one_or_none()
    if not cs:
        return False
    await db.delete(cs)
    await db.commit()
    return True
