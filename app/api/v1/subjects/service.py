from typing import List
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ConflictError
from app.core.models import ClassSubject, Subject

from .schemas import SubjectCreate, SubjectResponse


def _to_response(s: Subject) -> SubjectResponse:
    return SubjectResponse.model_validate(s)


def _conflict_message(existing: Subject, code: str) -> str:
    return f"Subject code '{code}' already exists (existing: name='{existing.name}', id={existing.id})"


async def list_subjects(db: AsyncSession) -> List[SubjectResponse]:
    result = await db.execute(select(Subject).order_by(Subject.name))
    return [_to_response(s) for s in result.scalars().all()]


async def create_subject(db: AsyncSession, payload: SubjectCreate) -> SubjectResponse:
    code = payload.code.strip().upper()
    name = payload.name.strip()
    existing = (await db.execute(select(Subject).where(Subject.code == code))).scalar_one_or_none()
    if existing:
        raise ConflictError(_conflict_message(existing, code))
    subject = Subject(code=code, name=name)
    db.add(subject)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError(f"Subject code '{code}' already exists")
    await db.refresh(subject)
    return _to_response(subject)


async def delete_subject(db: AsyncSession, subject_id: UUID) -> bool:
    """Delete a subject along with its class assignments."""
    subject = await db.get(Subject, subject_id)
    if not subject:
        return False
    await db.execute(delete(ClassSubject).where(ClassSubject.subject_id == subject_id))
    await db.delete(subject)
    await db.commit()
    return True
