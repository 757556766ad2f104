"""Students service: CRUD and bulk import (JSON rows or CSV upload)."""

import csv
import io
import logging
from typing import Any, Dict, Iterable, List, Optional
from uuid import UUID

from pydantic import ValidationError
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.enums import ImportStrategy
from app.core.exceptions import ConflictError, ServiceError
from app.core.models import FeeTransaction, Grade, Student

from .schemas import StudentCreate, StudentImportResult, StudentResponse, StudentUpdate

logger = logging.getLogger(__name__)

# Normalized CSV header -> StudentCreate field. Accepts the export headers and common variants.
CSV_HEADER_ALIASES: Dict[str, str] = {
    "admissionnumber": "admission_number",
    "admissionno": "admission_number",
    "name": "name",
    "studentname": "name",
    "dateofbirth": "date_of_birth",
    "dob": "date_of_birth",
    "admissiondate": "admission_date",
    "aadharnumber": "aadhar_number",
    "aadhar": "aadhar_number",
    "pennumber": "pen_number",
    "pen": "pen_number",
    "aaparid": "aapar_id",
    "mobilenumber": "mobile_number",
    "mobile": "mobile_number",
    "address": "address",
    "grade": "grade",
    "class": "grade",
    "section": "section",
    "fathername": "father_name",
    "fathersname": "father_name",
    "mothername": "mother_name",
    "mothersname": "mother_name",
    "yearlyfeeamount": "yearly_fee_amount",
    "yearlyfee": "yearly_fee_amount",
    "status": "status",
    "leftdate": "left_date",
    "leavingreason": "leaving_reason",
}


def _norm_header(value: Optional[str]) -> str:
    if value is None:
        return ""
    return "".join(ch for ch in value.strip().lower() if ch.isalnum())


def _to_response(s: Student) -> StudentResponse:
    return StudentResponse.model_validate(s)


def _column_values(data: Dict[str, Any]) -> Dict[str, Any]:
    status = data.get("status")
    if status is not None and hasattr(status, "value"):
        data["status"] = status.value
    return data


async def get_student_by_admission_number(db: AsyncSession, admission_number: str) -> Optional[Student]:
    result = await db.execute(select(Student).where(Student.admission_number == admission_number))
    return result.scalar_one_or_none()


async def list_students(db: AsyncSession, grade: Optional[str] = None) -> List[StudentResponse]:
    stmt = select(Student)
    if grade is not None:
        stmt = stmt.where(Student.grade == grade)
    stmt = stmt.order_by(Student.admission_number)
    result = await db.execute(stmt)
    return [_to_response(s) for s in result.scalars().all()]


async def get_student(db: AsyncSession, student_id: UUID) -> Optional[StudentResponse]:
    student = await db.get(Student, student_id)
    return _to_response(student) if student else None


async def create_student(db: AsyncSession, payload: StudentCreate) -> StudentResponse:
    admission_number = payload.admission_number.strip()
    if await get_student_by_admission_number(db, admission_number):
        raise ConflictError(f"Admission number '{admission_number}' already exists")
    values = _column_values(payload.model_dump())
    values["admission_number"] = admission_number
    student = Student(**values)
    db.add(student)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError(f"Admission number '{admission_number}' already exists")
    await db.refresh(student)
    return _to_response(student)


async def update_student(
    db: AsyncSession,
    admission_number: str,
    payload: StudentUpdate,
) -> Optional[StudentResponse]:
    student = await get_student_by_admission_number(db, admission_number)
    if not student:
        return None
    changes = _column_values(payload.model_dump(exclude_unset=True))
    if not changes:
        return _to_response(student)
    for field, value in changes.items():
        setattr(student, field, value)
    await db.commit()
    await db.refresh(student)
    return _to_response(student)


async def delete_student(db: AsyncSession, student_id: UUID) -> bool:
    """Delete the student with their grades and fee transactions."""
    student = await db.get(Student, student_id)
    if not student:
        return False
    await db.execute(delete(Grade).where(Grade.student_id == student_id))
    await db.execute(delete(FeeTransaction).where(FeeTransaction.student_id == student_id))
    await db.delete(student)
    await db.commit()
    return True


# --- Bulk import ---
def parse_students_csv(content: bytes) -> List[Dict[str, Any]]:
    """
    Parse an uploaded CSV into row dicts keyed by StudentCreate field names.
    First row = headers. Rows without an admission number or name are dropped; blank cells
    are omitted so model defaults apply. Raises ValueError on an unusable file.
    """
    if not content:
        raise ValueError("File is empty")
    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise ValueError(f"CSV must be UTF-8 encoded: {e}") from e

    reader = csv.reader(io.StringIO(text))
    header_row = next(reader, None)
    if not header_row:
        raise ValueError("CSV file has no header row")
    fields = [CSV_HEADER_ALIASES.get(_norm_header(h)) for h in header_row]
    for required in ("admission_number", "name"):
        if required not in fields:
            raise ValueError(f"Missing required column: {required}. Found: {header_row}")

    rows: List[Dict[str, Any]] = []
    for raw in reader:
        row: Dict[str, Any] = {}
        for field, cell in zip(fields, raw):
            if field is None:
                continue
            cell = cell.strip()
            if cell:
                row[field] = cell
        if row.get("admission_number") and row.get("name"):
            rows.append(row)
    return rows


async def import_students(
    db: AsyncSession,
    rows: Iterable[Dict[str, Any]],
    strategy: ImportStrategy = ImportStrategy.SKIP,
) -> StudentImportResult:
    """
    Insert new admission numbers; existing ones are skipped or updated per `strategy`.
    Rows that fail validation are counted as invalid and left out. One transaction for the batch.
    """
    added = 0
    updated = 0
    invalid = 0
    skipped: List[str] = []

    for index, row in enumerate(rows, start=1):
        try:
            data = StudentCreate.model_validate(row)
        except ValidationError as e:
            invalid += 1
            first = e.errors()[0]
            logger.warning(
                "Student import row %d rejected: %s (%s)",
                index, first.get("msg"), ".".join(str(p) for p in first.get("loc", ())),
            )
            continue
        values = _column_values(data.model_dump())
        values["admission_number"] = data.admission_number.strip()
        existing = await get_student_by_admission_number(db, values["admission_number"])
        if existing:
            if strategy == ImportStrategy.UPSERT:
                for field, value in values.items():
                    setattr(existing, field, value)
                updated += 1
            else:
                skipped.append(values["admission_number"])
            continue
        db.add(Student(**values))
        added += 1

    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError("Import failed: duplicate admission number (database constraint)")
    logger.info(
        "Student import finished: added=%d updated=%d skipped=%d invalid=%d",
        added, updated, len(skipped), invalid,
    )
    return StudentImportResult(
        added=added,
        updated=updated,
        skipped=len(skipped),
        skipped_admission_numbers=skipped,
        invalid=invalid,
    )


async def import_students_csv(
    db: AsyncSession,
    content: bytes,
    strategy: ImportStrategy = ImportStrategy.SKIP,
) -> StudentImportResult:
    try:
        rows = parse_students_csv(content)
    except ValueError as e:
        raise ServiceError(str(e), 400)
    return await import_students(db, rows, strategy)
