"""Export service: CSV downloads (students, transactions, grades) and a students Excel sheet."""

import csv
import io
from datetime import date
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from fastapi import status
from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ServiceError
from app.core.formatting import format_amount, format_serial
from app.core.models import FeeTransaction, Grade, Student

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
STUDENTS_SHEET_NAME = "Students"


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


# key -> (Excel header, value getter). Keys double as the students CSV headers, which the CSV import accepts.
COLUMN_OPTIONS: Dict[str, Tuple[str, Callable[[Student], Any]]] = {
    "admissionNumber": ("Admission No.", lambda s: s.admission_number),
    "name": ("Name", lambda s: s.name),
    "dateOfBirth": ("Date of Birth", lambda s: _text(s.date_of_birth)),
    "admissionDate": ("Admission Date", lambda s: _text(s.admission_date)),
    "aadharNumber": ("Aadhar Number", lambda s: s.aadhar_number),
    "penNumber": ("PEN Number", lambda s: s.pen_number),
    "aaparId": ("APAAR ID", lambda s: s.aapar_id),
    "mobileNumber": ("Mobile Number", lambda s: s.mobile_number),
    "address": ("Address", lambda s: s.address),
    "grade": ("Class", lambda s: s.grade),
    "section": ("Section", lambda s: s.section),
    "fatherName": ("Father's Name", lambda s: s.father_name),
    "motherName": ("Mother's Name", lambda s: s.mother_name),
    "yearlyFeeAmount": ("Yearly Fee", lambda s: format_amount(s.yearly_fee_amount)),
    "status": ("Status", lambda s: s.status),
    "leftDate": ("Left Date", lambda s: _text(s.left_date)),
    "leavingReason": ("Leaving Reason", lambda s: s.leaving_reason),
}
DEFAULT_EXCEL_COLUMNS = ("admissionNumber", "name", "grade", "section")

TRANSACTION_HEADERS = (
    "transactionId", "receiptSerial", "admissionNumber", "studentName",
    "amount", "paymentDate", "paymentMode", "remarks",
)
GRADE_HEADERS = ("admissionNumber", "studentName", "subject", "term", "marks")


def dated_filename(prefix: str, extension: str, today: Optional[date] = None) -> str:
    return f"{prefix}_{(today or date.today()).isoformat()}.{extension}"


def _write_csv(headers: Sequence[str], rows: List[List[Any]]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(headers)
    for row in rows:
        writer.writerow([_text(v) for v in row])
    return buffer.getvalue()


async def _students(db: AsyncSession, grade: Optional[str] = None) -> List[Student]:
    stmt = select(Student)
    if grade is not None:
        stmt = stmt.where(Student.grade == grade)
    result = await db.execute(stmt.order_by(Student.admission_number))
    return list(result.scalars().all())


# --- CSV ---
async def students_csv(db: AsyncSession, grade: Optional[str] = None) -> str:
    keys = list(COLUMN_OPTIONS)
    rows = [[COLUMN_OPTIONS[k][1](s) for k in keys] for s in await _students(db, grade)]
    return _write_csv(keys, rows)


async def transactions_csv(db: AsyncSession) -> str:
    result = await db.execute(
        select(FeeTransaction, Student.admission_number, Student.name)
        .join(Student, FeeTransaction.student_id == Student.id)
        .order_by(FeeTransaction.payment_date, FeeTransaction.id)
    )
    rows = [
        [
            txn.transaction_id,
            format_serial(txn.receipt_serial) if txn.receipt_serial is not None else "",
            admission_number,
            name,
            format_amount(txn.amount),
            txn.payment_date,
            txn.payment_mode,
            txn.remarks,
        ]
        for txn, admission_number, name in result.all()
    ]
    return _write_csv(TRANSACTION_HEADERS, rows)


async def grades_csv(db: AsyncSession) -> str:
    result = await db.execute(
        select(Grade, Student.admission_number, Student.name)
        .join(Student, Grade.student_id == Student.id)
        .order_by(Student.admission_number, Grade.term, Grade.subject)
    )
    rows = [
        [admission_number, name, g.subject, g.term, format_amount(g.marks)]
        for g, admission_number, name in result.all()
    ]
    return _write_csv(GRADE_HEADERS, rows)


# --- Excel ---
def parse_columns(cols: Optional[str]) -> List[str]:
    """Comma-separated column keys, order kept, duplicates dropped. Empty means the default set."""
    if not cols or not cols.strip():
        return list(DEFAULT_EXCEL_COLUMNS)
    keys: List[str] = []
    for key in (c.strip() for c in cols.split(",")):
        if key and key not in keys:
            keys.append(key)
    unknown = [k for k in keys if k not in COLUMN_OPTIONS]
    if unknown:
        raise ServiceError(
            f"Unknown column(s): {', '.join(unknown)}. Allowed: {', '.join(COLUMN_OPTIONS)}",
            status.HTTP_400_BAD_REQUEST,
        )
    return keys or list(DEFAULT_EXCEL_COLUMNS)


async def students_excel(db: AsyncSession, columns: Sequence[str], grade: Optional[str] = None) -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.title = STUDENTS_SHEET_NAME

    header_font = Font(bold=True, color="FFFFFF")
    header_fill = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")
    ws.append([COLUMN_OPTIONS[k][0] for k in columns])
    for cell in ws[1]:
        cell.font = header_font
        cell.fill = header_fill
        cell.alignment = Alignment(horizontal="center", vertical="center")

    for s in await _students(db, grade):
        ws.append([_text(COLUMN_OPTIONS[k][1](s)) for k in columns])

    for index, key in enumerate(columns, start=1):
        width = max(len(COLUMN_OPTIONS[key][0]), *(len(_text(c.value)) for c in ws[get_column_letter(index)]))
        ws.column_dimensions[get_column_letter(index)].width = min(width + 2, 50)
    ws.freeze_panes = "A2"

    bio = io.BytesIO()
    wb.save(bio)
    return bio.getvalue()
