import csv
import io
from datetime import date
from decimal import Decimal

import pytest
from httpx import AsyncClient
from openpyxl import load_workbook

from app.api.v1.exports.service import DEFAULT_EXCEL_COLUMNS, dated_filename, parse_columns
from app.core.exceptions import ServiceError
from app.core.models import Grade


def _csv_rows(text: str) -> list:
    return list(csv.reader(io.StringIO(text)))


def test_dated_filename() -> None:
    assert dated_filename("students", "csv", today=date(2025, 7, 1)) == "students_2025-07-01.csv"


def test_parse_columns() -> None:
    assert parse_columns(None) == list(DEFAULT_EXCEL_COLUMNS)
    assert parse_columns(" name, admissionNumber,name ") == ["name", "admissionNumber"]
    with pytest.raises(ServiceError) as exc:
        parse_columns("name,favouriteColour")
    assert exc.value.status_code == 400


async def test_students_csv(client: AsyncClient, make_student) -> None:
    await make_student(admission_number="ADM002", name='Ravi "Ricky" Kumar', grade="5")
    await make_student(admission_number="ADM001", name="Asha, Verma", grade="5")
    await make_student(admission_number="ADM003", grade="6")

    response = await client.get("/api/v1/export/students/csv", params={"grade": "5"})
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert "attachment; filename=\"students_class_5_" in response.headers["content-disposition"]

    rows = _csv_rows(response.text)
    header = rows[0]
    assert header[:2] == ["admissionNumber", "name"]
    assert [r[0] for r in rows[1:]] == ["ADM001", "ADM002"]
    assert rows[1][1] == "Asha, Verma"
    assert rows[2][1] == 'Ravi "Ricky" Kumar'


async def test_students_csv_can_be_imported_back(client: AsyncClient, make_student) -> None:
    await make_student(admission_number="ADM001", name="Asha Verma")
    exported = (await client.get("/api/v1/export/students/csv")).text

    response = await client.post(
        "/api/v1/students/import/csv",
        params={"strategy": "skip"},
        files={"file": ("students.csv", exported.encode("utf-8"), "text/csv")},
    )
    assert response.json()["skipped_admission_numbers"] == ["ADM001"]
    assert response.json()["invalid"] == 0


async def test_transactions_csv(client: AsyncClient, make_student, make_fee) -> None:
    student = await make_student(admission_number="ADM007", name="Asha Verma")
    await make_fee(student, amount=Decimal("1200.00"), payment_date=date(2025, 5, 1), receipt_serial=12)
    await make_fee(student, amount=Decimal("800.00"), payment_date=date(2025, 4, 1))

    response = await client.get("/api/v1/export/transactions/csv")
    assert response.status_code == 200
    rows = _csv_rows(response.text)
    assert rows[0][:5] == ["transactionId", "receiptSerial", "admissionNumber", "studentName", "amount"]
    assert [r[4] for r in rows[1:]] == ["800.00", "1200.00"]
    assert rows[1][1] == ""
    assert rows[2][1] == "0012"
    assert rows[2][5] == "2025-05-01"


async def test_grades_csv(client: AsyncClient, session_factory, make_student) -> None:
    student = await make_student(admission_number="ADM001", name="Asha Verma")
    async with session_factory() as session:
        session.add(Grade(student_id=student.id, subject="Maths", term="Term 1", marks=Decimal("88.5")))
        await session.commit()

    response = await client.get("/api/v1/export/grades/csv")
    rows = _csv_rows(response.text)
    assert rows == [
        ["admissionNumber", "studentName", "subject", "term", "marks"],
        ["ADM001", "Asha Verma", "Maths", "Term 1", "88.50"],
    ]


async def test_students_excel_columns(client: AsyncClient, make_student) -> None:
    await make_student(admission_number="ADM001", name="Asha Verma", father_name="Ravi Verma")

    response = await client.get(
        "/api/v1/export/students/excel",
        params={"cols": "name,fatherName,admissionNumber"},
    )
    assert response.status_code == 200
    assert response.headers["content-type"].startswith(
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    )
    wb = load_workbook(io.BytesIO(response.content))
    ws = wb["Students"]
    values = [list(row) for row in ws.iter_rows(values_only=True)]
    assert values == [
        ["Name", "Father's Name", "Admission No."],
        ["Asha Verma", "Ravi Verma", "ADM001"],
    ]
    assert ws["A1"].font.bold


async def test_students_excel_default_and_unknown_columns(client: AsyncClient, make_student) -> None:
    await make_student()
    response = await client.get("/api/v1/export/students/excel")
    wb = load_workbook(io.BytesIO(response.content))
    header = next(wb.active.iter_rows(values_only=True))
    assert list(header) == ["Admission No.", "Name", "Class", "Section"]

    bad = await client.get("/api/v1/export/students/excel", params={"cols": "name,shoeSize"})
    assert bad.status_code == 400
