from datetime import date
from decimal import Decimal

from httpx import AsyncClient
from sqlalchemy import func, select

from app.api.v1.students.service import parse_students_csv
from app.core.models import FeeTransaction, Grade


def _student_payload(**overrides) -> dict:
    payload = {
        "admission_number": "ADM100",
        "name": "Kabir Singh",
        "date_of_birth": "2014-02-11",
        "admission_date": "2020-04-01",
        "grade": "6",
        "section": "B",
        "father_name": "Harpreet Singh",
        "yearly_fee_amount": "30000",
    }
    payload.update(overrides)
    return payload


async def test_create_and_get_student(client: AsyncClient) -> None:
    response = await client.post("/api/v1/students", json=_student_payload())
    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "active"
    assert Decimal(data["yearly_fee_amount"]) == Decimal("30000")

    fetched = await client.get(f"/api/v1/students/{data['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["name"] == "Kabir Singh"


async def test_duplicate_admission_number(client: AsyncClient) -> None:
    await client.post("/api/v1/students", json=_student_payload())
    response = await client.post("/api/v1/students", json=_student_payload(name="Someone Else"))
    assert response.status_code == 409


async def test_create_requires_name(client: AsyncClient) -> None:
    response = await client.post("/api/v1/students", json=_student_payload(name=""))
    assert response.status_code == 422


async def test_list_ordered_and_filtered(client: AsyncClient, make_student) -> None:
    await make_student(admission_number="ADM003", grade="5")
    await make_student(admission_number="ADM001", grade="6")
    await make_student(admission_number="ADM002", grade="5")

    response = await client.get("/api/v1/students")
    assert [s["admission_number"] for s in response.json()] == ["ADM001", "ADM002", "ADM003"]

    response = await client.get("/api/v1/students", params={"grade": "5"})
    assert [s["admission_number"] for s in response.json()] == ["ADM002", "ADM003"]


async def test_update_by_admission_number(client: AsyncClient, make_student) -> None:
    await make_student(admission_number="ADM050", section="A")
    response = await client.put(
        "/api/v1/students/ADM050",
        json={"section": "C", "status": "left", "left_date": "2025-03-31"},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["section"] == "C"
    assert data["status"] == "left"
    assert data["left_date"] == "2025-03-31"
    assert data["grade"] == "5"

    missing = await client.put("/api/v1/students/NOPE", json={"section": "C"})
    assert missing.status_code == 404


async def test_delete_removes_dependent_records(client: AsyncClient, session_factory, make_student, make_fee) -> None:
    student = await make_student()
    await make_fee(student)
    async with session_factory() as session:
        session.add(Grade(student_id=student.id, subject="Maths", term="Term 1", marks=Decimal("88")))
        await session.commit()

    response = await client.delete(f"/api/v1/students/{student.id}")
    assert response.status_code == 200
    assert response.json() == {"deleted": str(student.id)}

    async with session_factory() as session:
        fees = await session.scalar(select(func.count(FeeTransaction.id)))
        grades = await session.scalar(select(func.count(Grade.id)))
    assert fees == 0
    assert grades == 0

    again = await client.delete(f"/api/v1/students/{student.id}")
    assert again.status_code == 404


async def test_import_skip_and_upsert(client: AsyncClient, make_student) -> None:
    await make_student(admission_number="ADM001", name="Old Name")
    rows = [
        _student_payload(admission_number="ADM001", name="New Name"),
        _student_payload(admission_number="ADM002"),
        _student_payload(admission_number="ADM003", date_of_birth="not-a-date"),
    ]

    response = await client.post("/api/v1/students/import", json={"students": rows, "strategy": "skip"})
    assert response.status_code == 200
    assert response.json() == {
        "added": 1,
        "updated": 0,
        "skipped": 1,
        "skipped_admission_numbers": ["ADM001"],
        "invalid": 1,
    }

    response = await client.post("/api/v1/students/import", json={"students": rows[:1], "strategy": "upsert"})
    assert response.json()["updated"] == 1
    students = (await client.get("/api/v1/students")).json()
    assert next(s for s in students if s["admission_number"] == "ADM001")["name"] == "New Name"


async def test_import_csv(client: AsyncClient) -> None:
    content = (
        "admissionNumber,name,dateOfBirth,admissionDate,class,section,yearlyFeeAmount\r\n"
        "ADM201,Meera Iyer,2016-01-05,2022-04-01,3,A,18000\r\n"
        ",Missing Number,2016-01-05,2022-04-01,3,A,18000\r\n"
        "ADM202,Rohan Das,2016-03-09,2022-04-01,3,B,18000\r\n"
    ).encode("utf-8-sig")

    response = await client.post(
        "/api/v1/students/import/csv",
        files={"file": ("students.csv", content, "text/csv")},
    )
    assert response.status_code == 200
    assert response.json()["added"] == 2

    students = (await client.get("/api/v1/students", params={"grade": "3"})).json()
    assert [s["name"] for s in students] == ["Meera Iyer", "Rohan Das"]


async def test_import_csv_without_required_columns(client: AsyncClient) -> None:
    response = await client.post(
        "/api/v1/students/import/csv",
        files={"file": ("students.csv", b"name,grade\r\nA,1\r\n", "text/csv")},
    )
    assert response.status_code == 400


def test_parse_students_csv_accepts_snake_case_headers() -> None:
    rows = parse_students_csv(
        b"admission_number,name,date_of_birth,admission_date,grade,yearly_fee_amount,notes\n"
        b"ADM9,Tara,2015-05-05,2021-04-01,UKG,15000,ignored\n"
        b"ADM10,,2015-05-05,2021-04-01,UKG,15000,\n"
    )
    assert rows == [
        {
            "admission_number": "ADM9",
            "name": "Tara",
            "date_of_birth": "2015-05-05",
            "admission_date": "2021-04-01",
            "grade": "UKG",
            "yearly_fee_amount": "15000",
        }
    ]
    assert date.fromisoformat(rows[0]["date_of_birth"]).year == 2015
