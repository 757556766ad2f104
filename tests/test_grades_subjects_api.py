from decimal import Decimal

from httpx import AsyncClient


async def test_grade_bulk_upsert(client: AsyncClient, make_student) -> None:
    student = await make_student()
    rows = [
        {"student_id": str(student.id), "subject": "Maths", "marks": 78, "term": "Term 1"},
        {"student_id": str(student.id), "subject": "Science", "marks": 91.5, "term": "Term 1"},
        {"student_id": str(student.id), "subject": "Maths", "marks": 140, "term": "Term 1"},
        {"student_id": "00000000-0000-0000-0000-000000000000", "subject": "Maths", "marks": 50, "term": "Term 1"},
        {"subject": "Maths"},
    ]
    response = await client.post("/api/v1/grades", json=rows)
    assert response.status_code == 200
    assert response.json() == {"processed": 2, "skipped": 3}

    response = await client.post(
        "/api/v1/grades",
        json=[{"student_id": str(student.id), "subject": "Maths", "marks": 82, "term": "Term 1"}],
    )
    assert response.json() == {"processed": 1, "skipped": 0}

    grades = (await client.get("/api/v1/grades", params={"student_id": str(student.id)})).json()
    assert len(grades) == 2
    maths = next(g for g in grades if g["subject"] == "Maths")
    assert Decimal(maths["marks"]) == Decimal("82")


async def test_subject_crud(client: AsyncClient) -> None:
    response = await client.post("/api/v1/subjects", json={"name": "Mathematics", "code": "math"})
    assert response.status_code == 201
    subject = response.json()
    assert subject["code"] == "MATH"

    duplicate = await client.post("/api/v1/subjects", json={"name": "Maths", "code": "MATH"})
    assert duplicate.status_code == 409

    await client.post("/api/v1/subjects", json={"name": "English", "code": "ENG"})
    names = [s["name"] for s in (await client.get("/api/v1/subjects")).json()]
    assert names == ["English", "Mathematics"]

    assert (await client.delete(f"/api/v1/subjects/{subject['id']}")).status_code == 204
    assert (await client.delete(f"/api/v1/subjects/{subject['id']}")).status_code == 404


async def test_class_subject_assignment(client: AsyncClient) -> None:
    subject = (await client.post("/api/v1/subjects", json={"name": "Science", "code": "SCI"})).json()

    response = await client.post("/api/v1/classes/5/subjects", json={"subject_id": subject["id"]})
    assert response.status_code == 201
    assert response.json()["subject_code"] == "SCI"

    again = await client.post("/api/v1/classes/5/subjects", json={"subject_id": subject["id"]})
    assert again.status_code == 409

    unknown = await client.post(
        "/api/v1/classes/5/subjects",
        json={"subject_id": "00000000-0000-0000-0000-000000000000"},
    )
    assert unknown.status_code == 404

    listed = (await client.get("/api/v1/classes/5/subjects")).json()
    assert [cs["subject_name"] for cs in listed] == ["Science"]
    assert (await client.get("/api/v1/classes/6/subjects")).json() == []

    removed = await client.delete(f"/api/v1/classes/5/subjects/{subject['id']}")
    assert removed.status_code == 204
    assert (await client.get("/api/v1/classes/5/subjects")).json() == []
