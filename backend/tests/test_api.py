# tests/test_api.py

from datetime import datetime

from fastapi import Depends
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from students_api.database import SAMPLE_STUDENT, Base, Database, get_db
from students_api.main import create_app
from students_api.routes.students import get_student_service
from students_api.services.students import StudentService


def test_sample_student_seeded_on_startup(client):
    resp = client.get("/api/students")

    assert resp.status_code == 200
    assert [s["id"] for s in resp.json()] == [SAMPLE_STUDENT["id"]]
    assert resp.json()[0]["name"] == "John Doe"


def test_end_to_end_scenario(client):
    resp = client.post("/api/students", json={"name": "Jo"})
    assert resp.status_code == 422
    assert any(e["path"] == "name" for e in resp.json()["errors"])

    resp = client.post("/api/students", json={
        "name": "John Doe", "email": "x@example.com", "phone": "5551234567",
        "address": "12 Main St",
    })
    assert resp.status_code == 201
    student_id = resp.json()["id"]
    assert student_id

    resp = client.put(f"/api/students/{student_id}", json={"name": "John Q. Doe"})
    assert resp.status_code == 200
    assert resp.json()["name"] == "John Q. Doe"
    assert resp.json()["address"] == ""
    assert resp.json()["email"] == ""

    resp = client.delete(f"/api/students/{student_id}")
    assert resp.status_code == 200
    assert resp.json() == {"success": True}

    resp = client.delete(f"/api/students/{student_id}")
    assert resp.status_code == 404


def test_create_then_get_round_trip(client, valid_payload):
    created = client.post("/api/students", json=valid_payload).json()

    fetched = client.get(f"/api/students/{created['id']}")

    assert fetched.status_code == 200
    assert fetched.json() == created


def test_create_trims_name(client):
    resp = client.post("/api/students", json={"name": "   Ann Lee  "})

    assert resp.status_code == 201
    assert resp.json()["name"] == "Ann Lee"


def test_create_reports_every_error(client):
    resp = client.post("/api/students", json={"name": "", "email": "bad", "phone": "123"})

    assert resp.status_code == 422
    errors = resp.json()["errors"]
    assert [e["path"] for e in errors] == ["name", "email", "phone"]
    assert errors[1]["msg"] == "Invalid email"
    assert errors[2]["value"] == "123"


def test_non_string_field_is_rejected(client):
    resp = client.post("/api/students", json={"name": "John Doe", "phone": 5551234567})

    assert resp.status_code == 422
    assert resp.json()["errors"][0]["path"] == "phone"


def test_non_object_body_is_rejected(client):
    resp = client.post("/api/students", json=["John Doe"])

    assert resp.status_code == 422
    assert "errors" in resp.json()


def test_unknown_fields_are_ignored(client):
    resp = client.post("/api/students", json={"name": "John Doe", "id": "chosen", "age": 20})

    assert resp.status_code == 201
    assert resp.json()["id"] != "chosen"
    assert "age" not in resp.json()


def test_get_missing_student(client):
    resp = client.get("/api/students/does-not-exist")

    assert resp.status_code == 404
    assert resp.json() == {"error": "Not found"}


def test_update_missing_student(client):
    resp = client.put("/api/students/does-not-exist", json={"name": "Ann Lee"})

    assert resp.status_code == 404


def test_update_validates_before_lookup(client):
    resp = client.put("/api/students/does-not-exist", json={"name": "A"})

    assert resp.status_code == 422


def test_list_is_newest_first(app, client):
    # Every create gets the same timestamp, so order comes from insertion alone
    def fixed_clock_service(db: Session = Depends(get_db)):
        return StudentService(db, now=lambda: datetime(2099, 1, 1))

    app.dependency_overrides[get_student_service] = fixed_clock_service
    ids = [client.post("/api/students", json={"name": name}).json()["id"]
           for name in ("Student A", "Student B", "Student C")]

    listed = [s["id"] for s in client.get("/api/students").json()]

    assert listed == list(reversed(ids)) + [SAMPLE_STUDENT["id"]]


def test_export_is_an_attachment(client, valid_payload):
    created = client.post("/api/students", json=valid_payload).json()

    resp = client.get("/api/export")

    assert resp.status_code == 200
    assert resp.headers["content-disposition"] == "attachment; filename=students.json"
    body = resp.json()
    assert isinstance(body, list)
    assert created in body


def test_store_failure_returns_generic_500(client, database):
    Base.metadata.drop_all(bind=database.engine)

    resp = client.get("/api/students")

    assert resp.status_code == 500
    assert resp.json() == {"error": "DB read error"}


def test_health_connected(client):
    resp = client.get("/health")

    assert resp.status_code == 200
    assert resp.json() == {"ok": True, "database": "connected"}


def test_health_unreachable_store(tmp_path):
    database = Database(f"sqlite:///{tmp_path / 'missing' / 'students.db'}")
    # No context manager: the app is not started, only the route is exercised
    client = TestClient(create_app(database=database))

    resp = client.get("/health")

    assert resp.status_code == 503
    assert resp.json() == {"ok": False, "database": "disconnected"}


def test_landing_page(client):
    resp = client.get("/")

    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/html")
    assert 'id="students-body"' in resp.text


def test_static_assets_served(client):
    resp = client.get("/static/app.js")

    assert resp.status_code == 200


def test_request_id_header(client):
    resp = client.get("/health")

    assert len(resp.headers["x-request-id"]) == 36
