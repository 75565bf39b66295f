"""
HTTP layer tests with the engine dependency overridden.
"""

import pytest
from fastapi.testclient import TestClient

from hospital_queue.main import app
from hospital_queue.routers.dependencies import get_engine

from conftest import registration


@pytest.fixture
def client(engine):
    app.dependency_overrides[get_engine] = lambda: engine
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_register_patient(client):
    response = client.post("/patients", json=registration(name="Meera", age=64))

    assert response.status_code == 201
    body = response.json()
    assert body["token_number"] == 1
    assert body["priority"] == 2
    assert body["status"] == "Waiting"
    assert body["is_senior_citizen"] is True


def test_register_rejects_bad_age(client):
    response = client.post("/patients", json=registration(age=150))

    assert response.status_code == 422


def test_register_rejects_boolean_age(client):
    response = client.post("/patients", json=registration(age=True))

    assert response.status_code == 422


def test_departments_listing(client):
    client.post("/patients", json=registration(department="Pharmacy"))

    response = client.get("/departments")

    assert response.status_code == 200
    departments = response.json()
    assert [d["name"] for d in departments] == ["General", "Diagnostics", "Emergency", "Pharmacy"]
    assert departments[3]["waiting_count"] == 1


def test_unknown_department(client):
    response = client.get("/departments/cardiology/waiting")

    assert response.status_code == 422
    assert response.json()["detail"]["field"] == "department"


def test_call_next_and_complete_flow(client, clock):
    client.post("/patients", json=registration(name="A", age=30))
    clock.advance()
    client.post("/patients", json=registration(name="C", age=40, visit_type="Emergency"))

    waiting = client.get("/departments/General/waiting").json()
    assert [p["name"] for p in waiting] == ["C", "A"]

    called = client.post("/departments/general/call-next")
    assert called.status_code == 200
    assert called.json()["name"] == "C"
    assert called.json()["status"] == "In Progress"

    conflict = client.post("/departments/general/call-next")
    assert conflict.status_code == 409

    done = client.post(f"/patients/{called.json()['id']}/complete")
    assert done.status_code == 200
    assert done.json()["status"] == "Completed"

    general = client.get("/departments/General").json()
    assert general["total_served"] == 1
    assert general["current_token"] is None


def test_call_next_on_empty_queue_returns_null(client):
    response = client.post("/departments/Pharmacy/call-next")

    assert response.status_code == 200
    assert response.json() is None


def test_complete_unknown_patient(client):
    response = client.post("/patients/nope/complete")

    assert response.status_code == 404


def test_token_lookup(client):
    client.post("/patients", json=registration())

    response = client.get("/departments/General/tokens/1")

    assert response.status_code == 200
    assert response.json()["position"] == 1
    assert response.json()["estimated_wait_minutes"] == 15
    assert client.get("/departments/General/tokens/9").status_code == 404


def test_list_patients_by_status(client):
    client.post("/patients", json=registration())
    client.post("/departments/General/call-next")

    response = client.get("/patients", params={"status": "In Progress"})

    assert response.status_code == 200
    assert len(response.json()) == 1


def test_stats(client):
    client.post("/patients", json=registration(department="Emergency", visit_type="Emergency"))

    response = client.get("/stats")

    assert response.status_code == 200
    assert response.json() == {
        "total_patients": 1,
        "total_served_today": 0,
        "average_wait_time": 0,
        "busiest_department": "Emergency"
    }
