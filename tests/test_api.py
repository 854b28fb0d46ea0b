from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from hostel_allotment.main import create_app

API = "/api/v1"


@pytest.fixture
def client(settings, backend, seeded):
    app = create_app(settings=settings, backend=backend)
    with TestClient(app) as test_client:
        yield test_client


def test_health(client):
    response = client.get(f"{API}/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "backend": "sql", "transactional": True}
    assert "X-Request-ID" in response.headers


def test_allocate_and_vacate_flow(client, seeded):
    room_id = seeded.double.room_id
    created = client.post(f"{API}/allotments", json={"student_id": seeded.students[0], "room_id": room_id})
    assert created.status_code == 201
    allotment = created.json()
    assert allotment["status"] == "Active"

    detail = client.get(f"{API}/students/{seeded.students[0]}/allotment").json()
    assert detail["room_no"] == "101"
    assert detail["hostel_name"] == "North Block"

    vacated = client.post(
        f"{API}/allotments/{allotment['allotment_id']}/vacate",
        json={"vacated_date": "2026-02-28"},
    )
    assert vacated.status_code == 200
    assert vacated.json()["vacated_date"] == "2026-02-28"

    again = client.post(f"{API}/allotments/{allotment['allotment_id']}/vacate")
    assert again.status_code == 404
    assert again.json()["error"]["code"] == "ALLOTMENT_NOT_FOUND"


def test_conflicts_render_error_body(client, seeded):
    room_id = seeded.single.room_id
    client.post(f"{API}/allotments", json={"student_id": seeded.students[0], "room_id": room_id})

    response = client.post(f"{API}/allotments", json={"student_id": seeded.students[1], "room_id": room_id})

    assert response.status_code == 409
    error = response.json()["error"]
    assert error["message"] == "room full"
    assert error["code"] == "ROOM_FULL"
    assert error["type"] == "RoomFullError"


def test_unknown_room_is_404(client, seeded):
    response = client.post(f"{API}/allotments", json={"student_id": seeded.students[0], "room_id": 999})

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "ROOM_NOT_FOUND"


def test_invalid_payload_is_422(client):
    response = client.post(f"{API}/allotments", json={"student_id": 0, "room_id": "x"})

    assert response.status_code == 422


def test_application_approval_flow(client, seeded):
    applied = client.post(
        f"{API}/allotments/applications",
        json={"student_id": seeded.students[2], "room_id": seeded.triple.room_id},
    )
    assert applied.status_code == 201
    allotment_id = applied.json()["allotment_id"]

    pending = client.get(f"{API}/allotments/pending").json()
    assert [row["allotment_id"] for row in pending] == [allotment_id]
    assert pending[0]["student_name"] == "Student 3"

    approved = client.post(f"{API}/allotments/{allotment_id}/approve")
    assert approved.status_code == 200
    assert approved.json()["status"] == "Active"

    second = client.post(f"{API}/allotments/{allotment_id}/approve")
    assert second.status_code == 404

    assert client.get(f"{API}/allotments/{allotment_id}").json()["status"] == "Active"
    history = client.get(f"{API}/students/{seeded.students[2]}/allotments").json()
    assert len(history) == 1


def test_room_endpoints(client, seeded):
    room_id = seeded.double.room_id
    client.post(f"{API}/allotments", json={"student_id": seeded.students[0], "room_id": room_id})

    room = client.get(f"{API}/rooms/{room_id}").json()
    assert room["current_occupants"] == 1
    assert room["occupants"][0]["reg_no"] == "REG001"

    available = client.get(f"{API}/rooms/available", params={"hostel_type": "Boys"}).json()
    assert [r["room_no"] for r in available] == ["101", "102"]

    found = client.get(f"{API}/rooms/search", params={"room_no": "10", "status": "Vacant"}).json()
    assert [r["room_no"] for r in found] == ["101", "102"]

    maintenance = client.put(f"{API}/rooms/{room_id}/maintenance", json={"under_maintenance": True})
    assert maintenance.json()["status"] == "Under Maintenance"

    recomputed = client.post(f"{API}/rooms/{room_id}/recompute-status")
    assert recomputed.json()["status"] == "Under Maintenance"

    assert client.get(f"{API}/rooms/4040").status_code == 404


def test_reports(client, seeded):
    client.post(f"{API}/allotments", json={"student_id": seeded.students[0], "room_id": seeded.single.room_id})

    report = client.get(f"{API}/reports/occupancy").json()
    assert [row["hostel_name"] for row in report] == ["Aravali", "North Block"]

    north = client.get(f"{API}/hostels/{seeded.north.hostel_id}/occupancy").json()
    assert north["current_students"] == 1
    assert north["occupancy_percentage"] == 33.33

    hostel_rows = client.get(f"{API}/hostels/{seeded.north.hostel_id}/allotments").json()
    assert [row["room_no"] for row in hostel_rows] == ["102"]

    assert client.get(f"{API}/hostels/31337/occupancy").status_code == 404
