from __future__ import annotations

import json
from datetime import date
from itertools import count

import pytest
import requests

from hostel_allotment.core.exceptions import (
    DatabaseConnectionError,
    DuplicateEntryError,
    ForeignKeyViolationError,
    PersistenceError,
    RoomFullError,
    StudentAlreadyAllocatedError,
)
from hostel_allotment.models.enums import AllotmentStatus, RoomStatus
from hostel_allotment.persistence.base import ALLOTMENTS, HOSTELS, ROOMS, STUDENTS
from hostel_allotment.persistence.rest import RestBackend, encode_filters, encode_order
from hostel_allotment.repositories import RoomRepository
from hostel_allotment.services.allotment_service import AllotmentManager


class FakeResponse:
    def __init__(self, status_code, payload=None, reason="OK"):
        self.status_code = status_code
        self._payload = payload
        self.reason = reason
        self.content = b"" if payload is None else json.dumps(payload).encode()
        self.text = self.content.decode()

    def json(self):
        return self._payload


class FakeTableService:
    """In-memory stand-in for a PostgREST endpoint, enough for the allotment flows."""

    primary_keys = {
        "hostels": "hostel_id",
        "rooms": "room_id",
        "students": "student_id",
        "room_allotments": "allotment_id",
    }

    def __init__(self):
        self.headers = {}
        self.tables = {name: [] for name in self.primary_keys}
        self.calls = []
        self._ids = count(1)

    def close(self):
        pass

    def request(self, method, url, params=None, json=None, headers=None, timeout=None):
        table = url.rsplit("/", 1)[-1]
        self.calls.append((method, table, list(params or []), json, headers))
        rows = self.tables[table]

        if method == "GET":
            return FakeResponse(200, self._select(rows, params or []))
        if method == "POST":
            row = dict(json)
            row[self.primary_keys[table]] = next(self._ids)
            row.setdefault("vacated_date", None)
            if self._violates_active_student(table, row, rows):
                return self._duplicate()
            rows.append(row)
            return FakeResponse(201, [row])
        if method == "PATCH":
            matched = self._select(rows, params or [])
            for row in matched:
                candidate = {**row, **json}
                others = [r for r in rows if r is not row]
                if self._violates_active_student(table, candidate, others):
                    return self._duplicate()
                row.update(json)
            return FakeResponse(200, [dict(row) for row in matched])
        raise AssertionError(f"unexpected method {method}")

    @staticmethod
    def _duplicate():
        return FakeResponse(
            409,
            {"code": "23505", "message": "duplicate key value violates unique constraint"},
            reason="Conflict",
        )

    @staticmethod
    def _violates_active_student(table, row, rows):
        if table != "room_allotments" or row.get("status") != "Active":
            return False
        return any(
            other["student_id"] == row["student_id"] and other["status"] == "Active"
            for other in rows
        )

    @staticmethod
    def _select(rows, params):
        selected = list(rows)
        order = None
        for name, expression in params:
            if name == "select":
                continue
            if name == "order":
                order = expression
                continue
            op, _, value = expression.partition(".")
            if op == "eq":
                selected = [r for r in selected if str(r.get(name)) == value]
            elif op == "in":
                options = {item.strip('"') for item in value.strip("()").split(",")}
                selected = [r for r in selected if str(r.get(name)) in options]
            elif op == "is":
                selected = [r for r in selected if r.get(name) is None]
        if order:
            for part in reversed(order.split(",")):
                column, _, direction = part.partition(".")
                selected.sort(key=lambda r: str(r.get(column)), reverse=direction == "desc")
        return selected


@pytest.fixture
def service():
    return FakeTableService()


@pytest.fixture
def rest_backend(service):
    return RestBackend("https://example.test/rest/v1/", api_key="service-key", session=service)


@pytest.fixture
def seeded_rest(rest_backend):
    with rest_backend.unit_of_work() as uow:
        hostel = uow.insert(
            HOSTELS,
            {"hostel_name": "North Block", "hostel_type": "Boys", "total_rooms": 1},
        )
        room = uow.insert(
            ROOMS,
            {"hostel_id": hostel.hostel_id, "room_no": "101", "capacity": 2, "status": RoomStatus.VACANT},
        )
        students = [
            uow.insert(STUDENTS, {"name": f"Student {i}", "reg_no": f"REG{i}"}).student_id
            for i in range(1, 4)
        ]
    return room, students


def test_encode_filters():
    params = encode_filters({
        "status": AllotmentStatus.ACTIVE,
        "room_id": [3, 4],
        "vacated_date": None,
        "allotment_date": date(2026, 3, 2),
        "hostel_type": ("Boys", "Girls"),
    })

    assert params == [
        ("status", "eq.Active"),
        ("room_id", "in.(3,4)"),
        ("vacated_date", "is.null"),
        ("allotment_date", "eq.2026-03-02"),
        ("hostel_type", 'in.("Boys","Girls")'),
    ]


def test_encode_order():
    assert encode_order(["room_no", "-allotment_date"]) == [("order", "room_no.asc,allotment_date.desc")]
    assert encode_order([]) == []


def test_auth_headers_are_set(service, rest_backend):
    assert service.headers["apikey"] == "service-key"
    assert service.headers["Authorization"] == "Bearer service-key"


def test_guarded_update_that_matches_nothing_returns_none(service, rest_backend):
    with rest_backend.unit_of_work() as uow:
        result = uow.update(ALLOTMENTS, 7, {"status": "Active"}, guard={"status": "Pending"})

    assert result is None
    method, table, params, body, headers = service.calls[-1]
    assert (method, table) == ("PATCH", "room_allotments")
    assert params == [("allotment_id", "eq.7"), ("status", "eq.Pending")]
    assert body == {"status": "Active"}
    assert headers == {"Prefer": "return=representation"}


@pytest.mark.parametrize(
    "response, expected",
    [
        (FakeResponse(409, {"code": "23505", "message": "dup"}, "Conflict"), DuplicateEntryError),
        (FakeResponse(409, {"code": "23503", "message": "fk"}, "Conflict"), ForeignKeyViolationError),
        (FakeResponse(500, {"message": "boom"}, "Server Error"), PersistenceError),
    ],
)
def test_error_responses_are_translated(service, rest_backend, response, expected):
    service.request = lambda *args, **kwargs: response

    with pytest.raises(expected):
        with rest_backend.unit_of_work(read_only=True) as uow:
            uow.read_filtered(ROOMS)


def test_unreachable_service_raises_connection_error(service, rest_backend):
    def refuse(*args, **kwargs):
        raise requests.ConnectionError("refused")

    service.request = refuse

    with pytest.raises(DatabaseConnectionError) as exc_info:
        with rest_backend.unit_of_work(read_only=True) as uow:
            uow.count(ROOMS)
    assert exc_info.value.status_code == 503


def test_read_only_unit_refuses_writes(rest_backend):
    with pytest.raises(PersistenceError):
        with rest_backend.unit_of_work(read_only=True) as uow:
            uow.insert(ROOMS, {"hostel_id": 1, "room_no": "1", "capacity": 1, "status": "Vacant"})


def test_manager_over_rest_backend(rest_backend, settings, seeded_rest):
    room, (first, second, third) = seeded_rest
    manager = AllotmentManager(rest_backend, settings=settings, today=lambda: date(2026, 3, 2))

    a = manager.allocate(first, room.room_id)
    manager.allocate(second, room.room_id)
    with pytest.raises(RoomFullError):
        manager.allocate(third, room.room_id)

    with rest_backend.unit_of_work(read_only=True) as uow:
        assert uow.get(ROOMS, room.room_id).status == RoomStatus.OCCUPIED

    vacated = manager.vacate(a.allotment_id)
    assert vacated.vacated_date == date(2026, 3, 2)
    assert manager.recompute_room_status(room.room_id).status == RoomStatus.VACANT


def test_unique_index_conflict_surfaces_as_already_allocated(service, rest_backend, settings, seeded_rest):
    room, (first, _, _) = seeded_rest
    # An Active row written by another process that this process has not counted
    service.tables["room_allotments"].append({
        "allotment_id": 900,
        "student_id": first,
        "room_id": room.room_id,
        "allotment_date": "2026-03-01",
        "status": "Active",
        "vacated_date": None,
    })
    manager = AllotmentManager(rest_backend, settings=settings)
    original = service.request

    def hide_other_process(method, url, params=None, **kwargs):
        if method == "GET" and ("student_id", f"eq.{first}") in (params or []):
            return FakeResponse(200, [])
        return original(method, url, params=params, **kwargs)

    service.request = hide_other_process

    with pytest.raises(StudentAlreadyAllocatedError):
        manager.allocate(first, room.room_id)


def test_insert_body_is_json_encoded(service, rest_backend, settings, seeded_rest):
    room, (first, _, _) = seeded_rest
    manager = AllotmentManager(rest_backend, settings=settings, today=lambda: date(2026, 3, 2))

    manager.allocate(first, room.room_id)

    posts = [body for method, table, _, body, _ in service.calls if (method, table) == ("POST", "room_allotments")]
    assert posts == [{
        "student_id": first,
        "room_id": room.room_id,
        "allotment_date": "2026-03-02",
        "status": "Active",
    }]


def test_approval_loser_gets_none_when_winner_commits_during_room_wait(
    service, settings, seeded_rest, monkeypatch
):
    room, (first, _, _) = seeded_rest
    # Two processes sharing one table service, each with its own write mutex
    caller_a = AllotmentManager(RestBackend("https://example.test/rest/v1", session=service), settings=settings)
    caller_b = AllotmentManager(RestBackend("https://example.test/rest/v1", session=service), settings=settings)
    pending = caller_a.apply(first, room.room_id)

    original_get_by_id = RoomRepository.get_by_id
    interleaved = []
    winner = []

    def approve_elsewhere_first(self, entity_id, *, lock=False):
        if lock and not interleaved:
            interleaved.append(entity_id)
            winner.append(caller_b.approve_pending(pending.allotment_id))
        return original_get_by_id(self, entity_id, lock=lock)

    monkeypatch.setattr(RoomRepository, "get_by_id", approve_elsewhere_first)

    assert caller_a.approve_pending(pending.allotment_id) is None
    assert winner[0].status == AllotmentStatus.ACTIVE
    active = [r for r in service.tables["room_allotments"] if r["status"] == "Active"]
    assert len(active) == 1
