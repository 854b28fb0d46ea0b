# hostel_allotment/persistence/rest.py
"""
Remote table-client backend speaking the PostgREST dialect (as served by
Supabase and plain PostgREST deployments).

The REST interface offers no multi-statement transactions, so this backend
gives a narrower guarantee than ``SqlBackend``:

- Writing units of work are serialized by a mutex held for the whole
  check-then-write sequence, which closes the race between requests served
  by the same process.
- Across processes, the database's partial unique index on
  ``room_allotments(student_id) WHERE status = 'Active'`` rejects a second
  Active allotment for a student; the resulting HTTP 409 surfaces as a
  conflict. Two processes filling the last bed of the same room at the same
  moment remain a documented race.
- Writes already sent when a unit fails are not undone. The failure is
  logged with the written keys so the room label can be repaired with
  ``AllotmentManager.recompute_room_status``.
"""
from __future__ import annotations

import threading
from datetime import date, datetime
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import requests
from pydantic import TypeAdapter

from hostel_allotment.core.exceptions import (
    BaseAppException,
    DatabaseConnectionError,
    DuplicateEntryError,
    ForeignKeyViolationError,
    PersistenceError,
)
from hostel_allotment.core.logging import get_logger
from hostel_allotment.persistence.base import (
    Filters,
    PersistenceBackend,
    RecordT,
    TableSpec,
    UnitOfWork,
    is_multi_value,
    plain_value,
)

logger = get_logger(__name__)

Params = List[Tuple[str, str]]

_json_body = TypeAdapter(Dict[str, Any])


def _encode_scalar(value: Any, quote: bool = False) -> str:
    value = plain_value(value)
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, str) and quote:
        escaped = value.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    return str(value)


def encode_filters(filters: Optional[Filters]) -> Params:
    """Translate contract filters into PostgREST query parameters."""
    params: Params = []
    for name, value in (filters or {}).items():
        if is_multi_value(value):
            items = ",".join(_encode_scalar(item, quote=True) for item in value)
            params.append((name, f"in.({items})"))
        elif value is None:
            params.append((name, "is.null"))
        else:
            params.append((name, f"eq.{_encode_scalar(value)}"))
    return params


def encode_order(order_by: Sequence[str]) -> Params:
    if not order_by:
        return []
    parts = [
        f"{column[1:]}.desc" if column.startswith("-") else f"{column}.asc"
        for column in order_by
    ]
    return [("order", ",".join(parts))]


class RestUnitOfWork(UnitOfWork):
    """Unit of work over the REST client; see module docstring for guarantees."""

    def __init__(self, backend: "RestBackend", read_only: bool = False) -> None:
        self._backend = backend
        self.read_only = read_only
        self._entered = False
        self._written: List[Tuple[str, Any]] = []

    def __enter__(self) -> "RestUnitOfWork":
        if self._entered:
            raise RuntimeError("UnitOfWork context already entered")
        if not self.read_only:
            self._backend.write_lock.acquire()
        self._entered = True
        self._written = []
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> bool:
        try:
            if exc_type is not None and self._written:
                logger.error(
                    "Unit of work failed after writes that cannot be rolled back",
                    extra={"written": list(self._written), "error_type": exc_type.__name__},
                )
        finally:
            self._entered = False
            if not self.read_only:
                self._backend.write_lock.release()
        return False

    def read_filtered(
        self,
        table: TableSpec[RecordT],
        filters: Optional[Filters] = None,
        *,
        order_by: Sequence[str] = (),
        lock: bool = False,
    ) -> List[RecordT]:
        params = [("select", "*")] + encode_filters(filters) + encode_order(order_by)
        rows = self._backend.request("GET", table.name, params=params)
        return [table.load(row) for row in rows]

    def count(self, table: TableSpec[Any], filters: Optional[Filters] = None) -> int:
        params = [("select", table.primary_key)] + encode_filters(filters)
        return len(self._backend.request("GET", table.name, params=params))

    def insert(self, table: TableSpec[RecordT], values: Mapping[str, Any]) -> RecordT:
        self._ensure_writable(table)
        rows = self._backend.request(
            "POST",
            table.name,
            json=_json_body.dump_python(dict(values), mode="json"),
            prefer="return=representation",
        )
        if not rows:
            raise PersistenceError(
                "Insert returned no representation",
                operation="insert",
                table=table.name,
            )
        record = table.load(rows[0])
        self._written.append((table.name, getattr(record, table.primary_key)))
        return record

    def update(
        self,
        table: TableSpec[RecordT],
        key: Any,
        patch: Mapping[str, Any],
        guard: Optional[Filters] = None,
    ) -> Optional[RecordT]:
        self._ensure_writable(table)
        params = encode_filters({table.primary_key: key}) + encode_filters(guard)
        rows = self._backend.request(
            "PATCH",
            table.name,
            params=params,
            json=_json_body.dump_python(dict(patch), mode="json"),
            prefer="return=representation",
        )
        if not rows:
            return None
        self._written.append((table.name, key))
        return table.load(rows[0])

    def _ensure_writable(self, table: TableSpec[Any]) -> None:
        if self.read_only:
            raise PersistenceError(
                "Write attempted in a read-only unit of work",
                operation="write",
                table=table.name,
            )


class RestBackend(PersistenceBackend):
    """
    PostgREST table client built on ``requests``.

    Args:
        base_url: REST root, e.g. ``https://<project>.supabase.co/rest/v1``
        api_key: Service key sent as ``apikey`` and bearer token
        timeout: Per-request timeout in seconds
        session: Optional preconfigured ``requests.Session``
    """

    name = "rest"
    transactional = False

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.write_lock = threading.RLock()

        self.session.headers.update({
            "Accept": "application/json",
            "Content-Type": "application/json",
        })
        if api_key:
            self.session.headers.update({
                "apikey": api_key,
                "Authorization": f"Bearer {api_key}",
            })

    def unit_of_work(self, read_only: bool = False) -> RestUnitOfWork:
        return RestUnitOfWork(self, read_only=read_only)

    def request(
        self,
        method: str,
        table: str,
        params: Optional[Params] = None,
        json: Any = None,
        prefer: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """Send one request and return the decoded row list."""
        headers = {"Prefer": prefer} if prefer else {}
        url = f"{self.base_url}/{table}"

        try:
            response = self.session.request(
                method,
                url,
                params=params,
                json=json,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.error(f"REST {method} {table} failed: {exc}")
            raise DatabaseConnectionError(
                f"Table service unreachable: {exc}",
                operation=method,
                table=table,
            ) from exc

        if response.status_code >= 400:
            raise self._error_for(response, method, table)

        if not response.content:
            return []
        payload = response.json()
        if isinstance(payload, dict):
            return [payload]
        return payload

    @staticmethod
    def _error_for(response: requests.Response, method: str, table: str) -> BaseAppException:
        try:
            body = response.json()
        except ValueError:
            body = {"message": response.text}
        if not isinstance(body, dict):
            body = {"message": str(body)}

        code = str(body.get("code") or "")
        message = body.get("message") or response.reason or "request failed"
        logger.warning(
            f"REST {method} {table} returned {response.status_code}",
            extra={"pg_code": code, "pg_message": message},
        )

        if code == "23505" or (response.status_code == 409 and code != "23503"):
            return DuplicateEntryError(f"Duplicate entry: {message}", table=table)
        if code == "23503":
            return ForeignKeyViolationError(f"Foreign key violation: {message}", table=table)
        return PersistenceError(
            f"Table service error ({response.status_code}): {message}",
            operation=method,
            table=table,
        )

    def close(self) -> None:
        self.session.close()


__all__ = ["RestBackend", "RestUnitOfWork", "encode_filters", "encode_order"]
