# hostel_allotment/persistence/base.py
"""
Persistence contract shared by every storage backend.

A backend hands out units of work. Inside one unit, callers read rows with
equality/IN filters, count them, insert, and apply status-guarded updates.
A transactional backend commits or rolls back the whole unit; a
non-transactional backend documents what it guarantees instead.

Filters map a column name to a value. A list, tuple or set means IN, None
means IS NULL, anything else means equality. ``order_by`` entries are column
names, prefixed with ``-`` for descending order.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Generic, List, Mapping, Optional, Sequence, Type, TypeVar

from hostel_allotment.schemas.base import BaseRecord
from hostel_allotment.schemas.records import (
    AllotmentRecord,
    HostelRecord,
    RoomRecord,
    StudentRecord,
)

RecordT = TypeVar("RecordT", bound=BaseRecord)
TRepository = TypeVar("TRepository")

Filters = Mapping[str, Any]


@dataclass(frozen=True)
class TableSpec(Generic[RecordT]):
    """Names a table, its primary key and the record type its rows load into."""

    name: str
    record: Type[RecordT]
    primary_key: str

    def load(self, row: Any) -> RecordT:
        return self.record.model_validate(row)


HOSTELS: TableSpec[HostelRecord] = TableSpec("hostels", HostelRecord, "hostel_id")
ROOMS: TableSpec[RoomRecord] = TableSpec("rooms", RoomRecord, "room_id")
STUDENTS: TableSpec[StudentRecord] = TableSpec("students", StudentRecord, "student_id")
ALLOTMENTS: TableSpec[AllotmentRecord] = TableSpec(
    "room_allotments", AllotmentRecord, "allotment_id"
)


def plain_value(value: Any) -> Any:
    """Unwrap enums so backends only ever see storable scalars."""
    if isinstance(value, Enum):
        return value.value
    return value


def is_multi_value(value: Any) -> bool:
    return isinstance(value, (list, tuple, set, frozenset))


class UnitOfWork(AbstractContextManager["UnitOfWork"], ABC):
    """
    One atomic sequence of reads and writes against a backend.

    Usage:
        >>> with backend.unit_of_work() as uow:
        ...     room = uow.get(ROOMS, room_id, lock=True)
        ...     uow.insert(ALLOTMENTS, {...})
    """

    read_only: bool = False
    _repo_cache: Optional[Dict[type, Any]] = None

    @abstractmethod
    def read_filtered(
        self,
        table: TableSpec[RecordT],
        filters: Optional[Filters] = None,
        *,
        order_by: Sequence[str] = (),
        lock: bool = False,
    ) -> List[RecordT]:
        """
        Return rows of ``table`` matching ``filters``.

        Args:
            table: Table to read
            filters: Column filters (see module docstring)
            order_by: Columns to sort by, ``-`` prefix for descending
            lock: Hold the matched rows until the unit ends, where the
                backend supports row locks

        Returns:
            Matching rows as records
        """

    @abstractmethod
    def count(self, table: TableSpec[Any], filters: Optional[Filters] = None) -> int:
        """Number of rows matching ``filters``."""

    @abstractmethod
    def insert(self, table: TableSpec[RecordT], values: Mapping[str, Any]) -> RecordT:
        """Insert one row and return it as stored."""

    @abstractmethod
    def update(
        self,
        table: TableSpec[RecordT],
        key: Any,
        patch: Mapping[str, Any],
        guard: Optional[Filters] = None,
    ) -> Optional[RecordT]:
        """
        Update the row with primary key ``key``.

        Args:
            table: Table to update
            key: Primary key value
            patch: Columns to set
            guard: Extra filters the row must still match; a guard that no
                longer matches turns the update into a no-op

        Returns:
            The updated row, or None when no row matched
        """

    def get(self, table: TableSpec[RecordT], key: Any, *, lock: bool = False) -> Optional[RecordT]:
        rows = self.read_filtered(table, {table.primary_key: key}, lock=lock)
        return rows[0] if rows else None

    def get_repo(self, repo_cls: Type[TRepository]) -> TRepository:
        """
        Get or create a repository bound to this unit of work.

        Repositories are cached per unit so every call inside one ``with``
        block shares the same instance.

        Example:
            >>> with backend.unit_of_work() as uow:
            ...     rooms = uow.get_repo(RoomRepository)
        """
        if self._repo_cache is None:
            self._repo_cache = {}
        if repo_cls not in self._repo_cache:
            self._repo_cache[repo_cls] = repo_cls(self)
        return self._repo_cache[repo_cls]


class PersistenceBackend(ABC):
    """Factory for units of work over one storage substrate."""

    name: str = "abstract"
    transactional: bool = False

    @abstractmethod
    def unit_of_work(self, read_only: bool = False) -> UnitOfWork:
        """Create a new, not yet entered, unit of work."""

    def close(self) -> None:
        """Release pooled resources held by the backend."""


__all__ = [
    "RecordT",
    "Filters",
    "TableSpec",
    "HOSTELS",
    "ROOMS",
    "STUDENTS",
    "ALLOTMENTS",
    "plain_value",
    "is_multi_value",
    "UnitOfWork",
    "PersistenceBackend",
]
