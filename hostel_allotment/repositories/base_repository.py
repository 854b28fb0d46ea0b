"""
Base repository over the persistence contract.

One generic repository parameterised by a table spec supplies lookups,
filtered reads, counts, inserts and guarded updates; entity repositories
subclass it and add their named queries.
"""

from typing import Any, ClassVar, Dict, Generic, List, Mapping, Optional, Sequence, Type

from hostel_allotment.core.exceptions import NotFoundError
from hostel_allotment.core.logging import get_logger
from hostel_allotment.persistence.base import Filters, RecordT, TableSpec, UnitOfWork

logger = get_logger(__name__)


class BaseRepository(Generic[RecordT]):
    """
    Standard operations for one table, bound to one unit of work.

    Subclasses set ``table`` and, optionally, ``not_found_error``: the
    exception type ``get_by_id`` raises, called with the missing key.
    """

    table: ClassVar[TableSpec[Any]]
    not_found_error: ClassVar[Optional[Type[NotFoundError]]] = None

    def __init__(self, uow: UnitOfWork):
        """
        Initialize repository.

        Args:
            uow: Entered unit of work every call runs inside
        """
        self.uow = uow

    # ==================== Read Operations ====================

    def find_by_id(self, entity_id: Any, *, lock: bool = False) -> Optional[RecordT]:
        """
        Find entity by primary key.

        Args:
            entity_id: Primary key value
            lock: Hold the row until the unit of work ends

        Returns:
            Record if found, None otherwise
        """
        return self.uow.get(self.table, entity_id, lock=lock)

    def get_by_id(self, entity_id: Any, *, lock: bool = False) -> RecordT:
        """
        Get entity by primary key or raise.

        Raises:
            NotFoundError: If no row has this key
        """
        entity = self.find_by_id(entity_id, lock=lock)
        if entity is None:
            if self.not_found_error is not None:
                raise self.not_found_error(entity_id)
            raise NotFoundError(self.table.name, entity_id)
        return entity

    def find_by_criteria(
        self,
        criteria: Optional[Filters] = None,
        order_by: Sequence[str] = (),
        lock: bool = False,
    ) -> List[RecordT]:
        return self.uow.read_filtered(self.table, criteria, order_by=order_by, lock=lock)

    def find_one(self, criteria: Filters) -> Optional[RecordT]:
        rows = self.find_by_criteria(criteria)
        return rows[0] if rows else None

    def find_all(self, order_by: Sequence[str] = ()) -> List[RecordT]:
        return self.find_by_criteria(None, order_by=order_by)

    def count(self, criteria: Optional[Filters] = None) -> int:
        return self.uow.count(self.table, criteria)

    # ==================== Write Operations ====================

    def create(self, values: Mapping[str, Any]) -> RecordT:
        """Insert a row and return it as stored."""
        entity = self.uow.insert(self.table, values)
        logger.debug(f"Created {self.table.name} row {getattr(entity, self.table.primary_key)}")
        return entity

    def update(
        self,
        entity_id: Any,
        values: Mapping[str, Any],
        guard: Optional[Filters] = None,
    ) -> Optional[RecordT]:
        """
        Update a row, optionally only while it still matches ``guard``.

        Returns:
            Updated record, or None when the row is gone or the guard failed
        """
        return self.uow.update(self.table, entity_id, values, guard=guard)

    def map_by_id(self, ids: Sequence[Any]) -> Dict[Any, RecordT]:
        """Fetch rows for ``ids`` keyed by primary key."""
        unique_ids = list(dict.fromkeys(ids))
        if not unique_ids:
            return {}
        rows = self.find_by_criteria({self.table.primary_key: unique_ids})
        return {getattr(row, self.table.primary_key): row for row in rows}
