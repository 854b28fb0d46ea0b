# hostel_allotment/persistence/sql.py
"""
Transactional backend on SQLAlchemy sessions.

Each unit of work is one database transaction: it commits when the block
exits cleanly and rolls back on any exception, so a failed allocation leaves
neither an allotment row nor a changed room status behind. Row locks
requested with ``lock=True`` become ``SELECT ... FOR UPDATE`` on PostgreSQL;
SQLite engines built by ``build_engine`` serialize writers with
``BEGIN IMMEDIATE`` instead.
"""
from __future__ import annotations

from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Type

from sqlalchemy import func, select, update as sa_update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from hostel_allotment.core.exceptions import (
    BaseAppException,
    ConflictError,
    PersistenceError,
    handle_database_exception,
)
from hostel_allotment.core.logging import get_logger
from hostel_allotment.db.session import build_session_factory
from hostel_allotment.models import Base, Hostel, Room, RoomAllotment, Student
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

DEFAULT_MODELS: Dict[str, Type[Base]] = {
    model.__tablename__: model for model in (Hostel, Room, Student, RoomAllotment)
}


class SqlUnitOfWork(UnitOfWork):
    """
    Unit of Work bound to one SQLAlchemy session and transaction.

    Coordinates reads and writes and ensures atomic commits/rollbacks.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        models: Mapping[str, Type[Base]],
        read_only: bool = False,
    ) -> None:
        self._session_factory = session_factory
        self._models = models
        self.read_only = read_only
        self.session: Optional[Session] = None

    # ------------------------------------------------------------------ #
    # Context manager protocol
    # ------------------------------------------------------------------ #

    def __enter__(self) -> "SqlUnitOfWork":
        if self.session is not None:
            raise RuntimeError("UnitOfWork context already entered")

        self.session = self._session_factory()
        logger.debug("UnitOfWork session started")
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> bool:
        if self.session is None:
            return False

        try:
            if exc_type is None and not self.read_only:
                try:
                    self.session.commit()
                    logger.debug("UnitOfWork committed")
                except SQLAlchemyError as exc:
                    logger.error(f"Commit failed: {exc}")
                    self.session.rollback()
                    raise self._translate(exc, "commit") from exc
            else:
                self.session.rollback()
                if exc_type is not None:
                    logger.warning(f"UnitOfWork rolled back due to {exc_type.__name__}")
        finally:
            self.session.close()
            self.session = None

        # Propagate any exception
        return False

    # ------------------------------------------------------------------ #
    # Contract
    # ------------------------------------------------------------------ #

    def read_filtered(
        self,
        table: TableSpec[RecordT],
        filters: Optional[Filters] = None,
        *,
        order_by: Sequence[str] = (),
        lock: bool = False,
    ) -> List[RecordT]:
        model = self._model(table)
        stmt = select(model).where(*self._criteria(model, filters))
        for column in order_by:
            if column.startswith("-"):
                stmt = stmt.order_by(getattr(model, column[1:]).desc())
            else:
                stmt = stmt.order_by(getattr(model, column).asc())
        if lock:
            stmt = stmt.with_for_update()

        # Rows changed by bulk UPDATE statements must not be served stale
        # from the identity map.
        stmt = stmt.execution_options(populate_existing=True)

        try:
            rows = self._session.scalars(stmt).all()
        except SQLAlchemyError as exc:
            raise self._translate(exc, "read", table.name) from exc
        return [table.load(row) for row in rows]

    def count(self, table: TableSpec[Any], filters: Optional[Filters] = None) -> int:
        model = self._model(table)
        stmt = select(func.count()).select_from(model).where(*self._criteria(model, filters))
        try:
            return int(self._session.scalar(stmt) or 0)
        except SQLAlchemyError as exc:
            raise self._translate(exc, "count", table.name) from exc

    def insert(self, table: TableSpec[RecordT], values: Mapping[str, Any]) -> RecordT:
        model = self._model(table)
        entity = model(**{key: plain_value(value) for key, value in values.items()})
        try:
            self._session.add(entity)
            self._session.flush()
        except SQLAlchemyError as exc:
            raise self._translate(exc, "insert", table.name) from exc

        logger.debug(f"Inserted into {table.name}: {getattr(entity, table.primary_key)}")
        return table.load(entity)

    def update(
        self,
        table: TableSpec[RecordT],
        key: Any,
        patch: Mapping[str, Any],
        guard: Optional[Filters] = None,
    ) -> Optional[RecordT]:
        model = self._model(table)
        stmt = (
            sa_update(model)
            .where(getattr(model, table.primary_key) == key, *self._criteria(model, guard))
            .values({name: plain_value(value) for name, value in patch.items()})
            .returning(*model.__table__.columns)
            .execution_options(synchronize_session=False)
        )
        try:
            row = self._session.execute(stmt).mappings().first()
        except SQLAlchemyError as exc:
            raise self._translate(exc, "update", table.name) from exc

        if row is None:
            logger.debug(f"Guarded update on {table.name} matched no row: {key}")
            return None
        return table.load(dict(row))

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    @property
    def _session(self) -> Session:
        if self.session is None:
            raise RuntimeError("UnitOfWork used outside of its context")
        return self.session

    def _model(self, table: TableSpec[Any]) -> Type[Base]:
        try:
            return self._models[table.name]
        except KeyError:
            raise PersistenceError(
                f"No model registered for table {table.name}",
                operation="resolve",
                table=table.name,
            ) from None

    @staticmethod
    def _criteria(model: Type[Base], filters: Optional[Filters]) -> List[Any]:
        clauses = []
        for name, value in (filters or {}).items():
            column = getattr(model, name)
            if is_multi_value(value):
                clauses.append(column.in_([plain_value(item) for item in value]))
            elif value is None:
                clauses.append(column.is_(None))
            else:
                clauses.append(column == plain_value(value))
        return clauses

    @staticmethod
    def _translate(
        exc: SQLAlchemyError,
        operation: str,
        table: Optional[str] = None,
    ) -> BaseAppException:
        original = getattr(exc, "orig", None) or exc
        error = handle_database_exception(original, operation=operation, table=table)
        if isinstance(exc, IntegrityError) and not isinstance(error, ConflictError):
            return ConflictError(f"Constraint violation: {original}", details={"table": table})
        return error


class SqlBackend(PersistenceBackend):
    """Backend over a SQLAlchemy session factory."""

    name = "sql"
    transactional = True

    def __init__(
        self,
        session_factory: Callable[[], Session],
        engine: Optional[Engine] = None,
        models: Optional[Mapping[str, Type[Base]]] = None,
    ) -> None:
        self.session_factory = session_factory
        self.engine = engine
        self.models = dict(models or DEFAULT_MODELS)

    @classmethod
    def from_engine(cls, engine: Engine) -> "SqlBackend":
        return cls(build_session_factory(engine), engine=engine)

    def unit_of_work(self, read_only: bool = False) -> SqlUnitOfWork:
        return SqlUnitOfWork(self.session_factory, self.models, read_only=read_only)

    def close(self) -> None:
        if self.engine is not None:
            self.engine.dispose()


__all__ = ["SqlUnitOfWork", "SqlBackend", "DEFAULT_MODELS"]
