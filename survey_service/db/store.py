"""Generic CRUD/query client over the relational store.

Three primitives are exposed (insert, select, delete), each available
directly on `SurveyStore` (auto-committed) or on the handle yielded by
`SurveyStore.transaction()` so several writes share one database transaction.
Every SQLAlchemy failure surfaces as `StoreError`.
"""

from __future__ import annotations

import logging
import uuid
from contextlib import contextmanager
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Sequence

from sqlalchemy import delete as sa_delete, select as sa_select, text as sql_text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.sql.expression import Select

from survey_service.db.tables import TABLES

logger = logging.getLogger(__name__)

Row = Dict[str, Any]
Filters = Mapping[str, Any]

_MEMBERSHIP_TYPES = (list, tuple, set, frozenset)


class StoreError(RuntimeError):
    """Failure reported by the backing store (connectivity, constraint, auth)."""

    def __init__(self, operation: str, table: str | None, message: str) -> None:
        self.operation = operation
        self.table = table
        super().__init__(f"{operation} on {table or '<store>'} failed: {message}")


def _table(name: str):  # type: ignore[no-untyped-def]
    try:
        return TABLES[name]
    except KeyError:
        raise StoreError("lookup", name, "unknown table") from None


def _apply_filters(stmt, tbl, filters: Optional[Filters]):  # type: ignore[no-untyped-def]
    """Add equality/membership WHERE clauses.

    Returns None when a membership filter is empty, since nothing can match.
    """
    for col, value in (filters or {}).items():
        column = tbl.c[col]
        if isinstance(value, _MEMBERSHIP_TYPES):
            values = list(value)
            if not values:
                return None
            stmt = stmt.where(column.in_(values))
        else:
            stmt = stmt.where(column == value)
    return stmt


def _apply_order(stmt: Select, tbl, order_by: Optional[Sequence[str]]) -> Select:  # type: ignore[no-untyped-def]
    # "-col" sorts descending
    for key in order_by or ():
        if key.startswith("-"):
            stmt = stmt.order_by(tbl.c[key[1:]].desc())
        else:
            stmt = stmt.order_by(tbl.c[key].asc())
    return stmt


class StoreSession:
    """Store operations bound to a single open connection/transaction."""

    def __init__(self, conn: Connection) -> None:
        self._conn = conn

    def insert(self, table: str, rows: Iterable[Mapping[str, Any]]) -> List[Row]:
        """Insert rows and return them with generated ids filled in."""
        tbl = _table(table)
        prepared: List[Row] = []
        for row in rows:
            record = dict(row)
            if not record.get("id"):
                record["id"] = str(uuid.uuid4())
            prepared.append(record)
        if not prepared:
            return []
        try:
            self._conn.execute(tbl.insert(), prepared)
        except SQLAlchemyError as exc:
            logger.error("store.insert.failed table=%s rows=%s", table, len(prepared), exc_info=True)
            raise StoreError("insert", table, str(exc)) from exc
        return prepared

    def select(
        self,
        table: str,
        filters: Optional[Filters] = None,
        order_by: Optional[Sequence[str]] = None,
    ) -> List[Row]:
        tbl = _table(table)
        stmt = _apply_filters(sa_select(tbl), tbl, filters)
        if stmt is None:
            return []
        stmt = _apply_order(stmt, tbl, order_by)
        try:
            rows = self._conn.execute(stmt).mappings().all()
        except SQLAlchemyError as exc:
            logger.error("store.select.failed table=%s", table, exc_info=True)
            raise StoreError("select", table, str(exc)) from exc
        return [dict(r) for r in rows]

    def delete(self, table: str, filters: Filters) -> None:
        if not filters:
            # An unfiltered delete would empty the table
            raise StoreError("delete", table, "refusing delete without filters")
        tbl = _table(table)
        stmt = _apply_filters(sa_delete(tbl), tbl, filters)
        if stmt is None:
            return
        try:
            result = self._conn.execute(stmt)
        except SQLAlchemyError as exc:
            logger.error("store.delete.failed table=%s", table, exc_info=True)
            raise StoreError("delete", table, str(exc)) from exc
        logger.info("store.delete table=%s rowcount=%s", table, result.rowcount)


class SurveyStore:
    """Entry point to the store; owns the Engine."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    @property
    def engine(self) -> Engine:
        return self._engine

    @contextmanager
    def transaction(self) -> Iterator[StoreSession]:
        """Yield a StoreSession whose writes commit together or not at all."""
        try:
            with self._engine.begin() as conn:
                yield StoreSession(conn)
        except SQLAlchemyError as exc:
            logger.error("store.transaction.failed", exc_info=True)
            raise StoreError("transaction", None, str(exc)) from exc

    def insert(self, table: str, rows: Iterable[Mapping[str, Any]]) -> List[Row]:
        with self.transaction() as tx:
            return tx.insert(table, rows)

    def select(
        self,
        table: str,
        filters: Optional[Filters] = None,
        order_by: Optional[Sequence[str]] = None,
    ) -> List[Row]:
        with self.transaction() as tx:
            return tx.select(table, filters, order_by)

    def delete(self, table: str, filters: Filters) -> None:
        with self.transaction() as tx:
            tx.delete(table, filters)

    def ping(self) -> bool:
        try:
            with self._engine.connect() as conn:
                conn.execute(sql_text("SELECT 1"))
        except SQLAlchemyError:
            logger.error("store.ping.failed", exc_info=True)
            return False
        return True


__all__ = ["StoreError", "StoreSession", "SurveyStore", "Row"]
