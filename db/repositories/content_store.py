"""
Per-table store used by the aggregate writer.

Each call runs in its own short session and commits before returning, so no
call ever spans more than one table. Multi-table consistency is the caller's
job (see app.services.aggregate_writer).
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping, Sequence
from contextlib import contextmanager
from typing import Any, Protocol

from sqlalchemy import MetaData, Table, delete, func, insert, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

import db.models  # noqa: F401 - registers every table on Base.metadata
from db.base import Base, new_record_id
from db.repositories.errors import RecordNotFoundError, StoreError, UnknownTableError

logger = logging.getLogger(__name__)

Row = dict[str, Any]


class ContentStore(Protocol):
    """
    Capability offered by the relational store: independent single-table calls.
    """

    def insert(self, table: str, values: Mapping[str, Any]) -> str:
        ...

    def insert_many(self, table: str, rows: Sequence[Mapping[str, Any]]) -> list[str]:
        ...

    def update(self, table: str, record_id: str, values: Mapping[str, Any]) -> None:
        ...

    def update_where(self, table: str, filters: Mapping[str, Any], values: Mapping[str, Any]) -> int:
        ...

    def delete(self, table: str, record_id: str) -> None:
        ...

    def delete_where(self, table: str, filters: Mapping[str, Any]) -> int:
        ...

    def select_one(
        self,
        table: str,
        record_id: str,
        *,
        children: Sequence[tuple[str, str]] = (),
    ) -> Row | None:
        ...

    def select_where(
        self,
        table: str,
        filters: Mapping[str, Any],
        *,
        order_by: str | None = None,
        descending: bool = False,
    ) -> list[Row]:
        ...

    def count_where(self, table: str, filters: Mapping[str, Any]) -> int:
        ...


class SQLAlchemyContentStore:
    """
    ContentStore backed by SQLAlchemy Core statements over Base.metadata.
    """

    def __init__(self, session_factory: sessionmaker, *, metadata: MetaData | None = None) -> None:
        self._session_factory = session_factory
        self._metadata = metadata or Base.metadata

    def insert(self, table: str, values: Mapping[str, Any]) -> str:
        target = self._table(table)
        row = self._with_id(values)
        with self._transaction(table, "insert") as session:
            session.execute(insert(target).values(**row))
        logger.debug("Store insert table=%s id=%s", table, row["id"])
        return row["id"]

    def insert_many(self, table: str, rows: Sequence[Mapping[str, Any]]) -> list[str]:
        """
        Insert several rows of one table in a single statement.

        Either every row is written or none is.
        """

        if not rows:
            return []
        target = self._table(table)
        prepared = [self._with_id(row) for row in rows]
        with self._transaction(table, "insert_many") as session:
            session.execute(insert(target), prepared)
        logger.debug("Store insert_many table=%s rows=%s", table, len(prepared))
        return [row["id"] for row in prepared]

    def update(self, table: str, record_id: str, values: Mapping[str, Any]) -> None:
        target = self._table(table)
        with self._transaction(table, "update") as session:
            if values:
                result = session.execute(
                    update(target).where(target.c.id == record_id).values(**dict(values))
                )
                matched = result.rowcount
            else:
                matched = session.execute(
                    select(func.count()).select_from(target).where(target.c.id == record_id)
                ).scalar_one()
            if not matched:
                raise RecordNotFoundError(f"{table} record not found: {record_id}", table=table)

    def update_where(self, table: str, filters: Mapping[str, Any], values: Mapping[str, Any]) -> int:
        """
        Apply ``values`` to every row matching ``filters``; returns the row count.
        """

        target = self._table(table)
        with self._transaction(table, "update_where") as session:
            result = session.execute(
                update(target).where(*self._conditions(target, filters)).values(**dict(values))
            )
            return result.rowcount or 0

    def delete(self, table: str, record_id: str) -> None:
        target = self._table(table)
        with self._transaction(table, "delete") as session:
            result = session.execute(delete(target).where(target.c.id == record_id))
            if not result.rowcount:
                raise RecordNotFoundError(f"{table} record not found: {record_id}", table=table)

    def delete_where(self, table: str, filters: Mapping[str, Any]) -> int:
        target = self._table(table)
        with self._transaction(table, "delete_where") as session:
            result = session.execute(delete(target).where(*self._conditions(target, filters)))
            return result.rowcount or 0

    def select_one(
        self,
        table: str,
        record_id: str,
        *,
        children: Sequence[tuple[str, str]] = (),
    ) -> Row | None:
        """
        Fetch one row by id, optionally embedding child rows keyed by child table name.

        ``children`` is a sequence of ``(child_table, foreign_key_column)`` pairs.
        """

        target = self._table(table)
        child_tables = [(self._table(name), name, column) for name, column in children]
        with self._transaction(table, "select_one") as session:
            found = session.execute(select(target).where(target.c.id == record_id)).first()
            if found is None:
                return None
            record: Row = dict(found._mapping)
            for child_table, child_name, fk_column in child_tables:
                stmt = select(child_table).where(child_table.c[fk_column] == record_id)
                record[child_name] = [dict(child._mapping) for child in session.execute(stmt)]
            return record

    def select_where(
        self,
        table: str,
        filters: Mapping[str, Any],
        *,
        order_by: str | None = None,
        descending: bool = False,
    ) -> list[Row]:
        target = self._table(table)
        stmt = select(target).where(*self._conditions(target, filters))
        if order_by is not None:
            column = target.c[order_by]
            stmt = stmt.order_by(column.desc() if descending else column.asc())
        with self._transaction(table, "select_where") as session:
            return [dict(row._mapping) for row in session.execute(stmt)]

    def count_where(self, table: str, filters: Mapping[str, Any]) -> int:
        target = self._table(table)
        stmt = select(func.count()).select_from(target).where(*self._conditions(target, filters))
        with self._transaction(table, "count_where") as session:
            return int(session.execute(stmt).scalar_one())

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _table(self, name: str) -> Table:
        table = self._metadata.tables.get(name)
        if table is None:
            raise UnknownTableError(f"Unknown table: {name}", table=name)
        return table

    @staticmethod
    def _with_id(values: Mapping[str, Any]) -> Row:
        row = dict(values)
        if not row.get("id"):
            row["id"] = new_record_id()
        return row

    @staticmethod
    def _conditions(target: Table, filters: Mapping[str, Any]) -> list[Any]:
        conditions = []
        for column_name, value in filters.items():
            if column_name.endswith("__gte"):
                conditions.append(target.c[column_name[: -len("__gte")]] >= value)
            elif column_name.endswith("__in"):
                conditions.append(target.c[column_name[: -len("__in")]].in_(list(value)))
            else:
                conditions.append(target.c[column_name] == value)
        return conditions

    @contextmanager
    def _transaction(self, table: str, action: str) -> Iterator[Session]:
        session: Session = self._session_factory()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            logger.warning("Store %s failed table=%s error=%s", action, table, exc)
            raise StoreError(f"{action} on {table} failed: {exc}", table=table) from exc
        finally:
            session.close()
