"""
Database abstraction for Postgres and an in-memory test implementation.

Both clients expose the same table-oriented operations over the schema
declared in ``kssv.models``: insert a row, fetch one by key, list with
filters/search/ordering/paging, update, delete and bump a counter.
Rows travel as plain dicts.
"""

from __future__ import annotations

import copy
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Optional, Protocol

from sqlalchemy import Table, create_engine, delete, func, insert, or_, select, update
from sqlalchemy.orm import Session, sessionmaker

from kssv.models import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return uuid.uuid4().hex


@dataclass
class ListQuery:
    """
    Describes a filtered list read.

    ``filters`` maps column to value; list/tuple/set values match any member.
    ``ranges`` maps column to an inclusive ``(low, high)`` pair, either end
    may be None. ``search`` is matched case-insensitively as a substring of
    any of ``search_columns``.
    """

    filters: Dict[str, Any] = field(default_factory=dict)
    ranges: Dict[str, tuple[Any, Any]] = field(default_factory=dict)
    search: Optional[str] = None
    search_columns: tuple[str, ...] = ()
    order_by: Optional[str] = "created_at"
    descending: bool = True
    limit: Optional[int] = None
    offset: int = 0


class DbClient(Protocol):
    """Interface for database access."""

    def insert(self, table: str, values: dict) -> dict:
        ...

    def get(self, table: str, value: Any, key: str = "id") -> Optional[dict]:
        ...

    def list(self, table: str, query: Optional[ListQuery] = None) -> list[dict]:
        ...

    def count(self, table: str, query: Optional[ListQuery] = None) -> int:
        ...

    def update(
        self, table: str, value: Any, values: dict, key: str = "id"
    ) -> Optional[dict]:
        ...

    def delete(self, table: str, value: Any, key: str = "id") -> int:
        ...

    def increment(
        self, table: str, row_id: str, column: str = "views", amount: int = 1
    ) -> None:
        ...


def _table(name: str) -> Table:
    try:
        return Base.metadata.tables[name]
    except KeyError:
        raise ValueError(f"Unknown table: {name}") from None


def _check_columns(table: Table, columns: Iterable[str]) -> None:
    unknown = [c for c in columns if c not in table.c]
    if unknown:
        raise ValueError(f"Unknown column(s) for {table.name}: {', '.join(unknown)}")


def not_null_columns(table: str) -> set[str]:
    """Columns of ``table`` that can never hold NULL once a row exists."""
    return {
        column.name
        for column in _table(table).columns
        if not column.nullable and not column.primary_key
    }


def _is_many(value: Any) -> bool:
    return isinstance(value, (list, tuple, set, frozenset))


def _column_default(column) -> Any:
    default = column.default
    if default is None:
        return None
    if default.is_callable:
        return default.arg(None)
    return default.arg


class InMemoryDbClient:
    """Simple in-memory database for development and tests."""

    def __init__(self):
        self.tables: Dict[str, Dict[str, dict]] = {
            name: {} for name in Base.metadata.tables
        }

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        for rows in self.tables.values():
            rows.clear()

    def _rows(self, table: str) -> Dict[str, dict]:
        _table(table)
        return self.tables[table]

    def insert(self, table: str, values: dict) -> dict:
        schema = _table(table)
        _check_columns(schema, values)
        now = utcnow()
        row = {column.name: _column_default(column) for column in schema.columns}
        row.update(copy.deepcopy(values))
        row["id"] = row.get("id") or new_id()
        row["created_at"] = row.get("created_at") or now
        row["updated_at"] = now
        self.tables[table][row["id"]] = row
        return copy.deepcopy(row)

    def _find(self, table: str, value: Any, key: str) -> list[dict]:
        rows = self._rows(table)
        if key == "id":
            row = rows.get(value)
            return [row] if row else []
        return [row for row in rows.values() if row.get(key) == value]

    def get(self, table: str, value: Any, key: str = "id") -> Optional[dict]:
        found = self._find(table, value, key)
        return copy.deepcopy(found[0]) if found else None

    def _matches(self, row: dict, query: ListQuery) -> bool:
        for column, expected in query.filters.items():
            if _is_many(expected):
                if row.get(column) not in expected:
                    return False
            elif row.get(column) != expected:
                return False
        for column, (low, high) in query.ranges.items():
            current = row.get(column)
            if current is None:
                return False
            if low is not None and current < low:
                return False
            if high is not None and current > high:
                return False
        if query.search:
            needle = query.search.lower()
            if not any(
                needle in str(row.get(column) or "").lower()
                for column in query.search_columns
            ):
                return False
        return True

    def _select(self, table: str, query: Optional[ListQuery]) -> list[dict]:
        query = query or ListQuery()
        schema = _table(table)
        _check_columns(schema, list(query.filters) + list(query.ranges))
        _check_columns(schema, query.search_columns)
        rows = [row for row in self._rows(table).values() if self._matches(row, query)]
        if query.order_by:
            _check_columns(schema, [query.order_by])
            present = [r for r in rows if r.get(query.order_by) is not None]
            missing = [r for r in rows if r.get(query.order_by) is None]
            present.sort(key=lambda r: r[query.order_by], reverse=query.descending)
            # NULLS LAST, as the SQL client orders
            rows = present + missing
        return rows

    def list(self, table: str, query: Optional[ListQuery] = None) -> list[dict]:
        rows = self._select(table, query)
        offset = query.offset if query else 0
        limit = query.limit if query else None
        end = offset + limit if limit is not None else None
        return [copy.deepcopy(row) for row in rows[offset:end]]

    def count(self, table: str, query: Optional[ListQuery] = None) -> int:
        return len(self._select(table, query))

    def update(
        self, table: str, value: Any, values: dict, key: str = "id"
    ) -> Optional[dict]:
        _check_columns(_table(table), values)
        found = self._find(table, value, key)
        if not found:
            return None
        row = found[0]
        row.update(copy.deepcopy(values))
        row["updated_at"] = utcnow()
        return copy.deepcopy(row)

    def delete(self, table: str, value: Any, key: str = "id") -> int:
        rows = self._rows(table)
        doomed = [row["id"] for row in self._find(table, value, key)]
        for row_id in doomed:
            del rows[row_id]
        return len(doomed)

    def increment(
        self, table: str, row_id: str, column: str = "views", amount: int = 1
    ) -> None:
        row = self._rows(table).get(row_id)
        if row:
            row[column] = (row.get(column) or 0) + amount


class PostgresDbClient:
    """
    SQLAlchemy-backed implementation. Accepts any SQLAlchemy URL (e.g., Postgres or SQLite for tests).
    """

    def __init__(self, database_url: str):
        if not database_url:
            raise ValueError("DATABASE_URL is required for PostgresDbClient")
        self.engine = create_engine(
            database_url,
            future=True,
            pool_pre_ping=True,
            pool_recycle=1800,
        )
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False, future=True
        )
        Base.metadata.create_all(self.engine)

    def _where(self, table: Table, query: ListQuery) -> list:
        _check_columns(table, list(query.filters) + list(query.ranges))
        _check_columns(table, query.search_columns)
        clauses = []
        for column, expected in query.filters.items():
            if _is_many(expected):
                clauses.append(table.c[column].in_(list(expected)))
            elif expected is None:
                clauses.append(table.c[column].is_(None))
            else:
                clauses.append(table.c[column] == expected)
        for column, (low, high) in query.ranges.items():
            if low is not None:
                clauses.append(table.c[column] >= low)
            if high is not None:
                clauses.append(table.c[column] <= high)
        if query.search and query.search_columns:
            clauses.append(
                or_(
                    *[
                        table.c[column].icontains(query.search, autoescape=True)
                        for column in query.search_columns
                    ]
                )
            )
        return clauses

    def insert(self, table: str, values: dict) -> dict:
        schema = _table(table)
        _check_columns(schema, values)
        now = utcnow()
        row = dict(values)
        row["id"] = row.get("id") or new_id()
        row["created_at"] = row.get("created_at") or now
        row["updated_at"] = now
        with self.Session() as session:
            session.execute(insert(schema).values(**row))
            session.commit()
        return self.get(table, row["id"])

    def get(self, table: str, value: Any, key: str = "id") -> Optional[dict]:
        schema = _table(table)
        _check_columns(schema, [key])
        with self.Session() as session:
            result = session.execute(
                select(schema).where(schema.c[key] == value).limit(1)
            ).first()
            return dict(result._mapping) if result else None

    def list(self, table: str, query: Optional[ListQuery] = None) -> list[dict]:
        query = query or ListQuery()
        schema = _table(table)
        stmt = select(schema).where(*self._where(schema, query))
        if query.order_by:
            _check_columns(schema, [query.order_by])
            column = schema.c[query.order_by]
            ordering = column.desc() if query.descending else column.asc()
            stmt = stmt.order_by(ordering.nulls_last())
        if query.offset:
            stmt = stmt.offset(query.offset)
        if query.limit is not None:
            stmt = stmt.limit(query.limit)
        with self.Session() as session:
            return [dict(row._mapping) for row in session.execute(stmt)]

    def count(self, table: str, query: Optional[ListQuery] = None) -> int:
        query = query or ListQuery()
        schema = _table(table)
        stmt = select(func.count()).select_from(schema).where(*self._where(schema, query))
        with self.Session() as session:
            return session.execute(stmt).scalar_one()

    def update(
        self, table: str, value: Any, values: dict, key: str = "id"
    ) -> Optional[dict]:
        schema = _table(table)
        _check_columns(schema, list(values) + [key])
        with self.Session() as session:
            result = session.execute(
                update(schema)
                .where(schema.c[key] == value)
                .values(**values, updated_at=utcnow())
            )
            session.commit()
            if not result.rowcount:
                return None
        return self.get(table, values.get(key, value), key=key)

    def delete(self, table: str, value: Any, key: str = "id") -> int:
        schema = _table(table)
        _check_columns(schema, [key])
        with self.Session() as session:
            result = session.execute(delete(schema).where(schema.c[key] == value))
            session.commit()
            return result.rowcount or 0

    def increment(
        self, table: str, row_id: str, column: str = "views", amount: int = 1
    ) -> None:
        schema = _table(table)
        _check_columns(schema, [column])
        with self.Session() as session:
            session.execute(
                update(schema)
                .where(schema.c.id == row_id)
                .values({column: func.coalesce(schema.c[column], 0) + amount})
            )
            session.commit()
