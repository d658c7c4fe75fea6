"""
Tag Repository Module

All reads and writes of the tags table go through here:
- Filtered, sorted, paged queries (see repositories.query)
- Column-scoped single-tag updates, inside the caller's transaction when one is active
- Title lookups for short-link resolution
- Inserts for seeding
"""

import sqlite3
from typing import Any, List, Optional, Tuple

from database import (
    get_db_connection,
    current_transaction,
    RepositoryError,
    Transaction,
    Tag,
    TAG_COLUMNS,
)
from repositories.query import (
    CompositeFilter,
    Filter,
    PropertyFilter,
    Query,
)
from utils.logging_config import get_logger

logger = get_logger('TagRepository')

_WRITABLE_COLUMNS = tuple(col for col in TAG_COLUMNS if col != 'id')


# ============================================================================
# SQL BUILDING
# ============================================================================

def _check_column(key: str) -> str:
    if key not in TAG_COLUMNS:
        raise RepositoryError(f"Unknown tag property: {key}")
    return key


def _build_where(query_filter: Filter, params: List[Any]) -> str:
    """Render a filter tree as SQL, appending bind values to params."""
    if isinstance(query_filter, PropertyFilter):
        column = _check_column(query_filter.key)
        params.append(query_filter.value)
        return f"{column} {query_filter.operator.value} ?"

    if isinstance(query_filter, CompositeFilter):
        parts = [_build_where(sub, params) for sub in query_filter.sub_filters]
        joiner = f" {query_filter.operator.value} "
        return "(" + joiner.join(parts) + ")"

    raise RepositoryError(f"Unsupported filter: {query_filter!r}")


def build_select(query: Query) -> Tuple[str, List[Any]]:
    """Build the SELECT statement and its parameters for a query."""
    params: List[Any] = []
    sql = f"SELECT {', '.join(TAG_COLUMNS)} FROM tags"

    if query.filter is not None:
        sql += " WHERE " + _build_where(query.filter, params)

    if query.sorts:
        order = ", ".join(f"{_check_column(key)} {direction.value}" for key, direction in query.sorts)
        sql += f" ORDER BY {order}"

    if query.page_size is not None:
        # page_count caps how many pages are read from current_page_num on
        pages = query.page_count if query.page_count else 1
        sql += " LIMIT ? OFFSET ?"
        params.append(query.page_size * pages)
        params.append(query.page_size * (query.current_page_num - 1))
    elif query.current_page_num > 1:
        # Unbounded page size puts every match on page 1
        sql += " LIMIT 0"

    return sql, params


# ============================================================================
# REPOSITORY
# ============================================================================

class TagRepository:
    """sqlite-backed access to the tags table."""

    def query(self, query: Query) -> List[Tag]:
        """Run a query and return the matching tags in store order."""
        sql, params = build_select(query)
        try:
            transaction = current_transaction()
            if transaction is not None:
                rows = transaction.connection.execute(sql, params).fetchall()
            else:
                with get_db_connection() as conn:
                    rows = conn.execute(sql, params).fetchall()
        except sqlite3.Error as e:
            raise RepositoryError(f"Query failed: {e}") from e

        return [Tag.from_row(row) for row in rows]

    def get_by_title(self, title: str) -> Optional[Tag]:
        """Case-insensitive title lookup. Returns the oldest match."""
        try:
            with get_db_connection() as conn:
                row = conn.execute(
                    f"SELECT {', '.join(TAG_COLUMNS)} FROM tags "
                    "WHERE title = ? COLLATE NOCASE ORDER BY id ASC LIMIT 1",
                    (title,)
                ).fetchone()
        except sqlite3.Error as e:
            raise RepositoryError(f"Get tag by title [{title}] failed: {e}") from e
        return Tag.from_row(row) if row else None

    def add(self, tag: Tag) -> int:
        """Insert a tag and return its new ID."""
        row = tag.to_row()
        columns = ', '.join(_WRITABLE_COLUMNS)
        placeholders = ', '.join('?' for _ in _WRITABLE_COLUMNS)
        values = [row[col] for col in _WRITABLE_COLUMNS]
        sql = f"INSERT INTO tags ({columns}) VALUES ({placeholders})"
        return self._write(sql, values, f"Add tag [{tag.title}]").lastrowid

    def update(self, tag_id: int, **columns):
        """
        Write only the given columns of the row with tag_id.

        Other columns keep whatever the store holds now, so a write back
        from an older snapshot cannot undo concurrent changes. Joins the
        transaction active on this thread when there is one, otherwise the
        update commits on its own.

        Usage:
            repository.update(tag.id, random_double=random.random())
        """
        if not columns:
            raise RepositoryError(f"Update tag {tag_id} failed: no columns given")
        names = [_check_column(name) for name in columns]
        if 'id' in names:
            raise RepositoryError(f"Update tag {tag_id} failed: id is read-only")

        assignments = ', '.join(f"{name} = ?" for name in names)
        values = list(columns.values()) + [tag_id]
        cursor = self._write(f"UPDATE tags SET {assignments} WHERE id = ?", values,
                             f"Update tag {tag_id}")
        if cursor.rowcount == 0:
            raise RepositoryError(f"Update tag {tag_id} failed: no such tag")

    def count(self) -> int:
        """Number of stored tags, whatever their status."""
        try:
            with get_db_connection() as conn:
                return conn.execute("SELECT COUNT(*) FROM tags").fetchone()[0]
        except sqlite3.Error as e:
            raise RepositoryError(f"Count tags failed: {e}") from e

    def begin_transaction(self) -> Transaction:
        return Transaction().begin()

    def _write(self, sql: str, params: List[Any], action: str) -> sqlite3.Cursor:
        try:
            transaction = current_transaction()
            if transaction is not None:
                return transaction.connection.execute(sql, params)
            with get_db_connection() as conn:
                return conn.execute(sql, params)
        except sqlite3.Error as e:
            raise RepositoryError(f"{action} failed: {e}") from e
