from __future__ import annotations

import logging
import re
import sqlite3
from typing import Any, Mapping, Sequence

from ..db import ConnectionPool
from ..errors import ConnectionLostError, StatementError
from ..services.utils import strip_string

Params = Sequence[Any] | Mapping[str, Any] | None

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

module_logger = logging.getLogger(__name__)


def build_insert(table: str, fields: Mapping[str, Any]) -> tuple[str, tuple]:
    """INSERT statement for a flat column->value mapping."""
    names = [table, *fields.keys()]
    bad = [n for n in names if not isinstance(n, str) or not _IDENTIFIER.match(n)]
    if bad:
        raise StatementError(f"invalid identifier(s): {bad}")
    if not fields:
        return f"INSERT INTO {table} DEFAULT VALUES", ()
    cols = ", ".join(fields.keys())
    placeholders = ", ".join(["?"] * len(fields))
    return f"INSERT INTO {table} ({cols}) VALUES ({placeholders})", tuple(fields.values())


def run_statement(
    conn: sqlite3.Connection,
    query: str,
    params: Params,
    logger: logging.Logger,
    log_queries: bool = True,
) -> sqlite3.Cursor:
    if log_queries:
        logger.info(strip_string(query))
    try:
        return conn.execute(query, params if params is not None else ())
    except sqlite3.ProgrammingError as e:
        if "closed" in str(e).lower():
            raise ConnectionLostError(str(e)) from e
        raise StatementError(str(e)) from e
    except sqlite3.Error as e:
        raise StatementError(str(e)) from e


def rows_or_false(cur: sqlite3.Cursor) -> list[dict] | bool:
    rows = cur.fetchall()
    if not rows:
        return False
    return [dict(r) for r in rows]


def inserted_id_or_false(cur: sqlite3.Cursor) -> int | bool:
    if not cur.lastrowid:
        return False
    return int(cur.lastrowid)


def affected(cur: sqlite3.Cursor) -> bool:
    return cur.rowcount is not None and cur.rowcount > 0


class QueryExecutor:
    """
    One statement per lease: every call takes a connection from the pool,
    runs a single parameterised statement and destroys the connection again,
    whether the statement succeeded or not.

    Empty result sets and zero affected rows come back as ``False``; lease
    and statement failures are raised (``StoreConnectionError`` /
    ``StatementError``).
    """

    def __init__(self, pool: ConnectionPool, logger: logging.Logger | None = None, log_queries: bool = True):
        self.pool = pool
        self.logger = logger or module_logger
        self.log_queries = log_queries

    def _execute(self, query: str, params: Params, collect):
        with self.pool.connection() as conn:
            cur = run_statement(conn, query, params, self.logger, self.log_queries)
            return collect(cur)

    def select_many(self, query: str, params: Params = None) -> list[dict] | bool:
        return self._execute(query, params, rows_or_false)

    # kept under the short name as well; most callers read a list of rows
    select = select_many

    def select_one(self, query: str, params: Params = None) -> dict | bool:
        rows = self.select_many(query, params)
        return rows[0] if rows else False

    def insert(self, table: str, fields: Mapping[str, Any]) -> int | bool:
        sql, values = build_insert(table, fields)
        return self._execute(sql, values, inserted_id_or_false)

    def update(self, query: str, params: Params = None) -> bool:
        return self._execute(query, params, affected)

    def delete(self, query: str, params: Params = None) -> bool:
        return self._execute(query, params, affected)
