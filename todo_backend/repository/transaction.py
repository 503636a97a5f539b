from __future__ import annotations

import logging
import sqlite3
from typing import Any, Mapping

from ..db import ConnectionPool
from ..errors import StoreConnectionError
from .executor import (
    Params,
    affected,
    build_insert,
    inserted_id_or_false,
    module_logger,
    rows_or_false,
    run_statement,
)


class TransactionExecutor:
    """
    Several statements on one held connection.

        tx = TransactionExecutor(pool)
        conn = tx.begin_transaction()
        try:
            new_id = tx.insert(conn, "todos", {"name": "a"})
            tx.update(conn, "UPDATE todos SET status=? WHERE id=?", (1, new_id))
            tx.commit(conn)
        except Exception:
            tx.rollback(conn)
            raise

    The connection stays leased between ``begin_transaction`` and
    ``commit``/``rollback``; both of those destroy it.
    """

    def __init__(self, pool: ConnectionPool, logger: logging.Logger | None = None, log_queries: bool = True):
        self.pool = pool
        self.logger = logger or module_logger
        self.log_queries = log_queries

    def begin_transaction(self) -> sqlite3.Connection:
        conn = self.pool.get_connection()
        try:
            run_statement(conn, "BEGIN", None, self.logger, self.log_queries)
        except Exception:
            self.pool.release(conn)
            raise
        return conn

    def _check(self, conn: sqlite3.Connection | None, where: str):
        if conn is None:
            raise StoreConnectionError(f"Connection not found inside {where}.")

    def select(self, conn: sqlite3.Connection, query: str, params: Params = None) -> list[dict] | bool:
        self._check(conn, "select")
        cur = run_statement(conn, query, params, self.logger, self.log_queries)
        return rows_or_false(cur)

    def select_one(self, conn: sqlite3.Connection, query: str, params: Params = None) -> dict | bool:
        rows = self.select(conn, query, params)
        return rows[0] if rows else False

    def insert(self, conn: sqlite3.Connection, table: str, fields: Mapping[str, Any]) -> int | bool:
        self._check(conn, "insert")
        sql, values = build_insert(table, fields)
        cur = run_statement(conn, sql, values, self.logger, self.log_queries)
        return inserted_id_or_false(cur)

    def update(self, conn: sqlite3.Connection, query: str, params: Params = None) -> bool:
        self._check(conn, "update")
        cur = run_statement(conn, query, params, self.logger, self.log_queries)
        return affected(cur)

    def delete(self, conn: sqlite3.Connection, query: str, params: Params = None) -> bool:
        self._check(conn, "delete")
        cur = run_statement(conn, query, params, self.logger, self.log_queries)
        return affected(cur)

    def commit(self, conn: sqlite3.Connection | None) -> bool:
        self._check(conn, "commit")
        # on a failed COMMIT the connection stays leased so the caller can roll back
        run_statement(conn, "COMMIT", None, self.logger, self.log_queries)
        self.pool.release(conn)
        return True

    def rollback(self, conn: sqlite3.Connection | None) -> bool:
        if conn is None or not self.pool.is_leased(conn):
            return False
        try:
            if conn.in_transaction:
                run_statement(conn, "ROLLBACK", None, self.logger, self.log_queries)
        finally:
            self.pool.release(conn)
        return True
