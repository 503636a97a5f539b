from __future__ import annotations

from .executor import QueryExecutor
from .transaction import TransactionExecutor

TABLE = "todos"

DDL = """
CREATE TABLE IF NOT EXISTS todos (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  name TEXT NOT NULL,
  status INTEGER NOT NULL DEFAULT 0
)
"""

STATUS_OPEN = 0
STATUS_COMPLETE = 1


def ensure_schema(db: QueryExecutor):
    db.update(DDL)


def list_all(db: QueryExecutor):
    return db.select_many("SELECT id, name, status FROM todos ORDER BY id")


def get_one(db: QueryExecutor, todo_id: int):
    return db.select_one("SELECT id, name, status FROM todos WHERE id=?", (todo_id,))


def add(db: QueryExecutor, name: str):
    return db.insert(TABLE, {"name": name})


def remove(db: QueryExecutor, todo_id: int) -> bool:
    return db.delete("DELETE FROM todos WHERE id=?", (todo_id,))


def set_status(db: QueryExecutor, todo_id: int, status: int) -> bool:
    return db.update("UPDATE todos SET status=? WHERE id=?", (status, todo_id))


def add_in_tx(tx: TransactionExecutor, conn, name: str):
    return tx.insert(conn, TABLE, {"name": name})


def get_one_in_tx(tx: TransactionExecutor, conn, todo_id: int):
    return tx.select_one(conn, "SELECT id, name, status FROM todos WHERE id=?", (todo_id,))
