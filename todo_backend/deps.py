from __future__ import annotations

# todo_backend/deps.py
# FastAPI dependency providers; everything hangs off the process-wide pool.
import logging

from .db import get_pool
from .repository.executor import QueryExecutor
from .repository.transaction import TransactionExecutor
from .services.todo_svc import TodoService


def get_query_executor() -> QueryExecutor:
    return QueryExecutor(get_pool(), logging.getLogger("todo_backend.sql"))


def get_audit_executor() -> QueryExecutor:
    # audit rows are not echoed to the statement log
    return QueryExecutor(get_pool(), log_queries=False)


def get_todo_service() -> TodoService:
    pool = get_pool()
    sql_logger = logging.getLogger("todo_backend.sql")
    return TodoService(
        QueryExecutor(pool, sql_logger),
        TransactionExecutor(pool, sql_logger),
        logging.getLogger("todo_backend.todo"),
    )
