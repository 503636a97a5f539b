from __future__ import annotations

# todo_backend/services/todo_svc.py
import logging
from typing import Any

from ..errors import ValidationError
from ..repository import todo_repo
from ..repository.executor import QueryExecutor
from ..repository.transaction import TransactionExecutor
from .utils import API_INSUFFICIENT_PARAMS, API_RESPONSE_SERVER_ERROR


def _is_name(v: Any) -> bool:
    return isinstance(v, str) and bool(v.strip())


def _is_id(v: Any) -> bool:
    # bool is an int subclass; True must not pass as id 1
    return isinstance(v, int) and not isinstance(v, bool) and v > 0


def validate_request(req: Any) -> bool:
    """Pure check of a todo request; never touches the store."""
    if not isinstance(req, dict):
        return False
    op = req.get("op")
    if op == "GET":
        return True
    if op == "ADD":
        return _is_name(req.get("name"))
    if op in ("DEL", "SUP"):
        return _is_id(req.get("id"))
    return False


def ensure_valid_request(req: Any) -> dict:
    if not validate_request(req):
        raise ValidationError("insufficient parameters")
    return req


class TodoService:
    """
    Validates a todo request ``{op, name?, id?}``, runs it and shapes the
    response:

    - GET -> list of todos, or False when there are none
    - ADD -> {"msg": "ADDED", "todo": {...}} | {"msg": "NOT_ADDED"}
    - DEL -> {"msg": "DELETED"} | {"msg": "NOT_DELETED"}
    - SUP -> {"msg": "UPDATED", "todo": {...}} | {"msg": "NOT_UPDATED"}

    Invalid requests get API_INSUFFICIENT_PARAMS without any store call; any
    failure while running the op is logged and answered with
    API_RESPONSE_SERVER_ERROR.
    """

    def __init__(
        self,
        db: QueryExecutor,
        tx: TransactionExecutor | None = None,
        logger: logging.Logger | None = None,
    ):
        self.db = db
        self.tx = tx
        self.logger = logger or logging.getLogger(__name__)

    def handle(self, req: Any):
        try:
            ensure_valid_request(req)
        except ValidationError:
            return API_INSUFFICIENT_PARAMS
        try:
            return self._dispatch(req)
        except Exception:
            self.logger.exception("todo op %s failed", req.get("op"))
            return API_RESPONSE_SERVER_ERROR

    def _dispatch(self, req: dict):
        op = req["op"]
        if op == "GET":
            return todo_repo.list_all(self.db)
        if op == "ADD":
            return self._add(req["name"])
        if op == "DEL":
            return self._delete(req["id"])
        return self._complete(req["id"])

    def _add(self, name: str) -> dict:
        new_id = todo_repo.add(self.db, name)
        if not new_id:
            return {"msg": "NOT_ADDED"}
        todo = todo_repo.get_one(self.db, new_id)
        return {"msg": "ADDED", "todo": todo} if todo else {"msg": "NOT_ADDED"}

    def _delete(self, todo_id: int) -> dict:
        deleted = todo_repo.remove(self.db, todo_id)
        return {"msg": "DELETED"} if deleted else {"msg": "NOT_DELETED"}

    def _complete(self, todo_id: int) -> dict:
        updated = todo_repo.set_status(self.db, todo_id, todo_repo.STATUS_COMPLETE)
        if not updated:
            return {"msg": "NOT_UPDATED"}
        # status update keeps the id, so re-read the row the caller named
        todo = todo_repo.get_one(self.db, todo_id)
        return {"msg": "UPDATED", "todo": todo}

    def import_todos(self, names: Any) -> dict:
        """Insert several todos atomically; either all are created or none."""
        if not isinstance(names, list) or not names or not all(_is_name(n) for n in names):
            return API_INSUFFICIENT_PARAMS
        if self.tx is None:
            self.logger.error("import_todos called without a TransactionExecutor")
            return API_RESPONSE_SERVER_ERROR

        conn = None
        try:
            conn = self.tx.begin_transaction()
            todos = []
            for name in names:
                new_id = todo_repo.add_in_tx(self.tx, conn, name)
                if not new_id:
                    raise RuntimeError(f"insert reported no id for {name!r}")
                todos.append(todo_repo.get_one_in_tx(self.tx, conn, new_id))
            self.tx.commit(conn)
            return {"msg": "IMPORTED", "todos": todos}
        except Exception:
            self.logger.exception("todo import of %d item(s) failed", len(names))
            try:
                self.tx.rollback(conn)
            except Exception:
                self.logger.exception("rollback after failed todo import failed")
            return API_RESPONSE_SERVER_ERROR
