from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends
from pydantic import BaseModel

from ..deps import get_audit_executor, get_todo_service
from ..logs import OperationLogContext
from ..repository.executor import QueryExecutor
from ..services.todo_svc import TodoService
from ..services.utils import API_INSUFFICIENT_PARAMS, API_RESPONSE_SERVER_ERROR
from .responses import respond

router = APIRouter()

logger = logging.getLogger(__name__)

MUTATING_OPS = {"ADD": "TODO_ADD", "DEL": "TODO_DELETE", "SUP": "TODO_COMPLETE"}


class TodoImport(BaseModel):
    names: list[Any]


def _log_outcome(log: OperationLogContext, result):
    # the request already ran; a failed audit write must not change its response
    try:
        if result is API_INSUFFICIENT_PARAMS:
            log.write("INVALID")
        elif result is API_RESPONSE_SERVER_ERROR:
            log.write("ERROR", "server_error")
        else:
            log.set_after(result)
            log.write("OK")
    except Exception:
        logger.exception("operation log write failed for %s (request %s)", log.action, log.request_id)


@router.post("/api/todo")
def api_todo(
    body: Any = Body(default=None),
    svc: TodoService = Depends(get_todo_service),
    audit: QueryExecutor = Depends(get_audit_executor),
):
    result = svc.handle(body)
    op = body.get("op") if isinstance(body, dict) else None
    if op in MUTATING_OPS:
        log = OperationLogContext(MUTATING_OPS[op], audit)
        log.set_payload(body)
        if isinstance(result, dict) and isinstance(result.get("todo"), dict):
            log.set_entity("todo", result["todo"].get("id"))
        elif op != "ADD":
            log.set_entity("todo", body.get("id"))
        _log_outcome(log, result)
    return respond(result)


@router.post("/api/todo/import")
def api_todo_import(
    body: TodoImport,
    svc: TodoService = Depends(get_todo_service),
    audit: QueryExecutor = Depends(get_audit_executor),
):
    log = OperationLogContext("TODO_IMPORT", audit)
    log.set_payload({"count": len(body.names)})
    result = svc.import_todos(body.names)
    _log_outcome(log, result)
    return respond(result)
