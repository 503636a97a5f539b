from __future__ import annotations

# todo_backend/services/sample_svc.py
# Demo endpoints answering in the generic {result, results} shape.
import logging

from .utils import API_RESPONSE_FALSE, API_RESPONSE_SERVER_ERROR, random_characters

logger = logging.getLogger(__name__)

FIRST_API_MESSAGE = "This is your first API"


def _wrap(key: str, producer, req):
    if req is None:
        return API_RESPONSE_FALSE
    try:
        value = producer()
    except Exception:
        logger.exception("sample api %s failed", key)
        return API_RESPONSE_SERVER_ERROR
    if not value:
        return API_RESPONSE_FALSE
    return {"result": True, "results": {key: value}}


def get_random(req: dict | None) -> dict:
    return _wrap("random", random_characters, req)


def get_message(req: dict | None) -> dict:
    return _wrap("message", lambda: FIRST_API_MESSAGE, req)
