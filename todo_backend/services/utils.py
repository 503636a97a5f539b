from __future__ import annotations

# todo_backend/services/utils.py
import random
import re
import uuid

# Generic API responses shared by every endpoint
API_RESPONSE_FALSE = {"result": False}
API_INSUFFICIENT_PARAMS = {"result": False, "message": "INSUFFICIENT_PARAMS"}
API_RESPONSE_SERVER_ERROR = {"result": False, "message": "SERVER_ERROR"}

RANDOM_WISHLIST = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz~!@-#$"

_WS = re.compile(r"\s+")


def strip_string(s: str | None) -> str:
    """Collapse newlines and runs of whitespace into single spaces."""
    if not s:
        return ""
    return _WS.sub(" ", s).strip()


def random_characters(length: int = 20, wishlist: str = RANDOM_WISHLIST) -> str:
    return "".join(random.choice(wishlist) for _ in range(length))


def uniqid() -> str: return str(uuid.uuid4())
