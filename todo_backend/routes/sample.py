from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body

from ..services.sample_svc import get_message, get_random
from .responses import respond

router = APIRouter()


@router.post("/api/random")
def api_random(body: Any = Body(default=None)):
    return respond(get_random(body))


@router.post("/api/message")
def api_message(body: Any = Body(default=None)):
    return respond(get_message(body))
