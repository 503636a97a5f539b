from __future__ import annotations

from fastapi.responses import JSONResponse

from ..services.utils import API_INSUFFICIENT_PARAMS, API_RESPONSE_SERVER_ERROR


def respond(result):
    """Give the generic failure bodies their HTTP status; anything else goes out as 200."""
    if result is API_INSUFFICIENT_PARAMS:
        return JSONResponse(status_code=400, content=result)
    if result is API_RESPONSE_SERVER_ERROR:
        return JSONResponse(status_code=500, content=result)
    return result
