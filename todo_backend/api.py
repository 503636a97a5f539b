"""
FastAPI app entry point for the todo sample backend.
Run with `uvicorn todo_backend.api:app`.
"""
from __future__ import annotations

import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .db import close_pool, init_pool
from .deps import get_audit_executor, get_query_executor
from .logging_config import auto_configure
from .logs import ensure_log_schema
from .repository import todo_repo

logger = logging.getLogger(__name__)

app = FastAPI(title="todo-sample-api", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        o.strip()
        for o in os.environ.get("TODO_CORS_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173").split(",")
        if o.strip()
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
def on_startup():
    auto_configure()
    # fails fast on missing config or an unreachable store
    init_pool()
    todo_repo.ensure_schema(get_query_executor())
    ensure_log_schema(get_audit_executor())
    logger.info("todo backend started")


@app.on_event("shutdown")
def on_shutdown():
    close_pool()


# Include routers
from .routes import base as base_routes
from .routes import todo as todo_routes
from .routes import sample as sample_routes
from .routes import logs as logs_routes

app.include_router(base_routes.router)
app.include_router(todo_routes.router)
app.include_router(sample_routes.router)
app.include_router(logs_routes.router)
