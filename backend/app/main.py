"""
main.py — FastAPI Application Entrypoint

Purpose:
- Initialize application services (logging, config, database handle, security).
- Register API routers and exception handlers.
- Define root-level health/status endpoint.
- Provide `app` object used by ASGI server (uvicorn / hypercorn).

This file should stay clean — no business logic here.

Run:
    uvicorn app.main:app --reload            (from backend/)
"""

import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from app.api.errors import register_exception_handlers
from app.api.v1 import auth, boards, columns, tasks
from app.core.config import Settings, settings as default_settings
from app.core.database import Database
from app.core.logging import configure_logging, get_logger
from app.core.security import SecurityContext

logger = get_logger(__name__)


def create_app(settings: Optional[Settings] = None, database: Optional[Database] = None) -> FastAPI:
    """
    Build a fully wired application.

    Parameters:
        settings: configuration; defaults to the environment-loaded singleton.
        database: explicit store handle; built from `settings` when omitted.
    """
    settings = settings or default_settings
    configure_logging(settings.LOG_LEVEL, sql_echo=settings.SQL_ECHO)

    database = database or Database.from_settings(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        database.create_schema()
        yield
        database.dispose()

    # -------------------------------------------------------------------------
    # App Initialization
    # -------------------------------------------------------------------------

    app = FastAPI(
        title="Task Board Backend",
        description="Boards, columns, tasks and comments shared between board members",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.db = database
    app.state.security = SecurityContext(settings)

    # -------------------------------------------------------------------------
    # CORS (useful for local frontend development)
    # -------------------------------------------------------------------------

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ALLOW_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["ETag"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info("%s %s -> %d (%.1f ms)", request.method, request.url.path, response.status_code, elapsed_ms)
        return response

    register_exception_handlers(app)

    # -------------------------------------------------------------------------
    # Router Registration
    # -------------------------------------------------------------------------

    app.include_router(auth.router, prefix="/api")
    app.include_router(boards.router, prefix="/api")
    app.include_router(columns.router, prefix="/api")
    app.include_router(tasks.router, prefix="/api")

    # -------------------------------------------------------------------------
    # Health Check
    # -------------------------------------------------------------------------

    @app.get("/")
    def root():
        return {"status": "ok", "message": "API is running"}

    return app


app = create_app()
