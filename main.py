from __future__ import annotations

import time as _t
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import get_settings
from db import init_db
from errors import register_exception_handlers
from logging_config import setup_logging
from middleware import RequestLogMiddleware
from routers import (
    auth as auth_router,
    events as events_router,
    saved as saved_router,
    users as users_router,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


def create_app() -> FastAPI:
    settings = get_settings()
    setup_logging(settings.log_level)

    app = FastAPI(
        title=settings.project_name,
        version=settings.api_version,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLogMiddleware)

    register_exception_handlers(app)

    # Routers (saved before users: /api/users/{user_id} would shadow it)
    app.include_router(auth_router.router)
    app.include_router(saved_router.router)
    app.include_router(users_router.router)
    app.include_router(events_router.router)

    @app.get("/ping")
    def ping():
        return {"success": True, "data": {"ts": _t.time()}}

    @app.get("/health")
    def health():
        return {"success": True, "data": {"status": "ok"}}

    @app.get("/")
    def root():
        return {"success": True, "data": {"service": settings.project_name}}

    return app


app = create_app()
