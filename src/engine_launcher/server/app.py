"""FastAPI app factory.

Endpoints are thin wrappers over one :class:`LauncherSession`.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from engine_launcher import __version__
from engine_launcher.launcher.config import LauncherSettings
from engine_launcher.launcher.session import LauncherSession
from engine_launcher.server.router import router

logger = logging.getLogger(__name__)


def create_app(
    settings: LauncherSettings | None = None,
    session: LauncherSession | None = None,
) -> FastAPI:
    settings = settings or LauncherSettings()
    session = session or LauncherSession.from_settings(settings)

    app = FastAPI(
        title="Engine Launcher",
        version=__version__,
        description="REST API over the engine-launcher session.",
        openapi_url="/api/openapi.json",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.state.settings = settings
    app.state.session = session

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.parsed_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router, prefix="/api")

    logger.info(
        "App created",
        extra={
            "engines": len(session.catalog.engines),
            "projects": len(session.catalog.projects),
        },
    )
    return app
