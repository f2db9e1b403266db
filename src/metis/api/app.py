from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from metis.api.routes import router as api_router
from metis.config import get_settings
from metis.core.tracker import Tracker, build_tracker
from metis.logging_config import configure_logging

logger = logging.getLogger(__name__)


def create_app(tracker: Tracker | None = None) -> FastAPI:
    """Build the HTTP app around one shared tracker.

    Passing ``tracker`` skips the configured backend, which tests use to run
    against an in-memory store.
    """
    settings = get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        configure_logging()
        logger.info(
            "%s API ready (env=%s, storage=%s)",
            settings.app_name,
            settings.app_env,
            "attached" if app.state.tracker.storage.available else "detached",
        )
        yield

    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.tracker = tracker or build_tracker(settings)

    @app.get("/health")
    def health() -> JSONResponse:
        return JSONResponse({"status": "ok", "storage": app.state.tracker.storage.available})

    app.include_router(api_router)
    return app
