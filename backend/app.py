"""
FastAPI application -- preference-learning API server.

Run locally:
    uvicorn backend.app:app --reload --port 8000

The app owns one PreferenceEngine for its lifetime; pass a ready engine to
create_app() to control storage (tests use an in-memory repository).
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ai_learning.engine import PreferenceEngine
from backend.routes import admin, feedback, score
from domain.errors import CommandError
from scoring.constants import CONSTANTS_VERSION

logger = logging.getLogger(__name__)


def create_app(engine: Optional[PreferenceEngine] = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.engine = engine or PreferenceEngine.from_config()
        logger.info("Preference engine attached (constants %s)", CONSTANTS_VERSION)

        yield

        app.state.engine.close()

    app = FastAPI(
        title="Preference Engine API",
        version="1.0.0",
        description="Online preference learning and explainable scoring for venture sourcing",
        lifespan=lifespan,
    )

    @app.exception_handler(CommandError)
    async def command_error_handler(request: Request, exc: CommandError):
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    app.include_router(feedback.router)
    app.include_router(score.router)
    app.include_router(admin.router)

    @app.get("/health")
    async def health(request: Request):
        """Health check endpoint."""
        current = request.app.state.engine
        return {
            "status": "ok",
            "state_loaded": current.is_loaded,
            "constants_version": CONSTANTS_VERSION,
        }

    return app


app = create_app()
