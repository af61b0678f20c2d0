#!/usr/bin/env python3
"""
aquamon dashboard API

Wraps a PollController in a FastAPI app: the controller polls for as long as
the app is up, and the routes expose its state and the operator commands.
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from .commands import CommandIssuer
from .config import DashboardConfig
from .controller import PollController
from .routes import create_dashboard_routes

logger = logging.getLogger(__name__)


def create_app(controller: PollController, commands: CommandIssuer) -> FastAPI:
    """Create the dashboard FastAPI app."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        controller.start()
        try:
            yield
        finally:
            controller.stop()

    app = FastAPI(title="aquamon", lifespan=lifespan)
    app.include_router(create_dashboard_routes(controller, commands))
    return app


def serve(app: FastAPI, config: DashboardConfig) -> None:
    """Run the dashboard API under uvicorn (blocks until shutdown)."""
    logger.info("dashboard API listening on %s:%s", config.host, config.port)
    uvicorn.run(app, host=config.host, port=config.port, reload=False, access_log=False)
