"""FastAPI application for the grievance form backend.

Serves the wizard definition to the rendering layer and hosts the
server-side submission stub.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from grievance import __version__
from grievance.core.config import Settings
from grievance.intake.definition import load_wizard
from grievance.intake.gateway import MockSubmissionGateway, SubmissionGateway
from grievance.intake.scheduler import Clock, SystemClock
from grievance.intake.validation import ValidationEngine
from grievance.web.intake_router import router as intake_router


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    service: str
    version: str = __version__


def create_app(
    settings: Settings | None = None,
    gateway: SubmissionGateway | None = None,
    clock: Clock | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Uses the factory pattern so tests can create isolated app instances
    with mock dependencies.

    Args:
        settings: Application settings. Defaults to Settings().
        gateway: Optional pre-built submission gateway.
        clock: Optional clock for date rules.

    Returns:
        A configured FastAPI instance.
    """
    if settings is None:
        settings = Settings()

    logging.getLogger("grievance").setLevel(settings.log_level.upper())

    app = FastAPI(
        title="Grievance Portal",
        description="Multi-step grievance submission backend",
        version=__version__,
        debug=settings.debug,
    )

    # CORS for development
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Dependencies
    clock = clock or SystemClock()
    wizard_definition = load_wizard(settings.intake.wizard_path)
    validation_engine = ValidationEngine()
    if gateway is None:
        gateway = MockSubmissionGateway(
            wizard_definition,
            validation_engine,
            latency_seconds=settings.gateway.latency_seconds,
            clock=clock,
        )

    app.state.settings = settings
    app.state.clock = clock
    app.state.wizard_definition = wizard_definition
    app.state.validation_engine = validation_engine
    app.state.gateway = gateway

    app.include_router(intake_router)

    @app.get("/health")
    async def health() -> HealthResponse:
        return HealthResponse(status="ok", service="grievance")

    return app
