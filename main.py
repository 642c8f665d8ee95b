# ============================================================================
# PROBE LAB - MAIN APPLICATION
# ============================================================================
# EPOCH: 1 - HEALTH PROBES & RESOURCE LIMITS
# STATUS: Core - FastAPI application entry point
# PURPOSE: Explicit wiring of indicators, state machine and simulator
# CREATED: 19 OCT 2026
# ============================================================================
"""
Probe Lab Main Application

FastAPI application that:
1. Builds the health indicator registry and aggregator
2. Owns the liveness/readiness state machine polled by the orchestrator
3. Exposes the resource simulator for limit / QoS / OOM-kill testing

Everything is constructed here and stored on app.state, where the routers
read it through FastAPI dependencies; nothing registers itself at import
time. Each create_app() call gets its own components.

Usage:
    uvicorn main:app --host 0.0.0.0 --port 8080
"""

import os
import uuid
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from __version__ import __version__, BUILD_DATE, EPOCH, CODENAME

from core.config import Defaults, get_defaults
from core.errors import InvalidParameterError
from health import IndicatorRegistry, HealthAggregator, health_router
from health.checks import (
    ProcessIndicator,
    DatabaseConnectivityIndicator,
    ExternalServiceIndicator,
)
from availability import AvailabilityStateMachine
from resources import ResourceSimulator
from api.routes import router

# Configure logging using our structured logging system
from core.logging import ComponentType, configure_logging, get_logger, log_context

configure_logging(
    level=os.environ.get("LOG_LEVEL", "INFO"),
    json_output=os.environ.get("LOG_FORMAT", "").lower() == "json",
)
logger = get_logger(__name__, ComponentType.API)

REQUEST_ID_HEADER = "X-Request-ID"


def build_registry(defaults: Defaults) -> IndicatorRegistry:
    """
    Register the fixed indicator set.

    Raises DuplicateIndicatorNameError on a wiring mistake, which aborts
    start-up.
    """
    config = defaults.indicators
    registry = IndicatorRegistry()
    registry.register(ProcessIndicator())
    registry.register(DatabaseConnectivityIndicator(
        failure_probability=config.failure_probability,
    ))
    registry.register(ExternalServiceIndicator(
        latency_seconds=config.external_latency_seconds,
        available=config.external_available,
    ))
    registry.freeze()
    return registry


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    All state is in memory; shutdown has nothing to flush.
    """
    logger.info(f"Starting {CODENAME} v{__version__} (Epoch {EPOCH}, Build {BUILD_DATE})")
    logger.info(
        f"Health indicators: {', '.join(app.state.registry.names())}"
    )

    yield

    logger.info(f"{CODENAME} stopped")


def create_app(
    defaults: Optional[Defaults] = None,
    registry: Optional[IndicatorRegistry] = None,
) -> FastAPI:
    """Build the application and wire every component explicitly."""
    defaults = defaults or get_defaults()
    registry = registry or build_registry(defaults)

    aggregator = HealthAggregator(
        registry=registry,
        check_timeout=defaults.indicators.check_timeout_seconds,
        overall_timeout=defaults.indicators.overall_timeout_seconds,
        max_parallel=defaults.indicators.max_parallel,
    )
    availability = AvailabilityStateMachine(
        history_size=defaults.availability.history_size,
        max_slow_start_seconds=defaults.availability.max_slow_start_seconds,
    )
    simulator = ResourceSimulator(
        unit_bytes=defaults.resources.unit_bytes,
        max_cpu_burn_seconds=defaults.resources.max_cpu_burn_seconds,
    )

    app = FastAPI(
        title=CODENAME,
        description="Composite health, availability probes and resource simulation",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.defaults = defaults
    app.state.registry = registry
    app.state.aggregator = aggregator
    app.state.availability = availability
    app.state.simulator = simulator

    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next):
        """Tag every log line of a request with its X-Request-ID."""
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:12]
        with log_context(request_id=request_id):
            response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response

    @app.exception_handler(InvalidParameterError)
    async def invalid_parameter_handler(request: Request, exc: InvalidParameterError):
        """Out-of-range request parameters become a structured 400."""
        logger.info(f"Rejected request: {exc.message}")
        return JSONResponse(status_code=400, content=exc.to_dict())

    # Probe routes (no prefix - /livez, /readyz, /health)
    app.include_router(health_router)

    # Control and telemetry routes (/simulate/*, /resources, /status, /info)
    app.include_router(router)

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "service": CODENAME,
            "version": __version__,
            "epoch": EPOCH,
            "build_date": BUILD_DATE,
            "status": "running",
            "docs": "/docs",
        }

    return app


app = create_app()


# ============================================================================
# MAIN ENTRY POINT
# ============================================================================

if __name__ == "__main__":
    import uvicorn

    server = get_defaults().server

    # uvicorn handles SIGTERM/SIGINT and runs the lifespan shutdown
    uvicorn.run(
        "main:app",
        host=server.host,
        port=server.port,
        reload=server.reload,
    )
