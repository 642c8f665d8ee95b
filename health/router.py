# ============================================================================
# HEALTH PROBE ROUTER
# ============================================================================
# EPOCH: 1 - HEALTH PROBES & RESOURCE LIMITS
# STATUS: Infrastructure - FastAPI probe endpoints
# PURPOSE: Kubernetes probes and health monitoring endpoints
# CREATED: 19 OCT 2026
# ============================================================================
"""
Health Probe Router

Production probe paths. Control endpoints that change state live in
api/routes.py under /simulate and are never mounted here.

Endpoints:
    GET /livez, /health/liveness   - Liveness probe
                   200 while ALIVE, 503 once BROKEN.
                   Kubernetes restarts the container on repeated failure.

    GET /readyz, /health/readiness - Readiness probe
                   200 while ACCEPTING_TRAFFIC, 503 while REFUSING_TRAFFIC.
                   Kubernetes removes the pod from load balancing.

    GET /health    - Aggregated indicator status plus both availability
                   dimensions. 200 when UP, 503 when DOWN.

    GET /health/{name} - Single indicator status (404 if unknown)

Liveness and readiness come only from the availability state machine;
/health indicator results never change them.
"""

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse

from availability.state import AvailabilityStateMachine
from health.core import IndicatorStatus
from health.executor import HealthAggregator
from __version__ import __version__, BUILD_DATE

health_router = APIRouter(tags=["Health"])


# ============================================================================
# DEPENDENCY INJECTION
# ============================================================================
# Components live on app.state, set by main.create_app()

def get_aggregator(request: Request) -> HealthAggregator:
    aggregator = getattr(request.app.state, "aggregator", None)
    if aggregator is None:
        raise HTTPException(500, "Health aggregator not initialized")
    return aggregator


def get_availability(request: Request) -> AvailabilityStateMachine:
    availability = getattr(request.app.state, "availability", None)
    if availability is None:
        raise HTTPException(500, "Availability state not initialized")
    return availability


def _status_to_http_code(status: IndicatorStatus) -> int:
    """Map health status to HTTP status code."""
    return {
        IndicatorStatus.UP: 200,
        IndicatorStatus.DOWN: 503,  # Service Unavailable
    }[status]


# ============================================================================
# LIVENESS PROBE
# ============================================================================

@health_router.get("/livez")
@health_router.get("/health/liveness")
async def liveness_probe(
    availability: AvailabilityStateMachine = Depends(get_availability),
):
    """
    Kubernetes liveness probe.

    Instant, no indicator checks. Fails only after an explicit
    mark-broken transition.
    """
    snapshot = availability.snapshot()
    body = {"status": snapshot.liveness.value, "version": __version__}
    return JSONResponse(status_code=200 if snapshot.is_alive else 503, content=body)


# ============================================================================
# READINESS PROBE
# ============================================================================

@health_router.get("/readyz")
@health_router.get("/health/readiness")
async def readiness_probe(
    availability: AvailabilityStateMachine = Depends(get_availability),
):
    """
    Kubernetes readiness probe.

    Reflects the readiness dimension only; a BROKEN process is left to the
    liveness probe.
    """
    snapshot = availability.snapshot()
    body = {"status": snapshot.readiness.value, "version": __version__}
    return JSONResponse(status_code=200 if snapshot.is_ready else 503, content=body)


# ============================================================================
# FULL HEALTH CHECK
# ============================================================================

@health_router.get("/health")
async def full_health_check(
    aggregator: HealthAggregator = Depends(get_aggregator),
    availability: AvailabilityStateMachine = Depends(get_availability),
):
    """
    Aggregated health.

    Runs every indicator (in parallel, each with its own timeout) and
    reports the AND of their verdicts together with the current
    liveness and readiness.

    Returns:
        200: All indicators UP
        503: At least one indicator DOWN
    """
    result = await aggregator.aggregate()
    snapshot = availability.snapshot()

    response_body = result.to_dict()
    response_body["liveness"] = snapshot.liveness.value
    response_body["readiness"] = snapshot.readiness.value
    response_body["version"] = __version__
    response_body["build_date"] = BUILD_DATE

    return JSONResponse(
        status_code=_status_to_http_code(result.status),
        content=response_body,
    )


# ============================================================================
# SINGLE INDICATOR
# ============================================================================

@health_router.get("/health/{indicator_name}")
async def single_health_check(
    indicator_name: str,
    aggregator: HealthAggregator = Depends(get_aggregator),
):
    """
    Run a single indicator by name.

    Useful for debugging specific dependencies.
    """
    verdict = await aggregator.check_one(indicator_name)

    if verdict is None:
        return JSONResponse(
            status_code=404,
            content={"error": f"Health indicator not found: {indicator_name}"},
        )

    return JSONResponse(
        status_code=_status_to_http_code(verdict.status),
        content=verdict.to_dict(),
    )


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "health_router",
    "get_aggregator",
    "get_availability",
]
