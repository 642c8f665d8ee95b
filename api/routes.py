# ============================================================================
# API ROUTES
# ============================================================================
# EPOCH: 1 - HEALTH PROBES & RESOURCE LIMITS
# STATUS: Core - FastAPI route definitions
# PURPOSE: Test/demo control endpoints and read-only telemetry
# CREATED: 19 OCT 2026
# ============================================================================
"""
API Routes

Control endpoints under /simulate change availability state or consume
resources. They exist to drive orchestrator probe and resource-limit tests
and must not be exposed where real traffic arrives.

Resource-consuming endpoints are plain `def` handlers so FastAPI runs them
in its worker thread pool; a CPU burn or large allocation never stalls the
event loop that answers /livez and /readyz.
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import JSONResponse

from availability.state import AvailabilityStateMachine
from core.config import Defaults, get_defaults
from health.router import get_availability
from resources.simulator import AllocationOutcome, AllocationResult, ResourceSimulator
from __version__ import __version__, BUILD_DATE, CODENAME
from .schemas import (
    TransitionResponse,
    StatusResponse,
    InfoResponse,
    SlowStartResponse,
    CpuLoadResponse,
    AllocationResponse,
    FreeResponse,
    ResourcesResponse,
    ErrorResponse,
)

router = APIRouter()

_INVALID = {400: {"model": ErrorResponse}}


# ============================================================================
# DEPENDENCY INJECTION
# ============================================================================
# Components live on app.state, set by main.create_app()

def get_simulator(request: Request) -> ResourceSimulator:
    simulator = getattr(request.app.state, "simulator", None)
    if simulator is None:
        raise HTTPException(500, "Resource simulator not initialized")
    return simulator


def get_app_defaults(request: Request) -> Defaults:
    return getattr(request.app.state, "defaults", None) or get_defaults()


def _transition(message: str, snapshot) -> TransitionResponse:
    return TransitionResponse(message=message, **snapshot.to_dict())



# ============================================================================
# AVAILABILITY CONTROL
# ============================================================================

@router.post("/simulate/notready", response_model=TransitionResponse, tags=["Simulate"])
async def simulate_not_ready(
    availability: AvailabilityStateMachine = Depends(get_availability),
):
    """Mark NOT READY. The readiness probe fails; no restart expected."""
    snapshot = availability.mark_not_ready()
    return _transition("Application marked as NOT READY. Readiness probe will fail.", snapshot)


@router.post("/simulate/ready", response_model=TransitionResponse, tags=["Simulate"])
async def simulate_ready(
    availability: AvailabilityStateMachine = Depends(get_availability),
):
    """Restore readiness."""
    snapshot = availability.mark_ready()
    return _transition("Application marked as READY. Readiness probe will pass.", snapshot)


@router.post("/simulate/broken", response_model=TransitionResponse, tags=["Simulate"])
async def simulate_broken(
    availability: AvailabilityStateMachine = Depends(get_availability),
):
    """Mark BROKEN. The liveness probe fails and the pod should be restarted."""
    snapshot = availability.mark_broken()
    return _transition(
        "Application marked as BROKEN. Liveness probe will fail. Pod will be restarted.",
        snapshot,
    )


@router.post("/simulate/alive", response_model=TransitionResponse, tags=["Simulate"])
async def simulate_alive(
    availability: AvailabilityStateMachine = Depends(get_availability),
):
    """Reset liveness to ALIVE. Test harnesses only; real processes do not recover."""
    snapshot = availability.force_alive()
    return _transition("Liveness forced back to ALIVE (non-production).", snapshot)


@router.get(
    "/simulate/slowstart",
    response_model=SlowStartResponse,
    responses=_INVALID,
    tags=["Simulate"],
)
async def simulate_slow_start(
    seconds: Optional[float] = Query(None),
    availability: AvailabilityStateMachine = Depends(get_availability),
    defaults: Defaults = Depends(get_app_defaults),
):
    """
    Hold this request open for `seconds` (default from SLOW_START_SECONDS).

    Only this request waits; probes keep answering. Invalid values raise
    InvalidParameterError, rendered as 400 by the app's exception handler.
    """
    if seconds is None:
        seconds = defaults.availability.slow_start_seconds
    result = await availability.slow_start(seconds)
    return SlowStartResponse(**result.to_dict())


# ============================================================================
# RESOURCE CONTROL
# ============================================================================

@router.post(
    "/simulate/cpu-load",
    response_model=CpuLoadResponse,
    responses=_INVALID,
    tags=["Simulate"],
)
def simulate_cpu_load(
    seconds: Optional[float] = Query(None),
    simulator: ResourceSimulator = Depends(get_simulator),
    defaults: Defaults = Depends(get_app_defaults),
):
    """Busy-loop for `seconds` of wall-clock time."""
    if seconds is None:
        seconds = defaults.resources.default_cpu_seconds
    result = simulator.burn_cpu(seconds)
    return CpuLoadResponse(**result.to_dict())


def _allocation_response(message: str, result: AllocationResult):
    body = AllocationResponse(message=message, **result.to_dict())
    if result.outcome == AllocationOutcome.SUCCESS:
        return body
    # Partial content when something was retained, insufficient storage otherwise
    status_code = 206 if result.outcome == AllocationOutcome.PARTIAL else 507
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


@router.post(
    "/simulate/allocate-memory",
    response_model=AllocationResponse,
    responses=_INVALID,
    tags=["Simulate"],
)
def simulate_allocate_memory(
    megabytes: Optional[int] = Query(None),
    simulator: ResourceSimulator = Depends(get_simulator),
    defaults: Defaults = Depends(get_app_defaults),
):
    """Retain `megabytes` more buffers of MEMORY_UNIT_BYTES each."""
    if megabytes is None:
        megabytes = defaults.resources.default_allocate_mb
    result = simulator.allocate(megabytes)

    if result.out_of_memory:
        return _allocation_response("Cannot allocate more memory - limit reached", result)
    return _allocation_response("Memory allocated successfully", result)


@router.post("/simulate/free-memory", response_model=FreeResponse, tags=["Simulate"])
def simulate_free_memory(simulator: ResourceSimulator = Depends(get_simulator)):
    """Drop every retained buffer."""
    result = simulator.free()
    return FreeResponse(**result.to_dict())


@router.post(
    "/simulate/memory-leak",
    response_model=AllocationResponse,
    responses=_INVALID,
    tags=["Simulate"],
)
def simulate_memory_leak(
    iterations: Optional[int] = Query(None),
    simulator: ResourceSimulator = Depends(get_simulator),
    defaults: Defaults = Depends(get_app_defaults),
):
    """Leak `iterations` more buffers. Repeat until the pod is OOM-killed."""
    if iterations is None:
        iterations = defaults.resources.default_leak_iterations
    result = simulator.leak(iterations)

    if result.out_of_memory:
        return _allocation_response("Memory leak hit the memory limit", result)
    return _allocation_response("Memory leak simulated", result)


# ============================================================================
# TELEMETRY (READ-ONLY)
# ============================================================================

@router.get("/resources", response_model=ResourcesResponse, tags=["Telemetry"])
def get_resources(simulator: ResourceSimulator = Depends(get_simulator)):
    """Process CPU and memory snapshot."""
    return ResourcesResponse(**simulator.snapshot().to_dict())


@router.get("/status", response_model=StatusResponse, tags=["Telemetry"])
async def get_status(
    availability: AvailabilityStateMachine = Depends(get_availability),
):
    """Availability state and recent transitions."""
    snapshot = availability.snapshot()
    return StatusResponse(
        **snapshot.to_dict(),
        history=[change.to_dict() for change in availability.history()],
    )


@router.get("/info", response_model=InfoResponse, tags=["Telemetry"])
async def get_info(
    availability: AvailabilityStateMachine = Depends(get_availability),
):
    """Application identity and current availability."""
    snapshot = availability.snapshot()
    return InfoResponse(
        application=CODENAME,
        version=__version__,
        build_date=BUILD_DATE,
        timestamp=datetime.utcnow().isoformat() + "Z",
        ready=snapshot.is_ready,
        live=snapshot.is_alive,
    )


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "router",
    "get_simulator",
    "get_app_defaults",
]
