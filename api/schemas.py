# ============================================================================
# API SCHEMAS
# ============================================================================
# EPOCH: 1 - HEALTH PROBES & RESOURCE LIMITS
# STATUS: Core - Response schemas
# PURPOSE: Pydantic models for control and telemetry responses
# CREATED: 19 OCT 2026
# ============================================================================
"""
API Schemas

Response models for the /simulate control endpoints and the read-only
telemetry endpoints. Probe endpoints (health/router.py) return plain
JSON so their status code can follow the probe result.
"""

from typing import Dict, List, Optional, Union
from pydantic import BaseModel, Field

from availability.state import LivenessState, ReadinessState
from resources.simulator import AllocationOutcome


# ============================================================================
# AVAILABILITY
# ============================================================================

class AvailabilityChangeResponse(BaseModel):
    """One recorded liveness/readiness transition."""
    dimension: str
    from_: str = Field(..., alias="from")
    to: str
    at: str

    model_config = {"populate_by_name": True}


class TransitionResponse(BaseModel):
    """State after a control transition."""
    message: str
    liveness: LivenessState
    readiness: ReadinessState
    changed_at: str


class StatusResponse(BaseModel):
    """Current availability state and recent transitions."""
    liveness: LivenessState
    readiness: ReadinessState
    changed_at: str
    history: List[AvailabilityChangeResponse] = Field(default_factory=list)
    message: str = "Use /livez and /readyz (or /health/liveness, /health/readiness) for probes"


class InfoResponse(BaseModel):
    application: str
    version: str
    build_date: str
    timestamp: str
    ready: bool
    live: bool


class SlowStartResponse(BaseModel):
    message: str
    requested_seconds: float
    elapsed_ms: float


# ============================================================================
# RESOURCES
# ============================================================================

class CpuLoadResponse(BaseModel):
    message: str
    requested_seconds: float
    duration_ms: float
    iterations: int = Field(..., ge=0)
    result: float


class AllocationResponse(BaseModel):
    """
    Result of allocate-memory / memory-leak.

    outcome is "partial" or "failed" when the process ran out of memory;
    total_allocated_mb is what is still retained. The _mb fields are derived
    from bytes (units x MEMORY_UNIT_BYTES), the same way /resources reports
    them; the _units fields count retained buffers.
    """
    message: str
    outcome: AllocationOutcome
    requested_mb: int = Field(..., ge=0)
    allocated_mb: int = Field(..., ge=0)
    total_allocated_mb: int = Field(..., ge=0)
    allocated_units: int = Field(..., ge=0)
    total_allocated_units: int = Field(..., ge=0)
    used_memory_mb: int
    max_memory_mb: int
    error: Optional[str] = None


class FreeResponse(BaseModel):
    message: str
    freed_mb: int = Field(..., ge=0)
    freed_units: int = Field(..., ge=0)
    used_memory_mb: int


class MemoryUsage(BaseModel):
    max_memory_mb: int
    used_memory_mb: int
    heap_used_mb: int
    heap_max_mb: int


class ResourcesResponse(BaseModel):
    cpu_count: int
    memory: MemoryUsage
    simulator: Dict[str, int]
    container_limits: Dict[str, str] = Field(
        default_factory=lambda: {"note": "Use kubectl to see actual resource limits"}
    )


# ============================================================================
# ERRORS
# ============================================================================

class ErrorResponse(BaseModel):
    """Structured client error."""
    error: str
    message: str
    field: Optional[str] = None
    value: Optional[Union[float, str]] = None
