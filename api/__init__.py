# ============================================================================
# API MODULE
# ============================================================================
# EPOCH: 1 - HEALTH PROBES & RESOURCE LIMITS
# STATUS: Core - FastAPI routes
# PURPOSE: Control (/simulate) and telemetry endpoints
# CREATED: 19 OCT 2026
# ============================================================================
"""
API Module

FastAPI routes for Probe Lab's control and telemetry endpoints.
Probe endpoints live in the health module.
"""

from .routes import router
from .schemas import (
    TransitionResponse,
    AllocationResponse,
    ResourcesResponse,
    ErrorResponse,
)

__all__ = [
    "router",
    "TransitionResponse",
    "AllocationResponse",
    "ResourcesResponse",
    "ErrorResponse",
]
