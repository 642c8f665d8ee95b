# ============================================================================
# RESOURCES MODULE
# ============================================================================
# EPOCH: 1 - HEALTH PROBES & RESOURCE LIMITS
# STATUS: Core - Resource simulation
# PURPOSE: Export the resource simulator and its result types
# CREATED: 19 OCT 2026
# ============================================================================

from resources.simulator import (
    AllocationOutcome,
    AllocationResult,
    FreeResult,
    CpuBurnResult,
    ResourceSnapshot,
    ResourceSimulator,
)

__all__ = [
    "AllocationOutcome",
    "AllocationResult",
    "FreeResult",
    "CpuBurnResult",
    "ResourceSnapshot",
    "ResourceSimulator",
]
