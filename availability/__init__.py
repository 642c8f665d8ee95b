# ============================================================================
# AVAILABILITY MODULE
# ============================================================================
# EPOCH: 1 - HEALTH PROBES & RESOURCE LIMITS
# STATUS: Core - Liveness / readiness state
# PURPOSE: Export the availability state machine and its state types
# CREATED: 19 OCT 2026
# ============================================================================

from availability.state import (
    LivenessState,
    ReadinessState,
    AvailabilitySnapshot,
    AvailabilityChange,
    SlowStartResult,
    AvailabilityStateMachine,
)

__all__ = [
    "LivenessState",
    "ReadinessState",
    "AvailabilitySnapshot",
    "AvailabilityChange",
    "SlowStartResult",
    "AvailabilityStateMachine",
]
