# ============================================================================
# ERROR TAXONOMY
# ============================================================================
# EPOCH: 1 - HEALTH PROBES & RESOURCE LIMITS
# STATUS: Core - Exception types
# PURPOSE: Errors raised by the registry, state machine and simulator
# CREATED: 19 OCT 2026
# ============================================================================
"""
Error Taxonomy

Start-up errors (fatal, configuration bugs):
- DuplicateIndicatorNameError
- RegistryFrozenError

Per-request errors (recovered at the request boundary):
- InvalidParameterError -> 400 response
- IndicatorCheckFailure -> converted to a DOWN verdict, never propagated

Simulated out-of-memory is not an exception at all; see
resources.simulator.AllocationOutcome.
"""

import math
from typing import Any


class ProbeLabError(Exception):
    """Base exception for Probe Lab errors."""
    pass


class DuplicateIndicatorNameError(ProbeLabError):
    """Raised when an indicator name is already registered."""
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Health indicator already registered: {name}")


class RegistryFrozenError(ProbeLabError):
    """Raised when registering after start-up has completed."""
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Registry is frozen, cannot register: {name}")


class InvalidParameterError(ProbeLabError, ValueError):
    """Raised when a request parameter is out of range."""

    def __init__(self, field: str, value: Any, message: str = None):
        self.field = field
        self.value = value
        self.message = message or f"Invalid value for {field}: {value}"
        super().__init__(self.message)

    def to_dict(self):
        value = self.value
        # JSON has no nan/inf literals
        if isinstance(value, float) and not math.isfinite(value):
            value = str(value)
        return {
            "error": "InvalidParameter",
            "message": self.message,
            "field": self.field,
            "value": value,
        }


class IndicatorCheckFailure(ProbeLabError):
    """An indicator's check() raised or returned something unusable."""
    def __init__(self, name: str, cause: Exception = None):
        self.name = name
        self.cause = cause
        detail = str(cause) if cause is not None else "no verdict returned"
        super().__init__(f"Health indicator {name} failed: {detail}")


def require_non_negative(field: str, value, maximum=None):
    """Reject negative, non-finite (nan, inf) or above-maximum numeric parameters."""
    if value is None or not math.isfinite(value):
        raise InvalidParameterError(field, value, f"{field} must be a finite number, got {value}")
    if value < 0:
        raise InvalidParameterError(field, value, f"{field} must be >= 0, got {value}")
    if maximum is not None and value > maximum:
        raise InvalidParameterError(
            field, value, f"{field} must be <= {maximum}, got {value}"
        )
    return value


__all__ = [
    "ProbeLabError",
    "DuplicateIndicatorNameError",
    "RegistryFrozenError",
    "InvalidParameterError",
    "IndicatorCheckFailure",
    "require_non_negative",
]
