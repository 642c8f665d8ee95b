# ============================================================================
# CONFIGURATION DEFAULTS
# ============================================================================
# EPOCH: 1 - HEALTH PROBES & RESOURCE LIMITS
# STATUS: Core - Default configuration values
# PURPOSE: Centralized defaults for indicators, probes, simulator, server
# CREATED: 19 OCT 2026
# ============================================================================
"""
Configuration Defaults

Provides sensible defaults for health indicators, the availability state
machine and the resource simulator. These can be overridden via environment
variables.

Design:
- Immutable dataclasses for defaults
- Environment variable overrides
- Type-safe access
"""

import os
from dataclasses import dataclass, field
from typing import Optional


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class IndicatorDefaults:
    """
    Defaults for health indicators and aggregation.

    failure_probability drives the simulated database indicator;
    timeouts bound every check so /health always answers.
    """
    failure_probability: float = 0.1
    external_latency_seconds: float = 0.12
    external_available: bool = True

    check_timeout_seconds: float = 5.0
    overall_timeout_seconds: float = 10.0
    max_parallel: int = 10

    def __post_init__(self):
        if not 0.0 <= self.failure_probability <= 1.0:
            raise ValueError(
                f"failure_probability must be within [0, 1], got {self.failure_probability}"
            )
        if self.check_timeout_seconds <= 0 or self.overall_timeout_seconds <= 0:
            raise ValueError("health check timeouts must be positive")

    @classmethod
    def from_env(cls) -> "IndicatorDefaults":
        """Create from environment variables."""
        return cls(
            failure_probability=float(os.getenv("DB_FAILURE_PROBABILITY", 0.1)),
            external_latency_seconds=float(os.getenv("EXTERNAL_LATENCY_SECONDS", 0.12)),
            external_available=_env_bool("EXTERNAL_SERVICE_AVAILABLE", True),
            check_timeout_seconds=float(os.getenv("HEALTH_CHECK_TIMEOUT_SECONDS", 5.0)),
            overall_timeout_seconds=float(os.getenv("HEALTH_OVERALL_TIMEOUT_SECONDS", 10.0)),
            max_parallel=int(os.getenv("HEALTH_MAX_PARALLEL", 10)),
        )


@dataclass(frozen=True)
class AvailabilityDefaults:
    """Defaults for the liveness/readiness state machine."""
    slow_start_seconds: float = 45.0
    max_slow_start_seconds: float = 600.0  # 10 min
    history_size: int = 50

    @classmethod
    def from_env(cls) -> "AvailabilityDefaults":
        """Create from environment variables."""
        return cls(
            slow_start_seconds=float(os.getenv("SLOW_START_SECONDS", 45)),
            max_slow_start_seconds=float(os.getenv("MAX_SLOW_START_SECONDS", 600)),
            history_size=int(os.getenv("AVAILABILITY_HISTORY_SIZE", 50)),
        )


@dataclass(frozen=True)
class ResourceDefaults:
    """
    Defaults for the resource simulator.

    One unit is one retained buffer; the default unit is 1 MiB so
    request parameters read as megabytes.
    """
    unit_bytes: int = 1024 * 1024  # 1 MiB

    default_cpu_seconds: float = 5.0
    max_cpu_burn_seconds: float = 300.0  # 5 min
    default_allocate_mb: int = 10
    default_leak_iterations: int = 1

    @classmethod
    def from_env(cls) -> "ResourceDefaults":
        """Create from environment variables."""
        return cls(
            unit_bytes=int(os.getenv("MEMORY_UNIT_BYTES", 1024 * 1024)),
            max_cpu_burn_seconds=float(os.getenv("MAX_CPU_BURN_SECONDS", 300)),
        )


@dataclass(frozen=True)
class ServerDefaults:
    """HTTP server settings."""
    host: str = "0.0.0.0"
    port: int = 8080
    reload: bool = False

    @classmethod
    def from_env(cls) -> "ServerDefaults":
        """Create from environment variables."""
        return cls(
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", 8080)),
            reload=_env_bool("RELOAD", False),
        )


# ============================================================================
# GLOBAL DEFAULTS INSTANCE
# ============================================================================

@dataclass
class Defaults:
    """Container for all default configurations."""
    indicators: IndicatorDefaults = field(default_factory=IndicatorDefaults)
    availability: AvailabilityDefaults = field(default_factory=AvailabilityDefaults)
    resources: ResourceDefaults = field(default_factory=ResourceDefaults)
    server: ServerDefaults = field(default_factory=ServerDefaults)

    @classmethod
    def from_env(cls) -> "Defaults":
        """Create all defaults from environment variables."""
        return cls(
            indicators=IndicatorDefaults.from_env(),
            availability=AvailabilityDefaults.from_env(),
            resources=ResourceDefaults.from_env(),
            server=ServerDefaults.from_env(),
        )


_defaults: Optional[Defaults] = None


def get_defaults() -> Defaults:
    """Get global defaults instance."""
    global _defaults
    if _defaults is None:
        _defaults = Defaults.from_env()
    return _defaults


def reset_defaults() -> None:
    """Reset defaults (for testing)."""
    global _defaults
    _defaults = None


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "IndicatorDefaults",
    "AvailabilityDefaults",
    "ResourceDefaults",
    "ServerDefaults",
    "Defaults",
    "get_defaults",
    "reset_defaults",
]
