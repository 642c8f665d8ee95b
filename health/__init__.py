# ============================================================================
# HEALTH MODULE
# ============================================================================
# EPOCH: 1 - HEALTH PROBES & RESOURCE LIMITS
# STATUS: Infrastructure - Composite health indicators
# PURPOSE: Kubernetes probes and aggregated health status
# CREATED: 19 OCT 2026
# ============================================================================
"""
Health Module

Composite health system:
- /livez, /readyz: Orchestrator probes, answered from the availability
  state machine (instant)
- /health: All indicators, AND-aggregated into UP/DOWN

Architecture:
- HealthIndicator: Base class for a single named check
- IndicatorRegistry: Explicit, start-up-only registration
- HealthAggregator: Parallel execution with timeouts and fault isolation

Usage:
    from health import IndicatorRegistry, HealthAggregator, health_router

    registry = IndicatorRegistry()
    registry.register(DatabaseConnectivityIndicator())
    registry.freeze()

    app.state.aggregator = HealthAggregator(registry)
    app.state.availability = availability
    app.include_router(health_router)
"""

from health.core import (
    IndicatorStatus,
    Verdict,
    HealthIndicator,
    AggregatedHealth,
)
from health.registry import IndicatorRegistry
from health.executor import HealthAggregator
from health.router import health_router

__all__ = [
    # Core types
    "IndicatorStatus",
    "Verdict",
    "HealthIndicator",
    "AggregatedHealth",
    # Registry
    "IndicatorRegistry",
    # Aggregator
    "HealthAggregator",
    # Router
    "health_router",
]
