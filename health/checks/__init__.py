# ============================================================================
# HEALTH INDICATORS
# ============================================================================
# EPOCH: 1 - HEALTH PROBES & RESOURCE LIMITS
# STATUS: Infrastructure - Health indicator implementations
# PURPOSE: The fixed set of indicators behind /health
# CREATED: 19 OCT 2026
# ============================================================================
"""
Health Indicators

- process: Process is responsive (always UP)
- db: Simulated database connectivity (fails with configured probability)
- externalService: Simulated external collaborator (fixed latency)

Nothing registers itself on import; main.build_registry() constructs and
registers these explicitly.
"""

from health.checks.startup import ProcessIndicator
from health.checks.database import DatabaseConnectivityIndicator
from health.checks.external import ExternalServiceIndicator

__all__ = [
    "ProcessIndicator",
    "DatabaseConnectivityIndicator",
    "ExternalServiceIndicator",
]
