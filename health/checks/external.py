# ============================================================================
# EXTERNAL SERVICE INDICATOR
# ============================================================================
# EPOCH: 1 - HEALTH PROBES & RESOURCE LIMITS
# STATUS: Infrastructure - Simulated collaborator check
# PURPOSE: Fixed-latency external service availability check
# CREATED: 19 OCT 2026
# ============================================================================
"""
External Service Indicator

Simulates a call to an external collaborator (payment gateway, email
service) that takes a fixed time to answer.
"""

import asyncio

from health.core import HealthIndicator, Verdict


class ExternalServiceIndicator(HealthIndicator):
    """
    Simulated external service check.

    UP unless constructed with available=False.
    """

    name = "externalService"
    timeout_seconds = 10.0

    def __init__(self, latency_seconds: float = 0.12, available: bool = True):
        self.latency_seconds = latency_seconds
        self.available = available

    async def check(self) -> Verdict:
        if self.latency_seconds > 0:
            await asyncio.sleep(self.latency_seconds)

        if not self.available:
            return Verdict.down(
                externalService="Unavailable",
                error="Timeout after 5 seconds",
            )

        return Verdict.ok(
            externalService="Available",
            responseTime=f"{int(self.latency_seconds * 1000)}ms",
        )


__all__ = [
    "ExternalServiceIndicator",
]
