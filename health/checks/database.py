# ============================================================================
# DATABASE CONNECTIVITY INDICATOR
# ============================================================================
# EPOCH: 1 - HEALTH PROBES & RESOURCE LIMITS
# STATUS: Infrastructure - Simulated dependency check
# PURPOSE: Probabilistic database connectivity check
# CREATED: 19 OCT 2026
# ============================================================================
"""
Database Connectivity Indicator

Simulates pinging a database. There is no real client; each check fails
with a fixed probability so the aggregate /health status flaps the way a
flaky dependency would.
"""

import logging
import random
from typing import Optional

from health.core import HealthIndicator, Verdict

logger = logging.getLogger(__name__)


class DatabaseConnectivityIndicator(HealthIndicator):
    """
    Simulated database connectivity check.

    Args:
        failure_probability: Chance in [0, 1] that a check reports DOWN
        rng: Random source (inject a seeded one for deterministic tests)
    """

    name = "db"
    timeout_seconds = 5.0

    def __init__(
        self,
        failure_probability: float = 0.1,
        rng: Optional[random.Random] = None,
    ):
        if not 0.0 <= failure_probability <= 1.0:
            raise ValueError(
                f"failure_probability must be within [0, 1], got {failure_probability}"
            )
        self.failure_probability = failure_probability
        self._rng = rng or random.Random()

    def _ping(self) -> bool:
        # random() is in [0, 1), so p=0 never fails and p=1 always fails
        return self._rng.random() >= self.failure_probability

    async def check(self) -> Verdict:
        if self._ping():
            return Verdict.ok(
                database="Connected",
                connection_pool="Available",
            )

        logger.info("Simulated database connectivity failure")
        return Verdict.down(
            database="Connection failed",
            error="Unable to reach database",
        )


__all__ = [
    "DatabaseConnectivityIndicator",
]
