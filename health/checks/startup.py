# ============================================================================
# STARTUP HEALTH INDICATOR
# ============================================================================
# EPOCH: 1 - HEALTH PROBES & RESOURCE LIMITS
# STATUS: Infrastructure - Process indicator
# PURPOSE: Basic process check, registered first
# CREATED: 19 OCT 2026
# ============================================================================
"""
Startup Health Indicator

- ProcessIndicator: Always UP if the check runs (proves the event loop
  is responsive)
"""

import os
import platform
import sys

from health.core import HealthIndicator, Verdict


class ProcessIndicator(HealthIndicator):
    """
    Basic process health indicator.

    Always returns UP if the check runs.
    """

    name = "process"
    timeout_seconds = 1.0

    async def check(self) -> Verdict:
        return Verdict.ok(
            python_version=platform.python_version(),
            platform=sys.platform,
            pid=os.getpid(),
        )


__all__ = [
    "ProcessIndicator",
]
