# ============================================================================
# HEALTH AGGREGATOR
# ============================================================================
# EPOCH: 1 - HEALTH PROBES & RESOURCE LIMITS
# STATUS: Infrastructure - Parallel health indicator execution
# PURPOSE: Execute indicators with timeouts and AND-aggregate their verdicts
# CREATED: 19 OCT 2026
# ============================================================================
"""
Health Aggregator

Executes health indicators with:
- Parallel fan-out (bounded by max_parallel)
- Per-indicator timeouts
- Overall execution timeout
- Fault isolation: a raising or hanging indicator becomes DOWN,
  the others are still reported
- Aggregation with AND semantics: DOWN if any indicator is DOWN

Latency of aggregate() is roughly the slowest indicator, capped by
overall_timeout, not the sum over indicators.
"""

import asyncio
import time
from dataclasses import replace
from typing import Dict, List, Optional

from core.errors import IndicatorCheckFailure
from core.logging import ComponentType, get_logger, log_context
from health.core import (
    IndicatorStatus,
    Verdict,
    HealthIndicator,
    AggregatedHealth,
)
from health.registry import IndicatorRegistry

logger = get_logger(__name__, ComponentType.HEALTH)


class HealthAggregator:
    """
    Runs every registered indicator and combines the verdicts.

    Safe to call from concurrent requests: it holds no state of its own
    beyond configuration, and the registry is read-only after start-up.
    """

    def __init__(
        self,
        registry: IndicatorRegistry,
        check_timeout: float = 5.0,
        overall_timeout: float = 10.0,
        max_parallel: int = 10,
    ):
        """
        Initialize aggregator.

        Args:
            registry: Health indicator registry
            check_timeout: Timeout for indicators that do not set their own
            overall_timeout: Max total execution time
            max_parallel: Max concurrently running checks
        """
        self.registry = registry
        self.check_timeout = check_timeout
        self.overall_timeout = overall_timeout
        self.max_parallel = max_parallel

    async def aggregate(self) -> AggregatedHealth:
        """
        Execute all registered indicators.

        Returns:
            Aggregated result with every indicator's verdict, in
            registration order
        """
        start_time = time.monotonic()
        indicators = self.registry.get_all()

        verdicts = await self._execute_all(indicators)

        ordered = [(indicator.name, verdicts[indicator.name]) for indicator in indicators]
        overall_status = IndicatorStatus.aggregate([v.status for _, v in ordered])
        total_duration_ms = (time.monotonic() - start_time) * 1000

        if overall_status == IndicatorStatus.DOWN:
            down = [name for name, v in ordered if not v.up]
            logger.warning(f"Health DOWN: {', '.join(down)}")

        return AggregatedHealth(
            status=overall_status,
            indicators=ordered,
            total_duration_ms=total_duration_ms,
        )

    async def check_one(self, name: str) -> Optional[Verdict]:
        """Execute a single indicator by name. None if unknown."""
        indicator = self.registry.get(name)
        if indicator is None:
            return None
        return await self._execute_check(indicator)

    async def _execute_all(
        self,
        indicators: List[HealthIndicator],
    ) -> Dict[str, Verdict]:
        """Execute indicators in parallel under the overall timeout."""
        if not indicators:
            return {}

        semaphore = asyncio.Semaphore(self.max_parallel)

        async def run_with_semaphore(indicator: HealthIndicator) -> Verdict:
            async with semaphore:
                return await self._execute_check(indicator)

        tasks = {
            asyncio.ensure_future(run_with_semaphore(indicator)): indicator
            for indicator in indicators
        }

        done, pending = await asyncio.wait(
            tasks.keys(),
            timeout=self.overall_timeout,
            return_when=asyncio.ALL_COMPLETED,
        )

        results: Dict[str, Verdict] = {}
        for task in done:
            indicator = tasks[task]
            try:
                results[indicator.name] = task.result()
            except Exception as e:
                # _execute_check already isolates failures; this is the backstop
                logger.error(f"Error collecting health indicator {indicator.name}: {e}")
                results[indicator.name] = Verdict.from_exception(e)

        for task in pending:
            task.cancel()
            indicator = tasks[task]
            logger.warning(
                f"Health indicator {indicator.name} skipped: "
                f"overall timeout ({self.overall_timeout}s) exceeded"
            )
            results[indicator.name] = Verdict.down(
                error=f"Overall timeout after {self.overall_timeout}s"
            )

        return results

    async def _execute_check(
        self,
        indicator: HealthIndicator,
    ) -> Verdict:
        """Execute a single indicator with timeout. Never raises."""
        timeout = indicator.timeout_seconds or self.check_timeout
        start_time = time.monotonic()

        with log_context(indicator=indicator.name):
            try:
                verdict = await asyncio.wait_for(indicator.check(), timeout=timeout)
                if not isinstance(verdict, Verdict):
                    raise IndicatorCheckFailure(indicator.name)

                logger.debug(f"Health indicator {indicator.name}: {verdict.status.value}")

            except asyncio.TimeoutError:
                logger.warning(f"Health indicator {indicator.name} timed out after {timeout}s")
                verdict = Verdict.down(error=f"Timeout after {timeout}s")

            except Exception as e:
                logger.error(f"Health indicator {indicator.name} failed: {e}")
                verdict = Verdict.from_exception(e)

        # Copy: an indicator may hand back a shared Verdict instance
        return replace(verdict, duration_ms=(time.monotonic() - start_time) * 1000)


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "HealthAggregator",
]
