# ============================================================================
# HEALTH INDICATOR REGISTRY
# ============================================================================
# EPOCH: 1 - HEALTH PROBES & RESOURCE LIMITS
# STATUS: Infrastructure - Health indicator registration
# PURPOSE: Ordered, start-up-only registration of health indicators
# CREATED: 19 OCT 2026
# ============================================================================
"""
Health Indicator Registry

Holds the fixed set of indicators evaluated by /health. Registration is
explicit and happens once at start-up (see main.build_registry); after
freeze() the registry is read-only.

Usage:
    registry = IndicatorRegistry()
    registry.register(DatabaseConnectivityIndicator())
    registry.freeze()

    for indicator in registry.get_all():
        ...
"""

import logging
from typing import Dict, List, Optional

from core.errors import DuplicateIndicatorNameError, RegistryFrozenError
from health.core import HealthIndicator

logger = logging.getLogger(__name__)


class IndicatorRegistry:
    """
    Registry for health indicators.

    Iteration order is registration order. Order only affects how
    detail is reported, never the overall verdict.
    """

    def __init__(self):
        self._indicators: Dict[str, HealthIndicator] = {}
        self._frozen = False

    def register(self, indicator: HealthIndicator) -> HealthIndicator:
        """
        Register a health indicator instance.

        Raises:
            DuplicateIndicatorNameError: If the name is already registered
            RegistryFrozenError: If called after freeze()
        """
        if self._frozen:
            raise RegistryFrozenError(indicator.name)
        if indicator.name in self._indicators:
            raise DuplicateIndicatorNameError(indicator.name)

        self._indicators[indicator.name] = indicator
        logger.debug(f"Registered health indicator: {indicator.name}")
        return indicator

    def get(self, name: str) -> Optional[HealthIndicator]:
        """Get indicator by name."""
        return self._indicators.get(name)

    def get_all(self) -> List[HealthIndicator]:
        """Get all registered indicators in registration order."""
        return list(self._indicators.values())

    def names(self) -> List[str]:
        return list(self._indicators)

    def freeze(self) -> None:
        """Mark start-up registration as complete."""
        self._frozen = True

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    def __len__(self) -> int:
        return len(self._indicators)

    def __contains__(self, name: str) -> bool:
        return name in self._indicators


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "IndicatorRegistry",
]
