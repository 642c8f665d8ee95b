# ============================================================================
# HEALTH INDICATOR CORE TYPES
# ============================================================================
# EPOCH: 1 - HEALTH PROBES & RESOURCE LIMITS
# STATUS: Infrastructure - Base classes for health indicators
# PURPOSE: Indicator interface, verdict and aggregated result types
# CREATED: 19 OCT 2026
# ============================================================================
"""
Health Indicator Core Types

Defines the indicator interface and result types.

Status semantics (fail closed):
- UP: the indicator's dependency is usable
- DOWN: it is not; one DOWN indicator makes the whole service DOWN
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple
from dataclasses import dataclass, field
from datetime import datetime


class IndicatorStatus(str, Enum):
    """Health status tokens."""
    UP = "UP"
    DOWN = "DOWN"

    @classmethod
    def aggregate(cls, statuses: List["IndicatorStatus"]) -> "IndicatorStatus":
        """Logical AND over all statuses. No statuses means UP."""
        if any(status == cls.DOWN for status in statuses):
            return cls.DOWN
        return cls.UP


@dataclass
class Verdict:
    """Result from a single health indicator."""
    status: IndicatorStatus
    details: Dict[str, str] = field(default_factory=dict)
    duration_ms: float = 0.0

    @property
    def up(self) -> bool:
        return self.status == IndicatorStatus.UP

    @classmethod
    def ok(cls, **details) -> "Verdict":
        """Create UP verdict."""
        return cls(status=IndicatorStatus.UP, details=_stringify(details))

    @classmethod
    def down(cls, **details) -> "Verdict":
        """Create DOWN verdict."""
        return cls(status=IndicatorStatus.DOWN, details=_stringify(details))

    @classmethod
    def from_exception(cls, e: BaseException) -> "Verdict":
        """Create DOWN verdict from exception."""
        return cls.down(error=str(e) or type(e).__name__, exception_type=type(e).__name__)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON response."""
        return {
            "status": self.status.value,
            "details": dict(self.details),
            "duration_ms": round(self.duration_ms, 2),
        }


def _stringify(details: Dict[str, Any]) -> Dict[str, str]:
    return {key: str(value) for key, value in details.items()}


@dataclass
class AggregatedHealth:
    """Aggregated result from every registered indicator, in registration order."""
    status: IndicatorStatus
    indicators: List[Tuple[str, Verdict]]
    total_duration_ms: float
    checked_at: datetime = field(default_factory=datetime.utcnow)

    def get(self, name: str) -> Optional[Verdict]:
        for indicator_name, verdict in self.indicators:
            if indicator_name == name:
                return verdict
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON response."""
        return {
            "status": self.status.value,
            "components": {
                name: verdict.to_dict()
                for name, verdict in self.indicators
            },
            "total_duration_ms": round(self.total_duration_ms, 2),
            "checked_at": self.checked_at.isoformat() + "Z",
        }


class HealthIndicator(ABC):
    """
    Base class for health indicators.

    Subclass and implement check(). Instances are registered explicitly
    with an IndicatorRegistry at start-up.

    Attributes:
        name: Unique identifier for the indicator
        timeout_seconds: Max execution time before the aggregator gives up.
            None means use the aggregator's default.

    Example:
        class CacheIndicator(HealthIndicator):
            name = "cache"
            timeout_seconds = 2.0

            async def check(self) -> Verdict:
                return Verdict.ok(cache="Reachable")
    """

    name: str = "unnamed"
    timeout_seconds: Optional[float] = None

    @abstractmethod
    async def check(self) -> Verdict:
        """
        Execute health check.

        Returns:
            Verdict with status and string details
        """
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"
