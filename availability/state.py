# ============================================================================
# AVAILABILITY STATE MACHINE
# ============================================================================
# EPOCH: 1 - HEALTH PROBES & RESOURCE LIMITS
# STATUS: Core - Liveness / readiness state
# PURPOSE: Source of truth for the orchestrator's liveness and readiness probes
# CREATED: 19 OCT 2026
# ============================================================================
"""
Availability State Machine

Two independent dimensions, each changed only by an explicit transition:

    Liveness:   ALIVE --(mark_broken)--> BROKEN
                (force_alive exists for test harnesses only)

    Readiness:  ACCEPTING_TRAFFIC <--(mark_ready / mark_not_ready)--> REFUSING_TRAFFIC

Neither dimension is inferred from /health. A broken process is expected to
be restarted by the orchestrator, not to heal itself.

All reads and writes go through one lock so a snapshot is never torn and
concurrent transitions are serialized (last writer wins).
"""

import asyncio
import threading
import time
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List

from core.errors import require_non_negative
from core.logging import ComponentType, get_logger

logger = get_logger(__name__, ComponentType.AVAILABILITY)


class LivenessState(str, Enum):
    """Whether the orchestrator should keep this process running."""
    ALIVE = "ALIVE"
    BROKEN = "BROKEN"


class ReadinessState(str, Enum):
    """Whether the orchestrator should route traffic to this process."""
    ACCEPTING_TRAFFIC = "ACCEPTING_TRAFFIC"
    REFUSING_TRAFFIC = "REFUSING_TRAFFIC"


@dataclass(frozen=True)
class AvailabilitySnapshot:
    """Consistent view of both dimensions at one instant."""
    liveness: LivenessState
    readiness: ReadinessState
    changed_at: datetime

    @property
    def is_alive(self) -> bool:
        return self.liveness == LivenessState.ALIVE

    @property
    def is_ready(self) -> bool:
        return self.readiness == ReadinessState.ACCEPTING_TRAFFIC

    def to_dict(self) -> Dict[str, Any]:
        return {
            "liveness": self.liveness.value,
            "readiness": self.readiness.value,
            "changed_at": self.changed_at.isoformat() + "Z",
        }


@dataclass(frozen=True)
class AvailabilityChange:
    """One recorded transition."""
    dimension: str  # "liveness" or "readiness"
    previous: str
    current: str
    at: datetime = field(default_factory=datetime.utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dimension": self.dimension,
            "from": self.previous,
            "to": self.current,
            "at": self.at.isoformat() + "Z",
        }


@dataclass(frozen=True)
class SlowStartResult:
    requested_seconds: float
    elapsed_ms: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": "Slow startup completed",
            "requested_seconds": self.requested_seconds,
            "elapsed_ms": round(self.elapsed_ms, 2),
        }


class AvailabilityStateMachine:
    """
    Process-local liveness/readiness state.

    Created ALIVE / ACCEPTING_TRAFFIC. Nothing is persisted; a restart
    starts from the defaults again.
    """

    def __init__(self, history_size: int = 50, max_slow_start_seconds: float = 600.0):
        self._lock = threading.Lock()
        self._liveness = LivenessState.ALIVE
        self._readiness = ReadinessState.ACCEPTING_TRAFFIC
        self._changed_at = datetime.utcnow()
        self._history = deque(maxlen=history_size)
        self.max_slow_start_seconds = max_slow_start_seconds

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def snapshot(self) -> AvailabilitySnapshot:
        """Current state. No side effects."""
        with self._lock:
            return self._snapshot_locked()

    def history(self) -> List[AvailabilityChange]:
        """Recorded transitions, oldest first."""
        with self._lock:
            return list(self._history)

    def _snapshot_locked(self) -> AvailabilitySnapshot:
        return AvailabilitySnapshot(
            liveness=self._liveness,
            readiness=self._readiness,
            changed_at=self._changed_at,
        )

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def mark_broken(self) -> AvailabilitySnapshot:
        """Fail the liveness probe. The orchestrator should restart us."""
        snapshot = self._set_liveness(LivenessState.BROKEN)
        logger.warning("Liveness BROKEN: liveness probe will fail, restart expected")
        return snapshot

    def force_alive(self) -> AvailabilitySnapshot:
        """
        Restore liveness to ALIVE.

        Not for production use: a real process never recovers from BROKEN.
        Kept so test harnesses can reuse one process across scenarios.
        """
        logger.warning("force_alive called: non-production liveness reset")
        return self._set_liveness(LivenessState.ALIVE)

    def mark_ready(self) -> AvailabilitySnapshot:
        """Start accepting traffic."""
        snapshot = self._set_readiness(ReadinessState.ACCEPTING_TRAFFIC)
        logger.info("Readiness ACCEPTING_TRAFFIC")
        return snapshot

    def mark_not_ready(self) -> AvailabilitySnapshot:
        """Stop accepting traffic; no restart expected."""
        snapshot = self._set_readiness(ReadinessState.REFUSING_TRAFFIC)
        logger.info("Readiness REFUSING_TRAFFIC")
        return snapshot

    def _set_liveness(self, state: LivenessState) -> AvailabilitySnapshot:
        with self._lock:
            if self._liveness != state:
                self._record("liveness", self._liveness, state)
                self._liveness = state
            return self._snapshot_locked()

    def _set_readiness(self, state: ReadinessState) -> AvailabilitySnapshot:
        with self._lock:
            if self._readiness != state:
                self._record("readiness", self._readiness, state)
                self._readiness = state
            return self._snapshot_locked()

    def _record(self, dimension: str, previous: Enum, current: Enum) -> None:
        # Caller holds the lock
        change = AvailabilityChange(
            dimension=dimension,
            previous=previous.value,
            current=current.value,
        )
        self._history.append(change)
        self._changed_at = change.at

    # ------------------------------------------------------------------
    # Slow start
    # ------------------------------------------------------------------

    async def slow_start(self, seconds: float) -> SlowStartResult:
        """
        Block the calling request for `seconds`, then succeed.

        Used to exercise startup-probe timeouts. Holds no lock and changes
        no state, so probes stay responsive meanwhile. Not cancellable
        beyond the request being dropped.
        """
        require_non_negative("seconds", seconds, self.max_slow_start_seconds)

        logger.info(f"Slow start simulation: sleeping {seconds}s")
        start = time.monotonic()
        await asyncio.sleep(seconds)
        elapsed_ms = (time.monotonic() - start) * 1000
        logger.info(f"Slow start simulation completed after {elapsed_ms:.0f}ms")

        return SlowStartResult(requested_seconds=seconds, elapsed_ms=elapsed_ms)


__all__ = [
    "LivenessState",
    "ReadinessState",
    "AvailabilitySnapshot",
    "AvailabilityChange",
    "SlowStartResult",
    "AvailabilityStateMachine",
]
