# ============================================================================
# RESOURCE SIMULATOR
# ============================================================================
# EPOCH: 1 - HEALTH PROBES & RESOURCE LIMITS
# STATUS: Core - Controllable CPU and memory consumption
# PURPOSE: Exercise orchestrator resource limits, QoS and OOM-kill handling
# CREATED: 19 OCT 2026
# ============================================================================
"""
Resource Simulator

Controllable load for validating container resource limits:
- burn_cpu: busy loop for a wall-clock duration
- allocate / leak: retain fixed-size buffers (1 MiB units by default)
- free: drop every retained buffer and ask for a GC pass
- snapshot: process resource telemetry via psutil

Running out of memory during allocate/leak is reported as an
AllocationResult with outcome PARTIAL or FAILED, never raised. Whatever was
retained before the failure stays retained.

Thread safety:
- allocate / leak / free share one lock (they mutate the buffer list)
- snapshot is lock-free; process counters are approximate anyway
- burn_cpu touches no shared state
"""

import gc
import math
import random
import threading
import time
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import psutil

from core.errors import require_non_negative
from core.logging import ComponentType, get_logger, log_context

logger = get_logger(__name__, ComponentType.RESOURCES)

# cgroup v2 then v1 memory limit files
_CGROUP_MEMORY_LIMITS = (
    Path("/sys/fs/cgroup/memory.max"),
    Path("/sys/fs/cgroup/memory/memory.limit_in_bytes"),
)

BufferFactory = Callable[[int], bytearray]

MIB = 1024 * 1024


def _to_mb(num_bytes: int) -> int:
    return num_bytes // MIB


def _filled_buffer(size: int) -> bytearray:
    # Written, not just reserved, so the pages count against RSS
    return bytearray(b"\x01") * size


class AllocationOutcome(str, Enum):
    """How an allocate/leak call ended."""
    SUCCESS = "success"    # every requested unit retained
    PARTIAL = "partial"    # out of memory after retaining some units
    FAILED = "failed"      # out of memory before retaining any unit


@dataclass(frozen=True)
class AllocationResult:
    outcome: AllocationOutcome
    requested_units: int
    allocated_units: int
    retained_units: int
    unit_bytes: int
    memory_used_bytes: int
    memory_max_bytes: int
    error: Optional[str] = None

    @property
    def out_of_memory(self) -> bool:
        return self.outcome != AllocationOutcome.SUCCESS

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "outcome": self.outcome.value,
            "requested_mb": _to_mb(self.requested_units * self.unit_bytes),
            "allocated_mb": _to_mb(self.allocated_units * self.unit_bytes),
            "total_allocated_mb": _to_mb(self.retained_units * self.unit_bytes),
            "allocated_units": self.allocated_units,
            "total_allocated_units": self.retained_units,
            "used_memory_mb": _to_mb(self.memory_used_bytes),
            "max_memory_mb": _to_mb(self.memory_max_bytes),
        }
        if self.error:
            result["error"] = self.error
        return result


@dataclass(frozen=True)
class FreeResult:
    freed_units: int
    unit_bytes: int
    memory_used_bytes: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": "Memory freed",
            "freed_mb": _to_mb(self.freed_units * self.unit_bytes),
            "freed_units": self.freed_units,
            "used_memory_mb": _to_mb(self.memory_used_bytes),
        }


@dataclass(frozen=True)
class CpuBurnResult:
    requested_seconds: float
    elapsed_ms: float
    iterations: int
    result: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": "CPU load simulation completed",
            "requested_seconds": self.requested_seconds,
            "duration_ms": round(self.elapsed_ms, 2),
            "iterations": self.iterations,
            "result": self.result,
        }


@dataclass(frozen=True)
class ResourceSnapshot:
    cpu_count: int
    memory_max_bytes: int
    memory_used_bytes: int
    heap_used_bytes: int
    heap_max_bytes: int
    retained_units: int
    retained_bytes: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cpu_count": self.cpu_count,
            "memory": {
                "max_memory_mb": _to_mb(self.memory_max_bytes),
                "used_memory_mb": _to_mb(self.memory_used_bytes),
                "heap_used_mb": _to_mb(self.heap_used_bytes),
                "heap_max_mb": _to_mb(self.heap_max_bytes),
            },
            "simulator": {
                "retained_mb": _to_mb(self.retained_bytes),
                "retained_units": self.retained_units,
            },
        }


class ResourceSimulator:
    """
    Retains buffers and burns CPU on request.

    Args:
        unit_bytes: Size of one retained buffer
        max_cpu_burn_seconds: Upper bound for burn_cpu
        buffer_factory: Creates one buffer of the given size. Tests inject
            a factory that raises MemoryError to simulate exhaustion.
    """

    def __init__(
        self,
        unit_bytes: int = MIB,
        max_cpu_burn_seconds: float = 300.0,
        buffer_factory: Optional[BufferFactory] = None,
    ):
        if unit_bytes <= 0:
            raise ValueError(f"unit_bytes must be positive, got {unit_bytes}")
        self.unit_bytes = unit_bytes
        self.max_cpu_burn_seconds = max_cpu_burn_seconds
        self._buffer_factory = buffer_factory or _filled_buffer
        self._buffers: List[bytearray] = []
        self._lock = threading.Lock()
        self._process = psutil.Process()

    @property
    def retained_units(self) -> int:
        return len(self._buffers)

    # ------------------------------------------------------------------
    # Memory
    # ------------------------------------------------------------------

    def allocate(self, megabytes: int) -> AllocationResult:
        """Retain `megabytes` more units."""
        require_non_negative("megabytes", megabytes)
        with log_context(operation="allocate"):
            result = self._grow(megabytes)
            logger.info(
                f"Allocated {result.allocated_units}/{megabytes} units "
                f"(total {result.retained_units}, outcome {result.outcome.value})"
            )
        return result

    def leak(self, iterations: int) -> AllocationResult:
        """
        Retain `iterations` more units with no upper bound on the total.

        Same mechanics as allocate(); repeated calls model a leak that the
        orchestrator should eventually OOM-kill.
        """
        require_non_negative("iterations", iterations)
        with log_context(operation="leak"):
            result = self._grow(iterations)
            logger.warning(
                f"Simulated memory leak: +{result.allocated_units} units "
                f"(total leaked {result.retained_units})"
            )
        return result

    def free(self) -> FreeResult:
        """Drop every retained unit and request a GC pass (advisory)."""
        with self._lock:
            freed = len(self._buffers)
            self._buffers.clear()
        gc.collect()

        logger.info(f"Freed {freed} units")
        return FreeResult(
            freed_units=freed,
            unit_bytes=self.unit_bytes,
            memory_used_bytes=self._memory_used(),
        )

    def _grow(self, units: int) -> AllocationResult:
        allocated = 0
        error = None

        with self._lock:
            try:
                for _ in range(units):
                    self._buffers.append(self._buffer_factory(self.unit_bytes))
                    allocated += 1
            except MemoryError:
                error = "OutOfMemory"
            retained = len(self._buffers)

        if error is None:
            outcome = AllocationOutcome.SUCCESS
        else:
            outcome = AllocationOutcome.PARTIAL if allocated else AllocationOutcome.FAILED
            logger.warning(
                f"Out of memory after {allocated}/{units} units "
                f"(retaining {retained})"
            )

        return AllocationResult(
            outcome=outcome,
            requested_units=units,
            allocated_units=allocated,
            retained_units=retained,
            unit_bytes=self.unit_bytes,
            memory_used_bytes=self._memory_used(),
            memory_max_bytes=self._memory_max(),
            error=error,
        )

    # ------------------------------------------------------------------
    # CPU
    # ------------------------------------------------------------------

    def burn_cpu(self, seconds: float) -> CpuBurnResult:
        """Spin until `seconds` of wall-clock time have passed."""
        require_non_negative("seconds", seconds, self.max_cpu_burn_seconds)

        start = time.monotonic()
        deadline = start + seconds
        accumulated = 0.0
        iterations = 0
        while time.monotonic() < deadline:
            accumulated += math.sqrt(random.random() * 1000)
            iterations += 1

        elapsed_ms = (time.monotonic() - start) * 1000
        logger.info(f"CPU burn finished: {elapsed_ms:.0f}ms, {iterations} iterations")

        return CpuBurnResult(
            requested_seconds=seconds,
            elapsed_ms=elapsed_ms,
            iterations=iterations,
            result=accumulated,
        )

    # ------------------------------------------------------------------
    # Telemetry
    # ------------------------------------------------------------------

    def snapshot(self) -> ResourceSnapshot:
        """Approximate process resource usage. Not locked."""
        info = self._process.memory_info()
        memory_max = self._memory_max()
        retained = len(self._buffers)

        return ResourceSnapshot(
            cpu_count=psutil.cpu_count(logical=True) or 1,
            memory_max_bytes=memory_max,
            memory_used_bytes=info.rss,
            heap_used_bytes=getattr(info, "data", info.rss),
            heap_max_bytes=self._heap_max(memory_max),
            retained_units=retained,
            retained_bytes=retained * self.unit_bytes,
        )

    def _memory_used(self) -> int:
        return self._process.memory_info().rss

    def _memory_max(self) -> int:
        total = psutil.virtual_memory().total
        limit = _cgroup_memory_limit()
        if limit is not None and 0 < limit < total:
            return limit
        return total

    def _heap_max(self, memory_max: int) -> int:
        if not hasattr(psutil, "RLIMIT_DATA"):
            return memory_max
        try:
            soft, _ = self._process.rlimit(psutil.RLIMIT_DATA)
        except (psutil.Error, OSError):
            return memory_max
        if soft == psutil.RLIM_INFINITY or soft <= 0:
            return memory_max
        return min(soft, memory_max)


def _cgroup_memory_limit() -> Optional[int]:
    """Container memory limit in bytes, or None outside a limited cgroup."""
    for path in _CGROUP_MEMORY_LIMITS:
        try:
            raw = path.read_text().strip()
        except OSError:
            continue
        if raw == "max":
            return None
        try:
            return int(raw)
        except ValueError:
            return None
    return None


__all__ = [
    "AllocationOutcome",
    "AllocationResult",
    "FreeResult",
    "CpuBurnResult",
    "ResourceSnapshot",
    "ResourceSimulator",
]
