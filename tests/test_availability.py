# ============================================================================
# AVAILABILITY STATE MACHINE TESTS
# ============================================================================
# EPOCH: 1 - HEALTH PROBES & RESOURCE LIMITS
# STATUS: Tests - Liveness / readiness transitions
# PURPOSE: Verify transitions, independence, history, concurrency, slow start
# CREATED: 19 OCT 2026
# ============================================================================
"""
Availability State Machine Tests

Covers:
1. Defaults (ALIVE / ACCEPTING_TRAFFIC)
2. Liveness and readiness transitions are independent
3. Transition history, including no-op transitions being ignored
4. Concurrent transitions never leave a mixed state
5. Slow start blocks only its caller and validates its parameter

Run with:
    pytest tests/test_availability.py -v
"""

import asyncio
import threading
import time

import pytest

from availability.state import (
    AvailabilityStateMachine,
    LivenessState,
    ReadinessState,
)
from core.errors import InvalidParameterError


@pytest.fixture
def machine():
    return AvailabilityStateMachine(history_size=10, max_slow_start_seconds=5)


# ============================================================================
# TRANSITIONS
# ============================================================================

class TestTransitions:

    def test_defaults(self, machine):
        snapshot = machine.snapshot()
        assert snapshot.liveness == LivenessState.ALIVE
        assert snapshot.readiness == ReadinessState.ACCEPTING_TRAFFIC
        assert snapshot.is_alive and snapshot.is_ready

    def test_mark_not_ready_visible_immediately(self, machine):
        returned = machine.mark_not_ready()
        assert returned.readiness == ReadinessState.REFUSING_TRAFFIC
        assert machine.snapshot().readiness == ReadinessState.REFUSING_TRAFFIC
        assert machine.snapshot().liveness == LivenessState.ALIVE

    def test_mark_ready_restores(self, machine):
        machine.mark_not_ready()
        machine.mark_ready()
        assert machine.snapshot().readiness == ReadinessState.ACCEPTING_TRAFFIC

    def test_mark_broken_does_not_touch_readiness(self, machine):
        machine.mark_broken()
        snapshot = machine.snapshot()
        assert snapshot.liveness == LivenessState.BROKEN
        assert snapshot.readiness == ReadinessState.ACCEPTING_TRAFFIC

    def test_readiness_changes_do_not_touch_liveness(self, machine):
        machine.mark_broken()
        machine.mark_not_ready()
        machine.mark_ready()
        assert machine.snapshot().liveness == LivenessState.BROKEN

    def test_force_alive(self, machine):
        machine.mark_broken()
        assert machine.force_alive().liveness == LivenessState.ALIVE

    def test_snapshot_has_no_side_effects(self, machine):
        first = machine.snapshot()
        second = machine.snapshot()
        assert first == second
        assert machine.history() == []

    def test_snapshot_to_dict(self, machine):
        machine.mark_not_ready()
        body = machine.snapshot().to_dict()
        assert body["liveness"] == "ALIVE"
        assert body["readiness"] == "REFUSING_TRAFFIC"
        assert body["changed_at"].endswith("Z")


# ============================================================================
# HISTORY
# ============================================================================

class TestHistory:

    def test_records_in_order(self, machine):
        machine.mark_not_ready()
        machine.mark_broken()
        machine.mark_ready()

        changes = [(c.dimension, c.previous, c.current) for c in machine.history()]
        assert changes == [
            ("readiness", "ACCEPTING_TRAFFIC", "REFUSING_TRAFFIC"),
            ("liveness", "ALIVE", "BROKEN"),
            ("readiness", "REFUSING_TRAFFIC", "ACCEPTING_TRAFFIC"),
        ]

    def test_noop_transition_not_recorded(self, machine):
        machine.mark_ready()
        machine.mark_not_ready()
        machine.mark_not_ready()
        assert len(machine.history()) == 1

    def test_history_bounded(self, machine):
        for _ in range(20):
            machine.mark_not_ready()
            machine.mark_ready()
        assert len(machine.history()) == 10

    def test_change_to_dict_uses_from_to(self, machine):
        machine.mark_broken()
        body = machine.history()[0].to_dict()
        assert body["from"] == "ALIVE"
        assert body["to"] == "BROKEN"


# ============================================================================
# CONCURRENCY
# ============================================================================

class TestConcurrency:

    @pytest.mark.parametrize("run", range(5))
    def test_concurrent_readiness_toggles_end_in_valid_state(self, machine, run):
        observed = []
        errors = []

        def toggler(ready_first: bool):
            try:
                for i in range(500):
                    if (i % 2 == 0) == ready_first:
                        machine.mark_ready()
                    else:
                        machine.mark_not_ready()
            except Exception as e:
                errors.append(e)

        def reader():
            for _ in range(500):
                observed.append(machine.snapshot())

        threads = [threading.Thread(target=toggler, args=(i % 2 == 0,)) for i in range(6)]
        threads += [threading.Thread(target=reader) for _ in range(2)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert errors == []
        assert machine.snapshot().readiness in set(ReadinessState)
        assert machine.snapshot().liveness == LivenessState.ALIVE
        for snapshot in observed:
            assert isinstance(snapshot.readiness, ReadinessState)
            assert snapshot.liveness == LivenessState.ALIVE

    def test_history_consistent_with_final_state(self):
        big = AvailabilityStateMachine(history_size=100000)

        def toggler():
            for i in range(300):
                if i % 2:
                    big.mark_ready()
                else:
                    big.mark_not_ready()

        threads = [threading.Thread(target=toggler) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        history = big.history()
        # Each recorded change starts where the previous one ended
        for before, after in zip(history, history[1:]):
            assert before.current == after.previous
        if history:
            assert history[-1].current == big.snapshot().readiness.value


# ============================================================================
# SLOW START
# ============================================================================

class TestSlowStart:

    def test_sleeps_requested_duration(self, machine):
        result = asyncio.run(machine.slow_start(0.05))
        assert result.requested_seconds == 0.05
        assert result.elapsed_ms >= 45

    def test_does_not_change_state(self, machine):
        before = machine.snapshot()
        asyncio.run(machine.slow_start(0))
        assert machine.snapshot() == before
        assert machine.history() == []

    def test_other_callers_stay_responsive(self, machine):
        async def scenario():
            slow = asyncio.ensure_future(machine.slow_start(0.5))
            await asyncio.sleep(0.01)

            start = time.monotonic()
            machine.mark_not_ready()
            snapshot = machine.snapshot()
            elapsed = time.monotonic() - start

            assert not slow.done()
            await slow
            return snapshot, elapsed

        snapshot, elapsed = asyncio.run(scenario())
        assert snapshot.readiness == ReadinessState.REFUSING_TRAFFIC
        assert elapsed < 0.1

    @pytest.mark.parametrize("seconds", [-1, 6])
    def test_rejects_out_of_range(self, machine, seconds):
        with pytest.raises(InvalidParameterError) as exc_info:
            asyncio.run(machine.slow_start(seconds))
        assert exc_info.value.field == "seconds"
