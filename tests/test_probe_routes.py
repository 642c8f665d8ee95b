# ============================================================================
# PROBE + CONTROL ROUTE TESTS
# ============================================================================
# EPOCH: 1 - HEALTH PROBES & RESOURCE LIMITS
# STATUS: Tests - HTTP surface
# PURPOSE: Verify probe endpoints, /simulate controls and telemetry via HTTP
# CREATED: 19 OCT 2026
# ============================================================================
"""
Probe + Control Route Tests

Builds the real application with create_app() and a deterministic
indicator registry, then drives it with FastAPI's TestClient.

Run with:
    pytest tests/test_probe_routes.py -v
"""

import logging

import pytest
from fastapi.testclient import TestClient

from core.config import Defaults, IndicatorDefaults, ResourceDefaults
from core.errors import DuplicateIndicatorNameError
from health.checks import DatabaseConnectivityIndicator, ExternalServiceIndicator
from health.registry import IndicatorRegistry
from main import build_registry, create_app


# ============================================================================
# FIXTURES
# ============================================================================

def _defaults(failure_probability=0.0, external_available=True):
    return Defaults(
        indicators=IndicatorDefaults(
            failure_probability=failure_probability,
            external_latency_seconds=0.0,
            external_available=external_available,
        ),
        resources=ResourceDefaults(unit_bytes=1024, max_cpu_burn_seconds=1),
    )


def _make_client(**kwargs) -> TestClient:
    return TestClient(create_app(defaults=_defaults(**kwargs)))


@pytest.fixture
def client():
    with _make_client() as test_client:
        yield test_client


# ============================================================================
# WIRING
# ============================================================================

class TestWiring:

    def test_build_registry_order(self):
        registry = build_registry(_defaults())
        assert registry.names() == ["process", "db", "externalService"]
        assert registry.is_frozen

    def test_duplicate_indicator_fails_startup(self):
        registry = IndicatorRegistry()
        registry.register(DatabaseConnectivityIndicator())
        with pytest.raises(DuplicateIndicatorNameError):
            registry.register(DatabaseConnectivityIndicator())

    def test_root(self, client):
        body = client.get("/").json()
        assert body["status"] == "running"


# ============================================================================
# PROBES
# ============================================================================

class TestProbes:

    def test_health_up(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "UP"
        assert list(body["components"]) == ["process", "db", "externalService"]
        assert body["components"]["db"]["details"]["database"] == "Connected"
        assert body["liveness"] == "ALIVE"
        assert body["readiness"] == "ACCEPTING_TRAFFIC"

    def test_health_down_when_dependency_down(self):
        with _make_client(external_available=False) as client:
            response = client.get("/health")
        assert response.status_code == 503
        body = response.json()
        assert body["status"] == "DOWN"
        assert body["components"]["externalService"]["status"] == "DOWN"
        assert body["components"]["db"]["status"] == "UP"

    def test_health_status_independent_of_availability(self, client):
        client.post("/simulate/notready")
        body = client.get("/health").json()
        assert body["status"] == "UP"
        assert body["readiness"] == "REFUSING_TRAFFIC"

    @pytest.mark.parametrize("path", ["/livez", "/health/liveness"])
    def test_liveness(self, client, path):
        response = client.get(path)
        assert response.status_code == 200
        assert response.json()["status"] == "ALIVE"

        client.post("/simulate/broken")
        response = client.get(path)
        assert response.status_code == 503
        assert response.json()["status"] == "BROKEN"

    @pytest.mark.parametrize("path", ["/readyz", "/health/readiness"])
    def test_readiness(self, client, path):
        client.post("/simulate/notready")
        response = client.get(path)
        assert response.status_code == 503
        assert response.json()["status"] == "REFUSING_TRAFFIC"

        client.post("/simulate/ready")
        response = client.get(path)
        assert response.status_code == 200
        assert response.json()["status"] == "ACCEPTING_TRAFFIC"

    def test_broken_does_not_fail_readiness(self, client):
        client.post("/simulate/broken")
        assert client.get("/readyz").status_code == 200

    def test_single_indicator(self, client):
        response = client.get("/health/db")
        assert response.status_code == 200
        assert response.json()["status"] == "UP"

    def test_single_indicator_down(self):
        with _make_client(failure_probability=1.0) as client:
            response = client.get("/health/db")
        assert response.status_code == 503
        assert response.json()["details"]["error"] == "Unable to reach database"

    def test_unknown_indicator(self, client):
        response = client.get("/health/nope")
        assert response.status_code == 404


# ============================================================================
# AVAILABILITY CONTROL
# ============================================================================

class TestAvailabilityControl:

    def test_transition_response(self, client):
        body = client.post("/simulate/notready").json()
        assert body["readiness"] == "REFUSING_TRAFFIC"
        assert body["liveness"] == "ALIVE"
        assert "NOT READY" in body["message"]

    def test_force_alive(self, client):
        client.post("/simulate/broken")
        body = client.post("/simulate/alive").json()
        assert body["liveness"] == "ALIVE"
        assert client.get("/livez").status_code == 200

    def test_status_includes_history(self, client):
        client.post("/simulate/notready")
        client.post("/simulate/broken")
        body = client.get("/status").json()
        assert body["liveness"] == "BROKEN"
        assert body["readiness"] == "REFUSING_TRAFFIC"
        assert [(c["dimension"], c["from"], c["to"]) for c in body["history"]] == [
            ("readiness", "ACCEPTING_TRAFFIC", "REFUSING_TRAFFIC"),
            ("liveness", "ALIVE", "BROKEN"),
        ]

    def test_info(self, client):
        client.post("/simulate/notready")
        body = client.get("/info").json()
        assert body["ready"] is False
        assert body["live"] is True

    def test_slow_start(self, client):
        response = client.get("/simulate/slowstart", params={"seconds": 0.05})
        assert response.status_code == 200
        assert response.json()["elapsed_ms"] >= 45

    def test_slow_start_negative(self, client):
        response = client.get("/simulate/slowstart", params={"seconds": -1})
        assert response.status_code == 400
        assert response.json()["error"] == "InvalidParameter"


# ============================================================================
# RESOURCE CONTROL
# ============================================================================

class TestResourceControl:

    def test_allocate_free_allocate(self, client):
        body = client.post("/simulate/allocate-memory", params={"megabytes": 5}).json()
        assert body["outcome"] == "success"
        assert body["total_allocated_units"] == 5

        body = client.post("/simulate/free-memory").json()
        assert body["freed_units"] == 5

        body = client.post("/simulate/allocate-memory", params={"megabytes": 3}).json()
        assert body["total_allocated_units"] == 3

    def test_leak_accumulates(self, client):
        client.post("/simulate/memory-leak", params={"iterations": 2})
        body = client.post("/simulate/memory-leak", params={"iterations": 2}).json()
        assert body["total_allocated_units"] == 4
        assert body["message"] == "Memory leak simulated"

    def test_negative_megabytes_rejected(self, client):
        response = client.post("/simulate/allocate-memory", params={"megabytes": -3})
        assert response.status_code == 400
        body = response.json()
        assert body["field"] == "megabytes"
        assert client.get("/resources").json()["simulator"]["retained_units"] == 0

    def test_cpu_load(self, client):
        response = client.post("/simulate/cpu-load", params={"seconds": 0.05})
        assert response.status_code == 200
        assert response.json()["duration_ms"] >= 50

    def test_cpu_load_above_max_rejected(self, client):
        response = client.post("/simulate/cpu-load", params={"seconds": 30})
        assert response.status_code == 400

    def test_out_of_memory_partial(self, client):
        simulator = client.app.state.simulator
        calls = {"n": 0}

        def factory(size):
            if calls["n"] >= 2:
                raise MemoryError()
            calls["n"] += 1
            return bytearray(size)

        simulator._buffer_factory = factory
        response = client.post("/simulate/allocate-memory", params={"megabytes": 5})

        assert response.status_code == 206
        body = response.json()
        assert body["outcome"] == "partial"
        assert body["error"] == "OutOfMemory"
        assert body["total_allocated_units"] == 2

    def test_resources(self, client):
        body = client.get("/resources").json()
        assert body["cpu_count"] >= 1
        assert body["memory"]["used_memory_mb"] >= 0
        assert "note" in body["container_limits"]

    def test_megabytes_match_resources_for_non_mib_units(self):
        defaults = Defaults(resources=ResourceDefaults(unit_bytes=512 * 1024))
        with TestClient(create_app(defaults=defaults)) as client:
            body = client.post("/simulate/allocate-memory", params={"megabytes": 4}).json()
            simulator_view = client.get("/resources").json()["simulator"]
            freed = client.post("/simulate/free-memory").json()

        assert body["total_allocated_units"] == 4
        assert body["total_allocated_mb"] == 2
        assert body["requested_mb"] == 2
        assert simulator_view == {"retained_mb": 2, "retained_units": 4}
        assert freed["freed_mb"] == 2


# ============================================================================
# PARAMETER VALIDATION
# ============================================================================

class TestNonFiniteParameters:

    @pytest.mark.parametrize("raw", ["nan", "inf", "-inf"])
    def test_cpu_load_rejects_non_finite(self, client, raw):
        response = client.post("/simulate/cpu-load", params={"seconds": raw})
        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "InvalidParameter"
        assert body["field"] == "seconds"
        assert body["value"] == raw

    @pytest.mark.parametrize("raw", ["nan", "inf"])
    def test_slow_start_rejects_non_finite(self, client, raw):
        response = client.get("/simulate/slowstart", params={"seconds": raw})
        assert response.status_code == 400
        assert response.json()["field"] == "seconds"

    def test_leak_negative_rendered_by_exception_handler(self, client):
        response = client.post("/simulate/memory-leak", params={"iterations": -1})
        assert response.status_code == 400
        assert response.json() == {
            "error": "InvalidParameter",
            "message": "iterations must be >= 0, got -1",
            "field": "iterations",
            "value": -1,
        }


# ============================================================================
# APP ISOLATION
# ============================================================================

class TestAppIsolation:

    def test_apps_do_not_share_components(self):
        with _make_client() as first, _make_client() as second:
            second.post("/simulate/broken")
            second.post("/simulate/allocate-memory", params={"megabytes": 2})

            assert first.get("/livez").status_code == 200
            assert second.get("/livez").status_code == 503
            assert first.app.state.availability.snapshot().is_alive
            assert first.get("/resources").json()["simulator"]["retained_units"] == 0

    def test_routes_read_app_state(self, client):
        client.app.state.availability.mark_broken()
        assert client.get("/livez").status_code == 503


# ============================================================================
# REQUEST ID
# ============================================================================

class TestRequestId:

    def test_header_echoed(self, client):
        response = client.get("/livez", headers={"X-Request-ID": "req-42"})
        assert response.headers["X-Request-ID"] == "req-42"

    def test_generated_when_missing(self, client):
        first = client.get("/livez").headers["X-Request-ID"]
        second = client.get("/livez").headers["X-Request-ID"]
        assert first and second and first != second

    def test_request_id_on_log_records(self, client, caplog):
        caplog.set_level(logging.INFO, logger="availability.state")
        client.post("/simulate/notready", headers={"X-Request-ID": "req-7"})

        records = [r for r in caplog.records if r.name == "availability.state"]
        assert records
        assert records[-1].extra["request_id"] == "req-7"
        assert records[-1].extra["component"] == "availability"
