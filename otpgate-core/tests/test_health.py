"""
Tests for the health router.
"""

from fastapi import FastAPI
from fastapi.testclient import TestClient

from otpgate_core.health import ComponentHealth, create_health_router
from otpgate_core.storage import InMemoryStateStore


class UnreachableStore(InMemoryStateStore):
    name = "redis"

    async def ping(self) -> bool:
        return False


def make_client(**kwargs) -> TestClient:
    app = FastAPI()
    app.include_router(create_health_router("otpgate", version="0.1.0", **kwargs))
    return TestClient(app)


class TestHealthRouter:
    """Tests for /health, /health/live and /health/ready."""

    def test_healthy(self):
        client = make_client(
            store=InMemoryStateStore(),
            services={"supabase": True, "resend": True, "twilio": False, "google": False},
        )

        response = client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["service"] == "otpgate"
        assert body["version"] == "0.1.0"
        assert body["components"]["store"]["status"] == "connected"
        assert body["services"] == {"supabase": True, "resend": True, "twilio": False, "google": False}

    def test_store_down_degrades(self):
        client = make_client(store=UnreachableStore())

        body = client.get("/health").json()

        assert body["status"] == "degraded"
        assert body["components"]["store"] == {
            "status": "error",
            "latency_ms": None,
            "error": "redis store unreachable",
        }

    def test_liveness_ignores_store(self):
        client = make_client(store=UnreachableStore())

        response = client.get("/health/live")

        assert response.status_code == 200
        assert response.json() == {"status": "alive"}

    def test_ready(self):
        client = make_client(store=InMemoryStateStore())

        response = client.get("/health/ready")

        assert response.status_code == 200
        assert response.json() == {"status": "ready"}

    def test_not_ready_when_store_down(self):
        client = make_client(store=UnreachableStore())

        response = client.get("/health/ready")

        assert response.status_code == 503
        assert response.json() == {"status": "not_ready", "reason": "store_unavailable"}

    def test_custom_check_failure_is_reported(self):
        async def queue_check() -> ComponentHealth:
            raise RuntimeError("queue gone")

        async def cache_check() -> ComponentHealth:
            return ComponentHealth(status="connected", latency_ms=1.0)

        client = make_client(custom_checks={"queue": queue_check, "cache": cache_check})

        body = client.get("/health").json()

        assert body["components"]["queue"]["status"] == "error"
        assert body["components"]["queue"]["error"] == "queue gone"
        assert body["components"]["cache"]["status"] == "connected"
