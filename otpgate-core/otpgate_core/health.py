"""
Health Check Module
===================
Liveness, readiness and component status for a service built on otpgate.
"""

import time
from typing import Optional, Dict, Any, Callable, Awaitable
from fastapi import APIRouter, Response
from pydantic import BaseModel
from enum import Enum
import structlog

from .storage import StateStore

logger = structlog.get_logger(__name__)


class HealthStatus(str, Enum):
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


class ComponentHealth(BaseModel):
    status: str
    latency_ms: Optional[float] = None
    error: Optional[str] = None


class HealthResponse(BaseModel):
    status: HealthStatus
    service: str
    version: str
    components: Dict[str, ComponentHealth]
    services: Dict[str, bool]
    timestamp: float


async def check_store(store: StateStore) -> ComponentHealth:
    """Check state store connectivity and latency."""
    start = time.time()
    reachable = await store.ping()
    latency = (time.time() - start) * 1000
    if not reachable:
        logger.error("State store health check failed", store=store.name)
        return ComponentHealth(status="error", error=f"{store.name} store unreachable")
    return ComponentHealth(status="connected", latency_ms=round(latency, 2))


def create_health_router(
    service_name: str,
    version: str = "1.0.0",
    store: Optional[StateStore] = None,
    services: Optional[Dict[str, bool]] = None,
    custom_checks: Optional[Dict[str, Callable[[], Awaitable[ComponentHealth]]]] = None,
) -> APIRouter:
    """
    Create a health check router.

    Args:
        service_name: Name of the service (e.g., "otpgate")
        version: Service version
        store: State store backing codes, windows and handshake state
        services: Which external collaborators are configured, by name
        custom_checks: Dict of custom health check functions (optional)

    Returns:
        FastAPI router with /health, /health/live, and /health/ready endpoints
    """
    router = APIRouter(tags=["Health"])
    configured = dict(services or {})

    @router.get("/health", response_model=HealthResponse)
    async def health_check() -> HealthResponse:
        """Health check with component statuses."""
        components: Dict[str, ComponentHealth] = {}
        overall_status = HealthStatus.HEALTHY

        if store is not None:
            store_health = await check_store(store)
            components["store"] = store_health
            if store_health.status == "error":
                overall_status = HealthStatus.DEGRADED

        if custom_checks:
            for name, check_fn in custom_checks.items():
                try:
                    components[name] = await check_fn()
                except Exception as e:
                    logger.error("Health check failed", component=name, error=str(e))
                    components[name] = ComponentHealth(status="error", error=str(e))

        return HealthResponse(
            status=overall_status,
            service=service_name,
            version=version,
            components=components,
            services=configured,
            timestamp=time.time(),
        )

    @router.get("/health/live")
    async def liveness_check() -> Dict[str, Any]:
        """Liveness check - always returns 200 if service is running."""
        return {"status": "alive"}

    @router.get("/health/ready")
    async def readiness_check():
        """Readiness check - the state store must be reachable."""
        if store is not None:
            store_health = await check_store(store)
            if store_health.status == "error":
                return Response(
                    content='{"status": "not_ready", "reason": "store_unavailable"}',
                    status_code=503,
                    media_type="application/json",
                )
        return {"status": "ready"}

    return router
