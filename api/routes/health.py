"""
Health Check Endpoints
======================

API health check endpoints for monitoring and Kubernetes probes.
None of these require authentication.
"""

import logging
import time
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Optional

import psutil
from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from api.dependencies import get_credential_store, get_task_store
from api.models.responses import ErrorResponse
from core.credential_store import CredentialStoreProtocol
from core.task_store import TaskStoreProtocol
from exceptions import StorageError

# Set up module logger
logger = logging.getLogger(__name__)

router = APIRouter()


class ServiceStatus(str, Enum):
    """Service health status enumeration."""
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


class ServiceCheckResult(BaseModel):
    """Result of an individual service health check."""
    status: ServiceStatus = Field(description="Service health status")
    message: Optional[str] = Field(None, description="Status message")
    latency_ms: Optional[float] = Field(None, description="Check latency in milliseconds")


class SystemMetrics(BaseModel):
    """System resource metrics."""
    cpu_percent: float = Field(description="CPU usage percentage")
    memory_percent: float = Field(description="Memory usage percentage")
    memory_available_mb: float = Field(description="Available memory in MB")
    disk_usage_percent: float = Field(description="Disk usage percentage")


class HealthCheckResponse(BaseModel):
    """Comprehensive health check response."""
    status: ServiceStatus = Field(description="Overall health status")
    timestamp: str = Field(description="ISO 8601 timestamp of the health check")
    services: Dict[str, ServiceCheckResult] = Field(description="Individual service statuses")
    system_metrics: SystemMetrics = Field(description="System resource metrics")


class ProbeResponse(BaseModel):
    """Kubernetes readiness/liveness probe response."""
    status: str = Field(description="Probe status")
    timestamp: str = Field(description="ISO 8601 timestamp")


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


async def check_store(store) -> ServiceCheckResult:
    """
    Ping a credential or task store.

    Args:
        store: Any object with an async ``ping()``

    Returns:
        ServiceCheckResult with the store's health status
    """
    start_time = time.perf_counter()
    try:
        await store.ping()
    except StorageError as e:
        logger.warning(f"Storage health check failed: {e.__cause__!r}")
        return ServiceCheckResult(
            status=ServiceStatus.UNHEALTHY,
            message="Storage unreachable"
        )

    latency_ms = (time.perf_counter() - start_time) * 1000
    return ServiceCheckResult(
        status=ServiceStatus.HEALTHY,
        message=type(store).__name__,
        latency_ms=round(latency_ms, 2)
    )


def get_system_metrics() -> SystemMetrics:
    """
    Gather system resource metrics.

    Returns:
        SystemMetrics with CPU, memory, and disk usage
    """
    memory = psutil.virtual_memory()
    disk = psutil.disk_usage('/')

    return SystemMetrics(
        cpu_percent=round(psutil.cpu_percent(interval=None), 2),
        memory_percent=round(memory.percent, 2),
        memory_available_mb=round(memory.available / (1024 * 1024), 2),
        disk_usage_percent=round(disk.percent, 2)
    )


def determine_overall_status(services: Dict[str, ServiceCheckResult]) -> ServiceStatus:
    """Unhealthy if any service is unhealthy, degraded if any is degraded."""
    statuses = {check.status for check in services.values()}

    if ServiceStatus.UNHEALTHY in statuses:
        return ServiceStatus.UNHEALTHY
    if ServiceStatus.DEGRADED in statuses:
        return ServiceStatus.DEGRADED
    return ServiceStatus.HEALTHY


@router.get(
    "/health",
    response_model=HealthCheckResponse,
    summary="Comprehensive health check"
)
async def health_check(
    credential_store: CredentialStoreProtocol = Depends(get_credential_store),
    task_store: TaskStoreProtocol = Depends(get_task_store)
) -> HealthCheckResponse:
    """
    Check both stores and report system metrics.

    Returns HTTP 200 even when a store is down; use the ``status`` field
    to determine overall health.
    """
    services = {
        "api": ServiceCheckResult(status=ServiceStatus.HEALTHY, message="API is running"),
        "credential_store": await check_store(credential_store),
        "task_store": await check_store(task_store),
    }

    overall_status = determine_overall_status(services)
    if overall_status != ServiceStatus.HEALTHY:
        logger.warning(f"Health check: {overall_status.value}")

    return HealthCheckResponse(
        status=overall_status,
        timestamp=_timestamp(),
        services=services,
        system_metrics=get_system_metrics()
    )


@router.get(
    "/health/ready",
    response_model=ProbeResponse,
    responses={status.HTTP_503_SERVICE_UNAVAILABLE: {"model": ErrorResponse}},
    summary="Kubernetes readiness probe"
)
async def readiness_probe(
    credential_store: CredentialStoreProtocol = Depends(get_credential_store),
    task_store: TaskStoreProtocol = Depends(get_task_store)
) -> ProbeResponse:
    """
    Check if the application is ready to serve traffic.

    Raises:
        StorageError: either store is unreachable (503)
    """
    for store in (credential_store, task_store):
        result = await check_store(store)
        if result.status == ServiceStatus.UNHEALTHY:
            raise StorageError("readiness check")

    return ProbeResponse(status="ready", timestamp=_timestamp())


@router.get(
    "/health/live",
    response_model=ProbeResponse,
    summary="Kubernetes liveness probe"
)
async def liveness_probe() -> ProbeResponse:
    """
    Confirm the process can respond. Does not touch external dependencies.
    """
    return ProbeResponse(status="alive", timestamp=_timestamp())
