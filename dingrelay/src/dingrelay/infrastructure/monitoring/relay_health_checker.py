"""
Relay health checker.

Kubernetes-style liveness and readiness reports built from the registry
and shutdown state.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from dingrelay.config.settings import Settings
from dingrelay.infrastructure.shutdown import ShutdownManager
from dingrelay.infrastructure.websocket import ConnectionRegistry


class HealthStatus(Enum):
    """Health status of a check or the whole service."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


@dataclass
class HealthCheck:
    """Result of one named check."""

    name: str
    status: HealthStatus
    message: str
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "status": self.status.value,
            "message": self.message,
            "metadata": self.metadata,
        }


@dataclass
class HealthReport:
    """Aggregated health report."""

    status: HealthStatus
    checks: Dict[str, HealthCheck]
    version: str
    uptime_seconds: float
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_healthy(self) -> bool:
        return self.status != HealthStatus.UNHEALTHY

    @property
    def is_ready(self) -> bool:
        return self.status != HealthStatus.UNHEALTHY

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "version": self.version,
            "uptime_seconds": round(self.uptime_seconds, 3),
            "timestamp": self.timestamp.isoformat(),
            "checks": {name: check.to_dict() for name, check in self.checks.items()},
        }


class RelayHealthChecker:
    """
    Health checker for the relay.

    Checks:
    - Service liveness (basic check)
    - Shutdown state
    - Connection capacity
    """

    DEGRADED_CAPACITY_PERCENT = 90

    def __init__(
        self,
        settings: Settings,
        registry: ConnectionRegistry,
        shutdown_manager: Optional[ShutdownManager] = None,
        started_at: Optional[datetime] = None,
    ):
        self.settings = settings
        self.registry = registry
        self.shutdown_manager = shutdown_manager
        self.started_at = started_at or datetime.now(timezone.utc)

    def _uptime(self) -> float:
        return (datetime.now(timezone.utc) - self.started_at).total_seconds()

    def check_liveness(self) -> HealthReport:
        """Liveness probe - is the process alive?"""
        checks = {
            "service": HealthCheck(
                name="service",
                status=HealthStatus.HEALTHY,
                message="Service is alive",
            )
        }
        return HealthReport(
            status=HealthStatus.HEALTHY,
            checks=checks,
            version=self.settings.APP_VERSION,
            uptime_seconds=self._uptime(),
        )

    def check_readiness(self) -> HealthReport:
        """Readiness probe - should the relay receive new connections?"""
        checks = {
            "shutdown": self._check_shutdown(),
            "connection_capacity": self._check_connection_capacity(),
        }

        overall = HealthStatus.HEALTHY
        for check in checks.values():
            if check.status == HealthStatus.UNHEALTHY:
                overall = HealthStatus.UNHEALTHY
                break
            if check.status == HealthStatus.DEGRADED:
                overall = HealthStatus.DEGRADED

        return HealthReport(
            status=overall,
            checks=checks,
            version=self.settings.APP_VERSION,
            uptime_seconds=self._uptime(),
        )

    def _check_shutdown(self) -> HealthCheck:
        if self.shutdown_manager and self.shutdown_manager.is_shutting_down():
            return HealthCheck(
                name="shutdown",
                status=HealthStatus.UNHEALTHY,
                message="Service is shutting down",
                metadata=self.shutdown_manager.get_shutdown_info(),
            )
        return HealthCheck(
            name="shutdown",
            status=HealthStatus.HEALTHY,
            message="Service is running",
        )

    def _check_connection_capacity(self) -> HealthCheck:
        total = self.registry.get_total_connections()
        limit = self.settings.max_total_connections
        metadata = {
            "total_connections": total,
            "max_connections": limit if limit > 0 else None,
        }

        if limit <= 0:
            return HealthCheck(
                name="connection_capacity",
                status=HealthStatus.HEALTHY,
                message=f"Unlimited capacity ({total} active)",
                metadata=metadata,
            )

        capacity_pct = (total / limit) * 100
        metadata["capacity_percent"] = round(capacity_pct, 1)

        if total >= limit:
            return HealthCheck(
                name="connection_capacity",
                status=HealthStatus.UNHEALTHY,
                message=f"Connection limit reached: {total}/{limit}",
                metadata=metadata,
            )

        if capacity_pct >= self.DEGRADED_CAPACITY_PERCENT:
            return HealthCheck(
                name="connection_capacity",
                status=HealthStatus.DEGRADED,
                message=f"High capacity usage: {total}/{limit} ({capacity_pct:.1f}%)",
                metadata=metadata,
            )

        return HealthCheck(
            name="connection_capacity",
            status=HealthStatus.HEALTHY,
            message=f"Capacity available: {total}/{limit} ({capacity_pct:.1f}%)",
            metadata=metadata,
        )
