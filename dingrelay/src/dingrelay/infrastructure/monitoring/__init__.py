"""
Monitoring infrastructure for Ding Relay.

Provides health checks (Kubernetes liveness/readiness).
"""

from dingrelay.infrastructure.monitoring.relay_health_checker import (
    HealthCheck,
    HealthReport,
    HealthStatus,
    RelayHealthChecker,
)

__all__ = [
    "HealthCheck",
    "HealthReport",
    "HealthStatus",
    "RelayHealthChecker",
]
