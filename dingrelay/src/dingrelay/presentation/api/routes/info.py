"""
Diagnostics API routes.
"""

from fastapi import APIRouter, Depends

from dingrelay.di import Container
from dingrelay.presentation.api.dependencies import get_container
from dingrelay.presentation.schemas import InfoResponse, PortResponse

router = APIRouter(tags=["info"])


@router.get("/info", response_model=InfoResponse)
def get_info(container: Container = Depends(get_container)):
    """
    Get relay diagnostics.

    Returns:
        Connected client count, allowed event vocabulary and port
    """
    return InfoResponse(
        connected_clients=container.connection_registry.get_total_connections(),
        supported_events=container.get_validate_submission_use_case().supported_events,
        port=container.settings.port,
    )


@router.get("/port", response_model=PortResponse)
def get_port(container: Container = Depends(get_container)):
    """Get the WebSocket port (used by UI extensions)."""
    return PortResponse(port=container.settings.port)


@router.get("/stats")
def get_stats(container: Container = Depends(get_container)):
    """
    Get relay statistics since start.

    Returns:
        Statistics dict
    """
    stats = {k: v for k, v in container.stats.items() if k != "start_time"}
    stats["active_clients"] = container.connection_registry.get_total_connections()
    stats["active_heartbeats"] = container.heartbeat_monitor.active_count
    stats["uptime_seconds"] = container.get_uptime_seconds()
    return stats
