"""
API routes for Ding Relay.
"""

from dingrelay.presentation.api.routes.health import router as health_router
from dingrelay.presentation.api.routes.info import router as info_router
from dingrelay.presentation.api.routes.publish import router as publish_router
from dingrelay.presentation.api.routes.websocket import router as websocket_router

__all__ = ["health_router", "info_router", "publish_router", "websocket_router"]
