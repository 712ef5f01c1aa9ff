"""
WebSocket infrastructure for Ding Relay.
"""

from dingrelay.infrastructure.websocket.connection_registry import (
    ConnectionRegistry,
    RegistryEntry,
)
from dingrelay.infrastructure.websocket.endpoint import WebSocketEndpoint
from dingrelay.infrastructure.websocket.heartbeat_monitor import HeartbeatMonitor

__all__ = [
    "ConnectionRegistry",
    "HeartbeatMonitor",
    "RegistryEntry",
    "WebSocketEndpoint",
]
