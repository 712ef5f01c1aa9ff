"""
Data transfer objects for Ding Relay.
"""

from dingrelay.application.dto.broadcast_dto import (
    BroadcastOutcome,
    BroadcastStatus,
    Submission,
)
from dingrelay.application.dto.websocket_dto import (
    ErrorFrame,
    HeartbeatFrame,
    ShutdownFrame,
    WelcomeFrame,
)

__all__ = [
    "BroadcastOutcome",
    "BroadcastStatus",
    "Submission",
    "ErrorFrame",
    "HeartbeatFrame",
    "ShutdownFrame",
    "WelcomeFrame",
]
