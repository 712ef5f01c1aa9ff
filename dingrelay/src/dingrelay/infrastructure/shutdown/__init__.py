"""
Graceful shutdown infrastructure for Ding Relay.
"""

from dingrelay.infrastructure.shutdown.shutdown_manager import (
    ShutdownManager,
    ShutdownState,
)

__all__ = ["ShutdownManager", "ShutdownState"]
