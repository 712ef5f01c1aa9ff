"""
Message Ding Relay - WebSocket Notification Relay

Clean Architecture implementation for cross-client event fan-out.
"""

from dingrelay.main import PLUGIN_INFO, RelayApp, main

__version__ = "0.1.0"
__all__ = ["PLUGIN_INFO", "RelayApp", "main"]
