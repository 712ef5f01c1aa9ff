"""
Emoji markers used in relay log lines.

Usage:
    >>> from dingrelay.infrastructure.reporting import Emoji
    >>> print(f"{Emoji.NETWORK.CONNECTED} Client admitted")
    🔗 Client admitted
"""


class NetworkEmoji:
    """Connections and data flow."""

    CONNECTED = "🔗"
    DISCONNECT = "🔌"
    BROADCAST = "📡"
    HEARTBEAT = "❤️"
    TIMEOUT = "⏱️"


class SystemEmoji:
    """Process lifecycle."""

    STARTUP = "🚀"
    READY = "✅"
    SHUTDOWN = "🛑"
    CLEANUP = "🧹"
    CONFIG = "⚙️"


class Emoji:
    """Single access point for all categories."""

    NETWORK = NetworkEmoji
    SYSTEM = SystemEmoji

    ERROR = "❌"
    DROP = "🗑️"
