"""
Logging infrastructure for Ding Relay.
"""

from dingrelay.infrastructure.reporting.emojis import (
    Emoji,
    NetworkEmoji,
    SystemEmoji,
)
from dingrelay.infrastructure.reporting.system_reporter import SystemReporter

__all__ = ["Emoji", "NetworkEmoji", "SystemEmoji", "SystemReporter"]
