"""
Domain entities for Ding Relay.
"""

from dingrelay.domain.entities.client import Client

__all__ = ["Client"]
