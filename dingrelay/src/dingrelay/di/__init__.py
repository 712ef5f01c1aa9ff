"""
Dependency injection for Ding Relay.
"""

from dingrelay.di.container import Container

__all__ = ["Container"]
