"""
Dependency Injection container for Ding Relay.

Manages lifecycle and dependencies of all application components.
"""

from datetime import datetime, timezone
from typing import Optional

from dingrelay.application.use_cases import (
    AdmitClientUseCase,
    BroadcastEventUseCase,
    DrainConnectionsUseCase,
    ValidateSubmissionUseCase,
)
from dingrelay.config.settings import Settings
from dingrelay.infrastructure.monitoring import RelayHealthChecker
from dingrelay.infrastructure.reporting import SystemReporter
from dingrelay.infrastructure.shutdown import ShutdownManager
from dingrelay.infrastructure.websocket import ConnectionRegistry, HeartbeatMonitor


class Container:
    """
    Dependency Injection container.

    Creates and manages all application dependencies. The registry is a
    single owned instance constructed on first use and drained at
    shutdown; nothing reaches it except through this container.
    """

    def __init__(self, settings: Settings, reporter: Optional[SystemReporter] = None):
        """
        Initialize container with settings.

        Args:
            settings: Application settings
            reporter: Optional SystemReporter shared by all components
        """
        self.settings = settings
        self.reporter = reporter

        self._connection_registry: Optional[ConnectionRegistry] = None
        self._validate_submission_use_case: Optional[ValidateSubmissionUseCase] = None
        self._broadcast_use_case: Optional[BroadcastEventUseCase] = None
        self._heartbeat_monitor: Optional[HeartbeatMonitor] = None
        self._shutdown_manager: Optional[ShutdownManager] = None

        # Statistics
        self.stats = {
            "total_connections": 0,
            "total_messages_received": 0,
            "total_messages_sent": 0,
            "dropped_events": 0,
            "malformed_submissions": 0,
            "connection_rejections": 0,
            "start_time": datetime.now(timezone.utc),
        }

    @property
    def connection_registry(self) -> ConnectionRegistry:
        """Get ConnectionRegistry singleton with the configured connection limit."""
        if self._connection_registry is None:
            self._connection_registry = ConnectionRegistry(
                max_total_connections=self.settings.max_total_connections,
                reporter=self.reporter,
            )
        return self._connection_registry

    @property
    def shutdown_manager(self) -> ShutdownManager:
        """Get ShutdownManager singleton."""
        if self._shutdown_manager is None:
            self._shutdown_manager = ShutdownManager(
                shutdown_timeout=self.settings.shutdown_timeout,
                grace_period=self.settings.shutdown_grace_period,
                reporter=self.reporter,
            )
        return self._shutdown_manager

    @property
    def heartbeat_monitor(self) -> HeartbeatMonitor:
        """Get HeartbeatMonitor singleton."""
        if self._heartbeat_monitor is None:
            self._heartbeat_monitor = HeartbeatMonitor(
                registry=self.connection_registry,
                broadcaster=self.get_broadcast_use_case(),
                interval=self.settings.heartbeat_interval,
                enabled=self.settings.heartbeat_enabled,
                reporter=self.reporter,
            )
        return self._heartbeat_monitor

    def get_validate_submission_use_case(self) -> ValidateSubmissionUseCase:
        """Get ValidateSubmissionUseCase singleton holding the event vocabulary."""
        if self._validate_submission_use_case is None:
            self._validate_submission_use_case = ValidateSubmissionUseCase(
                supported_events=self.settings.supported_events,
                max_message_size=self.settings.max_message_size,
            )
        return self._validate_submission_use_case

    def get_broadcast_use_case(self) -> BroadcastEventUseCase:
        """Get BroadcastEventUseCase singleton."""
        if self._broadcast_use_case is None:
            self._broadcast_use_case = BroadcastEventUseCase(
                registry=self.connection_registry,
                validator=self.get_validate_submission_use_case(),
                send_timeout=self.settings.send_timeout,
                reporter=self.reporter,
            )
        return self._broadcast_use_case

    def get_admit_client_use_case(self) -> AdmitClientUseCase:
        """Get AdmitClientUseCase."""
        return AdmitClientUseCase(
            registry=self.connection_registry,
            validator=self.get_validate_submission_use_case(),
            reporter=self.reporter,
        )

    def get_drain_use_case(self) -> DrainConnectionsUseCase:
        """Get DrainConnectionsUseCase."""
        return DrainConnectionsUseCase(
            registry=self.connection_registry,
            grace_period=self.settings.shutdown_grace_period,
            send_timeout=self.settings.send_timeout,
            reporter=self.reporter,
        )

    def get_health_checker(self) -> RelayHealthChecker:
        """Get RelayHealthChecker bound to the live registry."""
        return RelayHealthChecker(
            settings=self.settings,
            registry=self.connection_registry,
            shutdown_manager=self.shutdown_manager,
            started_at=self.stats["start_time"],
        )

    def increment_stat(self, stat_name: str, amount: int = 1) -> None:
        """
        Increment a statistic counter.

        Args:
            stat_name: Name of statistic to increment
            amount: Amount to increment by
        """
        if stat_name in self.stats:
            self.stats[stat_name] += amount

    def get_uptime_seconds(self) -> float:
        """Get server uptime in seconds."""
        return (datetime.now(timezone.utc) - self.stats["start_time"]).total_seconds()
