"""
Graceful shutdown manager.

Handles:
- Signal registration (SIGTERM, SIGINT)
- Shutdown state tracking
- Ordered shutdown callbacks (drain, stop heartbeats, stop server)
"""

import asyncio
import signal
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, List, Optional

from dingrelay.infrastructure.reporting import Emoji, SystemReporter


class ShutdownState(Enum):
    """Shutdown state enum."""

    RUNNING = "running"
    SHUTTING_DOWN = "shutting_down"
    SHUTDOWN = "shutdown"


class ShutdownManager:
    """
    Manages graceful shutdown of the relay.

    Coordinates shutdown sequence:
    1. Catch shutdown signals
    2. Set shutdown flag (new connections are refused)
    3. Run registered callbacks in order, bounded by shutdown_timeout
    4. Mark shutdown complete

    Attributes:
        state: Current shutdown state
        shutdown_timeout: Max seconds to wait for callbacks
        grace_period: Seconds clients get between notice and close
        shutdown_started_at: Timestamp when shutdown initiated
    """

    SIGNALS = (signal.SIGTERM, signal.SIGINT)

    def __init__(
        self,
        shutdown_timeout: float = 30,
        grace_period: float = 1,
        reporter: Optional[SystemReporter] = None,
    ):
        """
        Initialize shutdown manager.

        Args:
            shutdown_timeout: Maximum seconds to wait for shutdown callbacks
            grace_period: Seconds to wait for graceful WebSocket closure
            reporter: Optional SystemReporter for logging
        """
        self.shutdown_timeout = shutdown_timeout
        self.grace_period = grace_period
        self.reporter = reporter

        self.state = ShutdownState.RUNNING
        self.shutdown_started_at: Optional[datetime] = None
        self._shutdown_event = asyncio.Event()
        self._shutdown_callbacks: List[Callable] = []
        self._signal_loop: Optional[asyncio.AbstractEventLoop] = None

    def is_shutting_down(self) -> bool:
        """Check if shutdown is in progress or complete."""
        return self.state in (ShutdownState.SHUTTING_DOWN, ShutdownState.SHUTDOWN)

    def is_running(self) -> bool:
        """Check if service is running normally."""
        return self.state == ShutdownState.RUNNING

    def register_shutdown_callback(self, callback: Callable) -> None:
        """
        Register callback to be called on shutdown.

        Callbacks are called in registration order. Both sync functions and
        coroutine functions are accepted.

        Args:
            callback: Function to call on shutdown
        """
        self._shutdown_callbacks.append(callback)

    def setup_signal_handlers(self) -> bool:
        """
        Route SIGTERM (container stop) and SIGINT (Ctrl+C) to initiate_shutdown.

        Must be called from inside the running event loop. Signal handlers
        can only be installed from the main thread; elsewhere (for example
        under a test client) this is skipped.

        Returns:
            True if handlers were installed
        """
        try:
            loop = asyncio.get_running_loop()
            for sig in self.SIGNALS:
                loop.add_signal_handler(
                    sig,
                    lambda s=sig: asyncio.ensure_future(
                        self.initiate_shutdown(s.name)
                    ),
                )
        except (NotImplementedError, RuntimeError, ValueError) as e:
            if self.reporter:
                self.reporter.debug(
                    f"Signal handlers not installed: {type(e).__name__}: {e}",
                    context="Shutdown",
                )
            return False

        self._signal_loop = loop
        if self.reporter:
            self.reporter.info(
                "Signal handlers registered for graceful shutdown",
                context="Shutdown",
                verbose_level=2,
            )
        return True

    def restore_signal_handlers(self) -> None:
        """Remove handlers installed by setup_signal_handlers."""
        if self._signal_loop is None:
            return
        for sig in self.SIGNALS:
            self._signal_loop.remove_signal_handler(sig)
        self._signal_loop = None

    async def initiate_shutdown(self, reason: str = "manual") -> bool:
        """
        Initiate graceful shutdown sequence.

        Args:
            reason: Reason for shutdown (signal name, lifespan, etc.)

        Returns:
            True if this call started the shutdown, False if already started
        """
        if self.state != ShutdownState.RUNNING:
            return False

        self.state = ShutdownState.SHUTTING_DOWN
        self.shutdown_started_at = datetime.now(timezone.utc)
        self._shutdown_event.set()

        if self.reporter:
            self.reporter.warning(
                f"{Emoji.SYSTEM.SHUTDOWN} Graceful shutdown initiated (reason: {reason})",
                context="Shutdown",
            )

        try:
            await asyncio.wait_for(
                self._run_callbacks(), timeout=self.shutdown_timeout
            )
        except asyncio.TimeoutError:
            if self.reporter:
                self.reporter.warning(
                    f"Shutdown callbacks timed out after {self.shutdown_timeout}s",
                    context="Shutdown",
                )

        self.mark_shutdown_complete()
        return True

    async def _run_callbacks(self) -> None:
        for callback in self._shutdown_callbacks:
            try:
                if asyncio.iscoroutinefunction(callback):
                    await callback()
                else:
                    callback()
            except Exception as e:
                # One failing callback must not block the rest of the sequence
                if self.reporter:
                    self.reporter.error(
                        f"Shutdown callback {getattr(callback, '__name__', callback)} "
                        f"failed: {type(e).__name__}: {e}",
                        context="Shutdown",
                    )

    async def wait_for_shutdown(self) -> None:
        """Block until shutdown is initiated."""
        await self._shutdown_event.wait()

    def mark_shutdown_complete(self) -> None:
        """Mark shutdown as complete."""
        self.state = ShutdownState.SHUTDOWN

    def get_shutdown_info(self) -> dict:
        """
        Get shutdown status information.

        Returns:
            Dictionary with shutdown status details
        """
        return {
            "state": self.state.value,
            "is_shutting_down": self.is_shutting_down(),
            "shutdown_started_at": (
                self.shutdown_started_at.isoformat()
                if self.shutdown_started_at
                else None
            ),
            "shutdown_timeout": self.shutdown_timeout,
            "grace_period": self.grace_period,
        }
