"""
Use case for draining every connection at shutdown.
"""

import asyncio
from typing import Optional

from fastapi import status

from dingrelay.application.dto import ShutdownFrame
from dingrelay.domain.endpoint import Endpoint
from dingrelay.domain.value_objects import ClientId
from dingrelay.infrastructure.reporting import Emoji, SystemReporter
from dingrelay.infrastructure.websocket.connection_registry import ConnectionRegistry


class DrainConnectionsUseCase:
    """
    Use case for graceful drain.

    Empties the registry in one step, then notifies and closes each
    endpoint that was registered. Safe to call more than once: a second
    call finds an empty registry and does nothing.
    """

    def __init__(
        self,
        registry: ConnectionRegistry,
        grace_period: float = 0,
        send_timeout: float = 5.0,
        reporter: Optional[SystemReporter] = None,
    ):
        """
        Initialize drain use case.

        Args:
            registry: Registry of live connections
            grace_period: Seconds between the shutdown notice and close
            send_timeout: Seconds each notice/close may take
            reporter: Optional SystemReporter for logging
        """
        self.registry = registry
        self.grace_period = grace_period
        self.send_timeout = send_timeout
        self.reporter = reporter

    async def execute(
        self,
        code: int = status.WS_1001_GOING_AWAY,
        reason: str = "Server shutting down",
    ) -> int:
        """
        Notify and close every registered endpoint, then leave the registry empty.

        Args:
            code: WebSocket close code
            reason: Close reason

        Returns:
            Number of connections drained
        """
        drained = await self.registry.drain()

        if not drained:
            return 0

        if self.reporter:
            self.reporter.info(
                f"{Emoji.SYSTEM.SHUTDOWN} Notifying {len(drained)} clients of shutdown",
                context="Drain",
                verbose_level=1,
            )

        notice = ShutdownFrame(code=code).to_wire()
        await asyncio.gather(
            *(self._notify(cid, endpoint, notice) for cid, endpoint in drained)
        )

        if self.grace_period > 0:
            await asyncio.sleep(self.grace_period)

        await asyncio.gather(
            *(self._close(cid, endpoint, code, reason) for cid, endpoint in drained)
        )

        if self.reporter:
            self.reporter.info(
                f"Closed {len(drained)} connections",
                context="Drain",
                verbose_level=1,
            )

        return len(drained)

    async def _notify(self, client_id: ClientId, endpoint: Endpoint, notice: dict) -> None:
        try:
            await asyncio.wait_for(endpoint.send_json(notice), timeout=self.send_timeout)
        except Exception as e:
            if self.reporter:
                self.reporter.debug(
                    f"Shutdown notice not delivered: client={client_id}, "
                    f"error={type(e).__name__}",
                    context="Drain",
                )

    async def _close(
        self, client_id: ClientId, endpoint: Endpoint, code: int, reason: str
    ) -> None:
        try:
            await asyncio.wait_for(
                endpoint.close(code=code, reason=reason), timeout=self.send_timeout
            )
        except Exception as e:
            if self.reporter:
                self.reporter.debug(
                    f"Close failed: client={client_id}, error={type(e).__name__}",
                    context="Drain",
                )
