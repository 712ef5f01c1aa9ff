"""
Per-connection heartbeat tasks.
"""

import asyncio
from typing import TYPE_CHECKING, Dict, Optional

from dingrelay.domain.endpoint import Endpoint
from dingrelay.domain.value_objects import ClientId
from dingrelay.infrastructure.reporting import Emoji, SystemReporter
from dingrelay.infrastructure.websocket.connection_registry import ConnectionRegistry

if TYPE_CHECKING:
    from dingrelay.application.use_cases import BroadcastEventUseCase


class HeartbeatMonitor:
    """
    Runs one periodic heartbeat task per connection.

    Each task pushes a no-op frame every `interval` seconds and ends on
    its own once the client's registry entry is gone or a write fails,
    so no heartbeat outlives its connection.
    """

    def __init__(
        self,
        registry: ConnectionRegistry,
        broadcaster: "BroadcastEventUseCase",
        interval: float = 30,
        enabled: bool = True,
        reporter: Optional[SystemReporter] = None,
    ):
        self.registry = registry
        self.broadcaster = broadcaster
        self.interval = interval
        self.enabled = enabled
        self.reporter = reporter
        self._tasks: Dict[ClientId, asyncio.Task] = {}

    def start(self, client_id: ClientId, endpoint: Endpoint) -> Optional[asyncio.Task]:
        """
        Start the heartbeat for one connection.

        Returns:
            The running task, or None when heartbeats are disabled
        """
        if not self.enabled:
            return None

        self.stop(client_id)
        task = asyncio.create_task(
            self._run(client_id, endpoint),
            name=f"heartbeat-{client_id}",
        )
        self._tasks[client_id] = task
        task.add_done_callback(lambda _t, cid=client_id: self._forget(cid, _t))
        return task

    def stop(self, client_id: ClientId) -> None:
        """Cancel the heartbeat for one connection (no-op if none runs)."""
        task = self._tasks.pop(client_id, None)
        if task and not task.done():
            task.cancel()

    async def stop_all(self) -> None:
        """Cancel every heartbeat and wait for the tasks to finish."""
        tasks = list(self._tasks.values())
        self._tasks.clear()
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    @property
    def active_count(self) -> int:
        return len(self._tasks)

    def _forget(self, client_id: ClientId, task: asyncio.Task) -> None:
        if self._tasks.get(client_id) is task:
            del self._tasks[client_id]

    async def _run(self, client_id: ClientId, endpoint: Endpoint) -> None:
        if self.reporter:
            self.reporter.debug(
                f"{Emoji.NETWORK.HEARTBEAT} Heartbeat started "
                f"(client={client_id}, interval={self.interval}s)",
                context="Heartbeat",
            )

        while True:
            await asyncio.sleep(self.interval)

            if not self.registry.contains(client_id):
                break

            if not await self.broadcaster.heartbeat(client_id, endpoint):
                if self.reporter:
                    self.reporter.info(
                        f"{Emoji.NETWORK.DISCONNECT} Dead connection detected "
                        f"by heartbeat: client={client_id}",
                        context="Heartbeat",
                        verbose_level=2,
                    )
                break

        if self.reporter:
            self.reporter.debug(
                f"Heartbeat stopped (client={client_id})",
                context="Heartbeat",
            )
