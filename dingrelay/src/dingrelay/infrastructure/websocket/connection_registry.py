"""
Connection registry infrastructure with production logging.
"""

import asyncio
from typing import Dict, List, Optional, Tuple

from dingrelay.domain.endpoint import Endpoint
from dingrelay.domain.entities import Client
from dingrelay.domain.exceptions import ConnectionLimitExceeded
from dingrelay.domain.value_objects import ClientId
from dingrelay.infrastructure.reporting import Emoji, SystemReporter

RegistryEntry = Tuple[ClientId, Endpoint]


class ConnectionRegistry:
    """
    Owns the ClientId -> Endpoint association for every live connection.

    All mutations and snapshots are serialized through a single asyncio
    lock, so a broadcast never observes a half-updated mapping. Writes to
    endpoints never happen while the lock is held.
    """

    MAX_ID_ATTEMPTS = 8

    def __init__(
        self,
        max_total_connections: int = 0,
        reporter: Optional[SystemReporter] = None,
    ):
        self._clients: Dict[ClientId, Client] = {}
        self._lock = asyncio.Lock()
        self.max_total_connections = max_total_connections
        self.reporter = reporter

        if self.reporter:
            self.reporter.info(
                f"ConnectionRegistry initialized "
                f"(limit: total={max_total_connections})",
                context="ConnectionRegistry",
                verbose_level=2,
            )

    def _new_client_id(self) -> ClientId:
        """Generate an identifier no live connection holds."""
        for _ in range(self.MAX_ID_ATTEMPTS):
            client_id = ClientId.generate()
            if client_id not in self._clients:
                return client_id
        # A run of collisions on 128 random bits means the entropy source is broken
        raise RuntimeError("Unable to generate a unique client ID")

    def check_connection_limits(self) -> None:
        """Check if one more connection would exceed the configured limit."""
        if self.max_total_connections <= 0:
            return

        total = len(self._clients)
        if total >= self.max_total_connections:
            if self.reporter:
                self.reporter.warning(
                    f"{Emoji.ERROR} Global connection limit exceeded "
                    f"(current={total}, limit={self.max_total_connections})",
                    context="ConnectionRegistry",
                    verbose_level=1,
                )
            raise ConnectionLimitExceeded(
                f"Global connection limit reached: {self.max_total_connections}",
                limit_type="global",
            )

    async def admit(self, endpoint: Endpoint) -> ClientId:
        """
        Register a new connection.

        Args:
            endpoint: Writable handle for the connection

        Returns:
            Freshly generated ClientId

        Raises:
            ConnectionLimitExceeded: If max_total_connections is reached
        """
        async with self._lock:
            self.check_connection_limits()

            client = Client(endpoint=endpoint, client_id=self._new_client_id())
            self._clients[client.id] = client
            total = len(self._clients)

        if self.reporter:
            self.reporter.info(
                f"{Emoji.NETWORK.CONNECTED} Client admitted: "
                f"client={client.id}, total={total}",
                context="ConnectionRegistry",
                verbose_level=2,
            )

        return client.id

    async def remove(self, client_id: ClientId) -> bool:
        """
        Remove a connection. Removing an absent ID is a no-op.

        Returns:
            True if an entry was removed, False if it was already gone
        """
        async with self._lock:
            client = self._clients.pop(client_id, None)
            total = len(self._clients)

        if client and self.reporter:
            self.reporter.info(
                f"{Emoji.NETWORK.DISCONNECT} Client removed: "
                f"client={client_id}, total={total}, "
                f"age={client.connection_age_seconds():.1f}s",
                context="ConnectionRegistry",
                verbose_level=2,
            )

        return client is not None

    async def snapshot(self) -> List[RegistryEntry]:
        """Point-in-time copy of every (ClientId, Endpoint) pair."""
        async with self._lock:
            return [(cid, client.endpoint) for cid, client in self._clients.items()]

    async def drain(self) -> List[RegistryEntry]:
        """
        Empty the registry in one step.

        Returns:
            Every (ClientId, Endpoint) pair that was registered
        """
        async with self._lock:
            drained = [
                (cid, client.endpoint) for cid, client in self._clients.items()
            ]
            self._clients.clear()

        if drained and self.reporter:
            self.reporter.info(
                f"{Emoji.SYSTEM.CLEANUP} Registry drained: removed={len(drained)}",
                context="ConnectionRegistry",
                verbose_level=2,
            )

        return drained

    def contains(self, client_id: ClientId) -> bool:
        """Check whether a client is still reachable."""
        return client_id in self._clients

    def get_total_connections(self) -> int:
        """Get number of active connections."""
        return len(self._clients)

    @property
    def size(self) -> int:
        return len(self._clients)
