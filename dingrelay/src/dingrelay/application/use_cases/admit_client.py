"""
Use case for admitting a new connection and greeting it.
"""

from typing import Optional

from dingrelay.application.dto import WelcomeFrame
from dingrelay.application.use_cases.validate_submission import (
    ValidateSubmissionUseCase,
)
from dingrelay.domain.endpoint import Endpoint
from dingrelay.domain.value_objects import ClientId
from dingrelay.infrastructure.reporting import SystemReporter
from dingrelay.infrastructure.websocket.connection_registry import ConnectionRegistry


class AdmitClientUseCase:
    """
    Use case for connection admission.

    Assigns a ClientId and delivers the welcome handshake before the
    transport reads any submission from the connection.
    """

    def __init__(
        self,
        registry: ConnectionRegistry,
        validator: ValidateSubmissionUseCase,
        reporter: Optional[SystemReporter] = None,
    ):
        self.registry = registry
        self.validator = validator
        self.reporter = reporter

    async def execute(self, endpoint: Endpoint) -> ClientId:
        """
        Admit a connection and send it the welcome frame.

        Args:
            endpoint: Writable handle for the new connection

        Returns:
            ClientId assigned to the connection

        Raises:
            ConnectionLimitExceeded: If the registry is full
            Exception: Whatever the transport raised if the welcome
                could not be written (the client is removed first)
        """
        client_id = await self.registry.admit(endpoint)

        welcome = WelcomeFrame(
            client_id=str(client_id),
            supported_events=self.validator.supported_events,
        )

        try:
            await endpoint.send_json(welcome.to_wire())
        except Exception:
            await self.registry.remove(client_id)
            raise

        if self.reporter:
            self.reporter.debug(
                f"Welcome sent: client={client_id}",
                context="Admission",
            )

        return client_id
