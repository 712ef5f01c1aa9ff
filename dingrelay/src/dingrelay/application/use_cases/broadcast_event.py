"""
Use case for fanning events out to every other connected client.
"""

import asyncio
from typing import Any, Dict, Optional

from dingrelay.application.dto import BroadcastOutcome, BroadcastStatus, HeartbeatFrame
from dingrelay.application.use_cases.validate_submission import (
    RawSubmission,
    ValidateSubmissionUseCase,
)
from dingrelay.domain.endpoint import Endpoint
from dingrelay.domain.value_objects import ClientId, EventEnvelope, now_millis
from dingrelay.infrastructure.reporting import Emoji, SystemReporter
from dingrelay.infrastructure.websocket.connection_registry import ConnectionRegistry


class BroadcastEventUseCase:
    """
    Use case for broadcasting submissions to registry members.

    Validates the submission, stamps it with a server timestamp and writes
    it to every registered endpoint except the sender's. A failed or
    timed-out write removes that recipient from the registry and never
    aborts delivery to the others.
    """

    def __init__(
        self,
        registry: ConnectionRegistry,
        validator: ValidateSubmissionUseCase,
        send_timeout: float = 5.0,
        reporter: Optional[SystemReporter] = None,
    ):
        """
        Initialize broadcaster.

        Args:
            registry: Registry of live connections
            validator: Submission validator holding the event vocabulary
            send_timeout: Seconds a single recipient write may take
            reporter: Optional SystemReporter for logging
        """
        self.registry = registry
        self.validator = validator
        self.send_timeout = send_timeout
        self.reporter = reporter

    async def submit(
        self,
        sender_id: Optional[ClientId],
        raw: RawSubmission,
    ) -> BroadcastOutcome:
        """
        Validate a submission and fan it out.

        Args:
            sender_id: Originating client (excluded from delivery), or None
            raw: Raw submission (JSON text/bytes or decoded dict)

        Returns:
            BroadcastOutcome with attempted/delivered counts

        Raises:
            MalformedSubmissionError: If the submission is unusable
        """
        submission = self.validator.validate(raw)

        if not self.validator.is_supported(submission.event_kind):
            if self.reporter:
                self.reporter.warning(
                    f"{Emoji.DROP} Unknown event kind dropped: "
                    f"kind={submission.event_kind}, sender={sender_id}",
                    context="Broadcaster",
                    verbose_level=2,
                )
            return BroadcastOutcome.dropped(submission.event_kind)

        envelope = EventEnvelope(submission.event_kind, submission.payload)
        return await self.broadcast(envelope, exclude=sender_id)

    async def broadcast(
        self,
        envelope: EventEnvelope,
        exclude: Optional[ClientId] = None,
    ) -> BroadcastOutcome:
        """
        Write an envelope to every registered endpoint except one.

        Args:
            envelope: Validated, stamped event
            exclude: Client that must not receive the event

        Returns:
            BroadcastOutcome aggregated from per-recipient results
        """
        recipients = [
            (client_id, endpoint)
            for client_id, endpoint in await self.registry.snapshot()
            if client_id != exclude
        ]
        frame = envelope.to_wire()

        results = await asyncio.gather(
            *(self._deliver_to_member(cid, endpoint, frame) for cid, endpoint in recipients)
        )

        # None means the client left between snapshot and write
        failed = [cid for (cid, _), ok in zip(recipients, results) if ok is False]
        delivered = sum(1 for ok in results if ok)
        for client_id in failed:
            await self.registry.remove(client_id)

        outcome = BroadcastOutcome(
            status=BroadcastStatus.PUBLISHED,
            event_kind=envelope.event_kind,
            attempted=len(recipients),
            delivered=delivered,
            failed=failed,
            server_timestamp=envelope.server_timestamp,
        )

        if self.reporter:
            self.reporter.info(
                f"{Emoji.NETWORK.BROADCAST} Broadcast {envelope.event_kind} "
                f"from {exclude}: delivered={outcome.delivered}/{outcome.attempted}, "
                f"dropped_recipients={len(failed)}",
                context="Broadcaster",
                verbose_level=2,
            )

        return outcome

    async def heartbeat(self, client_id: ClientId, endpoint: Endpoint) -> bool:
        """
        Push a no-op frame to one endpoint.

        A failed write is handled like any other: the client is removed.

        Returns:
            True if the endpoint accepted the frame
        """
        frame = HeartbeatFrame(server_timestamp=now_millis()).to_wire()
        ok = await self._deliver(client_id, endpoint, frame)
        if not ok:
            await self.registry.remove(client_id)
        return ok

    async def _deliver_to_member(
        self,
        client_id: ClientId,
        endpoint: Endpoint,
        frame: Dict[str, Any],
    ) -> Optional[bool]:
        if not self.registry.contains(client_id):
            return None
        return await self._deliver(client_id, endpoint, frame)

    async def _deliver(
        self,
        client_id: ClientId,
        endpoint: Endpoint,
        frame: Dict[str, Any],
    ) -> bool:
        try:
            await asyncio.wait_for(endpoint.send_json(frame), timeout=self.send_timeout)
            return True
        except asyncio.TimeoutError:
            if self.reporter:
                self.reporter.warning(
                    f"{Emoji.NETWORK.TIMEOUT} Write timed out after "
                    f"{self.send_timeout}s: client={client_id}",
                    context="Broadcaster",
                )
            return False
        except Exception as e:
            if self.reporter:
                self.reporter.warning(
                    f"{Emoji.ERROR} Write failed: client={client_id}, "
                    f"error={type(e).__name__}: {e}",
                    context="Broadcaster",
                )
            return False
