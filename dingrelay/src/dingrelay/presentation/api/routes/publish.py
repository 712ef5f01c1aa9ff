"""
Event publishing endpoint for request/response clients.
"""

from fastapi import APIRouter, Depends, HTTPException, Request, status

from dingrelay.di import Container
from dingrelay.domain.exceptions import MalformedSubmissionError
from dingrelay.domain.value_objects import ClientId
from dingrelay.presentation.api.dependencies import get_container
from dingrelay.presentation.schemas import (
    ErrorResponse,
    PublishRequest,
    PublishResponse,
)

router = APIRouter(tags=["publish"])


def _malformed(reason: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={"error": MalformedSubmissionError.code, "message": reason},
    )


@router.post(
    "/publish",
    response_model=PublishResponse,
    responses={400: {"model": ErrorResponse}},
    openapi_extra={
        "requestBody": {
            "content": {
                "application/json": {"schema": PublishRequest.model_json_schema()}
            },
            "required": True,
        }
    },
)
async def publish_event(
    request: Request,
    container: Container = Depends(get_container),
):
    """
    Announce an event on behalf of a client.

    The sender is explicit here because the publisher is not necessarily
    the one listening. When senderId is given, that client is excluded
    from delivery.

    Returns:
        Publication result with recipients reached

    Raises:
        HTTPException:
            - 400: Unparseable body, missing eventKind or bad senderId
            - 503: Relay is shutting down
    """
    if container.shutdown_manager.is_shutting_down():
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"error": "SHUTTING_DOWN", "message": "Server is shutting down"},
        )

    validator = container.get_validate_submission_use_case()
    broadcaster = container.get_broadcast_use_case()

    body = await request.body()
    container.increment_stat("total_messages_received")

    try:
        message = validator.decode(body)
        submission = validator.validate(message)

        # Unknown kinds come back without a sender
        sender_id = None
        if submission.sender_id is not None:
            try:
                sender_id = ClientId.parse(submission.sender_id)
            except ValueError as e:
                raise MalformedSubmissionError(f"Invalid senderId: {e}")

        outcome = await broadcaster.submit(sender_id, message)

    except MalformedSubmissionError as e:
        container.increment_stat("malformed_submissions")
        raise _malformed(e.reason)

    if outcome.published:
        container.increment_stat("total_messages_sent", outcome.delivered)
    else:
        container.increment_stat("dropped_events")

    return PublishResponse(
        status=outcome.status.value,
        event_kind=outcome.event_kind,
        attempted=outcome.attempted,
        delivered=outcome.delivered,
        server_timestamp=outcome.server_timestamp,
    )
