"""
Pub/Sub push endpoint (Delivery Receiver).

Responsibilities:
- Accept one push envelope per POST
- Reject anything that is not a well-formed envelope with 400
- Log receipt and hand the raw payload to the WorkDispatcher
- Return the dispatcher's status to Pub/Sub (200 empty body = ack)

NOTE:
- No business validation of the payload happens here.
- Other HTTP methods on this path get FastAPI's 405 and never reach the dispatcher.
"""

from __future__ import annotations

from fastapi import APIRouter, Request, Response
from pydantic import ValidationError

from src.consumer.config.settings import settings
from src.consumer.contracts.pubsub_envelope import parse_push_envelope
from src.consumer.logging.logger import setup_logger
from src.consumer.runtime.dispatcher import WorkDispatcher
from src.consumer.runtime.outcome import Outcome

logger = setup_logger(__name__)

router = APIRouter()


def _payload_preview(data: bytes, limit: int) -> str:
    text = data[:limit].decode("utf-8", errors="replace")
    if len(data) > limit:
        text += "..."
    return text


@router.post(settings.push_path)
async def pubsub_push(request: Request) -> Response:
    """
    Pub/Sub push subscription entrypoint.
    """
    body = await request.body()

    try:
        envelope = parse_push_envelope(body)
    except ValidationError as exc:
        logger.warning(
            "Error decoding Pub/Sub message | body_bytes=%s | errors=%s",
            len(body),
            exc.errors(include_url=False, include_input=False),
        )
        return Response("400 - Bad Request", status_code=400, media_type="text/plain")

    message = envelope.message
    logger.info(
        "Received Pub/Sub message | message_id=%s | subscription=%s | data=%s",
        message.id,
        envelope.subscription,
        _payload_preview(message.data, settings.log_payload_max_chars),
    )

    dispatcher: WorkDispatcher = request.app.state.dispatcher
    result = await dispatcher.dispatch(
        message.data,
        message_id=message.id,
        subscription=envelope.subscription,
        attributes=message.attributes,
    )

    if result.outcome is Outcome.SUCCEEDED:
        # Push ACK is a bare 200
        return Response(status_code=result.status_code)

    return Response(result.detail, status_code=result.status_code, media_type="text/plain")
