"""
Google Chat Webhook Route

Classifies inbound events, answers the static ones synchronously and hands
MESSAGE events to the background turn runner.
"""

import logging

from fastapi import APIRouter, HTTPException, Request, status
from fastapi.responses import JSONResponse, PlainTextResponse

from databot.models.errors import AuthError
from databot.models.events import EventType, InboundEvent

logger = logging.getLogger(__name__)

router = APIRouter()

WELCOME_TEXT = "Thanks for adding me! Ask a question."
EMPTY_MESSAGE_TEXT = "Ask me a question about the data."


@router.post("/googlechat", response_model=None)
async def googlechat(request: Request) -> JSONResponse | PlainTextResponse:
    """
    Handle a Google Chat event.

    Returns:
        A synchronous reply for ADDED_TO_SPACE and unknown events,
        ``null`` for REMOVED_FROM_SPACE and accepted MESSAGE events.
    """
    if "application/json" not in request.headers.get("content-type", ""):
        return PlainTextResponse(
            "Content-Type must be application/json",
            status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
        )

    try:
        payload = await request.json()
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Request body is not valid JSON",
        ) from e

    event = InboundEvent.from_payload(payload if isinstance(payload, dict) else None)
    logger.info(f"Received {event.raw_type} event", extra={"space": event.space})

    if event.type is EventType.ADDED_TO_SPACE:
        return JSONResponse({"text": WELCOME_TEXT})

    if event.type is EventType.REMOVED_FROM_SPACE:
        return JSONResponse(None)

    if event.type is EventType.MESSAGE:
        return await _accept_message(event)

    return JSONResponse({"text": f"ERROR: Received unknown event type: {event.raw_type}"})


async def _accept_message(event: InboundEvent) -> JSONResponse:
    from databot.api.main import app_state

    runner = app_state.get("runner")
    credentials = app_state.get("credentials")
    if runner is None or credentials is None:
        logger.error("MESSAGE received but the pipeline is not initialized")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Pipeline not initialized. Please try again later.",
        )

    if not event.text:
        return JSONResponse({"text": EMPTY_MESSAGE_TEXT})

    # Fail fast so token problems reach the user as a synchronous reply
    try:
        await credentials.get_token()
    except AuthError as e:
        logger.error(f"Could not obtain API token: {e}")
        return JSONResponse({"text": f"ERROR: Could not obtain API token. {e.message}"})

    runner.spawn(event)
    return JSONResponse(None)
