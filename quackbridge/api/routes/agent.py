"""
Copilot Agent Route

The single endpoint GitHub calls for every message sent to the extension.
"""

import logging

from fastapi import APIRouter, Header, HTTPException, Request, status
from fastapi.responses import PlainTextResponse, Response, StreamingResponse

from quackbridge.github.events import create_errors_event, missing_token_error

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/")
async def agent(
    request: Request,
    x_github_token: str = Header(default="", alias="X-GitHub-Token"),
    signature: str = Header(default="", alias="Github-Public-Key-Signature"),
    key_id: str = Header(default="", alias="Github-Public-Key-Identifier"),
) -> Response:
    """
    Verify a Copilot agent request and stream the answer.

    Returns:
        401 text/plain when the signature does not verify, a single
        MISSING_GITHUB_TOKEN errors event when no token was sent, otherwise a
        text/html stream of protocol events.

    Raises:
        HTTPException: 503 if the service has not finished starting
    """
    from quackbridge.api.main import app_state

    verifier = app_state.get("verifier")
    pipeline = app_state.get("pipeline")
    if verifier is None or pipeline is None:
        logger.error("Agent request received before the service was initialized")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service not initialized. Please try again later.",
        )

    body = await request.body()
    result = await verifier.verify_and_parse(body, signature, key_id, token=x_github_token)

    if not result.is_valid:
        logger.error("Request verification failed")
        return PlainTextResponse(
            "Request could not be verified",
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    if not x_github_token:
        return PlainTextResponse(create_errors_event([missing_token_error()]))

    return StreamingResponse(
        pipeline.stream(result.payload.user_message, x_github_token),
        media_type="text/html",
        headers={"X-Content-Type-Options": "nosniff"},
    )
