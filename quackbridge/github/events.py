"""
Copilot Agent Protocol Events

Server-sent event encoders understood by the Copilot chat client.

Every response streams an acknowledgement first, then zero or more text
events, then either a done event or a single errors event.
"""

import json
from collections.abc import Iterable

from quackbridge.github.models import CopilotError


def _data_event(payload: object) -> str:
    return f"data: {json.dumps(payload, ensure_ascii=False)}\n\n"


def create_ack_event() -> str:
    """Empty assistant delta telling the client the request was accepted."""
    return _data_event({"choices": [{"index": 0, "delta": {"content": "", "role": "assistant"}}]})


def create_text_event(content: str) -> str:
    """Assistant delta carrying ``content``."""
    return _data_event(
        {"choices": [{"index": 0, "delta": {"content": content, "role": "assistant"}}]}
    )


def create_done_event() -> str:
    """Final stop delta followed by the ``[DONE]`` sentinel."""
    return (
        _data_event({"choices": [{"index": 0, "finish_reason": "stop", "delta": {"content": None}}]})
        + "data: [DONE]\n\n"
    )


def create_errors_event(errors: Iterable[CopilotError]) -> str:
    """``copilot_errors`` event carrying one or more errors."""
    payload = [error.model_dump() for error in errors]
    return f"event: copilot_errors\n{_data_event(payload)}"


def missing_token_error() -> CopilotError:
    return CopilotError(
        message="No GitHub token provided in the request headers.",
        code="MISSING_GITHUB_TOKEN",
        identifier="missing_github_token",
    )


def processing_error(exc: BaseException | None) -> CopilotError:
    message = str(exc) if isinstance(exc, Exception) and str(exc) else "Unknown error"
    return CopilotError(
        message=message,
        code="PROCESSING_ERROR",
        identifier="processing_error",
    )
