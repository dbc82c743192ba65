"""
GitHub Copilot Extension Module

The external collaborators of the bridge: request verification, the agent
protocol event envelope, and GitHub identity lookup.
"""

from quackbridge.github.client import GitHubAPIError, GitHubClient
from quackbridge.github.events import (
    create_ack_event,
    create_done_event,
    create_errors_event,
    create_text_event,
)
from quackbridge.github.models import (
    CopilotError,
    CopilotMessage,
    CopilotRequestPayload,
    GitHubUser,
)
from quackbridge.github.verification import RequestVerifier, VerificationResult

__all__ = [
    "GitHubClient",
    "GitHubAPIError",
    "RequestVerifier",
    "VerificationResult",
    "CopilotError",
    "CopilotMessage",
    "CopilotRequestPayload",
    "GitHubUser",
    "create_ack_event",
    "create_text_event",
    "create_done_event",
    "create_errors_event",
]
