"""
Copilot Extension Models

Pydantic models for the Copilot agent request payload, protocol errors,
and the GitHub API objects the bridge reads.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class CopilotReference(BaseModel):
    """Context attached to a message by the Copilot client (file, selection, ...)."""

    type: str = Field(..., description="Reference type")
    id: str | None = Field(None, description="Reference identifier")
    data: dict[str, Any] = Field(default_factory=dict, description="Reference payload")

    model_config = ConfigDict(extra="allow")


class CopilotMessage(BaseModel):
    """Single message in the Copilot conversation."""

    role: str = Field(..., description="Message role (user, assistant, system)")
    content: str = Field(default="", description="Message text")
    name: str | None = Field(None, description="Optional participant name")
    copilot_references: list[CopilotReference] = Field(
        default_factory=list, description="Attached references"
    )

    model_config = ConfigDict(extra="allow")


class CopilotRequestPayload(BaseModel):
    """Body POSTed by GitHub to a Copilot agent."""

    messages: list[CopilotMessage] = Field(default_factory=list, description="Conversation")
    copilot_thread_id: str | None = Field(None, description="Copilot thread identifier")
    agent: str | None = Field(None, description="Agent slug")

    model_config = ConfigDict(extra="allow")

    @property
    def user_message(self) -> str:
        """Content of the latest message, or an empty string."""
        if not self.messages:
            return ""
        return self.messages[-1].content


class CopilotError(BaseModel):
    """Error entry sent in a ``copilot_errors`` event."""

    type: Literal["agent", "reference", "function"] = Field(default="agent")
    message: str = Field(..., description="Human readable message")
    code: str = Field(..., description="Machine readable error code")
    identifier: str = Field(..., description="Stable error identifier")


class GitHubUser(BaseModel):
    """Subset of ``GET /user`` used by the bridge."""

    login: str = Field(..., description="GitHub login")
    id: int | None = Field(None, description="Numeric account id")
    name: str | None = Field(None, description="Display name")

    model_config = ConfigDict(extra="ignore")


class CopilotPublicKey(BaseModel):
    """One entry from ``GET /meta/public_keys/copilot_api``."""

    key_identifier: str
    key: str
    is_current: bool = False
