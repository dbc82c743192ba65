"""
Copilot LLM Provider

Implementation of BaseLLMProvider for the GitHub Copilot chat completions
endpoint. The endpoint is OpenAI-compatible, so the official openai SDK is
used with the caller's GitHub token as the API key.
"""

import logging

import openai
from openai import AsyncOpenAI

from quackbridge.llm.base import BaseLLMProvider
from quackbridge.llm.models import LLMRequest, LLMResponse, LLMUsage

logger = logging.getLogger(__name__)


class CopilotProvider(BaseLLMProvider):
    """
    Copilot prompt provider.

    One instance is created per request because it authenticates with the
    requesting user's token. Call close() when the request is done.
    """

    def __init__(
        self,
        token: str,
        base_url: str = "https://api.githubcopilot.com",
        model: str = "gpt-4o",
        temperature: float = 0.0,
        max_tokens: int = 2000,
        timeout: int = 60,
        system_prompt: str | None = None,
        integration_id: str | None = None,
    ):
        """
        Initialize Copilot provider.

        Args:
            token: GitHub user-to-server token from X-GitHub-Token
            base_url: Copilot API base URL
            model: Default model to use
            temperature: Default temperature
            max_tokens: Default max tokens
            timeout: Request timeout
            system_prompt: System message sent by prompt()
            integration_id: Optional Copilot-Integration-Id header
        """
        super().__init__(
            provider_name="copilot",
            temperature=temperature,
            max_tokens=max_tokens,
            timeout=timeout,
            system_prompt=system_prompt,
        )

        self.model = model
        default_headers = {"Copilot-Integration-Id": integration_id} if integration_id else None
        self.client = AsyncOpenAI(
            api_key=token,
            base_url=base_url,
            timeout=float(timeout),
            default_headers=default_headers,
        )

    async def generate(self, request: LLMRequest) -> LLMResponse:
        """
        Generate completion using the Copilot API.

        Raises:
            openai.APIError: On API errors
            openai.APITimeoutError: On timeout
        """
        request = self._apply_defaults(request)
        self._log_request(request)

        try:
            messages = [{"role": msg.role, "content": msg.content} for msg in request.messages]

            response = await self.client.chat.completions.create(
                model=request.model or self.model,
                messages=messages,
                temperature=request.temperature,
                max_tokens=request.max_tokens,
                **request.metadata,
            )

            usage = LLMUsage()
            if response.usage is not None:
                usage = LLMUsage(
                    prompt_tokens=response.usage.prompt_tokens or 0,
                    completion_tokens=response.usage.completion_tokens or 0,
                    total_tokens=response.usage.total_tokens or 0,
                )

            llm_response = LLMResponse(
                content=response.choices[0].message.content or "",
                model=response.model or self.model,
                usage=usage,
                finish_reason=self._map_finish_reason(response.choices[0].finish_reason),
                provider="copilot",
                metadata={"id": response.id},
            )

            self._log_response(llm_response)
            return llm_response

        except openai.APITimeoutError as e:
            logger.error(f"Copilot API timeout: {e}")
            raise
        except openai.APIError as e:
            logger.error(f"Copilot API error: {e}")
            raise

    async def close(self) -> None:
        """Close the HTTP connection pool owned by the client."""
        await self.client.close()

    def _map_finish_reason(self, reason: str | None) -> str:
        """Map OpenAI-style finish reason to our standard format."""
        if reason in ("stop", "length", "content_filter"):
            return reason
        return "stop"
