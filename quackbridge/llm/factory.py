"""
LLM Provider Factory

Creates prompt providers from configuration. Providers are built per request
because each one carries the requesting user's token.
"""

import logging

from quackbridge.config import CopilotSettings
from quackbridge.llm.copilot import CopilotProvider

logger = logging.getLogger(__name__)


class LLMProviderFactory:
    """Factory for creating LLM provider instances."""

    @staticmethod
    def create_copilot_provider(token: str, config: CopilotSettings) -> CopilotProvider:
        """
        Create a Copilot provider authenticated as the requesting user.

        Raises:
            ValueError: If the token is empty
        """
        if not token:
            raise ValueError("A GitHub token is required to call the Copilot API")

        logger.debug("Creating copilot provider", extra={"model": config.model})

        return CopilotProvider(
            token=token,
            base_url=config.api_base_url,
            model=config.model,
            temperature=config.temperature,
            max_tokens=config.max_tokens,
            timeout=config.timeout,
            system_prompt=config.system_prompt,
            integration_id=config.integration_id,
        )
