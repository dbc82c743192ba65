"""
LLM Provider Module

Prompt-service abstraction used by the pipeline for SQL synthesis and
general chat answers.

Usage:
    from quackbridge.config import get_settings
    from quackbridge.llm import LLMProviderFactory

    provider = LLMProviderFactory.create_copilot_provider(token, get_settings().copilot)
    response = await provider.prompt("Hello!")
    print(response.content)
"""

from quackbridge.llm.base import BaseLLMProvider
from quackbridge.llm.copilot import CopilotProvider
from quackbridge.llm.factory import LLMProviderFactory
from quackbridge.llm.models import LLMMessage, LLMRequest, LLMResponse, LLMUsage

__all__ = [
    "BaseLLMProvider",
    "CopilotProvider",
    "LLMProviderFactory",
    "LLMMessage",
    "LLMRequest",
    "LLMResponse",
    "LLMUsage",
]
