"""
QuackBridge Pipeline Orchestrator

Answers one Copilot agent request as a stream of protocol events:

    ack → resolve GitHub user → lease the user's DuckDB → classify message
        SQL      → execute → render table
                   on failure → ask Copilot for DuckDB SQL → re-classify
                                → execute → render (or "Oops!" text)
        not SQL  → general Copilot prompt → pass the answer through
    → done

Any unexpected failure after the acknowledgement ends the stream with a
single PROCESSING_ERROR errors event and no done event.
"""

import logging
from collections.abc import AsyncIterator, Callable

from quackbridge.config import Settings, get_settings
from quackbridge.connectors.base import BaseConnector, QueryError, QueryResult
from quackbridge.connectors.registry import DuckDBConnectionRegistry
from quackbridge.github.client import GitHubClient
from quackbridge.github.events import (
    create_ack_event,
    create_done_event,
    create_errors_event,
    create_text_event,
    processing_error,
)
from quackbridge.llm.base import BaseLLMProvider
from quackbridge.llm.factory import LLMProviderFactory
from quackbridge.pipeline.formatter import ResultRenderer, create_renderer
from quackbridge.utils.pattern_matcher import QueryClassifier, SQLKeywordMatcher

logger = logging.getLogger(__name__)

SQL_SYNTHESIS_PROMPT = (
    "You are a DuckDB SQL Expert. Return a DuckDB SQL query for this prompt. "
    "do not add any comments - only pure DuckDB SQL allowed: {message}"
)

UNRESOLVED_SQL_NOTICE = (
    "Sorry, I couldn't turn that into a DuckDB query. "
    "Try rephrasing the request or send the SQL directly.\n"
)


def strip_sql_fences(text: str) -> str:
    """
    Drop Markdown fence lines and blank lines from an LLM answer.

    Falls back to the raw text when nothing is left.
    """
    lines = [
        line
        for line in text.splitlines()
        if line.strip() and not line.strip().startswith("```")
    ]
    return "\n".join(lines) or text


class CopilotQueryPipeline:
    """
    Request orchestrator for the Copilot agent endpoint.

    Usage:
        pipeline = CopilotQueryPipeline(registry=registry, github=GitHubClient())

        async for event in pipeline.stream("SELECT 42", token):
            await send(event)
    """

    def __init__(
        self,
        registry: DuckDBConnectionRegistry,
        github: GitHubClient,
        classifier: QueryClassifier | None = None,
        renderer: ResultRenderer | None = None,
        llm_factory: Callable[[str], BaseLLMProvider] | None = None,
        config: Settings | None = None,
    ):
        """
        Initialize pipeline with dependencies.

        Args:
            registry: Per-user DuckDB connection registry
            github: GitHub client for identity lookup
            classifier: SQL detector (default: keyword matcher)
            renderer: Result renderer (default: from PIPELINE_RENDER_MODE)
            llm_factory: Builds a prompt provider from a user token
            config: Application settings (default: get_settings())
        """
        self.config = config or get_settings()
        self.registry = registry
        self.github = github
        self.classifier = classifier or SQLKeywordMatcher()
        self.renderer = renderer or create_renderer(self.config.pipeline.render_mode)
        self.llm_factory = llm_factory or self._default_llm_factory
        self.coalesce_chunks = self.config.pipeline.coalesce_chunks

    def _default_llm_factory(self, token: str) -> BaseLLMProvider:
        return LLMProviderFactory.create_copilot_provider(token, self.config.copilot)

    async def stream(self, message: str, token: str) -> AsyncIterator[str]:
        """
        Answer one request as encoded protocol events.

        Args:
            message: Latest user message from the Copilot payload
            token: The caller's GitHub token

        Yields:
            Protocol event strings, ready to write to the response body
        """
        yield create_ack_event()

        try:
            user = await self.github.get_authenticated_user(token)
            llm = self.llm_factory(token)

            try:
                async with self.registry.lease(user.login) as connector:
                    async for chunk in self.answer(message, connector, llm, login=user.login):
                        yield create_text_event(chunk)
            finally:
                await llm.close()

            yield create_done_event()

        except Exception as e:
            logger.error(f"Error processing Copilot request: {e}", exc_info=True)
            yield create_errors_event([processing_error(e)])

    async def answer(
        self,
        message: str,
        connector: BaseConnector,
        llm: BaseLLMProvider,
        login: str | None = None,
    ) -> AsyncIterator[str]:
        """
        Produce the text chunks answering ``message``.

        QueryError is recovered here; every other error propagates.
        """
        if not self.classifier.is_likely_query(message):
            logger.info("Not a query, answering via prompt", extra={"login": login})
            response = await llm.prompt(message)
            logger.debug(f"LLM Output: {response.content}")
            yield response.content
            return

        extra = {"login": login}
        if isinstance(self.classifier, SQLKeywordMatcher):
            extra["keywords"] = self.classifier.matched_keywords(message)
        logger.info(f"{login}: {message}", extra=extra)
        try:
            result = await connector.execute(message)
        except QueryError as e:
            logger.info(f"Query failed ({e}), guessing SQL via prompt", extra={"login": login})
            async for chunk in self._synthesize_and_execute(message, connector, llm):
                yield chunk
            return

        for chunk in self._render(message, result):
            yield chunk

    async def _synthesize_and_execute(
        self,
        message: str,
        connector: BaseConnector,
        llm: BaseLLMProvider,
    ) -> AsyncIterator[str]:
        response = await llm.prompt(SQL_SYNTHESIS_PROMPT.format(message=message))
        candidate = strip_sql_fences(response.content)
        logger.info(f"LLM Output: {candidate}")

        if not self.classifier.is_likely_query(candidate):
            logger.warning("Synthesized text is still not SQL; nothing to execute")
            yield UNRESOLVED_SQL_NOTICE
            return

        try:
            result = await connector.execute(candidate)
        except QueryError as e:
            yield f"Oops! {e}"
            return

        for chunk in self._render(candidate, result):
            yield chunk

    def _render(self, query: str, result: QueryResult) -> list[str]:
        chunks = self.renderer.render(query, result)
        logger.debug(f"Query Output: {''.join(chunks)}")
        if self.coalesce_chunks:
            return ["".join(chunks)]
        return chunks
