"""
FastAPI Application

Main FastAPI application for QuackBridge with:
- Lifespan management for the DuckDB registry and GitHub client
- Copilot agent endpoint (POST /)
- Greeting, health and readiness endpoints

Usage:
    uvicorn quackbridge.api.main:app --port 3000
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from quackbridge import __version__
from quackbridge.api.routes import agent, health
from quackbridge.config import get_settings
from quackbridge.connectors.registry import DuckDBConnectionRegistry
from quackbridge.github.client import GitHubClient
from quackbridge.github.verification import RequestVerifier
from quackbridge.pipeline.orchestrator import CopilotQueryPipeline

logger = logging.getLogger(__name__)

# Global state for pipeline and components
app_state = {
    "registry": None,
    "github": None,
    "verifier": None,
    "pipeline": None,
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Lifespan context manager for startup and shutdown.

    Initializes:
    - Per-user DuckDB connection registry
    - GitHub API client and request verifier
    - Pipeline orchestrator
    """
    config = get_settings()
    logger.info("Starting QuackBridge server...")

    try:
        logger.info(f"Initializing database registry under {config.storage.root}...")
        registry = DuckDBConnectionRegistry(
            root=config.storage.root,
            capacity=config.storage.max_open_databases,
        )
        app_state["registry"] = registry

        github = GitHubClient(api_url=config.github.api_url, timeout=config.github.timeout)
        app_state["github"] = github
        app_state["verifier"] = RequestVerifier(github)

        app_state["pipeline"] = CopilotQueryPipeline(
            registry=registry,
            github=github,
            config=config,
        )

        logger.info(f"Server is running on port {config.api_port}")

        yield  # Application runs here

    finally:
        logger.info("Shutting down QuackBridge server...")

        if app_state["registry"]:
            try:
                await app_state["registry"].close()
                logger.info("Database registry closed")
            except Exception as e:
                logger.error(f"Error closing database registry: {e}")

        if app_state["github"]:
            try:
                await app_state["github"].close()
            except Exception as e:
                logger.error(f"Error closing GitHub client: {e}")

        for key in app_state:
            app_state[key] = None

        logger.info("QuackBridge server shut down complete")


app = FastAPI(
    title="QuackBridge",
    description="GitHub Copilot Extension answering with per-user DuckDB queries",
    version=__version__,
    lifespan=lifespan,
)


app.include_router(health.router, tags=["health"])
app.include_router(agent.router, tags=["agent"])
