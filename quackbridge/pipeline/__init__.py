"""
Pipeline package for QuackBridge.

Contains the request orchestrator and the result renderers it streams.
"""

from quackbridge.pipeline.formatter import (
    AnnotatedRenderer,
    TableRenderer,
    create_renderer,
)
from quackbridge.pipeline.orchestrator import CopilotQueryPipeline, strip_sql_fences

__all__ = [
    "CopilotQueryPipeline",
    "strip_sql_fences",
    "TableRenderer",
    "AnnotatedRenderer",
    "create_renderer",
]
