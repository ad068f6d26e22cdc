# src/glosspipe/core/__init__.py
"""Core infrastructure: Configuration, Dependencies, Traversal, Conflicts, Serialization, Logging."""

from glosspipe.core.config import (
    ExtensionSettings,
    LoggingSettings,
    PipelineSettings,
    ProcessorOptions,
    load_settings,
)
from glosspipe.core.conflicts import ConflictDetector
from glosspipe.core.dependencies import (
    build_dependency_graph,
    find_missing_dependencies,
    resolve_order,
)
from glosspipe.core.logging import configure_logging, get_logger
from glosspipe.core.serialization import document_from_dict, node_from_dict, node_to_dict
from glosspipe.core.traversal import TraversalResult, enhance, enhance_async, walk, walk_async

__all__ = [
    "ConflictDetector",
    "ExtensionSettings",
    "LoggingSettings",
    "PipelineSettings",
    "ProcessorOptions",
    "TraversalResult",
    "build_dependency_graph",
    "configure_logging",
    "document_from_dict",
    "enhance",
    "enhance_async",
    "find_missing_dependencies",
    "get_logger",
    "load_settings",
    "node_from_dict",
    "node_to_dict",
    "resolve_order",
    "walk",
    "walk_async",
]
