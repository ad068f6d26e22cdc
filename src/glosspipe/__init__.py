"""
glosspipe: Extension pipelines for annotated multilingual document trees.

Independently written extensions enrich a document tree (root, paragraphs,
sentences, words) in one deterministic run, with dependency ordering and
detection of conflicting field writes.
"""

__version__ = "0.1.0"

from glosspipe.contracts import (
    ConflictStrategy,
    Extension,
    ExtensionContext,
    NodeType,
    ProcessingResult,
    Root,
    Word,
    get_all_words,
    get_word_text,
)
from glosspipe.core.config import ProcessorOptions
from glosspipe.engine import Processor, ProcessorHooks, process, process_async, process_simple
from glosspipe.plugins import ExtensionRegistry, Preset

__all__ = [
    "ConflictStrategy",
    "Extension",
    "ExtensionContext",
    "ExtensionRegistry",
    "NodeType",
    "Preset",
    "ProcessingResult",
    "Processor",
    "ProcessorHooks",
    "ProcessorOptions",
    "Root",
    "Word",
    "__version__",
    "get_all_words",
    "get_word_text",
    "process",
    "process_async",
    "process_simple",
]
