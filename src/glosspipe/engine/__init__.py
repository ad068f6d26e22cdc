"""Processing engine: the orchestrator and the fluent Processor."""

from glosspipe.engine.orchestrator import ProcessorHooks, process, process_async, process_simple
from glosspipe.engine.processor import Processor

__all__ = [
    "Processor",
    "ProcessorHooks",
    "process",
    "process_async",
    "process_simple",
]
