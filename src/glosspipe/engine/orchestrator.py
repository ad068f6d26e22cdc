# src/glosspipe/engine/orchestrator.py
"""Pipeline runner: one end-to-end processing run.

Coordinates:
- Extension lookup (ids through the caller's registry)
- Dependency ordering
- Per extension: node requirement check, transform, visit, enhance
- Lifecycle hooks
- Error classification and the lenient/strict failure policy
- Timing, warnings and the final ProcessingResult

process() and process_async() share all bookkeeping through _Run; they
differ only in whether callbacks may be awaited.

Failure policy:
- Resolution errors (cycle, duplicate id, unknown id) are raised before any
  extension runs.
- Extension errors are caught per extension and recorded. Lenient runs
  continue with the next extension; strict runs stop and return the
  partially processed tree with ``metadata.aborted`` set. Neither raises.
- Hook exceptions are never caught.
"""

from __future__ import annotations

import copy
import inspect
import time
from collections.abc import Callable, Iterator, Mapping, Sequence
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, TypeAlias

from glosspipe.contracts.enums import Capability, ProcessingPhase
from glosspipe.contracts.errors import ExtensionError, ExtensionExecutionError, ExtensionNotFoundError, MissingNodeTypeError
from glosspipe.contracts.extension import Extension, ExtensionContext
from glosspipe.contracts.nodes import Root, has_node_type
from glosspipe.contracts.results import (
    ExtensionErrorRecord,
    ProcessingMetadata,
    ProcessingResult,
    ProgressStats,
)
from glosspipe.core.config import ProcessorOptions
from glosspipe.core.conflicts import ConflictDetector
from glosspipe.core.dependencies import find_missing_dependencies, resolve_order
from glosspipe.core.logging import get_logger
from glosspipe.core.traversal import enhance, enhance_async, reject_awaitable, walk, walk_async

if TYPE_CHECKING:
    from glosspipe.plugins.registry import ExtensionRegistry

logger = get_logger(__name__)

ExtensionSpec: TypeAlias = "Extension | str | Any"
OptionsArg: TypeAlias = "ProcessorOptions | Mapping[str, Any] | None"


@dataclass
class ProcessorHooks:
    """Lifecycle callbacks invoked around each extension.

    All hooks are optional. They run synchronously and their exceptions
    propagate to the caller of process().

    Attributes:
        before: Called with the extension id before it runs
        after: Called with the extension id after it was applied
        on_error: Called with the recorded error and the extension id
        on_skip: Called with the extension id and a reason after a failure
        on_progress: Called with a ProgressStats when the run starts and after
            each applied or skipped extension
    """

    before: Callable[[str], None] | None = None
    after: Callable[[str], None] | None = None
    on_error: Callable[[ExtensionError, str], None] | None = None
    on_skip: Callable[[str, str], None] | None = None
    on_progress: Callable[[ProgressStats], None] | None = None


def _as_extensions(specs: Sequence[ExtensionSpec], registry: ExtensionRegistry | None) -> list[Extension]:
    """Turn descriptors, ids and class-based extensions into descriptors."""
    normalised: list[Extension | str] = [spec if isinstance(spec, str) else Extension.from_object(spec) for spec in specs]
    if registry is not None:
        return registry.resolve(normalised)
    missing = [spec for spec in normalised if isinstance(spec, str)]
    if missing:
        raise ExtensionNotFoundError(missing)
    return [spec for spec in normalised if isinstance(spec, Extension)]


def _classify(extension_id: str, exc: Exception, phase: ProcessingPhase) -> ExtensionError:
    if isinstance(exc, ExtensionError):
        return exc
    wrapped = ExtensionExecutionError(extension_id, phase, exc)
    wrapped.__cause__ = exc
    return wrapped


class _Run:
    """State of one processing run. Created fresh per call."""

    def __init__(
        self,
        tree: Root,
        extensions: Sequence[ExtensionSpec],
        options: OptionsArg,
        registry: ExtensionRegistry | None,
        hooks: ProcessorHooks | None,
        data: Mapping[str, Any] | None,
    ) -> None:
        self.options = ProcessorOptions.coerce(options)
        self.registry = registry
        self.hooks = hooks or ProcessorHooks()
        self.data: Mapping[str, Any] = data if data is not None else {}

        # Resolution errors surface here, before anything runs
        self.ordered = resolve_order(_as_extensions(extensions, registry))
        self.extension_ids = [extension.id for extension in self.ordered]

        missing = find_missing_dependencies(self.ordered)
        if missing:
            logger.debug("Dependencies absent from run treated as satisfied", missing=missing)

        self.original_document = tree
        self.tree = copy.deepcopy(tree) if self.options.copy_document else tree
        self.metadata = ProcessingMetadata()
        self.detector = ConflictDetector(self.options.conflict_strategy, self.metadata.warnings)
        self.phase = ProcessingPhase.VALIDATE
        self.start_time = time.perf_counter()
        self.metadata.stats.start_time = self.start_time

    @contextmanager
    def registered(self) -> Iterator[None]:
        """Register run-local extensions into the caller's registry for the run."""
        added: list[str] = []
        try:
            if self.registry is not None:
                for extension in self.ordered:
                    if extension.id not in self.registry:
                        self.registry.add(extension)
                        added.append(extension.id)
            yield
        finally:
            for extension_id in added:
                self.registry.remove(extension_id)  # type: ignore[union-attr]

    # === Per-extension helpers ===

    def context(self, extension: Extension) -> ExtensionContext:
        return ExtensionContext(
            extension_id=extension.id,
            original_document=self.original_document,
            extension_ids=self.extension_ids,
            applied_extensions=self.metadata.applied_extensions,
            options=self.options,
            writer=self.detector,
            registry=self.registry,
            data=self.data,
            extension_options=extension.options,
        )

    def enter(self, extension: Extension, phase: ProcessingPhase) -> None:
        self.phase = phase
        if self.options.debug:
            logger.debug("Extension phase started", extension_id=extension.id, phase=str(phase))

    def check_nodes(self, extension: Extension) -> None:
        """Raise MissingNodeTypeError for the first required node type absent from the tree."""
        for node_type in extension.requires.nodes:
            if has_node_type(self.tree, node_type):
                continue
            suggestion = None
            if self.registry is not None:
                suggestion = self.registry.find_provider(node_type=node_type)
                if suggestion == extension.id:
                    suggestion = None
            raise MissingNodeTypeError(extension.id, str(node_type), suggestion)

    def accept_tree(self, result: Any) -> Root:
        if not isinstance(result, Root):
            raise TypeError(f"transform must return a Root, got {type(result).__name__}")
        self.tree = result
        return result

    def start(self, extension: Extension) -> float:
        if self.hooks.before is not None:
            self.hooks.before(extension.id)
        self.phase = ProcessingPhase.VALIDATE
        return time.perf_counter()

    def progress(self, extension_id: str | None) -> None:
        if self.hooks.on_progress is None:
            return
        now = time.perf_counter()
        self.hooks.on_progress(
            ProgressStats(
                total=len(self.ordered),
                completed=len(self.metadata.applied_extensions) + len(self.metadata.skipped_extensions),
                start_time=self.start_time,
                elapsed=now - self.start_time,
                current=extension_id,
            )
        )

    def succeed(self, extension: Extension, started: float) -> None:
        self.metadata.stats.timing[extension.id] = time.perf_counter() - started
        self.metadata.applied_extensions.append(extension.id)
        logger.debug("Extension applied", extension_id=extension.id, seconds=self.metadata.stats.timing[extension.id])
        if self.hooks.after is not None:
            self.hooks.after(extension.id)
        self.progress(extension.id)

    def fail(self, extension: Extension, exc: Exception, started: float) -> bool:
        """Record a failed extension.

        Returns:
            True if the run should continue with the next extension
        """
        self.metadata.stats.timing[extension.id] = time.perf_counter() - started
        error = _classify(extension.id, exc, self.phase)
        keep_going = self.options.lenient and error.recoverable
        self.metadata.errors.append(
            ExtensionErrorRecord(
                extension_id=extension.id,
                kind=error.kind,
                phase=self.phase,
                message=str(error),
                recoverable=keep_going,
                error=error,
            )
        )
        self.metadata.skipped_extensions.append(extension.id)
        logger.warning(
            "Extension failed",
            extension_id=extension.id,
            kind=str(error.kind),
            phase=str(self.phase),
            error=str(error),
            lenient=self.options.lenient,
        )
        if self.hooks.on_error is not None:
            self.hooks.on_error(error, extension.id)
        if self.hooks.on_skip is not None:
            self.hooks.on_skip(extension.id, str(error))
        self.progress(extension.id)
        if not keep_going:
            self.metadata.aborted = True
        return keep_going

    def finish(self) -> ProcessingResult:
        stats = self.metadata.stats
        stats.end_time = time.perf_counter()
        stats.total_time = stats.end_time - self.start_time
        logger.info(
            "Processing finished",
            applied=len(self.metadata.applied_extensions),
            skipped=len(self.metadata.skipped_extensions),
            warnings=len(self.metadata.warnings),
            aborted=self.metadata.aborted,
            total_time=round(stats.total_time, 6),
        )
        return ProcessingResult(document=self.tree, metadata=self.metadata)


def _apply(run: _Run, extension: Extension) -> None:
    ctx = run.context(extension)
    run.enter(extension, ProcessingPhase.VALIDATE)
    run.check_nodes(extension)
    capabilities = extension.capabilities

    if Capability.TRANSFORMER in capabilities:
        run.enter(extension, ProcessingPhase.TRANSFORM)
        result = extension.transform_callback(run.tree, ctx)  # type: ignore[misc]
        reject_awaitable(result, ctx, ProcessingPhase.TRANSFORM)
        run.accept_tree(result)

    if Capability.VISITOR in capabilities:
        run.enter(extension, ProcessingPhase.VISIT)
        outcome = walk(run.tree, extension.visit_callbacks, ctx)
        run.tree = outcome.tree
        run.metadata.stats.nodes_processed += outcome.visited

    if Capability.ENHANCER in capabilities:
        run.enter(extension, ProcessingPhase.ENHANCE)
        run.metadata.stats.nodes_processed += enhance(run.tree, extension.enhance_callback, ctx)  # type: ignore[arg-type]


async def _apply_async(run: _Run, extension: Extension) -> None:
    ctx = run.context(extension)
    run.enter(extension, ProcessingPhase.VALIDATE)
    run.check_nodes(extension)
    capabilities = extension.capabilities

    if Capability.TRANSFORMER in capabilities:
        run.enter(extension, ProcessingPhase.TRANSFORM)
        result = extension.transform_callback(run.tree, ctx)  # type: ignore[misc]
        if inspect.isawaitable(result):
            result = await result
        run.accept_tree(result)

    if Capability.VISITOR in capabilities:
        run.enter(extension, ProcessingPhase.VISIT)
        outcome = await walk_async(run.tree, extension.visit_callbacks, ctx)
        run.tree = outcome.tree
        run.metadata.stats.nodes_processed += outcome.visited

    if Capability.ENHANCER in capabilities:
        run.enter(extension, ProcessingPhase.ENHANCE)
        run.metadata.stats.nodes_processed += await enhance_async(run.tree, extension.enhance_callback, ctx)  # type: ignore[arg-type]


def process(
    tree: Root,
    extensions: Sequence[ExtensionSpec],
    options: OptionsArg = None,
    *,
    registry: ExtensionRegistry | None = None,
    hooks: ProcessorHooks | None = None,
    data: Mapping[str, Any] | None = None,
) -> ProcessingResult:
    """Run extensions over a document tree.

    Args:
        tree: Document to process. Mutated in place unless
            ``options.copy_document`` is set.
        extensions: Extension descriptors, registry ids, or objects
            accepted by Extension.from_object()
        options: ProcessorOptions or an equivalent mapping
        registry: Resolves id strings; run-local extensions are registered
            into it for the duration of the run
        hooks: Lifecycle callbacks
        data: Shared values exposed as ``ctx.data``

    Returns:
        The processed tree and run metadata

    Raises:
        DependencyCycleError: If dependencies form a cycle
        DuplicateExtensionError: If an id appears twice
        ExtensionNotFoundError: If an id cannot be resolved
    """
    run = _Run(tree, extensions, options, registry, hooks, data)
    logger.debug("Processing started", extensions=run.extension_ids, lenient=run.options.lenient)
    with run.registered():
        run.progress(None)
        for extension in run.ordered:
            started = run.start(extension)
            try:
                _apply(run, extension)
            except Exception as exc:
                if run.fail(extension, exc, started):
                    continue
                break
            run.succeed(extension, started)
    return run.finish()


async def process_async(
    tree: Root,
    extensions: Sequence[ExtensionSpec],
    options: OptionsArg = None,
    *,
    registry: ExtensionRegistry | None = None,
    hooks: ProcessorHooks | None = None,
    data: Mapping[str, Any] | None = None,
) -> ProcessingResult:
    """Async twin of process(). Awaitable callbacks are awaited one at a time."""
    run = _Run(tree, extensions, options, registry, hooks, data)
    logger.debug("Processing started", extensions=run.extension_ids, lenient=run.options.lenient)
    with run.registered():
        run.progress(None)
        for extension in run.ordered:
            started = run.start(extension)
            try:
                await _apply_async(run, extension)
            except Exception as exc:
                if run.fail(extension, exc, started):
                    continue
                break
            run.succeed(extension, started)
    return run.finish()


def process_simple(tree: Root, extensions: Sequence[ExtensionSpec], options: OptionsArg = None) -> Root:
    """Run extensions and return only the processed tree."""
    return process(tree, extensions, options).document
