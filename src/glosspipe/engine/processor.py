# src/glosspipe/engine/processor.py
"""Fluent pipeline builder.

    processor = (
        Processor({"lenient": True})
        .use("frequency", {"levels": {"the": "very-common"}})
        .use(READING)
        .on_error(lambda error, extension_id: print(extension_id, error))
    )
    document = await processor.process(document)

A Processor collects extension specs, hooks and shared data, then hands the
whole list to the orchestrator, so dependency ordering and conflict detection
span every extension it was given. freeze() returns an immutable copy that
can be shared and reused across runs.
"""

from __future__ import annotations

import copy
from collections.abc import Callable, Mapping
from typing import Any

from glosspipe.contracts.errors import ExtensionError, ExtensionNotFoundError, FrozenProcessorError
from glosspipe.contracts.extension import Extension
from glosspipe.contracts.nodes import Root
from glosspipe.contracts.results import ProcessingResult, ProgressStats
from glosspipe.core.config import ProcessorOptions
from glosspipe.engine.orchestrator import OptionsArg, ProcessorHooks, process, process_async
from glosspipe.plugins.presets import PluginSpec, Preset
from glosspipe.plugins.registry import ExtensionRegistry

_MISSING = object()


def _default_registry() -> ExtensionRegistry:
    registry = ExtensionRegistry()
    registry.register_builtin_extensions()
    return registry


class Processor:
    """Builds and runs an extension pipeline.

    Args:
        options: ProcessorOptions or an equivalent mapping
        registry: Resolves id specs. Defaults to a fresh registry holding the
            built-in extensions.
    """

    def __init__(self, options: OptionsArg = None, *, registry: ExtensionRegistry | None = None) -> None:
        self._options = ProcessorOptions.coerce(options)
        self._registry = registry if registry is not None else _default_registry()
        self._plugins: list[tuple[PluginSpec, Mapping[str, Any] | None]] = []
        self._before: dict[str, list[Callable[[str], None]]] = {}
        self._after: dict[str, list[Callable[[str], None]]] = {}
        self._on_error: list[Callable[[ExtensionError, str], None]] = []
        self._on_skip: list[Callable[[str, str], None]] = []
        self._on_progress: list[Callable[[ProgressStats], None]] = []
        self._data: dict[str, Any] = {}
        self._frozen = False

    @property
    def options(self) -> ProcessorOptions:
        return self._options

    @property
    def registry(self) -> ExtensionRegistry:
        return self._registry

    @property
    def frozen(self) -> bool:
        return self._frozen

    def _assert_not_frozen(self) -> None:
        if self._frozen:
            raise FrozenProcessorError("Cannot modify frozen processor")

    # === Building ===

    def use(self, spec: PluginSpec | Preset | Any, options: Mapping[str, Any] | None = None) -> Processor:
        """Add an extension, or every entry of a preset.

        ``spec`` is an Extension, a registry id, a factory called with
        ``options`` (returning None drops it), a class-based extension
        object, or a Preset.
        """
        self._assert_not_frozen()
        if isinstance(spec, Preset):
            for entry in spec.plugins:
                if isinstance(entry, tuple):
                    self.use(entry[0], entry[1])
                else:
                    self.use(entry)
            return self
        self._plugins.append((spec, options))
        return self

    def before(self, extension_id: str, hook: Callable[[str], None]) -> Processor:
        self._assert_not_frozen()
        self._before.setdefault(extension_id, []).append(hook)
        return self

    def after(self, extension_id: str, hook: Callable[[str], None]) -> Processor:
        self._assert_not_frozen()
        self._after.setdefault(extension_id, []).append(hook)
        return self

    def on_error(self, hook: Callable[[ExtensionError, str], None]) -> Processor:
        self._assert_not_frozen()
        self._on_error.append(hook)
        return self

    def on_skip(self, hook: Callable[[str, str], None]) -> Processor:
        self._assert_not_frozen()
        self._on_skip.append(hook)
        return self

    def on_progress(self, hook: Callable[[ProgressStats], None]) -> Processor:
        self._assert_not_frozen()
        self._on_progress.append(hook)
        return self

    def data(self, key: str, value: Any = _MISSING) -> Any:
        """Read a data value, or set one and return the processor.

        Data is exposed to extensions as ``ctx.data``.
        """
        if value is _MISSING:
            return self._data.get(key)
        self._assert_not_frozen()
        self._data[key] = value
        return self

    def freeze(self) -> Processor:
        """Return a frozen copy. Later changes to this processor don't affect it."""
        frozen = Processor(self._options, registry=self._registry)
        frozen._plugins = list(self._plugins)
        frozen._before = {key: list(hooks) for key, hooks in self._before.items()}
        frozen._after = {key: list(hooks) for key, hooks in self._after.items()}
        frozen._on_error = list(self._on_error)
        frozen._on_skip = list(self._on_skip)
        frozen._on_progress = list(self._on_progress)
        frozen._data = copy.copy(self._data)
        frozen._frozen = True
        return frozen

    # === Running ===

    def _resolve(self, spec: PluginSpec | Any, options: Mapping[str, Any] | None) -> Extension | None:
        if isinstance(spec, str):
            extension = self._registry.get(spec)
            if extension is None:
                raise ExtensionNotFoundError([spec])
            return extension.with_options(options)
        if isinstance(spec, Extension):
            return spec.with_options(options)
        if callable(spec) and not hasattr(spec, "id"):
            return spec(options)
        return Extension.from_object(spec).with_options(options)

    def extensions(self) -> list[Extension]:
        """Resolve the configured specs into descriptors, in use() order."""
        resolved = [self._resolve(spec, options) for spec, options in self._plugins]
        return [extension for extension in resolved if extension is not None]

    def _hooks(self) -> ProcessorHooks:
        def before(extension_id: str) -> None:
            for hook in self._before.get(extension_id, ()):
                hook(extension_id)

        def after(extension_id: str) -> None:
            for hook in self._after.get(extension_id, ()):
                hook(extension_id)

        def on_error(error: ExtensionError, extension_id: str) -> None:
            for hook in self._on_error:
                hook(error, extension_id)

        def on_skip(extension_id: str, reason: str) -> None:
            for hook in self._on_skip:
                hook(extension_id, reason)

        def on_progress(stats: ProgressStats) -> None:
            for hook in self._on_progress:
                hook(stats)

        return ProcessorHooks(before=before, after=after, on_error=on_error, on_skip=on_skip, on_progress=on_progress)

    async def process_with_meta(self, document: Root) -> ProcessingResult:
        return await process_async(
            document,
            self.extensions(),
            self._options,
            registry=self._registry,
            hooks=self._hooks(),
            data=self._data,
        )

    async def process(self, document: Root) -> Root:
        """Run the pipeline and return only the processed tree."""
        result = await self.process_with_meta(document)
        return result.document

    def process_sync(self, document: Root) -> ProcessingResult:
        """Run the pipeline synchronously.

        Extensions whose callbacks return awaitables fail with
        AsyncCallbackError; use process() for those.
        """
        return process(
            document,
            self.extensions(),
            self._options,
            registry=self._registry,
            hooks=self._hooks(),
            data=self._data,
        )
