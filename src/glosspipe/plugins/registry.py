# src/glosspipe/plugins/registry.py
"""Extension registry for discovery, registration, and lookup.

Uses pluggy for hook-based plugin registration. A registry is an explicit
value: there is no process-wide instance, and the engine only consults a
registry the caller hands it.

Two sources feed one id -> Extension table:
- plugins implementing ``glosspipe_get_extensions`` (built-ins, entry points,
  or any object passed to register_plugin())
- extensions added directly with add()
"""

from __future__ import annotations

import difflib
from collections.abc import Iterable, Iterator
from typing import Any

import pluggy

from glosspipe.contracts.enums import NodeType
from glosspipe.contracts.errors import DuplicateExtensionError, ExtensionNotFoundError
from glosspipe.contracts.extension import Extension
from glosspipe.core.logging import get_logger
from glosspipe.plugins.hookspecs import PROJECT_NAME, GlosspipeExtensionSpec

logger = get_logger(__name__)


class ExtensionRegistry:
    """Manages extension discovery, registration, and lookup.

    Usage:
        registry = ExtensionRegistry()
        registry.register_builtin_extensions()
        registry.add(Extension(id="mine", enhance_metadata=...))

        frequency = registry.get("frequency")
        ordered = registry.resolve(["frequency", "mine"])
    """

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(GlosspipeExtensionSpec)

        # Plugin-provided entries are rebuilt from hooks; added ones persist
        self._from_plugins: dict[str, Extension] = {}
        self._added: dict[str, Extension] = {}

    # === Plugin registration ===

    def register_plugin(self, plugin: Any) -> None:
        """Register a plugin object implementing ``glosspipe_get_extensions``.

        Raises:
            ValueError: If the plugin contributes an id that is already
                registered. The plugin is unregistered again.
        """
        self._pm.register(plugin)
        try:
            self._refresh_caches()
        except ValueError:
            self._pm.unregister(plugin)
            raise

    def register_builtin_extensions(self) -> None:
        """Register the extensions shipped with glosspipe."""
        from glosspipe.plugins.extensions import BuiltinExtensions

        if self._pm.has_plugin(BuiltinExtensions.name):
            return
        self._pm.register(BuiltinExtensions(), name=BuiltinExtensions.name)
        self._refresh_caches()

    def load_entrypoint_plugins(self) -> int:
        """Load plugins advertised under the ``glosspipe`` entry point group.

        Returns:
            Number of plugins loaded
        """
        loaded = self._pm.load_setuptools_entrypoints(PROJECT_NAME)
        self._refresh_caches()
        logger.debug("Entry point plugins loaded", count=loaded)
        return loaded

    def _refresh_caches(self) -> None:
        """Rebuild the plugin-provided table from hooks.

        Raises:
            ValueError: If two sources contribute the same extension id
        """
        collected: dict[str, Extension] = {}
        for extensions in self._pm.hook.glosspipe_get_extensions():
            for extension in extensions:
                if extension.id in collected or extension.id in self._added:
                    raise ValueError(f"Duplicate extension id: '{extension.id}'. Already registered by another plugin")
                collected[extension.id] = extension
        self._from_plugins = collected

    # === Direct registration ===

    def add(self, extension: Extension) -> None:
        """Register a single extension.

        Raises:
            DuplicateExtensionError: If the id is already registered
        """
        if extension.id in self:
            raise DuplicateExtensionError(extension.id)
        self._added[extension.id] = extension

    def remove(self, extension_id: str) -> bool:
        """Unregister an extension added with add().

        Plugin-provided extensions go away with their plugin and are not
        removable one by one.

        Returns:
            True if the extension was removed
        """
        return self._added.pop(extension_id, None) is not None

    # === Lookup ===

    def get(self, extension_id: str) -> Extension | None:
        """Get an extension by id."""
        if extension_id in self._added:
            return self._added[extension_id]
        return self._from_plugins.get(extension_id)

    def has(self, extension_id: str) -> bool:
        return extension_id in self._added or extension_id in self._from_plugins

    def get_all(self) -> list[Extension]:
        """All registered extensions, sorted by id."""
        merged = {**self._from_plugins, **self._added}
        return [merged[key] for key in sorted(merged)]

    def ids(self) -> list[str]:
        return [extension.id for extension in self.get_all()]

    def __contains__(self, extension_id: object) -> bool:
        return isinstance(extension_id, str) and self.has(extension_id)

    def __len__(self) -> int:
        return len(self._from_plugins) + len(self._added)

    def __iter__(self) -> Iterator[Extension]:
        return iter(self.get_all())

    def resolve(self, specs: Iterable[Extension | str]) -> list[Extension]:
        """Turn a mixed list of descriptors and ids into descriptors.

        Raises:
            ExtensionNotFoundError: Listing every id that is not registered,
                with close matches as suggestions
        """
        resolved: list[Extension] = []
        missing: list[str] = []
        for spec in specs:
            if isinstance(spec, Extension):
                resolved.append(spec)
                continue
            extension = self.get(spec)
            if extension is None:
                missing.append(spec)
            else:
                resolved.append(extension)
        if missing:
            known = self.ids()
            suggestions = {mid: difflib.get_close_matches(mid, known, n=3) for mid in missing}
            raise ExtensionNotFoundError(missing, suggestions)
        return resolved

    def find_provider(
        self,
        *,
        node_type: NodeType | str | None = None,
        extras_field: str | None = None,
        metadata_field: str | None = None,
    ) -> str | None:
        """Id of the first registered extension (by id) providing a node type or field."""
        wanted_type = NodeType.parse(node_type) if node_type is not None else None
        for extension in self.get_all():
            provides = extension.provides
            if wanted_type is not None and wanted_type in provides.nodes:
                return extension.id
            if extras_field is not None and extras_field in provides.extras:
                return extension.id
            if metadata_field is not None and metadata_field in provides.metadata:
                return extension.id
        return None
