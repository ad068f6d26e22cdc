# src/glosspipe/plugins/hookspecs.py
"""pluggy hook specifications for glosspipe extension plugins.

Plugins implement these hooks to contribute extensions to a registry.
The registry calls them whenever its plugin set changes.

Usage (implementing a plugin):
    from glosspipe.plugins.hookspecs import hookimpl

    class MyPlugin:
        @hookimpl  # NOT @hookspec - that's for defining specs
        def glosspipe_get_extensions(self):
            return [Extension(id="mine", enhance_metadata=...)]

Third-party packages expose plugins through the ``glosspipe`` entry point
group; see ExtensionRegistry.load_entrypoint_plugins().
"""

from typing import TYPE_CHECKING

import pluggy

if TYPE_CHECKING:
    from glosspipe.contracts.extension import Extension

# Project name for pluggy, also the entry point group
PROJECT_NAME = "glosspipe"

# Hook specification marker
hookspec = pluggy.HookspecMarker(PROJECT_NAME)

# Hook implementation marker (for plugins to use)
hookimpl = pluggy.HookimplMarker(PROJECT_NAME)


class GlosspipeExtensionSpec:
    """Hook specifications for extension plugins."""

    @hookspec
    def glosspipe_get_extensions(self) -> list["Extension"]:  # type: ignore[empty-body]
        """Return extension descriptors.

        Returns:
            List of Extension instances
        """
