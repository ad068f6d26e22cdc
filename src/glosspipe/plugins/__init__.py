"""Extension plugin system: pluggy hookspecs, the registry, presets and built-ins."""

from glosspipe.plugins.hookspecs import hookimpl
from glosspipe.plugins.presets import BUILTIN_PRESETS, Preset, get_preset
from glosspipe.plugins.registry import ExtensionRegistry

__all__ = [
    "BUILTIN_PRESETS",
    "ExtensionRegistry",
    "Preset",
    "get_preset",
    "hookimpl",
]
