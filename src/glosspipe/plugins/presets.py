# src/glosspipe/plugins/presets.py
"""Presets: named, reusable extension lists.

A preset entry is an extension spec (descriptor, registry id, or factory) or
a ``(spec, options)`` pair. Processor.use() expands a preset in place.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, TypeAlias

from glosspipe.contracts.extension import Extension

PluginSpec: TypeAlias = "Extension | str | Callable[[Mapping[str, Any] | None], Extension | None]"
PresetEntry: TypeAlias = "PluginSpec | tuple[PluginSpec, Mapping[str, Any]]"


@dataclass(frozen=True, slots=True)
class Preset:
    """A named extension list.

    Example:
        Preset(
            id="reading",
            name="Reading",
            plugins=("frequency", ("difficulty", {"skip_existing": False}), "reading-score"),
        )
    """

    id: str
    name: str
    plugins: Sequence[PresetEntry]
    description: str | None = None


WORD_STATS = Preset(
    id="word-stats",
    name="Word Statistics",
    description="Per-word length",
    plugins=("word-length",),
)

READING = Preset(
    id="reading",
    name="Reading",
    description="Frequency, difficulty and the composite reading score",
    plugins=("frequency", "difficulty", "reading-score"),
)

BUILTIN_PRESETS: dict[str, Preset] = {preset.id: preset for preset in (WORD_STATS, READING)}


def get_preset(preset_id: str) -> Preset:
    """Look up a built-in preset.

    Raises:
        KeyError: If no preset has that id
    """
    try:
        return BUILTIN_PRESETS[preset_id]
    except KeyError:
        raise KeyError(f"Unknown preset '{preset_id}'. Available: {', '.join(sorted(BUILTIN_PRESETS))}") from None
