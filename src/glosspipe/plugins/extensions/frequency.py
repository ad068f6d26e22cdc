# src/glosspipe/plugins/extensions/frequency.py
"""frequency: word frequency levels with display properties.

Writes ``extras.frequency = {level, display, color, priority}``. With
``skip_existing`` (the default) words that already carry a frequency are
left alone, so applying the extension twice gives the same result.
"""

from __future__ import annotations

from typing import Any

from glosspipe.contracts.extension import Extension, ExtensionContext
from glosspipe.plugins.extensions.base import configured_levels, lookup_visitor
from glosspipe.plugins.extensions.providers import FrequencyProvider

EXTENSION_ID = "frequency"

FREQUENCY_LEVELS = ("rare", "uncommon", "common", "very-common")

_DISPLAY = {"rare": "Rare", "uncommon": "Uncommon", "common": "Common", "very-common": "Very Common"}
_COLOR = {"rare": "gray", "uncommon": "yellow", "common": "blue", "very-common": "green"}
_PRIORITY = {"rare": 1, "uncommon": 2, "common": 3, "very-common": 4}


def normalise_frequency(value: Any) -> str | None:
    """Map loose spellings ("Most frequent", "VERY COMMON") onto a level."""
    if not value:
        return None
    text = str(value).lower()
    if text in FREQUENCY_LEVELS:
        return text
    # "uncommon" contains "common"; order matters
    if "very" in text or "most" in text:
        return "very-common"
    if "uncommon" in text:
        return "uncommon"
    if "rare" in text:
        return "rare"
    if "common" in text or "frequent" in text:
        return "common"
    return None


def frequency_record(level: str) -> dict[str, Any]:
    return {
        "level": level,
        "display": _DISPLAY[level],
        "color": _COLOR[level],
        "priority": _PRIORITY[level],
    }


def create_frequency_extension(
    provider: FrequencyProvider | None = None,
    *,
    skip_existing: bool = True,
    language: str | None = None,
) -> Extension:
    """Build the frequency extension.

    Args:
        provider: Frequency lookup; a ``levels`` option overrides it
        skip_existing: Leave words that already have ``extras.frequency``
        language: Language passed to the provider instead of the word's ``lang``
    """

    def lookup(text: str, lang: str | None, ctx: ExtensionContext) -> Any:
        levels = configured_levels(ctx)
        if levels is not None:
            return levels.get(text, levels.get(text.casefold()))
        if provider is None:
            return None
        return provider.get_frequency(text, lang)

    options: dict[str, Any] = {"skip_existing": skip_existing}
    if language is not None:
        options["language"] = language

    return Extension(
        id=EXTENSION_ID,
        name="Frequency",
        description="Word frequency levels with display properties",
        provides={"extras": ["frequency"]},
        visit={"word": lookup_visitor("frequency", lookup, normalise_frequency, frequency_record)},
        options=options,
    )
