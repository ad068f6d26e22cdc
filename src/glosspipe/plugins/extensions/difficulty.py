# src/glosspipe/plugins/extensions/difficulty.py
"""difficulty: learner difficulty levels.

Writes ``extras.difficulty = {level, display, color, priority}``.
"""

from __future__ import annotations

from typing import Any

from glosspipe.contracts.extension import Extension, ExtensionContext
from glosspipe.plugins.extensions.base import configured_levels, lookup_visitor
from glosspipe.plugins.extensions.providers import DifficultyProvider

EXTENSION_ID = "difficulty"

DIFFICULTY_LEVELS = ("beginner", "intermediate", "advanced")

_COLOR = {"beginner": "green", "intermediate": "yellow", "advanced": "red"}


def normalise_difficulty(value: Any) -> str | None:
    if not value:
        return None
    text = str(value).lower()
    if text in DIFFICULTY_LEVELS:
        return text
    if text in ("easy", "basic", "elementary"):
        return "beginner"
    if text in ("medium", "moderate"):
        return "intermediate"
    if text in ("hard", "difficult", "expert"):
        return "advanced"
    return None


def difficulty_record(level: str) -> dict[str, Any]:
    return {
        "level": level,
        "display": level.capitalize(),
        "color": _COLOR[level],
        "priority": DIFFICULTY_LEVELS.index(level) + 1,
    }


def create_difficulty_extension(
    provider: DifficultyProvider | None = None,
    *,
    skip_existing: bool = True,
    language: str | None = None,
) -> Extension:
    """Build the difficulty extension. Arguments mirror create_frequency_extension()."""

    def lookup(text: str, lang: str | None, ctx: ExtensionContext) -> Any:
        levels = configured_levels(ctx)
        if levels is not None:
            return levels.get(text, levels.get(text.casefold()))
        if provider is None:
            return None
        return provider.get_difficulty(text, lang)

    options: dict[str, Any] = {"skip_existing": skip_existing}
    if language is not None:
        options["language"] = language

    return Extension(
        id=EXTENSION_ID,
        name="Difficulty",
        description="Learner difficulty levels",
        provides={"extras": ["difficulty"]},
        visit={"word": lookup_visitor("difficulty", lookup, normalise_difficulty, difficulty_record)},
        options=options,
    )
