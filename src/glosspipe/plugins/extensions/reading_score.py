# src/glosspipe/plugins/extensions/reading_score.py
"""reading-score: composite reading score from frequency and difficulty.

score = frequency_score * frequency_weight + difficulty_score * difficulty_weight,
rounded to two places. Lower is easier.

Requires ``extras.frequency.level`` and ``extras.difficulty.level`` on every
word and raises ExtensionDependencyError naming the first one missing.
"""

from __future__ import annotations

from typing import Any

from glosspipe.contracts.errors import ExtensionDependencyError
from glosspipe.contracts.extension import Extension, ExtensionContext
from glosspipe.contracts.nodes import Word

EXTENSION_ID = "reading-score"

FREQUENCY_SCORES = {"very-common": 1, "common": 2, "uncommon": 3, "rare": 4}
DIFFICULTY_SCORES = {"beginner": 1, "intermediate": 2, "advanced": 3}

# (upper bound, label, color)
_BANDS = (
    (1.5, "easy", "green"),
    (2.5, "moderate", "blue"),
    (3.5, "challenging", "yellow"),
)


def reading_label(score: float) -> tuple[str, str]:
    """(label, color) for a score."""
    for bound, label, color in _BANDS:
        if score <= bound:
            return label, color
    return "difficult", "red"


def _level(word: Word, key: str) -> str | None:
    record = word.extras.get(key)
    if isinstance(record, dict):
        return record.get("level")
    return None


def create_reading_score_extension(
    *,
    frequency_weight: float = 0.4,
    difficulty_weight: float = 0.6,
) -> Extension:
    def enhance_word(word: Word, ctx: ExtensionContext) -> dict[str, Any]:
        frequency = _level(word, "frequency")
        if not frequency:
            raise ExtensionDependencyError(
                EXTENSION_ID,
                "frequency",
                "extras.frequency.level",
                "Ensure the frequency extension runs before reading-score and that the word has a frequency level.",
            )
        difficulty = _level(word, "difficulty")
        if not difficulty:
            raise ExtensionDependencyError(
                EXTENSION_ID,
                "difficulty",
                "extras.difficulty.level",
                "Ensure the difficulty extension runs before reading-score and that the word has a difficulty level.",
            )

        f_weight = ctx.extension_options.get("frequency_weight", frequency_weight)
        d_weight = ctx.extension_options.get("difficulty_weight", difficulty_weight)
        score = FREQUENCY_SCORES.get(frequency, 2) * f_weight + DIFFICULTY_SCORES.get(difficulty, 2) * d_weight
        score = round(score, 2)
        label, color = reading_label(score)
        return {"readingScore": {"score": score, "label": label, "color": color}}

    return Extension(
        id=EXTENSION_ID,
        name="Reading Score",
        description="Composite reading score from frequency and difficulty",
        dependencies=("frequency", "difficulty"),
        requires={"extras": ["frequency", "difficulty"]},
        provides={"extras": ["readingScore"]},
        enhance_metadata=enhance_word,
        options={"frequency_weight": frequency_weight, "difficulty_weight": difficulty_weight},
    )
