# src/glosspipe/plugins/extensions/word_length.py
"""word-length: character count of each word's text at ``extras.length``."""

from __future__ import annotations

from glosspipe.contracts.extension import Extension
from glosspipe.contracts.nodes import Word, get_word_text

EXTENSION_ID = "word-length"


def _length(word: Word) -> dict[str, int]:
    return {"length": len(get_word_text(word))}


def create_word_length_extension() -> Extension:
    return Extension(
        id=EXTENSION_ID,
        name="Word Length",
        description="Character count of each word",
        provides={"extras": ["length"]},
        enhance_metadata=_length,
    )
