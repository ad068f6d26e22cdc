# tests/fixtures/documents.py
"""Document tree builders for tests.

Trees are built from plain word strings so tests read like the documents
they describe:

    doc = make_document(["hello", "world"])
    doc = make_document([["the", "cat"], ["sat"]])   # two sentences
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from glosspipe.contracts.extension import Extension
from glosspipe.contracts.nodes import Paragraph, Punctuation, Root, Sentence, Text, WhiteSpace, Word


def make_word(text: str, *, lang: str | None = "en", **extras: Any) -> Word:
    return Word(children=[Text(text)], lang=lang, extras=dict(extras))


def make_sentence(words: Sequence[str | Word], *, lang: str | None = "en", punctuation: str | None = None) -> Sentence:
    children: list[Any] = []
    for index, word in enumerate(words):
        if index:
            children.append(WhiteSpace(" "))
        children.append(word if isinstance(word, Word) else make_word(word, lang=lang))
    if punctuation:
        children.append(Punctuation(punctuation))
    original = " ".join(w if isinstance(w, str) else "" for w in words)
    return Sentence(children=children, lang=lang, original_text=original)


def make_document(sentences: Sequence[Any], *, lang: str | None = "en") -> Root:
    """Build Root -> Paragraph -> Sentence(s) -> Word(s).

    ``sentences`` is either a flat list of words (one sentence) or a list of
    word lists (one sentence each).
    """
    if sentences and all(isinstance(item, (str, Word)) for item in sentences):
        sentences = [sentences]
    paragraph = Paragraph(children=[make_sentence(words, lang=lang) for words in sentences], lang=lang)
    return Root(children=[paragraph], lang=lang)


def hello_world() -> Root:
    """The two-word document used across the engine tests."""
    return make_document(["hello", "world"])


def writer(extension_id: str, key: str, value: Any, **kwargs: Any) -> Extension:
    """Extension whose enhancer writes ``extras[key] = value`` on every word."""
    return Extension(id=extension_id, enhance_metadata=lambda word: {key: value}, **kwargs)


def failing(extension_id: str, exc: Exception | None = None, **kwargs: Any) -> Extension:
    """Extension whose word visitor raises."""
    error = exc if exc is not None else RuntimeError(f"{extension_id} exploded")

    def boom(word: Word) -> None:
        raise error

    return Extension(id=extension_id, visit={"word": boom}, **kwargs)
