# src/glosspipe/plugins/extensions/providers.py
"""Language data providers consumed by the built-in extensions.

Providers are pure lookups: word text plus language in, a level string (or
None) out. Real corpora live outside glosspipe; the mapping-backed providers
here cover tests, demos and small hand-curated word lists.

A provider may return an awaitable. Extensions backed by such a provider
only work under process_async().
"""

from __future__ import annotations

from collections.abc import Awaitable, Mapping
from typing import Protocol, runtime_checkable


@runtime_checkable
class FrequencyProvider(Protocol):
    """Looks up how common a word is.

    Levels: ``very-common``, ``common``, ``uncommon``, ``rare``.
    """

    def get_frequency(self, word: str, language: str | None) -> str | None | Awaitable[str | None]: ...


@runtime_checkable
class DifficultyProvider(Protocol):
    """Looks up how hard a word is for a learner.

    Levels: ``beginner``, ``intermediate``, ``advanced``.
    """

    def get_difficulty(self, word: str, language: str | None) -> str | None | Awaitable[str | None]: ...


class _MappingProvider:
    def __init__(self, levels: Mapping[str, str], *, case_sensitive: bool = False) -> None:
        self._case_sensitive = case_sensitive
        self._levels = {self._key(word): level for word, level in levels.items()}

    def _key(self, word: str) -> str:
        return word if self._case_sensitive else word.casefold()

    def _lookup(self, word: str) -> str | None:
        return self._levels.get(self._key(word))


class MappingFrequencyProvider(_MappingProvider):
    """Frequency levels from a word -> level mapping. Language is ignored."""

    def get_frequency(self, word: str, language: str | None) -> str | None:
        return self._lookup(word)


class MappingDifficultyProvider(_MappingProvider):
    """Difficulty levels from a word -> level mapping. Language is ignored."""

    def get_difficulty(self, word: str, language: str | None) -> str | None:
        return self._lookup(word)
