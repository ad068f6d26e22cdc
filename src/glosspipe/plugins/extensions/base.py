# src/glosspipe/plugins/extensions/base.py
"""Shared building blocks for provider-backed word extensions.

frequency and difficulty follow the same shape: a word visitor that asks a
provider for a level, normalises it, and writes a small record under one
``extras`` key through ``ctx.set_extra``. lookup_visitor() builds that
visitor once for both.

Extension options read at run time (``ctx.extension_options``):
    skip_existing: Leave words that already carry the key alone (default True)
    language: Language passed to the provider (default: the word's ``lang``)
    levels: word -> level mapping that replaces the configured provider
"""

from __future__ import annotations

import inspect
import re
from collections.abc import Awaitable, Callable, Mapping
from typing import Any, TypeAlias

from glosspipe.contracts.extension import ExtensionContext
from glosspipe.contracts.nodes import Word, get_word_text

_TRAILING_PUNCTUATION = re.compile(r"[!?.,:;]$")

Lookup: TypeAlias = "Callable[[str, str | None, ExtensionContext], str | None | Awaitable[str | None]]"
Normalise: TypeAlias = "Callable[[Any], str | None]"
Build: TypeAlias = "Callable[[str], dict[str, Any]]"


def clean_word_text(word: Word) -> str:
    """Word text with surrounding whitespace and one trailing punctuation mark removed."""
    return _TRAILING_PUNCTUATION.sub("", get_word_text(word).strip())


def lookup_visitor(
    field: str,
    lookup: Lookup,
    normalise: Normalise,
    build: Build,
) -> Callable[[Word, ExtensionContext], Awaitable[None] | None]:
    """Build a word visitor that stores ``build(level)`` at ``extras[field]``.

    Words without text, or for which the lookup yields no valid level, are
    left untouched.
    """

    def store(word: Word, ctx: ExtensionContext, raw: Any) -> None:
        level = normalise(raw)
        if level is not None:
            ctx.set_extra(word, field, build(level))

    async def store_later(word: Word, ctx: ExtensionContext, pending: Awaitable[str | None]) -> None:
        store(word, ctx, await pending)

    def visit_word(word: Word, ctx: ExtensionContext) -> Awaitable[None] | None:
        if ctx.extension_options.get("skip_existing", True) and word.extras.get(field):
            return None
        text = clean_word_text(word)
        if not text:
            return None
        language = ctx.extension_options.get("language") or word.lang
        raw = lookup(text, language, ctx)
        if inspect.isawaitable(raw):
            return store_later(word, ctx, raw)
        store(word, ctx, raw)
        return None

    return visit_word


def configured_levels(ctx: ExtensionContext) -> Mapping[str, str] | None:
    """The ``levels`` option, when set."""
    levels = ctx.extension_options.get("levels")
    if levels is None:
        return None
    if not isinstance(levels, Mapping):
        raise TypeError(f"'levels' option must be a mapping of word -> level, got {type(levels).__name__}")
    return levels
