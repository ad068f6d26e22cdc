# tests/engine/test_processor.py
"""Tests for the fluent Processor builder."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import pytest

from glosspipe.contracts.errors import ExtensionError, ExtensionNotFoundError, FrozenProcessorError
from glosspipe.contracts.extension import Extension
from glosspipe.contracts.nodes import Word, get_all_words, get_word_text
from glosspipe.engine.processor import Processor
from glosspipe.plugins.presets import READING, WORD_STATS, Preset
from glosspipe.plugins.registry import ExtensionRegistry
from tests.fixtures.documents import failing, hello_world, make_document, writer


class TestBuilding:
    """use() and the extension forms it accepts."""

    def test_default_registry_has_builtins(self) -> None:
        processor = Processor()

        assert {"frequency", "difficulty", "reading-score", "word-length"} <= set(processor.registry.ids())

    def test_use_by_id(self) -> None:
        extensions = Processor().use("word-length").extensions()

        assert [e.id for e in extensions] == ["word-length"]

    def test_use_unknown_id_fails_at_resolution(self) -> None:
        processor = Processor().use("nope")

        with pytest.raises(ExtensionNotFoundError):
            processor.extensions()

    def test_use_with_options_merges_into_descriptor(self) -> None:
        extension = Processor().use("frequency", {"language": "fr"}).extensions()[0]

        assert extension.options["language"] == "fr"
        assert extension.options["skip_existing"] is True

    def test_factory_called_with_options(self) -> None:
        calls: list[Mapping[str, Any] | None] = []

        def factory(options: Mapping[str, Any] | None) -> Extension:
            calls.append(options)
            return writer("made", "x", (options or {}).get("value"))

        extensions = Processor().use(factory, {"value": 3}).extensions()

        assert calls == [{"value": 3}]
        assert extensions[0].id == "made"

    def test_factory_returning_none_is_dropped(self) -> None:
        assert Processor().use(lambda options: None).extensions() == []

    def test_class_based_extension(self) -> None:
        class Tagger:
            id = "tagger"

            def enhance_metadata(self, word: Word, ctx: Any) -> dict[str, bool]:
                return {"tagged": True}

        extensions = Processor().use(Tagger()).extensions()

        assert extensions[0].id == "tagger"

    def test_preset_expands_in_place(self) -> None:
        extensions = Processor().use(writer("first", "x", 1)).use(READING).extensions()

        assert [e.id for e in extensions] == ["first", "frequency", "difficulty", "reading-score"]

    def test_preset_entries_with_options(self) -> None:
        preset = Preset(id="custom", name="Custom", plugins=(("frequency", {"language": "de"}), "word-length"))

        extensions = Processor().use(preset).extensions()

        assert extensions[0].options["language"] == "de"
        assert extensions[1].id == "word-length"


class TestData:
    """Shared data exposed as ctx.data."""

    def test_data_get_and_set(self) -> None:
        processor = Processor()

        assert processor.data("unit", "cm") is processor
        assert processor.data("unit") == "cm"
        assert processor.data("missing") is None

    def test_data_reaches_extensions(self) -> None:
        ext = Extension(id="unit", enhance_metadata=lambda w, ctx: {"unit": ctx.data["unit"]})

        result = Processor().use(ext).data("unit", "cm").process_sync(hello_world())

        assert [w.extras["unit"] for w in get_all_words(result.document)] == ["cm", "cm"]


class TestFreeze:
    """Frozen processors are immutable snapshots."""

    def test_frozen_rejects_modification(self) -> None:
        frozen = Processor().use("word-length").freeze()

        assert frozen.frozen
        with pytest.raises(FrozenProcessorError):
            frozen.use("frequency")
        with pytest.raises(FrozenProcessorError):
            frozen.data("key", 1)
        with pytest.raises(FrozenProcessorError):
            frozen.on_error(lambda error, eid: None)

    def test_frozen_copy_is_independent(self) -> None:
        original = Processor().use("word-length")
        frozen = original.freeze()

        original.use("frequency")

        assert [e.id for e in frozen.extensions()] == ["word-length"]
        assert not original.frozen

    def test_frozen_processor_still_runs(self) -> None:
        frozen = Processor().use(WORD_STATS).freeze()

        first = frozen.process_sync(hello_world())
        second = frozen.process_sync(hello_world())

        assert first.metadata.applied_extensions == second.metadata.applied_extensions == ["word-length"]


class TestHooks:
    """Hooks compose: several per event, before/after scoped by id."""

    def test_before_and_after_scoped_to_extension(self) -> None:
        events: list[str] = []
        processor = (
            Processor()
            .use(writer("a", "x", 1))
            .use(writer("b", "y", 2))
            .before("b", lambda eid: events.append(f"before:{eid}"))
            .after("b", lambda eid: events.append(f"after:{eid}"))
        )

        processor.process_sync(hello_world())

        assert events == ["before:b", "after:b"]

    def test_multiple_error_hooks_all_called(self) -> None:
        seen: list[tuple[str, str]] = []

        def record(tag: str) -> Any:
            def hook(error: ExtensionError, extension_id: str) -> None:
                seen.append((tag, extension_id))

            return hook

        processor = Processor({"lenient": True}).use(failing("bad")).on_error(record("one")).on_error(record("two"))

        processor.process_sync(hello_world())

        assert seen == [("one", "bad"), ("two", "bad")]

    def test_skip_and_progress_hooks(self) -> None:
        skipped: list[str] = []
        completed: list[int] = []
        processor = (
            Processor({"lenient": True})
            .use(failing("bad"))
            .use(writer("ok", "x", 1))
            .on_skip(lambda eid, reason: skipped.append(eid))
            .on_progress(lambda stats: completed.append(stats.completed))
        )

        processor.process_sync(hello_world())

        assert skipped == ["bad"]
        assert completed == [0, 1, 2]


class TestRunning:
    """process(), process_with_meta() and process_sync()."""

    @pytest.mark.asyncio
    async def test_process_returns_tree(self) -> None:
        doc = await Processor().use("word-length").process(hello_world())

        assert [w.extras["length"] for w in get_all_words(doc)] == [5, 5]

    @pytest.mark.asyncio
    async def test_process_with_meta_awaits_async_extensions(self) -> None:
        async def shout(word: Word) -> dict[str, str]:
            return {"upper": get_word_text(word).upper()}

        result = await Processor().use(Extension(id="shout", enhance_metadata=shout)).process_with_meta(hello_world())

        assert [w.extras["upper"] for w in get_all_words(result.document)] == ["HELLO", "WORLD"]
        assert result.metadata.applied_extensions == ["shout"]

    def test_process_sync_orders_by_dependency(self) -> None:
        result = (
            Processor()
            .use("reading-score")
            .use("frequency", {"levels": {"hello": "common", "world": "rare"}})
            .use("difficulty", {"levels": {"hello": "beginner", "world": "advanced"}})
            .process_sync(hello_world())
        )

        assert result.metadata.applied_extensions == ["frequency", "difficulty", "reading-score"]
        scores = [w.extras["readingScore"]["score"] for w in get_all_words(result.document)]
        assert scores == [1.4, 3.4]

    def test_options_accepted_as_mapping(self) -> None:
        processor = Processor({"conflictStrategy": "lastWins"})

        result = processor.use(writer("a", "p", 1)).use(writer("b", "p", 2)).process_sync(make_document(["x"]))

        assert result.metadata.errors == []
        assert get_all_words(result.document)[0].extras["p"] == 2

    def test_custom_registry(self) -> None:
        registry = ExtensionRegistry()
        registry.add(writer("mine", "m", True))

        result = Processor(registry=registry).use("mine").process_sync(hello_world())

        assert result.metadata.applied_extensions == ["mine"]
        assert "frequency" not in registry
