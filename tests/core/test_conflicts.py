# tests/core/test_conflicts.py
"""Tests for the conflict detector."""

import pytest

from glosspipe.contracts.enums import ConflictStrategy, WarningSeverity
from glosspipe.contracts.errors import ExtensionConflictError
from glosspipe.contracts.results import ProcessingWarning
from tests.fixtures.documents import make_word


class TestErrorStrategy:
    """Default strategy: a second writer is rejected."""

    def test_first_write_recorded(self) -> None:
        from glosspipe.core.conflicts import ConflictDetector

        detector = ConflictDetector()
        word = make_word("a")

        assert detector.record(word, "extras.priority", "a", 1) == 1
        assert detector.writer_of(word, "extras.priority") == "a"
        assert len(detector) == 1

    def test_second_writer_raises_with_both_sides(self) -> None:
        from glosspipe.core.conflicts import ConflictDetector

        detector = ConflictDetector(ConflictStrategy.ERROR)
        word = make_word("a")
        detector.record(word, "extras.priority", "a", 1)

        with pytest.raises(ExtensionConflictError) as exc_info:
            detector.record(word, "extras.priority", "b", 2)

        error = exc_info.value
        assert error.field == "extras.priority"
        assert (error.existing_extension_id, error.incoming_extension_id) == ("a", "b")
        assert (error.existing_value, error.incoming_value) == (1, 2)
        # Ownership unchanged
        assert detector.writer_of(word, "extras.priority") == "a"

    def test_same_writer_may_overwrite(self) -> None:
        from glosspipe.core.conflicts import ConflictDetector

        detector = ConflictDetector()
        word = make_word("a")
        detector.record(word, "extras.priority", "a", 1)

        assert detector.record(word, "extras.priority", "a", 5) == 5

    def test_fields_and_nodes_tracked_separately(self) -> None:
        from glosspipe.core.conflicts import ConflictDetector

        detector = ConflictDetector()
        first, second = make_word("a"), make_word("a")
        detector.record(first, "extras.priority", "a", 1)

        detector.record(second, "extras.priority", "b", 2)
        detector.record(first, "metadata.priority", "b", 3)

        assert detector.writer_of(second, "extras.priority") == "b"


class TestTolerantStrategies:
    """warn and lastWins let the later value through."""

    def test_warn_records_warning(self) -> None:
        from glosspipe.core.conflicts import ConflictDetector

        sink: list[ProcessingWarning] = []
        detector = ConflictDetector(ConflictStrategy.WARN, sink)
        word = make_word("a")
        detector.record(word, "extras.priority", "a", 1)

        assert detector.record(word, "extras.priority", "b", 2) == 2

        assert len(sink) == 1
        assert sink[0].extension_id == "b"
        assert sink[0].field == "extras.priority"
        assert sink[0].severity is WarningSeverity.MEDIUM
        assert detector.writer_of(word, "extras.priority") == "b"

    def test_last_wins_is_silent(self) -> None:
        from glosspipe.core.conflicts import ConflictDetector

        detector = ConflictDetector("lastWins")  # type: ignore[arg-type]
        word = make_word("a")
        detector.record(word, "extras.priority", "a", 1)

        assert detector.record(word, "extras.priority", "b", 2) == 2
        assert detector.warnings == []
        assert detector.strategy is ConflictStrategy.LAST_WINS
