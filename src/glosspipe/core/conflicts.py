# src/glosspipe/core/conflicts.py
"""Conflict detection for tracked field writes.

One ConflictDetector lives for exactly one processing run. It remembers which
extension last wrote each tracked field of each node and applies the run's
ConflictStrategy when a different extension writes the same field again.

Tracked fields are the top-level keys of ``Word.extras`` and
``Word.metadata``, addressed as ``"extras.<key>"`` / ``"metadata.<key>"``.
Values that were already present in the input document have no recorded
writer and can be overwritten freely.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from glosspipe.contracts.enums import ConflictStrategy, WarningSeverity
from glosspipe.contracts.errors import ExtensionConflictError
from glosspipe.contracts.results import ProcessingWarning
from glosspipe.core.logging import get_logger

logger = get_logger(__name__)


@dataclass(slots=True)
class _WriteRecord:
    # Holding the node keeps id(node) from being reused while the record lives
    node: Any
    writer_id: str
    value: Any


class ConflictDetector:
    """Tracks field ownership within a run and applies the conflict strategy.

    Example:
        warnings: list[ProcessingWarning] = []
        detector = ConflictDetector(ConflictStrategy.WARN, warnings)
        value = detector.record(word, "extras.priority", "a", 1)
        word.extras["priority"] = value
    """

    def __init__(
        self,
        strategy: ConflictStrategy = ConflictStrategy.ERROR,
        warnings_sink: list[ProcessingWarning] | None = None,
    ) -> None:
        self._strategy = ConflictStrategy(strategy)
        self._warnings = warnings_sink if warnings_sink is not None else []
        self._records: dict[tuple[int, str], _WriteRecord] = {}

    @property
    def strategy(self) -> ConflictStrategy:
        return self._strategy

    @property
    def warnings(self) -> list[ProcessingWarning]:
        return self._warnings

    def writer_of(self, node: Any, field_path: str) -> str | None:
        """Id of the extension that last wrote the field, if any."""
        record = self._records.get((id(node), field_path))
        return record.writer_id if record is not None else None

    def record(self, node: Any, field_path: str, writer_id: str, value: Any) -> Any:
        """Check a write and register ``writer_id`` as the field's owner.

        The caller commits the returned value to the node.

        Raises:
            ExtensionConflictError: Under the ``error`` strategy when another
                extension owns the field. Nothing is recorded in that case.
        """
        key = (id(node), field_path)
        existing = self._records.get(key)

        if existing is not None and existing.writer_id != writer_id:
            if self._strategy is ConflictStrategy.ERROR:
                raise ExtensionConflictError(
                    field=field_path,
                    existing_extension_id=existing.writer_id,
                    incoming_extension_id=writer_id,
                    existing_value=existing.value,
                    incoming_value=value,
                )
            if self._strategy is ConflictStrategy.WARN:
                message = f'Extension "{writer_id}" overwrote "{field_path}" set by "{existing.writer_id}"'
                self._warnings.append(
                    ProcessingWarning(
                        extension_id=writer_id,
                        message=message,
                        severity=WarningSeverity.MEDIUM,
                        field=field_path,
                    )
                )
                logger.warning(
                    "Field conflict tolerated",
                    field=field_path,
                    existing_extension_id=existing.writer_id,
                    incoming_extension_id=writer_id,
                )

        self._records[key] = _WriteRecord(node=node, writer_id=writer_id, value=value)
        return value

    def __len__(self) -> int:
        return len(self._records)
