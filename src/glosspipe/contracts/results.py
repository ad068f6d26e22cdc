"""Result types returned by a processing run.

ProcessingResult is what every ``process`` call returns, including strict
runs that stopped at the first failing extension. Callers inspect
``metadata.errors`` and ``metadata.skipped_extensions`` to decide whether the
enriched document is complete enough to use.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from glosspipe.contracts.enums import ErrorKind, ProcessingPhase, WarningSeverity

if TYPE_CHECKING:
    from glosspipe.contracts.errors import ExtensionError
    from glosspipe.contracts.nodes import Root


@dataclass(frozen=True, slots=True)
class ExtensionErrorRecord:
    """A failure recorded against one extension.

    Attributes:
        extension_id: Id of the failing extension
        kind: Failure classification
        phase: Phase the extension was in when it failed
        message: Human-readable message
        recoverable: False when the failure stopped the run (strict mode)
        error: The exception, always an ExtensionError subclass
    """

    extension_id: str
    kind: ErrorKind
    phase: ProcessingPhase
    message: str
    recoverable: bool
    error: ExtensionError


@dataclass(frozen=True, slots=True)
class ProcessingWarning:
    """Non-fatal observation made during a run (e.g. a tolerated conflict)."""

    extension_id: str
    message: str
    severity: WarningSeverity = WarningSeverity.MEDIUM
    field: str | None = None


@dataclass(frozen=True, slots=True)
class ProgressStats:
    """Progress snapshot passed to ``on_progress`` hooks.

    Times are ``time.perf_counter()`` seconds.
    """

    total: int
    completed: int
    start_time: float
    elapsed: float
    current: str | None = None


@dataclass
class ProcessingStats:
    """Timing and volume figures for a run.

    Attributes:
        total_time: Wall time of the run in seconds
        timing: extension_id -> seconds spent in that extension
        nodes_processed: Nodes handed to visitor/enhancer callbacks
        start_time: perf_counter() value at run start
        end_time: perf_counter() value at run end
    """

    total_time: float = 0.0
    timing: dict[str, float] = field(default_factory=dict)
    nodes_processed: int = 0
    start_time: float = 0.0
    end_time: float = 0.0


@dataclass
class ProcessingMetadata:
    """What ran, what was skipped, and why.

    ``applied_extensions`` and ``skipped_extensions`` partition the input
    extension ids unless ``aborted`` is True, in which case extensions after
    the failing one appear in neither list.
    """

    applied_extensions: list[str] = field(default_factory=list)
    skipped_extensions: list[str] = field(default_factory=list)
    errors: list[ExtensionErrorRecord] = field(default_factory=list)
    warnings: list[ProcessingWarning] = field(default_factory=list)
    stats: ProcessingStats = field(default_factory=ProcessingStats)
    aborted: bool = False

    @property
    def succeeded(self) -> bool:
        """True when no extension failed."""
        return not self.errors


@dataclass
class ProcessingResult:
    """Processed document plus run metadata."""

    document: Root
    metadata: ProcessingMetadata
