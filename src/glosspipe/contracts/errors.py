"""Exception contracts for extension resolution and execution.

Two families live here:

Resolution errors (DependencyCycleError, DuplicateExtensionError,
ExtensionNotFoundError) describe an invalid extension list. They are raised
to the caller before any extension runs - there is no partial order to
execute.

Extension errors (ExtensionError subclasses) describe a failure inside a
single extension. The orchestrator catches them per extension, records them
in the result, and applies the lenient/strict policy. Anything else an
extension raises is wrapped in ExtensionExecutionError so every recorded
error carries an extension id and a kind.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Any

from glosspipe.contracts.enums import ErrorKind, ProcessingPhase


def _render(value: Any) -> str:
    """Render a value for an error message, falling back to repr()."""
    try:
        return json.dumps(value, default=repr, ensure_ascii=False)
    except (TypeError, ValueError):
        return repr(value)


# =============================================================================
# Resolution errors
# =============================================================================


class DependencyCycleError(ValueError):
    """Raised when extension dependencies form a cycle.

    Attributes:
        extension_ids: Ids participating in the cycle, in cycle order
    """

    kind = ErrorKind.CYCLE

    def __init__(self, extension_ids: Sequence[str]) -> None:
        self.extension_ids = tuple(extension_ids)
        if len(self.extension_ids) == 1:
            detail = f"extension '{self.extension_ids[0]}' depends on itself"
        else:
            path = " -> ".join([*self.extension_ids, self.extension_ids[0]])
            detail = path
        super().__init__(f"Circular dependency detected in extensions: {detail}")


class DuplicateExtensionError(ValueError):
    """Raised when an extension id appears more than once in one run."""

    def __init__(self, extension_id: str) -> None:
        self.extension_id = extension_id
        super().__init__(f"Duplicate extension id '{extension_id}': ids must be unique within a run")


class ExtensionNotFoundError(LookupError):
    """Raised when extension ids cannot be resolved through a registry."""

    def __init__(self, missing_ids: Sequence[str], suggestions: dict[str, list[str]] | None = None) -> None:
        self.missing_ids = tuple(missing_ids)
        self.suggestions = suggestions or {}
        message = f"Extensions not found: {', '.join(self.missing_ids)}"
        hints = [f"'{mid}' -> did you mean {', '.join(repr(s) for s in close)}?" for mid, close in self.suggestions.items() if close]
        if hints:
            message += "\n  " + "\n  ".join(hints)
        super().__init__(message)


# =============================================================================
# Extension errors
# =============================================================================


class ExtensionError(Exception):
    """Base class for failures attributed to a single extension.

    Attributes:
        extension_id: Id of the failing extension
        kind: ErrorKind classification used in processing results
        recoverable: Whether lenient mode may continue past this error
    """

    kind: ErrorKind = ErrorKind.GENERIC
    recoverable: bool = True

    def __init__(self, extension_id: str, message: str) -> None:
        self.extension_id = extension_id
        super().__init__(message)


class ExtensionDependencyError(ExtensionError):
    """Raised by an extension when a field it requires is absent.

    The orchestrator does not check ``requires`` declarations up front; the
    extension itself detects the missing field and raises this error with a
    remediation hint.

    Example:
        raise ExtensionDependencyError(
            "reading-score",
            "frequency",
            "extras.frequency.level",
            "Ensure the frequency extension runs before reading-score.",
        )
    """

    kind = ErrorKind.DEPENDENCY_UNMET

    def __init__(self, extension_id: str, dependency_id: str, missing_field: str, suggestion: str) -> None:
        self.dependency_id = dependency_id
        self.missing_field = missing_field
        self.suggestion = suggestion
        super().__init__(
            extension_id,
            f'Extension "{extension_id}" requires "{missing_field}" from "{dependency_id}".\n{suggestion}',
        )


class ExtensionConflictError(ExtensionError):
    """Raised when an extension writes a tracked field another extension wrote.

    Only raised under the ``error`` conflict strategy. The incoming value is
    not committed.
    """

    kind = ErrorKind.FIELD_CONFLICT

    def __init__(
        self,
        field: str,
        existing_extension_id: str,
        incoming_extension_id: str,
        existing_value: Any,
        incoming_value: Any,
    ) -> None:
        self.field = field
        self.existing_extension_id = existing_extension_id
        self.incoming_extension_id = incoming_extension_id
        self.existing_value = existing_value
        self.incoming_value = incoming_value
        super().__init__(
            incoming_extension_id,
            f'Metadata conflict at "{field}": Extension "{incoming_extension_id}" '
            f'would overwrite value set by "{existing_extension_id}".\n'
            f"Existing: {_render(existing_value)}\n"
            f"Incoming: {_render(incoming_value)}\n"
            'Use conflict_strategy="warn" or conflict_strategy="lastWins" to allow overwrites.',
        )


class MissingNodeTypeError(ExtensionError):
    """Raised when an extension needs nodes of a kind the tree does not contain."""

    kind = ErrorKind.MISSING_NODE_TYPE

    def __init__(self, extension_id: str, node_type: str, suggested_extension: str | None = None) -> None:
        self.node_type = node_type
        self.suggested_extension = suggested_extension
        if suggested_extension:
            suggestion = f'Add "{suggested_extension}" to your extension list before "{extension_id}".'
        else:
            suggestion = f"Ensure an extension that creates {node_type} nodes runs first."
        super().__init__(
            extension_id,
            f'Extension "{extension_id}" requires "{node_type}" nodes, but none were found.\n{suggestion}',
        )


class ExtensionExecutionError(ExtensionError):
    """Wraps any other exception raised by an extension callback.

    The original exception is available as ``cause`` and ``__cause__``.
    """

    def __init__(self, extension_id: str, phase: ProcessingPhase, cause: BaseException) -> None:
        self.phase = phase
        self.cause = cause
        super().__init__(extension_id, f"{type(cause).__name__} in {phase} phase of '{extension_id}': {cause}")


class AsyncCallbackError(ExtensionError):
    """Raised when a synchronous run meets a callback that returned an awaitable."""

    def __init__(self, extension_id: str, phase: ProcessingPhase) -> None:
        self.phase = phase
        super().__init__(
            extension_id,
            f"Extension '{extension_id}' returned an awaitable from its {phase} callback; use process_async() for async extensions.",
        )


class FrozenProcessorError(RuntimeError):
    """Raised when a frozen Processor is modified."""
