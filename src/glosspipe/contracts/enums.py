"""All status codes, modes, and kinds used across subsystem boundaries.

Node type values match the serialised ``type`` tag of each tree node, so a
document dumped to JSON and loaded back keeps its node kinds.
"""

from enum import StrEnum


class NodeType(StrEnum):
    """Kind of node in a document tree.

    ROOT, PARAGRAPH, SENTENCE and WORD own children. The remaining kinds are
    leaves and act as traversal terminals.
    """

    ROOT = "RootNode"
    PARAGRAPH = "ParagraphNode"
    SENTENCE = "SentenceNode"
    WORD = "WordNode"
    TEXT = "TextNode"
    PUNCTUATION = "PunctuationNode"
    WHITESPACE = "WhiteSpaceNode"
    SYMBOL = "SymbolNode"
    SOURCE = "SourceNode"

    @classmethod
    def parse(cls, value: "str | NodeType") -> "NodeType":
        """Accept a NodeType, its tag value, or a short name like ``"word"``.

        Raises:
            ValueError: If the value names no known node type.
        """
        if isinstance(value, NodeType):
            return value
        if value in _SHORT_NAMES:
            return _SHORT_NAMES[value]
        try:
            return cls(value)
        except ValueError:
            valid = ", ".join(sorted(_SHORT_NAMES))
            raise ValueError(f"Unknown node type {value!r}. Valid short names: {valid}") from None


_SHORT_NAMES: dict[str, NodeType] = {
    "root": NodeType.ROOT,
    "paragraph": NodeType.PARAGRAPH,
    "sentence": NodeType.SENTENCE,
    "word": NodeType.WORD,
    "text": NodeType.TEXT,
    "punctuation": NodeType.PUNCTUATION,
    "whitespace": NodeType.WHITESPACE,
    "symbol": NodeType.SYMBOL,
    "source": NodeType.SOURCE,
}


class ConflictStrategy(StrEnum):
    """Policy applied when two extensions write the same tracked field.

    Values:
        ERROR: Raise ExtensionConflictError, nothing is committed
        WARN: Record a warning and let the later value overwrite
        LAST_WINS: Overwrite silently
    """

    ERROR = "error"
    WARN = "warn"
    LAST_WINS = "lastWins"


class Capability(StrEnum):
    """Behaviours an extension can implement.

    The orchestrator dispatches on the declared capability set instead of
    probing for optional attributes.
    """

    TRANSFORMER = "transformer"
    VISITOR = "visitor"
    ENHANCER = "enhancer"


class ProcessingPhase(StrEnum):
    """Phase of an extension run in which an error occurred."""

    VALIDATE = "validate"
    TRANSFORM = "transform"
    VISIT = "visit"
    ENHANCE = "enhance"


class ErrorKind(StrEnum):
    """Failure taxonomy for extension errors.

    Values:
        CYCLE: Dependency cycle, aborts resolution before anything runs
        DEPENDENCY_UNMET: An extension found a required field missing
        FIELD_CONFLICT: Two extensions wrote the same tracked field
        MISSING_NODE_TYPE: Nodes of a required kind are absent from the tree
        GENERIC: Anything else an extension raised
    """

    CYCLE = "cycle"
    DEPENDENCY_UNMET = "dependency_unmet"
    FIELD_CONFLICT = "field_conflict"
    MISSING_NODE_TYPE = "missing_node_type"
    GENERIC = "generic"


class WarningSeverity(StrEnum):
    """Severity attached to a processing warning."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
