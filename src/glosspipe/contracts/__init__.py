"""Shared contracts for cross-boundary data types.

Node model, extension descriptor, error types and result types. This package
is a LEAF MODULE with no runtime dependencies on core/engine/plugins, so
extension authors can import it cheaply:

    from glosspipe.contracts import Extension, Word, get_word_text
"""

from glosspipe.contracts.enums import (
    Capability,
    ConflictStrategy,
    ErrorKind,
    NodeType,
    ProcessingPhase,
    WarningSeverity,
)
from glosspipe.contracts.errors import (
    AsyncCallbackError,
    DependencyCycleError,
    DuplicateExtensionError,
    ExtensionConflictError,
    ExtensionDependencyError,
    ExtensionError,
    ExtensionExecutionError,
    ExtensionNotFoundError,
    FrozenProcessorError,
    MissingNodeTypeError,
)
from glosspipe.contracts.extension import (
    EnhancerProtocol,
    Extension,
    ExtensionContext,
    FieldDeclaration,
    TransformerProtocol,
    VisitorProtocol,
)
from glosspipe.contracts.nodes import (
    Leaf,
    Node,
    Paragraph,
    Punctuation,
    Root,
    Sentence,
    Source,
    Symbol,
    Text,
    Transcription,
    WhiteSpace,
    Word,
    count_nodes,
    get_all_words,
    get_word_text,
    has_node_type,
    is_leaf,
    iter_nodes,
)
from glosspipe.contracts.results import (
    ExtensionErrorRecord,
    ProcessingMetadata,
    ProcessingResult,
    ProcessingStats,
    ProcessingWarning,
    ProgressStats,
)

__all__ = [
    "AsyncCallbackError",
    "Capability",
    "ConflictStrategy",
    "DependencyCycleError",
    "DuplicateExtensionError",
    "EnhancerProtocol",
    "ErrorKind",
    "Extension",
    "ExtensionConflictError",
    "ExtensionContext",
    "ExtensionDependencyError",
    "ExtensionError",
    "ExtensionErrorRecord",
    "ExtensionExecutionError",
    "ExtensionNotFoundError",
    "FieldDeclaration",
    "FrozenProcessorError",
    "Leaf",
    "MissingNodeTypeError",
    "Node",
    "NodeType",
    "Paragraph",
    "ProcessingMetadata",
    "ProcessingPhase",
    "ProcessingResult",
    "ProcessingStats",
    "ProcessingWarning",
    "ProgressStats",
    "Punctuation",
    "Root",
    "Sentence",
    "Source",
    "Symbol",
    "Text",
    "Transcription",
    "TransformerProtocol",
    "VisitorProtocol",
    "WarningSeverity",
    "WhiteSpace",
    "Word",
    "count_nodes",
    "get_all_words",
    "get_word_text",
    "has_node_type",
    "is_leaf",
    "iter_nodes",
]
