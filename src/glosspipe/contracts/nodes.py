# src/glosspipe/contracts/nodes.py
"""Document tree node model.

A document is a tree of mutable dataclasses:

    Root -> Paragraph -> Sentence -> Word -> leaf tokens

Every non-leaf node owns an ordered ``children`` list. Ownership is
exclusive: a node appears in exactly one parent's list, and the tree never
contains cycles. The tree builder is responsible for that, and for the
conceptual inheritance of ``lang``/``script`` from ancestors. The pipeline
never validates either.

Node construction helpers live with the callers that build trees; this
module only defines the node types and read-only traversal utilities.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any, ClassVar, TypeAlias

from glosspipe.contracts.enums import NodeType


@dataclass
class Transcription:
    """Transcription of a word in one scheme (e.g. ``ipa``, ``romaji``)."""

    text: str
    variants: list[dict[str, Any]] = field(default_factory=list)
    tone: int | None = None
    syllables: list[str] | None = None
    phonetic: str | None = None


@dataclass
class Leaf:
    """Base class for leaf tokens. Leaves carry a literal value only."""

    type: ClassVar[NodeType]

    value: str


@dataclass
class Text(Leaf):
    type: ClassVar[NodeType] = NodeType.TEXT


@dataclass
class Punctuation(Leaf):
    type: ClassVar[NodeType] = NodeType.PUNCTUATION


@dataclass
class WhiteSpace(Leaf):
    type: ClassVar[NodeType] = NodeType.WHITESPACE


@dataclass
class Symbol(Leaf):
    type: ClassVar[NodeType] = NodeType.SYMBOL


@dataclass
class Source(Leaf):
    type: ClassVar[NodeType] = NodeType.SOURCE


@dataclass
class Word:
    """A word: leaf-text payload plus annotations.

    ``extras`` is an open-ended scratchpad. Extensions write under their own
    or a well-known top-level key; those top-level keys, together with the
    top-level keys of ``metadata``, are the fields tracked for conflicts.
    """

    type: ClassVar[NodeType] = NodeType.WORD

    children: list[Leaf] = field(default_factory=list)
    lang: str | None = None
    script: str | None = None
    transcription: dict[str, Transcription] = field(default_factory=dict)
    metadata: dict[str, Any] = field(default_factory=dict)
    extras: dict[str, Any] = field(default_factory=dict)


@dataclass
class Sentence:
    type: ClassVar[NodeType] = NodeType.SENTENCE

    children: list[Word | Leaf] = field(default_factory=list)
    lang: str | None = None
    script: str | None = None
    original_text: str = ""
    extras: dict[str, Any] = field(default_factory=dict)


@dataclass
class Paragraph:
    type: ClassVar[NodeType] = NodeType.PARAGRAPH

    children: list[Sentence | Leaf] = field(default_factory=list)
    lang: str | None = None
    script: str | None = None
    extras: dict[str, Any] = field(default_factory=dict)


@dataclass
class Root:
    """Document root.

    ``metadata`` holds document-level information (title, author, ...), not
    linguistic annotations.
    """

    type: ClassVar[NodeType] = NodeType.ROOT

    children: list[Paragraph | Sentence | Word | Leaf] = field(default_factory=list)
    lang: str | None = None
    script: str | None = None
    extras: dict[str, Any] = field(default_factory=dict)
    metadata: dict[str, Any] = field(default_factory=dict)


Parent: TypeAlias = "Root | Paragraph | Sentence | Word"
Node: TypeAlias = "Parent | Leaf"


def is_leaf(node: Node) -> bool:
    """Whether the node is a traversal terminal."""
    return isinstance(node, Leaf)


def iter_nodes(tree: Node) -> Iterator[Node]:
    """Yield every node of the tree in document order (pre-order).

    Parents are yielded before their children, children left to right.
    Children are read when the parent is expanded, so the iterator reflects
    edits a consumer makes to a node's children before moving on.
    """
    stack: list[Node] = [tree]
    while stack:
        node = stack.pop()
        yield node
        if not isinstance(node, Leaf):
            stack.extend(reversed(node.children))


def get_all_words(tree: Node) -> list[Word]:
    """Collect all Word nodes in document order."""
    return [node for node in iter_nodes(tree) if isinstance(node, Word)]


def get_word_text(word: Word) -> str:
    """Return the value of the word's first Text child, or ``""``."""
    for child in word.children:
        if isinstance(child, Text):
            return child.value
    return ""


def has_node_type(tree: Node, node_type: NodeType | str) -> bool:
    """Check whether any node of ``node_type`` exists in the tree."""
    wanted = NodeType.parse(node_type)
    return any(node.type == wanted for node in iter_nodes(tree))


def count_nodes(tree: Node) -> int:
    """Number of nodes in the tree, the root included."""
    return sum(1 for _ in iter_nodes(tree))
