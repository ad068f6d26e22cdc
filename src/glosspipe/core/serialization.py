# src/glosspipe/core/serialization.py
"""Conversion between node trees and JSON-compatible dicts.

Every node serialises to a dict with a ``type`` tag holding its NodeType
value; leaves add ``value``, parents add ``children``. Optional fields are
omitted when unset, and ``Sentence.original_text`` is written as
``originalText`` to match document tooling outside Python.

    {"type": "WordNode", "lang": "en", "children": [{"type": "TextNode", "value": "hi"}],
     "extras": {"length": 2}}
"""

from __future__ import annotations

from dataclasses import asdict
from typing import Any

from glosspipe.contracts.enums import NodeType
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
)

_LEAF_CLASSES: dict[NodeType, type[Leaf]] = {
    NodeType.TEXT: Text,
    NodeType.PUNCTUATION: Punctuation,
    NodeType.WHITESPACE: WhiteSpace,
    NodeType.SYMBOL: Symbol,
    NodeType.SOURCE: Source,
}


def node_to_dict(node: Node) -> dict[str, Any]:
    """Serialise a node and its subtree."""
    if isinstance(node, Leaf):
        return {"type": str(node.type), "value": node.value}

    data: dict[str, Any] = {"type": str(node.type)}
    if node.lang is not None:
        data["lang"] = node.lang
    if node.script is not None:
        data["script"] = node.script
    if isinstance(node, Sentence) and node.original_text:
        data["originalText"] = node.original_text
    if isinstance(node, Word) and node.transcription:
        data["transcription"] = {scheme: asdict(t) for scheme, t in node.transcription.items()}
    if isinstance(node, (Word, Root)) and node.metadata:
        data["metadata"] = dict(node.metadata)
    if node.extras:
        data["extras"] = dict(node.extras)
    data["children"] = [node_to_dict(child) for child in node.children]
    return data


def _transcription_from_dict(data: dict[str, Any]) -> Transcription:
    return Transcription(
        text=data["text"],
        variants=list(data.get("variants", [])),
        tone=data.get("tone"),
        syllables=data.get("syllables"),
        phonetic=data.get("phonetic"),
    )


def node_from_dict(data: dict[str, Any]) -> Node:
    """Build a node tree from its dict form.

    Raises:
        ValueError: If a ``type`` tag is missing or unknown
        KeyError: If a required key (``value``, transcription ``text``) is missing
    """
    if "type" not in data:
        raise ValueError(f"Node dict has no 'type' tag: keys {sorted(data)}")
    node_type = NodeType(data["type"])

    leaf_cls = _LEAF_CLASSES.get(node_type)
    if leaf_cls is not None:
        return leaf_cls(value=data["value"])

    children: list[Any] = [node_from_dict(child) for child in data.get("children", [])]
    common: dict[str, Any] = {
        "children": children,
        "lang": data.get("lang"),
        "script": data.get("script"),
        "extras": dict(data.get("extras", {})),
    }
    if node_type is NodeType.WORD:
        transcription = {scheme: _transcription_from_dict(t) for scheme, t in data.get("transcription", {}).items()}
        return Word(transcription=transcription, metadata=dict(data.get("metadata", {})), **common)
    if node_type is NodeType.SENTENCE:
        return Sentence(original_text=data.get("originalText", ""), **common)
    if node_type is NodeType.PARAGRAPH:
        return Paragraph(**common)
    return Root(metadata=dict(data.get("metadata", {})), **common)


def document_from_dict(data: dict[str, Any]) -> Root:
    """Build a document, requiring a RootNode at the top.

    Raises:
        ValueError: If the top-level node is not a RootNode
    """
    tree = node_from_dict(data)
    if not isinstance(tree, Root):
        raise ValueError(f"Document must start with a {NodeType.ROOT}, got {data.get('type')}")
    return tree
