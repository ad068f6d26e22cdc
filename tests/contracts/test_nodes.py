# tests/contracts/test_nodes.py
"""Tests for the node model and read-only tree helpers."""

import pytest

from glosspipe.contracts.enums import NodeType
from glosspipe.contracts.nodes import (
    Paragraph,
    Punctuation,
    Root,
    Sentence,
    Text,
    WhiteSpace,
    Word,
    count_nodes,
    get_all_words,
    get_word_text,
    has_node_type,
    is_leaf,
    iter_nodes,
)
from tests.fixtures.documents import make_document


class TestNodeTypes:
    """Node kinds carry their serialised tag."""

    def test_type_tags(self) -> None:
        assert Root.type == NodeType.ROOT
        assert Word.type == "WordNode"
        assert Text("x").type == NodeType.TEXT
        assert WhiteSpace(" ").type == NodeType.WHITESPACE

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("word", NodeType.WORD),
            ("WordNode", NodeType.WORD),
            (NodeType.SENTENCE, NodeType.SENTENCE),
            ("whitespace", NodeType.WHITESPACE),
        ],
    )
    def test_parse_accepts_short_names_and_tags(self, value: str, expected: NodeType) -> None:
        assert NodeType.parse(value) is expected

    def test_parse_rejects_unknown(self) -> None:
        with pytest.raises(ValueError, match="Unknown node type 'clause'"):
            NodeType.parse("clause")

    def test_leaves_are_leaves(self) -> None:
        assert is_leaf(Text("a"))
        assert is_leaf(Punctuation("."))
        assert not is_leaf(Word())
        assert not is_leaf(Root())


class TestIterNodes:
    """Pre-order iteration."""

    def test_document_order(self) -> None:
        doc = make_document(["a", "b"])
        kinds = [node.type for node in iter_nodes(doc)]

        assert kinds == [
            NodeType.ROOT,
            NodeType.PARAGRAPH,
            NodeType.SENTENCE,
            NodeType.WORD,
            NodeType.TEXT,
            NodeType.WHITESPACE,
            NodeType.WORD,
            NodeType.TEXT,
        ]

    def test_children_read_after_parent_is_yielded(self) -> None:
        """Edits made to a node's children before moving on are seen."""
        doc = Root(children=[Paragraph()])
        seen = []
        for node in iter_nodes(doc):
            seen.append(node.type)
            if isinstance(node, Paragraph):
                node.children.append(Sentence(children=[Word(children=[Text("late")])]))

        assert seen[-2:] == [NodeType.WORD, NodeType.TEXT]

    def test_count_nodes_includes_root(self) -> None:
        assert count_nodes(Root()) == 1
        assert count_nodes(make_document(["a", "b"])) == 8


class TestWordHelpers:
    """get_all_words / get_word_text / has_node_type."""

    def test_get_all_words_across_sentences(self) -> None:
        doc = make_document([["the", "cat"], ["sat"]])

        assert [get_word_text(w) for w in get_all_words(doc)] == ["the", "cat", "sat"]

    def test_get_word_text_uses_first_text_child(self) -> None:
        word = Word(children=[Punctuation("'"), Text("tis"), Text("ignored")])

        assert get_word_text(word) == "tis"

    def test_get_word_text_without_text_is_empty(self) -> None:
        assert get_word_text(Word()) == ""

    def test_has_node_type(self) -> None:
        doc = make_document(["a"])

        assert has_node_type(doc, "word")
        assert has_node_type(doc, NodeType.SENTENCE)
        assert not has_node_type(doc, NodeType.SYMBOL)
