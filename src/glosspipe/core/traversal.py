# src/glosspipe/core/traversal.py
"""Tree traversal for the visit and enhance phases.

walk()/walk_async() run one extension's visitors over the tree in pre-order.
enhance()/enhance_async() run one extension's enhancer over every word.

Both phases route the fields they touch through the run's conflict detector
(``ctx.writer``):

- Visitors mutate nodes directly. When a walk starts, the top-level
  ``extras``/``metadata`` keys of every word in the tree are snapshotted;
  words that enter the tree later are snapshotted when the walk reaches
  them. When the walk ends, normally or by an exception, each added or
  replaced key is recorded against the snapshot, so a visitor may write
  any word, not only the one it was handed. A rejected write is restored
  to its snapshot value and the conflict propagates in place of any
  visitor error.
- Enhancers return a mapping; each key is recorded, then committed to
  ``word.extras``.

The sync and async loops share their per-node bookkeeping through _Visit so
they cannot drift apart.
"""

from __future__ import annotations

import inspect
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from glosspipe.contracts.enums import NodeType, ProcessingPhase
from glosspipe.contracts.errors import AsyncCallbackError, ExtensionConflictError
from glosspipe.contracts.extension import Callback, ExtensionContext
from glosspipe.contracts.nodes import Leaf, Node, Paragraph, Root, Sentence, Word, get_all_words

_NODE_CLASSES = (Root, Paragraph, Sentence, Word, Leaf)
_TRACKED_SECTIONS = ("extras", "metadata")


@dataclass(slots=True)
class TraversalResult:
    """Outcome of one traversal.

    Attributes:
        tree: The authoritative tree (a root visitor may have replaced it)
        visited: Number of nodes handed to a callback
    """

    tree: Root
    visited: int


def reject_awaitable(result: Any, ctx: ExtensionContext, phase: ProcessingPhase) -> None:
    """Fail a synchronous run on a callback that returned an awaitable."""
    if inspect.isawaitable(result):
        if inspect.iscoroutine(result):
            # Never awaited; close it so Python doesn't warn at garbage collection
            result.close()
        raise AsyncCallbackError(ctx.extension_id, phase)


class _WriteLog:
    """Snapshot of the tracked sections of every word a walk can touch."""

    def __init__(self, tree: Root, ctx: ExtensionContext) -> None:
        self.ctx = ctx
        # id(word) -> (word, shallow copies of its tracked sections)
        self.entries: dict[int, tuple[Word, dict[str, dict[str, Any]]]] = {}
        for word in get_all_words(tree):
            self.add(word)

    def add(self, word: Word) -> None:
        if id(word) not in self.entries:
            self.entries[id(word)] = (word, {section: dict(getattr(word, section)) for section in _TRACKED_SECTIONS})

    def record(self) -> None:
        """Route every key added or replaced since the snapshot through the detector."""
        for word, before in self.entries.values():
            for section in _TRACKED_SECTIONS:
                previous = before[section]
                current: dict[str, Any] = getattr(word, section)
                for key, value in list(current.items()):
                    if key in previous and previous[key] is value:
                        continue
                    try:
                        current[key] = self.ctx.writer.record(word, f"{section}.{key}", self.ctx.extension_id, value)
                    except ExtensionConflictError:
                        if key in previous:
                            current[key] = previous[key]
                        else:
                            del current[key]
                        raise


def _replace_child(parent: Node, old: Node, new: Node) -> None:
    children: list[Any] = parent.children  # type: ignore[union-attr]
    for index, child in enumerate(children):
        if child is old:
            children[index] = new
            return
    # A node the visitor detached from its parent is left detached


class _Visit:
    """Per-run traversal bookkeeping shared by the sync and async walkers."""

    def __init__(self, tree: Root, visitors: Mapping[NodeType, Callback], ctx: ExtensionContext) -> None:
        self.tree = tree
        self.visitors = visitors
        self.ctx = ctx
        self.visited = 0
        self.stack: list[tuple[Node, Node | None]] = [(tree, None)]
        self.writes = _WriteLog(tree, ctx)

    def pop(self) -> tuple[Node, Node | None]:
        node, parent = self.stack.pop()
        if isinstance(node, Word):
            self.writes.add(node)
        return node, parent

    def settle(self, node: Node, parent: Node | None, result: Any) -> Node:
        """Apply a visitor's return value; return the node to descend into."""
        self.visited += 1
        if result is None or result is node:
            return node
        if not isinstance(result, _NODE_CLASSES):
            raise TypeError(
                f"Visitor for {node.type} returned {type(result).__name__}; expected None or a replacement node",
            )
        if parent is None:
            if not isinstance(result, Root):
                raise TypeError(f"Root visitor must return a Root, got {type(result).__name__}")
            self.tree = result
        else:
            _replace_child(parent, node, result)
        if isinstance(result, Word):
            self.writes.add(result)
        return result

    def push_children(self, node: Node) -> None:
        if isinstance(node, Leaf):
            return
        self.stack.extend((child, node) for child in reversed(node.children))

    def result(self) -> TraversalResult:
        return TraversalResult(tree=self.tree, visited=self.visited)


def walk(tree: Root, visitors: Mapping[NodeType, Callback], ctx: ExtensionContext) -> TraversalResult:
    """Run visitors over the tree in pre-order.

    Parents are visited before their children and children left to right.
    Children are read after the parent's visitor returns.

    Raises:
        AsyncCallbackError: If a visitor returns an awaitable
        ExtensionConflictError: If a tracked write is rejected
    """
    state = _Visit(tree, visitors, ctx)
    try:
        while state.stack:
            node, parent = state.pop()
            callback = visitors.get(node.type)
            if callback is not None:
                result = callback(node, ctx)
                reject_awaitable(result, ctx, ProcessingPhase.VISIT)
                node = state.settle(node, parent, result)
            state.push_children(node)
    finally:
        state.writes.record()
    return state.result()


async def walk_async(tree: Root, visitors: Mapping[NodeType, Callback], ctx: ExtensionContext) -> TraversalResult:
    """Async twin of walk(). Each visitor is awaited before the next node starts."""
    state = _Visit(tree, visitors, ctx)
    try:
        while state.stack:
            node, parent = state.pop()
            callback = visitors.get(node.type)
            if callback is not None:
                result = callback(node, ctx)
                if inspect.isawaitable(result):
                    result = await result
                node = state.settle(node, parent, result)
            state.push_children(node)
    finally:
        state.writes.record()
    return state.result()


def _merge(word: Word, extra: Any, ctx: ExtensionContext) -> None:
    if extra is None:
        return
    if not isinstance(extra, Mapping):
        raise TypeError(f"enhance_metadata must return a mapping or None, got {type(extra).__name__}")
    for key, value in extra.items():
        word.extras[key] = ctx.writer.record(word, f"extras.{key}", ctx.extension_id, value)


def enhance(tree: Root, callback: Callback, ctx: ExtensionContext) -> int:
    """Run an enhancer over every word, merging its results into ``extras``.

    Returns:
        Number of words enhanced
    """
    words = get_all_words(tree)
    for word in words:
        extra = callback(word, ctx)
        reject_awaitable(extra, ctx, ProcessingPhase.ENHANCE)
        _merge(word, extra, ctx)
    return len(words)


async def enhance_async(tree: Root, callback: Callback, ctx: ExtensionContext) -> int:
    words = get_all_words(tree)
    for word in words:
        extra = callback(word, ctx)
        if inspect.isawaitable(extra):
            extra = await extra
        _merge(word, extra, ctx)
    return len(words)
