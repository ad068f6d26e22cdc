# src/glosspipe/contracts/extension.py
"""Extension descriptor and the context handed to extension callbacks.

An Extension is the declarative unit of work: identity, dependencies,
field declarations, and up to three behaviours:

- transform: whole-tree rewrite, run once per extension
- visit: per-node-kind callbacks, run during a pre-order traversal
- enhance_metadata: per-word callback whose returned mapping is merged
  into the word's ``extras``

Which behaviours an extension implements is captured once, at
construction, as a frozenset of Capability values. The orchestrator
dispatches on that set.

Callbacks receive the node (or tree) and, when they declare a second
positional parameter, the ExtensionContext for the run:

    Extension(id="len", enhance_metadata=lambda w: {"len": len(get_word_text(w))})

    def mark(word, ctx):
        ctx.set_extra(word, "marked", True)

    Extension(id="mark", visit={"word": mark})
"""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Protocol, TypeAlias, runtime_checkable

from glosspipe.contracts.enums import Capability, NodeType

if TYPE_CHECKING:
    from glosspipe.contracts.nodes import Node, Root, Word
    from glosspipe.core.config import ProcessorOptions
    from glosspipe.plugins.registry import ExtensionRegistry

TransformFn: TypeAlias = "Callable[..., Root | Awaitable[Root]]"
VisitFn: TypeAlias = "Callable[..., Node | None | Awaitable[Node | None]]"
EnhanceFn: TypeAlias = "Callable[..., Mapping[str, Any] | None | Awaitable[Mapping[str, Any] | None]]"


@dataclass(frozen=True, slots=True)
class FieldDeclaration:
    """Fields an extension requires or provides.

    Attributes:
        extras: Top-level keys of ``Word.extras``
        metadata: Top-level keys of ``Word.metadata``
        nodes: Node types
    """

    extras: tuple[str, ...] = ()
    metadata: tuple[str, ...] = ()
    nodes: tuple[NodeType, ...] = ()

    @classmethod
    def coerce(cls, value: FieldDeclaration | Mapping[str, Any] | None) -> FieldDeclaration:
        """Build a declaration from a mapping such as ``{"extras": ["frequency"]}``."""
        if value is None:
            return cls()
        if isinstance(value, FieldDeclaration):
            return value
        unknown = set(value) - {"extras", "metadata", "nodes"}
        if unknown:
            raise ValueError(f"Unknown field declaration keys: {sorted(unknown)}")
        return cls(
            extras=tuple(value.get("extras", ())),
            metadata=tuple(value.get("metadata", ())),
            nodes=tuple(NodeType.parse(n) for n in value.get("nodes", ())),
        )

    def __bool__(self) -> bool:
        return bool(self.extras or self.metadata or self.nodes)


class FieldWriter(Protocol):
    """Routes tracked field writes. Implemented by the conflict detector."""

    def record(self, node: Any, field_path: str, writer_id: str, value: Any) -> Any:
        """Check a write and return the value to commit."""
        ...


def accepts_context(fn: Callable[..., Any]) -> bool:
    """Whether a callback takes a second positional argument for the context."""
    try:
        signature = inspect.signature(fn)
    except (TypeError, ValueError):
        # Builtins without signatures get the node only
        return False
    positional = 0
    for param in signature.parameters.values():
        if param.kind is inspect.Parameter.VAR_POSITIONAL:
            return True
        if param.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD):
            positional += 1
    return positional >= 2


@dataclass(frozen=True, slots=True)
class Callback:
    """A user callback plus whether it wants the context argument."""

    fn: Callable[..., Any]
    wants_context: bool

    @classmethod
    def wrap(cls, fn: Callable[..., Any]) -> Callback:
        if not callable(fn):
            raise TypeError(f"Extension callback must be callable, got {type(fn).__name__}")
        return cls(fn=fn, wants_context=accepts_context(fn))

    def __call__(self, target: Any, ctx: ExtensionContext) -> Any:
        if self.wants_context:
            return self.fn(target, ctx)
        return self.fn(target)


@runtime_checkable
class TransformerProtocol(Protocol):
    """Object-style extension implementing a whole-tree rewrite."""

    id: str

    def transform(self, tree: Root, ctx: ExtensionContext) -> Root | Awaitable[Root]: ...


@runtime_checkable
class VisitorProtocol(Protocol):
    """Object-style extension implementing per-node-kind visitors."""

    id: str

    def visitors(self) -> Mapping[str, VisitFn]: ...


@runtime_checkable
class EnhancerProtocol(Protocol):
    """Object-style extension implementing a per-word metadata enhancer."""

    id: str

    def enhance_metadata(self, word: Word, ctx: ExtensionContext) -> Mapping[str, Any] | None | Awaitable[Mapping[str, Any] | None]: ...


@dataclass(frozen=True, eq=False)
class Extension:
    """Declarative description of one pipeline pass.

    An extension without any behaviour is a valid no-op.

    Raises:
        ValueError: If ``id`` is empty or ``visit`` names an unknown node type.
        TypeError: If a behaviour is not callable.
    """

    id: str
    name: str = ""
    description: str | None = None
    dependencies: tuple[str, ...] = ()
    requires: FieldDeclaration = field(default_factory=FieldDeclaration)
    provides: FieldDeclaration = field(default_factory=FieldDeclaration)
    transform: TransformFn | None = None
    visit: Mapping[NodeType, VisitFn] = field(default_factory=dict)
    enhance_metadata: EnhanceFn | None = None
    options: Mapping[str, Any] = field(default_factory=dict)
    _callbacks: dict[str, Any] = field(init=False, repr=False, default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.id, str) or not self.id:
            raise ValueError("Extension id must be a non-empty string")
        # Frozen dataclass: normalise fields through object.__setattr__
        if not self.name:
            object.__setattr__(self, "name", self.id)
        object.__setattr__(self, "dependencies", tuple(self.dependencies))
        object.__setattr__(self, "requires", FieldDeclaration.coerce(self.requires))
        object.__setattr__(self, "provides", FieldDeclaration.coerce(self.provides))
        visit = {NodeType.parse(kind): fn for kind, fn in (self.visit or {}).items() if fn is not None}
        object.__setattr__(self, "visit", MappingProxyType(visit))
        object.__setattr__(self, "options", MappingProxyType(dict(self.options or {})))
        object.__setattr__(
            self,
            "_callbacks",
            {
                "transform": Callback.wrap(self.transform) if self.transform is not None else None,
                "enhance": Callback.wrap(self.enhance_metadata) if self.enhance_metadata is not None else None,
                "visit": {kind: Callback.wrap(fn) for kind, fn in visit.items()},
            },
        )

    @property
    def capabilities(self) -> frozenset[Capability]:
        """Behaviours this extension implements."""
        caps: set[Capability] = set()
        if self.transform is not None:
            caps.add(Capability.TRANSFORMER)
        if self.visit:
            caps.add(Capability.VISITOR)
        if self.enhance_metadata is not None:
            caps.add(Capability.ENHANCER)
        return frozenset(caps)

    def with_options(self, options: Mapping[str, Any] | None) -> Extension:
        """Copy of this extension with ``options`` merged over its own."""
        if not options:
            return self
        return replace(self, options={**self.options, **options})

    @property
    def transform_callback(self) -> Callback | None:
        return self._callbacks["transform"]  # type: ignore[no-any-return]

    @property
    def enhance_callback(self) -> Callback | None:
        return self._callbacks["enhance"]  # type: ignore[no-any-return]

    @property
    def visit_callbacks(self) -> Mapping[NodeType, Callback]:
        return self._callbacks["visit"]  # type: ignore[no-any-return]

    @classmethod
    def from_object(cls, obj: Any) -> Extension:
        """Build a descriptor from a class-based extension.

        The object must carry ``id``; ``name``, ``description``,
        ``dependencies``, ``requires``, ``provides`` and ``options`` are
        optional. Behaviours are taken from whichever of the capability
        protocols the object satisfies.
        """
        if isinstance(obj, Extension):
            return obj
        if not isinstance(getattr(obj, "id", None), str):
            raise TypeError(f"{type(obj).__name__} has no string 'id' attribute and cannot be used as an extension")
        return cls(
            id=obj.id,
            name=getattr(obj, "name", "") or obj.id,
            description=getattr(obj, "description", None),
            dependencies=tuple(getattr(obj, "dependencies", ())),
            requires=getattr(obj, "requires", None),  # type: ignore[arg-type]
            provides=getattr(obj, "provides", None),  # type: ignore[arg-type]
            transform=obj.transform if isinstance(obj, TransformerProtocol) else None,
            visit=dict(obj.visitors()) if isinstance(obj, VisitorProtocol) else {},
            enhance_metadata=obj.enhance_metadata if isinstance(obj, EnhancerProtocol) else None,
            options=dict(getattr(obj, "options", None) or {}),
        )


@dataclass
class ExtensionContext:
    """Per-extension view of the run, passed to callbacks that accept it.

    Attributes:
        extension_id: Id of the extension currently running
        original_document: Tree as supplied by the caller
        extension_ids: Resolved execution order of the run
        applied_extensions: Ids applied so far (live list)
        options: Processor options of the run
        writer: Conflict detector of the run
        registry: Registry supplied by the caller, if any
        data: Processor data store (read-mostly shared values)
        extension_options: The running extension's own ``options``
    """

    extension_id: str
    original_document: Root
    extension_ids: list[str]
    applied_extensions: list[str]
    options: ProcessorOptions
    writer: FieldWriter
    registry: ExtensionRegistry | None = None
    data: Mapping[str, Any] = field(default_factory=dict)
    extension_options: Mapping[str, Any] = field(default_factory=dict)

    def set_extra(self, word: Word, key: str, value: Any) -> Any:
        """Write ``word.extras[key]`` through the conflict detector.

        Returns:
            The committed value.

        Raises:
            ExtensionConflictError: Under the ``error`` strategy when another
                extension already wrote this key on this word.
        """
        committed = self.writer.record(word, f"extras.{key}", self.extension_id, value)
        word.extras[key] = committed
        return committed

    def set_metadata(self, word: Word, key: str, value: Any) -> Any:
        """Write ``word.metadata[key]`` through the conflict detector."""
        committed = self.writer.record(word, f"metadata.{key}", self.extension_id, value)
        word.metadata[key] = committed
        return committed
