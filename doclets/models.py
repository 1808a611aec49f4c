"""Core data models shared across doclets components."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Set

if TYPE_CHECKING:  # pragma: no cover - typing aid
    from .tags.type_expr import TypeNode

ANONYMOUS_NAME = "<anonymous>"
MODULE_NAMESPACE = "module:"


class Scope(str, Enum):
    """Naming scopes a symbol can live in."""

    GLOBAL = "global"
    STATIC = "static"
    INSTANCE = "instance"
    INNER = "inner"
    ANONYMOUS = "anonymous"


SCOPE_PUNCTUATION: Dict[Scope, str] = {
    Scope.GLOBAL: "",
    Scope.STATIC: ".",
    Scope.INSTANCE: "#",
    Scope.INNER: "~",
    Scope.ANONYMOUS: "~",
}

PUNCTUATION_SCOPE: Dict[str, Scope] = {
    ".": Scope.STATIC,
    "#": Scope.INSTANCE,
    "~": Scope.INNER,
}


def scope_to_punc(scope: Scope | str | None) -> str:
    """Return the separator used when qualifying a child of the given scope."""
    if scope is None:
        return ""
    return SCOPE_PUNCTUATION.get(Scope(scope), "")


class ScopeEvent(str, Enum):
    """How a walker event changes the lexical nesting."""

    ENTER = "enter"
    EXIT = "exit"
    NONE = "none"


class DocletState(str, Enum):
    """Lifecycle states of a doclet."""

    CREATED = "created"
    TAGS_APPLIED = "tags_applied"
    NAME_RESOLVED = "name_resolved"
    CROSS_REFERENCED = "cross_referenced"
    PRUNED = "pruned"
    RENDERED = "rendered"


@dataclass(frozen=True)
class ScopeEntry:
    """One naming context on the scope stack."""

    kind: Scope
    owner_longname: Optional[str] = None

    @property
    def punctuation(self) -> str:
        return SCOPE_PUNCTUATION[self.kind]

    @property
    def is_global(self) -> bool:
        return self.kind is Scope.GLOBAL or self.owner_longname is None

    @classmethod
    def global_scope(cls) -> "ScopeEntry":
        return cls(kind=Scope.GLOBAL)

    @classmethod
    def anonymous(cls) -> "ScopeEntry":
        return cls(kind=Scope.ANONYMOUS, owner_longname=ANONYMOUS_NAME)


@dataclass
class TypeSpec:
    """A parsed type annotation, keeping the raw expression as a fallback."""

    expression: str
    names: List[str] = field(default_factory=list)
    parsed: Optional["TypeNode"] = None
    optional: Optional[bool] = None
    nullable: Optional[bool] = None
    variable: Optional[bool] = None


@dataclass
class TagValue:
    """Structured value of tags such as @param, @property and @returns."""

    type: Optional[TypeSpec] = None
    name: Optional[str] = None
    description: Optional[str] = None
    optional: Optional[bool] = None
    default: Optional[str] = None
    variable: Optional[bool] = None
    nullable: Optional[bool] = None


@dataclass
class Borrow:
    """A `@borrows source as target` request or its resolved form."""

    source: str
    target: Optional[str] = None


@dataclass
class Tag:
    """A single tag parsed out of a comment."""

    title: str
    text: str = ""
    original_title: Optional[str] = None
    value: Any = None


@dataclass
class SourceContext:
    """What the source walker knows about the construct a comment is attached to."""

    name: Optional[str] = None
    kind: Optional[str] = None
    scope: Optional[Scope] = None
    code_type: Optional[str] = None
    filename: Optional[str] = None
    lineno: Optional[int] = None
    params: List[str] = field(default_factory=list)
    value: Optional[str] = None
    is_default_export: bool = False


@dataclass
class DocletMeta:
    """Where a doclet came from."""

    filename: Optional[str] = None
    lineno: Optional[int] = None
    code_name: Optional[str] = None
    code_type: Optional[str] = None
    code_value: Optional[str] = None
    default_export: bool = False


@dataclass
class DeclaredReferences:
    """Cross references as authored, before the resolver pass interprets them."""

    augments: List[str] = field(default_factory=list)
    mixes: List[str] = field(default_factory=list)
    borrows: List[Borrow] = field(default_factory=list)

    def __bool__(self) -> bool:
        return bool(self.augments or self.mixes or self.borrows)


@dataclass
class Doclet:
    """The canonical record describing one documented symbol."""

    name: Optional[str] = None
    longname: Optional[str] = None
    kind: Optional[str] = None
    scope: Optional[Scope] = None
    memberof: Optional[str] = None
    description: Optional[str] = None
    summary: Optional[str] = None
    classdesc: Optional[str] = None
    tags: List[Tag] = field(default_factory=list)
    params: List[TagValue] = field(default_factory=list)
    properties: List[TagValue] = field(default_factory=list)
    returns: List[TagValue] = field(default_factory=list)
    yields: List[TagValue] = field(default_factory=list)
    exceptions: List[TagValue] = field(default_factory=list)
    type: Optional[TypeSpec] = None
    access: Optional[str] = None
    virtual: Optional[bool] = None
    readonly: Optional[bool] = None
    nullable: Optional[bool] = None
    undocumented: bool = False
    ignore: bool = False
    listens: List[str] = field(default_factory=list)
    listeners: List[str] = field(default_factory=list)
    fires: List[str] = field(default_factory=list)
    borrowed: List[Borrow] = field(default_factory=list)
    borrowed_from: Optional[str] = None
    mixes: List[str] = field(default_factory=list)
    augments: List[str] = field(default_factory=list)
    implements: List[str] = field(default_factory=list)
    author: List[str] = field(default_factory=list)
    see: List[str] = field(default_factory=list)
    examples: List[str] = field(default_factory=list)
    todo: List[str] = field(default_factory=list)
    requires: List[str] = field(default_factory=list)
    tutorials: List[str] = field(default_factory=list)
    templates: List[str] = field(default_factory=list)
    since: Optional[str] = None
    version: Optional[str] = None
    deprecated: Optional[Any] = None
    alias: Optional[str] = None
    lends: Optional[str] = None
    variation: Optional[str] = None
    defaultvalue: Optional[str] = None
    is_enum: bool = False
    override: Optional[bool] = None
    inheritdoc: Optional[str] = None
    this: Optional[str] = None
    license: Optional[str] = None
    copyright: Optional[str] = None
    async_: Optional[bool] = None
    generator: Optional[bool] = None
    hideconstructor: Optional[bool] = None
    modifiers: Set[str] = field(default_factory=set)
    meta: DocletMeta = field(default_factory=DocletMeta)
    comment: str = ""
    declared: DeclaredReferences = field(default_factory=DeclaredReferences)
    state: DocletState = DocletState.CREATED

    # set by explicit tags so the resolver can tell overrides from structure
    explicit_name: bool = field(default=False, repr=False)
    tagged_name: bool = field(default=False, repr=False)
    explicit_memberof: bool = field(default=False, repr=False)
    explicit_scope: bool = field(default=False, repr=False)

    def set_scope(self, scope: Scope | str) -> None:
        self.scope = Scope(scope)
        self.explicit_scope = True

    def set_memberof(self, memberof: str) -> None:
        self.memberof = memberof
        self.explicit_memberof = True

    def set_name(self, name: str) -> None:
        self.name = name
        self.explicit_name = True

    def add_tag(self, tag: Tag) -> None:
        self.tags.append(tag)


__all__ = [
    "ANONYMOUS_NAME",
    "Borrow",
    "DeclaredReferences",
    "Doclet",
    "DocletMeta",
    "DocletState",
    "MODULE_NAMESPACE",
    "PUNCTUATION_SCOPE",
    "SCOPE_PUNCTUATION",
    "Scope",
    "ScopeEntry",
    "ScopeEvent",
    "SourceContext",
    "Tag",
    "TagValue",
    "TypeSpec",
    "scope_to_punc",
]
