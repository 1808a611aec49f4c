"""In-memory doclet store: a longname multimap with template-facing queries."""

from __future__ import annotations

import copy
from dataclasses import dataclass, fields, is_dataclass, replace
from enum import Enum
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional

from .config import PruneConfig
from .models import ANONYMOUS_NAME, Doclet, DocletState, Scope
from .naming.names import is_module_exports

Predicate = Callable[[Doclet], bool]

_GLOBAL_KINDS = ("member", "function", "constant", "typedef")
_ATTRIB_SCOPE_KINDS = ("function", "member", "constant")


@dataclass
class Members:
    """Top-level doclets grouped by kind, as navigation builders consume them."""

    classes: List[Doclet]
    externals: List[Doclet]
    events: List[Doclet]
    globals: List[Doclet]
    mixins: List[Doclet]
    modules: List[Doclet]
    namespaces: List[Doclet]
    interfaces: List[Doclet]


def _matches(doclet: Doclet, key: str, expected: Any) -> bool:
    actual = getattr(doclet, key, None)
    if expected is None:
        return actual is None or actual == [] or actual == ""
    if isinstance(expected, (list, tuple, set, frozenset)):
        return actual in expected
    return actual == expected


class DocletDatabase:
    """Doclets in insertion order, indexed by longname. Duplicates are kept."""

    def __init__(self, doclets: Iterable[Doclet] = ()) -> None:
        self._doclets: List[Doclet] = []
        self._index: Dict[str, List[Doclet]] = {}
        self.extend(doclets)

    def add(self, doclet: Doclet) -> Doclet:
        self._doclets.append(doclet)
        if doclet.longname is not None:
            self._index.setdefault(doclet.longname, []).append(doclet)
        return doclet

    def extend(self, doclets: Iterable[Doclet]) -> None:
        for doclet in doclets:
            self.add(doclet)

    def __iter__(self) -> Iterator[Doclet]:
        return iter(list(self._doclets))

    def __len__(self) -> int:
        return len(self._doclets)

    def get_by_longname(self, longname: Optional[str]) -> List[Doclet]:
        if longname is None:
            return []
        return list(self._index.get(longname, ()))

    def longnames(self) -> List[str]:
        return list(self._index)

    def find(self, predicate: Optional[Predicate] = None, **criteria: Any) -> List[Doclet]:
        """Doclets matching every criterion; a list value means any of, None means absent."""
        result: List[Doclet] = []
        for doclet in self._doclets:
            if predicate is not None and not predicate(doclet):
                continue
            if all(_matches(doclet, key, expected) for key, expected in criteria.items()):
                result.append(doclet)
        return result

    def get_members(self) -> Members:
        externals = [
            replace(doclet, name=doclet.name.strip('"')) if doclet.name else doclet
            for doclet in self.find(kind="external")
        ]
        globals_ = [
            doclet
            for doclet in self.find(kind=list(_GLOBAL_KINDS), memberof=None)
            if not is_module_exports(doclet)
        ]
        return Members(
            classes=self.find(kind="class"),
            externals=externals,
            events=self.find(kind="event"),
            globals=globals_,
            mixins=self.find(kind="mixin"),
            modules=self.find(kind="module"),
            namespaces=self.find(kind="namespace"),
            interfaces=self.find(kind="interface"),
        )

    def pruned(self, options: Optional[PruneConfig] = None) -> "DocletDatabase":
        """Return a deep copy without doclets that will not be published; `self` is never mutated."""
        options = options or PruneConfig()
        access = [level.lower() for level in options.access] if options.access is not None else None
        kept = DocletDatabase()
        for doclet in self._doclets:
            if doclet.undocumented and not options.include_undocumented:
                continue
            if doclet.ignore or doclet.memberof == ANONYMOUS_NAME:
                continue
            if not _access_allowed(doclet.access, access, options.private):
                continue
            pruned = copy.deepcopy(doclet)
            pruned.state = DocletState.PRUNED
            kept.add(pruned)
        return kept

    def to_dicts(self) -> List[Dict[str, Any]]:
        return [doclet_to_dict(doclet) for doclet in self._doclets]


def _access_allowed(level: Optional[str], access: Optional[List[str]], private: bool) -> bool:
    if access is not None and "all" in access:
        return True
    if level == "private":
        return private or (access is not None and "private" in access)
    if access is None:
        return True
    if level is None:
        return "undefined" in access
    return level in access


def get_attribs(doclet: Optional[Doclet]) -> List[str]:
    """Attribute labels such as `abstract`, `static` or `readonly` for a doclet."""
    attribs: List[str] = []
    if doclet is None:
        return attribs
    if doclet.virtual:
        attribs.append("abstract")
    if doclet.access and doclet.access != "public":
        attribs.append(doclet.access)
    if doclet.scope not in (None, Scope.INSTANCE, Scope.GLOBAL) and doclet.kind in _ATTRIB_SCOPE_KINDS:
        attribs.append(Scope(doclet.scope).value)
    if doclet.readonly is True and doclet.kind == "member":
        attribs.append("readonly")
    if doclet.kind == "constant":
        attribs.append("constant")
    if doclet.nullable is True:
        attribs.append("nullable")
    elif doclet.nullable is False:
        attribs.append("non-null")
    return attribs


def get_signature_params(doclet: Doclet) -> List[str]:
    """Top-level parameter names; optional ones in brackets, repeatable ones with `...`."""
    names: List[str] = []
    for param in doclet.params:
        if not param.name or "." in param.name:
            continue
        name = f"...{param.name}" if param.variable else param.name
        names.append(f"[{name}]" if param.optional else name)
    return names


def get_signature_returns(doclet: Doclet) -> List[str]:
    for value in doclet.returns:
        if value.type is not None and value.type.names:
            return list(value.type.names)
    return []


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if is_dataclass(value) and not isinstance(value, type):
        result: Dict[str, Any] = {}
        for item in fields(value):
            if not item.repr or item.name == "parsed":
                continue
            current = getattr(value, item.name)
            if current is None or current == "" or (isinstance(current, (list, set, dict)) and not current):
                continue
            if current is False and item.default is False:
                continue
            if item.name == "declared" and not current:
                continue
            result[item.name.rstrip("_")] = _plain(current)
        return result
    if isinstance(value, (set, frozenset)):
        return sorted(_plain(item) for item in value)
    if isinstance(value, (list, tuple)):
        return [_plain(item) for item in value]
    if isinstance(value, dict):
        return {key: _plain(item) for key, item in value.items()}
    return value


def doclet_to_dict(doclet: Doclet) -> Dict[str, Any]:
    """JSON-ready form of a doclet, omitting empty fields."""
    return _plain(doclet)


__all__ = [
    "DocletDatabase",
    "Members",
    "doclet_to_dict",
    "get_attribs",
    "get_signature_params",
    "get_signature_returns",
]
