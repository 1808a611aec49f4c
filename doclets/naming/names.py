"""String-level helpers for namepaths and longnames."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from ..models import MODULE_NAMESPACE, PUNCTUATION_SCOPE, Doclet, Scope, scope_to_punc

_PROTOTYPE = re.compile(r"\.prototype(\.|$)")
_SCOPE_SUFFIX = re.compile(r"(\.prototype|[.#~])$")


def normalize_path(path: str) -> str:
    """Rewrite `Foo.prototype.bar` as `Foo#bar` and collapse `#.` sequences."""
    return _PROTOTYPE.sub("#", path).replace("#.", "#")


def _last_separator(path: str) -> int:
    quote: Optional[str] = None
    depth = 0
    position = -1
    for index, char in enumerate(path):
        if quote:
            if char == quote:
                quote = None
            continue
        if char in "\"'":
            quote = char
        elif char in "([":
            depth += 1
        elif char in ")]":
            depth = max(0, depth - 1)
        elif depth == 0 and char in PUNCTUATION_SCOPE and index > 0:
            position = index
    return position


def split_longname(path: str) -> Tuple[Optional[str], Optional[Scope], str]:
    """Split a namepath into `(memberof, scope, name)` at its last top-level separator.

    >>> split_longname("Foo.prototype.bar")
    ('Foo', <Scope.INSTANCE: 'instance'>, 'bar')
    """
    normalized = normalize_path(path)
    index = _last_separator(normalized)
    if index <= 0 or index == len(normalized) - 1:
        return None, None, normalized
    punc = normalized[index]
    return normalized[:index], PUNCTUATION_SCOPE[punc], normalized[index + 1 :]


def has_path(name: Optional[str]) -> bool:
    return bool(name) and _last_separator(normalize_path(name)) > 0


def split_memberof(memberof: str) -> Tuple[str, Optional[Scope]]:
    """Strip a scope-bearing suffix: `Foo.prototype` and `Foo#` mean instance members."""
    match = _SCOPE_SUFFIX.search(memberof)
    if not match or match.start() == 0:
        return memberof, None
    suffix = match.group(1)
    owner = memberof[: match.start()]
    if suffix in (".prototype", "#"):
        return owner, Scope.INSTANCE
    return owner, PUNCTUATION_SCOPE[suffix]


def kind_prefix(kind: Optional[str]) -> str:
    return f"{kind}:" if kind else ""


def strip_prefix(name: str, prefix: str) -> str:
    if prefix and name.startswith(prefix):
        return name[len(prefix) :]
    return name


def derive_longname(
    name: str,
    memberof: Optional[str] = None,
    scope: Scope | str | None = None,
    prefix: str = "",
) -> str:
    """Compose `memberof + punctuation + prefix + name`, never doubling the prefix."""
    local = name if (not prefix or name.startswith(prefix)) else prefix + name
    if not memberof:
        return local
    return f"{memberof}{scope_to_punc(scope)}{local}"


def apply_namespace(path: str, namespace: str) -> str:
    """Put `namespace:` in front of the last segment of `path` unless already there."""
    prefix = kind_prefix(namespace)
    memberof, scope, name = split_longname(path)
    if name.startswith(prefix):
        return path
    if memberof is None:
        return prefix + name
    return f"{memberof}{scope_to_punc(scope)}{prefix}{name}"


def is_module_exports(doclet: Doclet) -> bool:
    """True for the symbol a module exports as a whole (`module.exports = ...`)."""
    return bool(
        doclet.longname
        and doclet.longname == doclet.name
        and doclet.longname.startswith(MODULE_NAMESPACE)
        and doclet.kind != "module"
    )


@dataclass
class TreeNode:
    """A node of the longname hierarchy."""

    name: str
    longname: str
    children: Dict[str, "TreeNode"] = field(default_factory=dict)


def _chain(longname: str) -> List[Tuple[str, str]]:
    chain: List[Tuple[str, str]] = []
    current: Optional[str] = longname
    while current:
        memberof, scope, name = split_longname(current)
        chain.append((scope_to_punc(scope) + name, current))
        current = memberof
    chain.reverse()
    return chain


def longnames_to_tree(longnames: Iterable[str]) -> Dict[str, TreeNode]:
    """Arrange longnames into a tree keyed by punctuated short names."""
    tree: Dict[str, TreeNode] = {}
    for longname in longnames:
        level = tree
        for key, partial in _chain(longname):
            node = level.get(key)
            if node is None:
                node = TreeNode(name=key, longname=partial)
                level[key] = node
            level = node.children
    return tree


__all__ = [
    "TreeNode",
    "apply_namespace",
    "derive_longname",
    "has_path",
    "is_module_exports",
    "kind_prefix",
    "longnames_to_tree",
    "normalize_path",
    "split_longname",
    "split_memberof",
    "strip_prefix",
]
