"""Computes each doclet's longname and memberof from tags and the scope stack."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from ..diagnostics import LifecycleError
from ..models import (
    ANONYMOUS_NAME,
    MODULE_NAMESPACE,
    Doclet,
    DocletState,
    Scope,
    ScopeEntry,
    scope_to_punc,
)
from .names import (
    derive_longname,
    has_path,
    kind_prefix,
    normalize_path,
    split_longname,
    split_memberof,
    strip_prefix,
)
from .scope import ScopeTracker

if TYPE_CHECKING:  # pragma: no cover - typing aid
    from ..tags.dictionary import DictionaryHandle, TagDictionary

_GLOBAL_MEMBEROF = ("<global>", "global")
_EXPORT_MARKERS = ("module.exports.", "exports.")


def longname_prefix(doclet: Doclet, dictionary: "TagDictionary") -> str:
    return kind_prefix(doclet.kind) if dictionary.is_prefixed_kind(doclet.kind) else ""


def derive_for(doclet: Doclet, dictionary: "TagDictionary") -> str:
    """Rebuild a doclet's longname from its memberof, scope and name."""
    longname = derive_longname(
        doclet.name or ANONYMOUS_NAME,
        doclet.memberof,
        doclet.scope,
        longname_prefix(doclet, dictionary),
    )
    if doclet.variation:
        longname += f"({doclet.variation})"
    return longname


def _is_top_level(kind: Optional[str], dictionary: "TagDictionary") -> bool:
    """Files, and namespaces that prefix their own longname, are never members."""
    if kind == "file":
        return True
    return dictionary.is_namespace_kind(kind) and dictionary.is_prefixed_kind(kind)


def _module_entry(tracker: ScopeTracker) -> Optional[ScopeEntry]:
    for entry in tracker.innermost():
        if entry.owner_longname and entry.owner_longname.startswith(MODULE_NAMESPACE):
            return entry
    return None


class NameResolver:
    """Assigns `longname`, `memberof`, `scope` and the short `name` exactly once per doclet.

    Explicit `@alias`, `@name`, `@memberof` and `@lends` tags win over the scope
    stack. Otherwise the innermost scope entry that has an owner becomes the
    doclet's parent.
    """

    def __init__(self, handle: "DictionaryHandle") -> None:
        self._handle = handle

    def resolve(self, doclet: Doclet, tracker: ScopeTracker) -> None:
        if doclet.state not in (DocletState.CREATED, DocletState.TAGS_APPLIED):
            raise LifecycleError(f"Name of {doclet.longname or doclet.name} was already resolved")

        dictionary = self._handle.current
        prefix = longname_prefix(doclet, dictionary)
        module = _module_entry(tracker)
        name = doclet.name or ANONYMOUS_NAME

        if _is_top_level(doclet.kind, dictionary):
            self._assign(doclet, None, Scope.GLOBAL if doclet.kind == "file" else None, name, prefix)
        elif doclet.meta.default_export and module is not None:
            self._resolve_default_export(doclet, module)
        elif doclet.explicit_memberof and doclet.memberof:
            self._resolve_memberof(doclet, doclet.memberof, name, prefix)
        elif doclet.explicit_name or (doclet.tagged_name and has_path(name)):
            self._assign_path(doclet, name, prefix)
        elif doclet.lends and not doclet.tagged_name:
            owner, _ = split_memberof(normalize_path(doclet.lends))
            self._assign_path(doclet, owner, prefix)
        elif doclet.explicit_scope and doclet.scope is Scope.GLOBAL:
            self._assign(doclet, None, Scope.GLOBAL, name, prefix)
        else:
            self._resolve_from_scope(doclet, tracker, name, prefix)

        if doclet.variation:
            doclet.longname = f"{doclet.longname}({doclet.variation})"
        doclet.state = DocletState.NAME_RESOLVED

    @staticmethod
    def _assign(
        doclet: Doclet,
        memberof: Optional[str],
        scope: Optional[Scope],
        name: str,
        prefix: str,
    ) -> None:
        short = strip_prefix(name, prefix)
        doclet.name = short
        doclet.memberof = memberof
        doclet.scope = scope
        doclet.longname = derive_longname(short, memberof, scope, prefix)

    def _assign_path(
        self,
        doclet: Doclet,
        path: str,
        prefix: str,
        scope: Optional[Scope] = None,
    ) -> None:
        memberof, path_scope, short = split_longname(path)
        if memberof is None:
            resolved_scope = doclet.scope if doclet.explicit_scope else Scope.GLOBAL
        elif doclet.explicit_scope and doclet.scope not in (None, Scope.GLOBAL):
            resolved_scope = doclet.scope
        else:
            resolved_scope = scope or path_scope
        self._assign(doclet, memberof, resolved_scope, short, prefix)

    def _resolve_memberof(self, doclet: Doclet, memberof: str, name: str, prefix: str) -> None:
        if memberof in _GLOBAL_MEMBEROF:
            self._assign(doclet, None, Scope.GLOBAL, name, prefix)
            return
        owner, suffix_scope = split_memberof(normalize_path(memberof))
        if doclet.explicit_scope and doclet.scope not in (None, Scope.GLOBAL):
            scope = doclet.scope
        else:
            scope = suffix_scope or Scope.STATIC
        # `@memberof Foo` together with `@name Foo.bar` names the same member twice
        for punc in (".", "#", "~"):
            if name.startswith(owner + punc):
                name = name[len(owner) + 1 :]
                break
        if has_path(name):
            self._assign_path(doclet, f"{owner}{scope_to_punc(scope)}{name}", prefix)
        else:
            self._assign(doclet, owner, scope, name, prefix)

    @staticmethod
    def _resolve_default_export(doclet: Doclet, module: ScopeEntry) -> None:
        doclet.name = module.owner_longname
        doclet.longname = module.owner_longname
        doclet.memberof = None
        doclet.scope = None

    def _resolve_from_scope(self, doclet: Doclet, tracker: ScopeTracker, name: str, prefix: str) -> None:
        entry = next((item for item in tracker.innermost() if item.owner_longname), None)
        structural_scope = doclet.scope

        module = _module_entry(tracker)
        if module is not None:
            for marker in _EXPORT_MARKERS:
                if name.startswith(marker):
                    name = name[len(marker) :]
                    entry = module
                    structural_scope = Scope.STATIC
                    break
        if name.startswith("this.") and entry is not None:
            name = name[len("this.") :]
            structural_scope = Scope.INSTANCE

        if entry is None:
            if has_path(name):
                self._assign_path(doclet, name, prefix)
            else:
                scope = doclet.scope if doclet.explicit_scope else Scope.GLOBAL
                self._assign(doclet, None, scope, name, prefix)
            return

        scope = structural_scope or entry.kind
        if scope in (Scope.ANONYMOUS, Scope.GLOBAL):
            scope = Scope.INNER
        if has_path(name):
            self._assign_path(doclet, f"{entry.owner_longname}{scope_to_punc(scope)}{name}", prefix)
        else:
            self._assign(doclet, entry.owner_longname, scope, name, prefix)


__all__ = ["NameResolver", "derive_for", "longname_prefix"]
