"""Turns one walker event (comment + construct context) into a named doclet."""

from __future__ import annotations

from pathlib import PurePosixPath
from typing import List, Optional

from .diagnostics import Location, Reporter
from .logging import get_logger
from .models import (
    ANONYMOUS_NAME,
    Doclet,
    DocletMeta,
    DocletState,
    Scope,
    ScopeEntry,
    ScopeEvent,
    SourceContext,
    Tag,
    TagValue,
)
from .naming.names import normalize_path, split_memberof
from .naming.resolver import NameResolver
from .naming.scope import ScopeTracker
from .tags.dictionary import DictionaryHandle, TagDictionary
from .tags.parser import apply_tags, parse_comment

FUNCTION_CODE_TYPES = frozenset(
    {
        "function",
        "FunctionDeclaration",
        "FunctionExpression",
        "ArrowFunctionExpression",
        "MethodDefinition",
    }
)
CLASS_CODE_TYPES = frozenset({"class", "ClassDeclaration", "ClassExpression"})

# tags that alone do not make a comment documentation
_STRUCTURAL_TAGS = frozenset({"lends"})

# namespace kinds whose children are not static members
_NAMESPACE_CHILD_SCOPES = {
    "class": Scope.INSTANCE,
    "interface": Scope.INSTANCE,
    "module": Scope.INNER,
}
# value kinds whose bodies are object literals with static properties
_VALUE_KINDS = frozenset({"member", "constant"})


def default_kind(context: SourceContext) -> Optional[str]:
    """Kind implied by the construct alone, before any tag is applied."""
    if context.kind:
        return context.kind
    if context.code_type in FUNCTION_CODE_TYPES:
        return "function"
    if context.code_type in CLASS_CODE_TYPES:
        return "class"
    if context.name or context.code_type:
        return "member"
    return None


def child_scope_entry(doclet: Doclet, dictionary: TagDictionary) -> ScopeEntry:
    """The naming context a doclet opens for the constructs nested inside it.

    Kinds the grammar marks as namespace-introducing hold their children as
    members, and object-literal values hold static properties. Any other body
    is a local scope whose names are inner.
    """
    if doclet.lends:
        owner, scope = split_memberof(normalize_path(doclet.lends))
        return ScopeEntry(kind=scope or Scope.STATIC, owner_longname=owner)
    if not doclet.longname or doclet.name == ANONYMOUS_NAME:
        return ScopeEntry.anonymous()
    if dictionary.is_namespace_kind(doclet.kind):
        kind = _NAMESPACE_CHILD_SCOPES.get(dictionary.normalise(doclet.kind or ""), Scope.STATIC)
    elif doclet.kind in _VALUE_KINDS:
        kind = Scope.STATIC
    else:
        kind = Scope.INNER
    return ScopeEntry(kind=kind, owner_longname=doclet.longname)


class DocletBuilder:
    """Builds doclets from comments using the active tag dictionary."""

    def __init__(self, handle: DictionaryHandle, reporter: Reporter) -> None:
        self.handle = handle
        self.reporter = reporter
        self.resolver = NameResolver(handle)
        self.logger = get_logger("builder")

    def build(
        self,
        comment: Optional[str],
        tracker: ScopeTracker,
        context: Optional[SourceContext] = None,
        scope_event: ScopeEvent = ScopeEvent.NONE,
    ) -> Doclet:
        """Create, tag, name and register the scope of one doclet."""
        context = context or SourceContext()
        doclet = self._shell(comment, context)
        location = Location(context.filename, context.lineno, context.name)

        tags: List[Tag] = []
        if comment and comment.strip():
            dictionary = self.handle.current
            tags = parse_comment(comment, dictionary, self.reporter, location)
            apply_tags(doclet, tags, dictionary, self.reporter, location)
        doclet.state = DocletState.TAGS_APPLIED

        if not any(tag.title not in _STRUCTURAL_TAGS for tag in tags):
            doclet.undocumented = True
        if doclet.kind == "module" and not doclet.name and context.filename:
            doclet.name = PurePosixPath(context.filename).stem
        if not doclet.params and context.params and doclet.kind in ("function", "class"):
            doclet.params = [TagValue(name=param) for param in context.params]

        self.resolver.resolve(doclet, tracker)
        self._update_scope(doclet, tracker, scope_event)
        self.logger.debug("Built %s doclet %s", doclet.kind or "untyped", doclet.longname)
        return doclet

    @staticmethod
    def _shell(comment: Optional[str], context: SourceContext) -> Doclet:
        doclet = Doclet(comment=comment or "")
        doclet.meta = DocletMeta(
            filename=context.filename,
            lineno=context.lineno,
            code_name=context.name,
            code_type=context.code_type,
            code_value=context.value,
            default_export=context.is_default_export or context.name == "module.exports",
        )
        doclet.name = context.name
        doclet.kind = default_kind(context)
        doclet.scope = context.scope
        return doclet

    def _update_scope(self, doclet: Doclet, tracker: ScopeTracker, scope_event: ScopeEvent) -> None:
        if scope_event is ScopeEvent.ENTER:
            tracker.push(child_scope_entry(doclet, self.handle.current))
        elif doclet.kind == "module" and tracker.depth == 0:
            tracker.enter_module(child_scope_entry(doclet, self.handle.current))


__all__ = [
    "CLASS_CODE_TYPES",
    "DocletBuilder",
    "FUNCTION_CODE_TYPES",
    "child_scope_entry",
    "default_kind",
]
