"""Post-traversal pass that links doclets to each other."""

from __future__ import annotations

import copy
from typing import List, Optional, Set

from .database import DocletDatabase
from .diagnostics import CyclicAncestryError, DanglingReferenceError, Location, Reporter, Severity
from .logging import get_logger
from .models import Borrow, DeclaredReferences, Doclet, DocletState, Scope
from .naming.names import derive_longname, normalize_path, split_longname

_RESOLVED_STATES = (DocletState.NAME_RESOLVED, DocletState.CROSS_REFERENCED)


def _location(doclet: Doclet) -> Location:
    return Location(doclet.meta.filename, doclet.meta.lineno, doclet.longname)


def get_ancestors(
    database: DocletDatabase,
    doclet: Doclet,
    reporter: Optional[Reporter] = None,
) -> List[Doclet]:
    """Return the doclets `doclet` is nested in, most distant first.

    The walk stops at the first longname it has already visited, so a
    `memberof` cycle yields a truncated chain instead of looping.
    """
    ancestors: List[Doclet] = []
    seen: Set[str] = {doclet.longname} if doclet.longname else set()
    current: Optional[Doclet] = doclet
    while current is not None and current.memberof:
        if current.memberof in seen:
            if reporter is not None:
                reporter.report_once(
                    doclet.longname or "",
                    CyclicAncestryError(doclet.longname or "", current.memberof),
                    _location(doclet),
                )
            break
        matches = database.get_by_longname(current.memberof)
        if not matches:
            break
        seen.add(current.memberof)
        current = matches[0]
        ancestors.insert(0, current)
    return ancestors


class CrossReferenceResolver:
    """Fills `listeners`, `borrowed`, `mixes` and `augments` once traversal is done.

    Every step checks for an existing entry before writing, so running the
    pass again over the same database changes nothing.
    """

    def __init__(self, reporter: Reporter) -> None:
        self.reporter = reporter
        self.logger = get_logger("xref")

    def resolve_all(self, database: DocletDatabase) -> None:
        self.logger.debug("Resolving cross references for %d doclets", len(database))
        for doclet in list(database):
            self._resolve_borrows(database, doclet)
        # borrowed copies exist from here on and listen like their sources
        doclets = list(database)
        for doclet in doclets:
            self._add_listeners(database, doclet)
        for doclet in doclets:
            self._resolve_names(database, doclet, "mixes")
            self._resolve_names(database, doclet, "augments")
        for doclet in database:
            if doclet.state in _RESOLVED_STATES:
                doclet.state = DocletState.CROSS_REFERENCED

    def get_ancestors(self, database: DocletDatabase, doclet: Doclet) -> List[Doclet]:
        return get_ancestors(database, doclet, self.reporter)

    def _add_listeners(self, database: DocletDatabase, listener: Doclet) -> None:
        for event_name in listener.listens:
            events = database.find(longname=event_name, kind="event")
            if not events:
                self.reporter.report_once(
                    f"{listener.longname}->{event_name}",
                    DanglingReferenceError("listens to", listener.longname or "", event_name),
                    _location(listener),
                    severity=Severity.DEBUG,
                )
                continue
            for event in events:
                if listener.longname and listener.longname not in event.listeners:
                    event.listeners.append(listener.longname)

    def _resolve_borrows(self, database: DocletDatabase, borrower: Doclet) -> None:
        for request in borrower.declared.borrows:
            sources = database.get_by_longname(request.source)
            if not sources:
                self.reporter.report_once(
                    f"{borrower.longname}->{request.source}",
                    DanglingReferenceError("borrows", borrower.longname or "", request.source),
                    _location(borrower),
                )
                continue
            source = sources[0]
            target = request.target or source.name or request.source
            if any(item.source == request.source and item.target == target for item in borrower.borrowed):
                continue
            database.add(self._clone(source, borrower, target))
            borrower.borrowed.append(Borrow(source=request.source, target=target))

    @staticmethod
    def _clone(source: Doclet, borrower: Doclet, target: str) -> Doclet:
        clone = copy.deepcopy(source)
        scope = Scope.STATIC
        name = target
        if name.startswith("this."):
            name = name[len("this.") :]
            scope = Scope.INSTANCE
        _, _, source_short = split_longname(source.longname or "")
        prefix = f"{source.kind}:" if source.kind and source_short.startswith(f"{source.kind}:") else ""
        clone.name = name
        clone.memberof = borrower.longname
        clone.scope = scope
        clone.longname = derive_longname(name, borrower.longname, scope, prefix)
        clone.borrowed_from = source.longname
        clone.declared = DeclaredReferences()
        clone.borrowed = []
        clone.listeners = []
        clone.state = DocletState.CROSS_REFERENCED
        return clone

    def _resolve_names(self, database: DocletDatabase, doclet: Doclet, relation: str) -> None:
        resolved: List[str] = getattr(doclet, relation)
        for name in getattr(doclet.declared, relation):
            longname = name
            if not database.get_by_longname(name):
                normalized = normalize_path(name)
                if database.get_by_longname(normalized):
                    longname = normalized
                else:
                    self.reporter.report_once(
                        f"{doclet.longname}-{relation}->{name}",
                        DanglingReferenceError(relation, doclet.longname or "", name),
                        _location(doclet),
                        severity=Severity.DEBUG,
                    )
            if longname not in resolved:
                resolved.append(longname)


__all__ = ["CrossReferenceResolver", "get_ancestors"]
