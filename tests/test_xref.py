"""Tests for the cross-reference resolver."""

from __future__ import annotations

from typing import Optional

from doclets.database import DocletDatabase
from doclets.diagnostics import Reporter, Severity
from doclets.models import Borrow, Doclet, DocletState, Scope
from doclets.xref import CrossReferenceResolver, get_ancestors


def _doclet(longname: str, kind: str = "function", memberof: Optional[str] = None, **fields) -> Doclet:
    name = longname.rsplit(".", 1)[-1] if memberof else longname
    return Doclet(
        name=name,
        longname=longname,
        kind=kind,
        memberof=memberof,
        scope=Scope.STATIC if memberof else Scope.GLOBAL,
        state=DocletState.NAME_RESOLVED,
        **fields,
    )


def test_listeners_are_added_once(reporter: Reporter) -> None:
    event = _doclet("Hurl#event:snowball", kind="event")
    listener = _doclet("onSnowball", listens=["Hurl#event:snowball"])
    database = DocletDatabase([event, listener])
    resolver = CrossReferenceResolver(reporter)

    resolver.resolve_all(database)
    resolver.resolve_all(database)

    assert event.listeners == ["onSnowball"]
    assert event.state is DocletState.CROSS_REFERENCED


def test_borrowed_listeners_are_linked_on_the_first_pass(reporter: Reporter) -> None:
    event = _doclet("event:ready", kind="event")
    listener = _doclet("onReady", listens=["event:ready"])
    borrower = _doclet("util", kind="namespace")
    borrower.declared.borrows.append(Borrow("onReady", "handle"))
    database = DocletDatabase([event, listener, borrower])
    resolver = CrossReferenceResolver(reporter)

    resolver.resolve_all(database)
    first = list(event.listeners)
    resolver.resolve_all(database)

    assert first == ["onReady", "util.handle"]
    assert event.listeners == first
    assert borrower.borrowed == [Borrow("onReady", "handle")]


def test_missing_listen_target_is_only_a_debug_note(reporter: Reporter) -> None:
    listener = _doclet("onReady", listens=["event:ready"])

    CrossReferenceResolver(reporter).resolve_all(DocletDatabase([listener]))

    assert not reporter.has_errors()
    assert [record.severity for record in reporter.by_code("dangling-reference")] == [Severity.DEBUG]


def test_borrows_clone_the_source_under_the_borrower(reporter: Reporter) -> None:
    source = _doclet("trstr", description="Trims a string.")
    borrower = _doclet("util", kind="namespace")
    borrower.declared.borrows.append(Borrow("trstr", "trim"))
    database = DocletDatabase([source, borrower])
    resolver = CrossReferenceResolver(reporter)

    resolver.resolve_all(database)
    resolver.resolve_all(database)

    [clone] = database.get_by_longname("util.trim")
    assert clone.borrowed_from == "trstr"
    assert clone.description == "Trims a string."
    assert clone.memberof == "util"
    assert borrower.borrowed == [Borrow("trstr", "trim")]
    assert len(database) == 3
    assert source.longname == "trstr"


def test_borrowing_onto_the_instance(reporter: Reporter) -> None:
    source = _doclet("helper")
    borrower = _doclet("Widget", kind="class")
    borrower.declared.borrows.append(Borrow("helper", "this.help"))
    database = DocletDatabase([source, borrower])

    CrossReferenceResolver(reporter).resolve_all(database)

    assert database.get_by_longname("Widget#help")


def test_dangling_borrow_is_a_warning_and_creates_nothing(reporter: Reporter) -> None:
    borrower = _doclet("util", kind="namespace")
    borrower.declared.borrows.append(Borrow("missing"))
    database = DocletDatabase([borrower])

    CrossReferenceResolver(reporter).resolve_all(database)

    assert len(database) == 1
    assert borrower.borrowed == []
    [diagnostic] = reporter.by_code("dangling-reference")
    assert diagnostic.severity is Severity.WARNING


def test_mixes_and_augments_are_recorded_without_duplicates(reporter: Reporter) -> None:
    mixin = _doclet("Eventful", kind="mixin")
    widget = _doclet("Widget", kind="class")
    widget.declared.mixes.extend(["Eventful", "Eventful"])
    widget.declared.augments.append("Base")
    database = DocletDatabase([mixin, widget])

    CrossReferenceResolver(reporter).resolve_all(database)
    CrossReferenceResolver(reporter).resolve_all(database)

    assert widget.mixes == ["Eventful"]
    assert widget.augments == ["Base"]
    assert reporter.by_code("dangling-reference")[0].severity is Severity.DEBUG


def test_get_ancestors_orders_from_most_distant() -> None:
    a = _doclet("a", kind="namespace")
    b = _doclet("a.b", kind="namespace", memberof="a")
    c = _doclet("a.b.c", memberof="a.b")
    database = DocletDatabase([a, b, c])

    assert get_ancestors(database, c) == [a, b]
    assert get_ancestors(database, a) == []


def test_get_ancestors_stops_on_cycles(reporter: Reporter) -> None:
    x = _doclet("x", kind="namespace", memberof="y")
    y = _doclet("y", kind="namespace", memberof="x")
    database = DocletDatabase([x, y])
    resolver = CrossReferenceResolver(reporter)

    assert resolver.get_ancestors(database, x) == [y]
    assert resolver.get_ancestors(database, x) == [y]
    assert len(reporter.by_code("cyclic-ancestry")) == 1
