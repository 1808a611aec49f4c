"""Tests for the name resolver."""

from __future__ import annotations

from typing import Optional

import pytest

from doclets.diagnostics import LifecycleError
from doclets.models import Doclet, Scope, ScopeEntry
from doclets.naming.names import is_module_exports
from doclets.naming.resolver import NameResolver, derive_for
from doclets.naming.scope import ScopeTracker
from doclets.tags.dictionary import DictionaryHandle


def _resolve(handle: DictionaryHandle, doclet: Doclet, tracker: Optional[ScopeTracker] = None) -> Doclet:
    NameResolver(handle).resolve(doclet, tracker or ScopeTracker())
    return doclet


def _inside(*entries: ScopeEntry) -> ScopeTracker:
    tracker = ScopeTracker()
    for entry in entries:
        tracker.push(entry)
    return tracker


def test_global_symbol(handle: DictionaryHandle) -> None:
    doclet = _resolve(handle, Doclet(name="foo", kind="function"))

    assert doclet.longname == "foo"
    assert doclet.memberof is None
    assert doclet.scope is Scope.GLOBAL


def test_innermost_owner_becomes_memberof(handle: DictionaryHandle) -> None:
    tracker = _inside(ScopeEntry(Scope.STATIC, "ns"), ScopeEntry(Scope.INSTANCE, "ns.Foo"))

    doclet = _resolve(handle, Doclet(name="bar", kind="function"), tracker)

    assert doclet.longname == "ns.Foo#bar"
    assert doclet.memberof == "ns.Foo"
    assert doclet.scope is Scope.INSTANCE


def test_structural_scope_wins_over_entry_default(handle: DictionaryHandle) -> None:
    tracker = _inside(ScopeEntry(Scope.INSTANCE, "Foo"))

    doclet = _resolve(handle, Doclet(name="create", kind="function", scope=Scope.STATIC), tracker)

    assert doclet.longname == "Foo.create"


def test_prototype_path_is_normalised(handle: DictionaryHandle) -> None:
    doclet = _resolve(handle, Doclet(name="Foo.prototype.bar", kind="function"))

    assert doclet.longname == "Foo#bar"
    assert doclet.memberof == "Foo"
    assert doclet.name == "bar"


@pytest.mark.parametrize(
    ("memberof", "scope", "expected"),
    [
        ("Foo", None, "Foo.bar"),
        ("Foo.prototype", None, "Foo#bar"),
        ("Foo#", None, "Foo#bar"),
        ("Foo~", None, "Foo~bar"),
        ("Foo", Scope.INNER, "Foo~bar"),
    ],
)
def test_memberof_overrides(
    handle: DictionaryHandle, memberof: str, scope: Optional[Scope], expected: str
) -> None:
    doclet = Doclet(name="bar", kind="member")
    doclet.set_memberof(memberof)
    if scope is not None:
        doclet.set_scope(scope)

    _resolve(handle, doclet, _inside(ScopeEntry(Scope.INSTANCE, "Other")))

    assert doclet.longname == expected
    assert doclet.memberof == "Foo"


def test_memberof_with_qualified_name_is_not_doubled(handle: DictionaryHandle) -> None:
    doclet = Doclet(name="Foo.bar", kind="member", tagged_name=True)
    doclet.set_memberof("Foo")

    assert _resolve(handle, doclet).longname == "Foo.bar"


def test_alias_is_absolute(handle: DictionaryHandle) -> None:
    doclet = Doclet(kind="function")
    doclet.set_name("Bar.baz")

    _resolve(handle, doclet, _inside(ScopeEntry(Scope.INSTANCE, "Foo")))

    assert doclet.longname == "Bar.baz"
    assert doclet.memberof == "Bar"


def test_global_tag_escapes_the_scope(handle: DictionaryHandle) -> None:
    doclet = Doclet(name="helper", kind="function")
    doclet.set_scope(Scope.GLOBAL)

    _resolve(handle, doclet, _inside(ScopeEntry(Scope.INNER, "Foo")))

    assert doclet.longname == "helper"
    assert doclet.memberof is None


def test_event_names_are_prefixed(handle: DictionaryHandle) -> None:
    doclet = _resolve(
        handle, Doclet(name="change", kind="event"), _inside(ScopeEntry(Scope.INSTANCE, "Foo"))
    )

    assert doclet.longname == "Foo#event:change"
    assert doclet.name == "change"


def test_modules_are_always_top_level(handle: DictionaryHandle) -> None:
    doclet = _resolve(handle, Doclet(name="foo", kind="module"), _inside(ScopeEntry(Scope.STATIC, "ns")))

    assert doclet.longname == "module:foo"
    assert doclet.memberof is None


def test_default_export_takes_the_module_longname(handle: DictionaryHandle) -> None:
    tracker = ScopeTracker()
    tracker.enter_module(ScopeEntry(Scope.INNER, "module:test"))
    doclet = Doclet(name="module.exports", kind="member")
    doclet.meta.default_export = True

    _resolve(handle, doclet, tracker)

    assert doclet.name == doclet.longname == "module:test"
    assert doclet.memberof is None
    assert is_module_exports(doclet)


def test_exports_members_are_static_module_members(handle: DictionaryHandle) -> None:
    tracker = ScopeTracker()
    tracker.enter_module(ScopeEntry(Scope.INNER, "module:test"))

    exported = _resolve(handle, Doclet(name="exports.helper", kind="function"), tracker)
    private = _resolve(handle, Doclet(name="cache", kind="member"), tracker)

    assert exported.longname == "module:test.helper"
    assert private.longname == "module:test~cache"


def test_this_members_belong_to_the_instance(handle: DictionaryHandle) -> None:
    doclet = _resolve(handle, Doclet(name="this.size", kind="member"), _inside(ScopeEntry(Scope.INNER, "Foo")))

    assert doclet.longname == "Foo#size"


def test_anonymous_construct(handle: DictionaryHandle) -> None:
    doclet = _resolve(handle, Doclet(kind="function"))

    assert doclet.longname == "<anonymous>"


def test_lends_names_the_lent_object(handle: DictionaryHandle) -> None:
    doclet = _resolve(handle, Doclet(lends="Foo.prototype"))

    assert doclet.longname == "Foo"


def test_variation_is_appended(handle: DictionaryHandle) -> None:
    doclet = _resolve(handle, Doclet(name="foo", kind="function", variation="2"))

    assert doclet.longname == "foo(2)"
    assert derive_for(doclet, handle.current) == "foo(2)"


def test_resolution_runs_once(handle: DictionaryHandle) -> None:
    doclet = _resolve(handle, Doclet(name="foo"))

    with pytest.raises(LifecycleError):
        _resolve(handle, doclet)


@pytest.mark.parametrize(
    "doclet",
    [
        Doclet(name="bar", kind="function"),
        Doclet(name="change", kind="event"),
        Doclet(name="Foo.prototype.baz", kind="member"),
        Doclet(name="this.size", kind="member"),
    ],
)
def test_longname_matches_its_parts(handle: DictionaryHandle, doclet: Doclet) -> None:
    _resolve(handle, doclet, _inside(ScopeEntry(Scope.INSTANCE, "Widget")))

    assert derive_for(doclet, handle.current) == doclet.longname


def test_default_export_outside_a_module_resolves_normally(handle: DictionaryHandle) -> None:
    doclet = Doclet(name="value", kind="member")
    doclet.meta.default_export = True

    _resolve(handle, doclet, _inside(ScopeEntry(Scope.STATIC, "ns")))

    assert doclet.longname == "ns.value"
    assert doclet.memberof == "ns"
