"""Tests for the built-in jsdoc and closure grammars."""

from __future__ import annotations

from typing import Callable

import pytest

from doclets.builder import DocletBuilder
from doclets.diagnostics import Reporter, Severity
from doclets.models import Borrow, Doclet, SourceContext
from doclets.naming.scope import ScopeTracker
from doclets.pipeline import Pipeline
from doclets.tags.builtin import available_dictionaries, build_dictionaries, build_dictionary
from doclets.tags.dictionary import DictionaryHandle
from tests._fixtures.walker import WalkerBuilder


def _build(comment: str, handle: DictionaryHandle, reporter: Reporter, **context) -> Doclet:
    builder = DocletBuilder(handle, reporter)
    return builder.build(comment, ScopeTracker(), SourceContext(**context) if context else None)


def test_available_dictionaries() -> None:
    assert available_dictionaries() == ["jsdoc", "closure"]
    with pytest.raises(ValueError):
        build_dictionary("doxygen")
    with pytest.raises(ValueError):
        build_dictionaries([])


def test_grammars_overlap_but_differ() -> None:
    jsdoc = build_dictionary("jsdoc")
    closure = build_dictionary("closure")

    assert "param" in jsdoc and "param" in closure
    assert "author" in jsdoc and "author" not in closure
    assert "polymerBehavior" in closure and "polymerBehavior" not in jsdoc
    assert "define" in closure and "define" not in jsdoc


def test_single_author_is_a_list(handle: DictionaryHandle, reporter: Reporter) -> None:
    thingy = _build(
        "/**\n * @class\n * @author Michael Mathews <micmath@gmail.com>\n */",
        handle,
        reporter,
        name="Thingy",
    )

    assert thingy.author == ["Michael Mathews <micmath@gmail.com>"]


def test_repeated_author_tags_accumulate(handle: DictionaryHandle, reporter: Reporter) -> None:
    thingy2 = _build(
        "/**\n * @class\n * @author Jane Doe <jane.doe@gmail.com>\n"
        " * @author John Doe <john.doe@gmail.com>\n */",
        handle,
        reporter,
        name="Thingy2",
    )

    assert "Jane Doe <jane.doe@gmail.com>" in thingy2.author
    assert "John Doe <john.doe@gmail.com>" in thingy2.author


@pytest.mark.parametrize(("grammar", "errors"), [("jsdoc", True), ("closure", False)])
def test_polymer_behavior_recognition_depends_on_dictionary(
    walker: Callable[..., WalkerBuilder], grammar: str, errors: bool
) -> None:
    reporter = Reporter()
    source = walker("polymerbehaviortag.js").comment(
        "/** @polymerBehavior */", name="Polymer.MyBehavior", code_type="ObjectExpression"
    )
    pipeline = Pipeline(DictionaryHandle(build_dictionary(grammar)), reporter)

    pipeline.run([source.build()])

    assert bool(reporter.by_severity(Severity.ERROR)) is errors


def test_access_tags(handle: DictionaryHandle, reporter: Reporter) -> None:
    assert _build("/** @private */", handle, reporter, name="a").access == "private"
    assert _build("/** @access protected */", handle, reporter, name="b").access == "protected"

    typed = _build("/** @private {string} */", handle, reporter, name="c")
    assert typed.access == "private"
    assert typed.type is not None and typed.type.names == ["string"]

    _build("/** @access secret */", handle, reporter, name="d")
    assert reporter.by_code("tag-value")


def test_borrows_and_requires_are_declared(handle: DictionaryHandle, reporter: Reporter) -> None:
    doclet = _build(
        "/**\n * @namespace\n * @borrows trstr as trim\n * @requires util\n */",
        handle,
        reporter,
        name="util",
    )

    assert doclet.declared.borrows == [Borrow(source="trstr", target="trim")]
    assert doclet.borrowed == []
    assert doclet.requires == ["module:util"]


def test_fires_and_listens_get_event_namespace(handle: DictionaryHandle, reporter: Reporter) -> None:
    doclet = _build(
        "/**\n * @fires Foo#change\n * @listens event:ready\n */",
        handle,
        reporter,
        name="handler",
        code_type="FunctionDeclaration",
    )

    assert doclet.fires == ["Foo#event:change"]
    assert doclet.listens == ["event:ready"]


def test_closure_template_and_final(handle: DictionaryHandle, reporter: Reporter) -> None:
    doclet = _build("/**\n * @template T, U\n * @final\n */", handle, reporter, name="Box")

    assert doclet.templates == ["T", "U"]
    assert "final" in doclet.modifiers
    assert doclet.readonly is True


def test_kind_tag_rejects_unknown_kinds(handle: DictionaryHandle, reporter: Reporter) -> None:
    doclet = _build("/** @kind widget */", handle, reporter, name="w")

    assert doclet.kind == "member"
    assert reporter.by_code("tag-value")


def test_callback_defines_a_function_typedef(handle: DictionaryHandle, reporter: Reporter) -> None:
    doclet = _build("/** @callback requestCallback */", handle, reporter)

    assert doclet.kind == "typedef"
    assert doclet.longname == "requestCallback"
    assert doclet.type is not None and doclet.type.names == ["function"]
