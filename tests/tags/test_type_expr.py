"""Tests for doclets.tags.type_expr."""

from __future__ import annotations

import pytest

from doclets.diagnostics import TypeExpressionError
from doclets.tags.type_expr import (
    AllType,
    FunctionType,
    NameType,
    NullType,
    RecordType,
    UnionType,
    UnknownType,
    build_type_spec,
    parse_type,
    type_names,
)


@pytest.mark.parametrize(
    "expression",
    ["Array.<string>", "Array<string>", "string[]"],
)
def test_array_forms_normalize_to_dot_application(expression: str) -> None:
    assert parse_type(expression).stringify() == "Array.<string>"


def test_object_application_keeps_both_parameters() -> None:
    assert parse_type("Object.<string, number>").stringify() == "Object.<string, number>"


def test_union_names_are_split_with_or_without_parentheses() -> None:
    assert build_type_spec("string|number").names == ["string", "number"]
    assert build_type_spec("(string|null)").names == ["string", "null"]
    assert isinstance(parse_type("(A|B)"), UnionType)


def test_prefix_and_suffix_modifiers_are_recorded() -> None:
    assert build_type_spec("?string").nullable is True
    assert build_type_spec("string?").nullable is True
    assert build_type_spec("!Object").nullable is False
    assert build_type_spec("number=").optional is True
    repeatable = build_type_spec("...number")
    assert repeatable.variable is True
    assert repeatable.names == ["number"]


def test_function_type_with_this_and_return() -> None:
    node = parse_type("function(this:Foo, string): boolean")

    assert isinstance(node, FunctionType)
    assert node.this == NameType("Foo")
    assert node.stringify() == "function(this:Foo, string): boolean"


def test_record_type_round_trips() -> None:
    node = parse_type("{a: number, b}")

    assert isinstance(node, RecordType)
    assert node.stringify() == "{a: number, b}"


def test_namepaths_with_namespaces_and_quotes_are_single_names() -> None:
    assert parse_type("module:foo/bar~Baz") == NameType("module:foo/bar~Baz")
    assert parse_type('external:"jquery.fn"') == NameType('external:"jquery.fn"')


def test_special_types() -> None:
    assert parse_type("*") == AllType()
    assert parse_type("?") == UnknownType()
    assert parse_type("null") == NullType()
    assert type_names(parse_type("'a'|'b'")) == ["'a'", "'b'"]


@pytest.mark.parametrize("expression", ["", "Array.<string", "string|", "function(", "{a: }"])
def test_malformed_expressions_raise(expression: str) -> None:
    with pytest.raises(TypeExpressionError):
        parse_type(expression)
