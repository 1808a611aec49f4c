"""Splits comment text into tags and parses each tag value by its declared shape."""

from __future__ import annotations

import re
import textwrap
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

from ..diagnostics import (
    Location,
    Reporter,
    TagValueError,
    TypeExpressionError,
    UnknownTagError,
)
from ..models import Doclet, Tag, TagValue, TypeSpec
from .definitions import TagDefinition, ValueShape, apply_effects, define, set_scalar
from .dictionary import TagDictionary
from .type_expr import build_type_spec

_TAG_LINE = re.compile(r"^\s*@(\w[\w$-]*)!?(.*)$")
_OPENERS = {"{": "}", "[": "]", "(": ")"}
_CLOSERS = {value: key for key, value in _OPENERS.items()}
_DESCRIPTION_SEPARATOR = re.compile(r"^-(\s+|$)")

# leading free text is a description even for grammars without a @description tag
_IMPLICIT_DESCRIPTION = define("description", set_scalar("description"))


@dataclass
class RawTag:
    """A tag title and its unparsed text, in comment order."""

    title: str
    text: str
    implicit: bool = False


def unwrap(comment: str) -> str:
    """Strip comment delimiters and the leading `*` gutter from every line."""
    if not comment:
        return ""
    text = comment.strip()
    if text.startswith("/*"):
        text = re.sub(r"^/\*\*+", "", text)
        text = re.sub(r"\s*\*+/$", "", text)
        lines = [re.sub(r"^\s*\*? ?", "", line) for line in text.splitlines()]
        return "\n".join(lines).strip("\n").rstrip()
    return textwrap.dedent(text).strip("\n").rstrip()


def _depth_delta(line: str) -> int:
    delta = 0
    for char in line:
        if char in "{[":
            delta += 1
        elif char in "}]":
            delta -= 1
    return delta


def _split(text: str, *, track_depth: bool) -> Tuple[List[RawTag], bool]:
    result: List[RawTag] = []
    title: Optional[str] = None
    buffer: List[str] = []
    depth = 0

    def flush() -> None:
        body = "\n".join(buffer)
        if title is None:
            if body.strip():
                result.append(RawTag("description", body, implicit=True))
        else:
            result.append(RawTag(title, body))

    for line in text.splitlines():
        match = _TAG_LINE.match(line) if (depth == 0 or not track_depth) else None
        if match:
            flush()
            title = match.group(1)
            buffer = [match.group(2)]
        else:
            buffer.append(line)
        if track_depth:
            depth = max(0, depth + _depth_delta(line))
    flush()
    return result, depth == 0


def split_tags(text: str) -> List[RawTag]:
    """Split unwrapped comment text on line-leading `@tag` markers.

    A marker inside an open `{...}` or `[...]` does not start a new tag. When the
    braces never balance, the text is split again ignoring nesting.
    """
    tags, balanced = _split(text, track_depth=True)
    if not balanced:
        tags, _ = _split(text, track_depth=False)
    return tags


def _scan_token(text: str) -> int:
    """Return the end of the first whitespace-delimited token, honouring quotes and brackets."""
    stack: List[str] = []
    quote: Optional[str] = None
    index = 0
    while index < len(text):
        char = text[index]
        if quote:
            if char == "\\":
                index += 2
                continue
            if char == quote:
                quote = None
        elif char in "\"'":
            quote = char
        elif char in _OPENERS:
            stack.append(_OPENERS[char])
        elif char in _CLOSERS:
            if not stack or stack.pop() != char:
                raise ValueError(f"unbalanced {char!r}")
        elif char.isspace() and not stack:
            return index
        index += 1
    if quote or stack:
        raise ValueError("unterminated quote or bracket")
    return index


def _extract_balanced(text: str, opener: str = "{") -> Tuple[str, int]:
    """Given text starting with `opener`, return its balanced contents and the end offset."""
    closer = _OPENERS[opener]
    depth = 0
    quote: Optional[str] = None
    for index, char in enumerate(text):
        if quote:
            if char == quote:
                quote = None
            continue
        if char in "\"'" and depth > 0 and opener == "[":
            quote = char
        elif char == opener:
            depth += 1
        elif char == closer:
            depth -= 1
            if depth == 0:
                return text[1:index], index + 1
    raise ValueError(f"unterminated {opener!r}")


def _type_spec(expression: str, reporter: Reporter, location: Optional[Location]) -> TypeSpec:
    try:
        return build_type_spec(expression)
    except TypeExpressionError as exc:
        reporter.report(exc, location)
        raw = expression.strip()
        return TypeSpec(expression=raw, names=[raw])


def parse_name_path(title: str, text: str) -> str:
    """Return the namepath at the start of `text`, accepting an optional `{...}` wrapper."""
    text = text.strip()
    if not text:
        return ""
    try:
        if text.startswith("{"):
            inner, _ = _extract_balanced(text)
            return inner.strip()
        return text[: _scan_token(text)]
    except ValueError as exc:
        raise TagValueError(title, f"has a malformed name path ({exc})") from exc


def parse_structured(
    definition: TagDefinition,
    title: str,
    text: str,
    reporter: Reporter,
    location: Optional[Location] = None,
) -> TagValue:
    """Parse `{type} [name=default] - description` style values."""
    rest = text.strip()
    value = TagValue()
    if rest.startswith("{"):
        try:
            expression, end = _extract_balanced(rest)
        except ValueError as exc:
            raise TagValueError(title, "has an unterminated type expression") from exc
        spec = _type_spec(expression, reporter, location)
        value.type = spec
        value.optional = spec.optional
        value.nullable = spec.nullable
        value.variable = spec.variable
        rest = rest[end:].strip()

    if definition.named and rest:
        try:
            if rest.startswith("["):
                inner, end = _extract_balanced(rest, "[")
                name, separator, default = inner.partition("=")
                value.name = name.strip()
                value.optional = True
                if separator:
                    value.default = default.strip()
            else:
                end = _scan_token(rest)
                value.name = rest[:end]
        except ValueError as exc:
            raise TagValueError(title, f"has a malformed name ({exc})") from exc
        rest = rest[end:].strip()

    rest = _DESCRIPTION_SEPARATOR.sub("", rest, count=1).strip()
    value.description = rest or None
    return value


def parse_value(
    definition: TagDefinition,
    title: str,
    text: str,
    reporter: Reporter,
    location: Optional[Location] = None,
) -> Any:
    """Turn raw tag text into a value according to the definition's value shape."""
    if definition.keeps_whitespace:
        stripped = textwrap.dedent(text).strip("\n").rstrip()
    else:
        stripped = text.strip()

    if definition.must_have_value and not stripped:
        raise TagValueError(title, "requires a value")
    if definition.must_not_have_value and stripped:
        raise TagValueError(title, "does not permit a value")

    shape = definition.value_shape
    if shape is ValueShape.NONE:
        return None
    if shape is ValueShape.TEXT:
        return stripped
    if not stripped:
        return None
    if shape is ValueShape.TYPE_EXPRESSION:
        expression = stripped
        if stripped.startswith("{"):
            try:
                expression, _ = _extract_balanced(stripped)
            except ValueError as exc:
                raise TagValueError(title, "has an unterminated type expression") from exc
        return _type_spec(expression, reporter, location)
    if shape is ValueShape.NAME_PATH:
        return parse_name_path(title, stripped)
    return parse_structured(definition, title, stripped, reporter, location)


def _definition_for(raw_title: str, dictionary: TagDictionary, implicit: bool) -> Optional[TagDefinition]:
    definition = dictionary.lookup(raw_title)
    if definition is None and implicit:
        return _IMPLICIT_DESCRIPTION
    return definition


def parse_comment(
    comment: str,
    dictionary: TagDictionary,
    reporter: Reporter,
    location: Optional[Location] = None,
) -> List[Tag]:
    """Parse a comment into tags. Problems are reported and only the offending tag is dropped."""
    tags: List[Tag] = []
    for raw in split_tags(unwrap(comment)):
        definition = _definition_for(raw.title, dictionary, raw.implicit)
        if definition is None:
            if not dictionary.allows_unknown(raw.title):
                reporter.report(UnknownTagError(raw.title), location)
                continue
            text = raw.text.strip()
            tags.append(Tag(title=raw.title, text=text, original_title=raw.title, value=text or None))
            continue
        try:
            value = parse_value(definition, raw.title, raw.text, reporter, location)
        except TagValueError as exc:
            if exc.construct is None and location is not None:
                exc = TagValueError(exc.tag, exc.detail, location.longname or location.filename)
            reporter.report(exc, location)
            continue
        tags.append(
            Tag(title=definition.name, text=raw.text.strip(), original_title=raw.title, value=value)
        )
    return tags


def apply_tags(
    doclet: Doclet,
    tags: List[Tag],
    dictionary: TagDictionary,
    reporter: Reporter,
    location: Optional[Location] = None,
) -> None:
    """Run each tag's effects against the doclet; a failing tag is skipped."""
    for tag in tags:
        definition = dictionary.lookup(tag.original_title or tag.title)
        if definition is None and tag.title == "description":
            definition = _IMPLICIT_DESCRIPTION
        if definition is None or not definition.effects:
            doclet.add_tag(tag)
            continue
        try:
            apply_effects(doclet, tag, definition)
        except TagValueError as exc:
            reporter.report(exc, location)


__all__ = [
    "RawTag",
    "apply_tags",
    "parse_comment",
    "parse_name_path",
    "parse_structured",
    "parse_value",
    "split_tags",
    "unwrap",
]
