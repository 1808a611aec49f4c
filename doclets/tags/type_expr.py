"""Recursive-descent parser for type expressions such as `Array.<string>|null`."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from ..diagnostics import TypeExpressionError
from ..models import TypeSpec

_PUNCTUATORS = ("...", ".<", "|", "(", ")", "<", ">", ",", "[", "]", "{", "}", ":", "=", "?", "!", "*")
_NAME_START = re.compile(r"[A-Za-z_$@]")
_NAME_CHAR = re.compile(r"[A-Za-z0-9_$@/\-]")
_NUMBER = re.compile(r"-?\d+(\.\d+)?")
_PATH_PUNCTUATION = ".#~"
_NAMESPACES = ("module", "external", "event")


class TypeNode:
    """Base class for parsed type expression nodes."""

    def stringify(self) -> str:  # pragma: no cover - overridden
        raise NotImplementedError

    def __str__(self) -> str:
        return self.stringify()


@dataclass(frozen=True)
class NameType(TypeNode):
    name: str

    def stringify(self) -> str:
        return self.name


@dataclass(frozen=True)
class AllType(TypeNode):
    def stringify(self) -> str:
        return "*"


@dataclass(frozen=True)
class UnknownType(TypeNode):
    def stringify(self) -> str:
        return "?"


@dataclass(frozen=True)
class NullType(TypeNode):
    def stringify(self) -> str:
        return "null"


@dataclass(frozen=True)
class UndefinedType(TypeNode):
    def stringify(self) -> str:
        return "undefined"


@dataclass(frozen=True)
class LiteralType(TypeNode):
    value: str

    def stringify(self) -> str:
        return self.value


@dataclass(frozen=True)
class UnionType(TypeNode):
    elements: Tuple[TypeNode, ...]

    def stringify(self) -> str:
        return "(" + "|".join(element.stringify() for element in self.elements) + ")"


@dataclass(frozen=True)
class ApplicationType(TypeNode):
    base: TypeNode
    params: Tuple[TypeNode, ...]

    def stringify(self) -> str:
        args = ", ".join(param.stringify() for param in self.params)
        return f"{self.base.stringify()}.<{args}>"


@dataclass(frozen=True)
class FunctionType(TypeNode):
    params: Tuple[TypeNode, ...] = ()
    returns: Optional[TypeNode] = None
    this: Optional[TypeNode] = None
    new: Optional[TypeNode] = None

    def stringify(self) -> str:
        parts: List[str] = []
        if self.this is not None:
            parts.append(f"this:{self.this.stringify()}")
        if self.new is not None:
            parts.append(f"new:{self.new.stringify()}")
        parts.extend(param.stringify() for param in self.params)
        text = f"function({', '.join(parts)})"
        if self.returns is not None:
            text += f": {self.returns.stringify()}"
        return text


@dataclass(frozen=True)
class RecordField:
    key: str
    value: Optional[TypeNode] = None

    def stringify(self) -> str:
        if self.value is None:
            return self.key
        return f"{self.key}: {self.value.stringify()}"


@dataclass(frozen=True)
class RecordType(TypeNode):
    fields: Tuple[RecordField, ...] = ()

    def stringify(self) -> str:
        return "{" + ", ".join(item.stringify() for item in self.fields) + "}"


@dataclass(frozen=True)
class ModifiedType(TypeNode):
    """Wraps a type with optional (`=`), nullable (`?`/`!`) and repeatable (`...`) markers."""

    inner: TypeNode
    optional: bool = False
    nullable: Optional[bool] = None
    repeatable: bool = False

    def stringify(self) -> str:
        prefix = "..." if self.repeatable else ""
        if self.nullable is True:
            prefix += "?"
        elif self.nullable is False:
            prefix += "!"
        suffix = "=" if self.optional else ""
        return f"{prefix}{self.inner.stringify()}{suffix}"


@dataclass(frozen=True)
class _Token:
    kind: str
    text: str
    pos: int


def _scan_string(text: str, start: int) -> int:
    quote = text[start]
    index = start + 1
    while index < len(text):
        char = text[index]
        if char == "\\":
            index += 2
            continue
        if char == quote:
            return index + 1
        index += 1
    raise TypeExpressionError(text, "unterminated string literal", start)


def _scan_name(text: str, start: int) -> int:
    index = start
    length = len(text)
    while index < length:
        char = text[index]
        if _NAME_CHAR.match(char):
            index += 1
            continue
        following = text[index + 1] if index + 1 < length else ""
        if char in _PATH_PUNCTUATION:
            if following and (_NAME_START.match(following) or following.isdigit() or following in "\"'"):
                index += 1
                continue
            break
        if char == ":":
            segment = re.split(r"[.#~]", text[start:index])[-1]
            if segment in _NAMESPACES and following and (
                _NAME_START.match(following) or following in "\"'"
            ):
                index += 1
                continue
            break
        if char in "\"'" and index > start and text[index - 1] in _PATH_PUNCTUATION + ":":
            index = _scan_string(text, index)
            continue
        break
    return index


def _tokenize(text: str) -> List[_Token]:
    tokens: List[_Token] = []
    index = 0
    length = len(text)
    while index < length:
        char = text[index]
        if char.isspace():
            index += 1
            continue
        if _NAME_START.match(char):
            end = _scan_name(text, index)
            tokens.append(_Token("name", text[index:end], index))
            index = end
            continue
        if char in "\"'":
            end = _scan_string(text, index)
            tokens.append(_Token("string", text[index:end], index))
            index = end
            continue
        number = _NUMBER.match(text, index)
        if number is not None:
            tokens.append(_Token("number", number.group(0), index))
            index = number.end()
            continue
        punctuator = next((p for p in _PUNCTUATORS if text.startswith(p, index)), None)
        if punctuator is None:
            raise TypeExpressionError(text, f"unexpected character {char!r}", index)
        tokens.append(_Token("punct", punctuator, index))
        index += len(punctuator)
    tokens.append(_Token("eof", "", length))
    return tokens


class _Parser:
    def __init__(self, text: str) -> None:
        self.text = text
        self.tokens = _tokenize(text)
        self.index = 0

    def peek(self, offset: int = 0) -> _Token:
        position = min(self.index + offset, len(self.tokens) - 1)
        return self.tokens[position]

    def advance(self) -> _Token:
        token = self.peek()
        if token.kind != "eof":
            self.index += 1
        return token

    def at(self, punct: str, offset: int = 0) -> bool:
        token = self.peek(offset)
        return token.kind == "punct" and token.text == punct

    def accept(self, punct: str) -> bool:
        if self.at(punct):
            self.index += 1
            return True
        return False

    def expect(self, punct: str) -> None:
        if not self.accept(punct):
            raise self.error(f"expected {punct!r}")

    def error(self, detail: str) -> TypeExpressionError:
        token = self.peek()
        found = token.text or "end of expression"
        return TypeExpressionError(self.text, f"{detail}, found {found!r}", token.pos)

    def starts_type(self, offset: int = 0) -> bool:
        token = self.peek(offset)
        if token.kind in ("name", "string", "number"):
            return True
        return token.kind == "punct" and token.text in ("*", "(", "{", "?", "!")

    def parse(self) -> TypeNode:
        if self.peek().kind == "eof":
            raise self.error("empty type expression")
        node = self.parse_union()
        if self.peek().kind != "eof":
            raise self.error("unexpected trailing input")
        return node

    def parse_union(self) -> TypeNode:
        elements = [self.parse_modified()]
        while self.accept("|"):
            elements.append(self.parse_modified())
        if len(elements) == 1:
            return elements[0]
        return UnionType(tuple(elements))

    def parse_modified(self) -> TypeNode:
        repeatable = self.accept("...")
        nullable: Optional[bool] = None
        if self.at("?") and self.starts_type(1):
            self.advance()
            nullable = True
        elif self.at("!"):
            self.advance()
            nullable = False

        if repeatable and not self.starts_type():
            node: TypeNode = AllType()
        else:
            node = self.parse_postfix()

        optional = False
        while True:
            if self.accept("="):
                optional = True
            elif nullable is None and self.at("?") and not isinstance(node, UnknownType):
                self.advance()
                nullable = True
            elif nullable is None and self.at("!"):
                self.advance()
                nullable = False
            else:
                break

        if repeatable or optional or nullable is not None:
            return ModifiedType(node, optional=optional, nullable=nullable, repeatable=repeatable)
        return node

    def parse_postfix(self) -> TypeNode:
        node = self.parse_primary()
        while self.at("[") and self.at("]", 1):
            self.advance()
            self.advance()
            node = ApplicationType(NameType("Array"), (node,))
        return node

    def parse_primary(self) -> TypeNode:
        token = self.peek()
        if token.kind == "punct":
            if token.text == "*":
                self.advance()
                return AllType()
            if token.text == "?":
                self.advance()
                return UnknownType()
            if token.text == "(":
                self.advance()
                grouped = self.parse_union()
                self.expect(")")
                return grouped
            if token.text == "{":
                return self.parse_record()
            raise self.error("expected a type")
        if token.kind in ("string", "number"):
            self.advance()
            return LiteralType(token.text)
        if token.kind == "name":
            if token.text == "function" and self.at("(", 1):
                return self.parse_function()
            self.advance()
            if token.text == "null":
                return NullType()
            if token.text == "undefined":
                return UndefinedType()
            node: TypeNode = NameType(token.text)
            if self.accept(".<") or self.accept("<"):
                params = [self.parse_union()]
                while self.accept(","):
                    params.append(self.parse_union())
                self.expect(">")
                node = ApplicationType(node, tuple(params))
            return node
        raise self.error("expected a type")

    def parse_function(self) -> TypeNode:
        self.advance()
        self.expect("(")
        params: List[TypeNode] = []
        this: Optional[TypeNode] = None
        new: Optional[TypeNode] = None
        if not self.at(")"):
            while True:
                token = self.peek()
                if token.kind == "name" and token.text in ("this", "new") and self.at(":", 1):
                    self.advance()
                    self.advance()
                    value = self.parse_union()
                    if token.text == "this":
                        this = value
                    else:
                        new = value
                else:
                    params.append(self.parse_modified())
                if not self.accept(","):
                    break
        self.expect(")")
        returns = self.parse_modified() if self.accept(":") else None
        return FunctionType(params=tuple(params), returns=returns, this=this, new=new)

    def parse_record(self) -> TypeNode:
        self.expect("{")
        fields: List[RecordField] = []
        if not self.at("}"):
            while True:
                token = self.peek()
                if token.kind not in ("name", "string", "number"):
                    raise self.error("expected a record key")
                self.advance()
                value = self.parse_union() if self.accept(":") else None
                fields.append(RecordField(token.text, value))
                if not self.accept(","):
                    break
        self.expect("}")
        return RecordType(tuple(fields))


def parse_type(expression: str) -> TypeNode:
    """Parse a type expression, raising TypeExpressionError when it is malformed."""
    return _Parser(expression.strip()).parse()


def strip_modifiers(node: TypeNode) -> TypeNode:
    return node.inner if isinstance(node, ModifiedType) else node


def type_names(node: TypeNode) -> List[str]:
    """Return the top-level type names, splitting unions into their members."""
    inner = strip_modifiers(node)
    if isinstance(inner, UnionType):
        return [strip_modifiers(element).stringify() for element in inner.elements]
    return [inner.stringify()]


def build_type_spec(expression: str) -> TypeSpec:
    """Parse `expression` into a TypeSpec; malformed input raises TypeExpressionError."""
    node = parse_type(expression)
    spec = TypeSpec(expression=expression.strip(), names=type_names(node), parsed=node)
    if isinstance(node, ModifiedType):
        spec.optional = node.optional or None
        spec.nullable = node.nullable
        spec.variable = node.repeatable or None
    return spec


__all__ = [
    "AllType",
    "ApplicationType",
    "FunctionType",
    "LiteralType",
    "ModifiedType",
    "NameType",
    "NullType",
    "RecordField",
    "RecordType",
    "TypeNode",
    "UndefinedType",
    "UnionType",
    "UnknownType",
    "build_type_spec",
    "parse_type",
    "strip_modifiers",
    "type_names",
]
