"""Tag definitions and the closed set of effects a tag may have on a doclet."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, FrozenSet, Iterable, Optional, Tuple

from ..diagnostics import TagValueError
from ..models import Doclet, Tag, TagValue


class ValueShape(str, Enum):
    """Shape of the text that follows a tag title."""

    NONE = "none"
    TEXT = "text"
    TYPE_EXPRESSION = "type_expression"
    NAME_PATH = "name_path"
    STRUCTURED = "structured"


class EffectKind(str, Enum):
    """What applying a tag does to the doclet under construction."""

    SET_SCALAR = "set_scalar"
    APPEND = "append"
    SET_FLAG = "set_flag"
    MARK_KIND = "mark_kind"
    CUSTOM = "custom"


TagHandler = Callable[[Doclet, Tag], None]


@dataclass(frozen=True)
class TagEffect:
    kind: EffectKind
    field: Optional[str] = None
    value: Any = None
    handler: Optional[TagHandler] = None


def set_scalar(field_name: str, value: Any = None) -> TagEffect:
    return TagEffect(EffectKind.SET_SCALAR, field=field_name, value=value)


def append(field_name: str) -> TagEffect:
    return TagEffect(EffectKind.APPEND, field=field_name)


def set_flag(field_name: str, value: Any = True) -> TagEffect:
    return TagEffect(EffectKind.SET_FLAG, field=field_name, value=value)


def mark_kind(kind: str) -> TagEffect:
    return TagEffect(EffectKind.MARK_KIND, value=kind)


def custom(handler: TagHandler) -> TagEffect:
    return TagEffect(EffectKind.CUSTOM, handler=handler)


@dataclass(frozen=True)
class TagDefinition:
    """Grammar entry for one tag title."""

    name: str
    synonyms: FrozenSet[str] = field(default_factory=frozenset)
    value_shape: ValueShape = ValueShape.TEXT
    must_have_value: bool = False
    must_not_have_value: bool = False
    effects: Tuple[TagEffect, ...] = ()
    is_namespace: bool = False
    prefixes_longname: bool = False
    keeps_whitespace: bool = False
    named: bool = False

    @property
    def repeatable(self) -> bool:
        return any(effect.kind is EffectKind.APPEND for effect in self.effects)

    @property
    def titles(self) -> Iterable[str]:
        yield self.name
        yield from self.synonyms


def define(
    name: str,
    *effects: TagEffect,
    synonyms: Iterable[str] = (),
    shape: ValueShape = ValueShape.TEXT,
    must_have_value: bool = False,
    must_not_have_value: bool = False,
    is_namespace: bool = False,
    prefixes_longname: bool = False,
    keeps_whitespace: bool = False,
    named: bool = False,
) -> TagDefinition:
    """Shorthand for building a TagDefinition."""
    return TagDefinition(
        name=name,
        synonyms=frozenset(synonyms),
        value_shape=shape,
        must_have_value=must_have_value,
        must_not_have_value=must_not_have_value,
        effects=tuple(effects),
        is_namespace=is_namespace,
        prefixes_longname=prefixes_longname,
        keeps_whitespace=keeps_whitespace,
        named=named,
    )


_OVERRIDE_SETTERS = {
    "name": Doclet.set_name,
    "memberof": Doclet.set_memberof,
    "scope": Doclet.set_scope,
}


def apply_effects(doclet: Doclet, tag: Tag, definition: TagDefinition) -> None:
    """Apply every effect of `definition` for `tag`; raises TagValueError on bad values."""
    for effect in definition.effects:
        if effect.kind is EffectKind.SET_SCALAR:
            value = effect.value if effect.value is not None else tag.value
            setter = _OVERRIDE_SETTERS.get(effect.field or "")
            if setter is not None:
                if not value:
                    raise TagValueError(tag.title, "requires a value", doclet.longname or doclet.name)
                setter(doclet, value)
            else:
                setattr(doclet, effect.field, value)
        elif effect.kind is EffectKind.APPEND:
            if tag.value is None or tag.value == "":
                continue
            getattr(doclet, effect.field).append(tag.value)
        elif effect.kind is EffectKind.SET_FLAG:
            if effect.field == "modifiers":
                doclet.modifiers.add(effect.value)
            else:
                setattr(doclet, effect.field, effect.value)
        elif effect.kind is EffectKind.MARK_KIND:
            _mark_kind(doclet, tag, effect.value)
        elif effect.kind is EffectKind.CUSTOM and effect.handler is not None:
            effect.handler(doclet, tag)


def _mark_kind(doclet: Doclet, tag: Tag, kind: str) -> None:
    doclet.kind = kind
    value = tag.value
    name: Optional[str] = None
    if isinstance(value, TagValue):
        name = value.name
        if value.type is not None:
            doclet.type = value.type
        if value.description and not doclet.description:
            doclet.description = value.description
    elif isinstance(value, str):
        name = value or None
    if name:
        doclet.name = name
        doclet.tagged_name = True


__all__ = [
    "EffectKind",
    "TagDefinition",
    "TagEffect",
    "TagHandler",
    "ValueShape",
    "append",
    "apply_effects",
    "custom",
    "define",
    "mark_kind",
    "set_flag",
    "set_scalar",
]
