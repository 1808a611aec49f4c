"""Built-in tag grammars: the JSDoc tag set and the Closure Compiler tag set."""

from __future__ import annotations

import re
from typing import Callable, Dict, Iterable, List, Sequence

from ..diagnostics import TagValueError
from ..models import MODULE_NAMESPACE, Borrow, Doclet, Scope, Tag, TagValue, TypeSpec
from ..naming.names import apply_namespace
from .definitions import (
    TagDefinition,
    ValueShape,
    append,
    custom,
    define,
    mark_kind,
    set_flag,
    set_scalar,
)
from .dictionary import AllowUnknown, TagDictionary

ACCESS_LEVELS = ("package", "private", "protected", "public")
KINDS = (
    "class",
    "constant",
    "event",
    "external",
    "file",
    "function",
    "interface",
    "member",
    "mixin",
    "module",
    "namespace",
    "typedef",
)
_BORROWS = re.compile(r"^(?P<source>\S+?)(?:\s+as\s+(?P<target>\S+))?\s*$", re.DOTALL)

NONE = ValueShape.NONE
TEXT = ValueShape.TEXT
TYPE = ValueShape.TYPE_EXPRESSION
NAME = ValueShape.NAME_PATH
STRUCT = ValueShape.STRUCTURED


def _construct(doclet: Doclet) -> str | None:
    return doclet.longname or doclet.name


def _access(doclet: Doclet, tag: Tag) -> None:
    level = str(tag.value or "").lower()
    if level not in ACCESS_LEVELS:
        raise TagValueError(tag.title, f"has an unrecognized access level {tag.value!r}", _construct(doclet))
    doclet.access = level


def _access_level(level: str) -> Callable[[Doclet, Tag], None]:
    def handler(doclet: Doclet, tag: Tag) -> None:
        doclet.access = level
        if isinstance(tag.value, TypeSpec):
            doclet.type = tag.value

    return handler


def _alias(doclet: Doclet, tag: Tag) -> None:
    doclet.alias = tag.value
    doclet.set_name(tag.value)


def _augments(doclet: Doclet, tag: Tag) -> None:
    if tag.value not in doclet.declared.augments:
        doclet.declared.augments.append(tag.value)


def _mixes(doclet: Doclet, tag: Tag) -> None:
    if tag.value not in doclet.declared.mixes:
        doclet.declared.mixes.append(tag.value)


def _borrows(doclet: Doclet, tag: Tag) -> None:
    match = _BORROWS.match(tag.value or "")
    if match is None:
        raise TagValueError(tag.title, "expects `<source> as <target>`", _construct(doclet))
    doclet.declared.borrows.append(Borrow(source=match.group("source"), target=match.group("target")))


def _callback(doclet: Doclet, tag: Tag) -> None:
    doclet.kind = "typedef"
    if tag.value:
        doclet.name = tag.value
        doclet.tagged_name = True
    doclet.type = TypeSpec(expression="function", names=["function"])


def _const(doclet: Doclet, tag: Tag) -> None:
    doclet.kind = "constant"
    value = tag.value
    if isinstance(value, TagValue):
        if value.type is not None:
            doclet.type = value.type
        if value.name:
            doclet.name = value.name
            doclet.tagged_name = True


def _default(doclet: Doclet, tag: Tag) -> None:
    doclet.defaultvalue = tag.value or doclet.meta.code_value


def _deprecated(doclet: Doclet, tag: Tag) -> None:
    doclet.deprecated = tag.value or True


def _enum(doclet: Doclet, tag: Tag) -> None:
    doclet.is_enum = True
    if not doclet.kind:
        doclet.kind = "member"
    if isinstance(tag.value, TypeSpec):
        doclet.type = tag.value


def _file(doclet: Doclet, tag: Tag) -> None:
    doclet.kind = "file"
    doclet.name = doclet.meta.filename or doclet.name or ""
    doclet.set_scope(Scope.GLOBAL)
    if tag.value:
        doclet.description = tag.value


def _fires(doclet: Doclet, tag: Tag) -> None:
    event = apply_namespace(tag.value, "event")
    if event not in doclet.fires:
        doclet.fires.append(event)


def _listens(doclet: Doclet, tag: Tag) -> None:
    event = apply_namespace(tag.value, "event")
    if event not in doclet.listens:
        doclet.listens.append(event)


def _global(doclet: Doclet, tag: Tag) -> None:
    doclet.set_scope(Scope.GLOBAL)


def _scope(scope: Scope) -> Callable[[Doclet, Tag], None]:
    def handler(doclet: Doclet, tag: Tag) -> None:
        doclet.set_scope(scope)

    return handler


def _inheritdoc(doclet: Doclet, tag: Tag) -> None:
    doclet.override = True
    doclet.inheritdoc = ""


def _kind(doclet: Doclet, tag: Tag) -> None:
    kind = str(tag.value or "").lower()
    if kind not in KINDS:
        raise TagValueError(tag.title, f"names an unknown kind {tag.value!r}", _construct(doclet))
    doclet.kind = kind


def _lends(doclet: Doclet, tag: Tag) -> None:
    doclet.lends = tag.value


def _requires(doclet: Doclet, tag: Tag) -> None:
    value = tag.value
    if ":" not in value:
        value = MODULE_NAMESPACE + value
    doclet.requires.append(value)


def _type(doclet: Doclet, tag: Tag) -> None:
    spec = tag.value
    if not isinstance(spec, TypeSpec):
        return
    doclet.type = spec
    if spec.nullable is not None:
        doclet.nullable = spec.nullable


def _define(doclet: Doclet, tag: Tag) -> None:
    doclet.kind = "constant"
    value = tag.value
    if isinstance(value, TagValue):
        if value.type is not None:
            doclet.type = value.type
        if value.description:
            doclet.description = value.description


def _final(doclet: Doclet, tag: Tag) -> None:
    doclet.modifiers.add("final")
    doclet.readonly = True


def _template(doclet: Doclet, tag: Tag) -> None:
    for name in re.split(r"[\s,]+", tag.value or ""):
        if name and name not in doclet.templates:
            doclet.templates.append(name)


def _common() -> Dict[str, TagDefinition]:
    """Definitions whose meaning is the same in every grammar."""
    definitions = [
        define("augments", custom(_augments), synonyms=["extends"], shape=NAME, must_have_value=True),
        define("class", mark_kind("class"), synonyms=["constructor"], shape=NAME, is_namespace=True),
        define("constant", custom(_const), synonyms=["const"], shape=STRUCT, named=True),
        define("deprecated", custom(_deprecated)),
        define("enum", custom(_enum), shape=TYPE),
        define("implements", append("implements"), shape=NAME, must_have_value=True),
        define("inheritdoc", custom(_inheritdoc), synonyms=["inheritDoc"], shape=NONE),
        define("interface", mark_kind("interface"), shape=NAME, is_namespace=True),
        define("lends", custom(_lends), shape=NAME, must_have_value=True),
        define("license", set_scalar("license")),
        define("override", set_flag("override"), shape=NONE, must_not_have_value=True),
        define("param", append("params"), synonyms=["arg", "argument"], shape=STRUCT, named=True),
        *(define(level, custom(_access_level(level)), shape=NONE) for level in ACCESS_LEVELS),
        define("returns", append("returns"), synonyms=["return"], shape=STRUCT),
        define("this", set_scalar("this"), shape=NAME, must_have_value=True),
        define("throws", append("exceptions"), synonyms=["exception"], shape=STRUCT),
        define("type", custom(_type), shape=TYPE, must_have_value=True),
        define("typedef", mark_kind("typedef"), shape=STRUCT, named=True),
    ]
    return {definition.name: definition for definition in definitions}


def _jsdoc_definitions() -> List[TagDefinition]:
    return [
        define("abstract", set_flag("virtual"), synonyms=["virtual"], shape=NONE, must_not_have_value=True),
        define("access", custom(_access), must_have_value=True),
        define("alias", custom(_alias), shape=NAME, must_have_value=True),
        define("async", set_flag("async_"), shape=NONE, must_not_have_value=True),
        define("author", append("author"), must_have_value=True),
        define("borrows", custom(_borrows), must_have_value=True),
        define("callback", custom(_callback), shape=NAME, must_have_value=True),
        define("classdesc", set_scalar("classdesc")),
        define("copyright", set_scalar("copyright"), must_have_value=True),
        define("default", custom(_default), synonyms=["defaultvalue"]),
        define("description", set_scalar("description"), synonyms=["desc"]),
        define(
            "event",
            mark_kind("event"),
            shape=NAME,
            must_have_value=True,
            prefixes_longname=True,
        ),
        define("example", append("examples"), must_have_value=True, keeps_whitespace=True),
        define(
            "exports",
            mark_kind("module"),
            shape=NAME,
            must_have_value=True,
        ),
        define(
            "external",
            mark_kind("external"),
            synonyms=["host"],
            shape=NAME,
            must_have_value=True,
            is_namespace=True,
            prefixes_longname=True,
        ),
        define("file", custom(_file), synonyms=["fileoverview", "overview"]),
        define("fires", custom(_fires), synonyms=["emits"], shape=NAME, must_have_value=True),
        define("function", mark_kind("function"), synonyms=["func", "method"], shape=NAME),
        define("generator", set_flag("generator"), shape=NONE, must_not_have_value=True),
        define("global", custom(_global), shape=NONE, must_not_have_value=True),
        define("hideconstructor", set_flag("hideconstructor"), shape=NONE, must_not_have_value=True),
        define("ignore", set_flag("ignore"), shape=NONE, must_not_have_value=True),
        define("inner", custom(_scope(Scope.INNER)), shape=NONE, must_not_have_value=True),
        define("instance", custom(_scope(Scope.INSTANCE)), shape=NONE, must_not_have_value=True),
        define("kind", custom(_kind), must_have_value=True),
        define("listens", custom(_listens), shape=NAME, must_have_value=True),
        define("member", mark_kind("member"), synonyms=["var"], shape=STRUCT, named=True),
        define("memberof", set_scalar("memberof"), shape=NAME, must_have_value=True),
        define("mixes", custom(_mixes), shape=NAME, must_have_value=True),
        define("mixin", mark_kind("mixin"), shape=NAME, is_namespace=True),
        define(
            "module",
            mark_kind("module"),
            shape=NAME,
            is_namespace=True,
            prefixes_longname=True,
        ),
        define("name", set_scalar("name"), shape=NAME, must_have_value=True),
        define("namespace", mark_kind("namespace"), shape=STRUCT, named=True, is_namespace=True),
        define("property", append("properties"), synonyms=["prop"], shape=STRUCT, named=True),
        define("readonly", set_flag("readonly"), shape=NONE, must_not_have_value=True),
        define("requires", custom(_requires), shape=NAME, must_have_value=True),
        define("see", append("see"), must_have_value=True),
        define("since", set_scalar("since"), must_have_value=True),
        define("static", custom(_scope(Scope.STATIC)), shape=NONE, must_not_have_value=True),
        define("summary", set_scalar("summary"), must_have_value=True),
        define("todo", append("todo"), must_have_value=True),
        define("tutorial", append("tutorials"), must_have_value=True),
        define("variation", set_scalar("variation"), must_have_value=True),
        define("version", set_scalar("version"), must_have_value=True),
        define("yields", append("yields"), synonyms=["yield"], shape=STRUCT),
    ]


def _closure_definitions() -> List[TagDefinition]:
    # tags Closure Compiler understands that carry no documentation meaning are
    # kept as recognized tags without effects
    plain = [
        "dict",
        "export",
        "externs",
        "implicitcast",
        "modifies",
        "noalias",
        "nocollapse",
        "nocompile",
        "nosideeffects",
        "polymerBehavior",
        "record",
        "struct",
        "suppress",
        "unrestricted",
    ]
    return [
        define("define", custom(_define), shape=STRUCT, must_have_value=True),
        define("fileoverview", custom(_file)),
        define("final", custom(_final), shape=NONE, must_not_have_value=True),
        *(define(level, custom(_access_level(level)), shape=TYPE) for level in ACCESS_LEVELS),
        define("preserve", set_scalar("license")),
        define("template", custom(_template), must_have_value=True),
        *(define(name) for name in plain),
    ]


def _build(name: str, definitions: Iterable[TagDefinition], allow_unknown_tags: AllowUnknown) -> TagDictionary:
    dictionary = TagDictionary(name, allow_unknown_tags=allow_unknown_tags)
    for definition in _common().values():
        dictionary.define(definition)
    for definition in definitions:
        dictionary.define(definition)
    return dictionary


_GRAMMARS: Dict[str, Callable[[], List[TagDefinition]]] = {
    "jsdoc": _jsdoc_definitions,
    "closure": _closure_definitions,
}

DEFAULT_DICTIONARIES = ("jsdoc", "closure")


def available_dictionaries() -> List[str]:
    return list(_GRAMMARS)


def build_dictionary(name: str, *, allow_unknown_tags: AllowUnknown = False) -> TagDictionary:
    """Return a fresh dictionary for the named grammar."""
    factory = _GRAMMARS.get(name.lower())
    if factory is None:
        known = ", ".join(sorted(_GRAMMARS))
        raise ValueError(f"Unknown tag dictionary {name!r}. Known dictionaries: {known}")
    return _build(name.lower(), factory(), allow_unknown_tags)


def build_dictionaries(
    names: Sequence[str] = DEFAULT_DICTIONARIES, *, allow_unknown_tags: AllowUnknown = False
) -> TagDictionary:
    """Merge several grammars, later ones overriding earlier ones."""
    if not names:
        raise ValueError("At least one tag dictionary must be selected")
    dictionaries = [build_dictionary(name, allow_unknown_tags=allow_unknown_tags) for name in names]
    if len(dictionaries) == 1:
        return dictionaries[0]
    return dictionaries[0].merged(*dictionaries[1:])


__all__ = [
    "ACCESS_LEVELS",
    "DEFAULT_DICTIONARIES",
    "KINDS",
    "available_dictionaries",
    "build_dictionaries",
    "build_dictionary",
]
