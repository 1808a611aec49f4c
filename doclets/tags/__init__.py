"""Tag grammar: definitions, dictionaries and the comment parser."""

from .builtin import available_dictionaries, build_dictionaries, build_dictionary
from .definitions import EffectKind, TagDefinition, TagEffect, ValueShape, define
from .dictionary import DictionaryHandle, TagDictionary
from .parser import apply_tags, parse_comment, split_tags, unwrap
from .type_expr import build_type_spec, parse_type, type_names

__all__ = [
    "DictionaryHandle",
    "EffectKind",
    "TagDefinition",
    "TagDictionary",
    "TagEffect",
    "ValueShape",
    "apply_tags",
    "available_dictionaries",
    "build_dictionaries",
    "build_dictionary",
    "build_type_spec",
    "define",
    "parse_comment",
    "parse_type",
    "split_tags",
    "type_names",
    "unwrap",
]
