"""Tag dictionary registry and the single handle through which it is swapped."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Dict, FrozenSet, Iterator, List, Optional, Set, Union

from .definitions import TagDefinition

AllowUnknown = Union[bool, FrozenSet[str]]


def _key(title: str) -> str:
    # titles match case-insensitively on their first letter only (`@Param` == `@param`)
    return title[:1].lower() + title[1:] if title else title


class TagDictionary:
    """Maps tag titles and their synonyms to definitions."""

    def __init__(self, name: str = "custom", *, allow_unknown_tags: AllowUnknown = False) -> None:
        self.name = name
        self.allow_unknown_tags: AllowUnknown = allow_unknown_tags
        self._definitions: Dict[str, TagDefinition] = {}
        self._synonyms: Dict[str, str] = {}

    def define(self, definition: TagDefinition) -> TagDefinition:
        """Register a definition, replacing any existing one with the same title."""
        key = _key(definition.name)
        previous = self._definitions.get(key)
        if previous is not None:
            for synonym in previous.synonyms:
                self._synonyms.pop(_key(synonym), None)
        self._definitions[key] = definition
        for synonym in definition.synonyms:
            self._synonyms[_key(synonym)] = key
        return definition

    def normalise(self, title: str) -> str:
        key = _key(title)
        if key in self._definitions:
            return self._definitions[key].name
        canonical = self._synonyms.get(key)
        if canonical is not None:
            return self._definitions[canonical].name
        return title

    def lookup(self, title: str) -> Optional[TagDefinition]:
        key = _key(title)
        definition = self._definitions.get(key)
        if definition is None and key in self._synonyms:
            definition = self._definitions.get(self._synonyms[key])
        return definition

    def __contains__(self, title: object) -> bool:
        return isinstance(title, str) and self.lookup(title) is not None

    def __len__(self) -> int:
        return len(self._definitions)

    def titles(self) -> List[str]:
        return sorted(definition.name for definition in self._definitions.values())

    def allows_unknown(self, title: str) -> bool:
        if isinstance(self.allow_unknown_tags, bool):
            return self.allow_unknown_tags
        return title in self.allow_unknown_tags

    def is_namespace_kind(self, kind: Optional[str]) -> bool:
        definition = self.lookup(kind) if kind else None
        return bool(definition and definition.is_namespace)

    def list_namespace_kinds(self) -> Set[str]:
        return {d.name for d in self._definitions.values() if d.is_namespace}

    def is_prefixed_kind(self, kind: Optional[str]) -> bool:
        definition = self.lookup(kind) if kind else None
        return bool(definition and definition.prefixes_longname)

    def list_prefixed_kinds(self) -> Set[str]:
        return {d.name for d in self._definitions.values() if d.prefixes_longname}

    def copy(self, name: Optional[str] = None) -> "TagDictionary":
        clone = TagDictionary(name or self.name, allow_unknown_tags=self.allow_unknown_tags)
        clone._definitions = dict(self._definitions)
        clone._synonyms = dict(self._synonyms)
        return clone

    def merged(self, *others: "TagDictionary") -> "TagDictionary":
        """Return a new dictionary with `others` layered over this one, in order."""
        names = [self.name, *(other.name for other in others)]
        combined = self.copy("+".join(names))
        for other in others:
            for definition in other._definitions.values():
                combined.define(definition)
        return combined

    def __repr__(self) -> str:
        return f"TagDictionary(name={self.name!r}, tags={len(self)})"


class DictionaryHandle:
    """The one place the active dictionary is read from.

    Parsers and resolvers hold the handle rather than the dictionary, so a swap
    is seen everywhere at once and restoring the returned previous dictionary
    undoes it completely.
    """

    def __init__(self, dictionary: TagDictionary) -> None:
        self._current = dictionary

    @property
    def current(self) -> TagDictionary:
        return self._current

    def replace(self, dictionary: TagDictionary) -> TagDictionary:
        previous = self._current
        self._current = dictionary
        return previous

    def restore(self, previous: TagDictionary) -> None:
        self._current = previous

    @contextmanager
    def swapped(self, dictionary: TagDictionary) -> Iterator[TagDictionary]:
        previous = self.replace(dictionary)
        try:
            yield dictionary
        finally:
            self.restore(previous)


__all__ = ["AllowUnknown", "DictionaryHandle", "TagDictionary"]
