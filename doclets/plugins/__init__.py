"""Pipeline plugin implementations and discovery utilities."""

from __future__ import annotations

from importlib import metadata
from typing import Callable, Iterable, List, Sequence, Set

from .base import Plugin
from .rails_template import RailsTemplatePlugin

_ENTRY_POINT_GROUP = "doclets.plugins"

_BUILTIN_FACTORIES: dict[str, Callable[[], Plugin]] = {
    "rails_template": RailsTemplatePlugin,
}


def discover_plugins(enabled: Sequence[str] | None = None) -> List[Plugin]:
    """Return instantiated plugins named in `enabled`, built-ins before entry points.

    Plugins are opt-in: `None` or an empty sequence enables none of them.
    """

    if not enabled:
        return []
    enabled_set: Set[str] = {name.lower() for name in enabled}

    plugins: List[Plugin] = []
    seen: Set[str] = set()

    def _add(name: str, factory: Callable[[], Plugin]) -> None:
        key = name.lower()
        if key not in enabled_set or key in seen:
            return
        instance = factory()
        if not isinstance(instance, Plugin):
            raise TypeError(f"Plugin factory for '{name}' did not return a Plugin instance")
        plugins.append(instance)
        seen.add(key)
        enabled_set.discard(key)

    for name, factory in _BUILTIN_FACTORIES.items():
        _add(name, factory)

    for entry in _iter_entry_points():
        if entry.name.lower() not in enabled_set:
            continue
        try:
            loaded = entry.load()
        except Exception as exc:
            raise RuntimeError(f"Failed to load plugin entry point '{entry.name}': {exc}") from exc

        def _factory(obj: object = loaded) -> Plugin:
            return _coerce_plugin(obj)

        _add(entry.name, _factory)

    if enabled_set:
        missing = ", ".join(sorted(enabled_set))
        raise ValueError(f"Unknown plugins requested: {missing}")

    return plugins


def _coerce_plugin(obj: object) -> Plugin:
    if isinstance(obj, Plugin):
        return obj
    if isinstance(obj, type) and issubclass(obj, Plugin):
        return obj()
    if callable(obj):
        instance = obj()
        if isinstance(instance, Plugin):
            return instance
    raise TypeError("Plugin entry point must be a Plugin subclass or factory")


def _iter_entry_points() -> Iterable[metadata.EntryPoint]:
    return metadata.entry_points().select(group=_ENTRY_POINT_GROUP)


__all__ = [
    "Plugin",
    "RailsTemplatePlugin",
    "discover_plugins",
]
