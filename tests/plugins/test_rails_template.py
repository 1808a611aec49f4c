"""Tests for plugin discovery and the Rails template plugin."""

from __future__ import annotations

from types import SimpleNamespace
from typing import Any, List

import pytest

from doclets import plugins
from doclets.events import Stage, WalkerEvent
from doclets.plugins import Plugin, RailsTemplatePlugin, discover_plugins
from doclets.plugins.rails_template import strip_template_tags


class DummyPlugin(Plugin):
    name = "dummy"

    def doclet_created(self, context: Any, doclet: Any) -> None:
        doclet.description = "dummy"


class DummyEntryPoints(list):
    def select(self, group: str) -> "DummyEntryPoints":
        return DummyEntryPoints(entry for entry in self if entry.group == group)


def _entry_point(name: str, loaded: Any, group: str = "doclets.plugins") -> SimpleNamespace:
    return SimpleNamespace(name=name, group=group, load=lambda: loaded)


def test_strip_template_tags() -> None:
    assert strip_template_tags("a <% if x %>b") == "a b"
    assert strip_template_tags("no tags") == "no tags"


def test_plugins_are_opt_in() -> None:
    assert discover_plugins(None) == []
    assert discover_plugins([]) == []


def test_builtin_plugin_is_discovered_by_name() -> None:
    [plugin] = discover_plugins(["Rails_Template"])

    assert isinstance(plugin, RailsTemplatePlugin)
    assert set(plugin.handlers()) == {Stage.COMMENT_FOUND}


def test_unknown_plugin_names_raise(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(plugins.metadata, "entry_points", lambda: DummyEntryPoints())

    with pytest.raises(ValueError, match="missing"):
        discover_plugins(["missing"])


def test_entry_point_plugins_are_loaded(monkeypatch: pytest.MonkeyPatch) -> None:
    entries: List[SimpleNamespace] = [
        _entry_point("dummy", DummyPlugin),
        _entry_point("other", DummyPlugin, group="elsewhere"),
    ]
    monkeypatch.setattr(plugins.metadata, "entry_points", lambda: DummyEntryPoints(entries))

    [plugin] = discover_plugins(["dummy"])

    assert isinstance(plugin, DummyPlugin)
    assert list(plugin.handlers()) == [Stage.DOCLET_CREATED]


def test_entry_point_must_provide_a_plugin(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        plugins.metadata, "entry_points", lambda: DummyEntryPoints([_entry_point("bad", object())])
    )

    with pytest.raises(TypeError):
        discover_plugins(["bad"])


def test_rails_plugin_only_touches_erb_comments() -> None:
    plugin = RailsTemplatePlugin()
    template = WalkerEvent(comment="/** Hi <% x %>. */")
    script = WalkerEvent(comment="/** Hi <% x %>. */")

    plugin.comment_found(SimpleNamespace(filename="view.html.erb"), template)
    plugin.comment_found(SimpleNamespace(filename="app.js"), script)

    assert template.comment == "/** Hi . */"
    assert script.comment == "/** Hi <% x %>. */"
