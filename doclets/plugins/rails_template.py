"""Removes Rails template tags (`<% ... %>`) from comments found in `.erb` files."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from ..events import WalkerEvent
from .base import Plugin

if TYPE_CHECKING:  # pragma: no cover - typing aid
    from ..pipeline import PipelineContext

_TEMPLATE_TAG = re.compile(r"<%.*%>")


def strip_template_tags(text: str) -> str:
    return _TEMPLATE_TAG.sub("", text)


def _is_template(filename: str | None) -> bool:
    return bool(filename) and filename.endswith(".erb")


class RailsTemplatePlugin(Plugin):
    """Strips `<% foo %>` markers so they never reach the tag parser."""

    name = "rails_template"

    def comment_found(self, context: "PipelineContext", event: WalkerEvent) -> None:
        if _is_template(context.filename) and event.comment:
            event.comment = strip_template_tags(event.comment)
