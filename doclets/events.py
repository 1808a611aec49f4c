"""Walker input records and the named pipeline stages."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .models import Scope, ScopeEvent, SourceContext


class Stage(str, Enum):
    """Pipeline stages, in the order they fire."""

    PARSE_BEGIN = "parse_begin"
    FILE_BEGIN = "file_begin"
    COMMENT_FOUND = "comment_found"
    DOCLET_CREATED = "doclet_created"
    FILE_COMPLETE = "file_complete"
    PARSE_COMPLETE = "parse_complete"
    PROCESSING_COMPLETE = "processing_complete"


@dataclass
class WalkerEvent:
    """One comment/construct pairing reported by the source walker."""

    comment: Optional[str] = None
    context: Optional[SourceContext] = None
    scope_event: ScopeEvent = ScopeEvent.NONE


@dataclass
class WalkerFile:
    """Events of a single source file, in traversal order."""

    filename: str
    events: List[WalkerEvent] = field(default_factory=list)


def _context_from_dict(data: Dict[str, Any], filename: str) -> SourceContext:
    scope = data.get("scope")
    return SourceContext(
        name=data.get("name"),
        kind=data.get("kind"),
        scope=Scope(scope) if scope else None,
        code_type=data.get("code_type") or data.get("type"),
        filename=data.get("filename") or filename,
        lineno=data.get("lineno"),
        params=list(data.get("params") or []),
        value=data.get("value"),
        is_default_export=bool(data.get("is_default_export", False)),
    )


def event_from_dict(data: Dict[str, Any], filename: str) -> WalkerEvent:
    context_data = data.get("context")
    return WalkerEvent(
        comment=data.get("comment"),
        context=_context_from_dict(context_data, filename) if isinstance(context_data, dict) else None,
        scope_event=ScopeEvent(data.get("scope_event") or ScopeEvent.NONE.value),
    )


def files_from_json(payload: Any) -> List[WalkerFile]:
    """Build walker files from decoded JSON: a list of `{filename, events}` objects."""
    if isinstance(payload, dict):
        payload = payload.get("files", [])
    if not isinstance(payload, list):
        raise ValueError("Walker input must be a list of files or an object with a 'files' list")
    files: List[WalkerFile] = []
    for entry in payload:
        if not isinstance(entry, dict) or "filename" not in entry:
            raise ValueError("Each walker file needs a 'filename'")
        filename = str(entry["filename"])
        events = [event_from_dict(item, filename) for item in entry.get("events") or []]
        files.append(WalkerFile(filename=filename, events=events))
    return files


__all__ = [
    "Stage",
    "WalkerEvent",
    "WalkerFile",
    "event_from_dict",
    "files_from_json",
]
