"""Error taxonomy and the diagnostic channel shared by every processing stage."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional

from .logging import get_logger


class Severity(str, Enum):
    """Diagnostic severities, most to least severe."""

    FATAL = "fatal"
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"
    DEBUG = "debug"


_LOG_LEVELS: Dict[Severity, int] = {
    Severity.FATAL: logging.CRITICAL,
    Severity.ERROR: logging.ERROR,
    Severity.WARNING: logging.WARNING,
    Severity.INFO: logging.INFO,
    Severity.DEBUG: logging.DEBUG,
}


class DocletError(Exception):
    """Base class for errors raised while building the doclet database."""

    code = "doclet-error"
    severity = Severity.ERROR


class UnknownTagError(DocletError):
    """Raised when a comment uses a tag the active dictionary does not define."""

    code = "unknown-tag"
    severity = Severity.ERROR

    def __init__(self, tag: str) -> None:
        super().__init__(f"The @{tag} tag is not a known tag.")
        self.tag = tag


class TagValueError(DocletError):
    """Raised when a tag value does not match the shape its definition declares."""

    code = "tag-value"
    severity = Severity.WARNING

    def __init__(self, tag: str, detail: str, construct: str | None = None) -> None:
        where = f" on {construct}" if construct else ""
        super().__init__(f"The @{tag} tag{where} {detail}.")
        self.tag = tag
        self.detail = detail
        self.construct = construct


class TypeExpressionError(DocletError):
    """Raised when a type expression cannot be parsed."""

    code = "type-expression"
    severity = Severity.WARNING

    def __init__(self, expression: str, detail: str, position: int | None = None) -> None:
        at = f" at offset {position}" if position is not None else ""
        super().__init__(f"Unable to parse type expression {expression!r}{at}: {detail}")
        self.expression = expression
        self.detail = detail
        self.position = position


class DanglingReferenceError(DocletError):
    """Raised when a cross reference names a symbol that is not in the database."""

    code = "dangling-reference"
    severity = Severity.WARNING

    def __init__(self, relation: str, source: str, target: str) -> None:
        super().__init__(f"{source} {relation} {target}, which is not documented.")
        self.relation = relation
        self.source = source
        self.target = target


class CyclicAncestryError(DocletError):
    """Raised when a memberof chain revisits a doclet it already passed through."""

    code = "cyclic-ancestry"
    severity = Severity.WARNING

    def __init__(self, longname: str, repeated: str) -> None:
        super().__init__(
            f"The ancestry of {longname} loops back to {repeated}; the chain was truncated."
        )
        self.longname = longname
        self.repeated = repeated


class ScopeImbalanceError(DocletError):
    """Raised when scope enter/exit events do not pair up during traversal."""

    code = "scope-imbalance"
    severity = Severity.FATAL


class LifecycleError(DocletError):
    """Raised when a doclet is driven through its lifecycle out of order."""

    code = "lifecycle"
    severity = Severity.FATAL


@dataclass(frozen=True)
class Location:
    """Where a diagnostic originated."""

    filename: Optional[str] = None
    lineno: Optional[int] = None
    longname: Optional[str] = None

    def __str__(self) -> str:
        parts: List[str] = []
        if self.filename:
            parts.append(self.filename if self.lineno is None else f"{self.filename}:{self.lineno}")
        if self.longname:
            parts.append(self.longname)
        return " ".join(parts)


@dataclass(frozen=True)
class Diagnostic:
    """A single reported problem."""

    severity: Severity
    code: str
    message: str
    location: Location = Location()

    def format(self) -> str:
        where = str(self.location)
        return f"{where} - {self.message}" if where else self.message


Listener = Callable[[Diagnostic], None]


class Reporter:
    """Collects diagnostics, forwards them to logging and notifies listeners.

    Listeners receive every diagnostic regardless of the logging level, so tests
    and plugins can observe problems even when the console is quiet.
    """

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or get_logger("diagnostics")
        self._records: List[Diagnostic] = []
        self._listeners: List[Listener] = []
        self._reported_once: set[tuple[str, str]] = set()

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def emit(
        self,
        severity: Severity,
        code: str,
        message: str,
        location: Location | None = None,
    ) -> Diagnostic:
        diagnostic = Diagnostic(
            severity=severity, code=code, message=message, location=location or Location()
        )
        self._records.append(diagnostic)
        self._logger.log(_LOG_LEVELS[severity], "%s", diagnostic.format())
        for listener in list(self._listeners):
            listener(diagnostic)
        return diagnostic

    def report(
        self,
        error: DocletError,
        location: Location | None = None,
        *,
        severity: Severity | None = None,
    ) -> Diagnostic:
        """Record a caught error using its own code and default severity."""
        return self.emit(severity or error.severity, error.code, str(error), location)

    def report_once(
        self,
        key: str,
        error: DocletError,
        location: Location | None = None,
        *,
        severity: Severity | None = None,
    ) -> Optional[Diagnostic]:
        """Like `report`, but only the first time `key` is seen for the error code."""
        marker = (error.code, key)
        if marker in self._reported_once:
            return None
        self._reported_once.add(marker)
        return self.report(error, location, severity=severity)

    @property
    def diagnostics(self) -> List[Diagnostic]:
        return list(self._records)

    def by_severity(self, severity: Severity) -> List[Diagnostic]:
        return [record for record in self._records if record.severity is severity]

    def by_code(self, code: str) -> List[Diagnostic]:
        return [record for record in self._records if record.code == code]

    def has_errors(self) -> bool:
        return any(record.severity in (Severity.FATAL, Severity.ERROR) for record in self._records)

    def clear(self) -> None:
        self._records.clear()
        self._reported_once.clear()


__all__ = [
    "CyclicAncestryError",
    "DanglingReferenceError",
    "Diagnostic",
    "DocletError",
    "LifecycleError",
    "Location",
    "Reporter",
    "ScopeImbalanceError",
    "Severity",
    "TagValueError",
    "TypeExpressionError",
    "UnknownTagError",
]
