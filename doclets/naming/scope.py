"""Lexical scope stack driven by the source walker's enter/exit events."""

from __future__ import annotations

from typing import Iterator, List, Optional

from ..diagnostics import ScopeImbalanceError
from ..models import ScopeEntry


class ScopeTracker:
    """Mirrors the nesting of naming contexts while a file is traversed.

    The stack must be empty again when a file ends. A module declared by a
    standalone `@module` comment becomes the file's root context instead of a
    stack entry, since no exit event will ever close it.
    """

    def __init__(self) -> None:
        self._stack: List[ScopeEntry] = []
        self._module: Optional[ScopeEntry] = None

    @property
    def depth(self) -> int:
        return len(self._stack)

    @property
    def module(self) -> Optional[ScopeEntry]:
        return self._module

    def push(self, entry: ScopeEntry) -> None:
        self._stack.append(entry)

    def pop(self) -> ScopeEntry:
        if not self._stack:
            raise ScopeImbalanceError("Scope exit reported with no open scope")
        return self._stack.pop()

    def current(self) -> ScopeEntry:
        if self._stack:
            return self._stack[-1]
        if self._module is not None:
            return self._module
        return ScopeEntry.global_scope()

    def enter_module(self, entry: ScopeEntry) -> None:
        self._module = entry

    def innermost(self) -> Iterator[ScopeEntry]:
        """Entries from innermost to outermost, ending with the file root."""
        yield from reversed(self._stack)
        if self._module is not None:
            yield self._module

    def finish(self, filename: str | None = None) -> None:
        """Close the file: raises ScopeImbalanceError if any scope is still open."""
        depth = len(self._stack)
        self._stack.clear()
        self._module = None
        if depth:
            where = f" in {filename}" if filename else ""
            raise ScopeImbalanceError(f"{depth} scope(s) left open at end of traversal{where}")


__all__ = ["ScopeTracker"]
