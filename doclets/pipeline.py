"""Drives walker events through the builder, then runs the cross-reference pass."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from .builder import DocletBuilder
from .config import DocletsConfig
from .database import DocletDatabase
from .diagnostics import Location, Reporter, ScopeImbalanceError
from .events import Stage, WalkerEvent, WalkerFile
from .logging import get_logger
from .models import ScopeEvent, SourceContext
from .naming.scope import ScopeTracker
from .plugins import Plugin, discover_plugins
from .tags.builtin import build_dictionaries
from .tags.dictionary import DictionaryHandle
from .xref import CrossReferenceResolver


@dataclass
class PipelineContext:
    """State shared with every stage callback during one run."""

    handle: DictionaryHandle
    reporter: Reporter
    tracker: ScopeTracker
    database: DocletDatabase
    filename: Optional[str] = None
    options: Dict[str, Any] = field(default_factory=dict)


Callback = Callable[[PipelineContext, Any], None]


class Pipeline:
    """Coordinates a doclet build as an ordered sequence of named stages.

    The active dictionary is captured when `run` starts and stays fixed until
    the run ends, even if the caller's handle is swapped meanwhile.
    """

    def __init__(
        self,
        handle: DictionaryHandle | None = None,
        reporter: Reporter | None = None,
        *,
        plugins: Iterable[Plugin] = (),
        options: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.handle = handle or DictionaryHandle(build_dictionaries())
        self.reporter = reporter or Reporter()
        self.options = dict(options or {})
        self.logger = get_logger("pipeline")
        self._callbacks: Dict[Stage, List[Callback]] = {stage: [] for stage in Stage}
        for plugin in plugins:
            self.register(plugin)

    @classmethod
    def from_config(cls, config: DocletsConfig, reporter: Reporter | None = None) -> "Pipeline":
        dictionary = build_dictionaries(
            config.tags.dictionaries, allow_unknown_tags=config.tags.allow_unknown
        )
        return cls(
            DictionaryHandle(dictionary),
            reporter,
            plugins=discover_plugins(config.plugins),
            options={"prune": config.prune},
        )

    def on(self, stage: Stage | str, callback: Callback) -> None:
        self._callbacks[Stage(stage)].append(callback)

    def register(self, plugin: Plugin) -> None:
        for stage, handler in plugin.handlers().items():
            self.on(stage, handler)
        self.logger.debug("Registered plugin %s", plugin.name or type(plugin).__name__)

    def run(self, files: Sequence[WalkerFile]) -> DocletDatabase:
        """Build the doclet database for `files`; raises ScopeImbalanceError on unbalanced scopes."""
        context = PipelineContext(
            handle=DictionaryHandle(self.handle.current),
            reporter=self.reporter,
            tracker=ScopeTracker(),
            database=DocletDatabase(),
            options=self.options,
        )
        builder = DocletBuilder(context.handle, self.reporter)
        files = list(files)
        self.logger.info(
            "Building doclets for %d file(s) with the %s dictionary",
            len(files),
            context.handle.current.name,
        )

        self._fire(Stage.PARSE_BEGIN, context, [item.filename for item in files])
        for walker_file in files:
            self._run_file(walker_file, context, builder)
        self._fire(Stage.PARSE_COMPLETE, context, context.database)

        CrossReferenceResolver(self.reporter).resolve_all(context.database)
        self._fire(Stage.PROCESSING_COMPLETE, context, context.database)
        self.logger.info("Built %d doclet(s)", len(context.database))
        return context.database

    def _run_file(self, walker_file: WalkerFile, context: PipelineContext, builder: DocletBuilder) -> None:
        context.filename = walker_file.filename
        self._fire(Stage.FILE_BEGIN, context, walker_file)
        try:
            for event in walker_file.events:
                if event.scope_event is ScopeEvent.EXIT:
                    context.tracker.pop()
                    continue
                self._fire(Stage.COMMENT_FOUND, context, event)
                doclet = builder.build(
                    event.comment,
                    context.tracker,
                    self._source_context(event, walker_file.filename),
                    event.scope_event,
                )
                self._fire(Stage.DOCLET_CREATED, context, doclet)
                context.database.add(doclet)
            context.tracker.finish(walker_file.filename)
        except ScopeImbalanceError as exc:
            self.reporter.report(exc, Location(walker_file.filename))
            raise
        self._fire(Stage.FILE_COMPLETE, context, walker_file)
        context.filename = None

    @staticmethod
    def _source_context(event: WalkerEvent, filename: str) -> SourceContext:
        source = event.context or SourceContext()
        if source.filename is None:
            source = replace(source, filename=filename)
        return source

    def _fire(self, stage: Stage, context: PipelineContext, payload: Any) -> None:
        for callback in self._callbacks[stage]:
            callback(context, payload)


__all__ = ["Callback", "Pipeline", "PipelineContext"]
