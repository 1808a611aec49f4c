"""Base class for pipeline plugins."""

from abc import ABC
from typing import Any, Callable, Dict

from ..events import Stage

StageHandler = Callable[[Any, Any], None]


class Plugin(ABC):
    """Contract for plugins that hook into pipeline stages.

    A plugin defines a method named after each stage it handles, for example
    `comment_found(self, context, event)`. Each method receives the pipeline
    context and the stage payload, which it may modify in place.
    """

    name: str = ""

    def handlers(self) -> Dict[Stage, StageHandler]:
        """Return the bound stage methods this plugin implements."""
        found: Dict[Stage, StageHandler] = {}
        for stage in Stage:
            handler = getattr(self, stage.value, None)
            if callable(handler):
                found[stage] = handler
        return found
